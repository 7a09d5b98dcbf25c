"""
Session manager for identity and Current User operations.
"""

from datetime import timedelta
from typing import List, Optional

from appvault.config import Settings
from appvault.engines.notifications.notifier import Notifier
from appvault.kernel.errors import NotAuthenticated, NotFound, PermissionDenied, ValidationFailed
from appvault.logging_config import get_logger
from appvault.schemas.common import generate_id, normalize_email, utcnow
from appvault.schemas.notification import NotificationType
from appvault.schemas.state import VaultState
from appvault.schemas.user import SubscriptionStatus, ThemePreference, User, UserUpdate

logger = get_logger(__name__)


def seed_accounts(admin_email: str) -> List[User]:
    """The fixed accounts written into an empty roster on first use."""
    now = utcnow()
    return [
        User(
            id="admin",
            name="System Admin",
            email=normalize_email(admin_email),
            points=5000,
            is_premium=True,
            is_admin=True,
            joined_date=now,
            theme_preference=ThemePreference.DARK,
            subscription_status=SubscriptionStatus.ACTIVE,
        ),
        User(
            id="u1",
            name="Alice Walker",
            email="alice@example.com",
            points=340,
            is_premium=True,
            joined_date=now - timedelta(days=30),
            theme_preference=ThemePreference.DARK,
            subscription_status=SubscriptionStatus.ACTIVE,
        ),
        User(
            id="u2",
            name="Bob Builder",
            email="bob@construction.com",
            points=20,
            joined_date=now - timedelta(days=5),
            theme_preference=ThemePreference.LIGHT,
            subscription_status=SubscriptionStatus.INACTIVE,
        ),
    ]


class SessionManager:
    """
    Identity operations over the roster and the Current User projection.

    Handles login with auto-provisioning, signup, logout, profile updates,
    and account deletion. No credentials are verified.
    """

    def __init__(self, state: VaultState, settings: Settings):
        self.state = state
        self.settings = settings

    # -----------------------------
    # Roster seeding
    # -----------------------------
    def seed_roster(self) -> bool:
        """
        Write the seed accounts once.

        Skipped when the roster already has entries or when seeding has
        happened before, even if the seeded accounts were deleted since.
        """
        if self.state.roster_seeded or self.state.users:
            self.state.roster_seeded = True
            return False

        for user in seed_accounts(self.settings.admin_email):
            self.state.add_user(user)
        self.state.roster_seeded = True
        logger.info("Roster seeded", extra={"count": len(self.state.users)})
        return True

    # -----------------------------
    # Session lifecycle
    # -----------------------------
    def login(self, email: str) -> User:
        """
        Sign in by email.

        An unknown email provisions a new account instead of failing.
        """
        normalized = self._validate_email(email)

        existing = self.state.find_user_by_email(normalized)
        if existing:
            logger.info("User logged in", extra={"user_id": existing.id})
            return self.state.set_current_user(existing.id)

        is_admin = normalized == normalize_email(self.settings.admin_email)
        local_part = normalized.split("@", 1)[0]
        user = User(
            id=generate_id("user"),
            name="Admin User" if is_admin else f"User {local_part}",
            email=normalized,
            points=self.settings.login_starting_points,
            is_premium=is_admin,
            is_admin=is_admin,
            theme_preference=ThemePreference(self.settings.default_theme),
            subscription_status=SubscriptionStatus.ACTIVE if is_admin else SubscriptionStatus.INACTIVE,
        )
        return self._provision(user)

    def signup(self, name: str, email: str) -> User:
        """
        Create an account.

        An email already in the roster falls back to login: no duplicate
        entry and no error.
        """
        normalized = self._validate_email(email)
        if self.state.find_user_by_email(normalized):
            return self.login(normalized)

        name = (name or "").strip()
        if not name:
            raise ValidationFailed("Name is required", field="name")

        user = User(
            id=generate_id("user"),
            name=name,
            email=normalized,
            points=self.settings.signup_starting_points,
            is_premium=False,
            is_admin=False,
            theme_preference=ThemePreference(self.settings.default_theme),
            subscription_status=SubscriptionStatus.INACTIVE,
        )
        created = self._provision(user)
        Notifier(self.state).notify(
            created.id,
            "Welcome to AppVault",
            f"You start with {created.points} points. Use apps and report bugs to earn more.",
            NotificationType.SUCCESS,
        )
        return created

    def logout(self) -> None:
        """Clear the session: Current User, history and wishlist."""
        departing = self.state.current_user
        self.state.set_current_user(None)
        self.state.history.clear()
        self.state.wishlist.clear()
        if departing:
            logger.info("User logged out", extra={"user_id": departing.id})

    # -----------------------------
    # Profile
    # -----------------------------
    def update_user(self, patch: UserUpdate) -> User:
        """Shallow-merge profile fields into the Current User and its roster entry."""
        user = self.require_current_user()
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes:
            new_email = self._validate_email(changes["email"])
            owner = self.state.find_user_by_email(new_email)
            if owner and owner.id != user.id:
                raise ValidationFailed("Email already in use", field="email")
            changes["email"] = new_email

        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationFailed("Name is required", field="name")

        if not changes:
            return user
        return self.state.write_user(user.id, **changes)

    def toggle_theme(self) -> User:
        user = self.require_current_user()
        flipped = (
            ThemePreference.LIGHT
            if user.theme_preference == ThemePreference.DARK
            else ThemePreference.DARK
        )
        return self.update_user(UserUpdate(theme_preference=flipped))

    # -----------------------------
    # Deletion
    # -----------------------------
    def delete_account(self) -> User:
        """Remove the Current User's account, then log out."""
        user = self.require_current_user()
        removed = self.state.remove_user(user.id)
        self.logout()
        logger.info("Account deleted", extra={"user_id": removed.id})
        return removed

    def delete_user(self, user_id: str) -> User:
        """Administrative removal of one roster entry."""
        self.require_admin()
        if self.state.find_user(user_id) is None:
            raise NotFound(f"User {user_id} not found", field="user_id")

        removed = self.state.remove_user(user_id)
        current = self.state.current_user
        if current is not None and current.id == user_id:
            self.logout()
        logger.info("User deleted by administrator", extra={"user_id": user_id})
        return removed

    # -----------------------------
    # Guards
    # -----------------------------
    def require_current_user(self) -> User:
        user = self.state.current_user
        if user is None:
            raise NotAuthenticated("No user is signed in")
        return user

    def require_admin(self) -> User:
        user = self.require_current_user()
        if not user.is_admin:
            raise PermissionDenied("Administrator access required")
        return user

    # -----------------------------
    # Internals
    # -----------------------------
    def _provision(self, user: User) -> User:
        self.state.add_user(user)
        logger.info("User provisioned", extra={"user_id": user.id, "is_admin": user.is_admin})
        return self.state.set_current_user(user.id)

    @staticmethod
    def _validate_email(email: Optional[str]) -> str:
        normalized = normalize_email(email or "")
        local, _, domain = normalized.partition("@")
        if not local or not domain:
            raise ValidationFailed("A valid email address is required", field="email")
        return normalized
