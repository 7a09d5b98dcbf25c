"""
Bug Report Workflow - submission and resolution of bug reports.
"""

from typing import List, Optional

from appvault.config import Settings
from appvault.engines.notifications.notifier import Notifier
from appvault.engines.rewards.ledger import RewardsLedger
from appvault.kernel.errors import NotFound, PermissionDenied, ValidationFailed
from appvault.logging_config import get_logger
from appvault.orchestration.state_machine import ActorRole, can_transition, is_terminal
from appvault.schemas.bug_report import BugReport, BugReportStatus
from appvault.schemas.common import utcnow
from appvault.schemas.notification import NotificationType
from appvault.schemas.state import VaultState
from appvault.schemas.user import User

logger = get_logger(__name__)

REASON_SNIPPET_LENGTH = 30


def reward_reason(report: BugReport) -> str:
    """Ledger reason for an approved report: its title, else the start of the description."""
    label = (report.title or "").strip()
    if not label:
        label = report.description.strip()
        if len(label) > REASON_SNIPPET_LENGTH:
            label = label[:REASON_SNIPPET_LENGTH].rstrip() + "..."
    return f"Bug reward: {label}"


class BugReportWorkflow:
    """
    Moves reports from pending to approved / rejected.

    There is no separate "rewarded" flag: the report status is the record
    of whether the reward was paid. resolve_bug checks it before touching
    the ledger, so re-resolving a terminal report can never grant twice.
    """

    def __init__(self, state: VaultState, settings: Settings):
        self.state = state
        self.settings = settings
        self.ledger = RewardsLedger(state)
        self.notifier = Notifier(state)

    def report_bug(
        self,
        reporter: User,
        description: str,
        title: Optional[str] = None,
        contact: Optional[str] = None,
    ) -> BugReport:
        """File a pending report with its reward frozen at the configured amount."""
        description = (description or "").strip()
        if not description:
            raise ValidationFailed("Bug description is required", field="description")

        report = BugReport(
            user_id=reporter.id,
            user_name=reporter.name,
            title=(title or "").strip() or None,
            description=description,
            contact=(contact or "").strip() or reporter.email,
            reward_points=self.settings.bug_reward_points,
        )
        self.state.bug_reports.insert(0, report)
        logger.info("Bug reported", extra={"report_id": report.id, "user_id": reporter.id})
        return report

    def resolve_bug(self, report_id: str, decision: BugReportStatus, actor: User) -> BugReport:
        """
        Resolve a pending report.

        Already-terminal reports are returned unchanged.
        """
        report = self.get_report(report_id)
        if report is None:
            raise NotFound(f"Bug report {report_id} not found", field="report_id")

        decision = BugReportStatus(decision)
        if not decision.is_terminal:
            raise ValidationFailed("Decision must be approved or rejected", field="decision")

        return self._transition(report, decision, actor)

    def _transition(self, report: BugReport, decision: BugReportStatus, actor: User) -> BugReport:
        # Terminal check doubles as the idempotence guard for the reward
        if is_terminal(report.status.value):
            logger.info(
                "Bug report already resolved",
                extra={"report_id": report.id, "status": report.status.value},
            )
            return report

        role = ActorRole.ADMIN if actor.is_admin else ActorRole.USER
        if not can_transition(role, report.status.value, decision.value):
            raise PermissionDenied(
                f"Invalid transition: {report.status.value} -> {decision.value} for role {role.value}"
            )

        report.status = decision

        if decision == BugReportStatus.APPROVED:
            report.resolved_at = utcnow()
            if self.state.find_user(report.user_id) is None:
                logger.warning(
                    "Reporter no longer exists; reward skipped",
                    extra={"report_id": report.id, "user_id": report.user_id},
                )
            else:
                self.ledger.grant_points(report.user_id, report.reward_points, reward_reason(report))
                self.notifier.notify(
                    report.user_id,
                    "Bug report approved",
                    f"Thanks! {report.reward_points} points have been added to your balance.",
                    NotificationType.SUCCESS,
                )
        else:
            self.notifier.notify(
                report.user_id,
                "Bug report reviewed",
                "Your bug report was reviewed and could not be confirmed.",
                NotificationType.WARNING,
            )

        logger.info(
            "Bug report resolved",
            extra={"report_id": report.id, "status": decision.value},
        )
        return report

    # -----------------------------
    # Reads
    # -----------------------------
    def get_report(self, report_id: str) -> Optional[BugReport]:
        return next((b for b in self.state.bug_reports if b.id == report_id), None)

    def reports_for(self, user_id: str) -> List[BugReport]:
        return [b for b in self.state.bug_reports if b.user_id == user_id]

    def pending_reports(self) -> List[BugReport]:
        return [b for b in self.state.bug_reports if b.status == BugReportStatus.PENDING]
