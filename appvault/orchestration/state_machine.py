"""
State machine for the BugReport lifecycle.

pending -> approved and pending -> rejected are the only transitions; both
targets are terminal. Valid transitions and who may trigger them are
defined here.
"""

from enum import Enum
from typing import Dict, List, Set, Tuple

from appvault.schemas.bug_report import BugReportStatus


class ActorRole(str, Enum):
    """Who is asking for a transition."""
    USER = "user"
    ADMIN = "admin"


# Valid transitions: (from_state, to_state) -> roles that may trigger
_TRANSITIONS: Dict[Tuple[str, str], Set[ActorRole]] = {
    (BugReportStatus.PENDING.value, BugReportStatus.APPROVED.value): {ActorRole.ADMIN},
    (BugReportStatus.PENDING.value, BugReportStatus.REJECTED.value): {ActorRole.ADMIN},
}


def valid_transitions(from_state: str) -> List[str]:
    """Return list of valid target states from given state."""
    return sorted({t for (f, t) in _TRANSITIONS if f == from_state})


def is_terminal(state: str) -> bool:
    """A state with no outgoing transitions."""
    return not valid_transitions(state)


def can_transition(actor_role: ActorRole, from_state: str, to_state: str) -> bool:
    """Check if actor with given role may transition from_state -> to_state."""
    allowed = _TRANSITIONS.get((from_state, to_state), set())
    return actor_role in allowed
