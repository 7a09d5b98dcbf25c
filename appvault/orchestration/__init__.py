"""Orchestration layer - bug report state machine and the vault engine facade."""

from appvault.orchestration.state_machine import ActorRole, can_transition, is_terminal, valid_transitions

__all__ = [
    "ActorRole",
    "can_transition",
    "is_terminal",
    "valid_transitions",
]
