"""Application lifecycle."""

from .lifecycle import (
    INITIAL_STATUS,
    TERMINAL_STATUSES,
    TRANSITIONS,
    LifecycleEngine,
    allowed_transitions,
    can_transition,
    ensure_unique_application,
    is_terminal,
    list_by_status,
    new_application,
)

__all__ = [
    "INITIAL_STATUS",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "LifecycleEngine",
    "allowed_transitions",
    "can_transition",
    "ensure_unique_application",
    "is_terminal",
    "list_by_status",
    "new_application",
]
