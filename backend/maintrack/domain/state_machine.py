# backend/maintrack/domain/state_machine.py
"""
Bakım talebi durum makinesi.

    New -> InProgress -> {Repaired, Scrap}
    New -> Scrap

Repaired ve Scrap terminaldir; dışarı geçiş yoktur.
"""
from typing import Dict, FrozenSet

from ..core.errors import InvalidTransitionError
from .constants import (
    STATUS_NEW,
    STATUS_IN_PROGRESS,
    STATUS_REPAIRED,
    STATUS_SCRAP,
    TERMINAL_STATUSES,
)

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    STATUS_NEW: frozenset({STATUS_IN_PROGRESS, STATUS_SCRAP}),
    STATUS_IN_PROGRESS: frozenset({STATUS_REPAIRED, STATUS_SCRAP}),
    STATUS_REPAIRED: frozenset(),
    STATUS_SCRAP: frozenset(),
}


def can_transition(src: str, dst: str) -> bool:
    return dst in ALLOWED_TRANSITIONS.get(src, frozenset())


def ensure_transition(src: str, dst: str) -> None:
    if not can_transition(src, dst):
        raise InvalidTransitionError(src, dst)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES
