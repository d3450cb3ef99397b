"""
Status Transitions
==================

Helpers for closed status transition tables: a dict mapping every status of
an enum to the frozenset of statuses it may move to.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Type, TypeVar

from seva.core.exceptions import InvalidTransitionException

S = TypeVar("S", bound=Enum)

TransitionTable = Dict[S, FrozenSet[S]]


def check_exhaustive(enum_cls: Type[Enum], table: Dict) -> None:
    """Fail at import time if a status has no row in its table."""
    missing = set(enum_cls) - set(table)
    if missing:
        raise RuntimeError(
            f"{enum_cls.__name__} transition table is missing {sorted(m.value for m in missing)}"
        )


def ensure_transition(entity: str, table: Dict[S, FrozenSet[S]], current: S, requested: S) -> S:
    """
    Validate a status change against a transition table.

    Returns:
        The requested status

    Raises:
        InvalidTransitionException: If the table does not allow the change
    """
    if requested not in table[current]:
        raise InvalidTransitionException(entity, current.value, requested.value)
    return requested


def next_statuses(table: Dict[S, FrozenSet[S]], current: S) -> List[str]:
    """Allowed next statuses, in enum declaration order."""
    allowed = table[current]
    return [s.value for s in type(current) if s in allowed]
