"""
Workforce Value Objects
=======================

Pure staffing arithmetic. Nothing here touches storage; coverage is
recomputed on every read and never persisted.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from seva.config import COVERAGE_TOLERANCE, STAFFING_RATIO, CoverageStatus
from seva.core.exceptions import ValidationException


@dataclass(frozen=True)
class Coverage:
    """Required vs assigned staff for one zone."""
    required: int
    assigned: int
    delta: int
    status: CoverageStatus


class StaffingCalculator:
    """
    Domain service for the 1:8 staffing rule.

    Stateless - all methods are static.
    """

    @staticmethod
    def required_staff(headcount: int) -> int:
        """
        Staff needed for a crowd of `headcount` people.

        Examples:
            0 -> 0, 1 -> 1, 8 -> 1, 9 -> 2, 12000 -> 1500
        """
        if headcount < 0:
            raise ValidationException(
                "Headcount cannot be negative",
                {"count": "Headcount cannot be negative"}
            )
        return math.ceil(headcount / STAFFING_RATIO)

    @staticmethod
    def coverage_status(delta: int) -> CoverageStatus:
        if abs(delta) <= COVERAGE_TOLERANCE:
            return CoverageStatus.ADEQUATE
        if delta < 0:
            return CoverageStatus.UNDERSTAFFED
        return CoverageStatus.OVERSTAFFED

    @staticmethod
    def coverage(required: int, assigned: int) -> Coverage:
        delta = assigned - required
        return Coverage(
            required=required,
            assigned=assigned,
            delta=delta,
            status=StaffingCalculator.coverage_status(delta),
        )

    @staticmethod
    def assigned_staff(shift_assignments: Iterable[Sequence[str]]) -> int:
        """Sum of assignment list lengths across a zone's shifts."""
        return sum(len(staff_ids) for staff_ids in shift_assignments)

    @staticmethod
    def shortfall(required: int, assigned: int) -> int:
        return max(0, required - assigned)


def team_capacity_percent(member_count: int, capacity: Optional[int]) -> Optional[int]:
    """Members as a rounded percentage of team capacity (display only)."""
    if not capacity:
        return None
    return round(member_count / capacity * 100)
