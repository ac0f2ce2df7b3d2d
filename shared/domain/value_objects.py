"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: a stay from check-in to check-out
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a stay from start_date (check-in) to end_date (check-out).
    Used for booking periods and availability checks.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange', *, inclusive: bool = False) -> bool:
        """
        Check if this range overlaps with another

        With ``inclusive=False`` end dates are exclusive and back-to-back
        ranges don't overlap. With ``inclusive=True`` ranges that merely
        touch (one's check-out equals the other's check-in) also overlap.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False
            - DateRange(25, 28).overlaps_with(DateRange(28, 31), inclusive=True) -> True
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        if inclusive:
            return self.start_date <= other.end_date and self.end_date >= other.start_date
        return self.start_date < other.end_date and self.end_date > other.start_date

    @property
    def nights(self) -> int:
        """Number of nights, rounding partial days up."""
        span = datetime.combine(self.end_date, time.min) - datetime.combine(self.start_date, time.min)
        return math.ceil(span / timedelta(days=1))

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
