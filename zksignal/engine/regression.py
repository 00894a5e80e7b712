"""Integer fixed-point least-squares fit.

Pure math, no floats: every quantity is an exact Python int scaled by
``PRECISION`` so that two independent runs agree bit for bit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

PRECISION = 10**9


class ZeroVarianceError(ValueError):
    """The day index has no spread, so the slope is undefined."""


@dataclass(frozen=True)
class RegressionFit:
    """Fitted line ``price = slope * day + intercept``.

    Attributes
    ----------
    slope : int
        Price change per day, scaled by ``PRECISION``.
    intercept : int
        Price at day 0, scaled by ``PRECISION``.
    confidence : int
        Coefficient of determination as a percentage, clamped to [0, 100].
    """

    slope: int
    intercept: int
    confidence: int

    def project(self, day: int) -> int:
        """Fitted price at *day*, scaled by ``PRECISION``."""
        return self.slope * day + self.intercept


def fit_history(history: Sequence[tuple[int, int]]) -> RegressionFit:
    """Fit an ordinary least-squares line through ``(day, price)`` points.

    Raises
    ------
    ZeroVarianceError
        If all day indices are equal (including a single point).
    """
    n = len(history)
    if n == 0:
        raise ZeroVarianceError("cannot fit an empty history")

    sum_x = sum(x for x, _ in history)
    sum_y = sum(y for _, y in history)
    sum_xx = sum(x * x for x, _ in history)
    sum_xy = sum(x * y for x, y in history)

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        raise ZeroVarianceError("day index has zero variance")

    slope = (n * sum_xy - sum_x * sum_y) * PRECISION // denominator
    intercept = (sum_y * PRECISION - slope * sum_x) // n

    # SST scaled by n**2 keeps the mean exact: (n*y - sum_y)**2 == n**2 * (y - mean)**2
    sst = sum((n * y - sum_y) ** 2 for _, y in history) * PRECISION**2
    sse = sum((y * PRECISION - (slope * x + intercept)) ** 2 for x, y in history) * n * n

    if sst == 0:
        confidence = 0
    else:
        confidence = (sst - sse) * 100 // sst
        confidence = min(max(confidence, 0), 100)

    return RegressionFit(slope=slope, intercept=intercept, confidence=confidence)
