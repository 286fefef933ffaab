"""Map KPI values onto a 0-100 scale and name the result."""

from enum import StrEnum

import numpy as np

from orgbench.domains.kpis.definitions import BenchmarkRange

STABLE_TREND_BAND = 2.0


class HealthStatus(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class TrendDirection(StrEnum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


def score_value(value: float, band: BenchmarkRange, higher_is_better: bool = True) -> float:
    """Linear score with anchors low -> 0, median -> 50, high -> 100.

    Lower-is-better KPIs are mirrored so that the low anchor scores 100. A
    degenerate range (high == low) scores a neutral 50.
    """
    low, median, high = band.low, band.median, band.high
    if high == low:
        return 50.0
    if value == median:
        score = 50.0
    elif value <= low:
        score = 0.0
    elif value >= high:
        score = 100.0
    elif value < median:
        score = 50.0 * (value - low) / (median - low)
    else:
        score = 50.0 + 50.0 * (value - median) / (high - median)
    score = float(np.clip(score, 0.0, 100.0))
    return score if higher_is_better else 100.0 - score


def score_to_status(score: float) -> HealthStatus:
    if score >= 85:
        return HealthStatus.EXCELLENT
    if score >= 70:
        return HealthStatus.GOOD
    if score >= 50:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


def score_to_grade(score: float) -> str:
    match score:
        case s if s >= 95:
            return "A+"
        case s if s >= 85:
            return "A"
        case s if s >= 70:
            return "B"
        case s if s >= 50:
            return "C"
        case s if s >= 30:
            return "D"
        case _:
            return "F"


def trend_direction(trend: float | None) -> TrendDirection | None:
    if trend is None:
        return None
    if abs(trend) < STABLE_TREND_BAND:
        return TrendDirection.STABLE
    return TrendDirection.IMPROVING if trend > 0 else TrendDirection.DECLINING
