"""Tenure distribution and retention risk.

Tenure is counted in whole calendar months between the start date and the
as-of date, ignoring the day of month. Only employees active on the as-of
date with a known start date take part.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

import pandas as pd

from orgbench.utils.statistics import average, median
from orgbench.utils.transforms import active_on, employees_to_frame, resolve_as_of
from orgbench.utils.types import EmployeeID, EmployeeRecord

logger = logging.getLogger(__name__)

UNKNOWN_LEVEL = "Unknown"


class TenureBucket(StrEnum):
    UNDER_6_MONTHS = "0-6 months"
    SIX_TO_12_MONTHS = "6-12 months"
    ONE_TO_2_YEARS = "1-2 years"
    TWO_TO_5_YEARS = "2-5 years"
    OVER_5_YEARS = "5+ years"


class RetentionRisk(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class TenureGroup:
    employee_count: int
    avg_months: float

    @property
    def avg_years(self) -> float:
        return self.avg_months / 12


@dataclass(frozen=True)
class TenureMetrics:
    avg_months: float
    median_months: float
    distribution: dict[TenureBucket, int]
    by_department: dict[str, TenureGroup] = field(default_factory=dict)
    by_level: dict[str, TenureGroup] = field(default_factory=dict)
    retention_risk: dict[RetentionRisk, list[EmployeeID]] = field(default_factory=dict)

    @property
    def avg_years(self) -> float:
        return self.avg_months / 12


def tenure_months(start_date: date | None, as_of: date) -> int | None:
    if start_date is None:
        return None
    return (as_of.year - start_date.year) * 12 + (as_of.month - start_date.month)


def tenure_bucket(months: float) -> TenureBucket:
    match months:
        case m if m < 6:
            return TenureBucket.UNDER_6_MONTHS
        case m if m < 12:
            return TenureBucket.SIX_TO_12_MONTHS
        case m if m < 24:
            return TenureBucket.ONE_TO_2_YEARS
        case m if m < 60:
            return TenureBucket.TWO_TO_5_YEARS
        case _:
            return TenureBucket.OVER_5_YEARS


def retention_risk(months: float) -> RetentionRisk:
    if months < 6:
        return RetentionRisk.HIGH
    elif months < 12:
        return RetentionRisk.MEDIUM
    return RetentionRisk.LOW


def _group_tenure(frame: pd.DataFrame, column: str) -> dict[str, TenureGroup]:
    grouped = frame.groupby(column)["tenure_months"].agg(["size", "mean"])
    return {
        str(key): TenureGroup(employee_count=int(row["size"]), avg_months=float(row["mean"]))
        for key, row in grouped.iterrows()
    }


def tenure_metrics(employees: Iterable[EmployeeRecord], as_of: date | None = None) -> TenureMetrics | None:
    """Average and median tenure, bucket counts, per-department and per-level
    averages, and employee ids by retention risk band.

    Returns None when no active employee has a start date.
    """
    ts = resolve_as_of(as_of)
    df = employees_to_frame(employees)
    active = df[active_on(df, ts) & df["start_date"].notna()].copy()
    if active.empty:
        logger.info("No start dates among active employees; tenure skipped")
        return None

    active["tenure_months"] = (
        (ts.year - active["start_date"].dt.year) * 12 + (ts.month - active["start_date"].dt.month)
    ).astype(int)
    active["level"] = active["level"].fillna(UNKNOWN_LEVEL)
    months = active["tenure_months"].tolist()

    distribution = {bucket: 0 for bucket in TenureBucket}
    risk: dict[RetentionRisk, list[EmployeeID]] = {band: [] for band in RetentionRisk}
    for employee_id, m in zip(active["employee_id"], months):
        distribution[tenure_bucket(m)] += 1
        risk[retention_risk(m)].append(employee_id)

    metrics = TenureMetrics(
        avg_months=average(months),
        median_months=median(months),
        distribution=distribution,
        by_department=_group_tenure(active, "department"),
        by_level=_group_tenure(active, "level"),
        retention_risk=risk,
    )
    logger.debug(
        "Tenure over %d employees: avg %.1f months, %d at high retention risk",
        len(months), metrics.avg_months, len(risk[RetentionRisk.HIGH]),
    )
    return metrics


def format_tenure(months: float) -> str:
    if months < 1:
        return "Less than 1 month"
    if months == 1:
        return "1 month"
    if months < 12:
        return f"{int(months)} months"
    years, remaining = divmod(int(months), 12)
    if remaining == 0:
        return "1 year" if years == 1 else f"{years} years"
    return f"{years}y {remaining}m"
