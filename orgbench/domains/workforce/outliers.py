"""Compensation and span-of-control outliers."""

import logging
from dataclasses import dataclass

import pandas as pd

from orgbench.domains.workforce.structure import direct_report_counts
from orgbench.utils.statistics import average, standard_deviation, z_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighCostOutlier:
    employee_id: str
    department: str
    role: str | None
    total_compensation: float
    z_score: float
    delta_from_mean: float


@dataclass(frozen=True)
class LowSpanManager:
    manager_id: str
    department: str
    direct_reports: int
    expected_min: int


def high_cost_outliers(active: pd.DataFrame, threshold: float = 2.5) -> list[HighCostOutlier]:
    """Employees whose total compensation z-score exceeds the threshold, highest first."""
    comp = active["total_compensation"]
    mean = average(comp)
    stddev = standard_deviation(comp)

    outliers = []
    for _, row in active.iterrows():
        score = z_score(float(row["total_compensation"]), mean, stddev)
        if score > threshold:
            outliers.append(HighCostOutlier(
                employee_id=row["employee_id"],
                department=row["department"],
                role=row["role"] if pd.notna(row["role"]) else None,
                total_compensation=float(row["total_compensation"]),
                z_score=score,
                delta_from_mean=float(row["total_compensation"]) - mean,
            ))
    outliers.sort(key=lambda o: (-o.z_score, o.employee_id))
    if outliers:
        logger.info("Found %d high-cost outliers (z > %.1f)", len(outliers), threshold)
    return outliers


def low_span_managers(active: pd.DataFrame, min_span: int = 3) -> list[LowSpanManager]:
    """Active managers with at least one but fewer than min_span direct reports."""
    counts = direct_report_counts(active)
    departments = active.set_index("employee_id")["department"]
    managers = []
    for manager_id, reports in sorted(counts.items()):
        if reports >= min_span or manager_id not in departments.index:
            continue
        managers.append(LowSpanManager(
            manager_id=manager_id,
            department=departments[manager_id],
            direct_reports=int(reports),
            expected_min=min_span,
        ))
    return managers
