"""Workforce structure snapshot for a dataset."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from orgbench.config import EngineConfig
from orgbench.domains.workforce.outliers import HighCostOutlier, LowSpanManager, high_cost_outliers, low_span_managers
from orgbench.domains.workforce.structure import (
    DepartmentGroup,
    DepartmentStats,
    average_span_of_control,
    department_breakdown,
    manager_to_ic_ratio,
    rd_to_gtm_ratio,
)
from orgbench.utils.transforms import active_on, employees_to_frame, resolve_as_of
from orgbench.utils.types import DatasetMetadata, EmployeeRecord, Money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkforceSummary:
    headcount: int
    total_fte: float
    total_cost: Money
    cost_per_fte: Money
    currency: str
    rd_to_gtm: float
    manager_to_ic: float
    avg_span_of_control: float
    departments: dict[DepartmentGroup, DepartmentStats] = field(default_factory=dict)
    high_cost_outliers: list[HighCostOutlier] = field(default_factory=list)
    low_span_managers: list[LowSpanManager] = field(default_factory=list)


def summarize_workforce(
    employees: Iterable[EmployeeRecord],
    metadata: DatasetMetadata | None = None,
    as_of: date | None = None,
    outlier_threshold: float | None = None,
    min_span: int | None = None,
    config: EngineConfig | None = None,
) -> WorkforceSummary:
    """Department rollups, structural ratios and outliers over employees active on as_of.

    Thresholds default to the engine configuration.
    """
    config = config or EngineConfig()
    metadata = metadata or DatasetMetadata()
    threshold = outlier_threshold if outlier_threshold is not None else config.outlier_threshold
    span = min_span if min_span is not None else config.min_span_of_control

    df = employees_to_frame(employees)
    active = df[active_on(df, resolve_as_of(as_of))]

    total_cost = float(active["total_compensation"].sum())
    total_fte = float(active["fte_factor"].sum())
    breakdown = department_breakdown(active)

    summary = WorkforceSummary(
        headcount=len(active),
        total_fte=total_fte,
        total_cost=total_cost,
        cost_per_fte=total_cost / total_fte if total_fte > 0 else 0.0,
        currency=metadata.currency,
        rd_to_gtm=rd_to_gtm_ratio(breakdown),
        manager_to_ic=manager_to_ic_ratio(active),
        avg_span_of_control=average_span_of_control(active),
        departments=breakdown,
        high_cost_outliers=high_cost_outliers(active, threshold) if not active.empty else [],
        low_span_managers=low_span_managers(active, span),
    )
    logger.info(
        "Workforce summary: %d active employees, %.1f FTE, %d outliers, %d low-span managers",
        summary.headcount, summary.total_fte, len(summary.high_cost_outliers), len(summary.low_span_managers),
    )
    return summary
