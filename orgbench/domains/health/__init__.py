"""Organizational health scoring.

Scores KPI values against benchmark ranges and rolls them up into a single
composite score with grade, status and trend.
"""

from orgbench.domains.health.aggregator import HealthScoreAggregator, HealthScoreSnapshot, normalize_weights
from orgbench.domains.health.cost_metrics import MonthlyEmployerCost, cost_metrics
from orgbench.domains.health.scoring import (
    HealthStatus,
    TrendDirection,
    score_to_grade,
    score_to_status,
    score_value,
    trend_direction,
)
from orgbench.domains.kpis import KPI_REGISTRY


def validate() -> dict[str, str | int]:
    """Check that every registry benchmark range maps its median to 50."""
    failures = [
        kpi_id for kpi_id, definition in KPI_REGISTRY.items()
        if definition.benchmark_range is not None
        and definition.benchmark_range.low != definition.benchmark_range.high
        and score_value(definition.benchmark_range.median, definition.benchmark_range) != 50.0
    ]
    if failures:
        return {"status": "error", "message": f"Median does not score 50 for: {', '.join(failures)}"}
    return {"status": "ok", "scored_kpis": len(KPI_REGISTRY)}
