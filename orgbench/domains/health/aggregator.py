"""Combine KPI values into a composite organizational health score."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

from orgbench.domains.health.scoring import (
    HealthStatus,
    TrendDirection,
    score_to_grade,
    score_to_status,
    score_value,
    trend_direction,
)
from orgbench.domains.kpis.calculator import KPIValue
from orgbench.domains.kpis.definitions import BenchmarkRange
from orgbench.errors import InsufficientDataError, InvalidInputError
from orgbench.utils.statistics import average

logger = logging.getLogger(__name__)

type CategoryWeights = Mapping[str, float]


@dataclass(frozen=True)
class HealthScoreSnapshot:
    composite: float
    category_scores: dict[str, float]
    weights: dict[str, float]
    kpi_scores: dict[str, float]
    grade: str
    status: HealthStatus
    calculated_at: datetime
    trend: float | None = None
    trend_direction: TrendDirection | None = None
    excluded_categories: tuple[str, ...] = field(default_factory=tuple)


def normalize_weights(categories: Iterable[str], weights: CategoryWeights | None) -> dict[str, float]:
    """Weights for the scorable categories, rescaled to sum to 1.

    Without explicit weights every category counts equally. Categories absent
    from an explicit mapping get no weight.
    """
    categories = list(categories)
    if weights is None:
        raw = {c: 1.0 for c in categories}
    else:
        negative = [c for c, w in weights.items() if w < 0]
        if negative:
            raise InvalidInputError(f"Negative category weights: {', '.join(negative)}")
        raw = {c: float(weights.get(c, 0.0)) for c in categories}
    total = sum(raw.values())
    if total <= 0:
        raise InsufficientDataError("No scorable category carries any weight")
    return {c: w / total for c, w in raw.items()}


class HealthScoreAggregator:
    def score_kpis(
        self,
        kpi_values: Iterable[KPIValue],
        benchmark_ranges: Mapping[str, BenchmarkRange] | None = None,
    ) -> tuple[dict[str, float], dict[str, list[float]]]:
        """Score every KPI that has a value and a range, grouped by category."""
        benchmark_ranges = benchmark_ranges or {}
        kpi_scores: dict[str, float] = {}
        by_category: dict[str, list[float]] = {}
        for kpi in kpi_values:
            category = str(kpi.definition.category)
            by_category.setdefault(category, [])
            band = benchmark_ranges.get(kpi.kpi_id, kpi.definition.benchmark_range)
            if kpi.value is None or band is None:
                continue
            score = score_value(kpi.value, band, kpi.definition.higher_is_better)
            kpi_scores[kpi.kpi_id] = score
            by_category[category].append(score)
        return kpi_scores, by_category

    def aggregate(
        self,
        kpi_values: Iterable[KPIValue],
        benchmark_ranges: Mapping[str, BenchmarkRange] | None = None,
        weights: CategoryWeights | None = None,
        previous_snapshot: HealthScoreSnapshot | None = None,
        calculated_at: datetime | None = None,
    ) -> HealthScoreSnapshot:
        kpi_scores, by_category = self.score_kpis(kpi_values, benchmark_ranges)

        category_scores = {c: average(scores) for c, scores in by_category.items() if scores}
        excluded = tuple(c for c, scores in by_category.items() if not scores)
        if weights is not None:
            excluded += tuple(c for c in weights if c not in by_category)
        if not category_scores:
            raise InsufficientDataError("No KPI category has a scorable value")

        normalized = normalize_weights(category_scores, weights)
        composite = sum(category_scores[c] * w for c, w in normalized.items())
        composite = min(max(composite, 0.0), 100.0)

        trend = None
        if previous_snapshot is not None:
            trend = composite - previous_snapshot.composite

        if excluded:
            logger.info("Excluded categories without scorable KPIs: %s", ", ".join(excluded))

        return HealthScoreSnapshot(
            composite=composite,
            category_scores=category_scores,
            weights=normalized,
            kpi_scores=kpi_scores,
            grade=score_to_grade(composite),
            status=score_to_status(composite),
            calculated_at=calculated_at or datetime.now(timezone.utc),
            trend=trend,
            trend_direction=trend_direction(trend),
            excluded_categories=excluded,
        )
