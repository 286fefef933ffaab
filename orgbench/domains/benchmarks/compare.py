"""Organization-level metric comparison against peer benchmarks."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from orgbench.domains.benchmarks.selector import same_dimension
from orgbench.errors import InvalidInputError


class ComparisonStatus(StrEnum):
    BELOW = "below"
    WITHIN = "within"
    ABOVE = "above"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class MetricBand:
    median: float
    p25: float | None = None
    p75: float | None = None
    minimum: float | None = None
    maximum: float | None = None


@dataclass(frozen=True)
class OrgBenchmark:
    industry: str
    company_size: str
    source: str
    metrics: Mapping[str, MetricBand] = field(default_factory=dict)
    sample_size: int | None = None


@dataclass(frozen=True)
class BenchmarkComparison:
    value: float
    band: MetricBand
    percentile: int
    status: ComparisonStatus
    delta_pct: float
    severity: Severity


def _estimate_percentile(value: float, band: MetricBand) -> int:
    if band.p25 is not None and value <= band.p25:
        return 25
    elif value <= band.median:
        return 50
    elif band.p75 is not None and value <= band.p75:
        return 75
    return 90


def _severity(delta_pct: float) -> Severity:
    match abs(delta_pct):
        case d if d < 15:
            return Severity.LOW
        case d if d < 30:
            return Severity.MEDIUM
        case _:
            return Severity.HIGH


def compare_to_benchmark(value: float, band: MetricBand) -> BenchmarkComparison:
    """Place a value against a peer band.

    The percentile is a coarse estimate (25, 50, 75 or 90). Status is
    "within" unless the value falls outside the interquartile range, and
    severity grows with the distance from the median.
    """
    if band.median == 0:
        raise InvalidInputError("Benchmark median must be non-zero")

    if band.p25 is not None and value < band.p25:
        status = ComparisonStatus.BELOW
    elif band.p75 is not None and value > band.p75:
        status = ComparisonStatus.ABOVE
    else:
        status = ComparisonStatus.WITHIN

    delta_pct = (value - band.median) / band.median * 100
    return BenchmarkComparison(
        value=value,
        band=band,
        percentile=_estimate_percentile(value, band),
        status=status,
        delta_pct=delta_pct,
        severity=_severity(delta_pct),
    )


def benchmark_for_segment(
    industry: str | None,
    company_size: str | None,
    benchmarks: Iterable[OrgBenchmark],
    fallback: tuple[str, str] | None = None,
) -> OrgBenchmark | None:
    """Exact industry and size first, then any size in the industry, then the
    fallback (industry, size) segment when given."""
    benchmarks = list(benchmarks)
    for wanted_industry, wanted_size in [(industry, company_size), (industry, None), fallback or (None, None)]:
        if wanted_industry is None:
            continue
        for b in benchmarks:
            if same_dimension(b.industry, wanted_industry) and (
                wanted_size is None or same_dimension(b.company_size, wanted_size)
            ):
                return b
    return None
