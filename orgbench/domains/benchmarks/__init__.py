"""Market benchmark selection.

Picks the best-available compensation benchmark for a resolved role, relaxing
the organizational context tier by tier when coverage is sparse, and places
organization-level metrics against peer bands.
"""

from orgbench.domains.benchmarks.compare import (
    BenchmarkComparison,
    ComparisonStatus,
    MetricBand,
    OrgBenchmark,
    Severity,
    benchmark_for_segment,
    compare_to_benchmark,
)
from orgbench.domains.benchmarks.models import (
    PERCENTILE_BANDS,
    BenchmarkRow,
    Measure,
    RoleKey,
    benchmark_schema,
    benchmarks_to_frame,
)
from orgbench.domains.benchmarks.selector import (
    BandReading,
    BenchmarkSelection,
    BenchmarkSelector,
    RelaxationTier,
    aggregate_rows,
    read_percentile,
    same_dimension,
)
from orgbench.errors import InvalidInputError


def validate() -> dict[str, str | int]:
    """Check that the benchmark schema accepts a well-formed sample row."""
    sample = BenchmarkRow(
        role_family="Engineering",
        standardized_title="Software Engineer",
        seniority="Mid",
        sample_size=1,
        p25_total_comp=60_000,
        p50_total_comp=70_000,
        p75_total_comp=80_000,
    )
    try:
        frame = benchmarks_to_frame([sample])
    except InvalidInputError as exc:
        return {"status": "error", "message": str(exc)}
    return {"status": "ok", "rows_available": len(frame)}
