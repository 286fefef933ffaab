"""Tiered benchmark selection.

Benchmark coverage is sparse, so selection starts from the most specific
match and drops one context dimension at a time until at least one row is
found:

    exact -> any company size -> any region -> any industry -> any seniority

Role family and standardized title are never relaxed: a row for another role
would silently benchmark the wrong job. Seniority is relaxed last, so a role
with unknown seniority only reaches seniority-specific rows at that tier.
Several rows at the winning tier are averaged band by band instead of
picking one arbitrarily.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from orgbench.domains.benchmarks.models import (
    BAND_FIELDS,
    MIXED,
    PERCENTILE_BANDS,
    BenchmarkRow,
    Measure,
    RoleKey,
)
from orgbench.domains.roles.models import MappingContext
from orgbench.errors import InvalidInputError
from orgbench.utils.statistics import average

logger = logging.getLogger(__name__)


class RelaxationTier(StrEnum):
    EXACT = "exact"
    ANY_COMPANY_SIZE = "relaxed_company_size"
    ANY_REGION = "relaxed_region"
    ANY_INDUSTRY = "relaxed_industry"
    ANY_SENIORITY = "relaxed_seniority"


TIER_DIMENSIONS: dict[RelaxationTier, tuple[str, ...]] = {
    RelaxationTier.EXACT: ("seniority", "industry", "region", "company_size"),
    RelaxationTier.ANY_COMPANY_SIZE: ("seniority", "industry", "region"),
    RelaxationTier.ANY_REGION: ("seniority", "industry"),
    RelaxationTier.ANY_INDUSTRY: ("seniority",),
    RelaxationTier.ANY_SENIORITY: (),
}


@dataclass(frozen=True)
class BenchmarkSelection:
    row: BenchmarkRow
    tier: RelaxationTier
    source_count: int
    is_aggregated: bool


@dataclass(frozen=True)
class BandReading:
    value: float
    percentile: float
    measure: Measure
    interpolated: bool


def same_dimension(a: str | None, b: str | None) -> bool:
    return (a or "").strip().casefold() == (b or "").strip().casefold()


def _accepts(row: BenchmarkRow, dimension: str, wanted: str | None) -> bool:
    # An unset context field is unconstrained. An unknown seniority only
    # matches rows without one until the seniority tier is relaxed.
    if wanted is None and dimension != "seniority":
        return True
    return same_dimension(getattr(row, dimension), wanted)


def _uniform(rows: Sequence[BenchmarkRow], name: str):
    values = {getattr(r, name) for r in rows}
    return values.pop() if len(values) == 1 else MIXED


def aggregate_rows(rows: Sequence[BenchmarkRow]) -> BenchmarkRow:
    """Average every percentile band across the rows that carry it."""
    if len(rows) == 1:
        return rows[0]
    bands = {}
    for name in BAND_FIELDS:
        present = [getattr(r, name) for r in rows if getattr(r, name) is not None]
        bands[name] = average(present) if present else None
    sizes = [r.sample_size for r in rows if r.sample_size is not None]
    return BenchmarkRow(
        role_family=rows[0].role_family,
        standardized_title=rows[0].standardized_title,
        seniority=_uniform(rows, "seniority"),
        industry=_uniform(rows, "industry"),
        region=_uniform(rows, "region"),
        company_size=_uniform(rows, "company_size"),
        currency=_uniform(rows, "currency"),
        sample_size=sum(sizes) if sizes else None,
        **bands,
    )


class BenchmarkSelector:
    def __init__(self, rows: Iterable[BenchmarkRow]):
        self.rows = tuple(rows)

    def role_rows(self, role: RoleKey) -> list[BenchmarkRow]:
        return [
            r for r in self.rows
            if same_dimension(r.role_family, role.role_family)
            and same_dimension(r.standardized_title, role.standardized_title)
        ]

    def family_rows(self, role_family: str) -> list[BenchmarkRow]:
        return [r for r in self.rows if same_dimension(r.role_family, role_family)]

    def select(self, role: RoleKey, context: MappingContext | None = None) -> BenchmarkSelection | None:
        candidates = self.role_rows(role)
        if not candidates:
            logger.debug("No benchmark rows for %s / %s", role.role_family, role.standardized_title)
            return None

        context = context or MappingContext()
        wanted = {
            "seniority": role.seniority,
            "industry": context.industry,
            "region": context.region,
            "company_size": context.company_size,
        }
        for tier, dimensions in TIER_DIMENSIONS.items():
            matched = [r for r in candidates if all(_accepts(r, d, wanted[d]) for d in dimensions)]
            if matched:
                return BenchmarkSelection(
                    row=aggregate_rows(matched),
                    tier=tier,
                    source_count=len(matched),
                    is_aggregated=len(matched) > 1,
                )
        return None


def read_percentile(row: BenchmarkRow, p: float, measure: Measure = Measure.TOTAL_COMP) -> BandReading | None:
    """Read percentile p from a row, interpolating linearly between the
    nearest available bands when p is not a band or its band is missing."""
    if not 0 < p < 100:
        raise InvalidInputError(f"Percentile must be within (0, 100), got {p}")

    if p in PERCENTILE_BANDS and row.band(int(p), measure) is not None:
        return BandReading(row.band(int(p), measure), p, measure, interpolated=False)

    lower = [b for b in PERCENTILE_BANDS if b < p and row.band(b, measure) is not None]
    upper = [b for b in PERCENTILE_BANDS if b > p and row.band(b, measure) is not None]
    if not lower or not upper:
        return None
    lo, hi = lower[-1], upper[0]
    lo_value, hi_value = row.band(lo, measure), row.band(hi, measure)
    value = lo_value + (hi_value - lo_value) * (p - lo) / (hi - lo)
    return BandReading(value, p, measure, interpolated=True)
