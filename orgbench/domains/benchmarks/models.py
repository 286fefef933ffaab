"""Benchmark records and their pandera schema."""

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from enum import StrEnum

import pandas as pd
import pandera as pa
from pandera import Column, Check

from orgbench.utils.validators import validate_dataframe

PERCENTILE_BANDS = (10, 25, 50, 75, 90)

MIXED = "mixed"


class Measure(StrEnum):
    TOTAL_COMP = "total_comp"
    BASE_SALARY = "base_salary"


def band_field(p: int, measure: Measure) -> str:
    return f"p{p}_{measure}"


BAND_FIELDS = tuple(band_field(p, m) for m in Measure for p in PERCENTILE_BANDS)


@dataclass(frozen=True)
class RoleKey:
    """The role a benchmark is requested for."""

    role_family: str
    standardized_title: str
    seniority: str | None = None


@dataclass(frozen=True)
class BenchmarkRow:
    role_family: str
    standardized_title: str
    seniority: str | None = None
    industry: str | None = None
    region: str | None = None
    company_size: str | None = None
    currency: str = "EUR"
    sample_size: int | None = None
    p10_total_comp: float | None = None
    p25_total_comp: float | None = None
    p50_total_comp: float | None = None
    p75_total_comp: float | None = None
    p90_total_comp: float | None = None
    p10_base_salary: float | None = None
    p25_base_salary: float | None = None
    p50_base_salary: float | None = None
    p75_base_salary: float | None = None
    p90_base_salary: float | None = None

    def band(self, p: int, measure: Measure) -> float | None:
        return getattr(self, band_field(p, measure))

    @property
    def source(self) -> str:
        return f"{self.industry or 'All industries'} - {self.region or 'All regions'} - {self.company_size or 'All sizes'}"


def _bands_monotonic(measure: Measure):
    cols = [band_field(p, measure) for p in PERCENTILE_BANDS]

    def check(df: pd.DataFrame) -> pd.Series:
        carried = df[cols].astype(float).ffill(axis=1)
        return (carried.diff(axis=1).fillna(0) >= 0).all(axis=1)

    return check


benchmark_schema = pa.DataFrameSchema(
    {
        "role_family": Column(str, Check.str_length(min_value=1)),
        "standardized_title": Column(str, Check.str_length(min_value=1)),
        "seniority": Column(str, nullable=True),
        "industry": Column(str, nullable=True),
        "region": Column(str, nullable=True),
        "company_size": Column(str, nullable=True),
        "currency": Column(str, Check.str_length(3, 3)),
        "sample_size": Column(float, Check.greater_than_or_equal_to(0), nullable=True, coerce=True),
        **{
            name: Column(float, Check.greater_than_or_equal_to(0), nullable=True, coerce=True)
            for name in BAND_FIELDS
        },
    },
    checks=[
        Check(_bands_monotonic(Measure.TOTAL_COMP), name="total_comp_bands_monotonic"),
        Check(_bands_monotonic(Measure.BASE_SALARY), name="base_salary_bands_monotonic"),
    ],
    name="benchmarks",
    strict=False,
)


def benchmarks_to_frame(rows: Iterable[BenchmarkRow]) -> pd.DataFrame:
    """Validate benchmark rows as a DataFrame and return it."""
    columns = list(BenchmarkRow.__dataclass_fields__)
    df = pd.DataFrame([asdict(r) for r in rows], columns=columns)
    return validate_dataframe(df, benchmark_schema)
