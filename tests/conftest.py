"""Shared fixtures: a small workforce, its metadata, market benchmarks and a matcher."""

from datetime import date, datetime, timezone

import pytest

from orgbench.config import EngineConfig
from orgbench.domains.benchmarks import BenchmarkRow
from orgbench.domains.roles import InMemoryMappingStore, MappingContext, RoleTaxonomyMatcher
from orgbench.utils.types import DatasetMetadata, EmployeeLevel, EmployeeRecord

AS_OF = date(2024, 6, 30)
FIXED_NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def employees():
    """Five active employees on AS_OF plus one leaver from February 2024."""
    return [
        EmployeeRecord("e1", "Engineering", "Senior Software Engineer", 120_000, annual_salary=100_000,
                       location="Berlin, Germany", start_date=date(2020, 1, 1), manager_id="m1"),
        EmployeeRecord("e2", "Engineering", "Software Developer", 80_000, annual_salary=70_000,
                       location="Warsaw, Poland", start_date=date(2023, 9, 1), manager_id="m1"),
        EmployeeRecord("m1", "Engineering", "Engineering Manager", 150_000, annual_salary=130_000,
                       level=EmployeeLevel.MANAGER, location="Munich, Germany",
                       start_date=date(2019, 3, 1), manager_id="c1"),
        EmployeeRecord("s1", "Sales", "Account Executive", 90_000, annual_salary=60_000,
                       location="United States", start_date=date(2022, 5, 1), manager_id="c1"),
        EmployeeRecord("c1", "Executive", "CEO", 250_000, annual_salary=200_000, level=EmployeeLevel.C_LEVEL,
                       location="Germany", start_date=date(2018, 1, 1)),
        EmployeeRecord("x1", "Marketing", "Marketing Manager", 85_000, annual_salary=70_000,
                       location="Madrid, Spain", start_date=date(2021, 1, 1), end_date=date(2024, 2, 1)),
    ]


@pytest.fixture
def metadata():
    return DatasetMetadata(currency="EUR", total_revenue=2_000_000, industry="Software", region="Europe",
                           company_size="51-200", current_cash_balance=1_100_000)


@pytest.fixture
def context():
    return MappingContext(industry="Software", region="Europe")


@pytest.fixture
def benchmarks():
    return [
        BenchmarkRow("Engineering", "Software Engineer", "Senior", "Software", "Europe", "51-200", sample_size=40,
                     p10_total_comp=90_000, p25_total_comp=100_000, p50_total_comp=115_000,
                     p75_total_comp=130_000, p90_total_comp=150_000),
        BenchmarkRow("Engineering", "Software Engineer", "Senior", "Software", "North America", "51-200",
                     currency="USD", sample_size=60,
                     p10_total_comp=130_000, p25_total_comp=150_000, p50_total_comp=170_000,
                     p75_total_comp=190_000, p90_total_comp=210_000),
        BenchmarkRow("Engineering", "Software Engineer", "Mid", "Software", "Europe", None, sample_size=30,
                     p25_total_comp=65_000, p50_total_comp=75_000, p75_total_comp=85_000),
        BenchmarkRow("Engineering", "Data Scientist", "Mid", "Software", "Europe", "51-200", sample_size=12,
                     p25_total_comp=70_000, p50_total_comp=80_000, p75_total_comp=95_000),
        BenchmarkRow("Sales", "Account Executive", "Mid", "Software", "Europe", "51-200", sample_size=25,
                     p50_total_comp=95_000,
                     p25_base_salary=55_000, p50_base_salary=60_000, p75_base_salary=70_000),
    ]


@pytest.fixture
def store():
    return InMemoryMappingStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def config():
    return EngineConfig(batch_workers=4)


@pytest.fixture
def matcher(store, config):
    return RoleTaxonomyMatcher(store, config=config)
