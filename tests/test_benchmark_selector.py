import pytest

from orgbench.domains.benchmarks import (
    BenchmarkRow,
    BenchmarkSelector,
    Measure,
    RelaxationTier,
    RoleKey,
    aggregate_rows,
    benchmarks_to_frame,
    read_percentile,
)
from orgbench.domains.roles import MappingContext
from orgbench.errors import InvalidInputError

SENIOR_SE = RoleKey("Engineering", "Software Engineer", "Senior")


@pytest.fixture
def selector(benchmarks):
    return BenchmarkSelector(benchmarks)


class TestSelect:
    def test_exact_tier(self, selector):
        selection = selector.select(SENIOR_SE, MappingContext("Software", "Europe", "51-200"))
        assert selection.tier == RelaxationTier.EXACT
        assert selection.row.p50_total_comp == 115_000
        assert selection.source_count == 1
        assert not selection.is_aggregated

    def test_relaxes_company_size_first(self, selector):
        selection = selector.select(SENIOR_SE, MappingContext("Software", "Europe", "1000+"))
        assert selection.tier == RelaxationTier.ANY_COMPANY_SIZE
        assert selection.row.region == "Europe"

    def test_relaxed_region_aggregates(self, selector):
        selection = selector.select(SENIOR_SE, MappingContext("Software", "Asia", "51-200"))
        assert selection.tier == RelaxationTier.ANY_REGION
        assert selection.is_aggregated
        assert selection.source_count == 2
        assert selection.row.p50_total_comp == pytest.approx(142_500)
        assert selection.row.sample_size == 100
        assert selection.row.region == "mixed"
        assert selection.row.industry == "Software"

    def test_relaxed_seniority(self, selector):
        selection = selector.select(RoleKey("Engineering", "Software Engineer", "Lead"),
                                    MappingContext("Software", "Europe", "51-200"))
        assert selection.tier == RelaxationTier.ANY_SENIORITY
        assert selection.source_count == 3

    def test_unknown_seniority_is_relaxed_last(self, selector):
        selection = selector.select(RoleKey("Engineering", "Software Engineer"),
                                    MappingContext("Software", "Europe", "51-200"))
        assert selection.tier == RelaxationTier.ANY_SENIORITY
        assert selection.source_count == 3

    def test_unset_context_is_unconstrained(self, selector):
        selection = selector.select(SENIOR_SE, None)
        assert selection.tier == RelaxationTier.EXACT
        assert selection.source_count == 2

    def test_case_insensitive(self, selector):
        selection = selector.select(RoleKey("engineering", "software engineer", "senior"),
                                    MappingContext("software", "europe", "51-200"))
        assert selection.tier == RelaxationTier.EXACT

    def test_no_rows_for_role(self, selector):
        assert selector.select(RoleKey("Engineering", "Engineering Manager", "Manager")) is None

    @pytest.mark.parametrize("role", [
        SENIOR_SE,
        RoleKey("Engineering", "Software Engineer", "VP"),
        RoleKey("Engineering", "Data Scientist", "Staff"),
        RoleKey("Sales", "Account Executive"),
        RoleKey("Sales", "Software Engineer", "Senior"),
    ])
    @pytest.mark.parametrize("context", [
        None,
        MappingContext("Fintech", "Asia", "5000+"),
        MappingContext("Software", "Europe", "51-200"),
    ])
    def test_never_returns_another_role(self, selector, role, context):
        selection = selector.select(role, context)
        if selection is None:
            assert not selector.role_rows(role)
            return
        assert selection.row.role_family.casefold() == role.role_family.casefold()
        assert selection.row.standardized_title.casefold() == role.standardized_title.casefold()


class TestReadPercentile:
    def test_direct_band(self, benchmarks):
        reading = read_percentile(benchmarks[0], 50)
        assert reading.value == 115_000
        assert not reading.interpolated

    def test_interpolates_between_bands(self, benchmarks):
        reading = read_percentile(benchmarks[0], 60)
        assert reading.value == pytest.approx(121_000)
        assert reading.interpolated

    def test_interpolates_over_missing_band(self):
        row = BenchmarkRow("Engineering", "Software Engineer", p25_total_comp=60_000, p75_total_comp=80_000)
        reading = read_percentile(row, 50)
        assert reading.value == pytest.approx(70_000)
        assert reading.interpolated

    def test_missing_side_returns_none(self, benchmarks):
        mid = benchmarks[2]
        assert read_percentile(mid, 10) is None
        assert read_percentile(mid, 20) is None
        assert read_percentile(mid, 80) is None

    def test_base_salary_measure(self, benchmarks):
        reading = read_percentile(benchmarks[4], 60, Measure.BASE_SALARY)
        assert reading.value == pytest.approx(64_000)
        assert reading.measure == Measure.BASE_SALARY

    @pytest.mark.parametrize("p", [0, 100, -5, 150])
    def test_out_of_range(self, benchmarks, p):
        with pytest.raises(InvalidInputError):
            read_percentile(benchmarks[0], p)


def test_aggregate_bands_missing_everywhere_stay_none():
    rows = [
        BenchmarkRow("Sales", "Account Executive", "Mid", sample_size=10, p50_total_comp=90_000),
        BenchmarkRow("Sales", "Account Executive", "Senior", p50_total_comp=110_000, p75_total_comp=130_000),
    ]
    merged = aggregate_rows(rows)
    assert merged.p50_total_comp == 100_000
    assert merged.p75_total_comp == 130_000
    assert merged.p10_total_comp is None
    assert merged.seniority == "mixed"
    assert merged.sample_size == 10


class TestBenchmarkSchema:
    def test_valid_rows(self, benchmarks):
        assert len(benchmarks_to_frame(benchmarks)) == len(benchmarks)

    def test_non_monotonic_bands_rejected(self):
        row = BenchmarkRow("Sales", "Account Executive", p25_total_comp=80_000, p50_total_comp=70_000)
        with pytest.raises(InvalidInputError):
            benchmarks_to_frame([row])

    def test_negative_sample_size_rejected(self):
        row = BenchmarkRow("Sales", "Account Executive", sample_size=-1, p50_total_comp=70_000)
        with pytest.raises(InvalidInputError):
            benchmarks_to_frame([row])
