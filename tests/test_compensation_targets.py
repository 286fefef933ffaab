import pytest

from orgbench.domains.benchmarks import BenchmarkRow
from orgbench.domains.compensation import (
    CalculationMethod,
    CompensationTargetCalculator,
    manual_target,
)
from orgbench.domains.roles import InMemoryMappingStore, MappingContext, RoleMapping, RoleTaxonomyMatcher
from orgbench.errors import InvalidInputError
from orgbench.utils.types import EmployeeLevel, EmployeeRecord

COMPANY_SIZE = "51-200"


@pytest.fixture
def calculator(matcher):
    return CompensationTargetCalculator(matcher)


@pytest.fixture
def detailed(calculator, employees, benchmarks, context):
    return calculator.calculate_detailed(employees, benchmarks, context, COMPANY_SIZE)


def _targets_by_employee(targets):
    return {t.employee_id: t for t in targets}


class TestCalculate:
    def test_direct_band(self, detailed):
        target = _targets_by_employee(detailed.targets)["e1"]
        assert target.calculation_method == CalculationMethod.BENCHMARK_MATCH
        assert target.target_annual_comp == 115_000
        assert target.gap == -5_000
        assert target.gap_percent == pytest.approx(-4.17)
        assert target.standardized_title == "Software Engineer"
        assert target.benchmark_source == "Software - Europe - 51-200"
        assert not target.is_manual_override

    def test_relaxed_company_size(self, detailed):
        target = _targets_by_employee(detailed.targets)["e2"]
        assert target.target_annual_comp == 75_000
        assert "relaxed_company_size" in target.explanation

    def test_family_fallback_when_title_has_no_rows(self, detailed):
        target = _targets_by_employee(detailed.targets)["m1"]
        assert target.calculation_method == CalculationMethod.FALLBACK_INDUSTRY_AVG
        assert target.target_annual_comp == pytest.approx(110_000)

    def test_unresolved_employees_are_reported(self, detailed):
        unresolved = {u.employee_id for u in detailed.unresolved}
        assert unresolved == {"c1", "x1"}
        assert "c1" not in _targets_by_employee(detailed.targets)

    def test_input_order(self, detailed):
        assert [t.employee_id for t in detailed.targets] == ["e1", "e2", "m1", "s1"]

    def test_explanation(self, detailed):
        explanation = _targets_by_employee(detailed.targets)["e1"].explanation
        assert "P50" in explanation
        assert "n=40" in explanation
        assert "Software - Europe - 51-200" in explanation
        assert "gap -5,000.00" in explanation

    def test_interpolated_percentile(self, calculator, employees, benchmarks, context):
        targets = _targets_by_employee(calculator.calculate(employees, benchmarks, context, COMPANY_SIZE, 60))
        assert targets["e1"].calculation_method == CalculationMethod.INTERPOLATED
        assert targets["e1"].target_annual_comp == pytest.approx(121_000)

    def test_base_salary_when_total_comp_cannot_be_read(self, calculator, employees, benchmarks, context):
        targets = _targets_by_employee(calculator.calculate(employees, benchmarks, context, COMPANY_SIZE, 60))
        assert targets["s1"].target_annual_comp == pytest.approx(64_000)
        assert "base_salary" in targets["s1"].explanation

    def test_standardized_role_fallback(self, calculator, benchmarks, context):
        employee = EmployeeRecord("z1", "Engineering", "Code Wrangler", 70_000, standardized_role="Software Developer")
        targets = calculator.calculate([employee], benchmarks, context, COMPANY_SIZE)
        assert targets[0].standardized_title == "Software Engineer"
        assert targets[0].target_annual_comp == 75_000

    def test_plain_title_keeps_seniority_until_last_tier(self, calculator, benchmarks, context):
        employee = EmployeeRecord("z2", "Engineering", "Software Engineer", 70_000)
        target = calculator.calculate([employee], benchmarks, context, COMPANY_SIZE)[0]
        assert target.target_annual_comp == 75_000
        assert "(Mid)" in target.explanation
        assert "relaxed_company_size" in target.explanation

    def test_ic_level_defaults_to_mid_for_unleveled_mapping(self, store, config, benchmarks, context):
        matcher = RoleTaxonomyMatcher(store, config=config)
        matcher.save_to_library(RoleMapping("Code Wrangler", "Software Engineer", "Engineering"))
        employee = EmployeeRecord("z3", "Engineering", "Code Wrangler", 70_000, level=EmployeeLevel.IC)
        target = CompensationTargetCalculator(matcher).calculate([employee], benchmarks, context, COMPANY_SIZE)[0]
        assert target.target_annual_comp == 75_000

    def test_family_average_prefers_industry_case_insensitively(self, calculator, benchmarks):
        fintech = BenchmarkRow("Engineering", "Data Scientist", "Mid", "Fintech", "Europe", "51-200",
                               p50_total_comp=200_000)
        employee = EmployeeRecord("z4", "Engineering", "Engineering Manager", 140_000)
        target = calculator.calculate([employee], [*benchmarks, fintech], MappingContext(industry="software"),
                                      COMPANY_SIZE)[0]
        assert target.calculation_method == CalculationMethod.FALLBACK_INDUSTRY_AVG
        assert target.target_annual_comp == pytest.approx(110_000)

    def test_invalid_percentile(self, calculator, employees, benchmarks, context):
        with pytest.raises(InvalidInputError):
            calculator.calculate(employees, benchmarks, context, COMPANY_SIZE, 100)


class TestDeterminism:
    def test_idempotent(self, calculator, employees, benchmarks, context):
        first = calculator.calculate(employees, benchmarks, context, COMPANY_SIZE)
        second = calculator.calculate(employees, benchmarks, context, COMPANY_SIZE)
        assert first == second
        assert repr(first) == repr(second)

    def test_same_library_snapshot_same_result(self, store, config, employees, benchmarks, context):
        a = CompensationTargetCalculator(RoleTaxonomyMatcher(store, config=config))
        b = CompensationTargetCalculator(RoleTaxonomyMatcher(InMemoryMappingStore(store.snapshot()), config=config))
        assert a.calculate(employees, benchmarks, context, COMPANY_SIZE) == \
            b.calculate(employees, benchmarks, context, COMPANY_SIZE)


class TestManualOverrides:
    def test_unforced_run_keeps_overrides_out(self, calculator, employees, benchmarks, context):
        override = manual_target(employees[0], 130_000, note="retention")
        result = calculator.calculate_detailed(employees, benchmarks, context, COMPANY_SIZE,
                                               existing_targets=[override])
        assert "e1" not in _targets_by_employee(result.targets)
        assert result.skipped_overrides == ["e1"]
        assert all(not t.is_manual_override for t in result.targets)

    def test_force_recalculates(self, calculator, employees, benchmarks, context):
        override = manual_target(employees[0], 130_000)
        targets = calculator.calculate(employees, benchmarks, context, COMPANY_SIZE,
                                       existing_targets=[override], force=True)
        assert _targets_by_employee(targets)["e1"].target_annual_comp == 115_000

    def test_override_scoped_to_scenario(self, calculator, employees, benchmarks, context):
        override = manual_target(employees[0], 130_000, scenario_id="stretch")
        targets = calculator.calculate(employees, benchmarks, context, COMPANY_SIZE, existing_targets=[override])
        assert "e1" in _targets_by_employee(targets)

    def test_manual_target(self, employees):
        target = manual_target(employees[0], 130_000, note="retention")
        assert target.is_manual_override
        assert target.calculation_method == CalculationMethod.MANUAL
        assert target.gap == 10_000
        assert target.explanation == "Manual override: retention"

    def test_negative_manual_target(self, employees):
        with pytest.raises(InvalidInputError):
            manual_target(employees[0], -1)
