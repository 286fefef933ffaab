"""Compensation target planning.

Turns resolved roles and market benchmarks into per-employee target
compensation with a documented calculation method.
"""

from orgbench.domains.compensation.targets import (
    DEFAULT_SCENARIO,
    CalculationMethod,
    CompensationTarget,
    CompensationTargetCalculator,
    TargetCalculation,
    UnresolvedTarget,
    manual_target,
)
from orgbench.domains.benchmarks import BenchmarkRow
from orgbench.domains.roles import MappingContext
from orgbench.utils.types import EmployeeRecord


def validate() -> dict[str, str | int]:
    """Run a one-employee calculation against a single benchmark row."""
    employee = EmployeeRecord(id="validate-1", department="Engineering", role="Software Developer",
                              total_compensation=65_000)
    row = BenchmarkRow("Engineering", "Software Engineer", "Mid", sample_size=10,
                       p25_total_comp=60_000, p50_total_comp=70_000, p75_total_comp=80_000)
    calculation = CompensationTargetCalculator().calculate_detailed(
        [employee], [row], MappingContext(), company_size=None,
    )
    if calculation.unresolved or not calculation.targets:
        reasons = "; ".join(u.reason for u in calculation.unresolved) or "no target produced"
        return {"status": "error", "message": reasons}
    return {"status": "ok", "targets": len(calculation.targets)}
