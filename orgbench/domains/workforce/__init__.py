"""Workforce structure: department groups, structural ratios, outliers and tenure."""

from orgbench.domains.workforce.outliers import HighCostOutlier, LowSpanManager, high_cost_outliers, low_span_managers
from orgbench.domains.workforce.structure import (
    DepartmentGroup,
    DepartmentStats,
    average_span_of_control,
    department_breakdown,
    department_group,
    manager_to_ic_ratio,
    rd_to_gtm_ratio,
)
from orgbench.domains.workforce.summary import WorkforceSummary, summarize_workforce
from orgbench.domains.workforce.tenure import (
    RetentionRisk,
    TenureBucket,
    TenureGroup,
    TenureMetrics,
    format_tenure,
    tenure_bucket,
    tenure_metrics,
    tenure_months,
)
from orgbench.utils.types import EmployeeLevel, EmployeeRecord


def validate() -> dict[str, str | int | float]:
    employees = [
        EmployeeRecord("m1", "Engineering", "Engineering Manager", 150_000, level=EmployeeLevel.MANAGER),
        EmployeeRecord("e1", "Engineering", "Software Engineer", 90_000, manager_id="m1"),
        EmployeeRecord("e2", "Sales", "Account Executive", 80_000, manager_id="m1"),
    ]
    summary = summarize_workforce(employees)
    if summary.headcount != len(employees) or summary.rd_to_gtm != 2.0:
        return {"status": "error", "message": "Unexpected structure for sample workforce"}
    return {"status": "ok", "headcount": summary.headcount, "groups": len(summary.departments)}
