"""KPI registry for SaaS / software companies.

Definitions are created once at import and never mutated. KPI ids are stable
and must never be reused for a different metric; bump REGISTRY_VERSION when a
definition or benchmark range changes.
"""

from dataclasses import dataclass
from enum import StrEnum

from orgbench.errors import InvalidInputError

REGISTRY_VERSION = "2024.2"

# Every formula the KPI engine knows how to evaluate.
FORMULA_REFS = frozenset({
    "revenue_per_employee", "span_of_control", "salary_pct_revenue", "personnel_pct_revenue",
    "high_cost_share", "low_cost_share", "headcount_change", "new_hires_pct", "turnover_pct", "tenure",
    "dept_ratio", "dept_pct", "revenue_per_dept", "dept_salary_pct_revenue", "dept_personnel_pct_revenue",
    "cost_series",
})


class KPIUnit(StrEnum):
    PERCENTAGE = "percentage"
    CURRENCY = "currency"
    RATIO = "ratio"
    YEARS = "years"
    COUNT = "count"
    FACTOR = "factor"


class KPICategory(StrEnum):
    OVERALL = "overall"
    CUSTOMER_SUCCESS = "customer_success"
    ENGINEERING = "engineering"
    FINANCE = "finance"
    HR = "hr"
    LEGAL = "legal"
    MARKETING = "marketing"
    OPERATIONS = "operations"
    PRODUCT = "product"
    PROFESSIONAL_SERVICES = "professional_services"
    SALES = "sales"
    COST_MANAGEMENT = "cost_management"


CATEGORY_NAMES = {
    KPICategory.OVERALL: "Overall",
    KPICategory.CUSTOMER_SUCCESS: "Customer Success & Support",
    KPICategory.ENGINEERING: "Engineering & Technology",
    KPICategory.FINANCE: "Finance",
    KPICategory.HR: "Human Resources",
    KPICategory.LEGAL: "Legal",
    KPICategory.MARKETING: "Marketing",
    KPICategory.OPERATIONS: "Operations",
    KPICategory.PRODUCT: "Product",
    KPICategory.PROFESSIONAL_SERVICES: "Professional Services",
    KPICategory.SALES: "Sales",
    KPICategory.COST_MANAGEMENT: "Cost Management",
}


@dataclass(frozen=True)
class BenchmarkRange:
    low: float
    median: float
    high: float


@dataclass(frozen=True)
class KPIDefinition:
    id: str
    name: str
    description: str
    category: KPICategory
    unit: KPIUnit
    formula_ref: str
    formula: str
    benchmark_range: BenchmarkRange | None = None
    higher_is_better: bool = True
    is_default: bool = False
    department: KPICategory | None = None


def _kpi(id, name, description, category, unit, formula_ref, formula, band=None, **kwargs) -> KPIDefinition:
    return KPIDefinition(
        id=id,
        name=name,
        description=description,
        category=category,
        unit=unit,
        formula_ref=formula_ref,
        formula=formula,
        benchmark_range=BenchmarkRange(*band) if band else None,
        **kwargs,
    )


C, U = KPICategory, KPIUnit

OVERALL_KPIS = [
    _kpi("revenue_per_employee", "Revenue per Employee", "Total revenue divided by total headcount",
         C.OVERALL, U.CURRENCY, "revenue_per_employee", "Total Revenue / Total Employees",
         (150_000, 250_000, 400_000), is_default=True),
    _kpi("span_of_control", "Span of Control", "Ratio of individual contributors to managers",
         C.OVERALL, U.RATIO, "span_of_control", "Total ICs / Total Managers",
         (4, 6, 8), is_default=True),
    _kpi("salary_cost_pct_revenue", "Salary Cost as % of Revenue", "Total salary costs as percentage of revenue",
         C.OVERALL, U.PERCENTAGE, "salary_pct_revenue", "(Total Salaries / Total Revenue) × 100",
         (30, 45, 60), higher_is_better=False, is_default=True),
    _kpi("personnel_cost_pct_revenue", "Personnel Cost as % of Revenue",
         "Total personnel costs (salaries + benefits + taxes) as percentage of revenue",
         C.OVERALL, U.PERCENTAGE, "personnel_pct_revenue", "(Total Personnel Costs / Total Revenue) × 100",
         (40, 55, 70), higher_is_better=False, is_default=True),
    _kpi("employees_high_cost_countries", "Employees in High Cost Countries (%)",
         "Percentage of employees in high-cost labor markets (US, Western Europe, etc.)",
         C.OVERALL, U.PERCENTAGE, "high_cost_share", "(Employees in High Cost Countries / Total Employees) × 100",
         (30, 50, 80), higher_is_better=False),
    _kpi("employees_low_cost_countries", "Employees in Low Cost Countries (%)",
         "Percentage of employees in low-cost labor markets (Eastern Europe, Asia, etc.)",
         C.OVERALL, U.PERCENTAGE, "low_cost_share", "(Employees in Low Cost Countries / Total Employees) × 100",
         (20, 50, 70)),
    _kpi("annual_headcount_change", "Annual Headcount Change (%)", "Year-over-year change in total headcount",
         C.OVERALL, U.PERCENTAGE, "headcount_change",
         "((Current Headcount - Last Year Headcount) / Last Year Headcount) × 100",
         (-5, 20, 50)),
    _kpi("new_hires_pct", "New Hires as % of Employees", "New hires in the trailing year as percentage of employees",
         C.OVERALL, U.PERCENTAGE, "new_hires_pct", "(New Hires / Total Employees) × 100",
         (5, 15, 30)),
    _kpi("turnover_pct", "Turnover as % of Employees", "Departures in the trailing year as percentage of employees",
         C.OVERALL, U.PERCENTAGE, "turnover_pct", "(Departures / Average Headcount) × 100",
         (5, 12, 20), higher_is_better=False),
    _kpi("employee_tenure", "Employee Tenure", "Average years of service for current employees",
         C.OVERALL, U.YEARS, "tenure", "Average(As-of Date - Start Date)",
         (1.5, 2.5, 4)),
]


@dataclass(frozen=True)
class DepartmentProfile:
    prefix: str
    category: KPICategory
    label: str
    employee_ratio: tuple[float, float, float]
    revenue_per_head: tuple[float, float, float]
    salary_pct: tuple[float, float, float]
    personnel_pct: tuple[float, float, float]
    default_pct: bool = False


DEPARTMENTS = (
    DepartmentProfile("css", C.CUSTOMER_SUCCESS, "CS&S", (0.08, 0.12, 0.18), (800_000, 1_200_000, 2_000_000),
                   (5, 8, 12), (6, 10, 15), default_pct=True),
    DepartmentProfile("eng", C.ENGINEERING, "E&T", (0.25, 0.35, 0.50), (400_000, 650_000, 1_000_000),
                   (15, 22, 30), (18, 28, 38), default_pct=True),
    DepartmentProfile("finance", C.FINANCE, "Finance", (0.01, 0.03, 0.05), (3_000_000, 6_000_000, 12_000_000),
                   (0.5, 1.5, 3), (0.6, 2, 4)),
    DepartmentProfile("hr", C.HR, "HR", (0.01, 0.02, 0.04), (4_000_000, 8_000_000, 15_000_000),
                   (0.4, 1, 2), (0.5, 1.3, 2.5)),
    DepartmentProfile("legal", C.LEGAL, "Legal", (0.005, 0.01, 0.02), (8_000_000, 15_000_000, 30_000_000),
                   (0.2, 0.5, 1.2), (0.3, 0.7, 1.5)),
    DepartmentProfile("marketing", C.MARKETING, "Marketing", (0.05, 0.10, 0.15), (1_000_000, 2_000_000, 4_000_000),
                   (3, 6, 10), (4, 8, 13), default_pct=True),
    DepartmentProfile("ops", C.OPERATIONS, "Operations", (0.03, 0.06, 0.10), (1_500_000, 3_000_000, 6_000_000),
                   (1.5, 3, 6), (2, 4, 8)),
    DepartmentProfile("product", C.PRODUCT, "Product", (0.05, 0.08, 0.12), (1_200_000, 2_500_000, 5_000_000),
                   (2, 5, 8), (3, 6, 10), default_pct=True),
    DepartmentProfile("ps", C.PROFESSIONAL_SERVICES, "PS", (0.03, 0.08, 0.15), (800_000, 1_500_000, 3_000_000),
                   (2, 5, 10), (3, 6, 13)),
    DepartmentProfile("sales", C.SALES, "Sales", (0.10, 0.15, 0.25), (800_000, 1_500_000, 2_500_000),
                   (8, 12, 18), (10, 15, 22), default_pct=True),
)


def department_kpis(profile: DepartmentProfile) -> list[KPIDefinition]:
    p, label, cat = profile.prefix, profile.label, profile.category
    pct_band = tuple(round(v * 100, 4) for v in profile.employee_ratio)
    common = {"department": cat}
    return [
        _kpi(f"{p}_employee_ratio", f"{label} to Employee Ratio",
             f"{label} headcount as ratio to total headcount",
             cat, U.RATIO, "dept_ratio", f"{label} Employees / Total Employees",
             profile.employee_ratio, **common),
        _kpi(f"{p}_pct_employees", f"{label} as % of Employees",
             f"{label} headcount as percentage of total employees",
             cat, U.PERCENTAGE, "dept_pct", f"({label} Employees / Total Employees) × 100",
             pct_band, is_default=profile.default_pct, **common),
        _kpi(f"revenue_per_{p}", f"Revenue per {label} Employee", f"Revenue divided by {label} headcount",
             cat, U.CURRENCY, "revenue_per_dept", f"Total Revenue / {label} Employees",
             profile.revenue_per_head, **common),
        _kpi(f"{p}_salary_pct_revenue", f"{label} Salary Cost as % of Revenue",
             f"{label} salary costs as percentage of revenue",
             cat, U.PERCENTAGE, "dept_salary_pct_revenue", f"({label} Salaries / Total Revenue) × 100",
             profile.salary_pct, higher_is_better=False, **common),
        _kpi(f"{p}_personnel_pct_revenue", f"{label} Personnel Cost as % of Revenue",
             f"{label} total personnel costs as percentage of revenue",
             cat, U.PERCENTAGE, "dept_personnel_pct_revenue", f"({label} Personnel Costs / Total Revenue) × 100",
             profile.personnel_pct, higher_is_better=False, **common),
    ]


COST_MANAGEMENT_KPIS = [
    _kpi("employer_cost_ratio", "Employer Cost Ratio", "Total employer costs relative to gross compensation",
         C.COST_MANAGEMENT, U.FACTOR, "cost_series", "Latest Total Employer Cost / Gross Compensation",
         (1.15, 1.25, 1.45), higher_is_better=False),
    _kpi("monthly_cost_growth", "Monthly Cost Growth Rate", "Change in total employer cost versus the prior month",
         C.COST_MANAGEMENT, U.PERCENTAGE, "cost_series", "((Latest Cost - Prior Cost) / Prior Cost) × 100",
         (-5, 2, 10), higher_is_better=False),
    _kpi("cost_per_employee_trend", "Cost per Employee Trend", "Change in average cost per employee month over month",
         C.COST_MANAGEMENT, U.PERCENTAGE, "cost_series",
         "((Latest Cost per Employee - Prior Cost per Employee) / Prior Cost per Employee) × 100",
         (-3, 2, 10), higher_is_better=False),
    _kpi("runway_months", "Cash Runway", "Months of cash runway at the latest monthly employer cost",
         C.COST_MANAGEMENT, U.COUNT, "cost_series", "Current Cash Balance / Latest Monthly Employer Cost",
         (6, 12, 18)),
]


def _build_registry() -> dict[str, KPIDefinition]:
    definitions = list(OVERALL_KPIS)
    for profile in DEPARTMENTS:
        definitions.extend(department_kpis(profile))
    definitions.extend(COST_MANAGEMENT_KPIS)

    registry: dict[str, KPIDefinition] = {}
    for definition in definitions:
        if definition.id in registry:
            raise RuntimeError(f"Duplicate KPI id: {definition.id}")
        registry[definition.id] = definition
    return registry


KPI_REGISTRY: dict[str, KPIDefinition] = _build_registry()


def get_definition(kpi_id: str) -> KPIDefinition:
    try:
        return KPI_REGISTRY[kpi_id]
    except KeyError:
        raise InvalidInputError(f"Unknown KPI id: {kpi_id}") from None


def kpis_by_category(category: KPICategory) -> list[KPIDefinition]:
    return [d for d in KPI_REGISTRY.values() if d.category == category]


def default_kpis() -> list[KPIDefinition]:
    return [d for d in KPI_REGISTRY.values() if d.is_default]


def validate_registry(registry: dict[str, KPIDefinition] = KPI_REGISTRY) -> list[str]:
    """Return a message for every definition with a mismatched key, an unknown
    formula or a malformed benchmark range."""
    errors = []
    for kpi_id, definition in registry.items():
        if kpi_id != definition.id:
            errors.append(f"Registry key '{kpi_id}' does not match definition id '{definition.id}'")
        if definition.formula_ref not in FORMULA_REFS:
            errors.append(f"KPI '{kpi_id}' uses unknown formula '{definition.formula_ref}'")
        band = definition.benchmark_range
        if band is not None and not band.low <= band.median <= band.high:
            errors.append(f"KPI '{kpi_id}' has a non-monotonic benchmark range")
    return errors
