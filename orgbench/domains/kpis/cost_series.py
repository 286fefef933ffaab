"""Cost-management KPI values from the monthly employer cost series."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from orgbench.domains.kpis.ratios import percent_of, safe_div

COST_SERIES_FORMULA = "cost_series"


@dataclass(frozen=True)
class MonthlyEmployerCost:
    period: date
    total_cost: float
    gross_compensation: float | None = None
    headcount: int | None = None

    @property
    def cost_ratio(self) -> float | None:
        return safe_div(self.total_cost, self.gross_compensation)

    @property
    def cost_per_employee(self) -> float | None:
        return safe_div(self.total_cost, self.headcount)


def _change_pct(current: float | None, previous: float | None) -> float | None:
    if current is None or previous is None:
        return None
    return percent_of(current - previous, previous)


def cost_series_values(
    monthly_costs: Iterable[MonthlyEmployerCost],
    cash_balance: float | None = None,
) -> dict[str, float | None]:
    """Employer cost ratio, month-over-month growth, cost per employee trend
    and cash runway, keyed by KPI id and computed from the two most recent
    periods. Periods may arrive in any order."""
    series = sorted(monthly_costs, key=lambda c: c.period)
    latest = series[-1] if series else None
    previous = series[-2] if len(series) > 1 else None

    return {
        "employer_cost_ratio": latest.cost_ratio if latest else None,
        "monthly_cost_growth": _change_pct(
            latest.total_cost if latest else None,
            previous.total_cost if previous else None,
        ),
        "cost_per_employee_trend": _change_pct(
            latest.cost_per_employee if latest else None,
            previous.cost_per_employee if previous else None,
        ),
        "runway_months": safe_div(cash_balance, latest.total_cost) if latest else None,
    }
