"""Cost-management KPIs derived from the monthly employer cost series."""

import logging
from collections.abc import Iterable

from orgbench.domains.kpis.calculator import KPIValue, build_value
from orgbench.domains.kpis.cost_series import MonthlyEmployerCost, cost_series_values
from orgbench.domains.kpis.definitions import get_definition

logger = logging.getLogger(__name__)


def cost_metrics(
    monthly_costs: Iterable[MonthlyEmployerCost],
    cash_balance: float | None = None,
    currency: str = "EUR",
) -> list[KPIValue]:
    """KPI values for the cost series alone, ready to aggregate with the
    workforce KPIs when no employee records are at hand."""
    series = list(monthly_costs)
    values = cost_series_values(series, cash_balance)
    logger.debug("Derived cost metrics from %d periods", len(series))
    return [build_value(get_definition(kpi_id), value, currency=currency) for kpi_id, value in values.items()]
