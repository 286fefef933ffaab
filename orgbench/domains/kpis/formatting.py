"""Display formatting and benchmark status for KPI values."""

from enum import StrEnum

from orgbench.domains.kpis.definitions import KPIDefinition, KPIUnit

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "CHF": "CHF "}


class BenchmarkStatus(StrEnum):
    GOOD = "good"
    WARNING = "warning"
    BAD = "bad"


def format_value(value: float | None, unit: KPIUnit, currency: str = "EUR") -> str:
    if value is None:
        return "N/A"
    match unit:
        case KPIUnit.PERCENTAGE:
            return f"{value:.1f}%"
        case KPIUnit.CURRENCY:
            symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
            return f"{symbol}{value / 1_000_000:.2f}M"
        case KPIUnit.RATIO:
            return f"{value:.2f}:1"
        case KPIUnit.YEARS:
            return f"{value:.1f} years"
        case KPIUnit.COUNT:
            return str(round(value))
        case KPIUnit.FACTOR:
            return f"{value:.2f}x"
        case _:
            return f"{value:.2f}"


def benchmark_status(value: float | None, definition: KPIDefinition) -> BenchmarkStatus | None:
    """Compare a value to its definition's benchmark range.

    Higher-is-better KPIs are good at or above the median and bad below the
    low anchor. Lower-is-better KPIs mirror that around the high anchor.
    """
    band = definition.benchmark_range
    if value is None or band is None:
        return None
    if definition.higher_is_better:
        if value >= band.median:
            return BenchmarkStatus.GOOD
        if value >= band.low:
            return BenchmarkStatus.WARNING
        return BenchmarkStatus.BAD
    if value <= band.median:
        return BenchmarkStatus.GOOD
    if value <= band.high:
        return BenchmarkStatus.WARNING
    return BenchmarkStatus.BAD
