import pandas as pd


def safe_div(numerator: float | None, denominator: float | None) -> float | None:
    """None instead of a division by a zero or missing denominator."""
    if numerator is None or denominator is None or pd.isna(denominator) or denominator == 0:
        return None
    return float(numerator) / float(denominator)


def percent_of(numerator: float | None, denominator: float | None) -> float | None:
    ratio = safe_div(numerator, denominator)
    return None if ratio is None else ratio * 100
