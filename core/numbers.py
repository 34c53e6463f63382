from decimal import ROUND_HALF_UP, Decimal


def round2(value: float) -> float:
    """Round half-up to 2 decimals (1.005 -> 1.01, not banker's rounding)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def percent(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, rounded; 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return round2(numerator / denominator * 100)
