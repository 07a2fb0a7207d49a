from decimal import Decimal, ROUND_HALF_UP

HUNDREDTH = Decimal('0.01')


def rate(numerator: int, denominator: int) -> float:
    """Percentage with two decimals; 0 when there is nothing to divide by."""
    if not denominator or denominator <= 0:
        return 0.0
    value = Decimal(numerator) * 100 / Decimal(denominator)
    return float(value.quantize(HUNDREDTH, rounding=ROUND_HALF_UP))
