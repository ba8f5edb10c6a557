from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like a spreadsheet does: 2.25 -> 2.3, 7.45 -> 7.5."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: float, whole: float) -> int:
    if not whole:
        return 0
    return int(round_half_up(part / whole * 100, 0))
