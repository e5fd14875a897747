from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


def round_half_up(x: float) -> int:
    # 2.5 -> 3, matching how percentages are shown to users
    return int(Decimal(str(x)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_float(v, default: float = 0.0) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def fmt_amount(v, places: int = 2) -> str:
    # thousands separator, no scientific notation
    q = Decimal(10) ** -places
    try:
        return format(Decimal(str(v)).quantize(q), ",f")  # e.g. 359,011.06
    except (InvalidOperation, ValueError):
        return "0.00"
