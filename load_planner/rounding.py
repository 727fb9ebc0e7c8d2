from __future__ import annotations

from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP


DIM_QUANT = Decimal("0.001")
RATIO_QUANT = Decimal("0.0001")


def ceil_decimal(value: Decimal, quant: Decimal) -> Decimal:
    return value.quantize(quant, rounding=ROUND_CEILING)


def ceil_cm(value: Decimal) -> Decimal:
    return ceil_decimal(value, DIM_QUANT)


def round_ratio(value: Decimal) -> Decimal:
    return value.quantize(RATIO_QUANT, rounding=ROUND_HALF_UP)


def cm3_to_m3(value: Decimal) -> Decimal:
    return ceil_decimal(value / Decimal("1000000"), DIM_QUANT)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
