# Copyright 2025 R5
# This file is part of the R5 Core library.
#
# This software is provided "as is", without warranty of any kind,
# express or implied, including but not limited to the warranties
# of merchantability, fitness for a particular purpose and
# noninfringement. In no event shall the authors or copyright
# holders be liable for any claim, damages, or other liability,
# whether in an action of contract, tort or otherwise, arising
# from, out of or in connection with the software or the use or
# other dealings in the software.

from decimal import Decimal, ROUND_DOWN, localcontext

# 1 display unit = 10^18 smallest units (wei), 1 intermediate unit (gwei) = 10^9 wei
WEI_PER_UNIT = 10 ** 18
WEI_PER_GWEI = 10 ** 9

DISPLAY_DECIMALS = 6
INTERMEDIATE_DECIMALS = 9

# Enough digits for any 256-bit wei amount plus its fractional part.
PRECISION = 100


def _to_decimal(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # repr() gives the shortest string that round-trips, so 0.000001
        # stays 0.000001 instead of its binary expansion.
        return Decimal(repr(amount))
    return Decimal(amount)


def to_smallest_unit(display_amount) -> int:
    """Convert a display-unit amount (e.g. 0.000003) to wei, truncating."""
    with localcontext() as ctx:
        ctx.prec = PRECISION
        wei = _to_decimal(display_amount) * WEI_PER_UNIT
        return int(wei.to_integral_value(rounding=ROUND_DOWN))


def _format(amount: int, divisor: int, decimals: int) -> str:
    with localcontext() as ctx:
        ctx.prec = PRECISION
        value = Decimal(int(amount)) / divisor
        quantum = Decimal(1).scaleb(-decimals)
        return format(value.quantize(quantum, rounding=ROUND_DOWN), "f")


def to_display_unit(smallest_unit_amount: int) -> str:
    """Wei to display units with 6 fractional digits. Lossy by design of the report."""
    return _format(smallest_unit_amount, WEI_PER_UNIT, DISPLAY_DECIMALS)


def to_intermediate_unit(smallest_unit_amount: int) -> str:
    """Wei to gwei with 9 fractional digits."""
    return _format(smallest_unit_amount, WEI_PER_GWEI, INTERMEDIATE_DECIMALS)
