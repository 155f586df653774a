"""Conversion between human-readable token amounts and integer base units.

All conversions run under a 78-digit Decimal context, enough for any uint256
value (up to ~10^77), so no rounding ever happens.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from offerfill.safe_int import U

# 78 digits of precision, enough for any uint256 value (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)

# ERC20 decimals are a uint8, but anything past 77 cannot fit a uint256 unit
MAX_DECIMALS = 77


def parse_units(amount: str | int | Decimal, decimals: int) -> int:
    """Convert a human-readable amount into integer base units.

    Args:
        amount: Amount like "1.5", 2 or Decimal("0.000001")
        decimals: Token decimal precision

    Returns:
        Amount scaled by 10**decimals

    Raises:
        ValueError: If the amount is negative, not a number, or has more
            fractional digits than the token supports
    """
    _validate_decimals(decimals)
    if isinstance(amount, float):
        raise ValueError("Float amounts are not accepted; pass a string or Decimal")
    try:
        value = Decimal(amount)
    except InvalidOperation as err:
        raise ValueError(f"Invalid amount: {amount!r}") from err
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
        return U(int(scaled)).value


def format_units(amount: int, decimals: int) -> str:
    """Convert integer base units into a human-readable decimal string.

    Trailing fractional zeros are stripped ("1.50" -> "1.5", "2.0" -> "2").
    """
    _validate_decimals(decimals)
    U(amount)
    whole, frac = divmod(amount, 10**decimals)
    if frac == 0:
        return str(whole)
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{frac_str}"


def _validate_decimals(decimals: int) -> None:
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"decimals must be within [0, {MAX_DECIMALS}], got {decimals}")


@dataclass(frozen=True)
class CollateralUnits:
    """Decimal precision of the collateral token for one session.

    The precision is read from the token once and then treated as
    constant; every amount entered or reported during the session goes
    through this object.
    """

    decimals: int

    def __post_init__(self) -> None:
        _validate_decimals(self.decimals)

    def parse(self, amount: str | int | Decimal) -> int:
        """Human-readable amount -> integer base units."""
        return parse_units(amount, self.decimals)

    def format(self, amount: int) -> str:
        """Integer base units -> human-readable amount."""
        return format_units(amount, self.decimals)


__all__ = [
    "CollateralUnits",
    "DECIMAL_HIGH_PREC_CONTEXT",
    "format_units",
    "parse_units",
]
