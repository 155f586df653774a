"""Checked uint256 wrapper for arithmetic on token amounts.

This module provides SafeUint, a lightweight wrapper that makes arithmetic
on settlement amounts behave like the settlement layer's checked math:
- Results above 2^256-1 raise Overflow (no wrapping)
- Subtraction below zero raises Underflow
- Division by zero raises DivisionByZero
- Division truncates toward zero

Usage pattern:
    from offerfill.safe_int import SafeUint, U

    def proportional(amount: int, num: int, den: int) -> int:
        # Wrap at entry
        return U(amount).mul_div(num, den).value
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1


class AmountError(ArithmeticError):
    """Base class for SafeUint arithmetic errors."""

    pass


class DivisionByZero(AmountError):
    """Division or modulo by zero."""

    pass


class Underflow(AmountError):
    """Result would be negative."""

    pass


class Overflow(AmountError):
    """Result exceeds uint256 maximum."""

    pass


def _check(value: int, expr: str) -> int:
    if value < 0:
        raise Underflow(f"Underflow: {expr} = {value}")
    if value > UINT256_MAX:
        raise Overflow(f"Overflow: {expr} exceeds uint256 max")
    return value


class SafeUint:
    """Unsigned 256-bit integer with checked arithmetic.

    Every operation re-validates the uint256 range of its result, so a
    chain of operations fails at the first step that leaves the range,
    the same way checked Solidity arithmetic reverts.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeUint) -> None:
        """Create a SafeUint from an integer or another SafeUint.

        Raises:
            TypeError: If value is not an int or SafeUint (bools are rejected)
            Underflow: If value is negative
            Overflow: If value exceeds 2^256-1
        """
        if isinstance(value, SafeUint):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = _check(value, str(value))
        else:
            raise TypeError(f"SafeUint requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeUint({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeUint | int) -> SafeUint:
        """Add two values.

        Raises:
            Overflow: If the sum exceeds 2^256-1
        """
        other_val = _extract_value(other)
        return SafeUint(_check(self._value + other_val, f"{self._value} + {other_val}"))

    def __radd__(self, other: int) -> SafeUint:
        return self.__add__(other)

    def __sub__(self, other: SafeUint | int) -> SafeUint:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        return SafeUint(_check(self._value - other_val, f"{self._value} - {other_val}"))

    def __rsub__(self, other: int) -> SafeUint:
        return SafeUint(_check(other - self._value, f"{other} - {self._value}"))

    def __mul__(self, other: SafeUint | int) -> SafeUint:
        """Multiply two values.

        Raises:
            Overflow: If the product exceeds 2^256-1
        """
        other_val = _extract_value(other)
        return SafeUint(_check(self._value * other_val, f"{self._value} * {other_val}"))

    def __rmul__(self, other: int) -> SafeUint:
        return self.__mul__(other)

    def __floordiv__(self, other: SafeUint | int) -> SafeUint:
        """Integer division, truncating toward zero.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeUint(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeUint:
        if self._value == 0:
            raise DivisionByZero(f"Division by zero: {other} // 0")
        return SafeUint(other // self._value)

    def __mod__(self, other: SafeUint | int) -> SafeUint:
        """Modulo operation.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Modulo by zero: {self._value} % 0")
        return SafeUint(self._value % other_val)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeUint):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return NotImplemented
        return not result

    def __lt__(self, other: SafeUint | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeUint | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeUint | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeUint | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        """True if non-zero."""
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def mul_div(self, numerator: SafeUint | int, denominator: SafeUint | int) -> SafeUint:
        """Compute floor(self * numerator / denominator).

        The intermediate product is range-checked, matching a settlement
        layer that multiplies before it divides.

        Raises:
            Overflow: If self * numerator exceeds 2^256-1
            DivisionByZero: If denominator is zero
        """
        return (self * numerator) // denominator

    def min(self, other: SafeUint | int) -> SafeUint:
        """Return minimum of self and other."""
        return SafeUint(min(self._value, _extract_value(other)))

    def checked_sub(self, other: SafeUint | int) -> SafeUint | None:
        """Subtract, returning None on underflow instead of raising."""
        result = self._value - _extract_value(other)
        if result < 0:
            return None
        return SafeUint(result)

    @classmethod
    def zero(cls) -> SafeUint:
        """Create a SafeUint with value 0."""
        return cls(0)

    @classmethod
    def from_str(cls, s: str) -> SafeUint:
        """Parse SafeUint from a decimal string.

        Raises:
            ValueError: If string is not a valid integer
        """
        return cls(int(s))


def is_uint256(value: int) -> bool:
    """Check if value fits in uint256 without raising."""
    return 0 <= value <= UINT256_MAX


def _extract_value(x: SafeUint | int) -> int:
    if isinstance(x, SafeUint):
        return x._value
    return x


# Convenience alias for concise code
U = SafeUint
