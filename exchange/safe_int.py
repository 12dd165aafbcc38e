"""Checked uint256 arithmetic for reserve, share and token amounts.

SafeInt wraps a non-negative integer and makes every operation behave like
checked arithmetic on a 256-bit unsigned machine word:
- Addition and multiplication beyond 2^256-1 raise ArithmeticOverflow
- Subtraction below zero raises Underflow
- Division by zero raises DivisionByZero

Usage pattern:
    from exchange.safe_int import S

    def shares_for(deposit: int, supply: int, reserve: int) -> int:
        # Wrap at entry
        sd, ss, sr = S(deposit), S(supply), S(reserve)

        # Natural arithmetic - automatically checked
        minted = (ss * sd) // sr  # Raises if sr == 0

        # Unwrap at exit
        return minted.value
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class ArithmeticOverflow(SafeIntError):
    """Result exceeds the uint256 maximum."""

    pass


def _check(value: int, expression: str) -> int:
    if value > UINT256_MAX:
        raise ArithmeticOverflow(f"Overflow: {expression} exceeds uint256 max")
    return value


class SafeInt:
    """Unsigned 256-bit integer with checked arithmetic.

    Construction validates the range, so a SafeInt always holds a value in
    [0, 2^256-1]. Every operator returns a new SafeInt or raises; there is no
    wrapping and no silent clamping.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
            Underflow: If value is negative
            ArithmeticOverflow: If value exceeds 2^256-1
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"Negative value cannot be uint256: {value}")
        self._value = _check(value, str(value))

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values.

        Raises:
            ArithmeticOverflow: If the sum exceeds uint256
        """
        other_val = _extract_value(other)
        return SafeInt(_check(self._value + other_val, f"{self._value} + {other_val}"))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other).__add__(self)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(other).__sub__(self)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        """Multiply two values.

        Raises:
            ArithmeticOverflow: If the product exceeds uint256
        """
        other_val = _extract_value(other)
        return SafeInt(_check(self._value * other_val, f"{self._value} * {other_val}"))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other).__mul__(self)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, truncating toward zero.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeInt:
        return SafeInt(other).__floordiv__(self)

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt does not support true division; use //")

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        """True if non-zero."""
        return self._value != 0

    def __index__(self) -> int:
        return self._value


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
