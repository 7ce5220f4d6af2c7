"""Runtime values for Asa.

This module defines the value domain produced by the interpreter. A value
is exactly one of a 32-bit signed number, a string or a boolean. Values are
immutable, and equality only holds between two values of the same kind:
`NumberVal(1)` never equals `BoolVal(True)`.

It also holds the integer helpers the interpreter uses so that arithmetic
stays inside the 32-bit range.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


I32_MIN = -2 ** 31
I32_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class NumberVal:
    value: int

    def __repr__(self) -> str:
        return f"Number({self.value})"


@dataclass(frozen=True)
class StringVal:
    value: str

    def __repr__(self) -> str:
        return f"String({self.value!r})"


@dataclass(frozen=True)
class BoolVal:
    value: bool

    def __repr__(self) -> str:
        return f"Bool({'true' if self.value else 'false'})"


Value = Union[NumberVal, StringVal, BoolVal]


@dataclass
class ErrorVal:
    """Describes an Asa runtime failure.

    `name` is the failure category (for example 'NameError' or
    'TypeError') and `message` the human readable explanation.
    """
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


def check_i32(n: int) -> int:
    """Return `n` unchanged, or raise OverflowError if it does not fit in 32 bits."""
    if n < I32_MIN or n > I32_MAX:
        raise OverflowError(f"{n} does not fit in a 32-bit integer")
    return n


def int_divide(a: int, b: int) -> int:
    """Integer division truncating toward zero.

    Python's `//` floors, so the quotient is computed on magnitudes and the
    sign applied afterwards. Raises ZeroDivisionError when `b` is zero.
    """
    if b == 0:
        raise ZeroDivisionError('division by zero')
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    return check_i32(quotient)


def int_power(base: int, exponent: int) -> int:
    """Raise `base` to a non-negative `exponent` by repeated multiplication."""
    if exponent < 0:
        raise ValueError('negative exponent')
    # bases 0, 1 and -1 never overflow the loop below
    if base in (0, 1):
        return base if exponent > 0 else 1
    if base == -1:
        return -1 if exponent % 2 else 1
    result = 1
    for _ in range(exponent):
        result = check_i32(result * base)
    return result


def type_name(value: Value) -> str:
    """Return the Asa type name of a runtime value."""
    if isinstance(value, NumberVal):
        return 'Number'
    if isinstance(value, StringVal):
        return 'String'
    if isinstance(value, BoolVal):
        return 'Bool'
    return type(value).__name__


def to_string(value: Value) -> str:
    """Render a value the way the CLI prints results."""
    if isinstance(value, BoolVal):
        return 'true' if value.value else 'false'
    if isinstance(value, NumberVal):
        return str(value.value)
    if isinstance(value, StringVal):
        return value.value
    return str(value)
