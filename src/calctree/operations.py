"""Core arithmetic and logic operations plus the operation dispatch table."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Callable

from calctree.exceptions import (
    DivisionByZeroError,
    InvalidInputError,
    InvalidOperationError,
    OutOfBoundsError,
)
from calctree.validators import validate_boolean, validate_number

# Threshold for overflow detection
OVERFLOW_THRESHOLD = 1e307


def _finite(result: float, name: str, a: float, b: float) -> float:
    if math.isinf(result):
        raise OutOfBoundsError(name, a, b)
    return result


def add(a: float, b: float) -> float:
    """Sum of a and b; OutOfBoundsError if it overflows."""
    validate_number(a)
    validate_number(b)
    return _finite(a + b, "addition", a, b)


def subtract(a: float, b: float) -> float:
    """Difference a - b; OutOfBoundsError if it overflows."""
    validate_number(a)
    validate_number(b)
    return _finite(a - b, "subtraction", a, b)


def multiply(a: float, b: float) -> float:
    """
    Product of a and b.

    Overflow is detected before multiplying, so the product is never infinite.

    Raises:
        InvalidInputError: If an operand is not a finite number
        OutOfBoundsError: If |a * b| would exceed OVERFLOW_THRESHOLD
    """
    validate_number(a)
    validate_number(b)

    if a != 0 and b != 0 and abs(a) > OVERFLOW_THRESHOLD / abs(b):
        raise OutOfBoundsError("multiplication", a, b)

    return a * b


def divide(a: float, b: float) -> float:
    """
    Quotient a / b.

    Raises:
        InvalidInputError: If an operand is not a finite number
        DivisionByZeroError: If b is zero, carrying a as the numerator
        OutOfBoundsError: If a tiny divisor pushes the quotient to infinity
    """
    validate_number(a)
    validate_number(b)

    if b == 0:
        raise DivisionByZeroError(a)

    return _finite(a / b, "division", a, b)


def power(base: float, exponent: float) -> float:
    """
    Raise base to the power of exponent with overflow protection.

    Raises:
        InvalidInputError: If inputs are invalid or computation is undefined
        OutOfBoundsError: If result would overflow
    """
    validate_number(base)
    validate_number(exponent)

    if base == 0 and exponent < 0:
        raise InvalidInputError((base, exponent), "0 cannot be raised to negative power")

    if base < 0 and not float(exponent).is_integer():
        raise InvalidInputError((base, exponent), "Negative base with non-integer exponent")

    try:
        result = math.pow(base, exponent)
    except OverflowError as e:
        raise OutOfBoundsError("exponentiation", base, exponent) from e
    except ValueError as e:
        raise InvalidInputError((base, exponent), str(e)) from e

    if math.isinf(result):
        raise OutOfBoundsError("exponentiation", base, exponent)

    return result


def square(a: float) -> float:
    """Square a number."""
    return multiply(a, a)


def square_root(a: float) -> float:
    """
    Square root of a non-negative number.

    Raises:
        OutOfBoundsError: If a is negative
    """
    validate_number(a)
    if a < 0:
        raise OutOfBoundsError("square root", a)
    return math.sqrt(a)


def natural_log(a: float) -> float:
    """
    Natural logarithm of a positive number.

    Raises:
        OutOfBoundsError: If a is zero or negative
    """
    validate_number(a)
    if a <= 0:
        raise OutOfBoundsError("natural log", a)
    return math.log(a)


def logical_and(*operands: float) -> float:
    """True (1.0) only if every operand is 1."""
    return float(all([validate_boolean(o, "and") for o in operands]))


def logical_or(*operands: float) -> float:
    """True (1.0) if any operand is 1."""
    return float(any([validate_boolean(o, "or") for o in operands]))


def logical_xor(*operands: float) -> float:
    """True (1.0) if an odd number of operands are 1."""
    flags = [validate_boolean(o, "xor") for o in operands]
    return float(reduce(lambda acc, flag: acc ^ flag, flags, False))


def logical_not(a: float) -> float:
    """Negate a single boolean operand."""
    return float(not validate_boolean(a, "not"))


def set_value(a: float) -> float:
    """Replace the current value with a."""
    return float(validate_number(a))


def clear_value() -> float:
    """Reset to zero."""
    return 0.0


class Operation(str, Enum):
    """Closed set of operations a history node can record."""

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    POW = "pow"
    SQUARE = "sqr"
    SQRT = "sqrt"
    LN = "ln"
    AND = "and"
    OR = "or"
    XOR = "xor"
    NOT = "not"
    SET = "set"
    CLEAR = "clear"

    @classmethod
    def from_name(cls, name: str) -> Operation:
        """Look up an operation by command name, symbol or long alias."""
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidOperationError(name, "Unknown operation") from None


_ALIASES = {
    "+": "add",
    "-": "sub",
    "*": "mul",
    "/": "div",
    "^": "pow",
    "subtract": "sub",
    "multiply": "mul",
    "divide": "div",
    "power": "pow",
    "square": "sqr",
}


@dataclass(frozen=True)
class OperationSpec:
    """How an operation is invoked and labelled.

    ``arity`` is the exact operand count, or None for operations taking two or more.
    """

    function: Callable[..., float]
    symbol: str
    arity: int | None
    logical: bool = False

    @property
    def min_operands(self) -> int:
        return 2 if self.arity is None else self.arity

    def accepts(self, count: int) -> bool:
        if self.arity is None:
            return count >= 2
        return count == self.arity


OPERATIONS: dict[Operation, OperationSpec] = {
    Operation.ADD: OperationSpec(add, "+", 2),
    Operation.SUB: OperationSpec(subtract, "-", 2),
    Operation.MUL: OperationSpec(multiply, "*", 2),
    Operation.DIV: OperationSpec(divide, "/", 2),
    Operation.POW: OperationSpec(power, "^", 2),
    Operation.SQUARE: OperationSpec(square, "sqr", 1),
    Operation.SQRT: OperationSpec(square_root, "√", 1),
    Operation.LN: OperationSpec(natural_log, "ln", 1),
    Operation.AND: OperationSpec(logical_and, "and", None, logical=True),
    Operation.OR: OperationSpec(logical_or, "or", None, logical=True),
    Operation.XOR: OperationSpec(logical_xor, "xor", None, logical=True),
    Operation.NOT: OperationSpec(logical_not, "not", 1, logical=True),
    Operation.SET: OperationSpec(set_value, "set", 1),
    Operation.CLEAR: OperationSpec(clear_value, "clear", 0),
}


def format_number(value: float, precision: int = 10) -> str:
    """Render a number compactly, dropping a trailing .0 on integral values."""
    return f"{value:.{precision}g}"


def apply_operation(operation: Operation, operands: tuple[float, ...]) -> float:
    """
    Invoke the pure function for an operation.

    Raises:
        InvalidOperationError: If the operand count does not match the operation
        CalculationError: Whatever the operation itself raises
    """
    spec = OPERATIONS[operation]
    if not spec.accepts(len(operands)):
        expected = "at least 2" if spec.arity is None else str(spec.arity)
        raise InvalidOperationError(
            operation.value, f"Expected {expected} operands, got {len(operands)}"
        )
    return spec.function(*operands)


def describe(operation: Operation, operands: tuple[float, ...], precision: int = 10) -> str:
    """Build the label stored on a snapshot, operands shown to precision significant digits."""
    spec = OPERATIONS[operation]
    parts = [format_number(o, precision) for o in operands]
    if operation is Operation.CLEAR:
        return "clear"
    if operation is Operation.SET:
        return f"set {parts[0]}"
    if spec.arity == 1:
        return f"{spec.symbol}({parts[0]})"
    return f" {spec.symbol} ".join(parts)
