"""Input and result validation functions with strict type checking."""

import math
from typing import TypeVar

from calctree.exceptions import (
    InvalidInputError,
    InvalidOperationError,
    OutOfBoundsError,
    PrecisionLossError,
)

T = TypeVar("T", int, float)

# A float holds at most 15-16 significant decimal digits exactly
MAX_INTEGER_DIGITS = 15
PRECISION_LIMIT = 10.0 ** (MAX_INTEGER_DIGITS + 1)


def validate_number(value: T) -> T:
    """Return value unchanged if it is a finite int or float (bools excluded), else raise InvalidInputError."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(value, f"Expected number, got {type(value).__name__}")

    if isinstance(value, float):
        if math.isnan(value):
            raise InvalidInputError(value, "NaN is not allowed")
        if math.isinf(value):
            raise InvalidInputError(value, "Infinity is not allowed")

    return value


def validate_boolean(value: float, operation: str) -> bool:
    """
    Validate that a logic operand is 0 or 1 and return it as a bool.

    Args:
        value: The operand to validate
        operation: Name of the logic operation, used in the error

    Returns:
        The operand as a bool

    Raises:
        InvalidOperationError: If value is not 0 or 1
    """
    if isinstance(value, bool):
        return value
    validate_number(value)
    if value not in (0, 1):
        raise InvalidOperationError(operation, f"Logic operands must be 0 or 1, got {value:g}")
    return value == 1


def validate_result(result: float, operation: str, *operands: float) -> float:
    """
    Validate a computed result before it is recorded in history.

    Args:
        result: The value produced by the operation
        operation: Name of the operation, used in the error
        operands: The operands the operation was applied to

    Returns:
        The result as a float

    Raises:
        OutOfBoundsError: If the result is NaN or infinite
        PrecisionLossError: If the result has more than MAX_INTEGER_DIGITS integer digits
    """
    if not math.isfinite(result):
        raise OutOfBoundsError(operation, *operands)

    if abs(result) >= PRECISION_LIMIT:
        raise PrecisionLossError(result)

    return float(result)
