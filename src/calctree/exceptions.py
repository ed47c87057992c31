"""Custom exceptions for the calctree package."""

from typing import Any


class CalculationError(Exception):
    """Root of every failure a computation or a history move can raise.

    ``value`` is the offending operand, id or name, appended to the message by ``str()``.
    """

    def __init__(self, message: str, value: Any = None) -> None:
        self.message = message
        self.value = value
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.message}: {self.value}"
        return self.message


class DivisionByZeroError(CalculationError):
    """Division with a zero divisor; ``numerator`` is kept for the message."""

    def __init__(self, numerator: float) -> None:
        super().__init__("Division by zero", numerator)
        self.numerator = numerator


class InvalidOperationError(CalculationError):
    """Raised for unknown operations, wrong operand counts and logic domain errors."""

    def __init__(self, operation: str, reason: str = "invalid operation") -> None:
        super().__init__(reason, operation)
        self.operation = operation
        self.reason = reason


class ParseFailureError(CalculationError):
    """Raised when raw user input cannot be parsed."""

    def __init__(self, raw: str, reason: str = "cannot parse input") -> None:
        super().__init__(reason, repr(raw))
        self.raw = raw
        self.reason = reason


class InvalidInputError(CalculationError):
    """An operand that is not a finite int or float."""

    def __init__(self, value: Any, reason: str = "invalid input") -> None:
        super().__init__(reason, value)
        self.reason = reason


class OutOfBoundsError(CalculationError):
    """Raised when a result is not finite or an operand is outside the operation's domain."""

    def __init__(self, operation: str, *operands: float) -> None:
        super().__init__(f"Value out of bounds in {operation}", operands)
        self.operation = operation
        self.operands = operands


class PrecisionLossError(CalculationError):
    """Raised when a result has more integer digits than a float can hold exactly."""

    def __init__(self, value: float) -> None:
        super().__init__("Precision loss detected", value)


class NavigationError(CalculationError):
    """Base class for history navigation failures.

    Navigation errors never move the current pointer.
    """


class NoParentError(NavigationError):
    """Raised on undo when the current node is the root."""

    def __init__(self, node_id: int) -> None:
        super().__init__("Cannot go backwards from the root node", node_id)
        self.node_id = node_id


class NoChildrenError(NavigationError):
    """Raised on redo when the current node has no children."""

    def __init__(self, node_id: int) -> None:
        super().__init__("Cannot go forwards, node has no children", node_id)
        self.node_id = node_id


class InvalidChildError(NavigationError):
    """Raised when redo targets an id that is not a direct child of the current node."""

    def __init__(self, child_id: int) -> None:
        super().__init__("Not a child of the current node", child_id)
        self.child_id = child_id


class NodeNotFoundError(NavigationError):
    """Raised when no node with the requested id exists."""

    def __init__(self, node_id: int) -> None:
        super().__init__("No history node with id", node_id)
        self.node_id = node_id


class NoCachedStateError(NavigationError):
    """Raised when recovering with an empty bookmark cache."""

    def __init__(self) -> None:
        super().__init__("No cached state to recover")
