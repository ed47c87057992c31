"""Calculator class recording every computation in a branching history tree."""

from __future__ import annotations

import logging

from calctree.config import CalculatorConfig
from calctree.exceptions import CalculationError, NoCachedStateError
from calctree.history import HistoryNode, HistoryTree
from calctree.operations import OPERATIONS, Operation, apply_operation, describe
from calctree.snapshot import Snapshot
from calctree.validators import validate_number, validate_result

logger = logging.getLogger(__name__)


class Calculator:
    """
    A stateful calculator whose history is a tree rather than a stack.

    Every successful operation appends a node under the current one. Undo and
    redo move between parent and children; an operation applied after an undo
    starts a new branch and leaves the old one reachable.

    Example:
        >>> calc = Calculator()
        >>> calc.add(2, 3).multiply(2).value
        10.0
        >>> calc.undo()
        1
        >>> calc.subtract(1).value
        4.0
        >>> calc.tree.current_id
        3
    """

    def __init__(
        self, initial_value: float | None = None, config: CalculatorConfig | None = None
    ) -> None:
        """
        Initialize calculator with a starting value.

        Args:
            initial_value: Value of the root snapshot (defaults to config.initial_value)
            config: Display and logging settings

        Raises:
            InvalidInputError: If initial_value is invalid
        """
        self.config = config or CalculatorConfig()
        if initial_value is None:
            initial_value = self.config.initial_value
        validate_number(initial_value)
        self._tree = HistoryTree(Snapshot.initial(initial_value))
        self._cache: list[int] = []

    @property
    def value(self) -> float:
        """Current calculator value."""
        return self._tree.current_snapshot().value

    @property
    def tree(self) -> HistoryTree:
        return self._tree

    @property
    def current(self) -> HistoryNode:
        return self._tree.current

    def current_snapshot(self) -> Snapshot:
        return self._tree.current_snapshot()

    def _resolve_operands(self, operation: Operation, operands: tuple[float, ...]) -> tuple[float, ...]:
        """Use the current value as first operand when exactly one is missing."""
        spec = OPERATIONS[operation]
        if not spec.accepts(len(operands)) and len(operands) == spec.min_operands - 1:
            return (self.value, *operands)
        return operands

    def compute(self, operation: Operation | str, *operands: float) -> Snapshot:
        """
        Run an operation and record its result as a new history node.

        Nothing is recorded when the operation fails.

        Args:
            operation: Operation member or command name
            operands: Explicit operands; if one fewer than the operation takes
                is given, the current value is used as the first operand

        Returns:
            The snapshot of the new current node

        Raises:
            CalculationError: If the operation is unknown, the operands are
                invalid, or the result cannot be represented
        """
        if not isinstance(operation, Operation):
            operation = Operation.from_name(operation)

        resolved = self._resolve_operands(operation, operands)
        try:
            result = apply_operation(operation, resolved)
            value = validate_result(result, operation.value, *resolved)
        except CalculationError as e:
            logger.info("Rejected %s%s: %s", operation.value, resolved, e)
            raise

        label = describe(operation, resolved, self.config.precision)
        snapshot = Snapshot(value=value, last_operation=operation, label=label)
        self._tree.apply(snapshot)
        return snapshot

    def add(self, *operands: float) -> Calculator:
        """Add to current result, or add two explicit operands."""
        self.compute(Operation.ADD, *operands)
        return self

    def subtract(self, *operands: float) -> Calculator:
        """Subtract from current result."""
        self.compute(Operation.SUB, *operands)
        return self

    def multiply(self, *operands: float) -> Calculator:
        """Multiply current result."""
        self.compute(Operation.MUL, *operands)
        return self

    def divide(self, *operands: float) -> Calculator:
        """Divide current result."""
        self.compute(Operation.DIV, *operands)
        return self

    def power(self, *operands: float) -> Calculator:
        """Raise current result to a power."""
        self.compute(Operation.POW, *operands)
        return self

    def square(self) -> Calculator:
        self.compute(Operation.SQUARE)
        return self

    def square_root(self) -> Calculator:
        self.compute(Operation.SQRT)
        return self

    def natural_log(self) -> Calculator:
        self.compute(Operation.LN)
        return self

    def set(self, value: float) -> Calculator:
        """Set current value directly, recorded as its own node."""
        self.compute(Operation.SET, value)
        return self

    def undo(self) -> int:
        return self._tree.undo()

    def redo(self) -> int:
        return self._tree.redo()

    def redo_to(self, child_id: int) -> int:
        return self._tree.redo_to(child_id)

    def restore_to(self, node_id: int) -> int:
        return self._tree.restore_to(node_id)

    def history(self) -> list[Snapshot]:
        """Snapshots from the root to the current node."""
        return self._tree.path_to_root()

    def visualize(self) -> str:
        return self._tree.visualize(self.config.precision)

    def bookmark(self) -> int:
        """Cache the current node id for a later recover()."""
        self._cache.append(self._tree.current_id)
        return self._tree.current_id

    def reset(self) -> Snapshot:
        """
        Return to zero without discarding history.

        The node being left is cached, so recover() can jump back to it.
        """
        node_id = self._tree.current_id
        snapshot = self.compute(Operation.CLEAR)
        self._cache.append(node_id)
        return snapshot

    def recover(self) -> int:
        """
        Restore the most recently cached node.

        Raises:
            NoCachedStateError: If nothing is cached
        """
        if not self._cache:
            raise NoCachedStateError()
        node_id = self._cache[-1]
        self._tree.restore_to(node_id)
        self._cache.pop()
        return node_id

    def clear_cache(self) -> int:
        """Drop every cached node id, returning how many were dropped."""
        dropped = len(self._cache)
        self._cache.clear()
        return dropped

    @property
    def cached(self) -> tuple[int, ...]:
        return tuple(self._cache)

    def __repr__(self) -> str:
        return (
            f"Calculator(value={self.value}, current={self._tree.current_id}, "
            f"nodes={len(self._tree)})"
        )
