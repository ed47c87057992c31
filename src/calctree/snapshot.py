"""Immutable calculator state captured at one point in history."""

from __future__ import annotations

from dataclasses import dataclass

from calctree.operations import Operation, format_number
from calctree.validators import validate_number, validate_result

ROOT_LABEL = "start"


@dataclass(frozen=True)
class Snapshot:
    """Value, last operation and display label of the calculator at one history point.

    Snapshots are stored by value in the history tree; restoring a state only
    moves the tree's current pointer, it never copies or edits a snapshot.
    """

    value: float
    last_operation: Operation | None
    label: str

    @classmethod
    def initial(cls, value: float = 0.0) -> Snapshot:
        """
        Create the root snapshot for a fresh calculator.

        The root obeys the same finiteness and precision rules as computed values.
        """
        validate_number(value)
        return cls(value=validate_result(value, ROOT_LABEL), last_operation=None, label=ROOT_LABEL)

    def __str__(self) -> str:
        return f"{format_number(self.value)} | {self.label}"
