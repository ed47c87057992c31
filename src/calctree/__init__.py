"""
Calculator with a branching history tree.

Every computation is recorded as a node in a rooted tree:
- Undo moves to the parent node
- Redo resumes the newest branch, or a chosen child
- Any earlier state can be restored by node id
- Abandoned branches are never discarded
"""

from calctree.config import CalculatorConfig
from calctree.core import Calculator
from calctree.exceptions import (
    CalculationError,
    DivisionByZeroError,
    InvalidChildError,
    InvalidInputError,
    InvalidOperationError,
    NavigationError,
    NoCachedStateError,
    NoChildrenError,
    NodeNotFoundError,
    NoParentError,
    OutOfBoundsError,
    ParseFailureError,
    PrecisionLossError,
)
from calctree.history import HistoryNode, HistoryTree
from calctree.operations import (
    OPERATIONS,
    Operation,
    add,
    divide,
    logical_and,
    logical_not,
    logical_or,
    logical_xor,
    multiply,
    natural_log,
    power,
    square,
    square_root,
    subtract,
)
from calctree.snapshot import Snapshot

__all__ = [
    "OPERATIONS",
    "CalculationError",
    "Calculator",
    "CalculatorConfig",
    "DivisionByZeroError",
    "HistoryNode",
    "HistoryTree",
    "InvalidChildError",
    "InvalidInputError",
    "InvalidOperationError",
    "NavigationError",
    "NoCachedStateError",
    "NoChildrenError",
    "NoParentError",
    "NodeNotFoundError",
    "Operation",
    "OutOfBoundsError",
    "ParseFailureError",
    "PrecisionLossError",
    "Snapshot",
    "add",
    "divide",
    "logical_and",
    "logical_not",
    "logical_or",
    "logical_xor",
    "multiply",
    "natural_log",
    "power",
    "square",
    "square_root",
    "subtract",
]

__version__ = "0.1.0"
