"""
Interactive command loop for the calculator.

Each line is parsed into a command, dispatched to the Calculator, and the
outcome is printed. Calculation errors are reported and the session goes on;
only ``quit``/``exit`` or end of input stop the loop.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from calctree import __version__
from calctree.config import CalculatorConfig
from calctree.core import Calculator
from calctree.exceptions import CalculationError, InvalidOperationError, ParseFailureError
from calctree.history import HistoryNode
from calctree.operations import Operation, format_number
from calctree.parser import Command, parse_command, parse_node_id, parse_operands

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
QUIT_WORDS = frozenset({"quit", "exit"})

TITLES = {
    "add": "Addition",
    "sub": "Subtraction",
    "mul": "Multiplication",
    "div": "Division",
    "pow": "Exponentiation",
    "sqr": "Square",
    "sqrt": "Square root",
    "ln": "Natural log",
    "goto": "Restore",
    "recover": "Cache recovery",
}

HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Arithmetic (omit the first operand to use the current value)",
        (
            ("add <a> [b]", "Addition"),
            ("sub <a> [b]", "Subtraction"),
            ("mul <a> [b]", "Multiplication"),
            ("div <a> [b]", "Division"),
            ("pow <a> [b]", "Exponentiation"),
            ("sqr [a]", "Square"),
            ("sqrt [a]", "Square root"),
            ("ln [a]", "Natural logarithm"),
            ("set <a>", "Set the value directly"),
            ("clear", "Record a zero value"),
        ),
    ),
    (
        "Logic (operands are 1/0, true/false, yes/no)",
        (
            ("and <b...>", "Logical and"),
            ("or <b...>", "Logical or"),
            ("xor <b...>", "Logical xor"),
            ("not [b]", "Logical not"),
        ),
    ),
    (
        "History",
        (
            ("undo", "Go back to the parent node"),
            ("redo [id]", "Go forward to the newest child, or to child <id>"),
            ("goto <id>", "Jump to any node"),
            ("history", "Show the path from the root to the current node"),
            ("tree", "Show the whole history tree"),
            ("show", "Show the current value"),
            ("reset", "Go to zero, caching the current node"),
            ("bookmark", "Cache the current node"),
            ("recover", "Jump back to the last cached node"),
            ("forget", "Drop all cached nodes"),
        ),
    ),
    (
        "Session",
        (
            ("help", "Show this help"),
            ("quit", "Exit"),
        ),
    ),
)


def _expect_no_args(command: Command) -> None:
    if command.args:
        raise ParseFailureError(command.raw, f"'{command.name}' takes no arguments")


def _optional_node_id(command: Command) -> int | None:
    if not command.args:
        return None
    if len(command.args) > 1:
        raise ParseFailureError(command.raw, f"'{command.name}' takes at most one node id")
    return parse_node_id(command.args[0])


class CommandLoop:
    """Read-dispatch-print loop driving one Calculator."""

    def __init__(
        self,
        calculator: Calculator,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.calculator = calculator
        self.stdin = stdin or sys.stdin
        if hasattr(self.stdin, "reconfigure"):
            # undecodable bytes reach the parser as U+FFFD instead of ending the session
            self.stdin.reconfigure(errors="replace")
        self.stdout = stdout or sys.stdout
        self._handlers: dict[str, Callable[[Command], None]] = {
            "undo": self._undo,
            "redo": self._redo,
            "goto": self._goto,
            "history": self._history,
            "tree": self._tree,
            "show": self._show,
            "reset": self._reset,
            "bookmark": self._bookmark,
            "recover": self._recover,
            "forget": self._forget,
            "help": self._help,
        }

    def write(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _format(self, value: float) -> str:
        return format_number(value, self.calculator.config.precision)

    def _node_line(self, node: HistoryNode) -> str:
        return f"#{node.id} {self._format(node.snapshot.value)} | {node.snapshot.label}"

    def run(self) -> int:
        """Process lines until quit or end of input; returns the exit code."""
        self.write(f"calctree {__version__}. Type 'help' for commands, 'quit' to exit.")
        self.write(f"Current value: {self._format(self.calculator.value)}")
        while True:
            self.stdout.write(self.calculator.config.prompt)
            self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                self.write()
                break
            if not self.handle(line):
                break
        self.write("Goodbye!")
        return 0

    def handle(self, line: str) -> bool:
        """Execute one line. Returns False when the session should end."""
        try:
            command = parse_command(line)
        except ParseFailureError as e:
            self._fail("Input", e)
            return True
        if command is None:
            return True
        if command.name in QUIT_WORDS:
            return False

        title = TITLES.get(command.name, command.name.capitalize())
        try:
            handler = self._handlers.get(command.name)
            if handler is not None:
                handler(command)
            else:
                self._compute(command)
        except CalculationError as e:
            self._fail(title, e)
        return True

    def _fail(self, title: str, error: CalculationError) -> None:
        logger.debug("%s failed", title, exc_info=error)
        self.write(f"{title} failed: {error}. State preserved.")

    def _compute(self, command: Command) -> None:
        try:
            operation = Operation.from_name(command.name)
        except InvalidOperationError:
            self.write(f"Unknown command: '{command.name}'. Type 'help' for options.")
            return
        self.calculator.compute(operation, *parse_operands(operation, command.args))
        self.write(self._node_line(self.calculator.current))

    def _undo(self, command: Command) -> None:
        _expect_no_args(command)
        self.calculator.undo()
        self.write(self._node_line(self.calculator.current))

    def _redo(self, command: Command) -> None:
        child_id = _optional_node_id(command)
        if child_id is None:
            self.calculator.redo()
        else:
            self.calculator.redo_to(child_id)
        self.write(self._node_line(self.calculator.current))

    def _goto(self, command: Command) -> None:
        if len(command.args) != 1:
            raise ParseFailureError(command.raw, "'goto' expects exactly one node id")
        self.calculator.restore_to(parse_node_id(command.args[0]))
        self.write(self._node_line(self.calculator.current))

    def _history(self, command: Command) -> None:
        _expect_no_args(command)
        tree = self.calculator.tree
        for node_id in tree.path_ids():
            self.write(self._node_line(tree.node(node_id)))

    def _tree(self, command: Command) -> None:
        _expect_no_args(command)
        self.write("--- Calculator History Tree ---")
        self.write(self.calculator.visualize())

    def _show(self, command: Command) -> None:
        _expect_no_args(command)
        self.write(self._format(self.calculator.value))

    def _reset(self, command: Command) -> None:
        _expect_no_args(command)
        previous = self.calculator.tree.current_id
        self.calculator.reset()
        self.write(f"Calculator reset to 0. Node #{previous} cached, 'recover' returns to it.")

    def _bookmark(self, command: Command) -> None:
        _expect_no_args(command)
        node_id = self.calculator.bookmark()
        self.write(f"Cached node #{node_id}.")

    def _recover(self, command: Command) -> None:
        _expect_no_args(command)
        self.calculator.recover()
        self.write(f"Recovered {self._node_line(self.calculator.current)}")

    def _forget(self, command: Command) -> None:
        _expect_no_args(command)
        dropped = self.calculator.clear_cache()
        self.write(f"Dropped {dropped} cached state(s).")

    def _help(self, command: Command) -> None:
        self.write("=== Calculator Help ===")
        for title, entries in HELP_SECTIONS:
            self.write(f"{title}:")
            for usage, description in entries:
                self.write(f"  {usage:<14} - {description}")
            self.write()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calctree",
        description="Interactive calculator with a branching undo/redo history tree",
    )
    parser.add_argument("--initial", type=float, default=None, help="Value of the root node")
    parser.add_argument(
        "--precision", type=int, default=None, help="Significant digits shown for values"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=None,
        help="Logging level (default: CALCTREE_LOG_LEVEL or WARNING)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(
    argv: Sequence[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = CalculatorConfig.from_env().with_overrides(
            initial_value=args.initial,
            precision=args.precision,
            log_level=args.log_level,
        )
        calculator = Calculator(config=config)
    except CalculationError as e:
        parser.error(str(e))

    logging.basicConfig(level=config.log_level_number, format=LOG_FORMAT, stream=sys.stderr)
    logger.debug("Starting with %s", config)
    return CommandLoop(calculator, stdin=stdin, stdout=stdout).run()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
