"""Parsing of command lines typed at the calculator prompt."""

from __future__ import annotations

import math
import shlex
from dataclasses import dataclass

from calctree.exceptions import ParseFailureError
from calctree.operations import OPERATIONS, Operation

TRUE_WORDS = frozenset({"1", "true", "t", "yes", "y"})
FALSE_WORDS = frozenset({"0", "false", "f", "no", "n"})


@dataclass(frozen=True)
class Command:
    """A command word and its raw arguments."""

    name: str
    args: tuple[str, ...]
    raw: str


def parse_command(line: str) -> Command | None:
    """
    Split a line into a Command; blank lines give None.

    Raises:
        ParseFailureError: If quoting in the line is unbalanced
    """
    try:
        words = shlex.split(line)
    except ValueError as e:
        raise ParseFailureError(line.strip(), str(e)) from e
    if not words:
        return None
    return Command(name=words[0].lower(), args=tuple(words[1:]), raw=line.strip())


def parse_number(raw: str) -> float:
    """
    Parse a finite number.

    Raises:
        ParseFailureError: If raw is not a finite number
    """
    try:
        value = float(raw)
    except ValueError:
        raise ParseFailureError(raw, "Not a number") from None
    if not math.isfinite(value):
        raise ParseFailureError(raw, "Number must be finite")
    return value


def parse_bool(raw: str) -> float:
    """
    Parse a boolean word into 1.0 or 0.0.

    Raises:
        ParseFailureError: If raw is not a recognised boolean
    """
    word = raw.strip().lower()
    if word in TRUE_WORDS:
        return 1.0
    if word in FALSE_WORDS:
        return 0.0
    raise ParseFailureError(raw, "Not a boolean")


def parse_node_id(raw: str) -> int:
    """
    Parse a history node id.

    Raises:
        ParseFailureError: If raw is not a non-negative integer
    """
    text = raw.strip().lstrip("#")
    if not text.isdecimal():
        raise ParseFailureError(raw, "Node ids are non-negative integers")
    try:
        return int(text)
    except ValueError:
        raise ParseFailureError(raw, "Node ids are non-negative integers") from None


def parse_operands(operation: Operation, args: tuple[str, ...]) -> tuple[float, ...]:
    """Parse arguments as booleans for logic operations and numbers otherwise."""
    convert = parse_bool if OPERATIONS[operation].logical else parse_number
    return tuple(convert(arg) for arg in args)
