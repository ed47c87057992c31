"""Runtime configuration read from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from calctree.exceptions import ParseFailureError
from calctree.validators import validate_number

ENV_PREFIX = "CALCTREE_"


@dataclass(frozen=True)
class CalculatorConfig:
    """Settings shared by the calculator and its command loop."""

    initial_value: float = 0.0
    precision: int = 10  # significant digits when displaying values
    log_level: str = "WARNING"
    prompt: str = "calc> "

    def __post_init__(self) -> None:
        validate_number(self.initial_value)
        if self.precision < 1:
            raise ParseFailureError(str(self.precision), "Precision must be at least 1")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ParseFailureError(self.log_level, "Unknown log level")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CalculatorConfig:
        """
        Build a config from CALCTREE_* environment variables.

        Raises:
            ParseFailureError: If a variable holds an unparseable value
        """
        if environ is None:
            environ = os.environ

        values: dict[str, Any] = {}
        if f"{ENV_PREFIX}INITIAL" in environ:
            values["initial_value"] = _parse_env(environ, "INITIAL", float)
        if f"{ENV_PREFIX}PRECISION" in environ:
            values["precision"] = _parse_env(environ, "PRECISION", int)
        if f"{ENV_PREFIX}LOG_LEVEL" in environ:
            values["log_level"] = environ[f"{ENV_PREFIX}LOG_LEVEL"].strip().upper()
        if f"{ENV_PREFIX}PROMPT" in environ:
            values["prompt"] = environ[f"{ENV_PREFIX}PROMPT"]
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> CalculatorConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())


def _parse_env(environ: Mapping[str, str], name: str, kind: type) -> Any:
    raw = environ[f"{ENV_PREFIX}{name}"]
    try:
        return kind(raw)
    except ValueError:
        raise ParseFailureError(raw, f"Invalid {ENV_PREFIX}{name}") from None
