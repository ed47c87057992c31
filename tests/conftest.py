"""Pytest configuration and shared fixtures."""

import os

import pytest
from hypothesis import Verbosity, settings

# Configure Hypothesis profiles
settings.register_profile("ci", max_examples=200, deadline=None)
settings.register_profile("dev", max_examples=50, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose)

# Load profile from environment or default to "dev"
profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(profile)


@pytest.fixture
def calculator():
    """Provide a fresh Calculator instance."""
    from calctree import Calculator

    return Calculator()


@pytest.fixture
def calculator_with_value():
    """Provide a Calculator initialized with 100."""
    from calctree import Calculator

    return Calculator(100.0)


@pytest.fixture
def branched_calculator():
    """
    Provide the documented branching session.

    root #0 (0) -> #1 add 2 3 (5) -> #2 mul 2 (10); undo to #1 -> #3 sub 1 (4).
    Current node is #3.
    """
    from calctree import Calculator

    calc = Calculator()
    calc.add(2, 3).multiply(2)
    calc.undo()
    calc.subtract(1)
    return calc


@pytest.fixture
def tree():
    """Provide an empty HistoryTree (root only)."""
    from calctree import HistoryTree

    return HistoryTree()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every CALCTREE_* variable from the environment."""
    for name in list(os.environ):
        if name.startswith("CALCTREE_"):
            monkeypatch.delenv(name)
    return monkeypatch
