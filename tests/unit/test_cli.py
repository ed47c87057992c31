"""Unit tests for the interactive command loop."""

import io

import pytest

from calctree import Calculator, CalculatorConfig
from calctree.cli import CommandLoop, main


def run_session(*lines: str, calculator: Calculator | None = None) -> tuple[list[str], Calculator]:
    calc = calculator or Calculator(config=CalculatorConfig(prompt=""))
    stdout = io.StringIO()
    loop = CommandLoop(calc, stdin=io.StringIO("".join(f"{line}\n" for line in lines)), stdout=stdout)
    assert loop.run() == 0
    return stdout.getvalue().splitlines(), calc


class TestCommandLoop:
    """Tests for CommandLoop."""

    def test_documented_session(self):
        out, calc = run_session("add 2 3", "mul 2", "undo", "sub 1", "redo", "quit")
        assert "#1 5 | 2 + 3" in out
        assert "#2 10 | 5 * 2" in out
        assert "#3 4 | 5 - 1" in out
        assert "Redo failed: Cannot go forwards, node has no children: 3. State preserved." in out
        assert out[-1] == "Goodbye!"
        assert calc.tree.current_id == 3

    def test_redo_to_child_and_goto(self):
        out, calc = run_session("add 2 3", "mul 2", "undo", "sub 1", "undo", "redo 2", "goto 0")
        assert out.count("#2 10 | 5 * 2") == 2
        assert calc.tree.current_id == 0

    def test_errors_do_not_end_session(self):
        out, calc = run_session("div 0", "undo", "goto 9", "add x", "add 1", "quit")
        assert "Division failed: Division by zero: 0.0. State preserved." in out
        assert "Undo failed: Cannot go backwards from the root node: 0. State preserved." in out
        assert "Restore failed: No history node with id: 9. State preserved." in out
        assert "Addition failed: Not a number: 'x'. State preserved." in out
        assert calc.value == 1
        assert len(calc.tree) == 2

    def test_unknown_command(self):
        out, _ = run_session("frobnicate 1")
        assert "Unknown command: 'frobnicate'. Type 'help' for options." in out

    def test_logic_commands(self):
        _, calc = run_session("and true yes", "not", "xor 1 0 1")
        assert [s.value for s in calc.history()] == [0, 1, 0, 0]

    def test_history_and_tree(self):
        out, _ = run_session("add 2 3", "mul 2", "undo", "history", "tree")
        start = out.index("--- Calculator History Tree ---")
        assert out[start + 1 : start + 5] == [
            "└── #0 0 | start",
            "    └── #1 5 | 2 + 3",
            "        ↑ (current)",
            "        └── #2 10 | 5 * 2",
        ]
        assert out[start - 2 : start] == ["#0 0 | start", "#1 5 | 2 + 3"]

    def test_reset_and_recover(self):
        out, calc = run_session("add 2 3", "reset", "show", "recover", "recover")
        assert "Calculator reset to 0. Node #1 cached, 'recover' returns to it." in out
        assert "Recovered #1 5 | 2 + 3" in out
        assert "Cache recovery failed: No cached state to recover. State preserved." in out
        assert calc.value == 5

    def test_bookmark_and_forget(self):
        out, _ = run_session("bookmark", "bookmark", "forget")
        assert "Cached node #0." in out
        assert "Dropped 2 cached state(s)." in out

    def test_navigation_argument_errors(self):
        out, _ = run_session("undo 1", "goto", "redo 1 2", "redo x")
        assert sum("failed" in line for line in out) == 4

    def test_help_lists_commands(self):
        out, _ = run_session("help")
        assert "=== Calculator Help ===" in out
        assert any(line.strip().startswith("goto <id>") for line in out)

    def test_end_of_input_exits_cleanly(self):
        out, _ = run_session("add 1")
        assert out[-1] == "Goodbye!"

    def test_precision_applies_to_output(self):
        calc = Calculator(config=CalculatorConfig(precision=3, prompt=""))
        out, _ = run_session("div 1 3", calculator=calc)
        assert "#1 0.333 | 1 / 3" in out

    def test_malformed_node_ids_do_not_end_session(self):
        out, calc = run_session("goto ²", "redo ²", "goto " + "9" * 5000, "add 1")
        assert sum(line.startswith("Restore failed") for line in out) == 2
        assert any(line.startswith("Redo failed") for line in out)
        assert out[-1] == "Goodbye!"
        assert calc.value == 1

    def test_undecodable_input_does_not_end_session(self):
        stdin = io.TextIOWrapper(io.BytesIO(b"add \xff\xfe 1\nadd 1\nquit\n"), encoding="utf-8")
        stdout = io.StringIO()
        calc = Calculator(config=CalculatorConfig(prompt=""))
        assert CommandLoop(calc, stdin=stdin, stdout=stdout).run() == 0
        out = stdout.getvalue().splitlines()
        assert any(line.startswith("Addition failed") for line in out)
        assert calc.value == 1


class TestMain:
    """Tests for the main entry point."""

    def test_runs_session(self, clean_env):
        stdout = io.StringIO()
        code = main(["--initial", "4", "--precision", "5"], stdin=io.StringIO("sqrt\nquit\n"), stdout=stdout)
        assert code == 0
        assert "#1 2 | √(4)" in stdout.getvalue()

    def test_env_config(self, clean_env):
        clean_env.setenv("CALCTREE_INITIAL", "9")
        stdout = io.StringIO()
        main([], stdin=io.StringIO("show\n"), stdout=stdout)
        assert "Current value: 9" in stdout.getvalue()

    def test_malformed_invocation_exits_non_zero(self, clean_env):
        with pytest.raises(SystemExit) as exc_info:
            main(["--precision", "many"])
        assert exc_info.value.code == 2

    def test_invalid_config_exits_non_zero(self, clean_env):
        clean_env.setenv("CALCTREE_PRECISION", "abc")
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_initial_value_beyond_precision_exits_non_zero(self, clean_env):
        with pytest.raises(SystemExit) as exc_info:
            main(["--initial", "1e20"])
        assert exc_info.value.code == 2
