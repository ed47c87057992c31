"""
Property-based tests for the history tree.

Uses Hypothesis stateful testing to drive a Calculator through random
sequences of operations and navigation, checking the tree invariants
after every step.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from hypothesis.stateful import (
    Bundle,
    RuleBasedStateMachine,
    invariant,
    precondition,
    rule,
)

from calctree import (
    CalculationError,
    Calculator,
    HistoryTree,
    InvalidChildError,
    NavigationError,
    NodeNotFoundError,
    Operation,
    Snapshot,
)

small_floats = st.floats(
    min_value=-1e5,
    max_value=1e5,
    allow_nan=False,
    allow_infinity=False,
)

values = st.lists(small_floats, min_size=1, max_size=20)


def build_linear(tree: HistoryTree, items: list[float]) -> list[int]:
    return [tree.apply(Snapshot(v, Operation.SET, f"set {v}")) for v in items]


@pytest.mark.property
class TestHistoryTreeProperties:
    """Property-based tests for HistoryTree."""

    @given(items=values)
    def test_repeated_undo_reaches_unchanged_root(self, items: list[float]):
        tree = HistoryTree()
        root_snapshot = tree.current_snapshot()
        build_linear(tree, items)
        for _ in items:
            tree.undo()
        assert tree.current_id == tree.root_id
        assert tree.current_snapshot() == root_snapshot

    @given(items=values)
    def test_undo_then_redo_is_identity(self, items: list[float]):
        tree = HistoryTree()
        build_linear(tree, items)
        node_id, snapshot = tree.current_id, tree.current_snapshot()
        tree.undo()
        assert tree.redo() == node_id
        assert tree.current_snapshot() == snapshot

    @given(items=values, data=st.data())
    def test_restore_to_every_issued_id(self, items: list[float], data):
        tree = HistoryTree()
        ids = build_linear(tree, items)
        tree.restore_to(data.draw(st.sampled_from(ids)))
        build_linear(tree, items)
        for node_id in [node.id for node in tree.walk()]:
            assert tree.restore_to(node_id) == node_id
            assert tree.current.id == node_id

    @given(items=values, missing=st.integers(min_value=21))
    def test_restore_to_unknown_id_keeps_current(self, items: list[float], missing: int):
        tree = HistoryTree()
        build_linear(tree, items)
        current = tree.current_id
        with pytest.raises(NodeNotFoundError):
            tree.restore_to(missing + len(items))
        assert tree.current_id == current

    @given(items=values, data=st.data())
    def test_ids_strictly_increase_across_branches(self, items: list[float], data):
        tree = HistoryTree()
        ids = build_linear(tree, items)
        tree.restore_to(data.draw(st.sampled_from([0, *ids])))
        new_ids = build_linear(tree, items)
        assert new_ids[0] == max(ids) + 1
        assert new_ids == sorted(set(new_ids))


@pytest.mark.property
@pytest.mark.slow
class HistoryStateMachine(RuleBasedStateMachine):
    """
    Stateful testing for Calculator history.

    Tracks a model of the tree (parent of every node and the order nodes were
    created in) and compares it with the real tree after every rule.
    """

    node_ids = Bundle("node_ids")

    def __init__(self) -> None:
        super().__init__()
        self.calc = Calculator(0)
        self.parents: dict[int, int | None] = {0: None}
        self.root_snapshot = self.calc.current_snapshot()

    @property
    def tree(self) -> HistoryTree:
        return self.calc.tree

    @invariant()
    def node_count_matches_model(self) -> None:
        assert len(self.tree) == len(self.parents)

    @invariant()
    def parent_links_match_model(self) -> None:
        for node in self.tree.walk():
            assert node.parent_id == self.parents[node.id]
            if node.parent_id is not None:
                assert self.tree.node(node.parent_id).child_ids.count(node.id) == 1

    @invariant()
    def exactly_one_root(self) -> None:
        roots = [node.id for node in self.tree.walk() if node.is_root]
        assert roots == [self.tree.root_id]

    @invariant()
    def current_is_reachable(self) -> None:
        assert self.tree.path_ids()[0] == self.tree.root_id
        assert self.tree.path_ids()[-1] == self.tree.current_id

    @invariant()
    def root_snapshot_unchanged(self) -> None:
        assert self.tree.node(self.tree.root_id).snapshot == self.root_snapshot

    @invariant()
    def value_matches_current_node(self) -> None:
        assert self.calc.value == self.tree.current_snapshot().value

    @rule(target=node_ids, operation=st.sampled_from(["add", "sub", "mul", "div"]), value=small_floats)
    def compute(self, operation: str, value: float):
        before = (len(self.tree), self.tree.current_id)
        parent = self.tree.current_id
        try:
            self.calc.compute(operation, value)
        except CalculationError:
            assert (len(self.tree), self.tree.current_id) == before
            return parent
        new_id = self.tree.current_id
        assert new_id == max(self.parents) + 1
        self.parents[new_id] = parent
        return new_id

    @rule()
    def undo(self) -> None:
        current = self.tree.current_id
        try:
            self.calc.undo()
        except NavigationError:
            assert current == self.tree.root_id
            assert self.tree.current_id == current
            return
        assert self.tree.current_id == self.parents[current]

    @rule()
    def redo(self) -> None:
        current = self.tree.current_id
        children = [n for n, p in self.parents.items() if p == current]
        try:
            self.calc.redo()
        except NavigationError:
            assert not children
            assert self.tree.current_id == current
            return
        assert self.tree.current_id == max(children)

    @rule(node_id=node_ids)
    def redo_to(self, node_id: int) -> None:
        current = self.tree.current_id
        try:
            self.calc.redo_to(node_id)
        except InvalidChildError:
            assert self.parents[node_id] != current
            assert self.tree.current_id == current
            return
        assert self.parents[node_id] == current

    @rule(node_id=node_ids)
    def restore_to(self, node_id: int) -> None:
        assert self.calc.restore_to(node_id) == node_id

    @rule(node_id=st.integers(min_value=10_000))
    def restore_to_unknown(self, node_id: int) -> None:
        current = self.tree.current_id
        with pytest.raises(NodeNotFoundError):
            self.calc.restore_to(node_id)
        assert self.tree.current_id == current

    @precondition(lambda self: len(self.parents) > 1)
    @rule()
    def reset_and_recover(self) -> None:
        before = self.tree.current_id
        self.calc.reset()
        self.parents[self.tree.current_id] = before
        assert self.calc.value == 0
        assert self.calc.recover() == before


# Run the state machine as a pytest test
TestHistoryStateMachine = HistoryStateMachine.TestCase
