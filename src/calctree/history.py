"""
Branching history tree.

Every recorded calculator state is a node in a rooted tree. Undo moves the
current pointer to the parent, redo moves it to a child, and any node can be
restored directly by id. Nodes are never removed, so abandoned branches stay
reachable.

Nodes live in an arena keyed by id. A node refers to its parent and children
by id only; the tree owns every node.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator

from calctree.exceptions import (
    InvalidChildError,
    NoChildrenError,
    NodeNotFoundError,
    NoParentError,
)
from calctree.operations import format_number
from calctree.snapshot import Snapshot

logger = logging.getLogger(__name__)

CURRENT_MARKER = "↑ (current)"


class HistoryNode:
    """One recorded snapshot plus its structural links.

    Only HistoryTree adds children; the snapshot never changes.
    """

    __slots__ = ("_id", "_snapshot", "_parent_id", "_child_ids", "_created_at")

    def __init__(
        self, node_id: int, snapshot: Snapshot, parent_id: int | None, created_at: int
    ) -> None:
        self._id = node_id
        self._snapshot = snapshot
        self._parent_id = parent_id
        self._child_ids: list[int] = []
        self._created_at = created_at

    @property
    def id(self) -> int:
        return self._id

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def parent_id(self) -> int | None:
        return self._parent_id

    @property
    def child_ids(self) -> tuple[int, ...]:
        """Child ids in creation order."""
        return tuple(self._child_ids)

    @property
    def created_at(self) -> int:
        """Position of this node in the tree's creation sequence."""
        return self._created_at

    @property
    def is_root(self) -> bool:
        return self._parent_id is None

    @property
    def is_leaf(self) -> bool:
        return not self._child_ids

    def _add_child(self, child_id: int) -> None:
        self._child_ids.append(child_id)

    def __repr__(self) -> str:
        return (
            f"HistoryNode(id={self._id}, parent_id={self._parent_id}, "
            f"children={self._child_ids}, snapshot={self._snapshot!r})"
        )


class HistoryTree:
    """
    Rooted tree of snapshots with a movable current pointer.

    Example:
        >>> tree = HistoryTree()
        >>> first = tree.apply(Snapshot(5.0, None, "set 5"))
        >>> tree.undo()
        0
        >>> tree.redo() == first
        True
    """

    def __init__(self, root_snapshot: Snapshot | None = None) -> None:
        self._sequence = itertools.count()
        self._nodes: dict[int, HistoryNode] = {}
        root = self._create_node(root_snapshot or Snapshot.initial(), parent_id=None)
        self._root_id = root.id
        self._current_id = root.id

    def _create_node(self, snapshot: Snapshot, parent_id: int | None) -> HistoryNode:
        # Ids come from the creation sequence, so they are never reused
        node_id = next(self._sequence)
        node = HistoryNode(node_id, snapshot, parent_id, created_at=node_id)
        self._nodes[node_id] = node
        if parent_id is not None:
            self._nodes[parent_id]._add_child(node_id)
        return node

    def _move(self, node_id: int, reason: str) -> int:
        logger.debug("%s: current %d -> %d", reason, self._current_id, node_id)
        self._current_id = node_id
        return node_id

    @property
    def root_id(self) -> int:
        return self._root_id

    @property
    def current_id(self) -> int:
        return self._current_id

    @property
    def current(self) -> HistoryNode:
        return self._nodes[self._current_id]

    def node(self, node_id: int) -> HistoryNode:
        """
        Look up a node by id.

        Raises:
            NodeNotFoundError: If no node has that id
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def parent_of(self, node_id: int) -> HistoryNode | None:
        """
        Follow a node's parent link.

        Returns None for the root. A parent id that does not resolve to a live
        node raises NodeNotFoundError rather than returning a stale node.
        """
        parent_id = self.node(node_id).parent_id
        if parent_id is None:
            return None
        return self.node(parent_id)

    def children_of(self, node_id: int) -> list[HistoryNode]:
        """Direct children of a node in creation order."""
        return [self._nodes[child_id] for child_id in self.node(node_id).child_ids]

    def apply(self, snapshot: Snapshot) -> int:
        """
        Record a snapshot as the newest child of the current node and move to it.

        Returns:
            Id of the new node
        """
        node = self._create_node(snapshot, parent_id=self._current_id)
        logger.debug("apply: node %d (%s) under %d", node.id, snapshot.label, self._current_id)
        return self._move(node.id, "apply")

    def undo(self) -> int:
        """
        Move current to its parent.

        Raises:
            NoParentError: If current is the root
        """
        parent = self.parent_of(self._current_id)
        if parent is None:
            raise NoParentError(self._current_id)
        return self._move(parent.id, "undo")

    def redo(self) -> int:
        """
        Move current to its most recently created child.

        Raises:
            NoChildrenError: If current is a leaf
        """
        child_ids = self.current.child_ids
        if not child_ids:
            raise NoChildrenError(self._current_id)
        return self._move(child_ids[-1], "redo")

    def redo_to(self, child_id: int) -> int:
        """
        Move current to a chosen direct child.

        Raises:
            InvalidChildError: If child_id is not a child of current
        """
        if child_id not in self.current.child_ids:
            raise InvalidChildError(child_id)
        return self._move(child_id, "redo_to")

    def restore_to(self, node_id: int) -> int:
        """
        Jump to any node in the tree.

        Raises:
            NodeNotFoundError: If node_id was never issued
        """
        if node_id not in self._nodes:
            raise NodeNotFoundError(node_id)
        return self._move(node_id, "restore_to")

    def current_snapshot(self) -> Snapshot:
        return self.current.snapshot

    def path_ids(self) -> list[int]:
        """Ids from the root down to the current node."""
        ids = []
        node: HistoryNode | None = self.current
        while node is not None:
            ids.append(node.id)
            node = self.parent_of(node.id)
        ids.reverse()
        return ids

    def path_to_root(self) -> list[Snapshot]:
        """Snapshots from the root down to the current node, oldest first."""
        return [self._nodes[node_id].snapshot for node_id in self.path_ids()]

    def walk(self) -> Iterator[HistoryNode]:
        """Depth-first pre-order traversal, children in creation order."""
        stack = [self._root_id]
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.child_ids))

    def visualize(self, precision: int = 10) -> str:
        """Render the tree with box-drawing connectors, marking the current node."""
        lines = []
        stack: list[tuple[int, str, bool]] = [(self._root_id, "", True)]
        while stack:
            node_id, prefix, is_last = stack.pop()
            node = self._nodes[node_id]
            connector = "└── " if is_last else "├── "
            lines.append(
                f"{prefix}{connector}#{node.id} "
                f"{format_number(node.snapshot.value, precision)} | {node.snapshot.label}"
            )
            child_prefix = prefix + ("    " if is_last else "│   ")
            if node_id == self._current_id:
                lines.append(f"{child_prefix}{CURRENT_MARKER}")

            child_ids = node.child_ids
            for index in reversed(range(len(child_ids))):
                stack.append((child_ids[index], child_prefix, index == len(child_ids) - 1))
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[HistoryNode]:
        return self.walk()

    def __repr__(self) -> str:
        return f"HistoryTree(nodes={len(self._nodes)}, current={self._current_id})"
