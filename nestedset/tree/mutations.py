import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from nestedset.lib.db.transaction import transaction
from nestedset.tree.errors import CyclicMoveError, InvalidAdjacencyError, InvalidPositionError
from nestedset.tree.queries import NodeBounds, QueryEngine
from nestedset.tree.root import RootResolver
from nestedset.tree.statements import (
    BOUNDARY,
    DELTA,
    GAP_HIGH,
    GAP_LOW,
    GAP_SHIFT,
    LEFT,
    OFFSET,
    RIGHT,
    SPAN_HIGH,
    SPAN_LOW,
    TreeStatements,
)

logger = logging.getLogger(__name__)


class Position(str, Enum):
    """Where a node goes relative to the target node."""

    FIRST_CHILD = "first_child"
    LAST_CHILD = "last_child"
    BEFORE = "before"
    AFTER = "after"

    @classmethod
    def parse(cls, value: "Position | str") -> "Position":
        try:
            return cls(value)
        except ValueError:
            raise InvalidPositionError(f"Unknown position {value!r}")


@dataclass
class NodeSpec:
    """One entry of an adjacency list handed to :meth:`MutationEngine.bulk_load`."""

    id: int | str
    parent_id: int | str | None = None
    values: dict[str, Any] = field(default_factory=dict)


def number_adjacency(nodes: list[NodeSpec]) -> list[tuple[NodeSpec, int, int]]:
    """
    Assign pre-order boundaries to an adjacency list.

    Parents must come before their children and exactly one node may have no
    parent. Siblings keep their order in ``nodes``. Returns
    ``(node, left, right)`` tuples in pre-order.
    """
    children: dict[Any, list[NodeSpec]] = {}
    seen = set()
    roots = []
    for node in nodes:
        if node.id in seen:
            raise InvalidAdjacencyError(f"Duplicate node id {node.id}")
        if node.parent_id is None:
            roots.append(node)
        elif node.parent_id not in seen:
            raise InvalidAdjacencyError(f"Parent {node.parent_id} of node {node.id} must be listed before it")
        else:
            children.setdefault(node.parent_id, []).append(node)
        seen.add(node.id)

    if len(roots) != 1:
        raise InvalidAdjacencyError(f"Expected exactly one node without a parent, found {len(roots)}")

    numbered = []
    counter = 1
    # (node, None) opens a node; (node, slot) closes the entry numbered at slot
    stack: list[tuple[NodeSpec, int | None]] = [(roots[0], None)]
    while stack:
        node, slot = stack.pop()
        if slot is None:
            numbered.append([node, counter, None])
            counter += 1
            stack.append((node, len(numbered) - 1))
            for child in reversed(children.get(node.id, [])):
                stack.append((child, None))
        else:
            numbered[slot][2] = counter
            counter += 1

    return [(node, left, right) for node, left, right in numbered]


class MutationEngine:
    """
    Insert, delete and move nodes while keeping the boundaries contiguous.

    Each public operation reads the boundaries it needs and writes the shifts
    inside a single transaction, so the arithmetic always works from one
    consistent snapshot.
    """

    def __init__(self, session: Session, statements: TreeStatements, queries: QueryEngine, root: RootResolver):
        self.session = session
        self.statements = statements
        self.queries = queries
        self.root = root

    def _destination(self, target: NodeBounds, position: Position) -> int:
        """Boundary value the new or moved node's left will take."""
        if position is Position.FIRST_CHILD:
            return target.left + 1
        if position is Position.LAST_CHILD:
            return target.right

        if self.queries.parent_of(target) is None:
            raise InvalidPositionError(f"Node {target.id} is the root and cannot have siblings")
        if position is Position.BEFORE:
            return target.left
        return target.right + 1

    def _shift(self, boundary: int, delta: int) -> None:
        params = {BOUNDARY: boundary, DELTA: delta}
        # Order keeps left < right true for every row after each statement
        shifts = [self.statements.shift_right(), self.statements.shift_left()]
        if delta < 0:
            shifts.reverse()
        for statement in shifts:
            self.session.execute(statement, params)

    def _create(self, left: int, values: Mapping[str, Any]):
        config = self.statements.config
        params = {**values, config.left_column: left, config.right_column: left + 1}
        self.session.execute(self.statements.insert_node(tuple(sorted(values))), params)
        # A left boundary identifies exactly one row, which also covers generated ids
        return self.session.scalar(self.statements.node_at_left(), {LEFT: left})

    def insert(self, target_id, position: Position | str = Position.LAST_CHILD, values: Mapping[str, Any] | None = None):
        """
        Create a leaf node relative to ``target_id`` and return its id.

        ``values`` fills extra columns (or the id column when ids are not
        generated by the database). With ``target_id=None`` the node becomes
        the root of an empty table.
        """
        position = Position.parse(position)
        values = dict(values or {})

        with transaction(self.session):
            if target_id is None:
                if self.queries.count():
                    raise InvalidPositionError("The tree already has a root; insert relative to an existing node")
                left = 1
            else:
                left = self._destination(self.queries.bounds(target_id), position)
                self._shift(left, 2)
            node_id = self._create(left, values)

        if target_id is None:
            self.root.invalidate()
        logger.info(f"Inserted node {node_id} at {left} ({position.value} of {target_id})")
        return node_id

    def delete(self, node_id) -> int:
        """Remove a node with its whole subtree and return the number of rows removed."""
        with transaction(self.session):
            bounds = self.queries.bounds(node_id)
            removed = self.session.execute(self.statements.delete_subtree(), bounds.range_params()).rowcount
            self._shift(bounds.right + 1, -bounds.width)

        self.root.invalidate()
        logger.info(f"Deleted node {node_id} and its subtree ({removed} rows)")
        return removed

    def move(self, node_id, target_id, position: Position | str = Position.LAST_CHILD) -> None:
        """Move a node with its subtree to ``position`` relative to ``target_id``."""
        position = Position.parse(position)

        with transaction(self.session):
            node = self.queries.bounds(node_id)
            target = self.queries.bounds(target_id)
            if node.contains(target):
                raise CyclicMoveError(node_id, target_id)

            destination = self._destination(target, position)
            if destination in (node.left, node.right + 1):
                logger.debug(f"Node {node_id} is already {position.value} of {target_id}")
                return

            if destination > node.right:
                offset = destination - node.right - 1
                gap_low, gap_high, gap_shift = node.right + 1, destination - 1, -node.width
            else:
                offset = destination - node.left
                gap_low, gap_high, gap_shift = destination, node.left - 1, node.width

            self.session.execute(
                self.statements.move_subtree(),
                {
                    LEFT: node.left,
                    RIGHT: node.right,
                    OFFSET: offset,
                    GAP_LOW: gap_low,
                    GAP_HIGH: gap_high,
                    GAP_SHIFT: gap_shift,
                    SPAN_LOW: min(node.left, gap_low),
                    SPAN_HIGH: max(node.right, gap_high),
                },
            )

        logger.info(f"Moved node {node_id} ({node.size} nodes) {position.value} of {target_id}, offset {offset}")

    def bulk_load(self, nodes: Iterable[NodeSpec]) -> int:
        """Load an adjacency list into an empty table; returns the number of rows created."""
        nodes = list(nodes)
        if not nodes:
            return 0

        numbered = number_adjacency(nodes)
        config = self.statements.config
        extra = sorted({name for node in nodes for name in node.values})
        params = [
            {
                **{name: node.values.get(name) for name in extra},
                config.id_column: node.id,
                config.left_column: left,
                config.right_column: right,
            }
            for node, left, right in numbered
        ]

        with transaction(self.session):
            if self.queries.count():
                raise InvalidAdjacencyError("Bulk load requires an empty table")
            self.session.execute(self.statements.insert_node(tuple(extra)), params)

        self.root.invalidate()
        logger.info(f"Bulk loaded {len(params)} nodes into {config.table_name}")
        return len(params)

    def clear(self) -> int:
        """Remove every row. Returns the number of rows removed."""
        with transaction(self.session):
            removed = self.session.execute(self.statements.delete_all()).rowcount

        self.root.invalidate()
        logger.info(f"Cleared {removed} nodes from {self.statements.config.table_name}")
        return removed
