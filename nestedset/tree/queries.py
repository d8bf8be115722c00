import bisect
from dataclasses import dataclass

from sqlalchemy.orm import Session

from nestedset.tree.errors import NodeNotFoundError
from nestedset.tree.root import RootResolver
from nestedset.tree.statements import LEFT, NODE_ID, RIGHT, TreeStatements


@dataclass(frozen=True)
class NodeBounds:
    """A node's boundary pair."""

    id: int | str
    left: int
    right: int

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def size(self) -> int:
        """Number of nodes in the subtree, the node included."""
        return self.width // 2

    def contains(self, other: "NodeBounds") -> bool:
        return self.left <= other.left and other.right <= self.right

    def range_params(self) -> dict[str, int]:
        return {LEFT: self.left, RIGHT: self.right}


@dataclass(frozen=True)
class TreeRow:
    id: int | str
    left: int
    right: int
    depth: int


class QueryEngine:
    """
    Read-only range queries over the boundary encoding.

    Methods do not open transactions themselves; callers run them inside one
    so that a sequence of reads sees a single snapshot.
    """

    def __init__(self, session: Session, statements: TreeStatements, root: RootResolver):
        self.session = session
        self.statements = statements
        self.root = root

    def bounds(self, node_id) -> NodeBounds:
        row = self.session.execute(self.statements.node_bounds(), {NODE_ID: node_id}).first()
        if row is None:
            raise NodeNotFoundError(node_id)
        return NodeBounds(id=row.node_id, left=row.node_left, right=row.node_right)

    def _ids(self, statement, bounds: NodeBounds) -> list:
        return list(self.session.scalars(statement, bounds.range_params()).all())

    def descendants(self, node_id) -> list:
        """Descendant ids in pre-order."""
        return self._ids(self.statements.descendants(), self.bounds(node_id))

    def ancestors(self, node_id, exclude_root: bool = False) -> list:
        """Ancestor ids from the root down to the parent."""
        ids = self._ids(self.statements.ancestors(), self.bounds(node_id))
        if exclude_root and ids:
            root_id = self.root.resolve()
            ids = [ancestor_id for ancestor_id in ids if ancestor_id != root_id]
        return ids

    def children(self, node_id) -> list:
        return self._ids(self.statements.children(), self.bounds(node_id))

    def parent_of(self, bounds: NodeBounds):
        return self.session.scalars(self.statements.parent(), bounds.range_params()).first()

    def parent(self, node_id):
        """Id of the parent, or None for the root."""
        return self.parent_of(self.bounds(node_id))

    def siblings(self, node_id) -> list:
        bounds = self.bounds(node_id)
        parent_id = self.parent_of(bounds)
        if parent_id is None:
            return []
        return [
            sibling_id
            for sibling_id in self._ids(self.statements.children(), self.bounds(parent_id))
            if sibling_id != bounds.id
        ]

    def depth(self, node_id) -> int:
        return self.session.scalar(self.statements.depth(), self.bounds(node_id).range_params())

    def subtree_size(self, node_id) -> int:
        return self.bounds(node_id).size

    def is_ancestor(self, ancestor_id, node_id) -> bool:
        ancestor = self.bounds(ancestor_id)
        node = self.bounds(node_id)
        return ancestor.left < node.left and node.right < ancestor.right

    def rows(self) -> list[TreeRow]:
        return [
            TreeRow(id=row.node_id, left=row.node_left, right=row.node_right, depth=row.depth)
            for row in self.session.execute(self.statements.tree())
        ]

    def tree(self) -> list[TreeRow]:
        """Every node but the root, in pre-order."""
        rows = self.rows()
        if not rows:
            return []
        root_id = self.root.resolve()
        return [row for row in rows if row.id != root_id]

    def count(self) -> int:
        return self.session.scalar(self.statements.row_count())

    def check_integrity(self) -> list[str]:
        """
        Verify the table against the nested set invariants.

        Returns a description of every violation found; an empty list means
        the tree is consistent.
        """
        rows = self.rows()
        problems = []

        for row in rows:
            if row.left >= row.right:
                problems.append(f"Node {row.id} has left {row.left} >= right {row.right}")

        boundaries = sorted([row.left for row in rows] + [row.right for row in rows])
        if boundaries != list(range(1, 2 * len(rows) + 1)):
            problems.append(f"Boundaries are not the contiguous sequence 1..{2 * len(rows)}")

        lefts = [row.left for row in rows]
        open_rights: list[tuple[int, object]] = []
        for row in rows:
            while open_rights and open_rights[-1][0] < row.left:
                open_rights.pop()
            if open_rights and row.right > open_rights[-1][0]:
                problems.append(f"Node {row.id} partially overlaps node {open_rights[-1][1]}")
            open_rights.append((row.right, row.id))

            descendant_count = bisect.bisect_left(lefts, row.right) - bisect.bisect_right(lefts, row.left)
            if (row.right - row.left + 1) != 2 * (descendant_count + 1):
                problems.append(f"Node {row.id} width {row.right - row.left + 1} does not match its subtree")

        roots = [row for row in rows if row.depth == 0]
        if rows and len(roots) != 1:
            problems.append(f"Expected exactly one root, found {len(roots)}")

        return problems
