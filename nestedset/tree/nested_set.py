import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.orm import Session

from nestedset.lib.db.transaction import transaction
from nestedset.tree.config import NestedSetConfig
from nestedset.tree.mutations import MutationEngine, NodeSpec, Position
from nestedset.tree.queries import NodeBounds, QueryEngine, TreeRow
from nestedset.tree.root import RootResolver
from nestedset.tree.statements import StatementCache, TreeStatements

logger = logging.getLogger(__name__)


class NestedSet:
    """
    Tree stored in one table with the nested set encoding.

    Owns the configuration, the session used to execute statements, the
    statement cache and the detected root id. Every configuration change goes
    through :meth:`configure`, which rebuilds the collaborators and drops both
    caches so no statement built for old column names survives.

    Structural mutations must be serialized by the caller when several
    processes move or delete nodes concurrently: each operation is atomic,
    but two operations computing shifts from the same stale snapshot can
    both commit.
    """

    def __init__(self, session: Session, config: NestedSetConfig | None = None):
        self.cache = StatementCache()
        self._session = session
        self._config = config or NestedSetConfig()
        self._wire()

    def _wire(self) -> None:
        self.cache.clear()
        self.statements = TreeStatements(self._config, self.cache)
        self.root = RootResolver(self._session, self.statements)
        self.queries = QueryEngine(self._session, self.statements, self.root)
        self.mutations = MutationEngine(self._session, self.statements, self.queries, self.root)

    @property
    def config(self) -> NestedSetConfig:
        return self._config

    @property
    def session(self) -> Session:
        return self._session

    def configure(self, **changes: Any) -> "NestedSet":
        config = self._config.replace(**changes)
        logger.debug(f"Reconfigured nested set: {config.cache_key}")
        self._config = config
        self._wire()
        return self

    def set_table(self, table: str | dict[str, str]) -> "NestedSet":
        return self.configure(table=table)

    def set_id_column(self, name: str) -> "NestedSet":
        return self.configure(id_column=name)

    def set_left_column(self, name: str) -> "NestedSet":
        return self.configure(left_column=name)

    def set_right_column(self, name: str) -> "NestedSet":
        return self.configure(right_column=name)

    def set_root_node_id(self, node_id: int | str | None) -> "NestedSet":
        return self.configure(root_node_id=node_id)

    def set_session(self, session: Session) -> "NestedSet":
        self._session = session
        self._wire()
        return self

    # Reads

    def root_id(self):
        with transaction(self._session):
            return self.root.resolve()

    def bounds(self, node_id) -> NodeBounds:
        with transaction(self._session):
            return self.queries.bounds(node_id)

    def descendants(self, node_id) -> list:
        with transaction(self._session):
            return self.queries.descendants(node_id)

    def ancestors(self, node_id, exclude_root: bool = False) -> list:
        with transaction(self._session):
            return self.queries.ancestors(node_id, exclude_root=exclude_root)

    def children(self, node_id) -> list:
        with transaction(self._session):
            return self.queries.children(node_id)

    def parent(self, node_id):
        with transaction(self._session):
            return self.queries.parent(node_id)

    def siblings(self, node_id) -> list:
        with transaction(self._session):
            return self.queries.siblings(node_id)

    def depth(self, node_id) -> int:
        with transaction(self._session):
            return self.queries.depth(node_id)

    def subtree_size(self, node_id) -> int:
        with transaction(self._session):
            return self.queries.subtree_size(node_id)

    def is_ancestor(self, ancestor_id, node_id) -> bool:
        with transaction(self._session):
            return self.queries.is_ancestor(ancestor_id, node_id)

    def tree(self) -> list[TreeRow]:
        with transaction(self._session):
            return self.queries.tree()

    def count(self) -> int:
        with transaction(self._session):
            return self.queries.count()

    def check_integrity(self) -> list[str]:
        with transaction(self._session):
            return self.queries.check_integrity()

    # Writes

    def insert(self, target_id, position: Position | str = Position.LAST_CHILD, values: Mapping[str, Any] | None = None):
        return self.mutations.insert(target_id, position, values)

    def delete(self, node_id) -> int:
        return self.mutations.delete(node_id)

    def move(self, node_id, target_id, position: Position | str = Position.LAST_CHILD) -> None:
        self.mutations.move(node_id, target_id, position)

    def bulk_load(self, nodes: Iterable[NodeSpec]) -> int:
        return self.mutations.bulk_load(nodes)

    def clear(self) -> int:
        return self.mutations.clear()
