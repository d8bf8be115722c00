"""
Statement templates for the nested set engine.

Every template is built once per configuration and reused with named bind
parameters. Templates embed table and column names, so the cache that holds
them must be cleared whenever the configuration changes.
"""

import logging
from collections.abc import Callable, Hashable

from sqlalchemy import Integer, bindparam, case, column, delete, func, insert, or_, select, table, update
from sqlalchemy.sql import Executable

from nestedset.tree.config import NestedSetConfig

logger = logging.getLogger(__name__)

# Bind parameter names shared by the templates and the engines executing them
NODE_ID = "ns_node_id"
LEFT = "ns_left"
RIGHT = "ns_right"
BOUNDARY = "ns_boundary"
DELTA = "ns_delta"
OFFSET = "ns_offset"
GAP_LOW = "ns_gap_low"
GAP_HIGH = "ns_gap_high"
GAP_SHIFT = "ns_gap_shift"
SPAN_LOW = "ns_span_low"
SPAN_HIGH = "ns_span_high"


class StatementCache:
    """Process-local store of built statements keyed by configuration."""

    def __init__(self):
        self._statements: dict[tuple, Executable] = {}

    def get(self, key: Hashable, name: Hashable, build: Callable[[], Executable]) -> Executable:
        statement = self._statements.get((key, name))
        if statement is None:
            logger.debug(f"Building statement {name!r} for {key}")
            statement = build()
            self._statements[(key, name)] = statement
        return statement

    def clear(self) -> None:
        self._statements.clear()

    def __len__(self) -> int:
        return len(self._statements)


class TreeStatements:
    """Builds (and caches) every statement the engines execute."""

    def __init__(self, config: NestedSetConfig, cache: StatementCache):
        self.config = config
        self.cache = cache

    def _get(self, name: Hashable, build: Callable[[], Executable]) -> Executable:
        return self.cache.get(self.config.cache_key, name, build)

    def _base(self, *extra_columns: str):
        """Unaliased table, used by every write statement."""
        core = (self.config.id_column, self.config.left_column, self.config.right_column)
        return table(
            self.config.table_name,
            column(self.config.id_column),
            column(self.config.left_column, Integer),
            column(self.config.right_column, Integer),
            *(column(name) for name in extra_columns if name not in core),
        )

    def _readable(self):
        """Table as seen by read queries, aliased when configured with an alias."""
        base = self._base()
        alias = self.config.table_alias
        return base.alias(alias) if alias else base

    def _columns(self, source):
        return (
            source.c[self.config.id_column],
            source.c[self.config.left_column],
            source.c[self.config.right_column],
        )

    # Reads

    def node_bounds(self):
        def build():
            t = self._readable()
            node_id, lft, rgt = self._columns(t)
            return select(
                node_id.label("node_id"), lft.label("node_left"), rgt.label("node_right")
            ).where(node_id == bindparam(NODE_ID))

        return self._get("node_bounds", build)

    def node_at_left(self):
        def build():
            t = self._readable()
            node_id, lft, _ = self._columns(t)
            return select(node_id).where(lft == bindparam(LEFT))

        return self._get("node_at_left", build)

    def root(self):
        """Rows spanning both the global minimum left and maximum right."""

        def build():
            base = self._base()
            root = base.alias("root")
            source = base.alias("extent_source")
            root_id, root_left, root_right = self._columns(root)
            _, source_left, source_right = self._columns(source)
            extent = select(
                func.min(source_left).label("min_left"), func.max(source_right).label("max_right")
            ).subquery("extent")
            return select(root_id).where(root_left == extent.c.min_left, root_right == extent.c.max_right)

        return self._get("root", build)

    def descendants(self):
        def build():
            t = self._readable()
            node_id, lft, rgt = self._columns(t)
            return select(node_id).where(lft > bindparam(LEFT), rgt < bindparam(RIGHT)).order_by(lft)

        return self._get("descendants", build)

    def ancestors(self):
        def build():
            t = self._readable()
            node_id, lft, rgt = self._columns(t)
            return select(node_id).where(lft < bindparam(LEFT), rgt > bindparam(RIGHT)).order_by(lft)

        return self._get("ancestors", build)

    def children(self):
        """Descendants that are not inside any other descendant."""

        def build():
            child = self._readable()
            between = self._base().alias("between_node")
            child_id, child_left, child_right = self._columns(child)
            _, between_left, between_right = self._columns(between)
            lower, upper = bindparam(LEFT), bindparam(RIGHT)
            nested = (
                select(between_left)
                .where(
                    between_left > lower,
                    between_right < upper,
                    between_left < child_left,
                    between_right > child_right,
                )
                .correlate(child)
                .exists()
            )
            return (
                select(child_id)
                .where(child_left > lower, child_right < upper, ~nested)
                .order_by(child_left)
            )

        return self._get("children", build)

    def parent(self):
        def build():
            t = self._readable()
            node_id, lft, rgt = self._columns(t)
            return (
                select(node_id)
                .where(lft < bindparam(LEFT), rgt > bindparam(RIGHT))
                .order_by(lft.desc())
                .limit(1)
            )

        return self._get("parent", build)

    def depth(self):
        def build():
            t = self._readable()
            _, lft, rgt = self._columns(t)
            return select(func.count()).select_from(t).where(lft < bindparam(LEFT), rgt > bindparam(RIGHT))

        return self._get("depth", build)

    def tree(self):
        """Every row in pre-order with its number of ancestors."""

        def build():
            t = self._readable()
            ancestor = self._base().alias("ancestor")
            node_id, lft, rgt = self._columns(t)
            _, ancestor_left, ancestor_right = self._columns(ancestor)
            depth = (
                select(func.count())
                .select_from(ancestor)
                .where(ancestor_left < lft, ancestor_right > rgt)
                .correlate(t)
                .scalar_subquery()
            )
            return select(
                node_id.label("node_id"),
                lft.label("node_left"),
                rgt.label("node_right"),
                depth.label("depth"),
            ).order_by(lft)

        return self._get("tree", build)

    def row_count(self):
        return self._get("row_count", lambda: select(func.count()).select_from(self._base()))

    # Writes

    def delete_subtree(self):
        def build():
            base = self._base()
            _, lft, rgt = self._columns(base)
            return delete(base).where(lft >= bindparam(LEFT), rgt <= bindparam(RIGHT))

        return self._get("delete_subtree", build)

    def delete_all(self):
        return self._get("delete_all", lambda: delete(self._base()))

    def shift_left(self):
        """Add ``DELTA`` to every left boundary at or beyond ``BOUNDARY``."""

        def build():
            base = self._base()
            lft = base.c[self.config.left_column]
            return (
                update(base)
                .where(lft >= bindparam(BOUNDARY))
                .values({self.config.left_column: lft + bindparam(DELTA)})
            )

        return self._get("shift_left", build)

    def shift_right(self):
        """Add ``DELTA`` to every right boundary at or beyond ``BOUNDARY``."""

        def build():
            base = self._base()
            rgt = base.c[self.config.right_column]
            return (
                update(base)
                .where(rgt >= bindparam(BOUNDARY))
                .values({self.config.right_column: rgt + bindparam(DELTA)})
            )

        return self._get("shift_right", build)

    def move_subtree(self):
        """
        Relocate a subtree and close/open the gap in one statement.

        Boundaries inside [LEFT, RIGHT] move by OFFSET, boundaries inside
        [GAP_LOW, GAP_HIGH] move by GAP_SHIFT, all others stay. Each column is
        computed from its own pre-update value, so no row shifts twice.
        """

        def build():
            base = self._base()
            _, lft, rgt = self._columns(base)
            node_left, node_right = bindparam(LEFT), bindparam(RIGHT)
            offset, gap_shift = bindparam(OFFSET), bindparam(GAP_SHIFT)
            gap_low, gap_high = bindparam(GAP_LOW), bindparam(GAP_HIGH)
            span_low, span_high = bindparam(SPAN_LOW), bindparam(SPAN_HIGH)

            def relocated(boundary):
                return case(
                    (boundary.between(node_left, node_right), boundary + offset),
                    (boundary.between(gap_low, gap_high), boundary + gap_shift),
                    else_=boundary,
                )

            return (
                update(base)
                .where(or_(lft.between(span_low, span_high), rgt.between(span_low, span_high)))
                .values(
                    {
                        self.config.left_column: relocated(lft),
                        self.config.right_column: relocated(rgt),
                    }
                )
            )

        return self._get("move_subtree", build)

    def insert_node(self, extra_columns: tuple[str, ...] = ()):
        """INSERT template; parameters supply the boundaries and ``extra_columns``."""
        return self._get(("insert_node", extra_columns), lambda: insert(self._base(*extra_columns)))
