from sqlalchemy import select, text
from sqlalchemy.orm import Session

from nestedset.lib.db.transaction import transaction
from nestedset.ops.entities.tree_node import TreeNode


def read_bounds(session: Session) -> dict[int, tuple[int, int]]:
    """Current (lft, rgt) of every row, keyed by id."""
    with transaction(session):
        rows = session.execute(select(TreeNode.id, TreeNode.lft, TreeNode.rgt)).all()
    return {row.id: (row.lft, row.rgt) for row in rows}


def execute_sql(session: Session, sql: str, **params) -> None:
    with transaction(session):
        session.execute(text(sql), params)
