from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nestedset.lib.db.transaction import transaction
from nestedset.tree.errors import NestedSetError
from nestedset.tree.nested_set import NestedSet


def check_database_health(session: Session) -> dict:
    """Check database connectivity and return health status."""
    try:
        with transaction(session):
            session.execute(text("SELECT 1")).scalar()
        return {"database": "healthy", "connected": True}
    except SQLAlchemyError as e:
        return {"database": "unhealthy", "connected": False, "error": str(e)}


def check_tree_health(tree: NestedSet) -> dict:
    """Report the root and any nested set invariant violations."""
    try:
        problems = tree.check_integrity()
        root_id = tree.root_id() if tree.count() else None
    except (NestedSetError, SQLAlchemyError) as e:
        return {"tree": "unhealthy", "error": str(e)}

    return {
        "tree": "healthy" if not problems else "corrupted",
        "rootId": None if root_id is None else f"{root_id}",
        "problems": problems,
    }
