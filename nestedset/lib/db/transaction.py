import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@contextmanager
def transaction(session: Session) -> Generator[Session, None, None]:
    """
    Run a block in one transaction: commit on success, roll back on any error.

    When the session already has a transaction open the block runs inside a
    SAVEPOINT, leaving the outer commit to the caller.
    """
    scope = session.begin_nested() if session.in_transaction() else session.begin()
    try:
        with scope:
            yield session
    except Exception as e:
        logger.warning(f"Transaction rolled back: {e!r}")
        raise
