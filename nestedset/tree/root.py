import logging

from sqlalchemy.orm import Session

from nestedset.tree.errors import RootNotFoundError
from nestedset.tree.statements import TreeStatements

logger = logging.getLogger(__name__)


class RootResolver:
    """
    Locates the root: the single row whose left is the table-wide minimum
    and whose right is the table-wide maximum.

    The detected id is cached until :meth:`invalidate` is called. An id set
    explicitly in the configuration is returned without querying.
    """

    def __init__(self, session: Session, statements: TreeStatements):
        self.session = session
        self.statements = statements
        self._root_id = None

    def resolve(self):
        if self.statements.config.root_node_id is not None:
            return self.statements.config.root_node_id
        if self._root_id is None:
            self._root_id = self._detect()
        return self._root_id

    def invalidate(self) -> None:
        self._root_id = None

    def _detect(self):
        rows = self.session.execute(self.statements.root()).all()
        if len(rows) != 1:
            raise RootNotFoundError(len(rows))

        root_id = rows[0][0]
        logger.debug(f"Detected root node {root_id} in {self.statements.config.table_name}")
        return root_id
