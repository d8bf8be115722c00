import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from alembic import command
from alembic.config import Config
from nestedset.lib.db.session import get_session, make_engine
from nestedset.lib.db.transaction import transaction
from nestedset.main import app
from nestedset.tree.mutations import NodeSpec
from nestedset.tree.nested_set import NestedSet
from tests.factories.tree_node import TreeNodeFactory

ROOT = Path(__file__).resolve().parent.parent

# Reduce logging noise during tests
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("alembic").setLevel(logging.WARNING)
logging.getLogger("faker.factory").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

# 1 Root (1,22)
# ├── 2 Electronics (2,13)
# │   ├── 3 Phones (3,8)
# │   │   ├── 4 Android (4,5)
# │   │   └── 5 iPhone (6,7)
# │   └── 6 Laptops (9,12)
# │       └── 7 Ultrabooks (10,11)
# └── 8 Books (14,21)
#     ├── 9 Fiction (15,16)
#     ├── 10 Science (17,18)
#     └── 11 History (19,20)
CATALOG = [
    NodeSpec(id=1, values={"label": "Root"}),
    NodeSpec(id=2, parent_id=1, values={"label": "Electronics"}),
    NodeSpec(id=3, parent_id=2, values={"label": "Phones"}),
    NodeSpec(id=4, parent_id=3, values={"label": "Android"}),
    NodeSpec(id=5, parent_id=3, values={"label": "iPhone"}),
    NodeSpec(id=6, parent_id=2, values={"label": "Laptops"}),
    NodeSpec(id=7, parent_id=6, values={"label": "Ultrabooks"}),
    NodeSpec(id=8, parent_id=1, values={"label": "Books"}),
    NodeSpec(id=9, parent_id=8, values={"label": "Fiction"}),
    NodeSpec(id=10, parent_id=8, values={"label": "Science"}),
    NodeSpec(id=11, parent_id=8, values={"label": "History"}),
]

CATALOG_BOUNDS = {
    1: (1, 22),
    2: (2, 13),
    3: (3, 8),
    4: (4, 5),
    5: (6, 7),
    6: (9, 12),
    7: (10, 11),
    8: (14, 21),
    9: (15, 16),
    10: (17, 18),
    11: (19, 20),
}


@pytest.fixture(scope="function")
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'nested_set.db'}"


@pytest.fixture(scope="function")
def db_session(database_url: str) -> Generator[Session, None, None]:
    # Run migrations instead of creating tables directly
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(ROOT / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)

    command.downgrade(alembic_cfg, "base")
    command.upgrade(alembic_cfg, "head")

    engine = make_engine(database_url, poolclass=NullPool)
    with Session(engine, expire_on_commit=False) as session:
        yield session
        session.rollback()
    engine.dispose()


@pytest.fixture(scope="function")
def tree(db_session: Session) -> NestedSet:
    """The catalog tree, persisted."""
    with transaction(db_session):
        TreeNodeFactory.create_numbered_in(db_session, CATALOG)
    return NestedSet(db_session)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
