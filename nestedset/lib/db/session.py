from collections.abc import Generator

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from nestedset.config import get_settings

load_dotenv()

DATABASE_URL = get_settings().database_url


def _emit_sqlite_begin(engine) -> None:
    """
    Let SQLAlchemy own transaction boundaries on pysqlite.

    The driver otherwise defers BEGIN until the first write, which leaves the
    boundary reads of a mutation outside the transaction and breaks SAVEPOINT.
    """

    @event.listens_for(engine, "connect")
    def disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def begin(conn):
        conn.exec_driver_sql("BEGIN")


def make_engine(url: str, **kwargs):
    sqlite = url.startswith("sqlite")
    if sqlite:
        # Requests are served from a thread pool
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, echo=False, **kwargs)
    if sqlite:
        _emit_sqlite_begin(engine)
    return engine


engine = make_engine(DATABASE_URL)
session_maker = sessionmaker(engine, class_=Session, expire_on_commit=False)


def get_session() -> Generator[Session, None, None]:
    with session_maker() as session:
        yield session
