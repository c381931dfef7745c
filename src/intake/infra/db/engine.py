"""Engine construction. One engine per process, passed explicitly to its users."""
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine
import intake.models  # noqa: F401   # registers the users table mapper
from intake.infra.db.schema_compat import ensure_schema_compat


def _set_wal_mode(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL")
    cur.execute("PRAGMA synchronous=NORMAL")
    cur.close()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        # request handlers run on threadpool workers
        engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _set_wal_mode)
        return engine
    return create_engine(url, echo=echo, pool_pre_ping=True, pool_recycle=3600)


def init_db(engine: Engine) -> None:
    """Ping, create missing tables and backfill legacy columns."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    SQLModel.metadata.create_all(engine)
    ensure_schema_compat(engine)


__all__ = ["create_db_engine", "init_db"]
