"""Shared fixtures.

  engine          — isolated temp-file SQLite engine with the users table.
  record_store    — SqlRecordStore on that engine.
  settings        — Settings with a temp upload dir, small body limits and no DB env.
  make_app        — create_app() with the fixtures above; kwargs override settings.
  client          — TestClient backed by the test database.
  client_without_db — TestClient whose record store is unavailable.
"""
import pytest
from sqlmodel import SQLModel, Session, select

from intake.config import Settings
from intake.infra.db.engine import create_db_engine, init_db
from intake.infra.db.record_store import SqlRecordStore
from intake.models import User

_DB_ENV = (
    "DB_USER", "DB_PASS", "DB_HOST", "DB_PORT", "DB_NAME",
    "_DB_USER", "_DB_PASS", "_DB_HOST", "_DB_PORT", "_DB_NAME",
    "DATABASE_URL", "UPLOAD_DIR",
)


@pytest.fixture
def engine(tmp_path):
    """File-backed (not :memory:) so threadpool workers share one database."""
    db_path = tmp_path / "test_intake.db"
    test_engine = create_db_engine(f"sqlite:///{db_path}")
    init_db(test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def record_store(engine):
    return SqlRecordStore(engine)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir, monkeypatch):
    for name in _DB_ENV:
        monkeypatch.delenv(name, raising=False)
    return Settings(
        _env_file=None,
        UPLOAD_DIR=upload_dir,
        FORM_MAX_BODY_BYTES=256 * 1024,
        API_MAX_BODY_BYTES=512 * 1024,
    )


@pytest.fixture
def make_app(settings, record_store):
    from intake.api.app import create_app

    def _make(*, db: bool = True, blob_store=None, store=None, **overrides):
        app_settings = settings.model_copy(update=overrides)
        if store is None and db:
            store = record_store
        return create_app(app_settings, blob_store=blob_store, record_store=store)

    return _make


@pytest.fixture
def client(make_app):
    from fastapi.testclient import TestClient

    with TestClient(make_app()) as c:
        yield c


@pytest.fixture
def client_without_db(make_app):
    from fastapi.testclient import TestClient

    with TestClient(make_app(db=False)) as c:
        yield c


@pytest.fixture
def stored_users(engine):
    """Callable returning every users row, oldest first."""
    def _rows() -> list[User]:
        with Session(engine) as s:
            return list(s.exec(select(User).order_by(User.id)).all())
    return _rows


@pytest.fixture
def uploaded_files(upload_dir):
    """Callable returning every file currently in the upload dir."""
    def _files():
        if not upload_dir.exists():
            return []
        return sorted(p for p in upload_dir.iterdir() if p.is_file())
    return _files
