"""Process-start wiring of the record store.

Mirrors the deployment contract: a missing or unreachable database is not
fatal; the service runs without persistence and endpoints decide how to
report that.
"""
from __future__ import annotations
from sqlalchemy.exc import SQLAlchemyError
from intake.config import Settings
from intake.infra.db.engine import create_db_engine, init_db
from intake.infra.db.record_store import SqlRecordStore
from intake.logging import logger


def connect_record_store(settings: Settings) -> SqlRecordStore | None:
    url = settings.database_url
    if url is None:
        logger.warning("DB environment variables missing → running WITHOUT database")
        return None

    engine = create_db_engine(url)
    try:
        init_db(engine)
    except SQLAlchemyError as exc:
        logger.error(f"Database init failed: {exc} → disabling DB")
        engine.dispose()
        return None

    logger.info("Database connected successfully")
    return SqlRecordStore(engine)
