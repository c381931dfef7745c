"""Relational persistence of submitted records."""
from __future__ import annotations
from typing import Protocol
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from intake.domain.exceptions import PersistError
from intake.domain.models import UserRecord
from intake.infra.db.repositories.user_repository import UserRepository
from intake.infra.db.uow import UnitOfWork


class RecordStore(Protocol):
    def insert(self, record: UserRecord) -> int:
        """Insert one row and return its generated id; raise PersistError on failure."""
        ...


class SqlRecordStore:
    """RecordStore over the ``users`` table; one UnitOfWork per insert.

    The engine's connection pool makes this safe to share between requests.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def insert(self, record: UserRecord) -> int:
        try:
            with UnitOfWork(self._engine) as uow:
                user = UserRepository(uow.session).create(
                    name=record.name,
                    email=record.email,
                    phone=record.phone,
                    city=record.city,
                    image_path=record.image_path,
                    pdf_path=record.pdf_path,
                )
                uow.commit()
                return user.id
        except SQLAlchemyError as exc:
            raise PersistError(exc) from exc

    def count(self) -> int:
        with UnitOfWork(self._engine) as uow:
            return UserRepository(uow.session).count()
