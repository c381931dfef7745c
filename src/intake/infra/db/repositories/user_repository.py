"""Repository for User records. No business logic; caller owns the transaction."""
from __future__ import annotations
from sqlalchemy import func
from sqlmodel import Session, select
from intake.models import User


class UserRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def count(self) -> int:
        return self._s.exec(select(func.count()).select_from(User)).one()

    def create(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        city: str,
        image_path: str,
        pdf_path: str,
    ) -> User:
        user = User(
            name=name,
            email=email,
            phone=phone,
            city=city,
            image_path=image_path,
            pdf_path=pdf_path,
        )
        self._s.add(user)
        self._s.flush()  # get generated PK without committing
        return user
