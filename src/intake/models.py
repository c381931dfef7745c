"""ORM table mappings."""
from __future__ import annotations
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=64)
    city: str = Field(default="", max_length=255)
    image_path: str = Field(default="", max_length=1024)
    pdf_path: str = Field(default="", max_length=1024)
