"""User API DTOs — pure Pydantic, zero ORM imports."""
from __future__ import annotations
from pydantic import BaseModel


class UserCreated(BaseModel):
    status: str = "success"
    message: str = "User created"


class ErrorDetail(BaseModel):
    detail: str


class HealthStatus(BaseModel):
    status: str
    database: str
