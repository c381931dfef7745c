"""FastAPI dependencies. Everything is built once in create_app() and read off app.state."""
from __future__ import annotations
from fastapi import Request
from intake.domain.models import IngestPolicy
from intake.services.ingest_service import IngestPipeline


def get_pipeline(request: Request) -> IngestPipeline:
    return request.app.state.pipeline


def get_form_policy(request: Request) -> IngestPolicy:
    return request.app.state.form_policy


def get_api_policy(request: Request) -> IngestPolicy:
    return request.app.state.api_policy
