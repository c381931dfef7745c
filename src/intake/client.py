"""Typed HTTP client for programmatic submitters.

Only imports from ``intake.api.schemas`` — never ORM, never DB.
"""
from __future__ import annotations

import mimetypes
from pathlib import Path

import httpx

from intake.api.schemas.users import HealthStatus, UserCreated


_DEFAULT_BASE_URL = "http://127.0.0.1:8080"


class APIError(Exception):
    """Raised when the backend returns a 4xx/5xx response."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"[{status_code}] {detail}")


class IntakeClient:
    """One method per backend endpoint.  All return pure Pydantic DTOs."""

    def __init__(
        self,
        base_url: str = _DEFAULT_BASE_URL,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 300.0,
    ) -> None:
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "IntakeClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        raise APIError(resp.status_code, detail)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        city: str,
        image: Path,
        pdf: Path,
    ) -> UserCreated:
        image, pdf = Path(image), Path(pdf)
        with image.open("rb") as image_fh, pdf.open("rb") as pdf_fh:
            resp = self._client.post(
                "/api/users",
                data={"name": name, "email": email, "phone": phone, "city": city},
                files={
                    "image": (image.name, image_fh, _guess_type(image)),
                    "pdf": (pdf.name, pdf_fh, "application/pdf"),
                },
            )
        self._raise_for_status(resp)
        return UserCreated.model_validate(resp.json())

    # ------------------------------------------------------------------
    # Ops
    # ------------------------------------------------------------------

    def health(self) -> HealthStatus:
        resp = self._client.get("/health")
        self._raise_for_status(resp)
        return HealthStatus.model_validate(resp.json())


def _guess_type(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"
