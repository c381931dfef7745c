"""Plain domain types shared by the pipeline and its stores. No ORM, no HTTP."""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from starlette.datastructures import FormData, UploadFile
    from intake.domain.exceptions import StorageWriteError

FILE_FIELDS = ("image", "pdf")


@dataclass(frozen=True)
class IngestPolicy:
    """Per-endpoint knobs for the ingest pipeline."""

    max_body_bytes: int
    image_required: bool = False
    pdf_required: bool = False
    # Abort on the first failed file write, or log it and store the record
    # with an empty path for that file.
    continue_on_storage_error: bool = False

    def requires(self, field: str) -> bool:
        return {"image": self.image_required, "pdf": self.pdf_required}[field]


@dataclass(frozen=True)
class SubmissionFields:
    name: str = ""
    email: str = ""
    phone: str = ""
    city: str = ""


@dataclass
class Submission:
    """One parsed request. Owns the spooled upload files until close()."""

    fields: SubmissionFields
    image: UploadFile | None = None
    pdf: UploadFile | None = None
    form: FormData | None = None

    def file(self, field: str) -> UploadFile | None:
        return getattr(self, field)

    async def close(self) -> None:
        if self.form is not None:
            await self.form.close()
            return
        for upload in (self.image, self.pdf):
            if upload is not None:
                await upload.close()


@dataclass(frozen=True)
class StoredFile:
    original_name: str
    storage_path: str
    size_bytes: int
    content_hash: str


@dataclass(frozen=True)
class FileOutcome:
    """Result of resolving one file field: stored, absent, or failed."""

    field: str
    stored: StoredFile | None = None
    error: StorageWriteError | None = None

    @property
    def path(self) -> str:
        return self.stored.storage_path if self.stored else ""


@dataclass(frozen=True)
class UserRecord:
    name: str
    email: str
    phone: str
    city: str
    image_path: str = ""
    pdf_path: str = ""
    id: int | None = None

    def with_id(self, record_id: int) -> "UserRecord":
        return replace(self, id=record_id)
