"""Ingest pipeline: size gate → multipart parse → file storage → record insert.

File writes and the insert are two independent effects. A failure after a
file was written leaves that file on disk with no row pointing at it; nothing
is rolled back and nothing is retried.
"""
from __future__ import annotations
from collections.abc import AsyncIterator
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, Headers, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import Request
from intake.domain.exceptions import (
    MalformedRequestError,
    MissingRequiredFileError,
    PayloadTooLargeError,
    StorageWriteError,
    StoreUnavailableError,
)
from intake.domain.models import (
    FILE_FIELDS,
    FileOutcome,
    IngestPolicy,
    Submission,
    SubmissionFields,
    UserRecord,
)
from intake.infra.db.record_store import RecordStore
from intake.logging import logger
from intake.storage.blob_store import BlobStore

MAX_FILE_PARTS = 10
MAX_TEXT_PARTS = 100


class IngestPipeline:
    def __init__(self, blob_store: BlobStore, record_store: RecordStore | None) -> None:
        self._blob_store = blob_store
        self._record_store = record_store

    @property
    def record_store_available(self) -> bool:
        return self._record_store is not None

    async def ingest(self, request: Request, policy: IngestPolicy) -> UserRecord:
        """Run every step for one request.

        Raises:
            MalformedRequestError: body too large, not multipart, or unparseable.
            MissingRequiredFileError: a required file part is absent.
            StorageWriteError: a file could not be written (policy permitting).
            StoreUnavailableError: files handled but no record store configured.
            PersistError: the insert failed after files were written.
        """
        submission = await self.parse(request, policy)
        try:
            outcomes = await run_in_threadpool(self.store_files, submission, policy)
        finally:
            await submission.close()
        return await run_in_threadpool(self.persist, submission.fields, outcomes)

    async def parse(self, request: Request, policy: IngestPolicy) -> Submission:
        _check_declared_length(request.headers, policy.max_body_bytes)

        content_type = request.headers.get("content-type", "")
        if not content_type.lower().startswith("multipart/form-data"):
            raise MalformedRequestError(f"expected multipart/form-data, got {content_type!r}")

        body = _BodyLimit(request, policy.max_body_bytes)
        parser = MultiPartParser(
            request.headers,
            body.stream(),
            max_files=MAX_FILE_PARTS,
            max_fields=MAX_TEXT_PARTS,
        )
        try:
            form = await parser.parse()
        except MultiPartException as exc:
            if body.exceeded:
                raise PayloadTooLargeError(policy.max_body_bytes) from exc
            raise MalformedRequestError(exc.message) from exc
        except ValueError as exc:  # python-multipart parse errors
            raise MalformedRequestError(str(exc)) from exc

        return Submission(
            fields=SubmissionFields(
                name=_text(form, "name"),
                email=_text(form, "email"),
                phone=_text(form, "phone"),
                city=_text(form, "city"),
            ),
            image=_upload(form, "image"),
            pdf=_upload(form, "pdf"),
            form=form,
        )

    def store_files(self, submission: Submission, policy: IngestPolicy) -> dict[str, FileOutcome]:
        """Resolve each file field in order, writing present ones as we go.

        A required-but-missing field aborts after any earlier field was
        already written; that file stays on disk.
        """
        outcomes: dict[str, FileOutcome] = {}
        for field in FILE_FIELDS:
            upload = submission.file(field)
            if upload is None:
                if policy.requires(field):
                    raise MissingRequiredFileError(field)
                outcomes[field] = FileOutcome(field)
                continue

            outcome = self._store_one(field, upload)
            if outcome.error is not None:
                if not policy.continue_on_storage_error:
                    raise outcome.error from outcome.error.cause
                logger.error(f"Failed to save {field}: {outcome.error.cause}; continuing without it")
            outcomes[field] = outcome
        return outcomes

    def persist(self, fields: SubmissionFields, outcomes: dict[str, FileOutcome]) -> UserRecord:
        record = UserRecord(
            name=fields.name,
            email=fields.email,
            phone=fields.phone,
            city=fields.city,
            image_path=outcomes["image"].path,
            pdf_path=outcomes["pdf"].path,
        )
        if self._record_store is None:
            logger.warning("Record store unavailable; stored files are kept without a row")
            raise StoreUnavailableError(record)

        record_id = self._record_store.insert(record)
        logger.info(f"Created user {record_id}")
        return record.with_id(record_id)

    def _store_one(self, field: str, upload: UploadFile) -> FileOutcome:
        try:
            upload.file.seek(0)
            stored = self._blob_store.write(upload.filename, upload.file)
        except OSError as exc:
            return FileOutcome(field, error=StorageWriteError(field, exc))
        return FileOutcome(field, stored=stored)


def _check_declared_length(headers: Headers, limit: int) -> None:
    declared = headers.get("content-length")
    if declared is None:
        return
    try:
        length = int(declared)
    except ValueError:
        raise MalformedRequestError(f"invalid Content-Length: {declared!r}") from None
    if length > limit:
        raise PayloadTooLargeError(limit)


class _BodyLimit:
    """Body stream that fails as soon as more than *limit* bytes arrive.

    The overflow is raised as MultiPartException so the parser closes the
    temp files it has spooled so far; `exceeded` tells the caller why.
    """

    def __init__(self, request: Request, limit: int) -> None:
        self._request = request
        self._limit = limit
        self.exceeded = False

    async def stream(self) -> AsyncIterator[bytes]:
        received = 0
        async for chunk in self._request.stream():
            received += len(chunk)
            if received > self._limit:
                self.exceeded = True
                raise MultiPartException(f"Request body exceeds {self._limit} bytes")
            yield chunk


def _text(form: FormData, key: str) -> str:
    value = form.get(key)
    return value if isinstance(value, str) else ""


def _upload(form: FormData, key: str) -> UploadFile | None:
    # An unselected <input type=file> is posted with an empty filename.
    value = form.get(key)
    if isinstance(value, UploadFile) and value.filename:
        return value
    return None
