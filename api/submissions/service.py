"""
Submission intake "service layer".

Flow for one request:
1) Check required proposal text fields
2) Upload every attached file to object storage, one at a time
   (a failed file is logged and skipped, the batch keeps going)
3) Insert one `form_submissions` row with the keys that made it
4) On insert failure, delete this request's objects (best effort)
"""

from __future__ import annotations

import logging
import os

from fastapi import HTTPException, UploadFile, status
from starlette.concurrency import run_in_threadpool

from core.storage import StorageBackend, StorageError, build_object_key

from . import repository
from .schemas import FOLDERS, ProposalFields, SubmissionCreated, UploadOutcome

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50 MiB

# Field name -> label the form uses.
REQUIRED_FIELDS = {
    "title": "title",
    "description": "description",
    "goals": "goals",
    "type": "type",
    "team_info": "teamInfo",
    "budget_breakdown": "budgetBreakdown",
}


class UploadTooLargeError(ValueError):
    pass


def max_upload_bytes_from_env() -> int:
    """
    Read MAX_UPLOAD_BYTES from env, falling back to a sane default.
    """
    raw = os.environ.get("MAX_UPLOAD_BYTES", "").strip()
    if not raw:
        return DEFAULT_MAX_UPLOAD_BYTES

    try:
        value = int(raw)
    except ValueError:
        raise HTTPException(
            status_code=500,
            detail="Invalid MAX_UPLOAD_BYTES. It must be an integer.",
        )

    if value <= 0:
        raise HTTPException(
            status_code=500,
            detail="Invalid MAX_UPLOAD_BYTES. It must be > 0.",
        )

    return value


def validate_fields(fields: ProposalFields) -> None:
    missing = [
        label
        for attr, label in REQUIRED_FIELDS.items()
        if not (getattr(fields, attr) or "").strip()
    ]
    if missing:
        logger.info("submission_rejected missing=%s", ",".join(missing))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Please fill in all required fields: {', '.join(missing)}.",
        )


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise UploadTooLargeError(f"{file.filename} is larger than {max_bytes} bytes.")

    return bytes(buf)


async def upload_one(
    storage: StorageBackend,
    file: UploadFile,
    *,
    folder: str,
    max_bytes: int,
) -> tuple[str, str] | None:
    """
    Upload one file and return (key, url), or None for an empty part.
    """
    if not file.filename:
        logger.warning("file_skipped reason=no_filename folder=%s", folder)
        return None

    data = await read_upload_bytes(file, max_bytes)
    if not data:
        logger.warning("file_skipped reason=empty folder=%s filename=%s", folder, file.filename)
        return None

    key = build_object_key(folder, file.filename)
    # Storage SDKs block; keep them off the event loop.
    url = await run_in_threadpool(storage.put_object, key, data, content_type=file.content_type)
    logger.info("file_uploaded folder=%s key=%s bytes=%s", folder, key, len(data))
    return key, url


async def upload_batch(
    storage: StorageBackend,
    files_by_folder: dict[str, list[UploadFile]],
    *,
    max_bytes: int,
) -> UploadOutcome:
    outcome = UploadOutcome.empty()

    for folder in FOLDERS:
        for file in files_by_folder.get(folder) or []:
            try:
                uploaded = await upload_one(storage, file, folder=folder, max_bytes=max_bytes)
            except UploadTooLargeError:
                logger.warning("file_upload_failed reason=too_large folder=%s filename=%s", folder, file.filename)
                outcome.failed_files.append(file.filename or "")
                continue
            except Exception:
                # One bad file must not sink the whole submission.
                logger.exception("file_upload_failed folder=%s filename=%s", folder, file.filename)
                outcome.failed_files.append(file.filename or "")
                continue

            if uploaded is None:
                continue
            key, url = uploaded
            outcome.keys[folder].append(key)
            outcome.urls[folder].append(url)

    return outcome


async def delete_uploaded(storage: StorageBackend, keys: list[str]) -> None:
    for key in keys:
        try:
            await run_in_threadpool(storage.delete_object, key)
        except StorageError:
            logger.exception("orphan_cleanup_failed key=%s", key)


async def create_submission(
    fields: ProposalFields,
    files_by_folder: dict[str, list[UploadFile]],
    *,
    storage: StorageBackend,
    submitted_by: int | None = None,
) -> SubmissionCreated:
    validate_fields(fields)
    max_bytes = max_upload_bytes_from_env()

    outcome = await upload_batch(storage, files_by_folder, max_bytes=max_bytes)

    try:
        submission_id = await repository.insert_submission(
            fields,
            image_keys=outcome.keys["images"],
            video_keys=outcome.keys["videos"],
            document_keys=outcome.keys["documents"],
            submitted_by=submitted_by,
        )
    except Exception as exc:
        logger.exception("submission_insert_failed title=%r", fields.title)
        await delete_uploaded(storage, outcome.all_keys())
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not save submission.",
        ) from exc

    logger.info(
        "submission_created submission_id=%s files=%s failed=%s",
        submission_id,
        len(outcome.all_keys()),
        len(outcome.failed_files),
    )

    if outcome.partial_failure:
        message = (
            f"Mission '{fields.title}' submitted successfully! "
            "WARNING: Some files could not be uploaded."
        )
    else:
        message = f"Mission '{fields.title}' and all associated files submitted successfully!"

    return SubmissionCreated(
        submission_id=submission_id,
        message=message,
        partial_failure=outcome.partial_failure,
        failed_files=outcome.failed_files,
        image_urls=outcome.urls["images"],
        video_urls=outcome.urls["videos"],
        document_urls=outcome.urls["documents"],
    )
