"""
Storefront Backend — Multipart Ingestor
=========================================

What:  Parses a multipart/form-data request into text fields and uploaded
       file handles, streaming every uploaded part to a temporary file.
How:   Starlette's form parser (python-multipart) yields UploadFile parts;
       each one is copied with aiofiles to `<upload_dir>/<uuid><ext>`.
Who:   Called by POST /api/products before ProductService.create_product().
When:  Once per product-creation request.

Ownership:
    The ingestor creates temporary files but never deletes them after a
    successful parse. `ParsedForm.cleanup()` belongs to the caller.

Result shape:
    ParsedForm(
        fields={"name": "Charm", "price": "12.5"},
        files={"photo": [UploadedFile(...)], "extraPhotos": [UploadedFile(...), ...]},
    )
"""

import logging
import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import aiofiles
from fastapi import Request
from starlette.datastructures import UploadFile

from storefront.config import settings
from storefront.exceptions import FileStorageError, ParseError

logger = logging.getLogger(__name__)

# Bytes copied per read when spooling a part to disk.
CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class UploadedFile:
    """Handle for one uploaded part that has been written to disk."""

    path: str
    content_type: Optional[str] = None
    filename: Optional[str] = None
    size: int = 0


@dataclass
class ParsedForm:
    """Text fields and file handles of one multipart submission."""

    fields: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, List[UploadedFile]] = field(default_factory=dict)

    def files_for(self, name: str) -> List[UploadedFile]:
        """All files submitted under `name`; empty list when none."""
        return list(self.files.get(name, []))

    def all_files(self) -> List[UploadedFile]:
        return [upload for uploads in self.files.values() for upload in uploads]

    async def cleanup(self) -> None:
        """Remove every temporary file; already-deleted files are ignored."""
        for upload in self.all_files():
            await remove_temp_file(upload.path)


async def remove_temp_file(path: str) -> None:
    """
    Delete a temporary upload if it still exists.

    Errors are logged, not raised: cleanup runs in `finally` blocks and must
    not mask the original outcome of the request.
    """
    try:
        os.remove(path)
        logger.debug("Removed temp file: %s", Path(path).name)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove temp file %s: %s", path, str(e))


def _is_empty_part(part: UploadFile) -> bool:
    # Browsers send a nameless, zero-byte part for an untouched file input.
    return not part.filename and not part.size


class MultipartIngestor:
    """
    Turns a raw request into a ParsedForm.

    Each instance writes into one upload directory; the directory is created
    on construction.
    """

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("MultipartIngestor initialized with upload_dir=%s", self.upload_dir)

    async def parse(self, request: Request) -> ParsedForm:
        """
        Parse the request body.

        Raises:
            ParseError:       Body is not valid multipart/form-data.
            FileStorageError: A part could not be written to disk.

        On any failure while spooling, files already written are removed.
        """
        content_type = request.headers.get("content-type", "")
        if not content_type.lower().startswith("multipart/form-data"):
            raise ParseError(
                message="Expected a multipart/form-data request body",
                context={"content_type": content_type},
            )

        try:
            form = await request.form()
        except Exception as e:
            logger.warning("Multipart parse failed: %s", str(e))
            raise ParseError(
                context={"error_type": type(e).__name__, "error": str(e)},
            ) from e

        parsed = ParsedForm()
        try:
            for name, value in form.multi_items():
                if isinstance(value, UploadFile):
                    if _is_empty_part(value):
                        continue
                    upload = await self._spool(value)
                    parsed.files.setdefault(name, []).append(upload)
                else:
                    # Repeated text fields keep their first value.
                    parsed.fields.setdefault(name, value)
        except BaseException:
            await parsed.cleanup()
            raise
        finally:
            await form.close()

        logger.info(
            "Parsed multipart form: %d fields, %d files",
            len(parsed.fields),
            len(parsed.all_files()),
        )
        return parsed

    async def _spool(self, part: UploadFile) -> UploadedFile:
        """Copy one uploaded part to a uniquely named file in upload_dir."""
        suffix = Path(part.filename or "").suffix.lower()
        target = self.upload_dir / f"{uuid.uuid4()}{suffix}"
        size = 0
        try:
            async with aiofiles.open(target, "wb") as out:
                while True:
                    chunk = await part.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    await out.write(chunk)
        except OSError as e:
            logger.error("Failed to write temp file %s: %s", target, str(e))
            await remove_temp_file(str(target))
            raise FileStorageError(
                message="Failed to store uploaded file. Please try again.",
                context={"filename": part.filename, "os_error": str(e)},
            ) from e

        return UploadedFile(
            path=str(target),
            content_type=part.content_type,
            filename=part.filename,
            size=size,
        )


# ── Dependency ────────────────────────────────────────────────────────────
def get_ingestor(request: Request) -> MultipartIngestor:
    return request.app.state.ingestor
