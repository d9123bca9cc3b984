"""
Storefront Backend — Inline Image Strategy
============================================

What:  Stores uploaded images directly inside the product document.
How:   Reads the temporary file with aiofiles, keeps the declared content
       type, removes the temporary file, and returns an InlineImage.
       Listings re-encode the payload as a `data:` URI.
Who:   Active when IMAGE_STORAGE=inline (the default).

Temp file lifecycle:
    The temporary file is removed in a `finally` block, so it is gone after
    both successful and failed reads.
"""

import base64
import logging
from pathlib import Path
from typing import Any, Optional

import aiofiles

from storefront.exceptions import FileStorageError
from storefront.models.product import DEFAULT_CONTENT_TYPE, InlineImage
from storefront.services.image_base import ImageMaterializer
from storefront.services.ingest_service import UploadedFile, remove_temp_file

logger = logging.getLogger(__name__)


def to_data_uri(data: bytes, content_type: Optional[str]) -> str:
    """Encode bytes as `data:<content-type>;base64,<payload>`."""
    payload = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{payload}"


def render_stored_image(stored: Any) -> Optional[str]:
    """
    Render any stored image value for API responses.

    - None / empty          → None
    - URL string            → unchanged
    - {"data", "contentType"} mapping or InlineImage → data URI
    """
    if not stored:
        return None
    if isinstance(stored, str):
        return stored
    if isinstance(stored, InlineImage):
        return to_data_uri(stored.data, stored.contentType)
    if isinstance(stored, dict) and stored.get("data") is not None:
        return to_data_uri(stored["data"], stored.get("contentType"))
    logger.warning("Unrecognized stored image value of type %s", type(stored).__name__)
    return None


class InlineImageMaterializer(ImageMaterializer):
    """Reads each upload fully into memory and embeds it in the document."""

    name = "inline"

    async def materialize(self, upload: UploadedFile) -> InlineImage:
        try:
            async with aiofiles.open(upload.path, "rb") as f:
                data = await f.read()
        except OSError as e:
            logger.error("Failed to read upload %s: %s", Path(upload.path).name, str(e))
            raise FileStorageError(
                message="Failed to read uploaded image. Please try again.",
                context={"filename": upload.filename, "os_error": str(e)},
            ) from e
        finally:
            await remove_temp_file(upload.path)

        logger.debug(
            "Inline image materialized: %s (%d bytes)",
            upload.filename or Path(upload.path).name,
            len(data),
        )
        return InlineImage(
            data=data,
            contentType=upload.content_type or DEFAULT_CONTENT_TYPE,
        )

    def render(self, stored: Any) -> Optional[str]:
        return render_stored_image(stored)

    async def health_check(self) -> bool:
        # Nothing external to reach; images live in the database.
        return True
