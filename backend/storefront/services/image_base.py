"""
Storefront Backend — Abstract Image Materializer
==================================================

What:  Contract for turning an uploaded file into a storable product image.
How:   Concrete strategies implement materialize(), render() and
       health_check(); materialize_many() is shared.
Who:   Selected once at startup by build_materializer() and injected into
       ProductService calls.

Strategies:
    - InlineImageMaterializer: bytes + content type stored in MongoDB
    - RemoteImageMaterializer: file uploaded to Cloudinary, URL stored
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from fastapi import Request

from storefront.models.product import StoredImage
from storefront.services.ingest_service import UploadedFile

logger = logging.getLogger(__name__)


class ImageMaterializer(ABC):
    """
    Abstract interface for image storage strategies.

    Contract:
        - materialize() accepts one UploadedFile and returns a StoredImage
        - failures are raised as StorefrontError subclasses
        - render() converts a stored value (as read back from MongoDB) into
          the string clients receive, or None when there is no image
    """

    name: str = "abstract"

    @abstractmethod
    async def materialize(self, upload: UploadedFile) -> StoredImage:
        """
        Convert one uploaded file into its stored representation.

        Raises:
            FileStorageError: Temp file could not be read.
            ImageUploadError: Hosted image service rejected the upload.
        """
        ...

    async def materialize_many(self, uploads: Sequence[UploadedFile]) -> List[StoredImage]:
        """
        Materialize a batch concurrently.

        All invocations run to completion before this returns. The result
        order matches `uploads`. If any invocation failed, the first failure
        (in input order) is raised and no partial list is returned.
        """
        if not uploads:
            return []

        results = await asyncio.gather(
            *(self.materialize(upload) for upload in uploads),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.warning(
                "%s materializer: %d of %d images failed",
                self.name,
                len(failures),
                len(uploads),
            )
            raise failures[0]
        return list(results)

    @abstractmethod
    def render(self, stored: Any) -> Optional[str]:
        """Public string form of a stored image (None when absent)."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        ...


# ── Dependency ────────────────────────────────────────────────────────────
def get_materializer(request: Request) -> ImageMaterializer:
    return request.app.state.materializer
