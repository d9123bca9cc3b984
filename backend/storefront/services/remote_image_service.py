"""
Storefront Backend — Remote (Cloudinary) Image Strategy
=========================================================

What:  Uploads product images to Cloudinary and stores only the URL.
How:   Calls the synchronous cloudinary SDK in Starlette's threadpool so the
       event loop keeps serving other requests during the upload.
Who:   Active when IMAGE_STORAGE=remote.

Credentials:
    Passed per call (cloud_name / api_key / api_secret) rather than through
    `cloudinary.config()`, so no module-level SDK state is mutated.

Temp file lifecycle:
    This strategy does not delete the temporary file itself; the Product
    Pipeline's `ParsedForm.cleanup()` removes it after the request.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import cloudinary.api
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from storefront.config import Settings
from storefront.exceptions import ImageUploadError
from storefront.services.image_base import ImageMaterializer
from storefront.services.ingest_service import UploadedFile
from storefront.services.inline_image_service import render_stored_image

logger = logging.getLogger(__name__)


class RemoteImageMaterializer(ImageMaterializer):
    """Cloudinary-backed image storage."""

    name = "remote"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: Optional[str] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        logger.info(
            "RemoteImageMaterializer initialized (cloud=%s, folder=%s)",
            cloud_name or "<unset>",
            folder or "<root>",
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteImageMaterializer":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder or None,
        )

    def _credentials(self) -> Dict[str, Any]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "secure": True,
        }

    async def materialize(self, upload: UploadedFile) -> str:
        options = self._credentials()
        options["resource_type"] = "image"
        if self.folder:
            options["folder"] = self.folder

        try:
            result = await run_in_threadpool(cloudinary.uploader.upload, upload.path, **options)
        except Exception as e:
            # The SDK raises cloudinary.exceptions.Error for API failures and
            # plain transport errors (urllib3, OSError) for network problems.
            logger.error(
                "Cloudinary upload failed for %s: %s",
                upload.filename or Path(upload.path).name,
                str(e),
            )
            raise ImageUploadError(
                context={
                    "filename": upload.filename,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            ) from e

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise ImageUploadError(
                message="Image service returned no URL",
                context={"filename": upload.filename, "public_id": result.get("public_id")},
            )

        logger.info("Uploaded image to Cloudinary: %s", result.get("public_id"))
        return url

    def render(self, stored: Any) -> Optional[str]:
        # URLs pass through; binary payloads from an earlier inline
        # deployment still render as data URIs.
        return render_stored_image(stored)

    async def health_check(self) -> bool:
        """Checks credentials with the Admin API ping endpoint."""
        if not (self.cloud_name and self.api_key and self.api_secret):
            return False
        try:
            await run_in_threadpool(cloudinary.api.ping, **self._credentials())
            return True
        except Exception as e:
            logger.warning("Cloudinary health check failed: %s", str(e))
            return False
