# Services package init
"""
Storefront Backend — Services Layer
=====================================

What:  Pipelines sitting between routes (HTTP) and the document store.
How:   Services accept parsed input plus injected collaborators (store,
       materializer) and return response schemas.

Service Inventory:
    - MultipartIngestor: multipart parsing into fields + temp file handles
    - ImageMaterializer (abstract): upload → stored image representation
    - InlineImageMaterializer: bytes + content type kept in MongoDB
    - RemoteImageMaterializer: Cloudinary upload, URL kept in MongoDB
    - ProductService: ingest → materialize → persist; list; delete
    - OrderService: validate → persist; list newest first
"""

from storefront.config import Settings
from storefront.services.image_base import ImageMaterializer
from storefront.services.inline_image_service import InlineImageMaterializer
from storefront.services.remote_image_service import RemoteImageMaterializer


def build_materializer(settings: Settings) -> ImageMaterializer:
    """Select the image strategy configured by IMAGE_STORAGE."""
    if settings.image_storage == "remote":
        return RemoteImageMaterializer.from_settings(settings)
    return InlineImageMaterializer()
