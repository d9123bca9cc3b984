"""
Storefront Backend — Product Service (Upload-and-Persist Pipeline)
====================================================================

What:  Orchestrates product creation, listing, lookup and deletion.
How:   Composes the parsed multipart form, the configured ImageMaterializer
       and the DocumentStore, all passed in by the caller.
Who:   Called by the /api/products route handlers.

Creation Flow (POST /api/products):
    ┌──────────┐    ┌────────────┐    ┌───────────────┐    ┌──────────┐
    │  Ingest  │───▶│  Validate  │───▶│  Materialize  │───▶│  Insert  │
    │  (Route) │    │  (fields)  │    │ photo, extras │    │  (Mongo) │
    └──────────┘    └────────────┘    └───────────────┘    └──────────┘

    On failure at any step nothing is inserted, and the temporary files
    written by the ingestor are removed regardless of outcome.
"""

import logging
from typing import Any, Dict, List

from storefront.database import DocumentStore
from storefront.exceptions import (
    DependencyError,
    NotFoundError,
    StorefrontError,
    ValidationError,
)
from storefront.models.product import PRODUCT_COLLECTION, Product
from storefront.schemas.product import (
    ProductCreate,
    ProductCreatedResponse,
    ProductDeletedResponse,
    ProductResponse,
)
from storefront.services.image_base import ImageMaterializer
from storefront.services.ingest_service import ParsedForm

logger = logging.getLogger(__name__)

PHOTO_FIELD = "photo"
EXTRA_PHOTOS_FIELD = "extraPhotos"


def render_product(doc: Dict[str, Any], materializer: ImageMaterializer) -> ProductResponse:
    """Convert a stored product document into its API representation."""
    return ProductResponse(
        id=str(doc["_id"]),
        name=doc.get("name") or "",
        description=doc.get("description"),
        price=doc.get("price"),
        photo=materializer.render(doc.get("photo")),
        extraPhotos=[materializer.render(img) for img in (doc.get("extraPhotos") or [])],
        createdAt=doc.get("createdAt"),
        updatedAt=doc.get("updatedAt"),
    )


class ProductService:
    """
    Business logic for the product catalog.

    Stateless: every method receives its collaborators, so one instance is
    shared by all requests.
    """

    async def create_product(
        self,
        store: DocumentStore,
        materializer: ImageMaterializer,
        form: ParsedForm,
    ) -> ProductCreatedResponse:
        """
        Validate → materialize images → persist one product document.

        Raises:
            ValidationError:  Missing name or non-numeric price (nothing
                              uploaded, nothing persisted).
            FileStorageError / ImageUploadError: An image could not be
                              materialized; the whole request fails.
            DatabaseError:    The insert failed.
        """
        try:
            payload = ProductCreate.from_form(form.fields)

            photo_uploads = form.files_for(PHOTO_FIELD)
            extra_uploads = form.files_for(EXTRA_PHOTOS_FIELD)
            if len(photo_uploads) > 1:
                logger.warning(
                    "%d files submitted as '%s'; using the first",
                    len(photo_uploads),
                    PHOTO_FIELD,
                )

            photo = await materializer.materialize(photo_uploads[0]) if photo_uploads else None
            extras = await materializer.materialize_many(extra_uploads)

            try:
                product = Product(
                    name=payload.name,
                    description=payload.description,
                    price=payload.price,
                    photo=photo,
                    extraPhotos=extras,
                )
            except ValueError as e:
                raise ValidationError(message="Invalid product data", context={"error": str(e)}) from e

            doc = await store.insert(PRODUCT_COLLECTION, product.to_document())
            logger.info(
                "Product %s created (%s storage, %d extra photos)",
                doc["_id"],
                materializer.name,
                len(extras),
            )

            return ProductCreatedResponse(
                message="Created",
                productId=str(doc["_id"]),
                product=render_product(doc, materializer),
            )
        except StorefrontError:
            raise
        except Exception as e:
            logger.error("Unexpected error in create_product: %s", str(e), exc_info=True)
            raise DependencyError(
                message="Save failed",
                context={"error_type": type(e).__name__, "error": str(e)},
            ) from e
        finally:
            await form.cleanup()

    async def list_products(
        self,
        store: DocumentStore,
        materializer: ImageMaterializer,
    ) -> List[ProductResponse]:
        """All products, with every image rendered for the client."""
        docs = await store.find_all(PRODUCT_COLLECTION)
        return [render_product(doc, materializer) for doc in docs]

    async def get_product(
        self,
        store: DocumentStore,
        materializer: ImageMaterializer,
        product_id: str,
    ) -> ProductResponse:
        doc = await store.find_by_id(PRODUCT_COLLECTION, product_id)
        if doc is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return render_product(doc, materializer)

    async def delete_product(
        self,
        store: DocumentStore,
        product_id: str,
    ) -> ProductDeletedResponse:
        """
        Delete a product by id.

        Raises:
            NotFoundError: No product has this id (malformed ids included);
                           the store is left unchanged.
        """
        deleted = await store.delete_by_id(PRODUCT_COLLECTION, product_id)
        if deleted is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return ProductDeletedResponse(message="Deleted", productId=product_id)


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
