"""
Storefront Backend — Product Document Model
=============================================

What:  The shape of documents in the `products` collection.
How:   Pydantic models validate the assembled record before it is handed to
       the DocumentStore; `to_document()` produces the BSON-ready dict.
Who:   Built by ProductService.create_product(); read back by list/get.

Image representation (fixed per deployment):
    inline → {"data": <bytes>, "contentType": "image/png"}
    remote → "https://res.cloudinary.com/.../image.png"

    A single product never mixes the two.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, model_validator

PRODUCT_COLLECTION = "products"

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class InlineImage(BaseModel):
    """Image bytes plus declared content type, stored inside the document."""

    data: bytes
    contentType: str = DEFAULT_CONTENT_TYPE

    def to_document(self) -> Dict[str, Any]:
        return {"data": self.data, "contentType": self.contentType}


# Remote images are plain URL strings.
StoredImage = Union[InlineImage, str]


def image_kind(image: StoredImage) -> str:
    return "inline" if isinstance(image, InlineImage) else "remote"


class Product(BaseModel):
    """
    A product record ready for persistence.

    `_id`, `createdAt` and `updatedAt` are assigned by the store and are not
    part of this model.
    """

    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Optional[float] = None
    photo: Optional[StoredImage] = None
    extraPhotos: List[StoredImage] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_single_representation(self) -> "Product":
        images = ([self.photo] if self.photo is not None else []) + list(self.extraPhotos)
        kinds = {image_kind(image) for image in images}
        if len(kinds) > 1:
            raise ValueError("photo and extraPhotos must use the same image representation")
        return self

    def to_document(self) -> Dict[str, Any]:
        def encode(image: StoredImage) -> Any:
            return image.to_document() if isinstance(image, InlineImage) else image

        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "photo": encode(self.photo) if self.photo is not None else None,
            "extraPhotos": [encode(image) for image in self.extraPhotos],
        }
