"""
Storefront Backend — Product Request/Response Schemas
=======================================================

What:  Typed parse of the multipart text fields, and the API representation
       of products.
How:   `ProductCreate.from_form()` turns raw form strings into typed values
       before any image is materialized; `ProductResponse` carries images
       already rendered to strings (data URI or URL).
"""

import math
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from storefront.exceptions import MissingFieldsError, ValidationError


class ProductCreate(BaseModel):
    """Text fields of POST /api/products, coerced to their semantic types."""

    name: str
    description: Optional[str] = None
    price: Optional[float] = None

    @classmethod
    def from_form(cls, fields: Dict[str, str]) -> "ProductCreate":
        """
        Parse and validate raw form values.

        Raises:
            MissingFieldsError: `name` absent or blank.
            ValidationError:    `price` present but not a finite number.
        """
        name = (fields.get("name") or "").strip()
        if not name:
            raise MissingFieldsError(["name"], message="Product name is required")

        description = fields.get("description")

        price: Optional[float] = None
        raw_price = (fields.get("price") or "").strip()
        if raw_price:
            try:
                price = float(raw_price)
            except ValueError:
                price = None
            if price is None or not math.isfinite(price):
                raise ValidationError(
                    message=f"Price '{raw_price}' is not a valid number",
                    field="price",
                )

        return cls(name=name, description=description, price=price)


class ProductResponse(BaseModel):
    """
    What:  A product as returned to clients.

    Images:
        inline variant → "data:image/png;base64,iVBORw0..."
        remote variant → "https://res.cloudinary.com/..."
        absent photo   → null
    """
    id: str = Field(description="MongoDB ObjectId as a hex string")
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    photo: Optional[str] = None
    extraPhotos: List[Optional[str]] = Field(default_factory=list)
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ProductCreatedResponse(BaseModel):
    """Returned by POST /api/products with HTTP 201."""
    message: str = Field(default="Created")
    productId: str
    product: ProductResponse


class ProductDeletedResponse(BaseModel):
    """Returned by DELETE /api/products/{id}."""
    message: str = Field(default="Deleted")
    productId: str
