"""
Storefront Backend — Order Response Schemas
=============================================

What:  API representation of bracelet orders.

OrderResponse does not reuse the Order input constraints: documents
written before a rule existed (a fractional age, "Male") still list
instead of failing the whole response.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OrderResponse(BaseModel):
    """An order as returned to clients: the stored fields plus identity."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(description="MongoDB ObjectId as a hex string")
    name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    age: Optional[Union[int, float, str]] = None
    phone: Optional[str] = None
    province: Optional[str] = None
    city: Optional[str] = None
    braceletColor: Optional[str] = None
    gender: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class OrderCreatedResponse(BaseModel):
    """
    Returned by POST /api/order with HTTP 201.

    Example:
        {"success": true, "message": "Order created successfully", "order": {...}}
    """
    success: bool = Field(default=True)
    message: str = Field(default="Order created successfully")
    order: OrderResponse
