"""
Storefront Backend — Order Route Handlers
===========================================

What:  POST /api/order (submit the bracelet form) and GET /api/order.

The body is accepted as a free-form JSON object so that missing fields
produce the API's own 400 "All fields are required" response instead of
FastAPI's per-field 422.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from storefront.database import DocumentStore, get_store
from storefront.schemas.common import ErrorResponse
from storefront.schemas.order import OrderCreatedResponse, OrderResponse
from storefront.services.order_service import order_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Orders"])


@router.post(
    "/order",
    status_code=201,
    response_model=OrderCreatedResponse,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Database failure", "model": ErrorResponse},
    },
    summary="Submit a bracelet order",
)
async def create_order(
    payload: Dict[str, Any] = Body(
        ...,
        examples=[
            {
                "name": "A",
                "email": "a@b.com",
                "address": "x",
                "age": 20,
                "phone": "123",
                "province": "P",
                "city": "C",
                "braceletColor": "red",
                "gender": "male",
            }
        ],
    ),
    store: DocumentStore = Depends(get_store),
) -> OrderCreatedResponse:
    order = await order_service.create_order(store, payload)
    return OrderCreatedResponse(order=order)


@router.get(
    "/order",
    response_model=List[OrderResponse],
    responses={500: {"description": "Database failure", "model": ErrorResponse}},
    summary="List orders, newest first",
)
async def list_orders(
    store: DocumentStore = Depends(get_store),
) -> List[OrderResponse]:
    return await order_service.list_orders(store)
