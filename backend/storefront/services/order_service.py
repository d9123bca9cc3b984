"""
Storefront Backend — Order Service
====================================

What:  Validates bracelet order submissions and persists them.
Who:   Called by the /api/order route handlers.

Validation happens in two passes:
    1. Presence: all nine required fields must be present and non-blank.
       Failure → MissingFieldsError with the general "All fields are
       required" message (the missing names are in the details).
    2. Types: `age` must be an integer and `gender` one of male/female.
       Failure → ValidationError listing the offending fields.

Only a fully valid order reaches the store, as one insert.
"""

import logging
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from storefront.database import DocumentStore
from storefront.exceptions import MissingFieldsError, ValidationError
from storefront.models.order import ORDER_COLLECTION, REQUIRED_ORDER_FIELDS, Order
from storefront.schemas.order import OrderResponse

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_order_fields(payload: Mapping[str, Any]) -> List[str]:
    """Names of required fields that are absent or blank, in form order."""
    return [name for name in REQUIRED_ORDER_FIELDS if _is_blank(payload.get(name))]


def render_order(doc: Dict[str, Any]) -> OrderResponse:
    data = {name: doc.get(name) for name in REQUIRED_ORDER_FIELDS}
    return OrderResponse(
        id=str(doc["_id"]),
        createdAt=doc.get("createdAt"),
        updatedAt=doc.get("updatedAt"),
        **data,
    )


class OrderService:
    """Business logic for bracelet orders."""

    def validate(self, payload: Mapping[str, Any]) -> Order:
        """
        Parse a raw JSON body into an Order.

        Raises:
            MissingFieldsError: Any required field absent or blank.
            ValidationError:    Wrong type for `age` or unknown `gender`.
        """
        missing = missing_order_fields(payload)
        if missing:
            raise MissingFieldsError(missing)

        data = {name: payload[name] for name in REQUIRED_ORDER_FIELDS}
        try:
            return Order.model_validate(data)
        except PydanticValidationError as e:
            invalid = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
            raise ValidationError(
                message="Invalid order data: " + ", ".join(invalid),
                context={"invalid": invalid},
            ) from e

    async def create_order(
        self,
        store: DocumentStore,
        payload: Mapping[str, Any],
    ) -> OrderResponse:
        order = self.validate(payload)
        doc = await store.insert(ORDER_COLLECTION, order.to_document())
        logger.info("Order %s created (%s, %s)", doc["_id"], order.braceletColor, order.city)
        return render_order(doc)

    async def list_orders(self, store: DocumentStore) -> List[OrderResponse]:
        """All orders, newest first (ties broken by _id)."""
        docs = await store.find_all(ORDER_COLLECTION, sort=[("createdAt", -1), ("_id", -1)])
        return [render_order(doc) for doc in docs]


# ── Singleton Instance ────────────────────────────────────────────────────
order_service = OrderService()
