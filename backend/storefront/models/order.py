"""
Storefront Backend — Order Document Model
===========================================

What:  The shape of documents in the `orders` collection (bracelet form).
Who:   Validated and persisted by OrderService.create_order().

Every field is required. `gender` is constrained to the two values the
customization form offers and is enforced here, not left to the store.
"""

from typing import Any, Dict, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

ORDER_COLLECTION = "orders"

REQUIRED_ORDER_FIELDS: Tuple[str, ...] = (
    "name",
    "email",
    "address",
    "age",
    "phone",
    "province",
    "city",
    "braceletColor",
    "gender",
)

GENDERS = ("male", "female")


class Order(BaseModel):
    """A validated order submission."""

    # Phone numbers and the like often arrive as JSON numbers.
    model_config = ConfigDict(coerce_numbers_to_str=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    address: str = Field(min_length=1)
    age: int = Field(ge=0)
    phone: str = Field(min_length=1)
    province: str = Field(min_length=1)
    city: str = Field(min_length=1)
    braceletColor: str = Field(min_length=1)
    gender: Literal["male", "female"]

    @field_validator("age", mode="before")
    @classmethod
    def reject_boolean_age(cls, v: Any) -> Any:
        # JSON true/false would otherwise pass as 1/0.
        if isinstance(v, bool):
            raise ValueError("age must be a whole number")
        return v

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()
