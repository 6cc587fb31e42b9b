from datetime import datetime
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator

# Keeps quantities inside a 32-bit BSON int
MAX_LINE_QUANTITY = 2**31 - 1


class CartLineRequest(BaseModel):
    product_id: str
    quantity: int = Field(..., gt=0, le=MAX_LINE_QUANTITY)

    @field_validator("product_id")
    @classmethod
    def product_id_is_object_id(cls, value: str) -> str:
        if not ObjectId.is_valid(value):
            raise ValueError("product_id must be a 24 character hex id")
        return value


class CartLineUpdate(CartLineRequest):
    # The line id comes from the URL; a body that sets it is rejected
    cart_id: Optional[str] = None


class CartLineResponse(BaseModel):
    cart_id: str
    product_id: str
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: dict) -> "CartLineResponse":
        return cls(
            cart_id=str(document["_id"]),
            product_id=str(document["product_id"]),
            quantity=document["quantity"],
            created_at=document.get("created_at"),
            updated_at=document.get("updated_at"),
        )


class AddItemResult(BaseModel):
    cart_id: Optional[str] = None
    created: bool
