from typing import Optional
from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """Schema for adding a product to the catalog"""
    product_name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    rating: float = Field(..., ge=0, allow_inf_nan=False)
    image_url: str = Field(..., min_length=1)
    # Ids are assigned by the store
    product_id: Optional[str] = None


class ProductUpdate(BaseModel):
    product_name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    rating: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    image_url: Optional[str] = Field(None, min_length=1)


class ProductResponse(BaseModel):
    product_id: str
    product_name: str
    price: float
    rating: float = 0
    image_url: str = ""

    @classmethod
    def from_document(cls, document: dict) -> "ProductResponse":
        return cls(
            product_id=str(document["_id"]),
            product_name=document["product_name"],
            price=document["price"],
            rating=document.get("rating", 0),
            image_url=document.get("image_url", ""),
        )
