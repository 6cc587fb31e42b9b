from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field


class AddressCreate(BaseModel):
    """Schema for adding an address to the user's address book"""
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country_code: str = Field(..., min_length=1)


class AddressResponse(AddressCreate):
    address_id: str

    @classmethod
    def from_document(cls, document: dict) -> "AddressResponse":
        return cls(
            address_id=str(document["_id"]),
            street=document.get("street", ""),
            city=document.get("city", ""),
            state=document.get("state", ""),
            postal_code=document.get("postal_code", ""),
            country_code=document.get("country_code", ""),
        )


class UpdateProfileRequest(BaseModel):
    first_name: str = Field(..., min_length=3, max_length=20)
    last_name: str
    email: EmailStr
    address: List[AddressCreate]


class ProfileResponse(BaseModel):
    user_id: str
    first_name: str
    last_name: str = ""
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    address: List[AddressResponse] = []

    @classmethod
    def from_document(cls, document: dict) -> "ProfileResponse":
        return cls(
            user_id=str(document["_id"]),
            first_name=document.get("first_name", ""),
            last_name=document.get("last_name") or "",
            email=document["email"],
            created_at=document.get("created_at"),
            updated_at=document.get("updated_at"),
            address=[AddressResponse.from_document(a) for a in document.get("address_details") or []],
        )
