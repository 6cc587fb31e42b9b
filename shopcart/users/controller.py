# shopcart/users/controller.py
from fastapi import APIRouter, status

from ..auth.service import CurrentUser
from ..database.core import DbSession
from . import models
from .service import AddressService, UserService

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile", response_model=models.ProfileResponse)
def get_profile(current_user: CurrentUser, db: DbSession):
    """Get the authenticated user's profile"""
    return UserService.get_profile(db, current_user.user_id)


@router.post("/profile")
def update_profile(profile: models.UpdateProfileRequest, current_user: CurrentUser, db: DbSession):
    UserService.update_profile(db, current_user.user_id, profile)
    return {"message": "User updated successfully"}


@router.get("/address")
def get_addresses(current_user: CurrentUser, db: DbSession):
    addresses = AddressService.list_addresses(db, current_user.user_id)
    return {"message": [a.model_dump() for a in addresses]}


@router.post("/address", status_code=status.HTTP_201_CREATED)
def add_address(address: models.AddressCreate, current_user: CurrentUser, db: DbSession):
    address_id = AddressService.add_address(db, current_user.user_id, address)
    return {"message": "Address created successfully", "id": address_id}


@router.delete("/address")
def delete_all_addresses(current_user: CurrentUser, db: DbSession):
    AddressService.delete_all_addresses(db, current_user.user_id)
    return {"message": "All Addresses successfully deleted"}


@router.delete("/address/{address_id}")
def delete_address(address_id: str, current_user: CurrentUser, db: DbSession):
    AddressService.delete_address(db, current_user.user_id, address_id)
    return {"message": f"Address with ID {address_id} deleted successfully"}
