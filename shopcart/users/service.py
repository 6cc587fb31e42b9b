from datetime import datetime, timezone
from typing import List, Optional
import logging

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..core.config import settings
from ..core.exceptions import (
    AddressNotFoundError,
    CreateFailedError,
    UpdateFailedError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from ..database.core import USERS, deadline, parse_object_id, store_errors
from . import models

logger = logging.getLogger(__name__)


def get_user_document(db: Database, user_id, projection: Optional[dict] = None) -> dict:
    """Load a user document or raise UserNotFoundError."""
    user = db[USERS].find_one({"_id": parse_object_id(user_id)}, projection)
    if not user:
        logger.warning(f"User not found with ID: {user_id}")
        raise UserNotFoundError()
    return user


class UserService:

    @staticmethod
    def get_profile(db: Database, user_id: str) -> models.ProfileResponse:
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"password": 0, "token": 0, "refresh_token": 0})
        return models.ProfileResponse.from_document(user)

    @staticmethod
    def update_profile(db: Database, user_id: str, profile: models.UpdateProfileRequest) -> None:
        """Replace name, email and address book of the user"""
        update = {
            "$set": {
                "first_name": profile.first_name,
                "last_name": profile.last_name,
                "email": profile.email,
                "address_details": [
                    {"_id": ObjectId(), **address.model_dump()} for address in profile.address
                ],
                "updated_at": datetime.now(timezone.utc),
            }
        }

        user_oid = parse_object_id(user_id)
        with deadline(settings.DB_TIMEOUT_SECONDS):
            if db[USERS].count_documents({"email": profile.email, "_id": {"$ne": user_oid}}, limit=1) > 0:
                logger.warning(f"Profile update for {user_id} rejected: email already registered.")
                raise UserAlreadyExistsError()

            with store_errors(UpdateFailedError, "Failed to update user"):
                try:
                    result = db[USERS].update_one({"_id": user_oid}, update)
                except DuplicateKeyError:
                    raise UserAlreadyExistsError()

        if result.matched_count == 0:
            raise UserNotFoundError()
        logger.info(f"Successfully updated profile for user ID: {user_id}")


class AddressService:

    @staticmethod
    def list_addresses(db: Database, user_id: str) -> List[models.AddressResponse]:
        """Get all addresses of the user; an empty address book is an empty list"""
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"address_details": 1})
        return [models.AddressResponse.from_document(a) for a in user.get("address_details") or []]

    @staticmethod
    def add_address(db: Database, user_id: str, address: models.AddressCreate) -> str:
        address_id = ObjectId()
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"_id": 1})
            with store_errors(CreateFailedError, "Failed to create address"):
                result = db[USERS].update_one(
                    {"_id": user["_id"]},
                    {"$push": {"address_details": {"_id": address_id, **address.model_dump()}}},
                )

        if result.matched_count == 0:
            raise CreateFailedError("Failed to create address")
        return str(address_id)

    @staticmethod
    def delete_all_addresses(db: Database, user_id: str) -> None:
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"_id": 1})
            with store_errors(UpdateFailedError, "Error deleting address"):
                db[USERS].update_one({"_id": user["_id"]}, {"$set": {"address_details": []}})

    @staticmethod
    def delete_address(db: Database, user_id: str, address_id: str) -> None:
        address_oid = parse_object_id(address_id, message="Invalid address ID")
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"_id": 1})
            with store_errors(UpdateFailedError, "Error deleting address"):
                result = db[USERS].update_one(
                    {"_id": user["_id"], "address_details._id": address_oid},
                    {"$pull": {"address_details": {"_id": address_oid}}},
                )

        if result.matched_count == 0:
            raise AddressNotFoundError()
