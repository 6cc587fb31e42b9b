from datetime import datetime, timezone
from typing import Any, List, Type, TypeVar
import logging

from bson import ObjectId
from pydantic import BaseModel, ValidationError
from pymongo.database import Database

from ..core.config import settings
from ..core.exceptions import (
    CartLineConflictError,
    CartLineNotFoundError,
    CreateFailedError,
    InvalidInputError,
    ProductNotFoundError,
    UpdateFailedError,
)
from ..database.core import PRODUCTS, USERS, deadline, parse_object_id, store_errors
from ..users.service import get_user_document
from . import models

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_payload(model: Type[ModelT], payload: Any) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError(technical_details=str(e))


def _ensure_product_exists(db: Database, product_id: ObjectId) -> None:
    if db[PRODUCTS].count_documents({"_id": product_id}, limit=1) == 0:
        raise ProductNotFoundError()


class CartService:
    """
    Cart lines live in the `user_cart` array of the user document.

    A product appears in at most one line per cart. Adding a product that is
    already there increments the existing line instead of appending a new one.
    """

    @staticmethod
    def get_cart(db: Database, user_id: str) -> List[models.CartLineResponse]:
        """Get user's cart lines"""
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"user_cart": 1})
        return [models.CartLineResponse.from_document(line) for line in user.get("user_cart") or []]

    @staticmethod
    def _increment_line(db: Database, user_oid: ObjectId, product_id: ObjectId, quantity: int) -> bool:
        with store_errors(UpdateFailedError, "Failed to update cart"):
            result = db[USERS].update_one(
                {"_id": user_oid, "user_cart.product_id": product_id},
                {
                    "$inc": {"user_cart.$.quantity": quantity},
                    "$set": {"user_cart.$.updated_at": datetime.now(timezone.utc)},
                },
            )
        return result.matched_count > 0

    @staticmethod
    def add_item(db: Database, user_id: str, payload: Any) -> models.AddItemResult:
        """
        Add `quantity` of a product to the cart, merging into an existing line.

        Each step is a single conditional update: increment the line holding the
        product, else push a new line only while no such line exists, else (a
        concurrent add won the push) increment once more.
        """
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"_id": 1})
            request = _parse_payload(models.CartLineRequest, payload)
            product_id = ObjectId(request.product_id)
            _ensure_product_exists(db, product_id)

            if CartService._increment_line(db, user["_id"], product_id, request.quantity):
                logger.info(f"Merged {request.quantity} x {product_id} into cart of user {user_id}")
                return models.AddItemResult(created=False)

            now = datetime.now(timezone.utc)
            line = {
                "_id": ObjectId(),
                "product_id": product_id,
                "quantity": request.quantity,
                "created_at": now,
                "updated_at": now,
            }
            with store_errors(CreateFailedError, "Failed to create cart"):
                result = db[USERS].update_one(
                    {"_id": user["_id"], "user_cart.product_id": {"$ne": product_id}},
                    {"$push": {"user_cart": line}},
                )
            if result.matched_count > 0:
                logger.info(f"Created cart line {line['_id']} for user {user_id}")
                return models.AddItemResult(cart_id=str(line["_id"]), created=True)

            logger.debug(f"Cart line for {product_id} appeared concurrently, merging instead")
            if CartService._increment_line(db, user["_id"], product_id, request.quantity):
                return models.AddItemResult(created=False)

        raise UpdateFailedError("Failed to update cart")

    @staticmethod
    def update_line(db: Database, user_id: str, line_id: str, payload: Any) -> None:
        """Replace product and quantity of one line, keeping its id and creation time"""
        line_oid = parse_object_id(line_id, message="Invalid cart ID")

        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"_id": 1})
            request = _parse_payload(models.CartLineUpdate, payload)
            if request.cart_id is not None:
                raise InvalidInputError("Cannot provide cartID in the request body")

            line_filter = {"_id": user["_id"], "user_cart._id": line_oid}
            if db[USERS].count_documents(line_filter, limit=1) == 0:
                raise CartLineNotFoundError()

            product_id = ObjectId(request.product_id)
            _ensure_product_exists(db, product_id)
            other_line_holds_product = {
                "user_cart": {"$elemMatch": {"product_id": product_id, "_id": {"$ne": line_oid}}},
            }

            # The write only applies while no other line holds the product
            with store_errors(UpdateFailedError, "Failed to update cart"):
                result = db[USERS].update_one(
                    {**line_filter, "$nor": [other_line_holds_product]},
                    {
                        "$set": {
                            "user_cart.$.product_id": product_id,
                            "user_cart.$.quantity": request.quantity,
                            "user_cart.$.updated_at": datetime.now(timezone.utc),
                        }
                    },
                )

            if result.matched_count == 0:
                if db[USERS].count_documents({"_id": user["_id"], **other_line_holds_product}, limit=1) > 0:
                    raise CartLineConflictError()
                if db[USERS].count_documents(line_filter, limit=1) == 0:
                    raise CartLineNotFoundError()
                raise UpdateFailedError("Failed to update cart")

        logger.info(f"Updated cart line {line_id} for user {user_id}")

    @staticmethod
    def remove_line(db: Database, user_id: str, line_id: str) -> None:
        line_oid = parse_object_id(line_id, message="Invalid cart ID")
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"_id": 1})
            with store_errors(UpdateFailedError, "Failed to update cart"):
                result = db[USERS].update_one(
                    {"_id": user["_id"], "user_cart._id": line_oid},
                    {"$pull": {"user_cart": {"_id": line_oid}}},
                )

        if result.matched_count == 0:
            raise CartLineNotFoundError()

    @staticmethod
    def clear_cart(db: Database, user_id: str) -> None:
        with deadline(settings.DB_TIMEOUT_SECONDS):
            user = get_user_document(db, user_id, {"_id": 1})
            with store_errors(UpdateFailedError, "Error deleting carts"):
                db[USERS].update_one({"_id": user["_id"]}, {"$set": {"user_cart": []}})
