from typing import List, Optional
import logging
import math
import re

from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..core.config import settings
from ..core.exceptions import (
    CreateFailedError,
    InvalidInputError,
    InvalidPriceRangeError,
    NoProductsFoundError,
    PersistenceError,
    ProductAlreadyExistsError,
    ProductNotFoundError,
    UpdateFailedError,
)
from ..database.core import PRODUCTS, deadline, parse_object_id, store_errors
from . import models

logger = logging.getLogger(__name__)


def _parse_price(value: Optional[str], error, message: Optional[str] = None) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        price = float(value)
    except ValueError:
        raise error(message)
    if not math.isfinite(price):
        raise error(message)
    return price


class ProductService:

    @staticmethod
    def create_product(db: Database, product: models.ProductCreate) -> str:
        """Insert a product and return its new id"""
        if product.product_id is not None:
            raise InvalidInputError("Cannot provide productID in the request body")

        document = product.model_dump(exclude={"product_id"})
        with deadline(settings.PRODUCT_TIMEOUT_SECONDS):
            if db[PRODUCTS].count_documents({"product_name": product.product_name}, limit=1) > 0:
                raise ProductAlreadyExistsError()
            with store_errors(CreateFailedError, "Failed to create product"):
                try:
                    result = db[PRODUCTS].insert_one(document)
                except DuplicateKeyError:
                    raise ProductAlreadyExistsError()

        logger.info(f"Created product {result.inserted_id} ({product.product_name})")
        return str(result.inserted_id)

    @staticmethod
    def get_product(db: Database, product_id: str) -> models.ProductResponse:
        oid = parse_object_id(product_id, message="Invalid product ID")
        with deadline(settings.PRODUCT_TIMEOUT_SECONDS):
            document = db[PRODUCTS].find_one({"_id": oid})
        if not document:
            raise ProductNotFoundError()
        return models.ProductResponse.from_document(document)

    @staticmethod
    def update_product(db: Database, product_id: str, changes: models.ProductUpdate) -> None:
        """Apply the fields present in `changes`; absent fields keep their value"""
        oid = parse_object_id(product_id, message="Invalid product ID")
        fields = changes.model_dump(exclude_unset=True, exclude_none=True)
        if not fields:
            raise InvalidInputError("No fields to update")

        with deadline(settings.PRODUCT_TIMEOUT_SECONDS):
            if "product_name" in fields:
                taken = {"product_name": fields["product_name"], "_id": {"$ne": oid}}
                if db[PRODUCTS].count_documents(taken, limit=1) > 0:
                    raise ProductAlreadyExistsError()

            with store_errors(UpdateFailedError, "Failed to update product"):
                try:
                    result = db[PRODUCTS].update_one({"_id": oid}, {"$set": fields})
                except DuplicateKeyError:
                    raise ProductAlreadyExistsError()

        if result.matched_count == 0:
            raise ProductNotFoundError()
        logger.info(f"Updated product {product_id}: {sorted(fields)}")

    @staticmethod
    def delete_product(db: Database, product_id: str) -> None:
        oid = parse_object_id(product_id, message="Invalid product ID")
        with deadline(settings.PRODUCT_TIMEOUT_SECONDS):
            with store_errors(PersistenceError, "Failed to delete product"):
                result = db[PRODUCTS].delete_one({"_id": oid})

        if result.deleted_count == 0:
            raise ProductNotFoundError()
        logger.info(f"Deleted product {product_id}")


class ProductFilterService:
    """Read-only catalog queries. Prices arrive as raw query strings."""

    @staticmethod
    def _find(db: Database, query: dict, sort: bool = True) -> List[models.ProductResponse]:
        with deadline(settings.FILTER_TIMEOUT_SECONDS):
            cursor = db[PRODUCTS].find(query)
            if sort:
                cursor = cursor.sort("price", ASCENDING)
            return [models.ProductResponse.from_document(d) for d in cursor]

    @staticmethod
    def filter_by_price_range(
        db: Database, min_price: Optional[str], max_price: Optional[str]
    ) -> List[models.ProductResponse]:
        low = _parse_price(min_price, InvalidInputError, "Invalid minPrice value")
        high = _parse_price(max_price, InvalidInputError, "Invalid maxPrice value")
        if low is None and high is None:
            raise InvalidPriceRangeError()
        if low is not None and high is not None and low > high:
            raise InvalidPriceRangeError()

        bounds = {}
        if low is not None:
            bounds["$gte"] = low
        if high is not None:
            bounds["$lte"] = high

        products = ProductFilterService._find(db, {"price": bounds})
        if not products:
            raise NoProductsFoundError()
        return products

    @staticmethod
    def filter_by_price(db: Database, price: str) -> List[models.ProductResponse]:
        value = _parse_price(price, InvalidPriceRangeError)
        if value is None:
            raise InvalidPriceRangeError()

        products = ProductFilterService._find(db, {"price": value})
        if not products:
            raise NoProductsFoundError()
        return products

    @staticmethod
    def search_by_keyword(db: Database, keyword: str) -> List[models.ProductResponse]:
        """Case-insensitive substring match on product name; may be empty"""
        query = {"product_name": {"$regex": re.escape(keyword or ""), "$options": "i"}}
        return ProductFilterService._find(db, query, sort=False)
