from contextlib import contextmanager
from typing import Annotated, Optional, Type
import logging

import pymongo
from bson import ObjectId
from fastapi import Depends
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..core.config import settings
from ..core.exceptions import InvalidIDError, PersistenceError, ShopCartError, StoreTimeoutError

logger = logging.getLogger(__name__)

USERS = "users"
PRODUCTS = "products"

# MongoClient connects lazily and pools connections; safe to share across worker threads.
client = MongoClient(
    settings.MONGO_URI,
    tz_aware=True,
    serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
)

logger.info(f"Using database: MongoDB ({settings.MONGO_DB_NAME})")


def get_database() -> Database:
    return client[settings.MONGO_DB_NAME]


def get_db():
    yield get_database()


DbSession = Annotated[Database, Depends(get_db)]


def ensure_indexes(db: Database) -> None:
    """Create the unique indexes the collections rely on."""
    db[USERS].create_index([("email", ASCENDING)], unique=True, name="email_unique")
    db[PRODUCTS].create_index([("product_name", ASCENDING)], unique=True, name="product_name_unique")
    logger.info("Database indexes are in place")


def close_client() -> None:
    client.close()


@contextmanager
def deadline(seconds: float):
    """
    Bounds every store call made inside the block by `seconds`.

    Driver timeouts surface as StoreTimeoutError; any other driver failure that
    escapes the block becomes a generic PersistenceError.
    """
    try:
        with pymongo.timeout(seconds):
            yield
    except PyMongoError as exc:
        if exc.timeout:
            logger.error(f"Store operation exceeded its {seconds}s deadline: {exc}")
            raise StoreTimeoutError(technical_details=str(exc)) from exc
        logger.exception("Store operation failed")
        raise PersistenceError(technical_details=str(exc)) from exc


@contextmanager
def store_errors(failure: Type[ShopCartError] = PersistenceError, message: Optional[str] = None):
    """Translate a failing store call into `failure`, leaving timeouts to `deadline`."""
    try:
        yield
    except PyMongoError as exc:
        if exc.timeout:
            raise
        logger.error(f"Store call failed ({failure.__name__}): {exc}")
        raise failure(message, technical_details=str(exc)) from exc


def parse_object_id(value, error: Type[ShopCartError] = InvalidIDError, message: Optional[str] = None) -> ObjectId:
    """Turn a hex string into an ObjectId or raise `error`."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise error(message)
    return ObjectId(value)
