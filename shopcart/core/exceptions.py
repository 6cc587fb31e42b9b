# shopcart/core/exceptions.py

from enum import Enum
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Input errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_ID = "INVALID_ID"
    INVALID_PRICE_RANGE = "INVALID_PRICE_RANGE"

    # Lookup errors
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    ADDRESS_NOT_FOUND = "ADDRESS_NOT_FOUND"
    CART_LINE_NOT_FOUND = "CART_LINE_NOT_FOUND"
    NO_PRODUCTS_FOUND = "NO_PRODUCTS_FOUND"

    # Conflicts
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    PRODUCT_ALREADY_EXISTS = "PRODUCT_ALREADY_EXISTS"
    CART_LINE_CONFLICT = "CART_LINE_CONFLICT"

    # Authentication errors
    UNAUTHORIZED = "UNAUTHORIZED"
    INCORRECT_PASSWORD = "INCORRECT_PASSWORD"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_MALFORMED = "TOKEN_MALFORMED"
    TOKEN_SUPERSEDED = "TOKEN_SUPERSEDED"
    UNKNOWN_USER = "UNKNOWN_USER"

    # Persistence errors
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    TOKEN_UPDATE_FAILED = "TOKEN_UPDATE_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"
    CREATE_FAILED = "CREATE_FAILED"
    STORE_TIMEOUT = "STORE_TIMEOUT"

    # Crypto errors
    TOKEN_SIGNING_FAILED = "TOKEN_SIGNING_FAILED"
    HASH_FAILED = "HASH_FAILED"

    # System errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


# Status codes per error code; anything missing falls back to 400
STATUS_CODES = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.INVALID_ID: 400,
    ErrorCode.INVALID_PRICE_RANGE: 400,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.PRODUCT_NOT_FOUND: 404,
    ErrorCode.ADDRESS_NOT_FOUND: 404,
    ErrorCode.CART_LINE_NOT_FOUND: 404,
    ErrorCode.NO_PRODUCTS_FOUND: 404,
    ErrorCode.USER_ALREADY_EXISTS: 400,
    ErrorCode.PRODUCT_ALREADY_EXISTS: 400,
    ErrorCode.CART_LINE_CONFLICT: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.INCORRECT_PASSWORD: 401,
    ErrorCode.TOKEN_EXPIRED: 401,
    ErrorCode.TOKEN_INVALID: 401,
    ErrorCode.TOKEN_MALFORMED: 401,
    ErrorCode.TOKEN_SUPERSEDED: 401,
    ErrorCode.UNKNOWN_USER: 401,
    ErrorCode.PERSISTENCE_FAILED: 500,
    ErrorCode.TOKEN_UPDATE_FAILED: 500,
    ErrorCode.UPDATE_FAILED: 500,
    ErrorCode.CREATE_FAILED: 500,
    ErrorCode.STORE_TIMEOUT: 500,
    ErrorCode.TOKEN_SIGNING_FAILED: 500,
    ErrorCode.HASH_FAILED: 500,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
}


class ShopCartError(Exception):
    """Base exception for all ShopCart application errors."""

    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR
    default_message: str = "An internal error occurred"

    def __init__(
        self,
        user_message: Optional[str] = None,
        technical_details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.user_message = user_message or self.default_message
        self.technical_details = technical_details
        self.context = context or {}

        # Client mistakes are warnings, everything else is an error
        level = logging.WARNING if self.status_code < 500 else logging.ERROR
        logger.log(
            level,
            f"ShopCart Error: {self.code.value}",
            extra={
                "error_code": self.code.value,
                "user_message": self.user_message,
                "technical_details": technical_details,
                "context": self.context,
            },
        )

        super().__init__(self.user_message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES.get(self.code, 400)

    def to_response(self) -> Dict[str, Any]:
        """Convert to API response format."""
        response = {
            "error": {
                "code": self.code.value,
                "message": self.user_message,
            }
        }
        if self.context:
            response["error"]["context"] = self.context
        return response


# --- Input ---

class InvalidInputError(ShopCartError):
    code = ErrorCode.INVALID_INPUT
    default_message = "Invalid request body"


class InvalidIDError(ShopCartError):
    code = ErrorCode.INVALID_ID
    default_message = "Invalid id"


class InvalidPriceRangeError(ShopCartError):
    code = ErrorCode.INVALID_PRICE_RANGE
    default_message = "Invalid price range"


# --- Not found ---

class UserNotFoundError(ShopCartError):
    code = ErrorCode.USER_NOT_FOUND
    default_message = "User not found"


class ProductNotFoundError(ShopCartError):
    code = ErrorCode.PRODUCT_NOT_FOUND
    default_message = "Product not found"


class AddressNotFoundError(ShopCartError):
    code = ErrorCode.ADDRESS_NOT_FOUND
    default_message = "Address not found"


class CartLineNotFoundError(ShopCartError):
    code = ErrorCode.CART_LINE_NOT_FOUND
    default_message = "This cart is not found"


class NoProductsFoundError(ShopCartError):
    code = ErrorCode.NO_PRODUCTS_FOUND
    default_message = "No products found"


# --- Conflicts ---

class UserAlreadyExistsError(ShopCartError):
    code = ErrorCode.USER_ALREADY_EXISTS
    default_message = "User with that email already exists"


class ProductAlreadyExistsError(ShopCartError):
    code = ErrorCode.PRODUCT_ALREADY_EXISTS
    default_message = "Product already exists"


class CartLineConflictError(ShopCartError):
    code = ErrorCode.CART_LINE_CONFLICT
    default_message = "Another cart line already holds this product"


# --- Authentication ---

class AuthenticationError(ShopCartError):
    """Exception raised for authentication-related errors."""
    code = ErrorCode.UNAUTHORIZED
    default_message = "Unauthorized"


class IncorrectPasswordError(AuthenticationError):
    code = ErrorCode.INCORRECT_PASSWORD
    default_message = "Password is incorrect"


class TokenExpiredError(AuthenticationError):
    code = ErrorCode.TOKEN_EXPIRED
    default_message = "Token is expired"


class TokenInvalidError(AuthenticationError):
    code = ErrorCode.TOKEN_INVALID
    default_message = "Token is not valid"


class TokenMalformedError(AuthenticationError):
    code = ErrorCode.TOKEN_MALFORMED
    default_message = "Error while parsing claims"


class TokenSupersededError(AuthenticationError):
    code = ErrorCode.TOKEN_SUPERSEDED
    default_message = "Token is no longer current"


class UnknownUserError(AuthenticationError):
    code = ErrorCode.UNKNOWN_USER
    default_message = "User not found"


# --- Persistence ---

class PersistenceError(ShopCartError):
    code = ErrorCode.PERSISTENCE_FAILED
    default_message = "Database operation failed"


class TokenUpdateError(PersistenceError):
    code = ErrorCode.TOKEN_UPDATE_FAILED
    default_message = "Error while updating token"


class UpdateFailedError(PersistenceError):
    code = ErrorCode.UPDATE_FAILED
    default_message = "Failed to update"


class CreateFailedError(PersistenceError):
    code = ErrorCode.CREATE_FAILED
    default_message = "Failed to create"


class StoreTimeoutError(PersistenceError):
    code = ErrorCode.STORE_TIMEOUT
    default_message = "Database operation timed out"


# --- Crypto ---

class TokenSigningError(ShopCartError):
    code = ErrorCode.TOKEN_SIGNING_FAILED
    default_message = "Error while generating token"


class HashError(ShopCartError):
    code = ErrorCode.HASH_FAILED
    default_message = "Error while hashing password"
