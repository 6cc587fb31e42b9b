# shopcart/auth/tokens.py

"""
Signed access/refresh tokens and the per-user session record.

A token is accepted only if it passes two checks: the signature and expiry
(`decode_token`) and freshness, i.e. it is still the value stored on the user
document. Issuing a new pair overwrites the stored values, which supersedes
every earlier token of that user.
"""

from datetime import datetime, timedelta, timezone
from typing import Tuple
from uuid import uuid4
import hmac

import jwt
from jwt import PyJWTError
from bson import ObjectId
from pydantic import ValidationError
from pymongo.database import Database

from ..core.config import settings
from ..core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
    TokenMalformedError,
    TokenSigningError,
    TokenSupersededError,
    TokenUpdateError,
    UnknownUserError,
)
from ..database.core import USERS, deadline, store_errors
from ..logging import logger
from .models import UserClaims

ACCESS_TOKEN_FIELD = "token"
REFRESH_TOKEN_FIELD = "refresh_token"


def create_user_claims(email: str, first_name: str, user_id) -> UserClaims:
    return UserClaims(email=email, first_name=first_name, id=str(user_id))


def _encode(claims: UserClaims, issued_at: datetime, expires_delta: timedelta) -> str:
    encode = {
        **claims.model_dump(),
        'iat': issued_at,
        'exp': issued_at + expires_delta,
        'jti': str(uuid4()),
    }
    return jwt.encode(encode, settings.SECRET_JWT, algorithm=settings.JWT_ALGORITHM)


def generate_tokens(claims: UserClaims) -> Tuple[str, str]:
    """Signs a new (access, refresh) pair carrying the same identity claims."""
    now = datetime.now(timezone.utc)
    try:
        access_token = _encode(claims, now, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
        refresh_token = _encode(claims, now, timedelta(hours=settings.REFRESH_TOKEN_EXPIRE_HOURS))
    except (PyJWTError, NotImplementedError, TypeError, ValueError) as e:
        logger.exception("Token signing failed")
        raise TokenSigningError(technical_details=str(e)) from e
    return access_token, refresh_token


def decode_token(token: str) -> UserClaims:
    """Verifies signature and expiry and returns the identity claims."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_JWT,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.MissingRequiredClaimError as e:
        raise TokenMalformedError(technical_details=str(e))
    except PyJWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        raise TokenInvalidError()

    try:
        claims = UserClaims.model_validate(payload)
    except ValidationError as e:
        raise TokenMalformedError(technical_details=str(e))
    if not ObjectId.is_valid(claims.id):
        raise TokenMalformedError("Invalid user id")
    return claims


def _validate_against_store(db: Database, token: str, field: str) -> UserClaims:
    claims = decode_token(token)

    with deadline(settings.DB_TIMEOUT_SECONDS):
        user = db[USERS].find_one({"_id": ObjectId(claims.id)}, {field: 1})
    if not user:
        raise UnknownUserError()

    stored = user.get(field) or ""
    if not hmac.compare_digest(stored.encode(), token.encode()):
        raise TokenSupersededError()
    return claims


def validate_token(db: Database, token: str) -> UserClaims:
    """Accepts an access token only while it is the user's current one."""
    return _validate_against_store(db, token, ACCESS_TOKEN_FIELD)


def validate_refresh_token(db: Database, token: str) -> UserClaims:
    """Accepts a refresh token only while it is the user's current one."""
    return _validate_against_store(db, token, REFRESH_TOKEN_FIELD)


def update_tokens(db: Database, user_id: ObjectId, access_token: str, refresh_token: str) -> None:
    """Stores a freshly issued pair, superseding the previous one."""
    update = {
        "$set": {
            ACCESS_TOKEN_FIELD: access_token,
            REFRESH_TOKEN_FIELD: refresh_token,
            "updated_at": datetime.now(timezone.utc),
        }
    }
    with deadline(settings.DB_TIMEOUT_SECONDS):
        with store_errors(TokenUpdateError):
            result = db[USERS].update_one({"_id": user_id}, update)

    if result.matched_count == 0:
        raise TokenUpdateError("User token is not updated")


def generate_new_access_token(db: Database, refresh_token: str) -> str:
    """
    Exchanges the user's current refresh token for a new access token.

    The refresh token itself is left untouched. The write is conditional on the
    refresh token still being stored, so a pair rotated in the meantime (e.g. by
    a sign-in) makes the exchange fail instead of resurrecting an old session.
    """
    claims = validate_refresh_token(db, refresh_token)
    access_token, _ = generate_tokens(claims)

    with deadline(settings.DB_TIMEOUT_SECONDS):
        with store_errors(TokenUpdateError):
            result = db[USERS].update_one(
                {"_id": ObjectId(claims.id), REFRESH_TOKEN_FIELD: refresh_token},
                {"$set": {ACCESS_TOKEN_FIELD: access_token, "updated_at": datetime.now(timezone.utc)}},
            )

    if result.matched_count == 0:
        raise TokenUpdateError()

    logger.info(f"Issued a new access token for user {claims.id}")
    return access_token
