# shopcart/auth/service.py

from datetime import datetime, timezone
from typing import Annotated, Optional

from bson import ObjectId
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..core.config import settings
from ..core.exceptions import (
    AuthenticationError,
    IncorrectPasswordError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from ..database.core import USERS, DbSession, deadline, store_errors
from ..logging import logger
from ..utils.password_utils import get_password_hash, verify_password
from . import models
from .tokens import (
    create_user_claims,
    generate_new_access_token,
    generate_tokens,
    update_tokens,
    validate_token,
)

bearer_scheme = HTTPBearer(auto_error=False)


def register_user(db: Database, register_user_request: models.SignUpRequest) -> None:
    """
    Creates a user with a hashed password and a first token pair.

    The pair is stored on the user document but not handed back; clients sign
    in to obtain tokens.
    """
    email = register_user_request.email
    logger.info(f"Registration process started for email: {email}")

    with deadline(settings.DB_TIMEOUT_SECONDS):
        if db[USERS].count_documents({"email": email}, limit=1) > 0:
            logger.warning(f"Registration failed for {email}: Email already registered.")
            raise UserAlreadyExistsError()

        now = datetime.now(timezone.utc)
        user_id = ObjectId()
        claims = create_user_claims(email, register_user_request.first_name, user_id)
        access_token, refresh_token = generate_tokens(claims)

        user_document = {
            "_id": user_id,
            "first_name": register_user_request.first_name,
            "last_name": register_user_request.last_name or "",
            "email": email,
            "password": get_password_hash(register_user_request.password),
            "token": access_token,
            "refresh_token": refresh_token,
            "created_at": now,
            "updated_at": now,
            "address_details": [],
            "order_status": [],
            "user_cart": [],
        }

        with store_errors():
            try:
                db[USERS].insert_one(user_document)
            except DuplicateKeyError:
                # lost a race with a concurrent sign-up for the same email
                logger.warning(f"Registration failed for {email}: unique index rejected the insert.")
                raise UserAlreadyExistsError()

    logger.info(f"Successfully created user {email} (ID: {user_id}).")


def login_user(db: Database, login_request: models.SignInRequest) -> models.TokenPair:
    """
    Checks the credentials, then rotates the user's token pair.

    The password is verified before anything is written, so a failed attempt
    never disturbs the session of the real owner.
    """
    with deadline(settings.SIGNIN_TIMEOUT_SECONDS):
        user = db[USERS].find_one({"email": login_request.email})
        if not user:
            logger.warning(f"Login attempt for unknown email: {login_request.email}")
            raise UserNotFoundError()

        if not verify_password(login_request.password, user.get("password")):
            logger.warning(f"Incorrect password for user {user['_id']}")
            raise IncorrectPasswordError()

        claims = create_user_claims(user["email"], user.get("first_name", ""), user["_id"])
        access_token, refresh_token = generate_tokens(claims)
        update_tokens(db, user["_id"], access_token, refresh_token)

    logger.info(f"Made a new access and refresh tokens for user {user['_id']}.")
    return models.TokenPair(access_token=access_token, refresh_token=refresh_token)


def refresh_access_token(db: Database, refresh_request: models.TokenRefreshRequest) -> str:
    return generate_new_access_token(db, refresh_request.refresh_token)


def get_current_user(
    db: DbSession,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> models.TokenData:
    """FastAPI dependency resolving `Authorization: Bearer <token>` to the caller."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    claims = validate_token(db, credentials.credentials)
    return models.TokenData(user_id=claims.id, email=claims.email, first_name=claims.first_name)


CurrentUser = Annotated[models.TokenData, Depends(get_current_user)]
