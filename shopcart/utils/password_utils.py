# shopcart/utils/password_utils.py

from passlib.context import CryptContext
import logging

from ..core.config import settings
from ..core.exceptions import HashError

logger = logging.getLogger(__name__)

# Create the context once and reuse it
bcrypt_context = CryptContext(
    schemes=['bcrypt'],
    deprecated='auto',
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifies a plain-text password against a hashed password.
    A missing or unrecognised hash is a mismatch, not an error.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed.")
        return False


def get_password_hash(password: str) -> str:
    """
    Hashes a plain-text password.
    """
    try:
        return bcrypt_context.hash(password)
    except Exception as exc:
        logger.exception("Error occurred while hashing password.")
        raise HashError(technical_details=str(exc)) from exc
