# shopcart/core/config.py
import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_DEV_SECRET = "dev-secret-change-me-please-32-bytes-minimum"


class Settings:
    # --- API Info ---
    API_TITLE: str = "ShopCart E-commerce API"
    API_DESCRIPTION: str = "User accounts, addresses, shopping cart and product catalog backed by MongoDB."
    API_VERSION: str = "1.0.0"

    # --- Server Configuration ---
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if origin.strip()
    ]

    # --- Document store ---
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "e-commerce")
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))

    # Per-request store deadlines (seconds)
    DB_TIMEOUT_SECONDS: float = float(os.getenv("DB_TIMEOUT_SECONDS", "10"))
    SIGNIN_TIMEOUT_SECONDS: float = float(os.getenv("SIGNIN_TIMEOUT_SECONDS", "30"))
    PRODUCT_TIMEOUT_SECONDS: float = float(os.getenv("PRODUCT_TIMEOUT_SECONDS", "15"))
    FILTER_TIMEOUT_SECONDS: float = float(os.getenv("FILTER_TIMEOUT_SECONDS", "5"))

    # --- Tokens ---
    SECRET_JWT: str = os.getenv("SECRET_JWT") or _DEV_SECRET
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "5"))
    REFRESH_TOKEN_EXPIRE_HOURS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_HOURS", "2190"))

    # --- Passwords ---
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "14"))

    # --- Logging ---
    LOG_CONFIG: str = os.getenv("LOG_CONFIG", "")


settings = Settings()

if settings.SECRET_JWT == _DEV_SECRET:
    logger.warning("SECRET_JWT not found in environment variables, falling back to the development key")
