import logging.config
import os

from .core.config import settings

_DEFAULT_CONFIG = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logging.conf")

# Ensure logs directory exists
os.makedirs("logs", exist_ok=True)

logging.config.fileConfig(settings.LOG_CONFIG or _DEFAULT_CONFIG, disable_existing_loggers=False)


logger = logging.getLogger("shopcart")
