"""Configuration for the expense store, read from the environment"""
import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# load_dotenv searches the current dir and parents
load_dotenv()

DEFAULT_MONGODB_URI = "mongodb://localhost:27017"

MONGODB_URI = os.getenv("MONGODB_URI")
MONGODB_SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000"))
MONGODB_RETRY_CONNECT = os.getenv("MONGODB_RETRY_CONNECT", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Storage location is fixed
DB_NAME = "expenses"
EXPENSE_COLLECTION = "expense"


def get_mongodb_uri() -> str:
    """Returns the configured MongoDB URI, falling back to a local server."""
    if not MONGODB_URI:
        logger.warning(f"MONGODB_URI environment variable not set! Falling back to {DEFAULT_MONGODB_URI}.")
        return DEFAULT_MONGODB_URI
    return MONGODB_URI
