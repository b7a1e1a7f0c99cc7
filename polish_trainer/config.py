"""
Configuration for the practice engine.

Settings are read from the environment (a local .env file is loaded
automatically). Scoring constants live next to the code that uses them:
see srs.constants and selection.scoring.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

# Load environment
load_dotenv()

# Configuration
DB_NAME = os.getenv("MONGO_DB_NAME", "polish_trainer")
DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "default")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-2024-08-06")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_mongo_uri() -> str:
    """
    Read the MongoDB connection string.

    Raises:
        ValueError: If MONGO_URI is not set
    """
    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")
    return mongo_uri


def get_openai_api_key() -> str:
    """
    Read the OpenAI API key.

    Raises:
        ValueError: If OPENAI_API_KEY is not set
    """
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ValueError("OPENAI_API_KEY not found in environment variables")
    return api_key


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stderr handler. Meant for scripts, not library code."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
