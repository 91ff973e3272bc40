import logging
import os
import re
from uuid import uuid4

from dotenv import dotenv_values, find_dotenv

DEFAULT_CONFIG = {
    "SQLALCHEMY_DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "SECRET_KEY": "change-me",
    "ALGORITHM": "HS256",
    "ACCESS_TOKEN_EXPIRE_MINUTES": "60",
    "SPOTIFY_TOKEN_URL": "https://accounts.spotify.com/api/token",
    "SPOTIFY_API_URL": "https://api.spotify.com/v1",
    "CLIENT_ID": "",
    "CLIENT_SECRET": "",
    "UPLOAD_PATH": "uploads",
    "LOWERCASE_FAVORITE_GENRES": "true",
    "CATALOG_SEARCH_MAX_OFFSET": "1000",
    "LOCAL_SEARCH_MAX_OFFSET": "",
    "LOG_LEVEL": "INFO",
}

env_path = find_dotenv()
config = {**DEFAULT_CONFIG, **dotenv_values(env_path)}

if os.environ.get("PROD") == "RAILWAY":
    config = {**DEFAULT_CONFIG, **dict(os.environ)}

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def configure_logging() -> None:
    """
    Configure the root logger from the LOG_LEVEL setting.
    """
    logging.basicConfig(
        level=config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_flag(key: str) -> bool:
    """
    Read a boolean setting.

    Args:
        key (str): The configuration key.

    Returns:
        bool: True when the value is one of "1", "true", "yes" or "on".
    """
    return str(config.get(key, "")).strip().lower() in {"1", "true", "yes", "on"}


def get_optional_int(key: str) -> int | None:
    """
    Read an integer setting that may be left empty.

    Args:
        key (str): The configuration key.

    Returns:
        int | None: The integer value, or None when the setting is empty.
    """
    value = config.get(key)
    if value is None or str(value).strip() == "":
        return None
    return int(value)


def generate_object_id() -> str:
    """
    Generate a new identity for a stored record.

    Returns:
        str: A 32 character lowercase hex string.
    """
    return uuid4().hex


def is_valid_object_id(value) -> bool:
    """
    Check that a value has the shape of a record identity.

    Args:
        value: The candidate identity.

    Returns:
        bool: True if the value is a 32 character lowercase hex string.
    """
    return isinstance(value, str) and OBJECT_ID_PATTERN.match(value) is not None


def split_csv(value: str | None) -> list[str]:
    """
    Split a comma separated query parameter into its items.

    Args:
        value (str | None): The raw parameter value.

    Returns:
        list[str]: The non-empty items, in order.
    """
    if not value:
        return []
    return [item for item in value.split(",") if item]
