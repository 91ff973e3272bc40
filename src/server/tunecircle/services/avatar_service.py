import logging
import re
from pathlib import Path

from fastapi import UploadFile

from tunecircle.exceptions import NotFoundError, ValidationError
from tunecircle.services.utils import config

logger = logging.getLogger(__name__)

AVATAR_KINDS = ("users", "playlists")
ALLOWED_TYPES = re.compile(r"jpeg|jpg|png|gif")
MAX_AVATAR_SIZE = 5 * 1024 * 1024
DEFAULT_AVATAR = "0.jpg"


def avatars_dir(kind: str) -> Path:
    return Path(config["UPLOAD_PATH"]) / "avatars" / kind


def avatar_path(kind: str, entity_id: str) -> Path:
    """
    Location of the avatar of a user or a playlist.

    Args:
        kind (str): Either "users" or "playlists".
        entity_id (str): The id of the user or playlist.

    Returns:
        Path: The path of the stored image, whether it exists or not.
    """
    return avatars_dir(kind) / f"{entity_id}.jpg"


async def save_avatar(kind: str, entity_id: str, upload: UploadFile | None) -> Path:
    """
    Store an uploaded image as the avatar of a user or a playlist, replacing any previous one.

    Args:
        kind (str): Either "users" or "playlists".
        entity_id (str): The id of the user or playlist.
        upload (UploadFile | None): The uploaded file.

    Returns:
        Path: The path the image was written to.

    Raises:
        ValidationError: If no file was sent, or it is not a JPEG, PNG or GIF up to 5 MB.
    """
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded")
    extension = Path(upload.filename).suffix.lower()
    if not (ALLOWED_TYPES.search(extension) and ALLOWED_TYPES.search(upload.content_type or "")):
        raise ValidationError("Invalid file type. Only JPEG, PNG, and GIF files are allowed.")
    content = await upload.read()
    if len(content) > MAX_AVATAR_SIZE:
        raise ValidationError("File too large")
    target = avatar_path(kind, entity_id)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    logger.info("Stored avatar for %s %s", kind, entity_id)
    return target


def remove_avatar(kind: str, entity_id: str) -> None:
    avatar_path(kind, entity_id).unlink(missing_ok=True)


def resolve_avatar_file(kind: str, filename: str) -> Path:
    """
    Find the file to serve for an avatar request, falling back to the default asset.

    Args:
        kind (str): Either "users" or "playlists".
        filename (str): The requested file name.

    Returns:
        Path: The requested avatar if it exists, otherwise the default avatar.

    Raises:
        NotFoundError: If neither the avatar nor the default image is on disk.
    """
    for candidate in (Path(filename).name, DEFAULT_AVATAR):
        path = avatars_dir(kind) / candidate
        if path.is_file():
            return path
    raise NotFoundError("Avatar not found")
