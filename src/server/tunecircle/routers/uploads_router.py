from typing import Literal

from fastapi import APIRouter
from fastapi.responses import FileResponse

from tunecircle.services.avatar_service import resolve_avatar_file

router = APIRouter(tags=["uploads"], prefix="/uploads")


@router.get("/avatars/{kind}/{filename}")
async def get_avatar(kind: Literal["users", "playlists"], filename: str) -> FileResponse:
    """
    Serve a stored avatar, or the default image when none was uploaded.

    Args:
        kind (str): Either "users" or "playlists".
        filename (str): The file name, usually "<id>.jpg".

    Returns:
        FileResponse: The image file.
    """
    return FileResponse(resolve_avatar_file(kind, filename))
