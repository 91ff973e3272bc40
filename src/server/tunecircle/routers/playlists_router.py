from typing import Annotated

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.ext.asyncio.session import AsyncSession

from tunecircle.db.database import async_get_db
from tunecircle.db.models import User
from tunecircle.db.schemas import (
    PlaylistCreate,
    PlaylistCreated,
    PlaylistInfo,
    PlaylistResponse,
    PlaylistVisibility,
)
from tunecircle.services import playlists_service
from tunecircle.services.user_auth_service import get_current_user

router = APIRouter(tags=["playlists"], prefix="/playlists")

CurrentUser = Annotated[User, Depends(get_current_user)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PlaylistCreated)
async def create_playlist(
    payload: PlaylistCreate,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> PlaylistCreated:
    """
    Create a playlist owned by the authenticated user.

    Args:
        payload (PlaylistCreate): Title, description, tags, visibility and songs.
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.

    Returns:
        PlaylistCreated: The id of the new playlist.
    """
    playlist_id = await playlists_service.create_playlist(db_session, payload, current_user.id)
    return PlaylistCreated(playlist_id=playlist_id)


@router.get("/{playlist_id}", response_model=PlaylistResponse)
async def show_playlist(
    playlist_id: str,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> PlaylistResponse:
    """
    Retrieve a playlist. Private playlists are only visible to their owner.

    Args:
        playlist_id (str): The id of the playlist.
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.

    Returns:
        PlaylistResponse: The playlist with its songs and tags.
    """
    playlist = await playlists_service.show_playlist(db_session, playlist_id, current_user.id)
    return PlaylistResponse.model_validate(playlist)


@router.patch("/{playlist_id}/visibility", status_code=status.HTTP_204_NO_CONTENT)
async def change_visibility(
    playlist_id: str,
    current_user: CurrentUser,
    payload: PlaylistVisibility | None = None,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    """
    Set the visibility of a playlist, or flip it when the body carries no value.
    """
    public = payload.public if payload is not None else None
    await playlists_service.change_visibility(db_session, playlist_id, current_user.id, public)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{playlist_id}/info", response_model=PlaylistResponse)
async def update_info(
    playlist_id: str,
    payload: PlaylistInfo,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> PlaylistResponse:
    playlist = await playlists_service.update_info(
        db_session, playlist_id, current_user.id, payload
    )
    return PlaylistResponse.model_validate(playlist)


@router.delete("/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_playlist(
    playlist_id: str,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await playlists_service.delete_playlist(db_session, playlist_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{playlist_id}/songs/{song_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_song(
    playlist_id: str,
    song_id: str,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    """
    Add a Spotify track to a playlist.

    Args:
        playlist_id (str): The id of the playlist.
        song_id (str): The Spotify id of the track, checked against the catalog.

    Returns:
        Response: An empty 204 response.
    """
    await playlists_service.add_song(db_session, playlist_id, current_user.id, song_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{playlist_id}/songs/{song_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_song(
    playlist_id: str,
    song_id: str,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await playlists_service.remove_song(db_session, playlist_id, current_user.id, song_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{playlist_id}/tags/{tag}", status_code=status.HTTP_204_NO_CONTENT)
async def add_tag(
    playlist_id: str,
    tag: str,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await playlists_service.add_tag(db_session, playlist_id, current_user.id, tag)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{playlist_id}/tags/{tag}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag(
    playlist_id: str,
    tag: str,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await playlists_service.remove_tag(db_session, playlist_id, current_user.id, tag)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{playlist_id}/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def upload_avatar(
    playlist_id: str,
    current_user: CurrentUser,
    avatar: UploadFile | None = File(None),
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await playlists_service.set_avatar(db_session, playlist_id, current_user.id, avatar)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{playlist_id}/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def delete_avatar(
    playlist_id: str,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await playlists_service.remove_avatar(db_session, playlist_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
