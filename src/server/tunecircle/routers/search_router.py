from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio.session import AsyncSession

from tunecircle.db.database import async_get_db
from tunecircle.db.models import User
from tunecircle.db.schemas import SearchResponse
from tunecircle.services import search_service, spotify_service
from tunecircle.services.user_auth_service import get_current_user
from tunecircle.services.utils import split_csv

router = APIRouter(tags=["search"], prefix="/search")

CurrentUser = Annotated[User, Depends(get_current_user)]


@router.get("/spotify/genres")
async def get_genres(current_user: CurrentUser) -> List[str]:
    """
    Retrieve the genres accepted as favourites and playlist tags.

    Returns:
        List[str]: The genre vocabulary.
    """
    return spotify_service.get_genres()


@router.get("/spotify/{query}")
async def search_spotify(
    query: str,
    current_user: CurrentUser,
    types: str | None = Query(None),
    page: int = Query(0),
) -> dict:
    """
    Search the Spotify catalog.

    Args:
        query (str): The text to look for.
        types (str | None): Comma separated Spotify types, e.g. "track,artist".
        page (int): Zero based page index; pages hold ten results.

    Returns:
        dict: The Spotify search response.
    """
    return await search_service.search_catalog(query, types, page)


@router.get("/spotify/{element_type}/{element_id}")
async def get_spotify_element(
    element_type: str, element_id: str, current_user: CurrentUser
) -> dict:
    """
    Retrieve a single Spotify object.

    Args:
        element_type (str): One of the Spotify types, e.g. "track".
        element_id (str): The Spotify id of the object.

    Returns:
        dict: The Spotify object.
    """
    return await spotify_service.get_element(element_id, element_type)


@router.get("/{query}", response_model=SearchResponse)
async def search_local(
    query: str,
    current_user: CurrentUser,
    tags: str | None = Query(None),
    song_ids: str | None = Query(None, alias="songIds"),
    types: str | None = Query(None),
    page: int = Query(0),
    limit: int = Query(10, ge=1),
    db_session: AsyncSession = Depends(async_get_db),
) -> SearchResponse:
    """
    Search users and public playlists stored locally.

    Args:
        query (str): The text to look for in usernames, full names and playlist titles.
        tags (str | None): Comma separated genres every playlist must carry.
        song_ids (str | None): Comma separated Spotify track ids; a playlist must hold one.
        types (str | None): Comma separated subset of "user" and "playlist".
        page (int): Zero based page index shared by both result sets.
        limit (int): Results per page. Must be at least 1. Default is 10.
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.

    Returns:
        SearchResponse: Users, playlists and a pagination block for each.
    """
    return await search_service.search_local(
        db_session,
        query,
        split_csv(tags),
        split_csv(song_ids),
        split_csv(types),
        page,
        limit,
    )
