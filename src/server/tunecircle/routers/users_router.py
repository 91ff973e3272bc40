from typing import Annotated, List

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.ext.asyncio.session import AsyncSession

from tunecircle.db.database import async_get_db
from tunecircle.db.models import User
from tunecircle.db.schemas import (
    PasswordUpdate,
    PlaylistResponse,
    ProfileUpdate,
    UserCreate,
    UserCreated,
    UserPublic,
)
from tunecircle.services import users_service
from tunecircle.services.playlists_service import get_user_playlists
from tunecircle.services.user_auth_service import get_current_user

router = APIRouter(tags=["users"], prefix="/users")

CurrentUser = Annotated[User, Depends(get_current_user)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserCreated)
async def create_user(
    payload: UserCreate, db_session: AsyncSession = Depends(async_get_db)
) -> UserCreated:
    """
    Register a new user.

    Args:
        payload (UserCreate): Email, username, password, first and last name, optional info.
        db_session (AsyncSession): The database session, injected by FastAPI.

    Returns:
        UserCreated: The id of the new user.
    """
    return UserCreated(user_id=await users_service.create_user(db_session, payload))


@router.patch("/password", status_code=status.HTTP_204_NO_CONTENT)
async def update_password(
    payload: PasswordUpdate,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await users_service.update_password(db_session, current_user, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/profile", status_code=status.HTTP_204_NO_CONTENT)
async def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser,
    db_session: AsyncSession = Depends(async_get_db),
) -> Response:
    await users_service.update_profile(db_session, current_user, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/genre/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_genre(
    genre_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.add_genre(db_session, current_user, genre_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/genre/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_genre(
    genre_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.remove_genre(db_session, current_user, genre_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/artist/{artist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_artist(
    artist_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.add_artist(db_session, current_user, artist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/artist/{artist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_artist(
    artist_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.remove_artist(db_session, current_user, artist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/playlist/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_playlist(
    playlist_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.add_playlist(db_session, current_user, playlist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/playlist/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_playlist(
    playlist_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.remove_playlist(db_session, current_user, playlist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/following/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def follow_user(
    user_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.follow_user(db_session, current_user, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/following/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user(
    user_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    await users_service.unfollow_user(db_session, current_user, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def upload_avatar(
    current_user: CurrentUser, avatar: UploadFile | None = File(None)
) -> Response:
    """
    Store the uploaded image as the avatar of the authenticated user.

    Args:
        avatar (UploadFile | None): A JPEG, PNG or GIF image of at most 5 MB.

    Returns:
        Response: An empty 204 response.
    """
    await users_service.set_avatar(current_user, avatar)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def delete_avatar(current_user: CurrentUser) -> Response:
    users_service.remove_avatar(current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> Response:
    """
    Delete the authenticated user, the playlists they own and every related avatar.
    """
    await users_service.delete_user(db_session, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}", response_model=UserPublic)
async def show_user(
    user_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> UserPublic:
    """
    Retrieve the public profile of a user.

    Args:
        user_id (str): The id of the user.

    Returns:
        UserPublic: Username, names, creation date, info and preferences.
    """
    user = await users_service.get_user_or_404(db_session, user_id)
    return UserPublic.model_validate(user)


@router.get("/{user_id}/playlists", response_model=List[PlaylistResponse])
async def show_user_playlists(
    user_id: str, current_user: CurrentUser, db_session: AsyncSession = Depends(async_get_db)
) -> List[PlaylistResponse]:
    """
    List the playlists of a user; other users only see the public ones.
    """
    user = await users_service.get_user_or_404(db_session, user_id)
    playlists = await get_user_playlists(db_session, user.id, current_user.id)
    return [PlaylistResponse.model_validate(playlist) for playlist in playlists]
