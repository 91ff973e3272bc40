import logging

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio.session import AsyncSession

from tunecircle.db.models import Playlist, User
from tunecircle.db.schemas import PasswordUpdate, ProfileUpdate, UserCreate
from tunecircle.exceptions import ConflictError, UserNotFoundError, ValidationError
from tunecircle.services import avatar_service
from tunecircle.services import field_validators as validators
from tunecircle.services.membership_service import add_member, remove_member
from tunecircle.services.playlists_service import get_playlist_or_404
from tunecircle.services.user_auth_service import get_user_by_id, hash_password, verify_password
from tunecircle.services.utils import get_flag

logger = logging.getLogger(__name__)

REQUIRED_USER_FIELDS = (
    ("email", "Email is required"),
    ("username", "Username is required"),
    ("password", "Password is required"),
    ("first_name", "First name is required"),
    ("last_name", "Last name is required"),
)


async def create_user(db_session: AsyncSession, payload: UserCreate) -> str:
    """
    Register a new user.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.
        payload (UserCreate): The registration data.

    Returns:
        str: The id of the new user.

    Raises:
        ValidationError: If a field fails its check or a required field is missing.
        ConflictError: If the email or the username is already taken.
    """
    await validators.validate_fields(
        [
            (validators.PASSWORD, payload.password),
            (validators.EMAIL, payload.email),
            (validators.USERNAME, payload.username),
            (validators.FIRST_NAME, payload.first_name),
            (validators.LAST_NAME, payload.last_name),
            (validators.INFO, payload.info),
        ]
    )
    for field, message in REQUIRED_USER_FIELDS:
        if not getattr(payload, field):
            raise ValidationError(message)
    user = User(
        email=payload.email,
        username=payload.username,
        hashed_password=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        info=payload.info or "",
        entries=[],
    )
    db_session.add(user)
    try:
        await db_session.commit()
    except IntegrityError as exc:
        await db_session.rollback()
        raise ConflictError() from exc
    logger.info("User %s registered", user.id)
    return user.id


async def get_user_or_404(db_session: AsyncSession, user_id: str) -> User:
    """
    Retrieve a user by id.

    Raises:
        ValidationError: If the id is malformed.
        UserNotFoundError: If no user has this id.
    """
    await validators.ensure_valid(validators.USER_ID, user_id)
    user = await get_user_by_id(db_session, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


async def update_password(db_session: AsyncSession, user: User, payload: PasswordUpdate) -> None:
    """
    Change the password of the authenticated user after checking the current one.

    Raises:
        ValidationError: If a password is missing, fails the complexity check, or the old
            password does not match.
    """
    await validators.validate_fields(
        [(validators.PASSWORD, payload.old_password), (validators.PASSWORD, payload.new_password)]
    )
    if not payload.old_password:
        raise ValidationError("Old password is required")
    if not payload.new_password:
        raise ValidationError("New password is required")
    if not verify_password(payload.old_password, user.hashed_password):
        raise ValidationError("Old password is incorrect")
    user.hashed_password = hash_password(payload.new_password)
    await db_session.commit()


async def update_profile(db_session: AsyncSession, user: User, payload: ProfileUpdate) -> None:
    await validators.validate_fields(
        [
            (validators.FIRST_NAME, payload.first_name),
            (validators.LAST_NAME, payload.last_name),
            (validators.INFO, payload.info),
        ]
    )
    if not payload.first_name:
        raise ValidationError("First name is required")
    if not payload.last_name:
        raise ValidationError("Last name is required")
    user.first_name = payload.first_name
    user.last_name = payload.last_name
    if payload.info:
        user.info = payload.info
    await db_session.commit()


def normalize_genre(genre_id: str) -> str:
    if get_flag("LOWERCASE_FAVORITE_GENRES"):
        return genre_id.lower()
    return genre_id


async def add_genre(db_session: AsyncSession, user: User, genre_id: str) -> None:
    await validators.ensure_valid(validators.GENRE, genre_id)
    await add_member(
        db_session,
        user,
        "genres",
        normalize_genre(genre_id),
        "Genre already among your favourites",
    )


async def remove_genre(db_session: AsyncSession, user: User, genre_id: str) -> None:
    await validators.ensure_valid(validators.GENRE, genre_id)
    await remove_member(
        db_session, user, "genres", genre_id, "Genre not found among your favourites"
    )


async def add_artist(db_session: AsyncSession, user: User, artist_id: str) -> None:
    await validators.ensure_valid(validators.ARTIST, artist_id)
    await add_member(db_session, user, "artists", artist_id, "Artist already among your favourites")


async def remove_artist(db_session: AsyncSession, user: User, artist_id: str) -> None:
    await remove_member(
        db_session, user, "artists", artist_id, "Artist not found among your favourites"
    )


async def add_playlist(db_session: AsyncSession, user: User, playlist_id: str) -> None:
    playlist = await get_playlist_or_404(db_session, playlist_id)
    await add_member(
        db_session, user, "playlists", playlist.id, "Playlist already among your favourites"
    )


async def remove_playlist(db_session: AsyncSession, user: User, playlist_id: str) -> None:
    await validators.ensure_valid(validators.PLAYLIST, playlist_id)
    await remove_member(
        db_session, user, "playlists", playlist_id, "Playlist not found among your favourites"
    )


async def follow_user(db_session: AsyncSession, user: User, followed_id: str) -> None:
    followed = await get_user_or_404(db_session, followed_id)
    await add_member(
        db_session, user, "following", followed.id, "User already among your following"
    )


async def unfollow_user(db_session: AsyncSession, user: User, followed_id: str) -> None:
    await validators.ensure_valid(validators.USER_ID, followed_id)
    await remove_member(
        db_session, user, "following", followed_id, "User not found among your following"
    )


async def set_avatar(user: User, upload: UploadFile | None) -> None:
    await avatar_service.save_avatar("users", user.id, upload)


def remove_avatar(user: User) -> None:
    avatar_service.remove_avatar("users", user.id)


async def delete_user(db_session: AsyncSession, user: User) -> None:
    """
    Delete a user together with the playlists they own and every related avatar.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.
        user (User): The authenticated user.
    """
    user_id = user.id
    result = await db_session.execute(select(Playlist).filter_by(owner=user_id))
    playlist_ids = []
    for playlist in result.scalars().all():
        playlist_ids.append(playlist.id)
        await db_session.delete(playlist)
    await db_session.flush()
    await db_session.delete(user)
    await db_session.commit()
    avatar_service.remove_avatar("users", user_id)
    for playlist_id in playlist_ids:
        avatar_service.remove_avatar("playlists", playlist_id)
    logger.info("User %s deleted along with %s playlists", user_id, len(playlist_ids))
