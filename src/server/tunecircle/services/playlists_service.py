import logging

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio.session import AsyncSession

from tunecircle.db.models import Playlist
from tunecircle.db.schemas import PlaylistCreate, PlaylistInfo
from tunecircle.exceptions import ForbiddenError, NotFoundError, ValidationError
from tunecircle.services import avatar_service
from tunecircle.services import field_validators as validators
from tunecircle.services.membership_service import add_member, remove_member, touch

logger = logging.getLogger(__name__)

UPDATE_DENIED = "You do not have permission to update this playlist"
OWNER_ONLY = "Only the owner of the playlist can update it"


def can_mutate(playlist: Playlist, user_id: str) -> bool:
    """
    Decide whether a user may change a playlist.

    Args:
        playlist (Playlist): The playlist to change.
        user_id (str): The id of the requesting user.

    Returns:
        bool: True only for the owner of the playlist.
    """
    return playlist.owner == user_id


def ensure_owner(playlist: Playlist, user_id: str, message: str = UPDATE_DENIED) -> None:
    if not can_mutate(playlist, user_id):
        raise ForbiddenError(message)


async def get_playlist_or_404(db_session: AsyncSession, playlist_id: str) -> Playlist:
    """
    Retrieve a playlist by id.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.
        playlist_id (str): The id of the playlist.

    Returns:
        Playlist: The playlist with its songs and tags loaded.

    Raises:
        ValidationError: If the id is malformed.
        NotFoundError: If no playlist has this id.
    """
    await validators.ensure_valid(validators.PLAYLIST, playlist_id)
    result = await db_session.execute(select(Playlist).filter_by(id=playlist_id))
    playlist = result.scalar_one_or_none()
    if playlist is None:
        raise NotFoundError("Playlist not found")
    return playlist


async def show_playlist(db_session: AsyncSession, playlist_id: str, user_id: str) -> Playlist:
    """
    Retrieve a playlist the requesting user is allowed to see.

    Raises:
        ForbiddenError: If the playlist is private and the user is not its owner.
    """
    playlist = await get_playlist_or_404(db_session, playlist_id)
    if not playlist.public and not can_mutate(playlist, user_id):
        raise ForbiddenError("The playlist isn't public")
    return playlist


async def create_playlist(db_session: AsyncSession, payload: PlaylistCreate, owner_id: str) -> str:
    """
    Create a playlist owned by the requesting user.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.
        payload (PlaylistCreate): Title, description, tags, visibility and songs.
        owner_id (str): The id of the requesting user.

    Returns:
        str: The id of the new playlist.

    Raises:
        ValidationError: If the title is missing or a field fails its check.
    """
    await validators.validate_fields(
        [
            (validators.TITLE, payload.title),
            (validators.DESCRIPTION, payload.description),
            (validators.TAGS, payload.tags),
            (validators.PUBLIC, payload.public),
            (validators.SONGS, payload.songs),
        ]
    )
    if not payload.title:
        raise ValidationError("Title is required")
    playlist = Playlist(
        title=payload.title,
        description=payload.description,
        owner=owner_id,
        public=True if payload.public is None else payload.public,
        entries=[],
    )
    playlist.replace_members("tags", payload.tags or [])
    playlist.replace_members("songs", payload.songs or [])
    db_session.add(playlist)
    await db_session.commit()
    logger.info("Playlist %s created by %s", playlist.id, owner_id)
    return playlist.id


async def change_visibility(
    db_session: AsyncSession, playlist_id: str, user_id: str, public: bool | None
) -> None:
    """
    Set the visibility of a playlist, or flip it when no value is given.
    """
    await validators.validate_fields([(validators.PUBLIC, public)])
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id)
    playlist.public = (not playlist.public) if public is None else public
    touch(playlist)
    await db_session.commit()


async def update_info(
    db_session: AsyncSession, playlist_id: str, user_id: str, payload: PlaylistInfo
) -> Playlist:
    """
    Replace the title and description of a playlist, and its tags when given.

    Returns:
        Playlist: The updated playlist.

    Raises:
        ValidationError: If title or description is missing or fails its check.
        ForbiddenError: If the user is not the owner.
    """
    await validators.validate_fields(
        [
            (validators.TITLE, payload.title),
            (validators.DESCRIPTION, payload.description),
            (validators.TAGS, payload.tags),
        ]
    )
    playlist = await get_playlist_or_404(db_session, playlist_id)
    if not payload.title or not payload.description:
        raise ValidationError("Title and description are required")
    ensure_owner(playlist, user_id)
    playlist.title = payload.title
    playlist.description = payload.description
    if payload.tags is not None:
        playlist.replace_members("tags", payload.tags)
    touch(playlist)
    await db_session.commit()
    return playlist


async def delete_playlist(db_session: AsyncSession, playlist_id: str, user_id: str) -> None:
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id, "You do not have permission to delete this playlist")
    await db_session.delete(playlist)
    await db_session.commit()
    avatar_service.remove_avatar("playlists", playlist_id)
    logger.info("Playlist %s deleted by %s", playlist_id, user_id)


async def add_song(db_session: AsyncSession, playlist_id: str, user_id: str, song_id: str) -> None:
    """
    Add a catalog track to a playlist.

    Raises:
        ValidationError: If the track does not exist in the catalog.
        ForbiddenError: If the user is not the owner.
        AlreadyPresentError: If the track is already in the playlist.
    """
    await validators.ensure_valid(validators.PLAYLIST, playlist_id)
    await validators.ensure_valid(validators.SONG, song_id)
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id, OWNER_ONLY)
    await add_member(db_session, playlist, "songs", song_id, "Song is already in this playlist")


async def remove_song(
    db_session: AsyncSession, playlist_id: str, user_id: str, song_id: str
) -> None:
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id)
    await remove_member(db_session, playlist, "songs", song_id, "Song not found in this playlist")


async def add_tag(db_session: AsyncSession, playlist_id: str, user_id: str, tag: str) -> None:
    """
    Add a genre tag to a playlist. Tags are stored exactly as given.

    Raises:
        ValidationError: If the tag is not a known genre.
        ForbiddenError: If the user is not the owner.
        AlreadyPresentError: If the tag is already on the playlist.
    """
    await validators.ensure_valid(validators.PLAYLIST, playlist_id)
    await validators.ensure_valid(validators.TAG, tag)
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id, OWNER_ONLY)
    await add_member(db_session, playlist, "tags", tag, "Tag is already in this playlist")


async def remove_tag(db_session: AsyncSession, playlist_id: str, user_id: str, tag: str) -> None:
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id)
    await remove_member(db_session, playlist, "tags", tag, "Tag not found in this playlist")


async def set_avatar(
    db_session: AsyncSession, playlist_id: str, user_id: str, upload: UploadFile | None
) -> None:
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id, OWNER_ONLY)
    await avatar_service.save_avatar("playlists", playlist.id, upload)


async def remove_avatar(db_session: AsyncSession, playlist_id: str, user_id: str) -> None:
    playlist = await get_playlist_or_404(db_session, playlist_id)
    ensure_owner(playlist, user_id, OWNER_ONLY)
    avatar_service.remove_avatar("playlists", playlist.id)


async def get_user_playlists(
    db_session: AsyncSession, owner_id: str, requester_id: str
) -> list[Playlist]:
    """
    List the playlists of a user as seen by the requesting user.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.
        owner_id (str): The user whose playlists are listed.
        requester_id (str): The requesting user; only the owner sees private playlists.

    Returns:
        list[Playlist]: The visible playlists.

    Raises:
        NotFoundError: If the user owns no playlist, or none is visible to the requester.
    """
    result = await db_session.execute(
        select(Playlist).filter_by(owner=owner_id).order_by(Playlist.created_at, Playlist.id)
    )
    playlists = list(result.scalars().all())
    if not playlists:
        raise NotFoundError("No playlists found for this user")
    if requester_id != owner_id:
        playlists = [playlist for playlist in playlists if playlist.public]
    if not playlists:
        raise NotFoundError("No public playlists found for this user")
    return playlists
