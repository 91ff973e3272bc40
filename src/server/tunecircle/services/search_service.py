import logging
import math

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio.session import AsyncSession

from tunecircle.db.models import Playlist, PlaylistEntry, User
from tunecircle.db.schemas import (
    PaginationBlock,
    PlaylistResponse,
    SearchPagination,
    SearchResponse,
    UserSearchResult,
)
from tunecircle.exceptions import NoItemsFoundError, ValidationError
from tunecircle.services import field_validators as validators
from tunecircle.services import spotify_service
from tunecircle.services.utils import get_optional_int, split_csv

logger = logging.getLogger(__name__)

LOCAL_SEARCH_TYPES = ("user", "playlist")
CATALOG_PAGE_SIZE = 10
# Largest value SQLite binds as an INTEGER for OFFSET and LIMIT.
MAX_SQL_INTEGER = 2**63 - 1


def escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def count_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def check_page_bound(page: int, limit: int, max_offset: int | None) -> None:
    if limit > MAX_SQL_INTEGER:
        raise ValidationError("Invalid limit value")
    if page * limit > MAX_SQL_INTEGER - limit:
        raise ValidationError("Invalid page value")
    if max_offset is not None and page * limit > max_offset:
        raise ValidationError("Invalid page value")


async def search_users(
    db_session: AsyncSession, query: str, skip: int, limit: int
) -> tuple[list[UserSearchResult], int]:
    """
    Match users whose username or "first last" name contains the query, ignoring case.

    Returns:
        tuple[list[UserSearchResult], int]: The requested page and the total number of matches.
    """
    pattern = f"%{escape_like(query)}%"
    full_name = User.first_name + " " + User.last_name
    condition = or_(
        User.username.ilike(pattern, escape="\\"),
        full_name.ilike(pattern, escape="\\"),
    )
    result = await db_session.execute(
        select(User.id, User.username, User.first_name, User.last_name)
        .where(condition)
        .order_by(User.created_at, User.id)
        .offset(skip)
        .limit(limit)
    )
    users = [
        UserSearchResult(
            id=row.id,
            username=row.username,
            first_name=row.first_name,
            last_name=row.last_name,
            full_name=f"{row.first_name} {row.last_name}",
        )
        for row in result
    ]
    total = await db_session.scalar(select(func.count()).select_from(User).where(condition))
    return users, total or 0


async def search_playlists(
    db_session: AsyncSession,
    query: str,
    tags: list[str],
    song_ids: list[str],
    skip: int,
    limit: int,
) -> tuple[list[Playlist], int]:
    """
    Match public playlists whose title contains the query, ignoring case.

    A playlist must carry every given tag and at least one of the given songs.

    Returns:
        tuple[list[Playlist], int]: The requested page and the total number of matches.
    """
    conditions = [
        Playlist.title.ilike(f"%{escape_like(query)}%", escape="\\"),
        Playlist.public.is_(True),
    ]
    for tag in tags:
        conditions.append(
            Playlist.id.in_(
                select(PlaylistEntry.playlist_id).where(
                    PlaylistEntry.kind == "tags", PlaylistEntry.value == tag
                )
            )
        )
    if song_ids:
        conditions.append(
            Playlist.id.in_(
                select(PlaylistEntry.playlist_id).where(
                    PlaylistEntry.kind == "songs", PlaylistEntry.value.in_(song_ids)
                )
            )
        )
    result = await db_session.execute(
        select(Playlist)
        .where(*conditions)
        .order_by(Playlist.created_at, Playlist.id)
        .offset(skip)
        .limit(limit)
    )
    playlists = list(result.scalars().all())
    total = await db_session.scalar(select(func.count()).select_from(Playlist).where(*conditions))
    return playlists, total or 0


async def search_local(
    db_session: AsyncSession,
    query: str,
    tags: list[str],
    song_ids: list[str],
    types: list[str] | None,
    page: int = 0,
    limit: int = 10,
) -> SearchResponse:
    """
    Search local users and public playlists with one query.

    Both result sets share `page` and `limit` but are counted and paginated independently.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to query the database.
        query (str): The text to look for.
        tags (list[str]): Genres every matching playlist must carry.
        song_ids (list[str]): Catalog tracks of which a matching playlist must hold one.
        types (list[str] | None): Subset of ("user", "playlist"); both when empty.
        page (int): Zero based page index, negative values are taken as absolute.
        limit (int): Results per page for each type.

    Returns:
        SearchResponse: Users, playlists and one pagination block per type.

    Raises:
        ValidationError: If tags, songs, types or the page are invalid.
        NoItemsFoundError: If neither users nor playlists match.
    """
    await validators.ensure_valid(validators.TAGS, tags)
    await validators.ensure_valid(validators.SONGS, song_ids)
    types = types or list(LOCAL_SEARCH_TYPES)
    invalid_types = [item for item in types if item not in LOCAL_SEARCH_TYPES]
    if invalid_types:
        raise ValidationError(f"Invalid type(s) in query: {', '.join(invalid_types)}")

    page = abs(page)
    check_page_bound(page, limit, get_optional_int("LOCAL_SEARCH_MAX_OFFSET"))
    skip = page * limit

    users, total_users = [], 0
    playlists, total_playlists = [], 0
    if "user" in types:
        users, total_users = await search_users(db_session, query, skip, limit)
    if "playlist" in types:
        playlists, total_playlists = await search_playlists(
            db_session, query, tags, song_ids, skip, limit
        )

    logger.debug(
        "Search %r matched %s users and %s playlists", query, total_users, total_playlists
    )
    if not users and not playlists:
        raise NoItemsFoundError()

    return SearchResponse(
        users=users,
        playlists=[PlaylistResponse.model_validate(playlist) for playlist in playlists],
        pagination=SearchPagination(
            users=PaginationBlock(
                total_results=total_users,
                total_pages=count_pages(total_users, limit),
                current_page=page,
                results_per_page=limit,
            ),
            playlists=PaginationBlock(
                total_results=total_playlists,
                total_pages=count_pages(total_playlists, limit),
                current_page=page,
                results_per_page=limit,
            ),
        ),
    )


async def search_catalog(query: str, types_param: str | None, page: int = 0) -> dict:
    """
    Search the Spotify catalog ten results at a time.

    Args:
        query (str): The text to look for.
        types_param (str | None): Comma separated catalog types.
        page (int): Zero based page index, negative values are taken as absolute.

    Returns:
        dict: Spotify's response body.

    Raises:
        ValidationError: If the query or types are missing or invalid, or the page is too deep.
        DependencyFailureError: If Spotify answers with an error.
    """
    if not query:
        raise ValidationError("Missing query")
    if not types_param:
        raise ValidationError("Missing types")
    page = abs(page)
    check_page_bound(page, CATALOG_PAGE_SIZE, get_optional_int("CATALOG_SEARCH_MAX_OFFSET"))
    types = split_csv(types_param)
    if not types or not spotify_service.validate_types(types):
        raise ValidationError("Invalid type inserted")
    return await spotify_service.search(query, types, CATALOG_PAGE_SIZE, page * CATALOG_PAGE_SIZE)
