from sqlalchemy.ext.asyncio.session import AsyncSession
from tunecircle.db.models import Playlist, User
from tunecircle.services.user_auth_service import hash_password

from ..fixtures.constants import PASSWORD_EXAMPLE, USER_ID_EXAMPLE


async def add_test_user(
    db_session: AsyncSession,
    user_id: str = USER_ID_EXAMPLE,
    username: str = "ada.l",
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    password: str = PASSWORD_EXAMPLE,
) -> User:
    test_user = User(
        id=user_id,
        email=f"{username}@example.com",
        username=username,
        hashed_password=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        entries=[],
    )
    db_session.add(test_user)
    await db_session.commit()
    return test_user


async def add_test_playlist(
    db_session: AsyncSession,
    owner: str = USER_ID_EXAMPLE,
    title: str = "Road trip",
    public: bool = True,
    songs: list[str] | None = None,
    tags: list[str] | None = None,
    playlist_id: str | None = None,
) -> Playlist:
    playlist = Playlist(title=title, owner=owner, public=public, entries=[])
    if playlist_id:
        playlist.id = playlist_id
    playlist.replace_members("songs", songs or [])
    playlist.replace_members("tags", tags or [])
    db_session.add(playlist)
    await db_session.commit()
    return playlist
