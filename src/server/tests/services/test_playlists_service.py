from unittest.mock import patch

import pytest
from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from tunecircle.db.models import Playlist, PlaylistEntry
from tunecircle.db.schemas import PlaylistCreate, PlaylistInfo
from tunecircle.exceptions import (
    AlreadyPresentError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from tunecircle.services import avatar_service, playlists_service

from ..fixtures.constants import (
    MISSING_ID_EXAMPLE,
    OTHER_TRACK_ID_EXAMPLE,
    OTHER_USER_ID_EXAMPLE,
    TRACK_ID_EXAMPLE,
    USER_ID_EXAMPLE,
)
from ..fixtures.services.field_validators_fixtures import mock_validate_id
from ..utils.utils import add_test_playlist, add_test_user


@pytest.fixture(scope="function")
async def owner_and_other(db_session):
    owner = await add_test_user(db_session)
    other = await add_test_user(db_session, user_id=OTHER_USER_ID_EXAMPLE, username="grace.h")
    return owner, other


async def test_create_playlist_defaults(db_session, mock_validate_id, owner_and_other):
    playlist_id = await playlists_service.create_playlist(
        db_session,
        PlaylistCreate(title="Road trip", tags=["rock", "rock", "jazz"], songs=[TRACK_ID_EXAMPLE]),
        USER_ID_EXAMPLE,
    )
    playlist = await playlists_service.get_playlist_or_404(db_session, playlist_id)
    assert playlist.owner == USER_ID_EXAMPLE
    assert playlist.public is True
    assert playlist.tags == ["rock", "jazz"]
    assert playlist.songs == [TRACK_ID_EXAMPLE]


@pytest.mark.parametrize(
    "payload, expected_message",
    [
        ({"description": "no title"}, "Title is required"),
        ({"title": "", "description": "blank title"}, "Title is required"),
        ({"title": "Bad!"}, playlists_service.validators.TITLE.description),
        ({"title": "Fine", "tags": ["rock", "polka-dot"]}, "Tags must be an array of valid genres"),
        (
            {"title": "Fine", "songs": ["unknown-track"]},
            "Songs must be an array of valid Spotify track IDs",
        ),
    ],
)
async def test_create_playlist_invalid(
    db_session, mock_validate_id, owner_and_other, payload, expected_message
):
    with pytest.raises(ValidationError) as exc:
        await playlists_service.create_playlist(
            db_session, PlaylistCreate(**payload), USER_ID_EXAMPLE
        )
    assert exc.value.message == expected_message


async def test_get_playlist_or_404(db_session, owner_and_other):
    with pytest.raises(ValidationError) as exc:
        await playlists_service.get_playlist_or_404(db_session, "not-an-id")
    assert exc.value.message == "Playlist must be a valid playlist id"
    with pytest.raises(NotFoundError) as exc:
        await playlists_service.get_playlist_or_404(db_session, MISSING_ID_EXAMPLE)
    assert exc.value.message == "Playlist not found"


async def test_private_playlist_visibility(db_session, owner_and_other):
    playlist = await add_test_playlist(db_session, public=False)
    shown = await playlists_service.show_playlist(db_session, playlist.id, USER_ID_EXAMPLE)
    assert shown.id == playlist.id
    with pytest.raises(ForbiddenError) as exc:
        await playlists_service.show_playlist(db_session, playlist.id, OTHER_USER_ID_EXAMPLE)
    assert exc.value.status_code == status.HTTP_403_FORBIDDEN
    assert exc.value.message == "The playlist isn't public"


@pytest.mark.parametrize(
    "requested, initial, expected",
    [(None, True, False), (None, False, True), (True, True, True), (False, True, False)],
)
async def test_change_visibility(db_session, owner_and_other, requested, initial, expected):
    playlist = await add_test_playlist(db_session, public=initial)
    await playlists_service.change_visibility(db_session, playlist.id, USER_ID_EXAMPLE, requested)
    assert playlist.public is expected


async def test_only_owner_can_mutate(db_session, mock_validate_id, owner_and_other):
    playlist = await add_test_playlist(db_session, songs=[TRACK_ID_EXAMPLE], tags=["rock"])
    attempts = [
        playlists_service.change_visibility(db_session, playlist.id, OTHER_USER_ID_EXAMPLE, False),
        playlists_service.add_song(
            db_session, playlist.id, OTHER_USER_ID_EXAMPLE, OTHER_TRACK_ID_EXAMPLE
        ),
        playlists_service.remove_song(
            db_session, playlist.id, OTHER_USER_ID_EXAMPLE, TRACK_ID_EXAMPLE
        ),
        playlists_service.add_tag(db_session, playlist.id, OTHER_USER_ID_EXAMPLE, "jazz"),
        playlists_service.remove_tag(db_session, playlist.id, OTHER_USER_ID_EXAMPLE, "rock"),
        playlists_service.delete_playlist(db_session, playlist.id, OTHER_USER_ID_EXAMPLE),
    ]
    for attempt in attempts:
        with pytest.raises(ForbiddenError):
            await attempt
    assert playlist.songs == [TRACK_ID_EXAMPLE]
    assert playlist.tags == ["rock"]
    assert playlist.public is True


async def test_update_info(db_session, owner_and_other):
    playlist = await add_test_playlist(db_session, tags=["rock"])
    updated = await playlists_service.update_info(
        db_session,
        playlist.id,
        USER_ID_EXAMPLE,
        PlaylistInfo(title="Night drive", description="Late", tags=["jazz", "rock"]),
    )
    assert updated.title == "Night drive"
    assert updated.description == "Late"
    assert sorted(updated.tags) == ["jazz", "rock"]

    kept_tags = await playlists_service.update_info(
        db_session, playlist.id, USER_ID_EXAMPLE, PlaylistInfo(title="Again", description="Same")
    )
    assert sorted(kept_tags.tags) == ["jazz", "rock"]

    with pytest.raises(ValidationError) as exc:
        await playlists_service.update_info(
            db_session, playlist.id, USER_ID_EXAMPLE, PlaylistInfo(title="Only title")
        )
    assert exc.value.message == "Title and description are required"


async def test_song_and_tag_membership(db_session, mock_validate_id, owner_and_other):
    playlist = await add_test_playlist(db_session)
    await playlists_service.add_song(db_session, playlist.id, USER_ID_EXAMPLE, TRACK_ID_EXAMPLE)
    with pytest.raises(AlreadyPresentError) as exc:
        await playlists_service.add_song(db_session, playlist.id, USER_ID_EXAMPLE, TRACK_ID_EXAMPLE)
    assert exc.value.message == "Song is already in this playlist"
    with pytest.raises(ValidationError) as exc:
        await playlists_service.add_song(db_session, playlist.id, USER_ID_EXAMPLE, "unknown-track")
    assert exc.value.message == "Song must be a valid Spotify track IDs"

    await playlists_service.add_tag(db_session, playlist.id, USER_ID_EXAMPLE, "jazz")
    await playlists_service.remove_tag(db_session, playlist.id, USER_ID_EXAMPLE, "jazz")
    with pytest.raises(NotFoundError) as exc:
        await playlists_service.remove_tag(db_session, playlist.id, USER_ID_EXAMPLE, "jazz")
    assert exc.value.message == "Tag not found in this playlist"

    await playlists_service.remove_song(db_session, playlist.id, USER_ID_EXAMPLE, TRACK_ID_EXAMPLE)
    assert playlist.songs == []
    assert playlist.tags == []


async def test_delete_playlist_removes_entries_and_avatar(db_session, owner_and_other):
    playlist = await add_test_playlist(db_session, songs=[TRACK_ID_EXAMPLE], tags=["rock"])
    avatar = avatar_service.avatar_path("playlists", playlist.id)
    avatar.parent.mkdir(parents=True, exist_ok=True)
    avatar.write_bytes(b"avatar")

    await playlists_service.delete_playlist(db_session, playlist.id, USER_ID_EXAMPLE)

    assert (await db_session.execute(select(Playlist))).scalars().all() == []
    assert (await db_session.execute(select(PlaylistEntry))).scalars().all() == []
    assert not avatar.exists()


async def test_delete_playlist_keeps_avatar_when_commit_fails(db_session, owner_and_other):
    playlist = await add_test_playlist(db_session)
    avatar = avatar_service.avatar_path("playlists", playlist.id)
    avatar.parent.mkdir(parents=True, exist_ok=True)
    avatar.write_bytes(b"avatar")

    failure = OperationalError("COMMIT", {}, Exception("database is locked"))
    with patch.object(db_session, "commit", side_effect=failure):
        with pytest.raises(OperationalError):
            await playlists_service.delete_playlist(db_session, playlist.id, USER_ID_EXAMPLE)

    assert avatar.read_bytes() == b"avatar"


async def test_get_user_playlists(db_session, owner_and_other):
    with pytest.raises(NotFoundError) as exc:
        await playlists_service.get_user_playlists(db_session, USER_ID_EXAMPLE, USER_ID_EXAMPLE)
    assert exc.value.message == "No playlists found for this user"

    await add_test_playlist(db_session, title="Public one")
    await add_test_playlist(db_session, title="Secret one", public=False)
    own = await playlists_service.get_user_playlists(db_session, USER_ID_EXAMPLE, USER_ID_EXAMPLE)
    seen = await playlists_service.get_user_playlists(
        db_session, USER_ID_EXAMPLE, OTHER_USER_ID_EXAMPLE
    )
    assert {playlist.title for playlist in own} == {"Public one", "Secret one"}
    assert [playlist.title for playlist in seen] == ["Public one"]


async def test_get_user_playlists_only_private(db_session, owner_and_other):
    await add_test_playlist(db_session, public=False)
    with pytest.raises(NotFoundError) as exc:
        await playlists_service.get_user_playlists(
            db_session, USER_ID_EXAMPLE, OTHER_USER_ID_EXAMPLE
        )
    assert exc.value.message == "No public playlists found for this user"
