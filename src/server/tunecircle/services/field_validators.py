import asyncio
import inspect
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from tunecircle.db.models import USER_ROLES, USER_STATUSES
from tunecircle.exceptions import ValidationError
from tunecircle.services import spotify_service
from tunecircle.services.utils import is_valid_object_id

NAME_PATTERN = r"^[A-Za-zÀ-ÖØ-öø-ÿŒœ\s.'0-9-]{1,50}$"


@dataclass(frozen=True)
class FieldValidator:
    """
    A named check on a single request field.

    Attributes:
        name (str): The field the check applies to.
        description (str): The message returned verbatim when the check fails.
        predicate (Callable): Returns a bool, or an awaitable resolving to one.
    """

    name: str
    description: str
    predicate: Callable[[Any], bool | Awaitable[bool]]

    async def is_valid(self, value: Any) -> bool:
        result = self.predicate(value)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)


def pattern_validator(name: str, pattern: str, description: str) -> FieldValidator:
    compiled = re.compile(pattern)
    return FieldValidator(
        name, description, lambda value: isinstance(value, str) and bool(compiled.fullmatch(value))
    )


def choice_validator(name: str, choices: Iterable[str], description: str) -> FieldValidator:
    allowed = frozenset(choices)
    return FieldValidator(
        name, description, lambda value: isinstance(value, str) and value in allowed
    )


def every_validator(name: str, element: FieldValidator, description: str) -> FieldValidator:
    """
    Build a check that passes when the value is a list whose elements all pass `element`.
    An empty list passes.
    """

    async def predicate(values: Any) -> bool:
        if not isinstance(values, list):
            return False
        results = await asyncio.gather(*(element.is_valid(value) for value in values))
        return all(results)

    return FieldValidator(name, description, predicate)


def is_genre(value: Any) -> bool:
    return value in spotify_service.GENRES


async def is_track(value: Any) -> bool:
    return isinstance(value, str) and await spotify_service.validate_id(value, "track")


async def is_artist(value: Any) -> bool:
    return isinstance(value, str) and await spotify_service.validate_id(value, "artist")


EMAIL = pattern_validator(
    "email", r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$", "Please use a valid email address"
)
USERNAME = pattern_validator(
    "username",
    r"^[a-zA-Z0-9._-]{3,30}$",
    "Username must be between 3 and 30 characters long and can contain letters, numbers, dots, "
    "underscores, and hyphens",
)
PASSWORD = pattern_validator(
    "password",
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&#])[A-Za-z\d@$!%*?&#]{8,}$",
    "Password must contain at least 8 characters, including an uppercase letter, a lowercase "
    "letter, a number, and one or more of the following special characters: @$!%*?&#",
)
STATUS = choice_validator(
    "status", USER_STATUSES, 'Status must be either "active", "inactive", or "banned"'
)
ROLE = choice_validator("role", USER_ROLES, 'Role must be either "user", "admin", or "superadmin"')
FIRST_NAME = pattern_validator(
    "firstName",
    NAME_PATTERN,
    "First name must be between 1 and 50 characters long and can contain letters (including "
    "accentuated ones like é, è, à), spaces, apostrophes, hyphens, periods, and numbers.",
)
LAST_NAME = pattern_validator(
    "lastName",
    NAME_PATTERN,
    "Last name must be between 1 and 50 characters long and can contain letters (including "
    "accentuated ones like é, è, à), spaces, apostrophes, hyphens, periods, and numbers.",
)
INFO = pattern_validator("info", r"^.{0,500}$", "Info must be at most 500 characters long")
USER_ID = FieldValidator("userId", "Invalid user Id format", is_valid_object_id)

ARTIST = FieldValidator("artist", "Artist must be a valid id", is_artist)
FOLLOW = FieldValidator("following", "Follow must be a valid user id", is_valid_object_id)
GENRE = FieldValidator("genre", "Genre must be a valid genre", is_genre)
PLAYLIST = FieldValidator("playlist", "Playlist must be a valid playlist id", is_valid_object_id)
ARTISTS = every_validator("artists", ARTIST, "Artists must be a valid array of artist id")
FOLLOWING = every_validator("following", FOLLOW, "Following must be an array of User IDs")
GENRES = every_validator("genres", GENRE, "Genres must be a valid array of genre")
PLAYLISTS = every_validator(
    "playlists", PLAYLIST, "Playlists must be a valid array of playlist id"
)

TITLE = pattern_validator(
    "title",
    r"^[a-zA-Z0-9\s'-]{1,30}$",
    "Title must be between 1 and 30 characters long and can contain letters, numbers, spaces, "
    "apostrophes, and hyphens",
)
DESCRIPTION = pattern_validator(
    "description", r"^.{0,500}$", "Description must be at most 500 characters long"
)
TAG = FieldValidator("tag", "Tag must be a valid genre", is_genre)
TAGS = every_validator("tags", TAG, "Tags must be an array of valid genres")
SONG = FieldValidator("song", "Song must be a valid Spotify track IDs", is_track)
SONGS = every_validator("songs", SONG, "Songs must be an array of valid Spotify track IDs")
OWNER = FieldValidator("owner", "Owner must be a valid user ID", is_valid_object_id)
PUBLIC = FieldValidator(
    "public", "Public status must be a boolean value", lambda value: isinstance(value, bool)
)

USER_VALIDATORS = {
    validator.name: validator
    for validator in (
        EMAIL, USERNAME, PASSWORD, STATUS, ROLE, FIRST_NAME, LAST_NAME, INFO,
        ARTISTS, FOLLOWING, GENRES, PLAYLISTS,
    )
}
PLAYLIST_VALIDATORS = {
    validator.name: validator
    for validator in (TITLE, DESCRIPTION, TAGS, SONGS, OWNER, PUBLIC)
}


async def ensure_valid(validator: FieldValidator, value: Any) -> None:
    """
    Run a check and turn a failure into a ValidationError carrying its description.

    Args:
        validator (FieldValidator): The check to run.
        value (Any): The field value.

    Raises:
        ValidationError: If the check fails.
    """
    if not await validator.is_valid(value):
        raise ValidationError(validator.description)


async def validate_fields(fields: Iterable[tuple[FieldValidator, Any]]) -> None:
    """
    Check every provided field in order; fields left as None or "" are skipped.

    Args:
        fields (Iterable[tuple[FieldValidator, Any]]): Pairs of check and value.

    Raises:
        ValidationError: With the description of the first failing check.
    """
    for validator, value in fields:
        if value not in (None, ""):
            await ensure_valid(validator, value)
