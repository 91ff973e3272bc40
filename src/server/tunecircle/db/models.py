from datetime import datetime, timezone

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from tunecircle.services.utils import generate_object_id

from .database import Base

USER_STATUSES = ("active", "inactive", "banned")
USER_ROLES = ("user", "admin", "superadmin")
PREFERENCE_KINDS = ("artists", "following", "genres", "playlists")
PLAYLIST_ENTRY_KINDS = ("songs", "tags")


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class MemberListMixin:
    """
    Exposes list-valued fields stored as rows of an entry table.

    Each entry row carries a `kind` naming the list it belongs to and the member `value`.
    The entry collection is loaded in insertion order.
    """

    entry_class = None

    def members(self, kind: str) -> list[str]:
        return [entry.value for entry in self.entries if entry.kind == kind]

    def find_entry(self, kind: str, value: str):
        return next(
            (entry for entry in self.entries if entry.kind == kind and entry.value == value), None
        )

    def add_member(self, kind: str, value: str) -> None:
        self.entries.append(self.entry_class(kind=kind, value=value))

    def replace_members(self, kind: str, values: list[str]) -> None:
        # Existing rows are reused so the unique constraint never sees an insert before a delete.
        current = {entry.value: entry for entry in self.entries if entry.kind == kind}
        others = [entry for entry in self.entries if entry.kind != kind]
        self.entries = others + [
            current.get(value) or self.entry_class(kind=kind, value=value)
            for value in dict.fromkeys(values)
        ]


class UserPreference(Base):
    """
    A member of one of the user's preference lists.

    Attributes:
        id (int): Autoincrement key, gives the list order.
        user_id (str): The user owning the preference.
        kind (str): One of "artists", "following", "genres" or "playlists".
        value (str): The catalog id, genre tag, user id or playlist id.
    """

    __tablename__ = "user_preferences"
    __table_args__ = (UniqueConstraint("user_id", "kind", "value", name="uq_user_preference"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String, nullable=False)
    value = Column(String, nullable=False)
    user = relationship("User", back_populates="entries")


class User(MemberListMixin, Base):
    """
    Represents a user in the system.

    Attributes:
        id (str): The identity of the user.
        email (str): The unique email of the user.
        username (str): The unique username of the user.
        hashed_password (str): The password hash of the user.
        status (str): One of "active", "inactive" or "banned".
        role (str): One of "user", "admin" or "superadmin".
        first_name (str): The first name of the user.
        last_name (str): The last name of the user.
        info (str): Free text about the user, at most 500 characters.
        created_at (datetime): The timestamp when the user was created.
        entries (list): The preference list members of the user.
    """

    __tablename__ = "users"
    entry_class = UserPreference
    id = Column(String(32), primary_key=True, default=generate_object_id)
    email = Column(String, unique=True, nullable=False)
    username = Column(String, unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    status = Column(String, default="active", nullable=False)
    role = Column(String, default="user", nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    info = Column(String, default="", nullable=False)
    created_at = Column(type_=TIMESTAMP(timezone=True), default=utc_now, nullable=False)
    entries = relationship(
        "UserPreference",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="UserPreference.id",
    )

    @property
    def preferences(self) -> dict[str, list[str]]:
        return {kind: self.members(kind) for kind in PREFERENCE_KINDS}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PlaylistEntry(Base):
    """
    A song or a tag of a playlist.

    Attributes:
        id (int): Autoincrement key, gives the list order.
        playlist_id (str): The playlist the entry belongs to.
        kind (str): Either "songs" or "tags".
        value (str): The catalog track id or the genre tag.
    """

    __tablename__ = "playlist_entries"
    __table_args__ = (UniqueConstraint("playlist_id", "kind", "value", name="uq_playlist_entry"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    playlist_id = Column(String(32), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String, nullable=False)
    value = Column(String, nullable=False)
    playlist = relationship("Playlist", back_populates="entries")


class Playlist(MemberListMixin, Base):
    """
    Represents a playlist in the DB.

    Attributes:
        id (str): The identity of the playlist.
        title (str): The title of the playlist.
        description (str): An optional description of the playlist.
        owner (str): The id of the user who created the playlist. Never changes.
        public (bool): Whether users other than the owner can see the playlist.
        created_at (datetime): The timestamp when the playlist was created.
        updated_at (datetime): The timestamp when the playlist was last changed.
        entries (list): The songs and tags of the playlist.
    """

    __tablename__ = "playlists"
    entry_class = PlaylistEntry
    id = Column(String(32), primary_key=True, default=generate_object_id)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    owner = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    public = Column(Boolean, default=True, nullable=False)
    created_at = Column(type_=TIMESTAMP(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(type_=TIMESTAMP(timezone=True), default=utc_now, onupdate=utc_now)
    entries = relationship(
        "PlaylistEntry",
        back_populates="playlist",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PlaylistEntry.id",
    )

    @property
    def songs(self) -> list[str]:
        return self.members("songs")

    @property
    def tags(self) -> list[str]:
        return self.members("tags")
