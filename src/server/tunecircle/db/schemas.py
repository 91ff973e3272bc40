from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictBool
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserLogin(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class TokenSchema(CamelModel):
    token: str
    user_id: str


class UserCreate(CamelModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    info: Optional[str] = None


class UserCreated(CamelModel):
    user_id: str


class PasswordUpdate(CamelModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    info: Optional[str] = None


class PreferencesSchema(CamelModel):
    artists: List[str] = []
    following: List[str] = []
    genres: List[str] = []
    playlists: List[str] = []


class UserPublic(CamelModel):
    id: str
    username: str
    first_name: str
    last_name: str
    created_at: datetime
    info: str
    preferences: PreferencesSchema


class UserSearchResult(CamelModel):
    id: str
    username: str
    first_name: str
    last_name: str
    full_name: str


class PlaylistCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    public: Optional[StrictBool] = None
    songs: Optional[List[str]] = None


class PlaylistCreated(CamelModel):
    playlist_id: str


class PlaylistVisibility(CamelModel):
    public: Optional[StrictBool] = None


class PlaylistInfo(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class PlaylistResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    tags: List[str]
    songs: List[str]
    owner: str
    public: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class PaginationBlock(CamelModel):
    total_results: int
    total_pages: int
    current_page: int
    results_per_page: int


class SearchPagination(BaseModel):
    users: PaginationBlock
    playlists: PaginationBlock


class SearchResponse(BaseModel):
    users: List[UserSearchResult]
    playlists: List[PlaylistResponse]
    pagination: SearchPagination
