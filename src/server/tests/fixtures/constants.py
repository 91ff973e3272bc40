ENV_CONFIG_EXAMPLE = {
    "CLIENT_ID": "CLIENT_ID",
    "CLIENT_SECRET": "CLIENT_SECRET",
    "SPOTIFY_API_URL": "SPOTIFY_API_URL",
    "SPOTIFY_TOKEN_URL": "SPOTIFY_TOKEN_URL",
    "SECRET_KEY": "!SECRET_KEY!",
    "ACCESS_TOKEN_EXPIRE_MINUTES": 20,
    "ALGORITHM": "HS256",
    "LOWERCASE_FAVORITE_GENRES": "true",
    "CATALOG_SEARCH_MAX_OFFSET": "1000",
    "LOCAL_SEARCH_MAX_OFFSET": "",
}

SPOTIFY_HEADERS_EXAMPLE = {"Authorization": "Bearer access_token"}

ACCESS_TOKEN_EXAMPLE = {
    "access_token": "fake_access_token",
    "token_type": "Bearer",
    "expires_in": 3600,
}

SEARCH_URL_EXAMPLE = f"{ENV_CONFIG_EXAMPLE['SPOTIFY_API_URL']}/search"

TRACK_URL_EXAMPLE = f"{ENV_CONFIG_EXAMPLE['SPOTIFY_API_URL']}/tracks/4uLU6hMCjMI75M1A2tKUQC"

USER_ID_EXAMPLE = "0123456789abcdef0123456789abcdef"

OTHER_USER_ID_EXAMPLE = "fedcba9876543210fedcba9876543210"

PLAYLIST_ID_EXAMPLE = "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"

MISSING_ID_EXAMPLE = "bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"

TRACK_ID_EXAMPLE = "4uLU6hMCjMI75M1A2tKUQC"

OTHER_TRACK_ID_EXAMPLE = "7ouMYWpwJ422jRcDASZB7P"

PASSWORD_EXAMPLE = "Str0ng!Pass"

USER_CREATE_EXAMPLE = {
    "email": "ada@example.com",
    "username": "ada.l",
    "password": PASSWORD_EXAMPLE,
    "firstName": "Ada",
    "lastName": "Lovelace",
}

SPOTIFY_SEARCH_RESULT_EXAMPLE = {
    "tracks": {"items": [{"id": TRACK_ID_EXAMPLE, "name": "Never Gonna Give You Up"}]}
}

SPOTIFY_ERROR_EXAMPLE = {"error": {"status": 400, "message": "Invalid limit"}}
