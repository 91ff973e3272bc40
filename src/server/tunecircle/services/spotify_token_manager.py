import asyncio
import logging
from time import time

import httpx

from tunecircle.exceptions import DependencyFailureError
from tunecircle.services.utils import config

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = 3600


class CatalogAccessToken:
    """
    Process-wide client-credentials token for the Spotify Web API.

    Attributes:
        access_token (str | None): The bearer token, None until the first exchange.
        expires_at (float | None): Unix timestamp after which the token must be exchanged again.
        refresh_lock (asyncio.Lock): Serialises exchanges so concurrent callers share one refresh.
    """

    def __init__(self):
        self.access_token = None
        self.expires_at = None
        self.refresh_lock = asyncio.Lock()

    def is_expired(self) -> bool:
        """
        Checks if the access token is missing or past its expiration.

        Returns:
            bool: True if a new token must be requested, otherwise False.
        """
        if self.access_token is None or self.expires_at is None:
            return True
        return time() >= self.expires_at


CATALOG_TOKEN = CatalogAccessToken()


async def ensure_catalog_token() -> str:
    """
    Return the cached catalog token, exchanging the client credentials for a new one when
    the cached token is absent or expired.

    Returns:
        str: A bearer token valid for the Spotify Web API.

    Raises:
        DependencyFailureError: If the token exchange fails.
    """
    token = CATALOG_TOKEN
    if not token.is_expired():
        return token.access_token
    async with token.refresh_lock:
        if token.is_expired():
            await refresh_catalog_token(token)
    return token.access_token


async def refresh_catalog_token(token: CatalogAccessToken) -> None:
    """
    Exchange the configured client credentials for a new access token.

    Args:
        token (CatalogAccessToken): The token holder to update in place.

    Raises:
        DependencyFailureError: If Spotify rejects the credentials or cannot be reached.
    """
    async with httpx.AsyncClient() as client:
        try:
            response = await client.post(
                config["SPOTIFY_TOKEN_URL"],
                data={"grant_type": "client_credentials"},
                auth=(config["CLIENT_ID"], config["CLIENT_SECRET"]),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Spotify token exchange failed: %s", exc.response.status_code)
            raise DependencyFailureError(
                f"Token exchange failed with status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Spotify token exchange could not be sent: %s", exc)
            raise DependencyFailureError(str(exc)) from exc

    token_data = response.json()
    token.access_token = token_data["access_token"]
    token.expires_at = time() + int(token_data.get("expires_in", DEFAULT_TOKEN_LIFETIME))
    logger.info("Spotify access token refreshed, expires in %s seconds", token_data.get("expires_in"))


async def get_spotify_headers() -> dict[str, str]:
    """
    Generate the headers required for Spotify API requests using the cached access token.

    Returns:
        dict[str, str]: A dictionary containing the Authorization header with the access token.
    """
    access_token = await ensure_catalog_token()
    return {"Authorization": f"Bearer {access_token}"}
