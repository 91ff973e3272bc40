import logging

import httpx

from tunecircle.exceptions import DependencyFailureError, InvalidTypeError
from tunecircle.services.spotify_token_manager import get_spotify_headers
from tunecircle.services.utils import config

logger = logging.getLogger(__name__)

VALID_TYPES = ("album", "artist", "audiobook", "episode", "playlist", "show", "track")

# Spotify's genre seed list, fixed at build time.
GENRES = (
    "acoustic", "afrobeat", "alt-rock", "alternative", "ambient", "anime", "black-metal",
    "bluegrass", "blues", "bossanova", "brazil", "breakbeat", "british", "cantopop",
    "chicago-house", "children", "chill", "classical", "club", "comedy", "country", "dance",
    "dancehall", "death-metal", "deep-house", "detroit-techno", "disco", "disney",
    "drum-and-bass", "dub", "dubstep", "edm", "electro", "electronic", "emo", "folk", "forro",
    "french", "funk", "garage", "german", "gospel", "goth", "grindcore", "groove", "grunge",
    "guitar", "happy", "hard-rock", "hardcore", "hardstyle", "heavy-metal", "hip-hop",
    "holidays", "honky-tonk", "house", "idm", "indian", "indie", "indie-pop", "industrial",
    "iranian", "j-dance", "j-idol", "j-pop", "j-rock", "jazz", "k-pop", "kids", "latin",
    "latino", "malay", "mandopop", "metal", "metal-misc", "metalcore", "minimal-techno",
    "movies", "mpb", "new-age", "new-release", "opera", "pagode", "party", "philippines-opm",
    "piano", "pop", "pop-film", "post-dubstep", "power-pop", "progressive-house", "psych-rock",
    "punk", "punk-rock", "r-n-b", "rainy-day", "reggae", "reggaeton", "road-trip", "rock",
    "rock-n-roll", "rockabilly", "romance", "sad", "salsa", "samba", "sertanejo", "show-tunes",
    "singer-songwriter", "ska", "sleep", "songwriter", "soul", "soundtracks", "spanish",
    "study", "summer", "swedish", "synth-pop", "tango", "techno", "trance", "trip-hop",
    "turkish", "work-out", "world-music",
)


def get_genres() -> list[str]:
    return list(GENRES)


def validate_types(types: list[str]) -> bool:
    """
    Check that every requested type is a catalog type.

    Args:
        types (list[str]): The requested catalog types.

    Returns:
        bool: True if all types are in VALID_TYPES.
    """
    return all(item_type in VALID_TYPES for item_type in types)


def upstream_error_message(response: httpx.Response) -> str:
    """
    Extract the error message from a Spotify error body, falling back to the raw text.

    Args:
        response (httpx.Response): The failed response.

    Returns:
        str: The upstream message.
    """
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text


async def spotify_get(url: str, params: dict | None = None) -> httpx.Response:
    """
    Send a GET request to the Spotify Web API with the cached bearer token attached.

    Args:
        url (str): The absolute URL to request.
        params (dict | None): Optional query parameters.

    Returns:
        httpx.Response: The raw response, whatever its status.

    Raises:
        DependencyFailureError: If the token cannot be obtained or Spotify cannot be reached.
    """
    spotify_headers = await get_spotify_headers()
    async with httpx.AsyncClient() as client:
        try:
            return await client.get(url, headers=spotify_headers, params=params)
        except httpx.RequestError as exc:
            logger.error("Error connecting to Spotify API: %s", exc)
            raise DependencyFailureError(str(exc)) from exc


async def search(query: str, types: list[str], limit: int = 10, offset: int = 0) -> dict:
    """
    Search the Spotify catalog.

    Args:
        query (str): The search query string.
        types (list[str]): The catalog types to search for.
        limit (int): The number of results to return per type.
        offset (int): The index of the first result to return.

    Returns:
        dict: Spotify's response body, unmodified.

    Raises:
        DependencyFailureError: If Spotify answers with an error.
    """
    response = await spotify_get(
        f"{config['SPOTIFY_API_URL']}/search",
        params={"q": query, "type": ",".join(types), "limit": limit, "offset": offset},
    )
    if not response.is_success:
        logger.warning("Spotify search failed with status %s", response.status_code)
        raise DependencyFailureError(upstream_error_message(response))
    return response.json()


async def get_element(element_id: str, element_type: str) -> dict:
    """
    Retrieve a single catalog element.

    Args:
        element_id (str): The Spotify id of the element.
        element_type (str): One of VALID_TYPES.

    Returns:
        dict: Spotify's response body, unmodified.

    Raises:
        InvalidTypeError: If the type is not a catalog type.
        DependencyFailureError: If Spotify answers with an error, including 404.
    """
    if element_type not in VALID_TYPES:
        raise InvalidTypeError(f"{element_type} is not a valid type")
    response = await spotify_get(f"{config['SPOTIFY_API_URL']}/{element_type}s/{element_id}")
    if not response.is_success:
        raise DependencyFailureError(upstream_error_message(response))
    return response.json()


async def validate_id(element_id: str, element_type: str) -> bool:
    """
    Probe the catalog for the existence of an element.

    Any non-2xx answer counts as "does not exist"; a transient upstream failure is therefore
    indistinguishable from an unknown id.

    Args:
        element_id (str): The Spotify id to check.
        element_type (str): One of VALID_TYPES.

    Returns:
        bool: True if Spotify returned the element.
    """
    if element_type not in VALID_TYPES:
        return False
    response = await spotify_get(f"{config['SPOTIFY_API_URL']}/{element_type}s/{element_id}")
    return response.is_success
