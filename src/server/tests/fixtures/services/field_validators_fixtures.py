from unittest.mock import AsyncMock, patch

import pytest

from ..constants import OTHER_TRACK_ID_EXAMPLE, TRACK_ID_EXAMPLE

KNOWN_CATALOG_IDS = {TRACK_ID_EXAMPLE, OTHER_TRACK_ID_EXAMPLE, "0OdUWJ0sBjDrqHygGUXeCF"}


async def fake_validate_id(element_id: str, element_type: str) -> bool:
    return element_id in KNOWN_CATALOG_IDS


@pytest.fixture(scope="function")
def mock_validate_id():
    """Catalog lookups answer True only for KNOWN_CATALOG_IDS."""
    with patch(
        "tunecircle.services.spotify_service.validate_id",
        new_callable=AsyncMock,
        side_effect=fake_validate_id,
    ) as mock:
        yield mock
