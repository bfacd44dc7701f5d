# ABOUTME: Tests for church location search.
# ABOUTME: Uses a mocked AIService to check filtering, capping, and failure handling.

import json
from unittest.mock import AsyncMock

import pytest

from sermon_scribe.config import Settings
from sermon_scribe.errors import (
    GenerationEmptyResponseError,
    GenerationUnavailableError,
)
from sermon_scribe.pipeline.locations import MAX_MATCHES, ChurchLocator


def _church(name: str, lat: float = 39.78, lng: float = -89.65) -> dict:
    return {
        "name": name,
        "address": "100 Church St, Springfield",
        "lat": lat,
        "lng": lng,
        "uri": "https://maps.google.com/?cid=1",
        "serviceTimes": ["9:00 AM", "11:00 AM"],
    }


class TestChurchLocator:
    """Tests for ChurchLocator.search."""

    async def test_returns_usable_matches(self, mock_settings: Settings, mock_ai_service: AsyncMock) -> None:
        mock_ai_service.search_churches.return_value = json.dumps(
            [_church("Grace Chapel"), {"name": "No coordinates"}]
        )

        matches = await ChurchLocator(mock_ai_service, settings=mock_settings).search("grace chapel")

        assert [m.name for m in matches] == ["Grace Chapel"]
        assert matches[0].serviceTimes == ["9:00 AM", "11:00 AM"]
        mock_ai_service.search_churches.assert_awaited_once_with("grace chapel")

    async def test_capped_at_max_matches(self, mock_settings: Settings, mock_ai_service: AsyncMock) -> None:
        mock_ai_service.search_churches.return_value = json.dumps(
            [_church(f"Church {i}") for i in range(5)]
        )

        matches = await ChurchLocator(mock_ai_service, settings=mock_settings).search("church")

        assert len(matches) == MAX_MATCHES

    async def test_blank_query_skips_model(self, mock_settings: Settings, mock_ai_service: AsyncMock) -> None:
        assert await ChurchLocator(mock_ai_service, settings=mock_settings).search("   ") == []
        mock_ai_service.search_churches.assert_not_awaited()

    async def test_prose_answer_yields_nothing(self, mock_settings: Settings, mock_ai_service: AsyncMock) -> None:
        mock_ai_service.search_churches.return_value = "I could not find that church."

        assert await ChurchLocator(mock_ai_service, settings=mock_settings).search("nowhere") == []

    async def test_empty_answer_yields_nothing(self, mock_settings: Settings, mock_ai_service: AsyncMock) -> None:
        mock_ai_service.search_churches.side_effect = GenerationEmptyResponseError("empty")

        assert await ChurchLocator(mock_ai_service, settings=mock_settings).search("grace") == []

    async def test_missing_key_propagates(self, mock_settings: Settings, mock_ai_service: AsyncMock) -> None:
        mock_ai_service.search_churches.side_effect = GenerationUnavailableError("no key")

        with pytest.raises(GenerationUnavailableError):
            await ChurchLocator(mock_ai_service, settings=mock_settings).search("grace")
