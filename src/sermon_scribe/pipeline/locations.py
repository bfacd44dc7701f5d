# ABOUTME: Church location search backed by the Maps-grounded Gemini model.
# ABOUTME: Returns only entries with a name and coordinates; unusable answers yield no matches.

import structlog

from sermon_scribe.ai.service import AIService
from sermon_scribe.ai.validation import ResponseValidator
from sermon_scribe.config import Settings, get_settings
from sermon_scribe.errors import GenerationEmptyResponseError, MalformedResponseError
from sermon_scribe.models import LocationMatch

log = structlog.get_logger()

MAX_MATCHES = 3


class ChurchLocator:
    """Finds churches by free-text query."""

    def __init__(
        self,
        ai_service: AIService | None = None,
        validator: ResponseValidator | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.ai_service = ai_service or AIService(self.settings)
        self.validator = validator or ResponseValidator()

    async def search(self, query: str) -> list[LocationMatch]:
        """Search for churches matching `query`.

        A missing API key still raises GenerationUnavailableError. An empty or
        unparseable answer is logged and treated as no matches.
        """
        if not query.strip():
            return []

        try:
            raw = await self.ai_service.search_churches(query)
            matches = self.validator.validate_locations(raw)
        except (GenerationEmptyResponseError, MalformedResponseError) as e:
            log.warning("church_search_unusable", query=query[:80], error=str(e)[:200])
            return []

        log.info("church_search_complete", query=query[:80], matches=len(matches))
        return matches[:MAX_MATCHES]
