# ABOUTME: Google Gemini client for study plan, bulletin, and church search generation.
# ABOUTME: Sends multi-part requests with a declared output schema and returns raw text.

from typing import Any

import structlog
from google import genai
from google.genai import types
from pydantic import BaseModel

from sermon_scribe.ai.prompts import build_church_search_prompt
from sermon_scribe.config import Settings, get_settings
from sermon_scribe.errors import GenerationEmptyResponseError, GenerationUnavailableError
from sermon_scribe.models import BulletinContent, StudyPlanContent

log = structlog.get_logger()


def contract_schema(model: type[BaseModel], required: list[str]) -> dict[str, Any]:
    """JSON schema for a response model with an explicit list of required keys.

    The pydantic models stay lenient so validation can tell an empty result from
    a malformed one; the schema sent to the model is the strict contract.
    """
    schema = model.model_json_schema()
    schema["required"] = required
    return schema


STUDY_PLAN_SCHEMA = contract_schema(StudyPlanContent, ["sermonTitle", "days"])
BULLETIN_SCHEMA = contract_schema(BulletinContent, ["title", "events", "rawSummary"])
STUDY_PLAN_SCHEMA["$defs"]["DayContent"]["required"] = [
    "day",
    "topic",
    "scriptureReference",
    "supportingScriptures",
    "devotionalContent",
    "reflectionQuestion",
    "prayerFocus",
]
BULLETIN_SCHEMA["$defs"]["EventContent"]["required"] = [
    "title",
    "date",
    "time",
    "location",
    "description",
]


class AIService:
    """Service for interacting with Google Gemini AI.

    The service does not retry. A failed call surfaces to the caller, which
    decides whether to offer the user another attempt.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        """Lazy-initialized Gemini client."""
        if self._client is None:
            if not self.settings.gemini_api_key:
                raise GenerationUnavailableError("GEMINI_API_KEY is required")
            self._client = genai.Client(
                api_key=self.settings.gemini_api_key.get_secret_value(),
            )
        return self._client

    def _generate_content_config(
        self,
        response_mime_type: str = "application/json",
        response_schema: dict[str, Any] | None = None,
        tools: list[types.Tool] | None = None,
    ) -> types.GenerateContentConfig:
        """Create generation config for a structured or tool-grounded call."""
        config = types.GenerateContentConfig(
            temperature=self.settings.ai_temperature,
            top_p=self.settings.ai_top_p,
            max_output_tokens=self.settings.ai_max_output_tokens,
            response_modalities=["TEXT"],
        )
        if tools:
            # Grounding tools cannot be combined with a JSON response mime type
            config.tools = tools
        else:
            config.response_mime_type = response_mime_type
        if response_schema:
            config.response_json_schema = response_schema
        return config

    async def _generate(
        self,
        parts: list[types.Part],
        response_schema: dict[str, Any] | None = None,
        tools: list[types.Tool] | None = None,
        model: str | None = None,
    ) -> str:
        """Generate content using the Gemini model.

        Args:
            parts: Ordered request parts (attachments first, directive last).
            response_schema: JSON schema for structured output.
            tools: Grounding tools; disables JSON mime type.
            model: Model name override. Defaults to settings value.

        Returns:
            Generated text response.

        Raises:
            GenerationUnavailableError: If no API key is configured.
            GenerationEmptyResponseError: If the model returned no text.
        """
        model = model or self.settings.gemini_model
        log.debug(
            "generating_content",
            model=model,
            part_count=len(parts),
            inline_bytes=sum(len(p.inline_data.data or b"") for p in parts if p.inline_data),
        )

        contents = [types.Content(role="user", parts=parts)]
        config = self._generate_content_config(response_schema=response_schema, tools=tools)

        result = ""
        chunk_count = 0
        finish_reason = None

        async for chunk in await self.client.aio.models.generate_content_stream(
            model=model,
            contents=contents,
            config=config,
        ):
            chunk_count += 1

            if chunk.candidates:
                candidate = chunk.candidates[0]
                if candidate.finish_reason:
                    finish_reason = candidate.finish_reason

            if chunk.text:
                result += chunk.text

        log.debug(
            "generation_complete",
            chunk_count=chunk_count,
            result_length=len(result),
            finish_reason=str(finish_reason) if finish_reason else None,
        )

        if not result.strip():
            log.warning(
                "empty_generation_result",
                chunk_count=chunk_count,
                finish_reason=str(finish_reason) if finish_reason else "unknown",
            )
            raise GenerationEmptyResponseError("Model returned no text")

        return result

    async def generate_study_plan(self, parts: list[types.Part]) -> str:
        """Request a study plan for the assembled sermon evidence."""
        log.info("requesting_study_plan", part_count=len(parts))
        return await self._generate(parts, response_schema=STUDY_PLAN_SCHEMA)

    async def extract_bulletin(self, parts: list[types.Part]) -> str:
        """Request events and announcements from bulletin images."""
        log.info("requesting_bulletin_extraction", part_count=len(parts))
        return await self._generate(parts, response_schema=BULLETIN_SCHEMA)

    async def search_churches(self, query: str) -> str:
        """Ask the Maps-grounded model for churches matching a free-text query."""
        log.info("searching_churches", query=query[:80])
        parts = [types.Part.from_text(text=build_church_search_prompt(query))]
        return await self._generate(
            parts,
            tools=[types.Tool(google_maps=types.GoogleMaps())],
        )
