# ABOUTME: Builds the ordered multi-part Gemini request from normalized user input.
# ABOUTME: Evidence parts come first (audio, images, text); the directive is always last.

from dataclasses import dataclass, field
from datetime import date

import structlog
from google.genai import types

from sermon_scribe.ai.prompts import (
    TRANSCRIPT_BLOCK,
    build_bulletin_instruction,
    build_study_instruction,
)
from sermon_scribe.errors import EmptyInputError
from sermon_scribe.models import EncodedMedia, GenerationSettings

log = structlog.get_logger()


@dataclass
class AssembledRequest:
    """Evidence parts plus the directive that closes the request."""

    parts: list[types.Part] = field(default_factory=list)
    instruction: str = ""

    @property
    def contents(self) -> list[types.Part]:
        """All parts in send order."""
        return [*self.parts, types.Part.from_text(text=self.instruction)]


def _media_part(media: EncodedMedia) -> types.Part:
    return types.Part.from_bytes(data=media.data, mime_type=media.mime_type)


class RequestAssembler:
    """Turns normalized captures and user settings into a model request."""

    def __init__(self, settings: GenerationSettings) -> None:
        self.settings = settings

    def assemble_study(
        self,
        audio: EncodedMedia | None = None,
        images: list[EncodedMedia] | None = None,
        text: str | None = None,
    ) -> AssembledRequest:
        """Assemble a study plan request.

        Raises:
            EmptyInputError: If no evidence part could be built.
        """
        images = images or []
        text = text.strip() if text else ""

        parts: list[types.Part] = []
        if audio is not None:
            parts.append(_media_part(audio))
        parts.extend(_media_part(image) for image in images)
        if text:
            parts.append(types.Part.from_text(text=TRANSCRIPT_BLOCK.format(text=text)))

        if not parts:
            raise EmptyInputError("No audio, images, or text to build a study from")

        instruction = build_study_instruction(
            self.settings,
            has_audio=audio is not None,
            has_images=bool(images),
            has_text=bool(text),
        )
        log.debug(
            "study_request_assembled",
            part_count=len(parts),
            has_audio=audio is not None,
            image_count=len(images),
            text_chars=len(text),
        )
        return AssembledRequest(parts=parts, instruction=instruction)

    def assemble_bulletin(
        self,
        images: list[EncodedMedia],
        today: date | None = None,
    ) -> AssembledRequest:
        """Assemble a bulletin extraction request from page photos.

        Raises:
            EmptyInputError: If there are no images.
        """
        if not images:
            raise EmptyInputError("No bulletin images to scan")

        parts = [_media_part(image) for image in images]
        log.debug("bulletin_request_assembled", image_count=len(images))
        return AssembledRequest(parts=parts, instruction=build_bulletin_instruction(today))
