# ABOUTME: Image re-encoding and transport encoding for user captures.
# ABOUTME: Bounds image payload size and fans out batch re-encodes on the event loop's executor.

import asyncio
from io import BytesIO

import structlog
from PIL import Image, ImageOps

from sermon_scribe.config import Settings, get_settings
from sermon_scribe.models import EncodedMedia, MediaAttachment

log = structlog.get_logger()

DEFAULT_IMAGE_MIME = "image/jpeg"
DEFAULT_AUDIO_MIME = "audio/mp3"


class MediaNormalizer:
    """Re-encodes photos to a bounded JPEG and encodes media for the model request."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def resize_image(self, image: MediaAttachment) -> MediaAttachment:
        """Downscale an image so its longest edge fits the configured bound.

        Aspect ratio is preserved and the result is re-encoded as JPEG at a fixed
        quality. If decoding or re-encoding fails, the original capture is returned
        unchanged so a single bad photo never loses the rest of the batch.

        Args:
            image: Raw photo as captured.

        Returns:
            Re-encoded JPEG attachment, or the original on failure.
        """
        max_edge = self.settings.image_max_edge
        try:
            with Image.open(BytesIO(image.data)) as img:
                img = ImageOps.exif_transpose(img)
                if img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                img.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)

                buffer = BytesIO()
                img.save(buffer, format="JPEG", quality=self.settings.image_jpeg_quality)
                width, height = img.size
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            log.warning(
                "image_reencode_failed",
                filename=image.filename,
                original_bytes=image.size,
                error=str(e)[:200],
            )
            return image

        resized = MediaAttachment(
            data=buffer.getvalue(),
            mime_type=DEFAULT_IMAGE_MIME,
            filename=image.filename,
        )
        log.debug(
            "image_reencoded",
            filename=image.filename,
            width=width,
            height=height,
            original_bytes=image.size,
            resized_bytes=resized.size,
        )
        return resized

    async def optimize_images(self, images: list[MediaAttachment]) -> list[MediaAttachment]:
        """Re-encode a batch of images concurrently.

        All re-encodes are issued at once and awaited jointly. Completion order is
        irrelevant; the returned list is in input order.
        """
        if not images:
            return []

        loop = asyncio.get_running_loop()
        pending = [loop.run_in_executor(None, self.resize_image, image) for image in images]
        optimized = await asyncio.gather(*pending)

        log.info(
            "images_optimized",
            count=len(optimized),
            original_bytes=sum(i.size for i in images),
            optimized_bytes=sum(i.size for i in optimized),
        )
        return list(optimized)

    def encode(self, attachment: MediaAttachment, default_mime: str) -> EncodedMedia:
        """Pair a binary capture with its MIME type for transport."""
        return EncodedMedia(
            mime_type=attachment.mime_type or default_mime,
            data=attachment.data,
        )

    def encode_images(self, images: list[MediaAttachment]) -> list[EncodedMedia]:
        return [self.encode(image, DEFAULT_IMAGE_MIME) for image in images]

    def encode_audio(self, audio: MediaAttachment) -> EncodedMedia:
        return self.encode(audio, DEFAULT_AUDIO_MIME)
