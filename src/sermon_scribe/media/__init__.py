# ABOUTME: Media handling for photo and audio captures.
# ABOUTME: Exposes the MediaNormalizer used before request assembly.

from sermon_scribe.media.normalizer import MediaNormalizer

__all__ = ["MediaNormalizer"]
