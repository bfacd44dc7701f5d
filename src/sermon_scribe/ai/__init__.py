# ABOUTME: AI integration module for Google Gemini.
# ABOUTME: Provides the generation client, prompt templates, and response validation.

from sermon_scribe.ai.service import AIService
from sermon_scribe.ai.validation import ResponseValidator

__all__ = ["AIService", "ResponseValidator"]
