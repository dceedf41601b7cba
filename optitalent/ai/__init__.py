"""AI wrapper layer — Gemini client plus one typed flow per feature."""

from optitalent.ai.client import GeminiClient, MediaPart, get_ai_client
from optitalent.ai.flow import Flow

__all__ = ["Flow", "GeminiClient", "MediaPart", "get_ai_client"]
