"""Google GenAI client utilities."""
from __future__ import annotations

from functools import lru_cache

from google import genai

from diagram_studio.utils.config import settings
from diagram_studio.utils.errors import ConfigurationError


@lru_cache(maxsize=1)
def get_gemini_client() -> genai.Client:
    """Return a shared google-genai client."""
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY is not set")
    return genai.Client(api_key=settings.gemini_api_key)
