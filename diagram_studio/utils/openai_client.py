"""OpenAI client utilities with httpx>=0.28 compatibility."""
from __future__ import annotations

from functools import lru_cache

import httpx
from openai import AsyncOpenAI

from diagram_studio.utils.config import settings
from diagram_studio.utils.errors import ConfigurationError


def _build_httpx_client() -> httpx.AsyncClient:
    """Create an async httpx client without deprecated proxy kwargs."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(connect=10.0, read=120.0, write=120.0, pool=120.0),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        follow_redirects=True,
    )


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    """Return a shared AsyncOpenAI client wired to the compatible httpx client."""
    if not settings.openai_api_key:
        raise ConfigurationError("OPENAI_API_KEY is not set")
    return AsyncOpenAI(api_key=settings.openai_api_key, http_client=_build_httpx_client())
