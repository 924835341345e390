"""Application configuration."""
from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    assistant_provider: Literal["openai", "gemini"] = "openai"

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_reasoning_model: str = "o3-mini"
    openai_reasoning_effort: str = "high"

    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )
    gemini_model: str = "gemini-2.5-flash"
    gemini_reasoning_model: str = "gemini-2.5-pro"
    thinking_budget: int = 32768

    generation_temperature: float = 0.2
    other_document_preview_chars: int = 500

    render_debounce_seconds: float = 0.5
    analysis_debounce_seconds: float = 2.0

    mermaid_cli_command: str = "mmdc"
    mermaid_renderer_image: str = ""  # e.g. minlag/mermaid-cli; empty runs mmdc locally

    database_url: str = Field(
        default="sqlite:///diagram_studio.db",
        validation_alias=AliasChoices("DATABASE_URL"),
    )
    chat_storage_key: str = "diagram_studio_planner_chat"

    output_dir: str = "outputs"
    default_project_context: str = "VelPRO is a Construction Management software linking to Xero."
    log_level: str = "INFO"


settings = Settings()
