"""Configuration for the REST server."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Settings for the REST API.

    Notes:
        - The server starts with an empty registry unless
          WORKFLOW_DEFINITIONS_PATH points at a directory of definition files.
    """

    definitions_path: Path | None = Field(
        default=None,
        validation_alias="WORKFLOW_DEFINITIONS_PATH",
        description="Directory of *.json workflow definitions registered at startup.",
    )

    # Dev-friendly CORS. Override via WORKFLOW_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="WORKFLOW_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
