"""Runtime settings for the labeler.

Settings are loaded from:
- environment variables
- and a local `.env` file (if present)

When running as a GitHub Action, inputs arrive as `INPUT_<NAME>` variables;
the plain names are accepted as a fallback for local runs.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LabelerSettings(BaseSettings):
    """Settings for one labeler run.

    Environment variables:
    - INPUT_GITHUB_TOKEN / GITHUB_TOKEN
    - INPUT_CONFIG_PATH / CONFIG_PATH   (optional)
    - GITHUB_EVENT_PATH                 (set by the runner)
    - GITHUB_API_URL                    (optional)
    - LOG_LEVEL                         (optional)
    - PROVISION_WORKERS                 (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `LabelerSettings(_env_file=path_to_env)`.
    """

    # Empty default so `LabelerSettings()` type-checks; the validator below enforces it.
    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("INPUT_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="Token with read/write access to issues, pull requests and labels",
    )
    config_path: Path = Field(
        default=Path(".github/pr-labels.yml"),
        validation_alias=AliasChoices("INPUT_CONFIG_PATH", "CONFIG_PATH"),
        description="Path to the YAML label rule file",
    )
    event_path: Path | None = Field(
        default=None,
        validation_alias="GITHUB_EVENT_PATH",
        description="Path to the webhook event payload JSON",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_API_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    provision_workers: int = Field(
        default=8,
        gt=0,
        validation_alias="PROVISION_WORKERS",
        description="Maximum concurrent label creations",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> LabelerSettings:
        if not self.github_token.strip():
            raise ValueError("GITHUB_TOKEN (or INPUT_GITHUB_TOKEN) is required")
        return self
