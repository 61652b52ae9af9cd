"""Configuration management for the thesis agent service."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parents[2]
_PACKAGE_DIR = Path(__file__).resolve().parents[1]
# The repository .env wins, then the package directory, then the working directory.
_ENV_FILE_CANDIDATES: tuple[str, ...] = (
    str(_REPO_ROOT / ".env"),
    str(_PACKAGE_DIR / ".env"),
    ".env",
)


class AgentSettings(BaseSettings):
    """Centralised configuration derived from environment variables."""

    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = Field(
        None,
        description="Log file path; leave empty to log to stdout only",
    )
    log_format: Literal["plain", "json"] = Field("plain", description="Console/file renderer")

    agent_host: str = Field("0.0.0.0", description="FastAPI bind host")
    agent_port: int = Field(8001, description="FastAPI bind port")

    llm_api_key: SecretStr | None = Field(None, description="API key of the language model")
    llm_api_base: AnyHttpUrl = Field(
        "https://api.openai.com/v1", description="OpenAI-compatible endpoint"
    )
    llm_model: str = Field("gpt-4o-mini", description="Model used for planning and refinement")
    llm_temperature: float = Field(0.2, ge=0.0, le=2.0)
    llm_timeout_seconds: float = Field(60.0, gt=0)

    agent_language: str = Field("français", description="Language the agent answers in")
    prompt_history_limit: int = Field(
        10, ge=0, description="Past prompts used as refinement context"
    )
    prompt_log_page_size: int = Field(50, ge=1)

    tool_max_retries: int = Field(
        0, ge=0, description="Retries of a tool call after a store failure (0 = none)"
    )
    tool_retry_backoff: float = Field(0.0, ge=0.0, description="Backoff base in seconds")

    store_backend: Literal["sqlite", "memory"] = "sqlite"
    database_path: str = Field("./data/thesis_agent.db", description="SQLite database file")
    default_user_id: str | None = Field(
        None, description="User assumed when a request carries no identity (development only)"
    )

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_CANDIDATES,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> AgentSettings:
    """Return a cached AgentSettings instance."""

    return AgentSettings()


def resolved_env_file() -> str | None:
    """Return the first readable .env file from the candidate list."""

    for candidate in _ENV_FILE_CANDIDATES:
        path = Path(candidate).expanduser()
        if path.is_file():
            return str(path)
    return None


def env_file_candidates() -> tuple[str, ...]:
    """Expose configured env file search order for diagnostics."""

    return _ENV_FILE_CANDIDATES
