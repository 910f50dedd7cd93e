"""Configuration management for agent-search using pydantic-settings.

This module provides the SearchSettings class for default search settings
from environment variables, .env files, and a project config file. All
configuration is type-safe and validated using Pydantic models.

Settings priority (highest to lowest):
1. CLI flags (applied after SearchSettings creation)
2. Environment variables (AGENT_SEARCH_* prefix)
3. .env file
4. agent-search.yaml project config
5. Default values
"""

import logging
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from agent_search.excerpt.constants import DEFAULT_MAX_CONTENT_LENGTH, DEFAULT_SNIPPET_SIZE
from agent_search.excerpt.models import OutputMode, SnippetConfig
from agent_search.sessions.claude import DEFAULT_SESSIONS_DIR
from agent_search.sessions.models import ALL_AGENTS, AgentType

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = "agent-search.yaml"

# Map agent-search.yaml keys to SearchSettings field names
_YAML_TO_FIELD = {
    "sessions_dir": "sessions_dir",
    "output_mode": "output_mode",
    "snippet_size": "snippet_size",
    "max_content_length": "max_content_length",
    "max_tokens": "max_tokens",
    "context": "context_lines",
    "limit": "limit",
    "agents": "agents",
}


def parse_agents(value: str | list[str]) -> list[AgentType]:
    """Parse an agent selection ("claude,kimi", a list, or "all").

    Raises:
        ValueError: If the selection is empty or names an unknown agent
    """
    names = value.split(",") if isinstance(value, str) else list(value)
    names = [str(n).strip().lower() for n in names if str(n).strip()]
    if "all" in names:
        return list(ALL_AGENTS)

    unknown = [n for n in names if n not in ALL_AGENTS]
    if unknown or not names:
        raise ValueError(
            f"Invalid agent: {', '.join(unknown) or '(none)'}. Valid agents: {', '.join(ALL_AGENTS)}"
        )
    # Keep first-seen order, drop repeats
    return list(dict.fromkeys(names))


class _ProjectYamlSource(PydanticBaseSettingsSource):
    """Read project config from agent-search.yaml (lower priority than env vars)."""

    def get_field_value(self, field, field_name):  # type: ignore[override]
        return None, field_name, False

    def __call__(self) -> dict:
        project_file = Path(PROJECT_CONFIG_FILE)
        if not project_file.exists():
            return {}

        raw = yaml.safe_load(project_file.read_text()) or {}
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring {PROJECT_CONFIG_FILE}: expected a mapping")
            return {}

        result: dict = {}
        for yaml_key, field_name in _YAML_TO_FIELD.items():
            if yaml_key in raw:
                result[field_name] = raw[yaml_key]
        return result


class SearchSettings(BaseSettings):
    """Default settings for searches, loaded from the environment.

    All environment variables are prefixed with AGENT_SEARCH_
    (e.g., AGENT_SEARCH_SNIPPET_SIZE). Empty values are treated as unset.

    Example:
        >>> settings = SearchSettings()
        >>> settings.snippet_config().snippet_size
        200
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AGENT_SEARCH_",
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            _ProjectYamlSource(settings_cls),
            file_secret_settings,
        )

    sessions_dir: Path = Field(
        default=DEFAULT_SESSIONS_DIR,
        description="Claude Code projects directory containing session JSONL files",
    )

    output_mode: OutputMode = Field(
        default="snippet",
        description="snippet (excerpt around matches), full (length-limited), or summary",
    )

    snippet_size: int = Field(
        default=DEFAULT_SNIPPET_SIZE,
        description="Characters of context kept on each side of a match",
    )

    max_content_length: int = Field(
        default=DEFAULT_MAX_CONTENT_LENGTH,
        description="Maximum characters per message in full mode (0 for unlimited)",
    )

    max_tokens: int | None = Field(
        default=None,
        description="Approximate total token budget for all results (unset for unlimited)",
    )

    context_lines: int = Field(
        default=0,
        description="Messages of context to show before and after each match",
    )

    limit: int = Field(
        default=50,
        description="Maximum number of results (0 for unlimited)",
    )

    agents: str = Field(
        default="claude",
        description="Comma-separated agents to search (claude, kimi, codex, opencode) or 'all'",
    )

    @field_validator("agents", mode="before")
    @classmethod
    def validate_agents(cls, v: str | list[str]) -> str:
        return ",".join(parse_agents(v))

    @field_validator("output_mode", mode="before")
    @classmethod
    def validate_output_mode(cls, v: str) -> str:
        valid = {"snippet", "full", "summary"}
        if isinstance(v, str) and v.lower() in valid:
            return v.lower()
        raise ValueError(f"Invalid output mode: {v}. Valid modes: {', '.join(sorted(valid))}")

    @field_validator("snippet_size", "max_content_length", "max_tokens", "context_lines", "limit")
    @classmethod
    def validate_non_negative(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("must be a non-negative number")
        return v

    @field_validator("sessions_dir", mode="before")
    @classmethod
    def expand_sessions_dir(cls, v: Path | str) -> Path:
        """Expand ~ in the sessions directory."""
        path = Path(v) if isinstance(v, str) else v
        return path.expanduser()

    def snippet_config(self) -> SnippetConfig:
        """Core snippet settings built from these defaults."""
        return SnippetConfig(
            mode=self.output_mode,
            snippet_size=self.snippet_size,
            max_content_length=self.max_content_length,
            max_tokens=self.max_tokens,
        )

    def agent_list(self) -> list[AgentType]:
        """Agents selected by default, in the configured order."""
        return parse_agents(self.agents)
