"""
Configuration management for the resource catalog.

Precedence: env vars (CATALOG_*) > .env file > catalog.yaml > defaults

Config file: {repo_root}/catalog.yaml
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "CATALOG_"
CONFIG_FILE_NAME = "catalog.yaml"


def _resolve_repo_root() -> Path:
    """Resolve the repository root from env or CWD, before Settings init."""
    raw = os.environ.get(f"{ENV_PREFIX}REPO_ROOT", "")
    if raw:
        return Path(raw).expanduser().resolve()
    return Path.cwd().resolve()


def _load_yaml_config(repo_root: Path) -> dict[str, Any]:
    """Load catalog.yaml from the repository root."""
    config_file = repo_root / CONFIG_FILE_NAME
    if not config_file.exists():
        return {}
    try:
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(f"{CONFIG_FILE_NAME} is not a mapping, ignoring: {config_file}")
            return {}
        return data
    except Exception as e:
        logger.warning(f"Error loading {CONFIG_FILE_NAME}: {e}")
        return {}


class Settings(BaseSettings):
    """Pipeline configuration. Precedence: env vars > .env > catalog.yaml > defaults."""

    repo_root: Path = Field(
        default_factory=_resolve_repo_root,
        description="Root of the resource repository (agents/, prompts/, ...)",
    )

    # MCP registry
    registry_url: str = Field(
        default="https://api.mcp.github.com/v0.1/servers/",
        description="Paginated MCP server registry endpoint",
    )
    registry_timeout: float = Field(default=30.0, description="Registry request timeout in seconds")
    registry_enabled: bool = Field(default=True, description="Fetch the registry for README links")

    # Outputs (relative paths resolve against repo_root)
    website_data_dir: Path = Field(default=Path("website/public/data"))
    website_source_data_dir: Path = Field(default=Path("website/data"))
    docs_dir: Path = Field(default=Path("docs"))
    marketplace_file: Path = Field(default=Path(".github/plugin/marketplace.json"))

    # Marketplace manifest
    marketplace_name: str = Field(default="awesome-copilot")
    marketplace_description: str = Field(
        default="Community-driven collection of GitHub Copilot plugins, agents, prompts, and skills",
    )
    marketplace_version: str = Field(default="1.0.0")
    owner_name: str = Field(default="GitHub")
    owner_email: str = Field(default="copilot@github.com")

    # README install badges
    repo_base_url: str = Field(
        default="https://raw.githubusercontent.com/github/awesome-copilot/main",
        description="Raw-content base URL used in install links",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    model_config = {
        "env_prefix": ENV_PREFIX,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="before")
    @classmethod
    def _inject_yaml_config(cls, data: Any) -> Any:
        """Inject catalog.yaml values as fallbacks below env vars and .env."""
        if not isinstance(data, dict):
            data = {}

        repo_root = Path(data["repo_root"]) if data.get("repo_root") else _resolve_repo_root()
        yaml_config = _load_yaml_config(repo_root)

        for key, value in yaml_config.items():
            if key not in data or data[key] is None:
                env_val = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
                if env_val is None:
                    data[key] = value

        return data

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.repo_root / path

    @property
    def agents_dir(self) -> Path:
        return self.repo_root / "agents"

    @property
    def prompts_dir(self) -> Path:
        return self.repo_root / "prompts"

    @property
    def instructions_dir(self) -> Path:
        return self.repo_root / "instructions"

    @property
    def skills_dir(self) -> Path:
        return self.repo_root / "skills"

    @property
    def hooks_dir(self) -> Path:
        return self.repo_root / "hooks"

    @property
    def workflows_dir(self) -> Path:
        return self.repo_root / "workflows"

    @property
    def plugins_dir(self) -> Path:
        return self.repo_root / "plugins"

    @property
    def website_data_path(self) -> Path:
        """Absolute directory the website JSON files are written to."""
        return self._resolve(self.website_data_dir)

    @property
    def website_source_data_path(self) -> Path:
        return self._resolve(self.website_source_data_dir)

    @property
    def docs_path(self) -> Path:
        return self._resolve(self.docs_dir)

    @property
    def marketplace_path(self) -> Path:
        return self._resolve(self.marketplace_file)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(**overrides: Any) -> Settings:
    """Rebuild settings from the environment, applying explicit overrides."""
    global _settings
    _settings = Settings(**overrides)
    return _settings
