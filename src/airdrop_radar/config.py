"""Configuration management."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
import yaml

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "meta-llama/llama-3.1-8b-instruct:free"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

# Default location of the optional browser overrides file
DEFAULT_SCRAPER_CONFIG = Path(__file__).parent.parent.parent / "data" / "scraper.yaml"


@dataclass
class Config:
    # OpenRouter (OpenAI-compatible inference service)
    openrouter_api_key: str | None
    openrouter_model: str
    openrouter_base_url: str

    # Supabase (optional persistence)
    supabase_url: str | None
    supabase_key: str | None

    # Web dashboard
    auth_password: str | None
    secret_key: str | None

    # Browser
    chrome_bin: str | None
    scraper_config: str | None

    # App
    log_level: str
    environment: str

    @property
    def storage_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _optional(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    return Config(
        openrouter_api_key=_optional("OPENROUTER_API_KEY"),
        openrouter_model=os.environ.get("OPENROUTER_MODEL", DEFAULT_MODEL),
        openrouter_base_url=os.environ.get("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
        supabase_url=_optional("SUPABASE_URL"),
        supabase_key=_optional("SUPABASE_SERVICE_KEY"),
        auth_password=_optional("AUTH_PASSWORD"),
        secret_key=_optional("SECRET_KEY"),
        chrome_bin=_optional("CHROME_BIN") or _optional("GOOGLE_CHROME_BIN"),
        scraper_config=_optional("SCRAPER_CONFIG"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        environment=os.environ.get("ENVIRONMENT", "development"),
    )


def load_browser_overrides(path: str | Path | None = None) -> dict:
    """Load browser option overrides from YAML.

    Returns an empty mapping when the file does not exist. The file holds a
    flat mapping (or a mapping under a top-level ``browser`` key).
    """
    config_path = Path(path) if path else DEFAULT_SCRAPER_CONFIG
    if not config_path.exists():
        logger.debug(f"No scraper config at {config_path}")
        return {}

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Scraper config {config_path} must contain a mapping")

    return data.get("browser", data)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config():
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None
