from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from app.core.errors import MissingCredentialError

DEFAULT_THINKERS = [
    "Socrate",
    "Saint Augustin",
    "Épictète",
    "Friedrich Nietzsche",
    "Pierre Bourdieu",
    "Charles Péguy",
    "Eva Illouz",
    "Michel Foucault",
]


def _load_yaml_config() -> dict:
    root = Path(__file__).resolve().parents[2]  # project root
    cfg_path = root / "config.yaml"
    if not cfg_path.exists():
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _flatten_yaml(cfg: dict) -> dict:
    """Map the sectioned config.yaml onto flat settings field names."""
    llm = cfg.get("llm") or {}
    analysis = cfg.get("analysis") or {}
    server = cfg.get("server") or {}

    mapping = {
        "llm_provider": llm.get("provider"),
        "llm_model": llm.get("model"),
        "thinkers": analysis.get("thinkers"),
        "validate_records": analysis.get("validate_records"),
        "host": server.get("host"),
        "port": server.get("port"),
        "cors_origins": server.get("cors_origins"),
        "log_level": server.get("log_level"),
    }
    # only keys present in the file, so env vars still fill the rest
    return {k: v for k, v in mapping.items() if v is not None}


class YamlConfigSource(PydanticBaseSettingsSource):
    """config.yaml as the lowest-priority source, below env vars and .env."""

    def get_field_value(self, field, field_name):
        value = self._values().get(field_name)
        return value, field_name, False

    def _values(self) -> dict:
        if not hasattr(self, "_cache"):
            self._cache = _flatten_yaml(_load_yaml_config())
        return self._cache

    def __call__(self) -> dict:
        return dict(self._values())


class Settings(BaseSettings):
    # LLM
    llm_provider: str = "gemini"
    llm_model: str = "gemini-2.0-flash-exp"

    # Required at startup, optional at load time so tests can build Settings
    GEMINI_API_KEY: Optional[str] = None

    # Analysis
    thinkers: List[str] = list(DEFAULT_THINKERS)
    validate_records: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    environment: str = "development"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # keyword args > environment > .env > config.yaml > defaults
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSource(settings_cls),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def require_api_key(settings: Settings) -> str:
    key = (settings.GEMINI_API_KEY or "").strip()
    if not key:
        raise MissingCredentialError("GEMINI_API_KEY is missing. Add it to .env")
    return key
