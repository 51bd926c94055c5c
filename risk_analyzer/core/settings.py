from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


def _load_yaml_config() -> dict:
    root = Path(__file__).resolve().parents[2]  # project root
    cfg_path = root / "config.yaml"
    if not cfg_path.exists():
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _yaml_overrides(cfg: dict) -> dict:
    """Flatten the llm/analysis/server sections of config.yaml into field names."""
    llm = cfg.get("llm") or {}
    analysis = cfg.get("analysis") or {}
    server = cfg.get("server") or {}

    mapping = {
        "llm_provider": llm.get("provider"),
        "llm_model": llm.get("model"),
        "llm_temperature": llm.get("temperature"),
        "llm_max_tokens": llm.get("max_tokens"),
        "llm_timeout_seconds": llm.get("timeout_seconds"),
        "min_description_words": analysis.get("min_description_words"),
        "legacy_error_status": analysis.get("legacy_error_status"),
        "host": server.get("host"),
        "port": server.get("port"),
        "log_level": server.get("log_level"),
    }
    return {k: v for k, v in mapping.items() if v is not None}


class YamlConfigSource(PydanticBaseSettingsSource):
    """config.yaml values, consulted after the environment and .env."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return _yaml_overrides(_load_yaml_config())


class Settings(BaseSettings):
    # LLM
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 900
    llm_timeout_seconds: Optional[float] = None

    # API keys (optional, a request may carry its own)
    OPENAI_API_KEY: Optional[str] = None
    GEMINI_API_KEY: Optional[str] = None

    # Analysis
    min_description_words: int = 500
    legacy_error_status: bool = False  # report every failure as 500

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

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
        # keyword arguments > environment > .env > config.yaml > defaults
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSource(settings_cls),
            file_secret_settings,
        )

    def default_api_key(self) -> Optional[str]:
        provider = (self.llm_provider or "").lower().strip()
        if provider == "gemini":
            return self.GEMINI_API_KEY
        return self.OPENAI_API_KEY
