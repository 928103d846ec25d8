"""Application configuration (Pydantic v2). Load from landmark_lens.yml with optional env override."""

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, field_validator


DEFAULT_CONFIG_ENV_VAR = "LANDMARK_LENS_CONFIG"
DEFAULT_CONFIG_FILENAME = "landmark_lens.yml"

DEFAULT_WIKIPEDIA_ENDPOINT = "https://en.wikipedia.org/api/rest_v1/page/summary"
DEFAULT_WIKIDATA_ENDPOINT = "https://www.wikidata.org/w/api.php"
DEFAULT_USER_AGENT = "landmark-lens/0.1 (image landmark enrichment)"

# Environment variable -> Settings field, applied only when loading the default config.
ENV_OVERRIDES = {
    "AZURE_VISION_ENDPOINT": "azure_vision_endpoint",
    "AZURE_VISION_KEY": "azure_vision_key",
    "LANDMARK_LENS_VISION_PROVIDER": "vision_provider",
}


class Settings(BaseModel):
    """
    Service config loaded from YAML.

    When the default config is loaded, AZURE_VISION_ENDPOINT, AZURE_VISION_KEY and
    LANDMARK_LENS_VISION_PROVIDER override the YAML values (but not when an explicit
    config_path is provided).
    """

    model_config = {"extra": "ignore"}

    vision_provider: str = "azure"
    azure_vision_endpoint: str = ""
    azure_vision_key: str = ""
    azure_vision_api_version: str = "v3.2"
    # Only captions, tags and objects are surfaced; add Categories/Faces/Color/ImageType to request more.
    vision_features: list[str] = ["Description", "Tags", "Objects"]
    vision_timeout_seconds: float = 30.0
    search_timeout_seconds: float = 10.0
    enrichment_budget_seconds: float = 20.0
    wikipedia_endpoint: str = DEFAULT_WIKIPEDIA_ENDPOINT
    wikidata_endpoint: str = DEFAULT_WIKIDATA_ENDPOINT
    search_language: str = "en"
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"
    forensics_dir: str = "logs/forensics"
    forensic_dump_on_provider_error: bool = False

    @field_validator("vision_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> str:
        return str(v or "azure").strip().lower()

    @field_validator("azure_vision_endpoint", "wikipedia_endpoint", "wikidata_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator(
        "vision_timeout_seconds",
        "search_timeout_seconds",
        "enrichment_budget_seconds",
    )
    @classmethod
    def positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v


_config: Settings | None = None


class ConfigLoader:
    """
    Helper responsible for loading Settings from YAML and environment.

    - load_from_yaml(path, apply_env_override): read a YAML file and optionally apply env overrides.
    - load_default(): resolve the default config path from LANDMARK_LENS_CONFIG / landmark_lens.yml
      and apply the ENV_OVERRIDES variables when present.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _env_overrides(self) -> dict[str, str]:
        return {field: self._env[var] for var, field in ENV_OVERRIDES.items() if self._env.get(var)}

    def load_from_yaml(self, path: Path, apply_env_override: bool) -> Settings:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        if not data:
            data = {}
        if apply_env_override:
            data.update(self._env_overrides())
        return Settings.model_validate(data)

    def load_default(self) -> Settings:
        """
        Load the default Settings, using LANDMARK_LENS_CONFIG or landmark_lens.yml.

        Credentials normally come from the environment, so env overrides win over the YAML
        file here; a missing file just means defaults plus env.
        """
        path_str = self._env.get(DEFAULT_CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILENAME
        path = Path(path_str)
        if path.exists():
            return self.load_from_yaml(path, apply_env_override=True)
        return Settings.model_validate(self._env_overrides())


_loader = ConfigLoader()


def get_config(config_path: str | Path | None = None) -> Settings:
    """
    Return singleton config.

    - If config_path is given, load from it (without env overrides) and update the cache.
    - Otherwise, return the cached config if available, or load via ConfigLoader.load_default().
    """
    global _config
    if config_path is not None:
        _config = _loader.load_from_yaml(Path(config_path), apply_env_override=False)
        return _config
    if _config is not None:
        return _config
    _config = _loader.load_default()
    return _config


def reset_config() -> None:
    """Clear cached config (for tests)."""
    global _config
    _config = None
