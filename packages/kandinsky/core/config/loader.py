"""Settings loading from JSON/YAML files and the environment."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from kandinsky.core.config.models import KandinskySettings

logger = logging.getLogger(__name__)

ENV_API_KEY = "KAND_API_KEY"
ENV_API_SECRET = "KAND_API_SECRET"
ENV_BASE_URL = "KAND_API_URL"

_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def detect_format(file_path: Path | str) -> str:
    """Return "json" or "yaml" from the file extension.

    Raises:
        ValueError: If the extension is not .json, .yaml or .yml
    """
    suffix = Path(file_path).suffix.lower()
    try:
        return _FORMATS[suffix]
    except KeyError:
        raise ValueError(f"Unsupported config format: {suffix}") from None


def load_config(path: str | Path) -> dict[str, Any]:
    """Read a settings file into a plain mapping.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the format is unsupported or the content is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)
    text = path.read_text(encoding="utf-8")
    try:
        content = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Invalid {fmt.upper()} in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config root in {path} must be a mapping")
    return content


def load_settings(path: str | Path | None = None) -> KandinskySettings:
    """Load and validate client settings.

    A missing file means defaults. Credentials left empty are then filled from
    KAND_API_KEY / KAND_API_SECRET, and KAND_API_URL replaces the base URL
    unless the file sets one.

    Args:
        path: Settings file; kandinsky.yaml in the working directory if None

    Raises:
        ValidationError: If settings are invalid
        ValueError: If the file cannot be parsed
    """
    path = Path(path) if path is not None else KandinskySettings.default_path()

    if path.exists():
        settings = KandinskySettings.model_validate(load_config(path))
        logger.debug("Loaded settings from %s", path)
    else:
        logger.debug("No settings file at %s, using defaults", path)
        settings = KandinskySettings()

    return _load_env_vars_into_settings(settings)


def _load_env_vars_into_settings(settings: KandinskySettings) -> KandinskySettings:
    updates: dict[str, Any] = {}
    if not settings.api_key and os.getenv(ENV_API_KEY):
        updates["api_key"] = os.environ[ENV_API_KEY]
    if not settings.api_secret and os.getenv(ENV_API_SECRET):
        updates["api_secret"] = os.environ[ENV_API_SECRET]
    if os.getenv(ENV_BASE_URL) and "base_url" not in settings.model_fields_set:
        updates["base_url"] = os.environ[ENV_BASE_URL]
    return settings.model_copy(update=updates) if updates else settings
