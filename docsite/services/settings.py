"""Settings loading: environment variables plus an optional ``docsite.json``."""

import json
import logging
import os
from typing import Any, Dict, Optional

from docsite.models.settings import SiteSettings

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "docsite.json"

_TRUTHY = {"1", "true", "yes", "on"}


def discover_config(source_dir: str) -> Optional[str]:
    """Return the path of ``docsite.json`` in *source_dir*, if there is one."""
    candidate = os.path.join(source_dir, CONFIG_FILENAME)
    return candidate if os.path.isfile(candidate) else None


def _read_config(path: str) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"failed to parse config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a JSON object")
    return data


def load_settings(source_dir: Optional[str] = None, config_path: Optional[str] = None) -> SiteSettings:
    """Build :class:`SiteSettings` for *source_dir*.

    Precedence, lowest first: model defaults, the config file (explicit
    *config_path* / ``DOCSITE_CONFIG``, else ``docsite.json`` discovered in
    the source directory), then ``DOCSITE_ALLOW_BROKEN_LINKS``.

    Raises:
        ValueError: if an explicit config file is missing or any file or
            value is invalid.
    """
    source_dir = source_dir or os.environ.get("DOCSITE_SOURCE_DIR", ".")
    config_path = config_path or os.environ.get("DOCSITE_CONFIG")

    if config_path:
        if not os.path.isfile(config_path):
            raise ValueError(f"config file not found: {config_path}")
    else:
        config_path = discover_config(source_dir)

    values: Dict[str, Any] = {}
    if config_path:
        logger.debug("Loading settings from %s", config_path)
        values.update(_read_config(config_path))

    allow = os.environ.get("DOCSITE_ALLOW_BROKEN_LINKS")
    if allow is not None:
        values["allowBrokenLinks"] = allow.strip().lower() in _TRUTHY

    values["source_dir"] = source_dir
    return SiteSettings.model_validate(values)


def get_settings() -> SiteSettings:
    """FastAPI dependency; tests override it with fixed settings."""
    return load_settings()
