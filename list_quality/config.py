"""Configuration helpers for the list quality engine."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError
from .webhook import DEFAULT_TIMEOUT_SECONDS

LOGGER = logging.getLogger(__name__)

_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


@dataclass
class StoreSettings:
    """Dotted class path and constructor options for a store."""

    class_path: str
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, section: str, data: Optional[Mapping[str, Any]]) -> "StoreSettings":
        if not data:
            raise ConfigurationError(f"Configuration is missing the '{section}' section")
        class_path = data.get("class")
        if not class_path:
            raise ConfigurationError(f"Store configuration '{section}' missing required 'class' field")
        return cls(class_path=str(class_path), options=dict(data.get("options") or {}))


@dataclass
class EngineSettings:
    """Typed view over a loaded configuration document."""

    owner_id: str
    lead_store: StoreSettings
    session_store: StoreSettings
    webhook_url: str
    webhook_timeout: float = DEFAULT_TIMEOUT_SECONDS
    webhook_headers: Dict[str, str] = field(default_factory=dict)
    batch_size: int = 500

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "EngineSettings":
        owner_id = config.get("owner_id")
        if not owner_id:
            raise ConfigurationError("Configuration missing required 'owner_id'")

        webhook = config.get("webhook") or {}
        url = webhook.get("url")
        if not url:
            raise ConfigurationError("Configuration missing required 'webhook.url'")

        verification = config.get("verification") or {}
        settings = cls(
            owner_id=str(owner_id),
            lead_store=StoreSettings.from_mapping("lead_store", config.get("lead_store")),
            session_store=StoreSettings.from_mapping("session_store", config.get("session_store")),
            webhook_url=str(url),
            webhook_timeout=float(webhook.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
            webhook_headers={str(k): str(v) for k, v in (webhook.get("headers") or {}).items()},
            batch_size=int(verification.get("batch_size", 500)),
        )
        LOGGER.debug("Loaded settings for owner %s with webhook %s", settings.owner_id, settings.webhook_url)
        return settings
