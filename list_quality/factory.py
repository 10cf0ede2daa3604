"""Factory helpers for wiring engine components from configuration."""
from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

from .analysis import ListAnalyzer
from .avatar import AvatarExtractor
from .cleaner import Cleaner
from .config import EngineSettings, StoreSettings, load_configuration
from .errors import ConfigurationError
from .orchestrator import VerificationOrchestrator
from .stores.base import LeadStore, SessionStore
from .webhook import ScoringWebhookClient


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid store class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Module '{module_name}' could not be imported: {exc}") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def _build_store(settings: StoreSettings) -> Any:
    store_cls = _load_class(settings.class_path)
    try:
        return store_cls(**settings.options)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid options for '{settings.class_path}': {exc}") from exc


def build_lead_store(settings: EngineSettings) -> LeadStore:
    return _build_store(settings.lead_store)


def build_session_store(settings: EngineSettings) -> SessionStore:
    return _build_store(settings.session_store)


def build_webhook(settings: EngineSettings) -> ScoringWebhookClient:
    return ScoringWebhookClient(
        settings.webhook_url,
        timeout=settings.webhook_timeout,
        headers=settings.webhook_headers,
    )


@dataclass
class EngineComponents:
    """The four entry points of the engine sharing one set of stores."""

    analyzer: ListAnalyzer
    cleaner: Cleaner
    extractor: AvatarExtractor
    orchestrator: VerificationOrchestrator


def build_components(config: Union[Mapping[str, Any], EngineSettings, str, Path]) -> EngineComponents:
    """Instantiate stores and components from a config mapping, settings, or file path."""

    if isinstance(config, (str, Path)):
        config = load_configuration(config)
    settings = config if isinstance(config, EngineSettings) else EngineSettings.from_mapping(config)

    lead_store = build_lead_store(settings)
    session_store = build_session_store(settings)
    return EngineComponents(
        analyzer=ListAnalyzer(lead_store),
        cleaner=Cleaner(lead_store),
        extractor=AvatarExtractor(),
        orchestrator=VerificationOrchestrator(
            lead_store,
            session_store,
            build_webhook(settings),
            owner_id=settings.owner_id,
            batch_size=settings.batch_size,
        ),
    )


__all__ = [
    "EngineComponents",
    "build_components",
    "build_lead_store",
    "build_session_store",
    "build_webhook",
]
