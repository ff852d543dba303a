"""Dependency container wiring for the cache."""

import logging
from dataclasses import dataclass

from forge_cache.adapters.forge_client import ForgeClient
from forge_cache.app_logging import configure_logging
from forge_cache.config import Settings
from forge_cache.services.cache import InMemoryCache
from forge_cache.services.forge import ForgeService


@dataclass
class AppContainer:
    """Holds the cache and the services that share it."""

    settings: Settings
    cache: InMemoryCache
    forge_service: ForgeService


def build_container(
    forge_client: ForgeClient, settings: Settings | None = None
) -> AppContainer:
    """Create the default dependency container around a forge client."""
    resolved_settings = settings or Settings()
    configure_logging(logging.DEBUG if resolved_settings.debug else logging.INFO)
    cache = InMemoryCache(default_ttl_minutes=resolved_settings.cache_ttl_minutes)
    forge_service = ForgeService(
        client=forge_client,
        cache=cache,
        debug=resolved_settings.debug,
    )
    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        forge_service=forge_service,
    )
