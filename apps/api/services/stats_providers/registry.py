"""
Stats Provider Registry

Name-based registry gated by an allowlist. Registration of a provider whose
name is not allowlisted fails loudly; lookups of unknown, disabled or
non-allowlisted providers fail through validate_provider_usage().
"""

from typing import Dict, List, Optional, Type
import logging

from core.config import settings

from .base import StatsProvider

logger = logging.getLogger(__name__)


class StatsProviderError(ValueError):
    """A provider cannot be registered or used."""


class StatsProviderRegistry:
    """
    Registry for stats providers.

    Usage:
        @StatsProviderRegistry.register
        class ManualStatsProvider(StatsProvider):
            ...

        StatsProviderRegistry.validate_provider_usage("manual")
    """

    _providers: Dict[str, StatsProvider] = {}

    @classmethod
    def allowed_providers(cls) -> List[str]:
        return settings.allowed_stats_providers

    @classmethod
    def is_allowed(cls, name: str) -> bool:
        return name.lower() in cls.allowed_providers()

    @classmethod
    def register(cls, provider_class: Type[StatsProvider]) -> Type[StatsProvider]:
        """
        Register a provider class (usable as a decorator).

        Raises:
            StatsProviderError: the provider's name is not allowlisted.
        """
        instance = provider_class()
        name = instance.name.lower()

        if not cls.is_allowed(name):
            raise StatsProviderError(f"Provider '{name}' is not in the allowed providers list")

        if name in cls._providers:
            logger.warning(f"Overwriting existing stats provider: {name}")

        cls._providers[name] = instance
        logger.info(f"Registered stats provider: {name} ({instance.display_name})")
        return provider_class

    @classmethod
    def get_provider(cls, name: str) -> Optional[StatsProvider]:
        return cls._providers.get(name.lower())

    @classmethod
    def list_providers(cls) -> List[StatsProvider]:
        """Enabled providers only."""
        return [p for p in cls._providers.values() if p.enabled]

    @classmethod
    def validate_provider_usage(cls, name: str) -> StatsProvider:
        """
        Return the provider if it may be used.

        Raises:
            StatsProviderError: unknown, disabled, or no longer allowlisted.
        """
        provider = cls.get_provider(name)
        if provider is None:
            raise StatsProviderError(f"Provider '{name}' not found")
        if not provider.enabled:
            raise StatsProviderError(f"Provider '{name}' is not enabled")
        if not cls.is_allowed(provider.name):
            raise StatsProviderError(f"Provider '{name}' is not allowed")
        return provider

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._providers.pop(name.lower(), None)
