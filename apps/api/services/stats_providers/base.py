"""
Base class for stats providers.

A provider knows how to produce stat lines for an athlete from one source
(manual entry today; league or timing feeds later).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class StatSourceType(str, Enum):
    """Where a provider's numbers come from."""
    MANUAL = "manual"
    FEED = "feed"        # pulled from an external system
    UPLOAD = "upload"    # parsed from an uploaded document


@dataclass
class ProviderStat:
    """One stat line as returned by a provider."""
    season: str
    stat_key: str
    stat_value: str
    source_url: Optional[str] = None


class StatsProvider(ABC):
    """
    Interface every stats provider implements.

    Providers are registered by name with StatsProviderRegistry, which
    gates them on the configured allowlist.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique lowercase identifier, e.g. 'manual'."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        pass

    @property
    @abstractmethod
    def source_type(self) -> StatSourceType:
        pass

    @property
    def enabled(self) -> bool:
        """Disabled providers stay registered but cannot be used."""
        return True

    @abstractmethod
    def fetch_stats(self, athlete_id: str) -> List[ProviderStat]:
        """Return the provider's stats for an athlete."""
        pass

    def describe(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "source_type": self.source_type.value,
            "enabled": self.enabled,
        }
