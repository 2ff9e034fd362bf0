"""
Stats Providers

Pluggable sources for athlete stats. A provider may only be registered or
used when its name is on the configured allowlist (STATS_PROVIDERS_ALLOWED).

Only the manual provider exists today: stats are typed in by the athlete,
so it never fetches anything.
"""

from .base import StatsProvider, StatSourceType, ProviderStat
from .registry import StatsProviderRegistry, StatsProviderError
from .manual import ManualStatsProvider

__all__ = [
    "StatsProvider",
    "StatSourceType",
    "ProviderStat",
    "StatsProviderRegistry",
    "StatsProviderError",
    "ManualStatsProvider",
]
