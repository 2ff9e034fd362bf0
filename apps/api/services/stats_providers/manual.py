"""Manual entry provider: stats are typed in by the athlete, nothing to fetch."""

from typing import List

from .base import ProviderStat, StatsProvider, StatSourceType
from .registry import StatsProviderRegistry


@StatsProviderRegistry.register
class ManualStatsProvider(StatsProvider):

    @property
    def name(self) -> str:
        return "manual"

    @property
    def display_name(self) -> str:
        return "Manual entry"

    @property
    def source_type(self) -> StatSourceType:
        return StatSourceType.MANUAL

    def fetch_stats(self, athlete_id: str) -> List[ProviderStat]:
        return []
