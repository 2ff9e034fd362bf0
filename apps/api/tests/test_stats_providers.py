"""
Tests for the stats provider registry and its allowlist.
"""
from typing import List

import pytest

from core.config import settings
from services.stats_providers import (
    ManualStatsProvider,
    ProviderStat,
    StatsProvider,
    StatsProviderError,
    StatsProviderRegistry,
    StatSourceType,
)


class _FeedProvider(StatsProvider):

    @property
    def name(self) -> str:
        return "leaguefeed"

    @property
    def display_name(self) -> str:
        return "League Feed"

    @property
    def source_type(self) -> StatSourceType:
        return StatSourceType.FEED

    def fetch_stats(self, athlete_id: str) -> List[ProviderStat]:
        return [ProviderStat(season="2024", stat_key="PPG", stat_value="20")]


class _DisabledFeedProvider(_FeedProvider):

    @property
    def enabled(self) -> bool:
        return False


@pytest.fixture
def allow_feed(monkeypatch):
    monkeypatch.setattr(settings, "STATS_PROVIDERS_ALLOWED", "manual,LeagueFeed")
    yield
    StatsProviderRegistry.unregister("leaguefeed")


class TestRegistry:

    def test_manual_provider_registered_by_default(self):
        provider = StatsProviderRegistry.validate_provider_usage("manual")
        assert isinstance(provider, ManualStatsProvider)
        assert provider.fetch_stats("anyone") == []
        assert provider.describe() == {
            "name": "manual",
            "display_name": "Manual entry",
            "source_type": "manual",
            "enabled": True,
        }

    def test_lookup_is_case_insensitive(self):
        assert StatsProviderRegistry.get_provider("MANUAL") is not None

    def test_registering_non_allowlisted_provider_raises(self):
        with pytest.raises(StatsProviderError, match="not in the allowed providers list"):
            StatsProviderRegistry.register(_FeedProvider)
        assert StatsProviderRegistry.get_provider("leaguefeed") is None

    def test_allowlisted_provider_registers(self, allow_feed):
        StatsProviderRegistry.register(_FeedProvider)
        assert StatsProviderRegistry.validate_provider_usage("leaguefeed").display_name == "League Feed"

    def test_unknown_provider_not_found(self):
        with pytest.raises(StatsProviderError, match="not found"):
            StatsProviderRegistry.validate_provider_usage("nope")

    def test_disabled_provider_rejected_and_unlisted(self, allow_feed):
        StatsProviderRegistry.register(_DisabledFeedProvider)
        with pytest.raises(StatsProviderError, match="not enabled"):
            StatsProviderRegistry.validate_provider_usage("leaguefeed")
        assert "leaguefeed" not in [p.name for p in StatsProviderRegistry.list_providers()]

    def test_provider_removed_from_allowlist_is_rejected(self, allow_feed, monkeypatch):
        StatsProviderRegistry.register(_FeedProvider)
        monkeypatch.setattr(settings, "STATS_PROVIDERS_ALLOWED", "manual")
        with pytest.raises(StatsProviderError, match="not allowed"):
            StatsProviderRegistry.validate_provider_usage("leaguefeed")


class TestStatsProvidersEndpoint:

    def test_lists_enabled_providers(self, client, athlete, auth_headers):
        resp = client.get("/v1/stats-providers", headers=auth_headers(athlete))
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json()] == ["manual"]
