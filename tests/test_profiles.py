"""Tests for feedrank.profiles.ProfileService."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import NOW, make_interaction
from feedrank.interaction_store import InteractionStore
from feedrank.models import CompletionPolicy, InteractionType
from feedrank.profiles import ProfileService


def _make_service(*interactions, **kwargs) -> ProfileService:
    store = InteractionStore()
    store.load(interactions)
    return ProfileService(store, **kwargs)


class TestGetProfile:
    def test_aggregates_on_first_use(self) -> None:
        service = _make_service(
            make_interaction("v1", "music", watch=100, user_id="alice"),
            make_interaction("v2", "gaming", watch=50, user_id="alice"),
            make_interaction("v3", "music", watch=100, user_id="bob"),
        )
        profile = service.get_profile("alice")
        assert profile.user_id == "alice"
        assert set(profile.category_preferences) == {"music", "gaming"}
        assert profile.total_watch_time == pytest.approx(450.0)

    def test_second_call_served_from_cache(self) -> None:
        service = _make_service(make_interaction("v1", "music"))
        first = service.get_profile("u1")
        with patch("feedrank.profiles.aggregate_with_report") as mock_aggregate:
            second = service.get_profile("u1")
        mock_aggregate.assert_not_called()
        assert second is first

    def test_unknown_user_gets_empty_profile(self) -> None:
        profile = _make_service().get_profile("ghost")
        assert profile.user_id == "ghost"
        assert profile.category_preferences == {}
        assert profile.total_watch_time == 0

    def test_empty_user_id_raises(self) -> None:
        with pytest.raises(ValueError):
            _make_service().get_profile("")

    def test_policy_and_duration_are_applied(self) -> None:
        service = _make_service(
            make_interaction("v1", "music", watch=100, timestamp="2024-05-01T10:00:00Z"),
            make_interaction("v2", "music", watch=50, timestamp="2024-05-02T10:00:00Z"),
            make_interaction("v3", "music", watch=30, timestamp="2024-05-03T10:00:00Z"),
            policy=CompletionPolicy.PAIRWISE,
            duration_seconds=100,
        )
        music = service.get_profile("u1").category_preferences["music"]
        assert music.completion_rate == pytest.approx(52.5)
        assert music.watch_time == pytest.approx(180.0)


class TestRefresh:
    def test_refresh_picks_up_new_interactions(self) -> None:
        store = InteractionStore()
        service = ProfileService(store)
        assert service.get_profile("u1").category_preferences == {}

        store.initialize_interaction("u1", "v1", "music")
        store.update_watch_percentage("u1", "v1", 60)
        store.update_interaction("u1", "v1", InteractionType.LIKED, True)

        assert service.get_profile("u1").category_preferences == {}
        refreshed = service.refresh_profile("u1", now=NOW)
        assert refreshed.category_preferences["music"].interactions.likes == 1
        assert service.get_profile("u1") is refreshed

    def test_refresh_replaces_profile_wholesale(self) -> None:
        service = _make_service(make_interaction("v1", "music"))
        first = service.get_profile("u1")
        second = service.refresh_profile("u1")
        assert second is not first
        assert second.category_preferences["music"] is not first.category_preferences["music"]

    def test_malformed_records_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        service = _make_service(make_interaction("v1", "music", timestamp="??"))
        with caplog.at_level("WARNING"):
            service.get_profile("u1")
        assert any("skipped" in r.message for r in caplog.records)

