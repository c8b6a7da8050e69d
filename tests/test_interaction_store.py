"""Tests for feedrank.interaction_store.InteractionStore."""

from __future__ import annotations

import threading

import pytest

from conftest import NOW, make_interaction
from feedrank.interaction_store import DEFAULT_CATEGORY, InteractionStore
from feedrank.models import InteractionFlags, InteractionType


class TestInitializeInteraction:
    def test_creates_empty_record(self) -> None:
        store = InteractionStore()
        record = store.initialize_interaction("u1", "v1", "music", timestamp=NOW)
        assert record.user_id == "u1"
        assert record.video_id == "v1"
        assert record.category == "music"
        assert record.watch_percentage == 0.0
        assert record.interactions == InteractionFlags()
        assert record.timestamp == "2024-06-01T12:00:00.000Z"

    def test_existing_record_is_returned_unchanged(self) -> None:
        store = InteractionStore()
        first = store.initialize_interaction("u1", "v1", "music")
        store.update_watch_percentage("u1", "v1", 40)
        again = store.initialize_interaction("u1", "v1", "gaming")
        assert again is first
        assert again.category == "music"
        assert again.watch_percentage == 40.0

    def test_empty_category_falls_back(self) -> None:
        store = InteractionStore()
        assert store.initialize_interaction("u1", "v1", "").category == DEFAULT_CATEGORY

    @pytest.mark.parametrize("user_id,video_id", [("", "v1"), ("u1", "")])
    def test_empty_ids_raise(self, user_id: str, video_id: str) -> None:
        with pytest.raises(ValueError):
            InteractionStore().initialize_interaction(user_id, video_id, "music")


class TestUpdateWatchPercentage:
    def test_multiple_of_step_is_written(self) -> None:
        store = InteractionStore()
        store.initialize_interaction("u1", "v1", "music")
        assert store.update_watch_percentage("u1", "v1", 35, timestamp=NOW) is True
        record = store.get_interaction("u1", "v1")
        assert record.watch_percentage == 35.0
        assert record.last_updated == "2024-06-01T12:00:00.000Z"

    def test_value_is_rounded_first(self) -> None:
        store = InteractionStore()
        store.initialize_interaction("u1", "v1", "music")
        assert store.update_watch_percentage("u1", "v1", 49.6) is True
        assert store.get_interaction("u1", "v1").watch_percentage == 50.0

    def test_off_step_value_is_throttled(self) -> None:
        store = InteractionStore()
        store.initialize_interaction("u1", "v1", "music")
        store.update_watch_percentage("u1", "v1", 40)
        assert store.update_watch_percentage("u1", "v1", 42) is False
        assert store.get_interaction("u1", "v1").watch_percentage == 40.0

    def test_custom_step(self) -> None:
        store = InteractionStore(watch_step=10)
        assert store.update_watch_percentage("u1", "v1", 25) is False
        assert store.update_watch_percentage("u1", "v1", 30) is True

    def test_missing_record_is_created_uncategorized(self) -> None:
        store = InteractionStore()
        store.update_watch_percentage("u1", "v9", 10)
        record = store.get_interaction("u1", "v9")
        assert record.category == DEFAULT_CATEGORY
        assert record.watch_percentage == 10.0

    def test_clamped_to_100(self) -> None:
        store = InteractionStore()
        store.update_watch_percentage("u1", "v1", 130)
        assert store.get_interaction("u1", "v1").watch_percentage == 100.0

    def test_invalid_step_raises(self) -> None:
        with pytest.raises(ValueError):
            InteractionStore(watch_step=0)


class TestUpdateInteraction:
    def test_sets_single_flag(self) -> None:
        store = InteractionStore()
        store.initialize_interaction("u1", "v1", "music")
        record = store.update_interaction("u1", "v1", InteractionType.LIKED, True)
        assert record.interactions == InteractionFlags(liked=True)

    def test_accepts_flag_name(self) -> None:
        store = InteractionStore()
        record = store.update_interaction("u1", "v1", "shared", True)
        assert record.interactions.shared is True

    def test_flag_can_be_cleared(self) -> None:
        store = InteractionStore()
        store.update_interaction("u1", "v1", InteractionType.COMMENTED, True)
        record = store.update_interaction("u1", "v1", InteractionType.COMMENTED, False)
        assert record.interactions.commented is False

    def test_unknown_flag_raises(self) -> None:
        with pytest.raises(ValueError):
            InteractionStore().update_interaction("u1", "v1", "bookmarked", True)

    def test_updates_in_place(self) -> None:
        store = InteractionStore()
        store.initialize_interaction("u1", "v1", "music")
        store.update_interaction("u1", "v1", InteractionType.LIKED, True)
        store.update_watch_percentage("u1", "v1", 80)
        assert len(store.get_all_interactions()) == 1


class TestQueries:
    def test_get_user_interactions_filters_by_user(self) -> None:
        store = InteractionStore()
        store.load(
            [
                make_interaction("v1", "music", user_id="alice"),
                make_interaction("v2", "music", user_id="alice"),
                make_interaction("v1", "music", user_id="bob"),
            ]
        )
        assert {r.video_id for r in store.get_user_interactions("alice")} == {"v1", "v2"}
        assert len(store.get_user_interactions("bob")) == 1
        assert store.get_user_interactions("nobody") == []
        assert store.get_user_ids() == ["alice", "bob"]

    def test_load_replaces_same_key(self) -> None:
        store = InteractionStore()
        store.load([make_interaction("v1", "music", watch=10)])
        store.load([make_interaction("v1", "music", watch=90)])
        assert store.get_interaction("u1", "v1").watch_percentage == 90.0

    def test_ids_containing_underscores_do_not_collide(self) -> None:
        store = InteractionStore()
        store.initialize_interaction("a_b", "c", "music", timestamp=NOW)
        store.initialize_interaction("a", "b_c", "gaming", timestamp=NOW)
        assert len(store.get_all_interactions()) == 2
        assert [r.video_id for r in store.get_user_interactions("a")] == ["b_c"]
        assert store.get_interaction("a_b", "c").category == "music"


class TestThreadSafety:
    def test_concurrent_initialization_creates_one_record(self) -> None:
        store = InteractionStore()

        def worker() -> None:
            for _ in range(50):
                store.initialize_interaction("u1", "v1", "music")
                store.update_interaction("u1", "v1", InteractionType.LIKED, True)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.get_all_interactions()) == 1
        assert store.get_interaction("u1", "v1").interactions.liked is True
