"""
Tests for the result store

Tests for storyframe_storage/store.py
"""

import pytest

from storyframe_core_schemas import GenerationResult, GenerationStatus, NotFoundError
from storyframe_storage import ResultStore


def make_results(count: int) -> list[GenerationResult]:
    return [
        GenerationResult(prompt=f"prompt {i}", scene_label=f"Scene {i}")
        for i in range(1, count + 1)
    ]


class TestResultStore:
    """Tests for ResultStore."""

    def test_replace_all_publishes_snapshot(self, store):
        snapshots = []
        store.subscribe(snapshots.append)

        results = make_results(2)
        store.replace_all(results)

        assert len(snapshots) == 1
        assert snapshots[0] == tuple(results)
        assert all(r.status is GenerationStatus.PENDING for r in store)

    def test_update_leaves_old_snapshot_untouched(self, store):
        store.replace_all(make_results(3))
        before = store.results
        target = before[1]

        store.set_status(target.id, GenerationStatus.SUCCEEDED, b"img")

        assert before[1].status is GenerationStatus.PENDING
        assert store.results is not before
        assert store.results[1].payload == b"img"
        assert store.results[0] is before[0]
        assert store.results[2] is before[2]

    def test_failed_status_drops_payload(self, store):
        store.replace_all(make_results(1))
        result_id = store.results[0].id

        store.set_status(result_id, GenerationStatus.SUCCEEDED, b"img")
        store.set_status(result_id, GenerationStatus.FAILED, b"ignored")

        assert store.get(result_id).payload is None

    def test_get_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.get("missing")

    def test_mark_many_is_single_publish(self, store):
        store.replace_all(make_results(3))
        ids = [r.id for r in store.results[1:]]
        snapshots = []
        store.subscribe(snapshots.append)

        store.mark_many(ids, GenerationStatus.CANCELLED)

        assert len(snapshots) == 1
        assert [r.status for r in store] == [
            GenerationStatus.PENDING,
            GenerationStatus.CANCELLED,
            GenerationStatus.CANCELLED,
        ]

    def test_append_and_update(self, store):
        result = store.append(make_results(1)[0])

        store.update(result.id, prompt="edited")

        assert len(store) == 1
        assert store.get(result.id).prompt == "edited"

    def test_unsubscribe(self, store):
        snapshots = []
        unsubscribe = store.subscribe(snapshots.append)
        unsubscribe()

        store.replace_all(make_results(1))

        assert snapshots == []

    def test_initial_results(self):
        results = make_results(2)

        assert ResultStore(results).results == tuple(results)
