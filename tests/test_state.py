"""Tests for dendro_overlap/api/state.py - load sequencing and threshold changes."""
from __future__ import annotations

import pytest

from dendro_overlap.api.state import ViewState
from dendro_overlap.data.sample import sample_dataset
from dendro_overlap.errors import LoadError


@pytest.mark.unit
class TestLoads:
    def test_commit_uses_default_threshold(self):
        state = ViewState()
        assert state.commit_load(state.begin_load(), sample_dataset())

        snapshot = state.snapshot
        assert snapshot.threshold == pytest.approx(0.34)
        # Merges at 0.15, 0.22, 0.18, 0.25 are under the cut; 0.35 is not
        assert snapshot.cluster_count == 4
        assert snapshot.stats.num_clusters == 4
        assert snapshot.leaf_clusters == {0: 0, 1: 0, 2: 1, 3: 1, 4: 2, 5: 2, 6: 3, 7: 3}

    def test_stale_load_is_discarded(self):
        state = ViewState()
        older = state.begin_load()
        newer = state.begin_load()
        newest_dataset = sample_dataset()

        assert state.commit_load(newer, newest_dataset)
        assert not state.commit_load(older, sample_dataset())
        assert state.dataset is newest_dataset

    def test_stale_failure_is_ignored(self):
        state = ViewState()
        older = state.begin_load()
        newer = state.begin_load()
        state.commit_load(newer, sample_dataset())

        assert not state.fail_load(older, "late failure")
        assert state.load_error is None
        assert state.dataset is not None

    def test_failure_clears_dataset(self):
        state = ViewState()
        state.commit_load(state.begin_load(), sample_dataset())
        assert state.fail_load(state.begin_load(), "tree unreachable")

        assert state.dataset is None
        assert state.snapshot is None
        assert state.load_error == "tree unreachable"

    def test_load_with_records_and_reraises(self):
        state = ViewState()

        def broken():
            raise LoadError("tree unreachable", source="tree.json")

        with pytest.raises(LoadError):
            state.load_with(broken)
        assert state.load_error == "tree unreachable"

    def test_load_with_commits(self):
        state = ViewState()
        assert state.load_with(sample_dataset)
        assert state.dataset is not None


@pytest.mark.unit
class TestThreshold:
    def test_requires_dataset(self):
        with pytest.raises(RuntimeError):
            ViewState().set_threshold(0.5)

    def test_reuses_tree(self):
        state = ViewState()
        state.commit_load(state.begin_load(), sample_dataset())
        root_before = state.dataset.dendrogram.root

        snapshot = state.set_threshold(0.68)
        assert snapshot.cluster_count == 1
        assert state.dataset.dendrogram.root is root_before

        snapshot = state.set_threshold(0.0)
        assert snapshot.cluster_count == 8
        assert len(snapshot.groups) == 8
        assert all(group.locked for group in snapshot.groups)

    def test_read_holds_consistent_pair(self):
        state = ViewState()
        state.commit_load(state.begin_load(), sample_dataset())
        with state.read() as (dataset, snapshot):
            assert dataset is state.dataset
            assert snapshot.threshold == pytest.approx(0.34)

    def test_preview_leaves_committed_cut_in_place(self):
        state = ViewState()
        state.commit_load(state.begin_load(), sample_dataset())
        committed = state.snapshot
        root = state.dataset.dendrogram.root

        with state.preview(0.68) as (dataset, snapshot):
            assert snapshot.cluster_count == 1
            assert root.cluster_id == 0

        assert state.snapshot is committed
        assert root.cluster_id is None
        assert [leaf.cluster_id for leaf in state.dataset.dendrogram.leaves] == [0, 0, 1, 1, 2, 2, 3, 3]

    def test_preview_without_threshold_is_a_read(self):
        state = ViewState()
        state.commit_load(state.begin_load(), sample_dataset())
        with state.preview() as (dataset, snapshot):
            assert dataset is state.dataset
            assert snapshot is state.snapshot

    def test_preview_before_load(self):
        with ViewState().preview(0.5) as (dataset, snapshot):
            assert dataset is None
            assert snapshot is None
