"""Tests for the finalizer protocol."""

from __future__ import annotations

import pytest

from factories import MARKED, make_role
from vault_rbac_operator.constants import FINALIZER
from vault_rbac_operator.resources import Role
from vault_rbac_operator.utils.errors import ConflictError
from vault_rbac_operator.utils.finalizers import (
    FinalizerState,
    add_finalizer,
    has_finalizer,
    remove_finalizer,
)


class TestFinalizerState:
    """Test cases for FinalizerState.of."""

    @pytest.mark.parametrize(
        "finalizers,deleting,expected",
        [
            ([], False, FinalizerState.UNMANAGED),
            (MARKED, False, FinalizerState.HELD),
            (MARKED, True, FinalizerState.CLEANUP_PENDING),
            ([], True, FinalizerState.RELEASED),
        ],
    )
    def test_states(self, finalizers, deleting, expected):
        """Test each combination of deletion request and marker."""
        obj = Role(make_role(finalizers=finalizers, deleting=deleting))
        assert FinalizerState.of(obj) is expected


class TestAddFinalizer:
    """Test cases for add_finalizer."""

    def test_adds_and_persists(self, store):
        """Test that the marker is persisted through the store."""
        store.add(make_role(finalizers=["other"]))
        obj = Role(store.get("Role", "default", "reader"))

        updated = add_finalizer(store, obj)

        assert updated["metadata"]["finalizers"] == ["other", FINALIZER]
        assert has_finalizer(Role(store.get("Role", "default", "reader")))

    def test_does_not_mutate_snapshot(self, store):
        """Test that the fetched body is left untouched."""
        store.add(make_role())
        obj = Role(store.get("Role", "default", "reader"))

        add_finalizer(store, obj)

        assert obj.finalizers == []

    def test_noop_when_present(self, store):
        """Test that an existing marker causes no update."""
        store.add(make_role(finalizers=MARKED))
        obj = Role(store.get("Role", "default", "reader"))

        assert add_finalizer(store, obj) is None
        assert store.updates == []

    def test_conflict_propagates(self, store):
        """Test that a stale snapshot is rejected, not retried."""
        store.add(make_role())
        stale = Role(store.get("Role", "default", "reader"))
        store.update(store.get("Role", "default", "reader"))

        with pytest.raises(ConflictError):
            add_finalizer(store, stale)
        assert len(store.updates) == 1


class TestRemoveFinalizer:
    """Test cases for remove_finalizer."""

    def test_removes_only_own_marker(self, store):
        """Test that other finalizers survive."""
        store.add(make_role(finalizers=["other", FINALIZER], deleting=True))
        obj = Role(store.get("Role", "default", "reader"))

        updated = remove_finalizer(store, obj)

        assert updated["metadata"]["finalizers"] == ["other"]

    def test_noop_when_absent(self, store):
        """Test that nothing is written without a marker."""
        store.add(make_role(deleting=True))
        obj = Role(store.get("Role", "default", "reader"))

        assert remove_finalizer(store, obj) is None
        assert store.updates == []
