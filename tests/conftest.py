"""Shared pytest fixtures for orgtree tests."""

import copy

import pytest

from orgtree.config import DEFAULT_CONFIG
from orgtree.tree import NodeKind, NodeStore
from orgtree.tree.mutations import add_child, add_root_group


def build_org_store() -> NodeStore:
    """Build the reference organization used across the tests.

    Engineering (g1)
        Backend (g2)
            Developer (r1)
        Frontend (g3)
            UI Designer (r2)
    Sales (g4)
    """
    store = NodeStore.empty()
    store = add_root_group(store, "Engineering").store
    store = add_child(store, "g1", NodeKind.GROUP, "Backend").store
    store = add_child(store, "g2", NodeKind.ROLE, "Developer").store
    store = add_child(store, "g1", NodeKind.GROUP, "Frontend").store
    store = add_child(store, "g3", NodeKind.ROLE, "UI Designer").store
    store = add_root_group(store, "Sales").store
    return store


@pytest.fixture
def empty_store():
    """A forest with no nodes."""
    return NodeStore.empty()


@pytest.fixture
def org_store():
    """The reference organization (see build_org_store)."""
    return build_org_store()


@pytest.fixture
def config():
    """A private copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def controller(org_store, config):
    """ViewController over the reference organization."""
    from orgtree.view import ViewController

    return ViewController(org_store, config)
