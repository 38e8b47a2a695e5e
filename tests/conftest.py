"""Pytest fixtures for gloss tests."""

import pytest

from gloss.store import GlossStore


@pytest.fixture
def store(tmp_path):
    """A GlossStore rooted in a fresh temporary directory."""
    return GlossStore(tmp_path / "data")


@pytest.fixture
def saves(store, monkeypatch):
    """Record every (language, slug) written through store.save."""
    written = []
    original = store.save

    def recording_save(gloss):
        written.append((gloss.language, gloss.slug))
        original(gloss)

    monkeypatch.setattr(store, "save", recording_save)
    return written


@pytest.fixture
def hello(store):
    return store.ensure("eng", "hello")


@pytest.fixture
def hallo(store):
    return store.ensure("deu", "hallo")
