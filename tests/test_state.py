"""Tests for the open-session registry."""

from __future__ import annotations

import pytest

from core import state
from services.zone_editor import ZoneEditor
from tests.conftest import FakePersistence


@pytest.fixture(autouse=True)
def empty_registry():
    state.close_all()
    yield
    state.close_all()


def _editor(settings, last_active: float) -> ZoneEditor:
    editor = ZoneEditor(FakePersistence(), settings)
    editor.last_active = last_active
    return editor


class TestRegistry:
    def test_evict_idle(self, settings):
        old = _editor(settings, 100.0)
        recent = _editor(settings, 1000.0)
        state.register(old, 10)
        state.register(recent, 10)
        assert state.evict_idle(600, now=1200.0) == 1
        assert list(state.sessions) == [recent.id]

    def test_nothing_idle(self, settings):
        state.register(_editor(settings, 1000.0), 10)
        assert state.evict_idle(600, now=1100.0) == 0
        assert len(state.sessions) == 1

    def test_cap_evicts_least_recently_active(self, settings):
        a = _editor(settings, 30.0)
        b = _editor(settings, 10.0)
        c = _editor(settings, 20.0)
        for editor in (a, b, c):
            state.register(editor, 2)
        assert set(state.sessions) == {a.id, c.id}

    def test_touch_refreshes_activity(self, settings):
        editor = _editor(settings, 0.0)
        editor.touch()
        assert editor.last_active > 0.0

    def test_discard(self, settings):
        editor = _editor(settings, 0.0)
        state.register(editor, 10)
        assert state.discard(editor.id) is editor
        assert state.discard(editor.id) is None
