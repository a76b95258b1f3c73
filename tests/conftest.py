"""Shared fixtures for tests."""
import pytest

from selector.components.pager import Layout
from selector.components.selection_engine import SelectionEngine
from selector.components.selection_models import CandidateSet, KeyPress


APPS = ["Firefox", "Terminal", "Files"]


@pytest.fixture
def apps():
    return CandidateSet.from_lines(APPS)


@pytest.fixture
def many():
    """Thirty numbered candidates."""
    return CandidateSet.from_lines(f"item {n:02d}" for n in range(30))


@pytest.fixture
def make_engine(apps):
    """Build a started engine; keyword arguments go to SelectionEngine."""

    def _make(candidates=None, **kwargs):
        engine = SelectionEngine(apps if candidates is None else candidates, **kwargs)
        engine.start()
        return engine

    return _make


@pytest.fixture
def grid_layout():
    return Layout(lines=5, columns=2)


@pytest.fixture
def type_text():
    """Feed each character of `text` as a key press; returns the last result."""

    def _type(engine, text):
        result = None
        for ch in text:
            result = engine.feed(KeyPress(key=ch, text=ch))
        return result

    return _type


@pytest.fixture
def press():
    """Feed one named key with optional modifiers."""

    def _press(engine, key, **modifiers):
        return engine.feed(KeyPress(key=key, **modifiers))

    return _press
