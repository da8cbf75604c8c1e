# tests/conftest.py
import os

# Qt must never try to open a real display while the test suite runs.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from code_viewer.core.snippet_loader import Snippet


@pytest.fixture
def sample_snippets():
    """The three-snippet collection used across the controller and GUI tests."""
    return [
        Snippet(id="1", title="Foo", description="", code=""),
        Snippet(id="2", title="bar", description="", code=""),
        Snippet(id="3", title="Foobar", description="", code=""),
    ]
