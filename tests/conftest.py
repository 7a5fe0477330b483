"""
Pytest configuration and shared fixtures for testing.
"""
import pytest
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from similarity.submission import Submission
from similarity.tokens import TokenStream


@pytest.fixture
def make_submission():
    """Factory for in-memory submissions built from bare token types."""
    def _make(name, types, files=None):
        return Submission.from_tokens(name, TokenStream.from_types(list(types)), files)
    return _make


@pytest.fixture
def write_tree(tmp_path):
    """Create files below tmp_path from a {relative path: content} mapping."""
    def _write(files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path
    return _write


TOTAL_PY = """\
def total(values):
    result = 0
    for value in values:
        if value > 0:
            result += value
    return result
"""

# Same structure as TOTAL_PY, every identifier renamed
TOTAL_RENAMED_PY = """\
def summe(items):
    acc = 0
    for item in items:
        if item > 0:
            acc += item
    return acc
"""

STACK_PY = """\
class Stack:
    def __init__(self):
        self.items = []

    def push(self, item):
        self.items.append(item)

    def pop(self):
        return self.items.pop()
"""


@pytest.fixture
def python_sources():
    """Sample Python sources used across detector and API tests."""
    return {
        "total": TOTAL_PY,
        "total_renamed": TOTAL_RENAMED_PY,
        "stack": STACK_PY,
    }
