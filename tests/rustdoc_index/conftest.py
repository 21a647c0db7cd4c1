"""Shared fixtures for rustdoc_index tests."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest

FIXTURES = Path(__file__).parent / "fixtures"

DEMO_PAYLOAD: dict[str, Any] = {
    "demo": {
        "doc": "",
        "t": [5, 11],
        "n": ["Foo", "bar"],
        "q": ["demo", ""],
        "d": ["a struct", "a method"],
        "i": [0, 1],
        "p": [[0, ""], [5, "Foo"]],
    }
}

TOOLKIT_PAYLOAD: dict[str, Any] = {
    "toolkit": {
        "doc": "Utilities for <code>kind</code> clusters",
        "t": [0, 0, 3, 11, 12, 5, 8, 10],
        "n": ["cluster", "repo", "Config", "start", "name", "clone_repo", "Fetch", "fetch"],
        "q": ["toolkit", "", "toolkit::cluster", "", "", "toolkit::repo", "", ""],
        "d": [
            "Cluster helpers",
            "Repository helpers",
            "Holds the <code>kind</code> configuration.",
            "Starts the cluster &amp; waits.",
            "",
            "Clone a repository.",
            "",
            "Fetch remote refs.",
        ],
        "i": [0, 0, 0, 1, 1, 0, 0, 3],
        "f": [0, 0, 0, [1], 0, [[2, 2], [[4, [1, 2]]]], 0, [3, 5]],
        "p": [[3, "Config"], [15, "str"], [8, "Fetch"], [4, "Result"], [15, "bool"]],
    }
}


@pytest.fixture
def demo_payload() -> dict[str, Any]:
    """Single-crate payload with a placeholder ``p[0]`` (reference base 0)."""
    return copy.deepcopy(DEMO_PAYLOAD)


@pytest.fixture
def toolkit_payload() -> dict[str, Any]:
    """rustdoc-style payload without placeholder (reference base 1) and signatures."""
    return copy.deepcopy(TOOLKIT_PAYLOAD)


@pytest.fixture
def search_index_path() -> Path:
    """Real ``search-index.js`` generated by rustdoc for the valis_core crate."""
    return FIXTURES / "search-index.js"
