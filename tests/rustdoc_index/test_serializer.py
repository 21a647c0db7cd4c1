"""Tests for rustdoc_index.serializer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from rustdoc_index import SymbolTable, dumps, parse, render_js, table_to_payload
from rustdoc_index.serializer import encode_paths


class TestEncodePaths:
    """Tests for re-applying the run-length encoding of ``q``."""

    def test_repeated_paths_become_blank(self) -> None:
        """Only the first path of a run is kept."""
        assert encode_paths(["a", "a", "b", "a"]) == ["a", "", "b", "a"]

    def test_empty(self) -> None:
        """No paths encode to nothing."""
        assert encode_paths([]) == []


class TestTableToPayload:
    """Tests for the raw field layout."""

    def test_demo_layout(self, demo_payload: dict[str, Any]) -> None:
        """The demo table serialises back to its input record."""
        payload = table_to_payload(parse(demo_payload))
        assert payload == demo_payload

    def test_signatures_survive(self, toolkit_payload: dict[str, Any]) -> None:
        """``f`` is written back entry for entry."""
        payload = table_to_payload(parse(toolkit_payload))
        assert payload["toolkit"]["f"] == toolkit_payload["toolkit"]["f"]
        assert payload["toolkit"]["q"] == toolkit_payload["toolkit"]["q"]

    def test_leading_blank_path_is_materialised(self) -> None:
        """A leading blank ``q`` is written as the crate name."""
        table = parse({"lone": {"t": [5], "n": ["a"], "q": [""], "d": [""], "i": [0]}})
        assert table_to_payload(table)["lone"]["q"] == ["lone"]

    def test_f_omitted_without_signatures(self, demo_payload: dict[str, Any]) -> None:
        """Crates whose items carry no signature get no ``f`` column."""
        assert "f" not in table_to_payload(parse(demo_payload))["demo"]


class TestRoundTrip:
    """parse(dumps(table)) reproduces the table."""

    def test_dumps(self, toolkit_payload: dict[str, Any]) -> None:
        """JSON text round-trips."""
        table = parse(toolkit_payload)
        assert parse(dumps(table)) == table

    def test_dumps_indent(self, demo_payload: dict[str, Any]) -> None:
        """Indented output is still valid JSON."""
        text = dumps(parse(demo_payload), indent=2)
        assert "\n" in text
        assert json.loads(text) == demo_payload

    def test_summaries_quoting_the_js_wrapper(self) -> None:
        """Text that looks like the JavaScript wrapper survives both formats."""
        table = parse(
            {
                "jsbridge": {
                    "doc": "Wraps JSON.parse('{}') for hosts",
                    "t": [5],
                    "n": ["load"],
                    "q": ["jsbridge"],
                    "d": ["var searchIndex = JSON.parse('{}');"],
                    "i": [0],
                }
            }
        )
        assert table.item_count == 1
        assert parse(dumps(table)) == table
        assert parse(render_js(table)) == table

    @pytest.mark.parametrize(
        ("types", "base"),
        [
            ([[3, "A"], [3, "B"]], 0),
            ([[0, ""], [3, "A"]], 1),
        ],
        ids=["zero-without-placeholder", "one-with-placeholder"],
    )
    def test_explicit_reference_base(self, types: list[list[Any]], base: int) -> None:
        """A base that detection would not pick is pinned in the output."""
        payload = {
            "k": {"t": [3, 11], "n": ["A", "run"], "q": ["k", ""], "d": ["", ""], "i": [0, 1]},
        }
        payload["k"]["p"] = types
        table = parse(payload, reference_base=base)
        parent = table["k"][1].parent
        assert table_to_payload(table)["k"]["b"] == base

        again = parse(dumps(table))
        assert again == table
        assert again["k"].reference_base == base
        assert again["k"][1].parent == parent
        assert parse(render_js(table)) == table

    def test_detected_base_is_not_pinned(self, toolkit_payload: dict[str, Any]) -> None:
        """Crates whose base matches detection carry no ``b`` field."""
        assert "b" not in table_to_payload(parse(toolkit_payload))["toolkit"]

    def test_real_index(self, search_index_path: Path) -> None:
        """The rustdoc fixture round-trips through JSON and JavaScript."""
        table = parse(search_index_path.read_bytes())
        assert parse(dumps(table)) == table
        assert parse(render_js(table)) == table


class TestRenderJs:
    """Tests for the search-index.js wrapper."""

    def test_wrapper_lines(self, demo_payload: dict[str, Any]) -> None:
        """The file assigns the export and hands it to the host."""
        text = render_js(parse(demo_payload), export_name="idx")
        lines = text.splitlines()
        assert lines[0] == "var idx = JSON.parse('{\\"
        assert lines[-3] == "}');"
        assert "window.initSearch(idx)" in lines[-2]
        assert lines[-1] == "if (typeof exports !== 'undefined') {exports.idx = idx};"
        assert text.endswith("\n")

    def test_quotes_and_backslashes_are_escaped(self) -> None:
        """Summaries containing quotes and backslashes survive the JS string."""
        payload = {
            "quote": {
                "t": [5],
                "n": ["it's"],
                "q": ["quote"],
                "d": ["a \\ path with 'quotes' and \"doubles\""],
                "i": [0],
            }
        }
        table = parse(payload)
        text = render_js(table)
        assert "it\\'s" in text
        assert parse(text) == table

    def test_empty_table(self) -> None:
        """An empty table renders an empty object."""
        table = SymbolTable()
        assert parse(render_js(table)) == table
        assert dumps(table) == "{}"
