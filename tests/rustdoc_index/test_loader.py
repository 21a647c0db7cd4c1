"""Tests for rustdoc_index.loader.parse and path/parent decoding."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from rustdoc_index import MalformedIndex, parse
from rustdoc_index.errors import ErrorCode, MalformedIndexError
from rustdoc_index.kinds import ItemKind, TypeRef
from rustdoc_index.loader import decode_paths, detect_reference_base


class TestDecodePaths:
    """Tests for the run-length encoded path column."""

    def test_empty_entries_inherit_previous_path(self) -> None:
        """Blank entries repeat the last non-empty path."""
        assert decode_paths(["mod_a", "", "mod_b", ""]) == ["mod_a", "mod_a", "mod_b", "mod_b"]

    def test_leading_blank_uses_default(self) -> None:
        """A leading blank resolves to the default path."""
        assert decode_paths(["", "", "x"], default="crate") == ["crate", "crate", "x"]

    def test_empty_column(self) -> None:
        """No entries produce no paths."""
        assert decode_paths([]) == []

    def test_leading_blank_resolves_to_crate_name(self) -> None:
        """parse falls back to the crate name before any path is seen."""
        table = parse(
            {"lone": {"t": [5, 5], "n": ["a", "b"], "q": ["", ""], "d": ["", ""], "i": [0, 0]}}
        )
        assert [item.path for item in table["lone"]] == ["lone", "lone"]


class TestEndToEnd:
    """The single-crate ``demo`` scenario."""

    def test_demo_table(self, demo_payload: dict[str, Any]) -> None:
        """Both items are reconstructed with resolved path and parent."""
        table = parse(demo_payload)

        assert list(table) == ["demo"]
        crate = table["demo"]
        assert len(crate) == 2

        foo, bar = crate
        assert foo.kind == 5
        assert foo.name == "Foo"
        assert foo.path == "demo"
        assert foo.summary == "a struct"
        assert foo.parent is None

        assert bar.kind == 11
        assert bar.kind is ItemKind.METHOD
        assert bar.name == "bar"
        assert bar.path == "demo"
        assert bar.summary == "a method"
        assert bar.parent == TypeRef(5, "Foo")
        assert bar.parent_name == "Foo"
        assert bar.qualified_name == "demo::Foo::bar"

    def test_parent_equals_p_entry(self, demo_payload: dict[str, Any]) -> None:
        """With a placeholder p[0], the parent is p[i]."""
        table = parse(demo_payload)
        p = demo_payload["demo"]["p"]
        for item, reference in zip(table["demo"], demo_payload["demo"]["i"], strict=True):
            if reference == 0:
                assert item.parent is None
            else:
                assert tuple(item.parent) == tuple(p[reference])

    def test_item_count_matches_columns(self, demo_payload: dict[str, Any]) -> None:
        """One item per parallel-array position."""
        table = parse(demo_payload)
        assert table.item_count == len(demo_payload["demo"]["t"])

    def test_accepts_json_text_and_bytes(self, demo_payload: dict[str, Any]) -> None:
        """Text and bytes payloads decode to the same table as a mapping."""
        text = json.dumps(demo_payload)
        assert parse(text) == parse(demo_payload)
        assert parse(text.encode("utf-8")) == parse(demo_payload)

    def test_json_mentioning_js_wrapper(self) -> None:
        """Bare JSON whose strings quote ``JSON.parse(...)`` is not unwrapped."""
        text = json.dumps(
            {
                "jsbridge": {
                    "doc": "Wraps JSON.parse('{}') for hosts",
                    "t": [5],
                    "n": ["load"],
                    "q": ["jsbridge"],
                    "d": ["var index = JSON.parse('[]');"],
                    "i": [0],
                }
            }
        )
        table = parse(text)
        assert list(table) == ["jsbridge"]
        assert table.item_count == 1
        assert table["jsbridge"].doc == "Wraps JSON.parse('{}') for hosts"

    def test_text_before_wrapper_is_rejected(self) -> None:
        """A ``JSON.parse`` call not at the start of the file is not unwrapped."""
        with pytest.raises(MalformedIndexError, match="not well-formed JSON"):
            parse("console.log(1); var searchIndex = JSON.parse('{}');")

    def test_missing_doc_and_f_are_optional(self, demo_payload: dict[str, Any]) -> None:
        """``doc`` defaults to empty and items without ``f`` carry no signature."""
        del demo_payload["demo"]["doc"]
        crate = parse(demo_payload)["demo"]
        assert crate.doc == ""
        assert all(item.signature is None for item in crate)


class TestReferenceBase:
    """Tests for 0- and 1-based parent references."""

    def test_detect_placeholder(self) -> None:
        """A blank first entry means references index p directly."""
        assert detect_reference_base([(0, ""), (3, "Foo")]) == 0
        assert detect_reference_base([(3, "Foo")]) == 1
        assert detect_reference_base([]) == 1

    def test_rustdoc_layout_is_one_based(self, toolkit_payload: dict[str, Any]) -> None:
        """Without a placeholder, reference ``i`` names ``p[i - 1]``."""
        crate = parse(toolkit_payload)["toolkit"]
        assert crate.reference_base == 1
        assert crate[3].parent == TypeRef(ItemKind.STRUCT, "Config")
        assert crate[7].parent == TypeRef(ItemKind.TRAIT, "Fetch")
        assert crate[3].qualified_name == "toolkit::cluster::Config::start"

    def test_explicit_base_overrides_detection(self, toolkit_payload: dict[str, Any]) -> None:
        """An explicit base of 0 reads p[i] even without a placeholder."""
        crate = parse(toolkit_payload, reference_base=0)["toolkit"]
        assert crate[3].parent == TypeRef(ItemKind.PRIMITIVE, "str")

    def test_explicit_base_can_push_reference_out_of_range(
        self, toolkit_payload: dict[str, Any]
    ) -> None:
        """References valid under base 1 may be out of range under base 0."""
        toolkit_payload["toolkit"]["i"][7] = 5
        assert parse(toolkit_payload)["toolkit"][7].parent == TypeRef(15, "bool")
        with pytest.raises(MalformedIndexError, match="outside p"):
            parse(toolkit_payload, reference_base=0)

    def test_pinned_base_in_record(self, toolkit_payload: dict[str, Any]) -> None:
        """A ``b`` field replaces detection; an explicit argument still wins."""
        toolkit_payload["toolkit"]["b"] = 0
        assert parse(toolkit_payload)["toolkit"].reference_base == 0
        assert parse(toolkit_payload, reference_base=1)["toolkit"].reference_base == 1

    def test_pinned_base_must_be_zero_or_one(self, demo_payload: dict[str, Any]) -> None:
        """Other ``b`` values are malformed."""
        demo_payload["demo"]["b"] = 2
        with pytest.raises(MalformedIndexError):
            parse(demo_payload)


class TestMalformed:
    """Structural violations raise MalformedIndex."""

    def test_length_mismatch(self, demo_payload: dict[str, Any]) -> None:
        """t of length 5 with n of length 4 fails."""
        record = demo_payload["demo"]
        record["t"] = [0, 0, 0, 0, 0]
        record["n"] = ["a", "b", "c", "d"]
        with pytest.raises(MalformedIndex) as excinfo:
            parse(demo_payload)
        assert excinfo.value.code == ErrorCode.MALFORMED_INDEX
        assert excinfo.value.crate == "demo"
        assert excinfo.value.context["lengths"]["t"] == 5

    def test_signature_column_length_mismatch(self, toolkit_payload: dict[str, Any]) -> None:
        """f takes part in the parallel-array check when present."""
        toolkit_payload["toolkit"]["f"].pop()
        with pytest.raises(MalformedIndexError, match="differ in length"):
            parse(toolkit_payload)

    def test_parent_out_of_bounds(self, demo_payload: dict[str, Any]) -> None:
        """A non-zero i past the end of p fails."""
        demo_payload["demo"]["i"] = [0, 2]
        with pytest.raises(MalformedIndexError) as excinfo:
            parse(demo_payload)
        assert excinfo.value.context["position"] == 1
        assert excinfo.value.context["reference"] == 2

    def test_negative_parent(self, demo_payload: dict[str, Any]) -> None:
        """Negative references are never valid."""
        demo_payload["demo"]["i"] = [0, -1]
        with pytest.raises(MalformedIndexError):
            parse(demo_payload)

    @pytest.mark.parametrize(
        "payload",
        [
            "{not json",
            "[1, 2, 3]",
            b"\xff\xfe",
            '{"demo": 3}',
            '{"demo": {"t": [0], "n": ["a"], "q": ["demo"], "d": [""]}}',
            '{"demo": {"t": ["0"], "n": ["a"], "q": ["demo"], "d": [""], "i": [0]}}',
            '{"demo": {"t": [0], "n": ["a"], "q": ["demo"], "d": [""], "i": [0], "f": [{}]}}',
        ],
        ids=[
            "bad-json",
            "array-root",
            "bad-utf8",
            "record-not-object",
            "missing-i",
            "string-kind",
            "bad-signature",
        ],
    )
    def test_not_well_formed(self, payload: str | bytes) -> None:
        """Undecodable or mistyped payloads fail."""
        with pytest.raises(MalformedIndexError):
            parse(payload)

    def test_error_converts_to_problem_details(self, demo_payload: dict[str, Any]) -> None:
        """MalformedIndex maps onto an RFC 9457 payload."""
        demo_payload["demo"]["i"] = [0, 9]
        with pytest.raises(MalformedIndexError) as excinfo:
            parse(demo_payload)
        problem = excinfo.value.to_problem_details(instance="urn:test")
        assert problem["status"] == 422
        assert problem["code"] == "malformed-index"
        assert problem["type"].endswith("/malformed-index")
        assert problem["extensions"]["crate"] == "demo"


class TestRealIndex:
    """Tests against a rustdoc-generated search-index.js."""

    def test_parses_js_wrapper(self, search_index_path: Path) -> None:
        """The JavaScript wrapper is unwrapped and decoded."""
        table = parse(search_index_path.read_text(encoding="utf-8"))
        crate = table["valis_core"]
        assert len(crate) == 76
        assert crate.reference_base == 1
        assert len(crate.types) == 17

    def test_paths_and_parents(self, search_index_path: Path) -> None:
        """Compressed paths and 1-based parents resolve like rustdoc does."""
        crate = parse(search_index_path.read_bytes())["valis_core"]
        assert crate[0].path == "valis_core"
        assert crate[3].name == "log"
        assert crate[3].path == "valis_core::modules"
        assert crate[12].qualified_name == "valis_core::modules::k8s::kind::KindConfig"
        assert crate[12].kind is ItemKind.STRUCT
        assert crate[13].name == "borrow"
        assert crate[13].parent == TypeRef(ItemKind.STRUCT, "KindConfig")
        assert crate[33].kind is ItemKind.REQUIRED_METHOD
        assert crate[33].parent_name == "GitOperations"

    def test_summary_text_strips_markup(self, search_index_path: Path) -> None:
        """Summaries keep their HTML; summary_text drops it."""
        crate = parse(search_index_path.read_bytes())["valis_core"]
        matcher_doc = crate[7]
        assert "<code>Matcher</code>" in matcher_doc.summary
        assert matcher_doc.summary_text.startswith("Return a list of Matcher objects")
