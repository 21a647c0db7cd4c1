"""Wire format of the search index: text decoding and raw crate records.

rustdoc ships the index as a JavaScript file::

    var searchIndex = JSON.parse('{\\
    "crate":{"doc":"","t":[...],"n":[...],...}\\
    }');
    if (typeof window !== 'undefined' && window.initSearch) {window.initSearch(searchIndex)};
    if (typeof exports !== 'undefined') {exports.searchIndex = searchIndex};

:func:`decode_payload` accepts that wrapper, bare JSON text, bytes or an
already decoded mapping. :class:`RawCrateIndex` validates one crate record
field by field; cross-field invariants are checked by the loader.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from rustdoc_index.errors import MalformedIndexError

__all__ = [
    "PARALLEL_FIELDS",
    "RawCrateIndex",
    "decode_payload",
    "extract_json_text",
    "validate_crate_record",
]

# Columns that describe one item per position and must share a length.
PARALLEL_FIELDS: Final[tuple[str, ...]] = ("t", "n", "q", "d", "i", "f")

# Only the leading ``var <name> = JSON.parse('...')`` assignment is unwrapped.
_JSON_PARSE_RE = re.compile(
    r"(?:var|let|const)\s+[\w$]+\s*=\s*JSON\.parse\(\s*'(?P<body>(?:[^'\\]|\\.)*)'\s*\)",
    re.DOTALL,
)
_JS_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_JS_ESCAPES: Final[dict[str, str]] = {
    "\n": "",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


class RawCrateIndex(BaseModel):
    """One crate record exactly as stored in the payload."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    doc: StrictStr = ""
    t: list[StrictInt]
    n: list[StrictStr]
    q: list[StrictStr]
    d: list[StrictStr]
    i: list[StrictInt]
    f: list[Any] | None = None
    p: list[tuple[StrictInt, StrictStr]] = Field(default_factory=list)
    # Reference base pinned by the serializer when detection would differ.
    b: Literal[0, 1] | None = None

    def column_lengths(self) -> dict[str, int]:
        """Return the length of every parallel column present in the record."""
        lengths: dict[str, int] = {}
        for name in PARALLEL_FIELDS:
            column = getattr(self, name)
            if column is not None:
                lengths[name] = len(column)
        return lengths


def _unescape_js(body: str) -> str:
    def replace(match: re.Match[str]) -> str:
        char = match.group(1)
        return _JS_ESCAPES.get(char, char)

    return _JS_ESCAPE_RE.sub(replace, body)


def extract_json_text(text: str) -> str:
    """Return the JSON document embedded in ``text``.

    Text starting with ``{`` or ``[`` is JSON already and returned stripped,
    even when its strings mention ``JSON.parse``. Text starting with the
    rustdoc ``var searchIndex = JSON.parse('...')`` assignment is treated as
    the JavaScript wrapper and its string literal is unescaped. Anything else
    is returned stripped and left for the JSON decoder to reject.

    Parameters
    ----------
    text : str
        File contents.

    Returns
    -------
    str
        JSON text.
    """
    stripped = text.strip()
    if stripped.startswith(("{", "[")):
        return stripped
    match = _JSON_PARSE_RE.match(stripped)
    if match is None:
        return stripped
    return _unescape_js(match.group("body"))


def decode_payload(payload: str | bytes | Mapping[str, Any]) -> Mapping[str, Any]:
    """Decode ``payload`` into the mapping of crate name to raw record.

    Parameters
    ----------
    payload : str | bytes | Mapping[str, Any]
        JS wrapper text, JSON text, UTF-8 bytes, or a decoded mapping.

    Returns
    -------
    Mapping[str, Any]
        Decoded root object.

    Raises
    ------
    MalformedIndexError
        If the payload is not UTF-8, not JSON, or its root is not an object.
    """
    if isinstance(payload, Mapping):
        return payload
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = "search index payload is not valid UTF-8"
            raise MalformedIndexError(msg, cause=exc) from exc
    if not isinstance(payload, str):
        msg = f"unsupported payload type {type(payload).__name__}"
        raise MalformedIndexError(msg)
    try:
        root: object = json.loads(extract_json_text(payload))
    except json.JSONDecodeError as exc:
        msg = f"search index payload is not well-formed JSON: {exc.msg}"
        raise MalformedIndexError(msg, cause=exc, line=exc.lineno, column=exc.colno) from exc
    if not isinstance(root, dict):
        msg = f"search index root must be an object, got {type(root).__name__}"
        raise MalformedIndexError(msg)
    return root


def _describe_errors(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors(include_url=False)
    ]


def validate_crate_record(crate: str, record: object) -> RawCrateIndex:
    """Validate the raw record of ``crate``.

    Parameters
    ----------
    crate : str
        Crate name (the key of the record).
    record : object
        Decoded record value.

    Returns
    -------
    RawCrateIndex
        Validated record.

    Raises
    ------
    MalformedIndexError
        If the record is not an object or a field is missing or mistyped.
    """
    if not isinstance(record, Mapping):
        msg = f"record of crate {crate!r} must be an object, got {type(record).__name__}"
        raise MalformedIndexError(msg, crate=crate)
    try:
        return RawCrateIndex.model_validate(record)
    except ValidationError as exc:
        problems = _describe_errors(exc)
        msg = f"record of crate {crate!r} is invalid: {'; '.join(problems)}"
        raise MalformedIndexError(msg, cause=exc, crate=crate, errors=problems) from exc

