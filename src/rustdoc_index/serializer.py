"""Write a :class:`SymbolTable` back into the search index field layout.

The output uses the same short field names the loader reads (``doc``, ``t``,
``n``, ``q``, ``d``, ``i``, ``f``, ``p``) and re-applies the run-length
encoding of ``q``, so ``parse(dumps(table)) == table``. A crate whose reference
base differs from the one its ``p`` table implies also gets a ``b`` field
pinning that base.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rustdoc_index.loader import detect_reference_base
from rustdoc_index.settings import DEFAULT_EXPORT_NAME

if TYPE_CHECKING:
    from rustdoc_index.models import Crate, SignatureDescriptor, SymbolTable
    from rustdoc_index.problem_details import JsonValue

__all__ = [
    "crate_to_payload",
    "dumps",
    "encode_paths",
    "render_js",
    "table_to_payload",
]

_SEPARATORS = (",", ":")


def encode_paths(paths: list[str]) -> list[str]:
    """Replace each path equal to its predecessor with ``""``.

    Examples
    --------
    >>> encode_paths(["a", "a", "b", "b"])
    ['a', '', 'b', '']
    """
    encoded: list[str] = []
    previous: str | None = None
    for path in paths:
        encoded.append("" if path == previous else path)
        previous = path
    return encoded


def _thaw(descriptor: SignatureDescriptor | None) -> JsonValue:
    if descriptor is None:
        return 0
    if isinstance(descriptor, int):
        return descriptor
    return [_thaw(entry) for entry in descriptor]


def crate_to_payload(crate: Crate) -> dict[str, JsonValue]:
    """Return the raw record of ``crate``.

    ``f`` is omitted when no item carries a signature; ``b`` is written only
    when detection on ``p`` would pick a different reference base.
    """
    items = crate.items
    payload: dict[str, JsonValue] = {
        "doc": crate.doc,
        "t": [int(item.kind) for item in items],
        "n": [item.name for item in items],
        "q": encode_paths([item.path for item in items]),
        "d": [item.summary for item in items],
        "i": [item.parent_index for item in items],
    }
    if any(item.signature is not None for item in items):
        payload["f"] = [_thaw(item.signature) for item in items]
    payload["p"] = [[int(entry.kind), entry.name] for entry in crate.types]
    if crate.reference_base != detect_reference_base(crate.types):
        payload["b"] = crate.reference_base
    return payload


def table_to_payload(table: SymbolTable) -> dict[str, dict[str, JsonValue]]:
    """Return the root object: crate name to raw record."""
    return {name: crate_to_payload(crate) for name, crate in table.items()}


def dumps(table: SymbolTable, *, indent: int | None = None) -> str:
    """Serialise ``table`` as JSON text (compact unless ``indent`` is given)."""
    separators = None if indent is not None else _SEPARATORS
    return json.dumps(
        table_to_payload(table), ensure_ascii=False, indent=indent, separators=separators
    )


def _escape_js(text: str) -> str:
    return text.replace("\\", "\\\\").replace("'", "\\'")


def render_js(table: SymbolTable, *, export_name: str = DEFAULT_EXPORT_NAME) -> str:
    """Serialise ``table`` as a rustdoc ``search-index.js`` file.

    One crate per line inside a ``JSON.parse`` string literal, followed by
    the two hand-off lines rustdoc emits (``window.initSearch`` and
    ``exports``).
    """
    records = [
        json.dumps(name, ensure_ascii=False)
        + ":"
        + json.dumps(record, ensure_ascii=False, separators=_SEPARATORS)
        for name, record in table_to_payload(table).items()
    ]
    body = ",\\\n".join(_escape_js(record) for record in records)
    lines = [
        f"var {export_name} = JSON.parse('{{\\",
        f"{body}\\" if body else "\\",
        "}');",
        f"if (typeof window !== 'undefined' && window.initSearch) "
        f"{{window.initSearch({export_name})}};",
        f"if (typeof exports !== 'undefined') {{exports.{export_name} = {export_name}}};",
    ]
    return "\n".join(lines) + "\n"
