"""Load rustdoc search indexes into an immutable symbol table.

Examples
--------
>>> from rustdoc_index import parse
>>> table = parse('{"demo": {"t": [5], "n": ["run"], "q": ["demo"], "d": [""], "i": [0]}}')
>>> table["demo"][0].qualified_name
'demo::run'
"""

from __future__ import annotations

from rustdoc_index.errors import (
    ErrorCode,
    MalformedIndex,
    MalformedIndexError,
    RustdocIndexError,
    SettingsError,
)
from rustdoc_index.kinds import ItemKind, TypeRef
from rustdoc_index.loader import (
    SearchHost,
    SearchIndexLoader,
    decode_paths,
    export_for_host,
    parse,
    publish,
)
from rustdoc_index.models import Crate, Item, SymbolTable
from rustdoc_index.serializer import dumps, render_js, table_to_payload
from rustdoc_index.settings import DEFAULT_EXPORT_NAME, IndexSettings, load_settings
from rustdoc_index.signatures import FunctionSignature, decode_signature, render_signature

__all__ = [
    "DEFAULT_EXPORT_NAME",
    "Crate",
    "ErrorCode",
    "FunctionSignature",
    "IndexSettings",
    "Item",
    "ItemKind",
    "MalformedIndex",
    "MalformedIndexError",
    "RustdocIndexError",
    "SearchHost",
    "SearchIndexLoader",
    "SettingsError",
    "SymbolTable",
    "TypeRef",
    "decode_paths",
    "decode_signature",
    "dumps",
    "export_for_host",
    "load_settings",
    "parse",
    "publish",
    "render_js",
    "render_signature",
    "table_to_payload",
]

__version__ = "0.1.0"
