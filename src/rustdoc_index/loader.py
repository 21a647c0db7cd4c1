"""Parse search index payloads and hand the result to host collaborators.

The load sequence is ``parse`` then ``publish`` then ``export_for_host``.
Only :func:`parse` raises; the hand-off steps report failures through
logging and their boolean result, so a broken or missing host never takes
the caller down.

Examples
--------
>>> from rustdoc_index.loader import parse
>>> table = parse(
...     {
...         "demo": {
...             "doc": "",
...             "t": [3, 11],
...             "n": ["Foo", "bar"],
...             "q": ["demo", ""],
...             "d": ["a struct", "a method"],
...             "i": [0, 1],
...             "p": [[0, ""], [3, "Foo"]],
...         }
...     }
... )
>>> [item.qualified_name for item in table["demo"]]
['demo::Foo', 'demo::Foo::bar']
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from rustdoc_index.errors import MalformedIndexError
from rustdoc_index.kinds import TypeRef, coerce_kind
from rustdoc_index.logging import get_logger, measure_duration_ms, with_fields
from rustdoc_index.models import Crate, Item, SignatureDescriptor, SymbolTable
from rustdoc_index.payload import decode_payload, validate_crate_record
from rustdoc_index.settings import DEFAULT_EXPORT_NAME, IndexSettings, load_settings

if TYPE_CHECKING:
    from rustdoc_index.payload import RawCrateIndex

__all__ = [
    "ExportNamespace",
    "SearchHost",
    "SearchIndexLoader",
    "decode_paths",
    "detect_reference_base",
    "export_for_host",
    "parse",
    "publish",
]

logger = get_logger(__name__)


@runtime_checkable
class SearchHost(Protocol):
    """Host search object: receives the parsed table to serve queries."""

    def init_search(self, table: SymbolTable) -> object:
        """Register ``table`` with the host."""
        ...


# A module-like object or a mutable mapping of names to values.
ExportNamespace = MutableMapping[str, Any] | object


def decode_paths(column: Sequence[str], default: str = "") -> list[str]:
    """Materialise the run-length encoded ``q`` column.

    Parameters
    ----------
    column : Sequence[str]
        Raw ``q`` values; ``""`` repeats the previous non-empty path.
    default : str, optional
        Path used before the first non-empty entry. Defaults to ``""``.

    Returns
    -------
    list[str]
        One path per item.

    Examples
    --------
    >>> decode_paths(["mod_a", "", "mod_b", ""])
    ['mod_a', 'mod_a', 'mod_b', 'mod_b']
    """
    paths: list[str] = []
    last = default
    for entry in column:
        if entry:
            last = entry
        paths.append(last)
    return paths


def detect_reference_base(types: Sequence[tuple[int, str]]) -> int:
    """Return the reference base implied by the ``p`` table.

    A table whose first entry has an empty display name reserves slot ``0``
    as a placeholder, so references index it directly (base 0). rustdoc
    omits the placeholder and counts references from 1 (base 1).
    """
    if types and types[0][1] == "":
        return 0
    return 1


def _freeze_value(value: object) -> SignatureDescriptor:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, list | tuple):
        return tuple(_freeze_value(entry) for entry in value)
    msg = f"signature descriptor contains unsupported value {value!r}"
    raise MalformedIndexError(msg, field="f")


def _freeze(value: object) -> SignatureDescriptor | None:
    # ``0`` marks an item without a signature.
    if value is None or (isinstance(value, int) and value == 0):
        return None
    return _freeze_value(value)


def _check_lengths(crate: str, raw: RawCrateIndex) -> None:
    lengths = raw.column_lengths()
    expected = lengths["t"]
    mismatched = {name: size for name, size in lengths.items() if size != expected}
    if mismatched:
        detail = ", ".join(f"{name}={size}" for name, size in sorted(lengths.items()))
        msg = f"parallel arrays of crate {crate!r} differ in length ({detail})"
        raise MalformedIndexError(msg, crate=crate, lengths=lengths)


def _build_crate(name: str, raw: RawCrateIndex, base: int | None) -> Crate:
    _check_lengths(name, raw)
    types = tuple(TypeRef(coerce_kind(kind), display) for kind, display in raw.p)
    # Explicit argument, then the record's pinned base, then detection.
    reference_base = base
    if reference_base is None:
        reference_base = raw.b if raw.b is not None else detect_reference_base(raw.p)
    paths = decode_paths(raw.q, default=name)
    signatures = raw.f if raw.f is not None else [None] * len(raw.t)
    items: list[Item] = []
    for position, (kind, item_name, path, summary, reference, descriptor) in enumerate(
        zip(raw.t, raw.n, paths, raw.d, raw.i, signatures, strict=True)
    ):
        parent: TypeRef | None = None
        if reference != 0:
            slot = reference - reference_base
            if reference < 0 or not 0 <= slot < len(types):
                msg = (
                    f"item {position} ({item_name!r}) of crate {name!r} references "
                    f"parent {reference}, outside p[{len(types)}]"
                )
                raise MalformedIndexError(
                    msg, crate=name, field="i", position=position, reference=reference
                )
            parent = types[slot]
        try:
            signature = _freeze(descriptor)
        except MalformedIndexError as exc:
            exc.context.update(crate=name, position=position)
            raise
        items.append(
            Item(
                index=position,
                kind=coerce_kind(kind),
                name=item_name,
                path=path,
                summary=summary,
                parent_index=reference,
                parent=parent,
                signature=signature,
            )
        )
    return Crate(
        name=name,
        doc=raw.doc,
        items=tuple(items),
        types=types,
        reference_base=reference_base,
    )


def parse(
    payload: str | bytes | Mapping[str, Any],
    *,
    reference_base: int | None = None,
) -> SymbolTable:
    """Parse a search index payload into a :class:`SymbolTable`.

    Parameters
    ----------
    payload : str | bytes | Mapping[str, Any]
        rustdoc JS wrapper text, JSON text, UTF-8 bytes, or a decoded mapping
        of crate name to record.
    reference_base : int | None, optional
        Base of ``i``/``f`` references into ``p``: 0 (``p[i]``), 1
        (``p[i - 1]``) or None to use the base pinned in each record (``b``)
        or else detect it per crate. Defaults to None.

    Returns
    -------
    SymbolTable
        Fully decoded table; every item has its path materialised and its
        parent resolved.

    Raises
    ------
    MalformedIndexError
        If the payload is undecodable, a record is mistyped, parallel arrays
        differ in length or a parent reference is out of range. No table is
        returned in that case.
    """
    start = time.monotonic()
    with with_fields(logger, operation="parse") as log:
        try:
            root = decode_payload(payload)
            crates = []
            for name, record in root.items():
                if not isinstance(name, str):
                    msg = f"crate names must be strings, got {type(name).__name__}"
                    raise MalformedIndexError(msg)
                raw = validate_crate_record(name, record)
                crates.append(_build_crate(name, raw, reference_base))
        except MalformedIndexError as exc:
            log.log_failure(
                "Search index is malformed", exception=exc, crate=exc.crate, level=exc.log_level
            )
            raise
        table = SymbolTable(crates)
        log.log_success(
            "Search index parsed",
            duration_ms=measure_duration_ms(start),
            crates=len(table),
            items=table.item_count,
        )
    return table


def publish(table: SymbolTable, host: SearchHost | Callable[[SymbolTable], object] | None) -> bool:
    """Register ``table`` with the host search object, if there is one.

    ``host`` may expose ``init_search(table)`` or be a plain callable. Any
    failure inside the host is logged and swallowed.

    Parameters
    ----------
    table : SymbolTable
        Parsed table.
    host : SearchHost | Callable[[SymbolTable], object] | None
        Host search object, or None when search is not hosted.

    Returns
    -------
    bool
        True when the host accepted the table.
    """
    if host is None:
        logger.debug("No search host; skipping publish", extra={"operation": "publish"})
        return False
    register = getattr(host, "init_search", None)
    if not callable(register):
        register = host if callable(host) else None
    if register is None:
        logger.warning(
            "Search host exposes no init_search; skipping publish",
            extra={"operation": "publish", "host_type": type(host).__name__},
        )
        return False
    try:
        register(table)
    except Exception as exc:  # noqa: BLE001
        logger.log_failure(
            "Search host rejected the symbol table", exception=exc, operation="publish"
        )
        return False
    logger.log_success("Symbol table published", operation="publish", items=table.item_count)
    return True


def export_for_host(
    table: SymbolTable,
    namespace: ExportNamespace | None = None,
    *,
    name: str = DEFAULT_EXPORT_NAME,
) -> bool:
    """Bind ``table`` under ``name`` in ``namespace``, if one is supplied.

    A namespace refusing the binding is logged and reported as False.

    Parameters
    ----------
    table : SymbolTable
        Parsed table.
    namespace : ExportNamespace | None, optional
        Mutable mapping (item assignment) or module-like object (attribute
        assignment). None makes this a no-op. Defaults to None.
    name : str, optional
        Export name. Defaults to ``"searchIndex"``.

    Returns
    -------
    bool
        True when the table was exported.
    """
    if namespace is None:
        return False
    try:
        if isinstance(namespace, MutableMapping):
            namespace[name] = table
        else:
            setattr(namespace, name, table)
    except Exception as exc:  # noqa: BLE001
        logger.log_failure(
            "Namespace does not accept exports",
            exception=exc,
            operation="export",
            level=logging.WARNING,
            export_name=name,
        )
        return False
    logger.log_success("Symbol table exported", operation="export", export_name=name)
    return True


class SearchIndexLoader:
    """Load a search index and hand it to optional host collaborators.

    Parameters
    ----------
    host : SearchHost | Callable[[SymbolTable], object] | None, optional
        Host search object receiving the table. Defaults to None.
    namespace : ExportNamespace | None, optional
        Namespace the table is exported into. Defaults to None.
    settings : IndexSettings | None, optional
        Loader settings; read from the environment when omitted.
    """

    def __init__(
        self,
        host: SearchHost | Callable[[SymbolTable], object] | None = None,
        namespace: ExportNamespace | None = None,
        settings: IndexSettings | None = None,
    ) -> None:
        self.host = host
        self.namespace = namespace
        self.settings = settings if settings is not None else load_settings()

    def load(self, payload: str | bytes | Mapping[str, Any]) -> SymbolTable | None:
        """Parse, publish and export ``payload``.

        Returns
        -------
        SymbolTable | None
            The table, or None when the payload is malformed (search is then
            unavailable; the error has been logged).
        """
        try:
            table = parse(payload, reference_base=self.settings.reference_base)
        except MalformedIndexError:
            logger.warning(
                "Search unavailable: index could not be parsed",
                extra={"operation": "load", "status": "degraded"},
            )
            return None
        publish(table, self.host)
        export_for_host(table, self.namespace, name=self.settings.export_name)
        return table

    def load_path(self, path: str | Path) -> SymbolTable | None:
        """Read ``path`` as UTF-8 and :meth:`load` it; unreadable files yield None."""
        try:
            payload = Path(path).read_bytes()
        except OSError as exc:
            logger.log_failure(
                "Search index file could not be read",
                exception=exc,
                operation="load",
                level=logging.WARNING,
                path=str(path),
            )
            return None
        return self.load(payload)
