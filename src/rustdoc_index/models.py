"""In-memory symbol table built from a search index payload.

Everything here is immutable: :class:`Item` and :class:`Crate` are frozen
dataclasses and :class:`SymbolTable` exposes a read-only mapping.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, overload

from rustdoc_index.kinds import ItemKind, TypeRef, kind_label

if TYPE_CHECKING:
    from rustdoc_index.problem_details import JsonValue

__all__ = [
    "Crate",
    "Item",
    "SignatureDescriptor",
    "SymbolTable",
]

# Frozen form of an ``f`` entry: ints and nested tuples.
SignatureDescriptor = int | tuple["SignatureDescriptor", ...]

_TAG_RE = re.compile(r"<[^>]+>")

_MEMBER_KINDS = frozenset(
    {
        ItemKind.REQUIRED_METHOD,
        ItemKind.METHOD,
        ItemKind.STRUCT_FIELD,
        ItemKind.VARIANT,
        ItemKind.ASSOC_TYPE,
        ItemKind.ASSOC_CONST,
    }
)


@dataclass(frozen=True, slots=True)
class Item:
    """One documented entity: index position ``index`` across the parallel arrays."""

    index: int
    kind: ItemKind | int
    name: str
    path: str
    summary: str
    parent_index: int = 0
    parent: TypeRef | None = None
    signature: SignatureDescriptor | None = None

    @property
    def parent_name(self) -> str | None:
        """Display name of the parent type, or None for top-level items."""
        return self.parent.name if self.parent is not None else None

    @property
    def qualified_name(self) -> str:
        """Fully qualified name, with the parent type inserted for members."""
        parts = [self.path] if self.path else []
        if self.parent is not None:
            parts.append(self.parent.name)
        parts.append(self.name)
        return "::".join(parts)

    @property
    def summary_text(self) -> str:
        """Summary with HTML tags removed and entities unescaped."""
        return html.unescape(_TAG_RE.sub("", self.summary))

    @property
    def is_member(self) -> bool:
        """True for methods, fields, variants and associated items."""
        return self.kind in _MEMBER_KINDS

    def to_record(self) -> dict[str, JsonValue]:
        """Return a JSON-compatible description of the item.

        Returns
        -------
        dict[str, JsonValue]
            Kind (number and label), names, path, summary and parent.
        """
        label = self.kind.label if isinstance(self.kind, ItemKind) else None
        return {
            "index": self.index,
            "kind": int(self.kind),
            "kind_label": label,
            "name": self.name,
            "path": self.path,
            "qualified_name": self.qualified_name,
            "summary": self.summary_text,
            "parent": self.parent_name,
        }


@dataclass(frozen=True, slots=True)
class Crate(Sequence[Item]):
    """Decoded record of one crate: its items in index order plus the ``p`` table."""

    name: str
    doc: str
    items: tuple[Item, ...]
    types: tuple[TypeRef, ...] = ()
    reference_base: int = 0

    @overload
    def __getitem__(self, index: int) -> Item: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Item, ...]: ...

    def __getitem__(self, index: int | slice) -> Item | tuple[Item, ...]:
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def lookup(self, name: str) -> tuple[Item, ...]:
        """Return every item called ``name`` (exact, case-sensitive)."""
        return tuple(item for item in self.items if item.name == name)

    def members_of(self, type_name: str) -> tuple[Item, ...]:
        """Return the items whose parent type is displayed as ``type_name``."""
        return tuple(item for item in self.items if item.parent_name == type_name)

    def kind_counts(self) -> dict[str, int]:
        """Return the number of items per kind label."""
        counts: dict[str, int] = {}
        for item in self.items:
            label = kind_label(item.kind)
            counts[label] = counts.get(label, 0) + 1
        return dict(sorted(counts.items()))


class SymbolTable(Mapping[str, Crate]):
    """Read-only mapping from crate name to :class:`Crate`.

    Parameters
    ----------
    crates : Iterable[Crate]
        Decoded crates; insertion order is kept.
    """

    __slots__ = ("_crates",)

    def __init__(self, crates: Iterable[Crate] = ()) -> None:
        self._crates: Mapping[str, Crate] = MappingProxyType(
            {crate.name: crate for crate in crates}
        )

    def __getitem__(self, name: str) -> Crate:
        return self._crates[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._crates)

    def __len__(self) -> int:
        return len(self._crates)

    def __repr__(self) -> str:
        return f"SymbolTable(crates={list(self._crates)!r}, items={self.item_count})"

    @property
    def item_count(self) -> int:
        """Total number of items across all crates."""
        return sum(len(crate) for crate in self._crates.values())

    def iter_items(self) -> Iterator[tuple[Crate, Item]]:
        """Yield ``(crate, item)`` pairs in crate then index order."""
        for crate in self._crates.values():
            for item in crate:
                yield crate, item

    def crate_of(self, item: Item) -> Crate:
        """Return the crate that holds ``item``.

        Raises
        ------
        KeyError
            If ``item`` does not belong to this table.
        """
        for crate in self._crates.values():
            if item.index < len(crate) and crate[item.index] is item:
                return crate
        message = f"item {item.qualified_name!r} is not part of this table"
        raise KeyError(message)

    def search(
        self,
        query: str,
        *,
        limit: int | None = None,
        kinds: Iterable[ItemKind | int] | None = None,
    ) -> list[Item]:
        """Return items whose name matches ``query``, best matches first.

        Matching is case-insensitive. Exact name matches rank before prefix
        matches, which rank before substring matches; ties are ordered by
        qualified name. A query containing ``::`` is matched against the
        qualified name instead of the bare name.

        Parameters
        ----------
        query : str
            Text to look for. Blank queries match nothing.
        limit : int | None, optional
            Maximum number of results. Defaults to None (all).
        kinds : Iterable[ItemKind | int] | None, optional
            Restrict results to these kinds. Defaults to None (any kind).

        Returns
        -------
        list[Item]
            Matching items.
        """
        needle = query.strip().lower()
        if not needle:
            return []
        allowed = {int(kind) for kind in kinds} if kinds is not None else None
        qualified = "::" in needle
        ranked: list[tuple[int, str, Item]] = []
        for _, item in self.iter_items():
            if allowed is not None and int(item.kind) not in allowed:
                continue
            haystack = (item.qualified_name if qualified else item.name).lower()
            if haystack == needle:
                rank = 0
            elif haystack.startswith(needle):
                rank = 1
            elif needle in haystack:
                rank = 2
            else:
                continue
            ranked.append((rank, item.qualified_name, item))
        ranked.sort(key=lambda entry: (entry[0], entry[1], entry[2].index))
        hits = [item for _, _, item in ranked]
        return hits if limit is None else hits[:limit]
