"""Item kinds used in the ``t`` column and in ``p`` entries."""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple

__all__ = [
    "ItemKind",
    "TypeRef",
    "coerce_kind",
    "kind_label",
]


class ItemKind(IntEnum):
    """rustdoc ``ItemType`` discriminants.

    Members compare equal to their raw integers, so decoded items can be
    checked against the values found in the payload.
    """

    MODULE = 0
    EXTERN_CRATE = 1
    IMPORT = 2
    STRUCT = 3
    ENUM = 4
    FUNCTION = 5
    TYPE_ALIAS = 6
    STATIC = 7
    TRAIT = 8
    IMPL = 9
    REQUIRED_METHOD = 10
    METHOD = 11
    STRUCT_FIELD = 12
    VARIANT = 13
    MACRO = 14
    PRIMITIVE = 15
    ASSOC_TYPE = 16
    CONSTANT = 17
    ASSOC_CONST = 18
    UNION = 19
    FOREIGN_TYPE = 20
    KEYWORD = 21
    OPAQUE_TYPE = 22
    ATTRIBUTE_MACRO = 23
    DERIVE_MACRO = 24
    TRAIT_ALIAS = 25

    @property
    def label(self) -> str:
        """Lower-case label as used by rustdoc URLs (``struct``, ``method``...)."""
        return _LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> ItemKind:
        """Return the member for ``label`` (a label or a member name).

        Raises
        ------
        ValueError
            If ``label`` names no kind.
        """
        needle = label.strip().lower().replace("-", "_")
        for member, text in _LABELS.items():
            if needle in {text, member.name.lower()}:
                return member
        message = f"unknown item kind {label!r}"
        raise ValueError(message)


_LABELS: dict[ItemKind, str] = {
    ItemKind.MODULE: "mod",
    ItemKind.EXTERN_CRATE: "externcrate",
    ItemKind.IMPORT: "import",
    ItemKind.STRUCT: "struct",
    ItemKind.ENUM: "enum",
    ItemKind.FUNCTION: "fn",
    ItemKind.TYPE_ALIAS: "type",
    ItemKind.STATIC: "static",
    ItemKind.TRAIT: "trait",
    ItemKind.IMPL: "impl",
    ItemKind.REQUIRED_METHOD: "tymethod",
    ItemKind.METHOD: "method",
    ItemKind.STRUCT_FIELD: "structfield",
    ItemKind.VARIANT: "variant",
    ItemKind.MACRO: "macro",
    ItemKind.PRIMITIVE: "primitive",
    ItemKind.ASSOC_TYPE: "associatedtype",
    ItemKind.CONSTANT: "constant",
    ItemKind.ASSOC_CONST: "associatedconstant",
    ItemKind.UNION: "union",
    ItemKind.FOREIGN_TYPE: "foreigntype",
    ItemKind.KEYWORD: "keyword",
    ItemKind.OPAQUE_TYPE: "opaque",
    ItemKind.ATTRIBUTE_MACRO: "attr",
    ItemKind.DERIVE_MACRO: "derive",
    ItemKind.TRAIT_ALIAS: "traitalias",
}


def coerce_kind(value: int) -> ItemKind | int:
    """Return the :class:`ItemKind` for ``value``, or ``value`` itself when unknown."""
    try:
        return ItemKind(value)
    except ValueError:
        return value


def kind_label(kind: ItemKind | int) -> str:
    """Return a printable label for a possibly unknown kind."""
    if isinstance(kind, ItemKind):
        return kind.label
    return f"kind-{kind}"


class TypeRef(NamedTuple):
    """A ``p`` entry: the kind and display name of a referenced type."""

    kind: ItemKind | int
    name: str
