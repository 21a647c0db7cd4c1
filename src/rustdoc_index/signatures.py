"""Decode the ``f`` column into readable function signatures.

An ``f`` entry is ``0`` when the item has no signature, otherwise
``[inputs]`` or ``[inputs, output]``. ``inputs`` and ``output`` are either a
single type or a list of types; a type is a reference into ``p`` or a pair
``[reference, generics]`` whose generics follow the same list rule.

Examples
--------
>>> from rustdoc_index.kinds import TypeRef
>>> types = (TypeRef(15, "str"), TypeRef(15, "bool"))
>>> render_signature(decode_signature((1, 2), types, base=1))
'(str) -> bool'
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rustdoc_index.kinds import ItemKind, TypeRef

__all__ = [
    "UNKNOWN_TYPE",
    "FunctionSignature",
    "TypeSignature",
    "decode_signature",
    "render_signature",
]

UNKNOWN_TYPE = "_"


@dataclass(frozen=True, slots=True)
class TypeSignature:
    """A resolved type with its generic arguments."""

    name: str
    kind: ItemKind | int | None = None
    generics: tuple[TypeSignature, ...] = ()

    def render(self) -> str:
        """Render as ``Name<Arg, ...>``."""
        if not self.generics:
            return self.name
        inner = ", ".join(generic.render() for generic in self.generics)
        return f"{self.name}<{inner}>"


@dataclass(frozen=True, slots=True)
class FunctionSignature:
    """Inputs and outputs of a function-like item."""

    inputs: tuple[TypeSignature, ...] = ()
    output: tuple[TypeSignature, ...] = ()


def _resolve(reference: int, types: Sequence[TypeRef], base: int) -> TypeSignature:
    position = reference - base
    if reference == 0 or not 0 <= position < len(types):
        return TypeSignature(UNKNOWN_TYPE)
    entry = types[position]
    return TypeSignature(entry.name, entry.kind)


def _decode_type(raw: object, types: Sequence[TypeRef], base: int) -> TypeSignature:
    if isinstance(raw, int):
        return _resolve(raw, types, base)
    if isinstance(raw, Sequence) and raw and isinstance(raw[0], int):
        head = _resolve(raw[0], types, base)
        generics = _decode_list(raw[1], types, base) if len(raw) > 1 else ()
        return TypeSignature(head.name, head.kind, generics)
    return TypeSignature(UNKNOWN_TYPE)


def _decode_list(raw: object, types: Sequence[TypeRef], base: int) -> tuple[TypeSignature, ...]:
    if isinstance(raw, int):
        return (_resolve(raw, types, base),)
    if isinstance(raw, Sequence) and not isinstance(raw, str):
        return tuple(_decode_type(entry, types, base) for entry in raw)
    return ()


def decode_signature(
    descriptor: object, types: Sequence[TypeRef], *, base: int = 0
) -> FunctionSignature | None:
    """Decode one ``f`` entry.

    Parameters
    ----------
    descriptor : object
        The raw or frozen ``f`` entry of an item.
    types : Sequence[TypeRef]
        The crate's ``p`` table.
    base : int, optional
        Reference base of the crate (see :attr:`Crate.reference_base`).
        Defaults to 0.

    Returns
    -------
    FunctionSignature | None
        The decoded signature, or None when the item carries none.
    """
    if descriptor is None or descriptor == 0:
        return None
    if isinstance(descriptor, int) or isinstance(descriptor, str):
        return None
    if not isinstance(descriptor, Sequence):
        return None
    inputs = _decode_list(descriptor[0], types, base) if len(descriptor) > 0 else ()
    output = _decode_list(descriptor[1], types, base) if len(descriptor) > 1 else ()
    return FunctionSignature(inputs, output)


def render_signature(signature: FunctionSignature | None) -> str:
    """Render a signature as ``(A, B) -> C``; tuples of outputs are parenthesised."""
    if signature is None:
        return ""
    text = "(" + ", ".join(arg.render() for arg in signature.inputs) + ")"
    if not signature.output:
        return text
    if len(signature.output) == 1:
        return f"{text} -> {signature.output[0].render()}"
    outputs = ", ".join(out.render() for out in signature.output)
    return f"{text} -> ({outputs})"
