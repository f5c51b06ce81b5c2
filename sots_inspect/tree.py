"""Value tree and typed field accessor.

A parsed document is a tree of Value nodes. Each node is exactly one of:

    Struct    mapping of unique string keys to Values
    List      ordered sequence of Values
    Bool, UInt, Int, Float, Null, Text: scalar leaves

Decoders never touch the nodes' payloads blindly. They go through
get_field() / expect(), naming the variant they require at every call site:

    seq_count = get_field(event, "sequenceCount", UInt, context="event e1").value

A missing key or a variant mismatch raises SchemaError. There is no
coercion between variants: a UInt is never read as Int, a Bool never as
UInt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, TypeVar, Union

from sots_inspect.errors import SchemaError


@dataclass(frozen=True)
class Struct:
    fields: Mapping[str, "Value"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def get(self, key: str) -> "Value | None":
        return self.fields.get(key)


@dataclass(frozen=True)
class List:
    items: tuple["Value", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class UInt:
    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"UInt cannot hold negative value {self.value}")


@dataclass(frozen=True)
class Int:
    value: int


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class Null:
    pass


@dataclass(frozen=True)
class Text:
    value: str


Value = Union[Struct, List, Bool, UInt, Int, Float, Null, Text]

V = TypeVar("V", Struct, List, Bool, UInt, Int, Float, Null, Text)


def kind_name(value: object) -> str:
    return type(value).__name__


def _prefix(context: str | None) -> str:
    return f"{context}: " if context else ""


def get_field(struct: Struct, key: str, kind: type[V], context: str | None = None) -> V:
    """Return struct[key], which must be a `kind` node.

    Without `context` the error message names only the field; with it, the
    message is prefixed by the enclosing record, e.g. "event e1: ...".
    """
    node = struct.fields.get(key)
    if node is None:
        raise SchemaError(
            f"{_prefix(context)}Field didn't contain `{key}` key.",
            key=key, expected=kind.__name__, context=context,
        )
    if not isinstance(node, kind):
        raise SchemaError(
            f"{_prefix(context)}Field entry `{key}` is not of type {kind.__name__}.",
            key=key, expected=kind.__name__, found=kind_name(node), context=context,
        )
    return node


def expect(value: Value, kind: type[V], what: str, context: str | None = None) -> V:
    """Check a bare value (list element, document root) against `kind`."""
    if not isinstance(value, kind):
        raise SchemaError(
            f"{_prefix(context)}{what} is not of type {kind.__name__}.",
            key=what, expected=kind.__name__, found=kind_name(value), context=context,
        )
    return value
