"""Type expression model shared by the extractor codec and the translator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Mapping, Tuple

JSON_VALUE_NAME = "JsonValue"


class PrimitiveKind(str, Enum):
    """Primitive kinds understood by the translator."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


@dataclass(frozen=True)
class Primitive:
    kind: PrimitiveKind


@dataclass(frozen=True)
class ListOf:
    element: "TypeExpr"


@dataclass(frozen=True)
class DictOf:
    """String-keyed map, as Elm encodes `Dict String v`."""

    value: "TypeExpr"


@dataclass(frozen=True)
class Literal:
    value: str


@dataclass(frozen=True)
class Optional:
    """A record field whose key may be omitted."""

    inner: "TypeExpr"


@dataclass(frozen=True)
class Record:
    """Fixed-shape object with fields kept in declaration order."""

    fields: Tuple[Tuple[str, "TypeExpr"], ...] = ()

    @classmethod
    def of(cls, fields: Mapping[str, "TypeExpr"] | None = None, /, **kwargs: "TypeExpr") -> "Record":
        items = list((fields or {}).items()) + list(kwargs.items())
        return cls(fields=tuple(items))

    def field_names(self) -> list[str]:
        return [name for name, _ in self.fields]

    def get(self, name: str) -> "TypeExpr | None":
        for field_name, expr in self.fields:
            if field_name == name:
                return expr
        return None


@dataclass(frozen=True)
class Union:
    """Ordered disjunction of tagged records or of string literals."""

    variants: Tuple["Record | Literal", ...] = ()

    @classmethod
    def of(cls, *variants: "Record | Literal") -> "Union":
        return cls(variants=tuple(variants))

    @classmethod
    def tagged(cls, *variants: Tuple[str, Mapping[str, "TypeExpr"]]) -> "Union":
        """Build a tagged union from `(tag, fields)` pairs."""
        records = []
        for tag, fields in variants:
            items: list[Tuple[str, TypeExpr]] = [("tag", Literal(tag))]
            items.extend(fields.items())
            records.append(Record(fields=tuple(items)))
        return cls(variants=tuple(records))

    @classmethod
    def enum(cls, *values: str) -> "Union":
        return cls(variants=tuple(Literal(value) for value in values))


@dataclass(frozen=True)
class NamedAlias:
    name: str
    definition: "TypeExpr"


@dataclass(frozen=True)
class SelfReference:
    name: str


TypeExpr = Primitive | ListOf | DictOf | Literal | Optional | Record | Union | NamedAlias | SelfReference

STRING = Primitive(PrimitiveKind.STRING)
NUMBER = Primitive(PrimitiveKind.NUMBER)
BOOLEAN = Primitive(PrimitiveKind.BOOLEAN)
NULL = Primitive(PrimitiveKind.NULL)


def json_value() -> NamedAlias:
    """Return the canonical recursive JSON value alias."""
    return NamedAlias(JSON_VALUE_NAME, SelfReference(JSON_VALUE_NAME))


@dataclass(frozen=True)
class ModuleDescriptor:
    """The extractor's single output message for one Elm module."""

    module_name: str
    outbound_message_type: Union = field(default_factory=Union)
    flags_type: TypeExpr | None = None

    @property
    def module_path(self) -> list[str]:
        return self.module_name.split(".")


def children(expr: TypeExpr) -> Iterator[TypeExpr]:
    """Yield the direct sub-expressions of `expr` in declaration order."""
    if isinstance(expr, ListOf):
        yield expr.element
    elif isinstance(expr, DictOf):
        yield expr.value
    elif isinstance(expr, Optional):
        yield expr.inner
    elif isinstance(expr, Record):
        for _, value in expr.fields:
            yield value
    elif isinstance(expr, Union):
        yield from expr.variants
    elif isinstance(expr, NamedAlias):
        yield expr.definition


def walk(expr: TypeExpr) -> Iterator[TypeExpr]:
    """Depth-first pre-order traversal of a type expression."""
    stack = [expr]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(children(current))))


def references_alias(expr: TypeExpr, name: str) -> bool:
    """Return True when `expr` is or contains an alias (or reference) called `name`."""
    for node in walk(expr):
        if isinstance(node, (NamedAlias, SelfReference)) and node.name == name:
            return True
    return False


__all__ = [
    "BOOLEAN",
    "DictOf",
    "JSON_VALUE_NAME",
    "ListOf",
    "Literal",
    "ModuleDescriptor",
    "NULL",
    "NUMBER",
    "NamedAlias",
    "Optional",
    "Primitive",
    "PrimitiveKind",
    "Record",
    "STRING",
    "SelfReference",
    "TypeExpr",
    "Union",
    "children",
    "json_value",
    "references_alias",
    "walk",
]
