"""Translate type expressions into TypeScript type syntax."""

from __future__ import annotations

import json
import re
from typing import Dict, FrozenSet, Iterable, List, Sequence, Set, Tuple

from .errors import (
    AliasConflictError,
    DuplicateTagError,
    EmptyRecordFieldNameError,
    MalformedFieldError,
    UnresolvedAliasError,
    UnsupportedTypeShapeError,
)
from .models import (
    JSON_VALUE_NAME,
    DictOf,
    ListOf,
    Literal,
    NamedAlias,
    Optional,
    Primitive,
    PrimitiveKind,
    Record,
    SelfReference,
    TypeExpr,
    Union,
    json_value,
)

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

_PRIMITIVES: Dict[PrimitiveKind, str] = {
    PrimitiveKind.STRING: "string",
    PrimitiveKind.NUMBER: "number",
    PrimitiveKind.BOOLEAN: "boolean",
    PrimitiveKind.NULL: "null",
}

# Predefined type names and reserved words that cannot name a type alias.
RESERVED_TYPE_NAMES = frozenset(
    {
        "any", "bigint", "boolean", "never", "null", "number", "object", "string",
        "symbol", "undefined", "unknown", "void",
        "break", "case", "catch", "class", "const", "continue", "debugger", "default",
        "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
        "function", "if", "import", "in", "instanceof", "new", "return", "super",
        "switch", "this", "throw", "true", "try", "typeof", "var", "while", "with",
    }
)

TAG_FIELD = "tag"
NEVER = "never"
INDENT = "  "

JSON_VALUE_DECLARATION = (
    f"type {JSON_VALUE_NAME} = string | number | boolean | null | "
    f"{JSON_VALUE_NAME}[] | {{ [key: string]: {JSON_VALUE_NAME} }};"
)

Path = Tuple[str, ...]


def is_identifier(name: str) -> bool:
    return bool(_IDENTIFIER.match(name))


def is_type_name(name: str) -> bool:
    """Return True when `name` can be bound with `type name = ...`."""
    return is_identifier(name) and name not in RESERVED_TYPE_NAMES


def quote(value: str) -> str:
    """Render a TypeScript string literal."""
    return json.dumps(value, ensure_ascii=False)


class Translator:
    """Renders type expressions, hoisting nested aliases to top-level bindings.

    A translator instance accumulates the aliases it meets, so use one
    instance per declaration file. `reserved` names are bound elsewhere in
    that file and may not be used by any alias.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._reserved: FrozenSet[str] = frozenset(reserved)
        self._scopes: List[str] = []
        self._definitions: Dict[str, TypeExpr] = {}
        self._hoisted: Dict[str, str] = {}

    @property
    def hoisted_declarations(self) -> List[str]:
        """Declarations of aliases found nested inside other types, in discovery order."""
        return list(self._hoisted.values())

    def declare(self, alias: NamedAlias, path: Sequence[str] = ()) -> str:
        """Render `alias` as a top-level `type Name = ...;` binding."""
        self._register(alias, tuple(path))
        self._hoisted.pop(alias.name, None)
        return self._render_declaration(alias, tuple(path))

    def translate(self, expr: TypeExpr, path: Sequence[str] = ()) -> str:
        """Render `expr` inline."""
        return self._inline(expr, tuple(path))

    # ------------------------------------------------------------------
    # Declarations

    def _register(self, alias: NamedAlias, path: Path) -> bool:
        if not isinstance(alias.name, str) or not is_type_name(alias.name):
            raise MalformedFieldError(f"alias name {alias.name!r} is not a valid type name", path)
        if alias.name in self._reserved:
            raise AliasConflictError(
                alias.name,
                path + (alias.name,),
                f"alias {alias.name!r} clashes with a name used by the declaration wrapper",
            )
        if alias.name == JSON_VALUE_NAME:
            self._check_json_value(alias, path)
            return False
        existing = self._definitions.get(alias.name)
        if existing is None:
            self._definitions[alias.name] = alias.definition
            return True
        if existing != alias.definition:
            raise AliasConflictError(alias.name, path + (alias.name,))
        return False

    @staticmethod
    def _check_json_value(alias: NamedAlias, path: Path) -> None:
        if alias != json_value():
            raise AliasConflictError(
                JSON_VALUE_NAME,
                path + (JSON_VALUE_NAME,),
                f"alias {JSON_VALUE_NAME!r} is reserved for the recursive JSON value type",
            )

    def _render_declaration(self, alias: NamedAlias, path: Path) -> str:
        if alias.name == JSON_VALUE_NAME:
            return JSON_VALUE_DECLARATION
        self._scopes.append(alias.name)
        try:
            body = self._top_level(alias.definition, path + (alias.name,))
        finally:
            self._scopes.pop()
        if body.startswith("\n"):
            return f"type {alias.name} ={body};"
        return f"type {alias.name} = {body};"

    def _top_level(self, expr: TypeExpr, path: Path) -> str:
        if isinstance(expr, Union) and expr.variants:
            members = self._union_members(expr, path)
            return "".join(f"\n{INDENT}| {member}" for member in members)
        if isinstance(expr, Record) and expr.fields:
            fields = self._record_fields(expr, path)
            lines = "".join(f"{INDENT}{field};\n" for field in fields)
            return "{\n" + lines + "}"
        return self._inline(expr, path)

    # ------------------------------------------------------------------
    # Inline rendering

    def _inline(self, expr: TypeExpr, path: Path) -> str:
        if isinstance(expr, Primitive):
            rendered = _PRIMITIVES.get(expr.kind)
            if rendered is None:
                raise UnsupportedTypeShapeError(f"unknown primitive kind {expr.kind!r}", path)
            return rendered
        if isinstance(expr, Literal):
            if not isinstance(expr.value, str):
                raise UnsupportedTypeShapeError("literal types must hold a string value", path)
            return quote(expr.value)
        if isinstance(expr, ListOf):
            element = self._inline(expr.element, path + ("[]",))
            if _is_multi_member_union(expr.element):
                return f"({element})[]"
            return f"{element}[]"
        if isinstance(expr, DictOf):
            value = self._inline(expr.value, path + ("{}",))
            return f"{{ [key: string]: {value} }}"
        if isinstance(expr, Record):
            fields = self._record_fields(expr, path)
            if not fields:
                return "{}"
            return "{ " + "; ".join(fields) + " }"
        if isinstance(expr, Union):
            members = self._union_members(expr, path)
            return " | ".join(members) if members else NEVER
        if isinstance(expr, NamedAlias):
            return self._reference_alias(expr, path)
        if isinstance(expr, SelfReference):
            if expr.name in self._scopes:
                return expr.name
            raise UnresolvedAliasError(expr.name, path)
        if isinstance(expr, Optional):
            raise UnsupportedTypeShapeError(
                "optional types are only supported as record fields", path
            )
        raise UnsupportedTypeShapeError(f"unsupported type expression {type(expr).__name__}", path)

    def _reference_alias(self, alias: NamedAlias, path: Path) -> str:
        if alias.name == JSON_VALUE_NAME:
            self._register(alias, path)
            return JSON_VALUE_NAME
        if alias.name in self._scopes:
            self._register(alias, path)
            return alias.name
        if self._register(alias, path):
            # Reserve the slot first so the alias keeps its discovery position.
            self._hoisted[alias.name] = ""
            self._hoisted[alias.name] = self._render_declaration(alias, path)
        return alias.name

    def _record_fields(self, record: Record, path: Path) -> List[str]:
        rendered: List[str] = []
        seen: Set[str] = set()
        for name, expr in record.fields:
            if not isinstance(name, str):
                raise MalformedFieldError(f"record field name {name!r} is not a string", path)
            if not name:
                raise EmptyRecordFieldNameError(path)
            if name in seen:
                raise MalformedFieldError(f"record field {name!r} appears more than once", path)
            seen.add(name)
            key = name if is_identifier(name) else quote(name)
            field_path = path + (name,)
            if isinstance(expr, Optional):
                rendered.append(f"{key}?: {self._inline(expr.inner, field_path)}")
            else:
                rendered.append(f"{key}: {self._inline(expr, field_path)}")
        return rendered

    def _union_members(self, union: Union, path: Path) -> List[str]:
        variants = union.variants
        if not variants:
            return []
        if all(isinstance(variant, Literal) for variant in variants):
            return self._enum_members(variants, path)
        if all(isinstance(variant, Record) for variant in variants):
            return self._tagged_members(variants, path)
        raise UnsupportedTypeShapeError(
            "union variants must be all tagged records or all string literals", path
        )

    def _enum_members(self, variants: Sequence[Literal], path: Path) -> List[str]:
        seen: Set[str] = set()
        members: List[str] = []
        for variant in variants:
            if variant.value in seen:
                raise DuplicateTagError(variant.value, path)
            seen.add(variant.value)
            members.append(self._inline(variant, path))
        return members

    def _tagged_members(self, variants: Sequence[Record], path: Path) -> List[str]:
        seen: Set[str] = set()
        members: List[str] = []
        for index, variant in enumerate(variants):
            tag = variant.get(TAG_FIELD)
            if not isinstance(tag, Literal):
                raise MalformedFieldError(
                    f"union variant #{index} has no literal {TAG_FIELD!r} field", path
                )
            if tag.value in seen:
                raise DuplicateTagError(tag.value, path)
            seen.add(tag.value)
            members.append(self._inline(variant, path + (tag.value,)))
        return members


def _is_multi_member_union(expr: TypeExpr) -> bool:
    return isinstance(expr, Union) and len(expr.variants) > 1


def translate(expr: TypeExpr) -> str:
    """Render a single type expression inline with a fresh translator."""
    return Translator().translate(expr)


__all__ = [
    "JSON_VALUE_DECLARATION",
    "RESERVED_TYPE_NAMES",
    "Translator",
    "is_identifier",
    "is_type_name",
    "quote",
    "translate",
]
