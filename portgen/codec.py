"""Decode the type extractor's JSON message into the type expression model."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .errors import MalformedFieldError, UnsupportedTypeShapeError
from .models import (
    DictOf,
    ListOf,
    Literal,
    ModuleDescriptor,
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

_PRIMITIVE_KINDS = {kind.value: kind for kind in PrimitiveKind}


def loads_descriptor(text: str, *, module_name: str | None = None) -> ModuleDescriptor:
    """Parse one JSON extractor message.

    `module_name` is used when the message does not name its module.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedFieldError(f"extractor message is not valid JSON: {exc}") from exc
    return descriptor_from_dict(payload, module_name=module_name)


def descriptor_from_dict(payload: Any, *, module_name: str | None = None) -> ModuleDescriptor:
    if not isinstance(payload, Mapping):
        raise MalformedFieldError("extractor message must be a JSON object")
    module_name = payload.get("moduleName", module_name)
    if not isinstance(module_name, str) or not module_name:
        raise MalformedFieldError("extractor message is missing 'moduleName'")
    path = (module_name,)

    outbound_payload = payload.get("outbound")
    if outbound_payload is None:
        outbound = Union()
    else:
        decoded = type_from_dict(outbound_payload, path + ("outbound",))
        if not isinstance(decoded, Union):
            raise UnsupportedTypeShapeError("'outbound' must be a union", path + ("outbound",))
        outbound = decoded

    flags_payload = payload.get("flags")
    flags = None if flags_payload is None else type_from_dict(flags_payload, path + ("flags",))
    return ModuleDescriptor(module_name=module_name, outbound_message_type=outbound, flags_type=flags)


def type_from_dict(payload: Any, path: Sequence[str] = ()) -> TypeExpr:
    """Decode a single type node."""
    path = tuple(path)
    if isinstance(payload, str):
        payload = {"kind": payload}
    if not isinstance(payload, Mapping):
        raise MalformedFieldError("type node must be an object or a kind name", path)
    kind = payload.get("kind")
    if not isinstance(kind, str):
        raise MalformedFieldError("type node is missing 'kind'", path)

    if kind in _PRIMITIVE_KINDS:
        return Primitive(_PRIMITIVE_KINDS[kind])
    if kind == "list":
        return ListOf(type_from_dict(_require(payload, "element", path), path + ("[]",)))
    if kind == "dict":
        return DictOf(type_from_dict(_require(payload, "value", path), path + ("{}",)))
    if kind == "literal":
        value = _require(payload, "value", path)
        if not isinstance(value, str):
            raise MalformedFieldError("literal value must be a string", path)
        return Literal(value)
    if kind == "optional":
        return Optional(type_from_dict(_require(payload, "inner", path), path))
    if kind == "record":
        return Record(fields=_decode_fields(_require(payload, "fields", path), path))
    if kind == "union":
        variants_payload = _require(payload, "variants", path)
        if not isinstance(variants_payload, list):
            raise MalformedFieldError("union variants must be a list", path)
        variants = []
        for index, item in enumerate(variants_payload):
            variant = type_from_dict(item, path + (f"#{index}",))
            if not isinstance(variant, (Record, Literal)):
                raise UnsupportedTypeShapeError(
                    f"union variant #{index} must be a record or a literal", path
                )
            variants.append(variant)
        return Union(variants=tuple(variants))
    if kind == "alias":
        name = _require_name(payload, path)
        return NamedAlias(name, type_from_dict(_require(payload, "definition", path), path + (name,)))
    if kind == "ref":
        return SelfReference(_require_name(payload, path))
    if kind == "json":
        return json_value()
    raise UnsupportedTypeShapeError(f"unknown type kind {kind!r}", path)


def dumps_descriptor(descriptor: ModuleDescriptor, *, indent: int | None = 2) -> str:
    """Serialise a descriptor back to the extractor message format."""
    payload: Dict[str, Any] = {
        "moduleName": descriptor.module_name,
        "outbound": type_to_dict(descriptor.outbound_message_type),
        "flags": None if descriptor.flags_type is None else type_to_dict(descriptor.flags_type),
    }
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def type_to_dict(expr: TypeExpr) -> Dict[str, Any]:
    if isinstance(expr, Primitive):
        return {"kind": expr.kind.value}
    if isinstance(expr, ListOf):
        return {"kind": "list", "element": type_to_dict(expr.element)}
    if isinstance(expr, DictOf):
        return {"kind": "dict", "value": type_to_dict(expr.value)}
    if isinstance(expr, Literal):
        return {"kind": "literal", "value": expr.value}
    if isinstance(expr, Optional):
        return {"kind": "optional", "inner": type_to_dict(expr.inner)}
    if isinstance(expr, Record):
        return {
            "kind": "record",
            "fields": [{"name": name, "type": type_to_dict(value)} for name, value in expr.fields],
        }
    if isinstance(expr, Union):
        return {"kind": "union", "variants": [type_to_dict(variant) for variant in expr.variants]}
    if isinstance(expr, NamedAlias):
        if expr == json_value():
            return {"kind": "json"}
        return {"kind": "alias", "name": expr.name, "definition": type_to_dict(expr.definition)}
    if isinstance(expr, SelfReference):
        return {"kind": "ref", "name": expr.name}
    raise UnsupportedTypeShapeError(f"unsupported type expression {type(expr).__name__}")


def _decode_fields(payload: Any, path: Tuple[str, ...]) -> Tuple[Tuple[str, TypeExpr], ...]:
    entries: List[Tuple[Any, Any]]
    if isinstance(payload, Mapping):
        entries = list(payload.items())
    elif isinstance(payload, list):
        entries = []
        for item in payload:
            if not isinstance(item, Mapping) or "name" not in item or "type" not in item:
                raise MalformedFieldError("record fields must be objects with 'name' and 'type'", path)
            entries.append((item["name"], item["type"]))
    else:
        raise MalformedFieldError("record fields must be a list or an object", path)

    fields: List[Tuple[str, TypeExpr]] = []
    for name, value in entries:
        if not isinstance(name, str):
            raise MalformedFieldError(f"record field name {name!r} is not a string", path)
        fields.append((name, type_from_dict(value, path + (name or "<empty>",))))
    return tuple(fields)


def _require(payload: Mapping[str, Any], key: str, path: Tuple[str, ...]) -> Any:
    if key not in payload:
        raise MalformedFieldError(f"type node of kind {payload.get('kind')!r} is missing {key!r}", path)
    return payload[key]


def _require_name(payload: Mapping[str, Any], path: Tuple[str, ...]) -> str:
    name = _require(payload, "name", path)
    if not isinstance(name, str) or not name:
        raise MalformedFieldError("alias name must be a non-empty string", path)
    return name


__all__ = [
    "descriptor_from_dict",
    "dumps_descriptor",
    "loads_descriptor",
    "type_from_dict",
    "type_to_dict",
]
