"""Building a schema from a JSON introspection response."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from .deprecation import DeprecationStatus
from .schema import (
    DEFAULT_SCALARS,
    Schema,
    SchemaError,
    StoredEnum,
    StoredField,
    StoredFieldType,
    StoredInputFieldType,
    StoredInputType,
    StoredInterface,
    StoredObject,
    StoredScalar,
    StoredUnion,
    TypeId,
    TypeKind,
)
from .type_qualifiers import TypeQualifier

_NAMED_KINDS = (
    (TypeKind.UNION, "UNION"),
    (TypeKind.INTERFACE, "INTERFACE"),
    (TypeKind.OBJECT, "OBJECT"),
    (TypeKind.INPUT, "INPUT_OBJECT"),
)


def _required(mapping: Mapping, key: str, what: str) -> Any:
    value = mapping.get(key)
    if value is None:
        raise SchemaError(f"missing `{key}` on {what}")
    return value


def _schema_of(data: Any) -> Mapping:
    container = data
    if isinstance(container, Mapping) and "data" in container:
        container = container["data"]
    schema = container.get("__schema") if isinstance(container, Mapping) else None
    if not isinstance(schema, Mapping):
        raise SchemaError("could not find schema")
    return schema


def _types(schema: Mapping) -> list[Mapping]:
    types = _required(schema, "types", "schema")
    return [full_type for full_type in types if full_type is not None]


def _of_kind(types: list[Mapping], kind: str) -> Iterator[Mapping]:
    return (full_type for full_type in types if full_type.get("kind") == kind)


def _resolve_type_ref(schema: Schema, type_ref: Any) -> StoredFieldType:
    qualifiers = []
    ref = type_ref
    while True:
        if not isinstance(ref, Mapping) or ref.get("kind") is None:
            raise SchemaError(f"Non-convertible type in JSON schema: {type_ref!r}")
        inner = ref.get("ofType")
        if inner is None:
            name = ref.get("name")
            if name is None:
                raise SchemaError(f"Non-convertible type in JSON schema: {type_ref!r}")
            return StoredFieldType(schema.type_id(name), tuple(qualifiers))
        if ref["kind"] == "NON_NULL":
            qualifiers.append(TypeQualifier.REQUIRED)
        elif ref["kind"] == "LIST":
            qualifiers.append(TypeQualifier.LIST)
        else:
            raise SchemaError(f"Non-convertible type in JSON schema: {type_ref!r}")
        ref = inner


def _fields(schema: Schema, full_type: Mapping, parent: TypeId) -> list[int]:
    field_ids = []
    for definition in _required(full_type, "fields", f"type {full_type.get('name')}"):
        name = _required(definition, "name", "field")
        deprecation = (
            DeprecationStatus(True, definition.get("deprecationReason"))
            if definition.get("isDeprecated") is True
            else DeprecationStatus()
        )
        field_ids.append(
            schema.add_field(
                StoredField(
                    name=name,
                    type=_resolve_type_ref(schema, _required(definition, "type", f"field {name}")),
                    parent=parent,
                    deprecation=deprecation,
                )
            )
        )
    return field_ids


def _root(schema: Schema, root: Any) -> int | None:
    if not isinstance(root, Mapping) or root.get("name") is None:
        return None
    type_id = schema.find_type(root["name"])
    if type_id is None or type_id.kind is not TypeKind.OBJECT:
        return None
    return type_id.index


def build_schema_from_introspection(data: Any) -> Schema:
    """Build a schema from a decoded introspection response.

    Both ``{"data": {"__schema": ...}}`` and ``{"__schema": ...}`` are accepted.
    """
    source = _schema_of(data)
    types = _types(source)
    schema = Schema()

    for kind, json_kind in _NAMED_KINDS:
        for index, full_type in enumerate(_of_kind(types, json_kind)):
            schema.names[_required(full_type, "name", json_kind.lower())] = TypeId(kind, index)

    for scalar in _of_kind(types, "SCALAR"):
        name = _required(scalar, "name", "scalar")
        if name in DEFAULT_SCALARS:
            continue
        index = schema.add_scalar(StoredScalar(name))
        schema.names[name] = TypeId(TypeKind.SCALAR, index)

    for enm in _of_kind(types, "ENUM"):
        name = _required(enm, "name", "enum")
        variants = [
            _required(value, "name", f"value of enum {name}")
            for value in _required(enm, "enumValues", f"enum {name}")
        ]
        index = schema.add_enum(StoredEnum(name, variants))
        schema.names[name] = TypeId(TypeKind.ENUM, index)

    for interface in _of_kind(types, "INTERFACE"):
        interface_id = schema.type_id(interface["name"])
        field_ids = _fields(schema, interface, interface_id)
        schema.add_interface(StoredInterface(interface["name"], field_ids))

    for obj in _of_kind(types, "OBJECT"):
        object_id = schema.type_id(obj["name"])
        field_ids = _fields(schema, obj, object_id)
        interfaces = []
        for reference in obj.get("interfaces") or []:
            name = reference.get("name")
            type_id = schema.find_type(name) if name is not None else None
            if type_id is None or type_id.kind is not TypeKind.INTERFACE:
                raise SchemaError(f"Unknown interface: {name}")
            interfaces.append(type_id.index)
        schema.add_object(StoredObject(obj["name"], field_ids, interfaces))

    for union in _of_kind(types, "UNION"):
        variants = [
            schema.type_id(_required(variant, "name", f"variant of union {union['name']}"))
            for variant in _required(union, "possibleTypes", f"union {union['name']}")
        ]
        schema.add_union(StoredUnion(union["name"], variants))

    for input_type in _of_kind(types, "INPUT_OBJECT"):
        name = input_type["name"]
        fields = []
        for value in _required(input_type, "inputFields", f"input {name}"):
            field_name = _required(value, "name", f"field of input {name}")
            field_type = _resolve_type_ref(
                schema, _required(value, "type", f"input field {field_name}")
            )
            fields.append((field_name, StoredInputFieldType(field_type.id, field_type.qualifiers)))
        schema.add_input(StoredInputType(name, fields))

    schema.query_type = _root(schema, source.get("queryType"))
    schema.mutation_type = _root(schema, source.get("mutationType"))
    schema.subscription_type = _root(schema, source.get("subscriptionType"))
    return schema