"""Building a schema from a parsed GraphQL schema definition document."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TypeVar

from .deprecation import DeprecationStatus
from .schema import (
    Schema,
    SchemaError,
    StoredEnum,
    StoredField,
    StoredInputFieldType,
    StoredInputType,
    StoredInterface,
    StoredObject,
    StoredScalar,
    StoredUnion,
    TypeId,
    TypeKind,
    resolve_field_type,
)
from .syntax import (
    Directive,
    EnumTypeDefinition,
    FieldDefinition,
    InputObjectTypeDefinition,
    InterfaceTypeDefinition,
    ObjectTypeDefinition,
    ScalarTypeDefinition,
    SchemaDefinition,
    SchemaDocument,
    UnionTypeDefinition,
)

_D = TypeVar("_D")

_NAMED_KINDS = (
    (TypeKind.ENUM, EnumTypeDefinition),
    (TypeKind.OBJECT, ObjectTypeDefinition),
    (TypeKind.INTERFACE, InterfaceTypeDefinition),
    (TypeKind.UNION, UnionTypeDefinition),
    (TypeKind.INPUT, InputObjectTypeDefinition),
)


def _of(definitions: Iterable, kind: type[_D]) -> Iterator[_D]:
    return (definition for definition in definitions if isinstance(definition, kind))


def _find_deprecation(directives: list[Directive]) -> DeprecationStatus:
    for directive in directives:
        if directive.name == "deprecated":
            reason = directive.arguments.get("reason")
            return DeprecationStatus(True, reason if isinstance(reason, str) else None)
    return DeprecationStatus()


def _find_interface(schema: Schema, name: str) -> int:
    type_id = schema.type_id(name)
    if type_id.kind is not TypeKind.INTERFACE:
        raise SchemaError(f"`{name}` is not an interface")
    return type_id.index


def _fields(schema: Schema, fields: list[FieldDefinition], parent: TypeId) -> list[int]:
    return [
        schema.add_field(
            StoredField(
                name=definition.name,
                type=resolve_field_type(schema, definition.field_type),
                parent=parent,
                deprecation=_find_deprecation(definition.directives),
            )
        )
        for definition in fields
    ]


def _root(schema: Schema, name: str | None) -> int | None:
    if name is None:
        return None
    type_id = schema.find_type(name)
    if type_id is None or type_id.kind is not TypeKind.OBJECT:
        return None
    return type_id.index


def build_schema_from_sdl(document: SchemaDocument) -> Schema:
    """Build a schema from a parsed schema definition document."""
    schema = Schema()
    definitions = document.definitions

    for kind, definition_class in _NAMED_KINDS:
        for index, definition in enumerate(_of(definitions, definition_class)):
            schema.names[definition.name] = TypeId(kind, index)

    for scalar in _of(definitions, ScalarTypeDefinition):
        index = schema.add_scalar(StoredScalar(scalar.name))
        schema.names[scalar.name] = TypeId(TypeKind.SCALAR, index)

    for enm in _of(definitions, EnumTypeDefinition):
        schema.add_enum(StoredEnum(enm.name, list(enm.values)))

    for union in _of(definitions, UnionTypeDefinition):
        variants = [schema.type_id(name) for name in union.types]
        schema.add_union(StoredUnion(union.name, variants))

    for interface in _of(definitions, InterfaceTypeDefinition):
        interface_id = _find_interface(schema, interface.name)
        field_ids = _fields(schema, interface.fields, TypeId(TypeKind.INTERFACE, interface_id))
        schema.add_interface(StoredInterface(interface.name, field_ids))

    for obj in _of(definitions, ObjectTypeDefinition):
        object_id = schema.type_id(obj.name)
        if object_id.kind is not TypeKind.OBJECT:
            raise SchemaError(f"`{obj.name}` is not an object type")
        field_ids = _fields(schema, obj.fields, object_id)
        interfaces = [_find_interface(schema, name) for name in obj.implements_interfaces]
        schema.add_object(StoredObject(obj.name, field_ids, interfaces))

    for input_type in _of(definitions, InputObjectTypeDefinition):
        fields = []
        for value in input_type.fields:
            field_type = resolve_field_type(schema, value.value_type)
            fields.append((value.name, StoredInputFieldType(field_type.id, field_type.qualifiers)))
        schema.add_input(StoredInputType(input_type.name, fields))

    schema_definition = next(_of(definitions, SchemaDefinition), None)
    if schema_definition is not None:
        schema.query_type = _root(schema, schema_definition.query)
        schema.mutation_type = _root(schema, schema_definition.mutation)
        schema.subscription_type = _root(schema, schema_definition.subscription)
    else:
        schema.query_type = _root(schema, "Query")
        schema.mutation_type = _root(schema, "Mutation")
        schema.subscription_type = _root(schema, "Subscription")

    return schema