"""Intermediate representation of a GraphQL schema used during code generation."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field

from .deprecation import DeprecationStatus
from .syntax import ListType, NamedType, NonNullType, TypeRef
from .type_qualifiers import TypeQualifier

DEFAULT_SCALARS = ("ID", "String", "Int", "Float", "Boolean")


class SchemaError(LookupError):
    """Raised when a schema lookup fails."""


class TypeKind(enum.Enum):
    OBJECT = "object"
    SCALAR = "scalar"
    INTERFACE = "interface"
    UNION = "union"
    ENUM = "enum"
    INPUT = "input"


@dataclass(frozen=True)
class TypeId:
    """A reference to a type stored in a schema: its kind and index."""

    kind: TypeKind
    index: int

    def name(self, schema: Schema) -> str:
        getters = {
            TypeKind.OBJECT: schema.get_object,
            TypeKind.SCALAR: schema.get_scalar,
            TypeKind.INTERFACE: schema.get_interface,
            TypeKind.UNION: schema.get_union,
            TypeKind.ENUM: schema.get_enum,
            TypeKind.INPUT: schema.get_input,
        }
        return getters[self.kind](self.index).name


@dataclass(frozen=True)
class StoredFieldType:
    id: TypeId
    qualifiers: tuple[TypeQualifier, ...] = ()


@dataclass
class StoredField:
    name: str
    type: StoredFieldType
    parent: TypeId
    deprecation: DeprecationStatus = field(default_factory=DeprecationStatus)


def _field_by_name(field_ids: list[int], name: str, schema: Schema):
    for field_id in field_ids:
        stored = schema.get_field(field_id)
        if stored.name == name:
            return field_id, stored
    return None


@dataclass
class StoredObject:
    name: str
    fields: list[int] = field(default_factory=list)
    implements_interfaces: list[int] = field(default_factory=list)

    def get_field_by_name(self, name: str, schema: Schema) -> tuple[int, StoredField] | None:
        return _field_by_name(self.fields, name, schema)


@dataclass
class StoredInterface:
    name: str
    fields: list[int] = field(default_factory=list)

    def get_field_by_name(self, name: str, schema: Schema) -> tuple[int, StoredField] | None:
        return _field_by_name(self.fields, name, schema)


@dataclass
class StoredUnion:
    name: str
    variants: list[TypeId] = field(default_factory=list)


@dataclass
class StoredScalar:
    name: str


@dataclass
class StoredEnum:
    name: str
    variants: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StoredInputFieldType:
    id: TypeId
    qualifiers: tuple[TypeQualifier, ...] = ()

    def is_indirected(self) -> bool:
        """Whether the type is wrapped in a list at any level."""
        return TypeQualifier.LIST in self.qualifiers

    def is_optional(self) -> bool:
        return not self.qualifiers or not self.qualifiers[0].is_required()


@dataclass
class StoredInputType:
    name: str
    fields: list[tuple[str, StoredInputFieldType]] = field(default_factory=list)

    def used_input_ids_recursive(self, types: set[TypeId], schema: Schema) -> None:
        """Add the inputs, enums and scalars this input refers to, transitively, to ``types``."""
        for _name, field_type in self.fields:
            type_id = field_type.id
            if type_id.kind is TypeKind.INPUT:
                if type_id not in types:
                    types.add(type_id)
                    schema.get_input(type_id.index).used_input_ids_recursive(types, schema)
            elif type_id.kind in (TypeKind.ENUM, TypeKind.SCALAR):
                types.add(type_id)

    def _contains_without_indirection(
        self, input_index: int, schema: Schema, visited: set[str]
    ) -> bool:
        visited.add(self.name)
        for _name, field_type in self.fields:
            if field_type.is_indirected() or field_type.id.kind is not TypeKind.INPUT:
                continue
            if field_type.id.index == input_index:
                return True
            other = schema.get_input(field_type.id.index)
            if other.name in visited:
                continue
            if other._contains_without_indirection(input_index, schema, visited):
                return True
        return False


class Schema:
    """Stored types of a schema, addressed by index, plus a name table."""

    def __init__(self) -> None:
        self.objects_list: list[StoredObject] = []
        self.fields: list[StoredField] = []
        self.interfaces: list[StoredInterface] = []
        self.unions: list[StoredUnion] = []
        self.scalars: list[StoredScalar] = []
        self.enums: list[StoredEnum] = []
        self.inputs_list: list[StoredInputType] = []
        self.names: dict[str, TypeId] = {}
        self.query_type: int | None = None
        self.mutation_type: int | None = None
        self.subscription_type: int | None = None
        for name in DEFAULT_SCALARS:
            index = self.add_scalar(StoredScalar(name))
            self.names[name] = TypeId(TypeKind.SCALAR, index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def _push(items: list, item) -> int:
        items.append(item)
        return len(items) - 1

    def add_object(self, obj: StoredObject) -> int:
        return self._push(self.objects_list, obj)

    def add_interface(self, interface: StoredInterface) -> int:
        return self._push(self.interfaces, interface)

    def add_scalar(self, scalar: StoredScalar) -> int:
        return self._push(self.scalars, scalar)

    def add_enum(self, enm: StoredEnum) -> int:
        return self._push(self.enums, enm)

    def add_field(self, field: StoredField) -> int:
        return self._push(self.fields, field)

    def add_union(self, union: StoredUnion) -> int:
        return self._push(self.unions, union)

    def add_input(self, input_type: StoredInputType) -> int:
        return self._push(self.inputs_list, input_type)

    def require_query_type(self) -> int:
        if self.query_type is None:
            raise SchemaError("Query operation type must be defined")
        return self.query_type

    @staticmethod
    def _get(items: list, index: int, what: str):
        if not 0 <= index < len(items):
            raise SchemaError(f"no {what} with index {index}")
        return items[index]

    def get_object(self, object_id: int) -> StoredObject:
        return self._get(self.objects_list, object_id, "object")

    def get_interface(self, interface_id: int) -> StoredInterface:
        return self._get(self.interfaces, interface_id, "interface")

    def get_input(self, input_id: int) -> StoredInputType:
        return self._get(self.inputs_list, input_id, "input")

    def get_field(self, field_id: int) -> StoredField:
        return self._get(self.fields, field_id, "field")

    def get_enum(self, enum_id: int) -> StoredEnum:
        return self._get(self.enums, enum_id, "enum")

    def get_scalar(self, scalar_id: int) -> StoredScalar:
        return self._get(self.scalars, scalar_id, "scalar")

    def get_union(self, union_id: int) -> StoredUnion:
        return self._get(self.unions, union_id, "union")

    def find_type(self, name: str) -> TypeId | None:
        return self.names.get(name)

    def type_id(self, name: str) -> TypeId:
        """The id of the named type; raises SchemaError when it is unknown."""
        try:
            return self.names[name]
        except KeyError:
            raise SchemaError(f"failed to resolve type `{name}`") from None

    def objects(self) -> Iterator[tuple[int, StoredObject]]:
        return enumerate(self.objects_list)

    def inputs(self) -> Iterator[tuple[int, StoredInputType]]:
        return enumerate(self.inputs_list)


def input_is_recursive_without_indirection(input_id: int, schema: Schema) -> bool:
    """Whether the input contains itself through fields that are not lists."""
    return schema.get_input(input_id)._contains_without_indirection(input_id, schema, set())


def resolve_field_type(schema: Schema, type_ref: TypeRef) -> StoredFieldType:
    """Turn a syntax type reference into a stored type with outer-to-inner qualifiers."""
    qualifiers = []
    while not isinstance(type_ref, NamedType):
        if isinstance(type_ref, ListType):
            qualifiers.append(TypeQualifier.LIST)
        elif isinstance(type_ref, NonNullType):
            qualifiers.append(TypeQualifier.REQUIRED)
        else:
            raise TypeError(f"not a type reference: {type_ref!r}")
        type_ref = type_ref.of_type
    return StoredFieldType(schema.type_id(type_ref.name), tuple(qualifiers))