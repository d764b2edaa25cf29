import pytest

from gqlbind.schema import (
    DEFAULT_SCALARS,
    Schema,
    SchemaError,
    StoredField,
    StoredFieldType,
    StoredInputFieldType,
    StoredInputType,
    StoredInterface,
    StoredObject,
    StoredUnion,
    TypeId,
    TypeKind,
    input_is_recursive_without_indirection,
    resolve_field_type,
)
from gqlbind.syntax import ListType, NamedType, NonNullType
from gqlbind.type_qualifiers import TypeQualifier

R, L = TypeQualifier.REQUIRED, TypeQualifier.LIST


def _add_input(schema, name, fields):
    index = schema.add_input(StoredInputType(name, fields))
    schema.names[name] = TypeId(TypeKind.INPUT, index)
    return index


def test_default_scalars_are_registered():
    schema = Schema()
    for name in DEFAULT_SCALARS:
        type_id = schema.find_type(name)
        assert type_id.kind is TypeKind.SCALAR
        assert type_id.name(schema) == name


def test_unknown_lookups_raise():
    schema = Schema()
    assert schema.find_type("Nope") is None
    with pytest.raises(SchemaError):
        schema.type_id("Nope")
    with pytest.raises(SchemaError):
        schema.get_object(0)
    with pytest.raises(SchemaError):
        schema.require_query_type()


def test_resolve_field_type_orders_qualifiers_outer_to_inner():
    schema = Schema()
    outer_required = resolve_field_type(schema, NonNullType(ListType(NamedType("Int"))))
    inner_required = resolve_field_type(schema, ListType(NonNullType(NamedType("Int"))))
    assert outer_required.qualifiers == (R, L)
    assert inner_required.qualifiers == (L, R)
    assert outer_required.id == schema.type_id("Int")


def test_input_field_type_flags():
    string = Schema().type_id("String")
    assert StoredInputFieldType(string).is_optional()
    assert not StoredInputFieldType(string, (R,)).is_optional()
    assert StoredInputFieldType(string, (R, L, R)).is_indirected()
    assert not StoredInputFieldType(string, (R,)).is_indirected()


def test_object_and_interface_field_lookup():
    schema = Schema()
    obj = schema.add_object(StoredObject("User"))
    parent = TypeId(TypeKind.OBJECT, obj)
    fid = schema.add_field(StoredField("name", StoredFieldType(schema.type_id("String")), parent))
    schema.get_object(obj).fields.append(fid)
    schema.names["User"] = parent
    found = schema.get_object(obj).get_field_by_name("name", schema)
    assert found == (fid, schema.get_field(fid))
    assert schema.get_object(obj).get_field_by_name("missing", schema) is None
    iface = StoredInterface("Named", [fid])
    assert iface.get_field_by_name("name", schema)[0] == fid
    assert parent.name(schema) == "User"
    assert list(schema.objects()) == [(obj, schema.get_object(obj))]


def test_recursion_detection():
    schema = Schema()
    self_ref = TypeId(TypeKind.INPUT, 0)
    _add_input(schema, "Direct", [("me", StoredInputFieldType(self_ref))])
    listed = TypeId(TypeKind.INPUT, 1)
    _add_input(schema, "Listed", [("me", StoredInputFieldType(listed, (L,)))])
    a, b = TypeId(TypeKind.INPUT, 2), TypeId(TypeKind.INPUT, 3)
    _add_input(schema, "A", [("b", StoredInputFieldType(b))])
    _add_input(schema, "B", [("a", StoredInputFieldType(a))])
    assert input_is_recursive_without_indirection(0, schema)
    assert not input_is_recursive_without_indirection(1, schema)
    assert input_is_recursive_without_indirection(2, schema)


def test_used_input_ids_recursive_collects_transitively():
    schema = Schema()
    string = schema.type_id("String")
    inner = _add_input(schema, "Inner", [("s", StoredInputFieldType(string))])
    inner_id = TypeId(TypeKind.INPUT, inner)
    outer = _add_input(schema, "Outer", [("i", StoredInputFieldType(inner_id))])
    types = set()
    schema.get_input(outer).used_input_ids_recursive(types, schema)
    assert types == {inner_id, string}


def test_union_name_and_equality():
    schema = Schema()
    index = schema.add_union(StoredUnion("Thing"))
    assert TypeId(TypeKind.UNION, index).name(schema) == "Thing"
    other = Schema()
    assert Schema() == other
    other.add_union(StoredUnion("Thing"))
    assert schema == other
    assert not (Schema() == other)