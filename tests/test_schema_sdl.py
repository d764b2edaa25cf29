import pytest

from gqlbind.schema import (
    DEFAULT_SCALARS,
    SchemaError,
    TypeKind,
    input_is_recursive_without_indirection,
)
from gqlbind.schema_sdl import build_schema_from_sdl
from gqlbind.syntax import parse_schema
from gqlbind.type_qualifiers import TypeQualifier

SDL = """
scalar DateTime
enum Color { RED GREEN }
interface Node { id: ID! }
type Query implements Node {
  id: ID!
  node: Node
  color: Color!
  tags: [String!]!
  old: String @deprecated(reason: "gone")
  older: String @deprecated
  when: DateTime
}
type Post implements Node { id: ID! title: String }
union SearchResult = Post | Query
input Filter { color: Color nested: Filter many: [Filter!] }
input Flat { name: String }
type Mutation { ping: Boolean }
"""


@pytest.fixture
def schema():
    return build_schema_from_sdl(parse_schema(SDL))


def test_default_roots_by_name(schema):
    assert schema.get_object(schema.require_query_type()).name == "Query"
    assert schema.get_object(schema.mutation_type).name == "Mutation"
    assert schema.subscription_type is None


def test_schema_definition_overrides_roots():
    doc = parse_schema(
        "schema { query: Root subscription: Events } type Root { a: Int } type Events { b: Int }"
    )
    schema = build_schema_from_sdl(doc)
    assert schema.get_object(schema.query_type).name == "Root"
    assert schema.get_object(schema.subscription_type).name == "Events"
    assert schema.mutation_type is None


def test_custom_scalar_registered_after_defaults(schema):
    names = [scalar.name for scalar in schema.scalars]
    assert names == [*DEFAULT_SCALARS, "DateTime"]
    assert schema.type_id("DateTime").kind is TypeKind.SCALAR


def test_names_resolve_to_stored_types(schema):
    for name in ("Color", "Node", "Query", "Post", "SearchResult", "Filter", "Mutation"):
        assert schema.type_id(name).name(schema) == name


def test_field_types_and_qualifiers(schema):
    query = schema.get_object(schema.query_type)
    _, tags = query.get_field_by_name("tags", schema)
    assert tags.type.id == schema.type_id("String")
    assert tags.type.qualifiers == (
        TypeQualifier.REQUIRED,
        TypeQualifier.LIST,
        TypeQualifier.REQUIRED,
    )
    _, node = query.get_field_by_name("node", schema)
    assert node.type.qualifiers == ()
    assert node.parent == schema.type_id("Query")


def test_deprecation(schema):
    query = schema.get_object(schema.query_type)
    _, old = query.get_field_by_name("old", schema)
    assert old.deprecation.deprecated and old.deprecation.reason == "gone"
    _, older = query.get_field_by_name("older", schema)
    assert older.deprecation.deprecated and older.deprecation.reason is None
    _, current = query.get_field_by_name("id", schema)
    assert not current.deprecation.deprecated


def test_interfaces_and_unions(schema):
    node_index = schema.type_id("Node").index
    post = schema.get_object(schema.type_id("Post").index)
    assert post.implements_interfaces == [node_index]
    assert schema.get_interface(node_index).get_field_by_name("id", schema)[1].name == "id"
    union = schema.get_union(schema.type_id("SearchResult").index)
    assert union.variants == [schema.type_id("Post"), schema.type_id("Query")]


def test_enum_values(schema):
    assert schema.get_enum(schema.type_id("Color").index).variants == ["RED", "GREEN"]


def test_input_recursion(schema):
    filter_id = schema.type_id("Filter").index
    flat_id = schema.type_id("Flat").index
    assert input_is_recursive_without_indirection(filter_id, schema)
    assert not input_is_recursive_without_indirection(flat_id, schema)
    many = dict(schema.get_input(filter_id).fields)["many"]
    assert many.is_indirected() and many.is_optional()


def test_unknown_field_type_raises():
    with pytest.raises(SchemaError):
        build_schema_from_sdl(parse_schema("type Query { a: Missing }"))


def test_implementing_non_interface_raises():
    with pytest.raises(SchemaError):
        build_schema_from_sdl(parse_schema("type Other { a: Int } type Query implements Other { a: Int }"))


def test_unknown_union_member_raises():
    with pytest.raises(SchemaError):
        build_schema_from_sdl(parse_schema("type Query { a: Int } union U = Query | Nope"))