import pytest

from gqlbind.syntax import (
    EnumTypeDefinition,
    EnumValue,
    Field,
    FragmentDefinition,
    FragmentSpread,
    GraphQLSyntaxError,
    InlineFragment,
    InputObjectTypeDefinition,
    InterfaceTypeDefinition,
    ListType,
    NamedType,
    NonNullType,
    ObjectTypeDefinition,
    OperationDefinition,
    ScalarTypeDefinition,
    SchemaDefinition,
    UnionTypeDefinition,
    Variable,
    parse_query,
    parse_schema,
)


def test_named_query_with_alias_arguments_and_variables():
    doc = parse_query(
        'query Repo($owner: String!, $n: [Int] = [1, 2]) {\n'
        '  repo: repository(owner: $owner, kind: PUBLIC, name: "x\\ny") { name }\n'
        '}'
    )
    (op,) = doc.definitions
    assert isinstance(op, OperationDefinition)
    assert op.operation == "query"
    assert op.name == "Repo"
    assert not op.shorthand
    owner, n = op.variable_definitions
    assert owner.var_type == NonNullType(NamedType("String"))
    assert n.var_type == ListType(NamedType("Int"))
    assert n.default_value == [1, 2]
    (field,) = op.selection_set
    assert field.alias == "repo"
    assert field.name == "repository"
    assert field.arguments == {
        "owner": Variable("owner"),
        "kind": EnumValue("PUBLIC"),
        "name": "x\ny",
    }
    assert field.selection_set == [Field("name")]


def test_fragments_and_spreads():
    doc = parse_query(
        "fragment F on User { __typename ... on Admin { level } ...G }\n"
        "mutation M { a }\nsubscription S { b }"
    )
    fragment, mutation, subscription = doc.definitions
    assert isinstance(fragment, FragmentDefinition)
    assert fragment.type_condition == "User"
    typename, inline, spread = fragment.selection_set
    assert typename.name == "__typename"
    assert isinstance(inline, InlineFragment) and inline.type_condition == "Admin"
    assert spread == FragmentSpread("G")
    assert mutation.operation == "mutation"
    assert subscription.operation == "subscription"


def test_shorthand_selection_set():
    (op,) = parse_query("{ user { name } }").definitions
    assert op.shorthand
    assert op.name is None


def test_values_of_every_kind():
    (op,) = parse_query('query Q { f(a: 1.5, b: true, c: null, d: {k: -3}, e: """\n  hi\n""") }').definitions
    assert op.selection_set[0].arguments == {
        "a": 1.5,
        "b": True,
        "c": None,
        "d": {"k": -3},
        "e": "hi",
    }


@pytest.mark.parametrize(
    "text",
    ["", "query Q {", "query Q { f(a: ) }", "foo { a }", "query Q { f } }", "fragment on on X { a }"],
)
def test_query_syntax_errors(text):
    with pytest.raises(GraphQLSyntaxError):
        parse_query(text)


def test_schema_document():
    doc = parse_schema(
        '"""Root"""\n'
        "schema { query: Root mutation: Mut }\n"
        "scalar Date\n"
        "interface Node { id: ID! }\n"
        "type Root implements Node & Named {\n"
        '  id: ID!\n  old(x: Int = 3): String @deprecated(reason: "gone")\n}\n'
        "union Thing = | Root | Other\n"
        "enum Color { RED GREEN }\n"
        "input Filter { term: String, nested: [Filter!] }\n"
        "directive @auth(role: String) on FIELD_DEFINITION | OBJECT\n"
        "extend type Root { extra: Int }\n"
    )
    kinds = [type(d) for d in doc.definitions]
    assert kinds == [
        SchemaDefinition,
        ScalarTypeDefinition,
        InterfaceTypeDefinition,
        ObjectTypeDefinition,
        UnionTypeDefinition,
        EnumTypeDefinition,
        InputObjectTypeDefinition,
    ]
    schema_def, _, _, root, union, enum, inp = doc.definitions
    assert schema_def.query == "Root"
    assert schema_def.mutation == "Mut"
    assert schema_def.subscription is None
    assert root.implements_interfaces == ["Node", "Named"]
    old = root.fields[1]
    assert old.arguments[0].default_value == 3
    assert old.directives[0].name == "deprecated"
    assert old.directives[0].arguments == {"reason": "gone"}
    assert union.types == ["Root", "Other"]
    assert enum.values == ["RED", "GREEN"]
    assert inp.fields[1].value_type == ListType(NonNullType(NamedType("Filter")))


def test_schema_rejects_variables_and_unknown_keywords():
    with pytest.raises(GraphQLSyntaxError):
        parse_schema("type A { f(x: Int = $v): Int }")
    with pytest.raises(GraphQLSyntaxError, match="line 2"):
        parse_schema("scalar A\nwidget B")