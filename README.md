# gqlbind

`gqlbind` reads a GraphQL schema, given either as SDL (`.graphql` / `.gql`)
or as a JSON introspection response, and binds GraphQL query documents to it.
Binding resolves every selected field, fragment and variable against the
schema and checks the document for problems that would stop typed client code
from being generated:

* operations must be named;
* a subscription may select only one root field;
* fields, fragments and type conditions must exist in the schema;
* fragment spreads and inline fragments must be valid where they appear;
* selections on unions and interfaces must include `__typename`.

It needs nothing beyond the Python standard library (3.10 or later).

## Parsing and binding

```python
from gqlbind.syntax import parse_schema, parse_query
from gqlbind.schema_sdl import build_schema_from_sdl
from gqlbind.resolve import resolve

schema = build_schema_from_sdl(parse_schema("""
    type Query {
      user(id: ID!): User
    }

    type User {
      id: ID!
      name: String
    }
"""))

document = parse_query("""
    query GetUser($id: ID!) {
      user(id: $id) {
        id
        name
      }
    }
""")

query = resolve(schema, document)
for operation_id, operation in query.operations():
    print(operation.name, query.operation_has_no_variables(operation_id))
```

Malformed GraphQL text raises `gqlbind.syntax.GraphQLSyntaxError`.
`resolve` raises `gqlbind.query.QueryValidationError` with a readable message
when the document does not fit the schema; failed schema lookups raise
`gqlbind.schema.SchemaError`.

A schema saved as an introspection result is built with
`gqlbind.schema_json.build_schema_from_introspection`, which takes the decoded
JSON data, either `{"data": {"__schema": ...}}` or `{"__schema": ...}`.

The resolved `gqlbind.query.Query` can be inspected further:
`all_used_types(operation_id, schema)` collects the types, input objects,
enums, custom scalars and fragments an operation reaches;
`full_path_prefix(selection_id, schema)` gives the camel-cased path to a
selection; `fragment_is_recursive(fragment_id)` tells whether a fragment
spreads itself. `gqlbind.schema.input_is_recursive_without_indirection`
tells whether an input object contains itself other than through a list.

## Loading files

`gqlbind.generate` works with files on disk and caches what it has read:

* `load_schema(path)` picks the SDL or JSON reader from the file extension
  and raises `GeneralError` for any other extension or for an SDL parse error;
* `load_query(path)` returns the query text together with its parsed document;
* `resolve_query_file(query_path, schema_path)` loads both and returns
  `(schema, query_text, resolved_query)`;
* `clear_caches()` forgets everything read so far.

A file that cannot be opened raises `MissingFileError`; other read failures
raise `ReadFileError`, of which `MissingFileError` is a subclass.

## Options

`gqlbind.options.CodegenOptions` holds the settings for one generation run:
the mode (`CodegenMode.CLI` or `CodegenMode.DERIVE`), the operation to
select, extra derives for variables and responses, the deprecation strategy,
the naming normalization, extern enums and more.

`select_operations(query, options)` in `gqlbind.generate` picks the
operations to work on. When a named operation is not found, the CLI mode
falls back to every operation, while the derive mode raises `GeneralError`
listing the defined operations. `root_operation(query, name, options)` raises
`OperationNotFound` instead, and `module_name(operation)` gives the snake_case
module name for an operation.

Naming follows `gqlbind.normalization.Normalization`:

```python
from gqlbind.normalization import Normalization

Normalization.parse("rust").operation("get_user")   # "GetUser"
Normalization.parse("none").operation("get_user")   # "get_user"
```

Deprecated fields are handled according to
`gqlbind.deprecation.DeprecationStrategy`, parsed from `"allow"`, `"deny"` or
`"warn"`; `CodegenOptions.resolved_deprecation_strategy()` falls back to warn.

## Attribute strings

Settings can also be written as a `graphql(...)` attribute list:

```python
from gqlbind.attributes import parse_attributes, extract_deprecation_strategy

attrs = parse_attributes(
    'schema_path = "schema.graphql", query_path = "q.graphql", deprecated = "DeNy"'
)
extract_deprecation_strategy(attrs)   # DeprecationStrategy.DENY
```

`deprecated` and `normalization` are matched case-insensitively; an unknown
value or a missing parameter raises `GraphqlAttributeError`.
`gqlbind.generate.build_derive_options(attrs, query_path, struct_name, visibility)`
turns such attributes into `CodegenOptions`, and
`build_query_and_schema_path(manifest_dir, attrs)` resolves the two paths
under a project directory.

## What it does not do

`gqlbind` stops at a validated, resolved query and the options for a run. It
does not write out any generated source code, and it offers no command-line
program; it is used as a library.