"""Binding a parsed query document to a schema, with validation."""

from __future__ import annotations

from .query import (
    FragmentSpreadSelection,
    InlineFragmentSelection,
    OperationType,
    ParentKind,
    Query,
    QueryValidationError,
    ResolvedFragment,
    ResolvedOperation,
    ResolvedVariable,
    SelectedField,
    SelectionParent,
    TypenameSelection,
)
from .schema import Schema, StoredInterface, StoredObject, TypeId, TypeKind, resolve_field_type
from .syntax import (
    Field,
    FragmentDefinition,
    FragmentSpread,
    InlineFragment,
    OperationDefinition,
    QueryDocument,
    VariableDefinition,
)

TYPENAME_FIELD = "__typename"

MULTIPLE_SUBSCRIPTION_FIELDS_ERROR = """
Multiple-field queries on the root subscription field are forbidden by the spec.
"""

SELECTION_SET_AT_ROOT = """
Operations in queries must be named.

Instead of this:

{
  user {
    name
    repositories {
      name
      commits
    }
  }
}

Write this:

query UserRepositories {
  user {
    name
    repositories {
      name
      commits
    }
  }
}
"""

_NO_MUTATION = "Query contains a mutation operation, but the schema has no mutation type."
_NO_SUBSCRIPTION = (
    "Query contains a subscription operation, but the schema has no subscription type."
)


def _operation_root(schema: Schema, operation: OperationDefinition) -> int:
    if operation.operation == "mutation":
        if schema.mutation_type is None:
            raise QueryValidationError(_NO_MUTATION)
        return schema.mutation_type
    if operation.operation == "subscription":
        if schema.subscription_type is None:
            raise QueryValidationError(_NO_SUBSCRIPTION)
        return schema.subscription_type
    return schema.require_query_type()


def _create_roots(query: Query, document: QueryDocument, schema: Schema) -> None:
    for definition in document.definitions:
        if isinstance(definition, FragmentDefinition):
            on = schema.find_type(definition.type_condition)
            if on is None:
                raise QueryValidationError(
                    f"Could not find type {definition.type_condition} "
                    f"for fragment {definition.name} in schema."
                )
            query.fragments.append(ResolvedFragment(definition.name, on))
            continue
        if definition.shorthand:
            raise QueryValidationError(SELECTION_SET_AT_ROOT)
        object_id = _operation_root(schema, definition)
        if definition.operation == "subscription" and len(definition.selection_set) != 1:
            raise QueryValidationError(MULTIPLE_SUBSCRIPTION_FIELDS_ERROR)
        if definition.name is None:
            raise QueryValidationError(f"{definition.operation} without name")
        query.operation_list.append(
            ResolvedOperation(definition.name, OperationType(definition.operation), object_id)
        )


def _spread(query: Query, spread: FragmentSpread, parent: SelectionParent) -> None:
    found = query.find_fragment(spread.fragment_name)
    if found is None:
        raise QueryValidationError(
            f"Could not find fragment `{spread.fragment_name}` referenced by fragment spread."
        )
    selection_id = query.push_selection(FragmentSpreadSelection(found[0]), parent)
    query.add_to_selection_set(parent, selection_id)


def _typename(query: Query, parent: SelectionParent) -> None:
    selection_id = query.push_selection(TypenameSelection(), parent)
    query.add_to_selection_set(parent, selection_id)


def _resolve_union_selection(
    query: Query, items: list, parent: SelectionParent, schema: Schema
) -> None:
    for item in items:
        if isinstance(item, Field):
            if item.name != TYPENAME_FIELD:
                raise QueryValidationError(
                    f"Invalid field selection on union field ({parent!r})"
                )
            _typename(query, parent)
        elif isinstance(item, InlineFragment):
            selection_id = _resolve_inline_fragment(query, schema, item, parent)
            query.add_to_selection_set(parent, selection_id)
        else:
            _spread(query, item, parent)


def _resolve_object_selection(
    query: Query,
    obj: StoredObject | StoredInterface,
    items: list,
    parent: SelectionParent,
    schema: Schema,
) -> None:
    for item in items:
        if isinstance(item, Field):
            if item.name == TYPENAME_FIELD:
                _typename(query, parent)
                continue
            found = obj.get_field_by_name(item.name, schema)
            if found is None:
                raise QueryValidationError(f"No field named {item.name} on {obj.name}")
            field_id, schema_field = found
            selection_id = query.push_selection(SelectedField(item.alias, field_id), parent)
            _resolve_selection(
                query,
                schema_field.type.id,
                item.selection_set,
                SelectionParent(ParentKind.FIELD, selection_id),
                schema,
            )
            query.add_to_selection_set(parent, selection_id)
        elif isinstance(item, InlineFragment):
            selection_id = _resolve_inline_fragment(query, schema, item, parent)
            query.add_to_selection_set(parent, selection_id)
        else:
            _spread(query, item, parent)


def _resolve_selection(
    query: Query, on: TypeId, items: list, parent: SelectionParent, schema: Schema
) -> None:
    if on.kind is TypeKind.OBJECT:
        _resolve_object_selection(query, schema.get_object(on.index), items, parent, schema)
    elif on.kind is TypeKind.INTERFACE:
        _resolve_object_selection(query, schema.get_interface(on.index), items, parent, schema)
    elif on.kind is TypeKind.UNION:
        _resolve_union_selection(query, items, parent, schema)
    elif items:
        raise QueryValidationError(
            f"Selection set on non-object, non-interface type. ({on!r})"
        )


def _resolve_inline_fragment(
    query: Query, schema: Schema, fragment: InlineFragment, parent: SelectionParent
) -> int:
    if fragment.type_condition is None:
        raise QueryValidationError("missing type condition on inline fragment")
    type_id = schema.find_type(fragment.type_condition)
    if type_id is None:
        raise QueryValidationError(
            f"Could not find type `{fragment.type_condition}` referenced by inline fragment."
        )
    selection_id = query.push_selection(InlineFragmentSelection(type_id), parent)
    _resolve_selection(
        query,
        type_id,
        fragment.selection_set,
        SelectionParent(ParentKind.INLINE_FRAGMENT, selection_id),
        schema,
    )
    return selection_id


def _resolve_fragment(query: Query, schema: Schema, definition: FragmentDefinition) -> None:
    on = schema.find_type(definition.type_condition)
    if on is None:
        raise QueryValidationError(
            f"Could not find type `{definition.type_condition}` "
            f"referenced by fragment `{definition.name}`"
        )
    found = query.find_fragment(definition.name)
    if found is None:
        raise QueryValidationError(f"Could not find fragment `{definition.name}`.")
    _resolve_selection(
        query,
        on,
        definition.selection_set,
        SelectionParent(ParentKind.FRAGMENT, found[0]),
        schema,
    )


def _resolve_variables(
    query: Query, variables: list[VariableDefinition], schema: Schema, operation_id: int
) -> None:
    for variable in variables:
        query.variables.append(
            ResolvedVariable(
                operation_id=operation_id,
                name=variable.name,
                type=resolve_field_type(schema, variable.var_type),
                default=variable.default_value,
            )
        )


def _resolve_operation(query: Query, schema: Schema, operation: OperationDefinition) -> None:
    root = schema.get_object(_operation_root(schema, operation))
    found = query.find_operation(operation.name)
    if found is None:
        raise QueryValidationError(f"Could not find operation `{operation.name}`.")
    operation_id = found[0]
    _resolve_variables(query, operation.variable_definitions, schema, operation_id)
    _resolve_object_selection(
        query,
        root,
        operation.selection_set,
        SelectionParent(ParentKind.OPERATION, operation_id),
        schema,
    )


def resolve(schema: Schema, document: QueryDocument) -> Query:
    """Bind every operation and fragment of the document to the schema and validate them."""
    query = Query()
    _create_roots(query, document, schema)

    for definition in document.definitions:
        if isinstance(definition, FragmentDefinition):
            _resolve_fragment(query, schema, definition)
        else:
            _resolve_operation(query, schema, definition)

    validate_typename_presence(query, schema)
    for selection_id, _selection in query.selections():
        validate_type_conditions(selection_id, query, schema)
    return query


def _selection_set_contains_typename(
    parent_type_id: TypeId, selection_set: list[int], query: Query
) -> bool:
    for _id, selection in query.walk_selection_set(selection_set):
        if isinstance(selection, TypenameSelection):
            return True
        if isinstance(selection, FragmentSpreadSelection):
            fragment = query.get_fragment(selection.fragment_id)
            if fragment.on == parent_type_id and _selection_set_contains_typename(
                fragment.on, fragment.selection_set, query
            ):
                return True
    return False


_ABSTRACT_KINDS = (TypeKind.INTERFACE, TypeKind.UNION)


def validate_typename_presence(query: Query, schema: Schema) -> None:
    """Require ``__typename`` wherever an interface or union is selected."""
    for fragment in query.fragments:
        if fragment.on.kind not in _ABSTRACT_KINDS:
            continue
        if not _selection_set_contains_typename(fragment.on, fragment.selection_set, query):
            raise QueryValidationError(
                f"The `{fragment.name}` fragment uses `{fragment.on.name(schema)}` but does "
                "not select `__typename` on it. Code cannot be generated for it. "
                "Please add `__typename` to the selection."
            )

    for selection_id, selection in query.selections():
        if not isinstance(selection, SelectedField):
            continue
        type_id = schema.get_field(selection.field_id).type.id
        if type_id.kind not in _ABSTRACT_KINDS:
            continue
        if not _selection_set_contains_typename(type_id, selection.selection_set, query):
            raise QueryValidationError(
                f"The query uses `{query.full_path_prefix(selection_id, schema)}` at "
                f"`{type_id.name(schema)}` but does not select `__typename` on it. "
                "Code cannot be generated for it. Please add `__typename` to the selection."
            )


def validate_type_conditions(selection_id: int, query: Query, schema: Schema) -> None:
    """Check that the type condition of a fragment spread or inline fragment fits its context."""
    selection = query.get_selection(selection_id)
    if isinstance(selection, FragmentSpreadSelection):
        selected_type = query.get_fragment(selection.fragment_id).on
    elif isinstance(selection, InlineFragmentSelection):
        selected_type = selection.type_id
    else:
        return

    parent = query.parent_of(selection_id)
    if parent is None:
        raise QueryValidationError(f"Could not find the parent of selection {selection_id}")
    parent_type = query.parent_schema_type_id(parent, schema)
    if parent_type == selected_type:
        return

    if parent_type.kind is TypeKind.UNION:
        union = schema.get_union(parent_type.index)
        if selected_type not in union.variants:
            raise QueryValidationError(
                f"The spread {union.name}... on {selected_type.name(schema)} is not valid."
            )
    elif parent_type.kind is TypeKind.INTERFACE:
        implementors = (
            TypeId(TypeKind.OBJECT, index)
            for index, obj in schema.objects()
            if parent_type.index in obj.implements_interfaces
        )
        if selected_type not in implementors:
            raise QueryValidationError(
                f"The spread {parent_type.name(schema)}... on "
                f"{selected_type.name(schema)} is not valid."
            )