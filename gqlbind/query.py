"""A query document bound to a schema: operations, fragments, selections and variables."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Union

from .normalization import Normalization, to_upper_camel_case
from .schema import (
    DEFAULT_SCALARS,
    Schema,
    StoredEnum,
    StoredFieldType,
    StoredInputType,
    StoredScalar,
    TypeId,
    TypeKind,
)


class QueryValidationError(ValueError):
    """Raised when a query does not fit the schema it is checked against."""


class ParentKind(enum.Enum):
    """What a selection hangs from."""

    FIELD = "field"
    INLINE_FRAGMENT = "inline_fragment"
    FRAGMENT = "fragment"
    OPERATION = "operation"


@dataclass(frozen=True)
class SelectionParent:
    """The parent of a selection: a kind and the id of a selection, fragment or operation."""

    kind: ParentKind
    id: int


@dataclass
class SelectedField:
    alias: str | None
    field_id: int
    selection_set: list[int] = field(default_factory=list)


@dataclass
class InlineFragmentSelection:
    type_id: TypeId
    selection_set: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class FragmentSpreadSelection:
    fragment_id: int


@dataclass(frozen=True)
class TypenameSelection:
    """A ``__typename`` selection."""


Selection = Union[SelectedField, InlineFragmentSelection, FragmentSpreadSelection, TypenameSelection]


class OperationType(enum.Enum):
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


@dataclass
class ResolvedOperation:
    name: str
    operation_type: OperationType
    object_id: int
    selection_set: list[int] = field(default_factory=list)


@dataclass
class ResolvedFragment:
    name: str
    on: TypeId
    selection_set: list[int] = field(default_factory=list)


@dataclass
class ResolvedVariable:
    operation_id: int
    name: str
    type: StoredFieldType
    default: Any = None

    def type_name(self, schema: Schema) -> str:
        return self.type.id.name(schema)

    def _collect_used_types(self, used: UsedTypes, schema: Schema) -> None:
        type_id = self.type.id
        if type_id.kind is TypeKind.INPUT:
            used.types.add(type_id)
            schema.get_input(type_id.index).used_input_ids_recursive(used.types, schema)
        elif type_id.kind in (TypeKind.SCALAR, TypeKind.ENUM):
            used.types.add(type_id)


@dataclass
class UsedTypes:
    """Types and fragments reachable from an operation."""

    types: set[TypeId] = field(default_factory=set)
    fragments: set[int] = field(default_factory=set)

    def _of_kind(self, kind: TypeKind) -> list[int]:
        return sorted(type_id.index for type_id in self.types if type_id.kind is kind)

    def inputs(self, schema: Schema) -> Iterator[tuple[int, StoredInputType]]:
        """Used input types, in schema order."""
        return (
            (index, input_type)
            for index, input_type in schema.inputs()
            if TypeId(TypeKind.INPUT, index) in self.types
        )

    def scalars(self, schema: Schema) -> Iterator[tuple[int, StoredScalar]]:
        """Used scalars other than the built-in ones."""
        for index in self._of_kind(TypeKind.SCALAR):
            scalar = schema.get_scalar(index)
            if scalar.name not in DEFAULT_SCALARS:
                yield index, scalar

    def enums(self, schema: Schema) -> Iterator[tuple[int, StoredEnum]]:
        for index in self._of_kind(TypeKind.ENUM):
            yield index, schema.get_enum(index)


def _get(items: list, index: int, what: str):
    if not 0 <= index < len(items):
        raise IndexError(f"no {what} with id {index}")
    return items[index]


def _subselection(selection: Selection) -> list[int]:
    if isinstance(selection, (SelectedField, InlineFragmentSelection)):
        return selection.selection_set
    return []


class Query:
    """A resolved query document; all items are addressed by index."""

    def __init__(self) -> None:
        self.fragments: list[ResolvedFragment] = []
        self.operation_list: list[ResolvedOperation] = []
        self.selection_list: list[Selection] = []
        self.parents: dict[int, SelectionParent] = {}
        self.variables: list[ResolvedVariable] = []

    def push_selection(self, node: Selection, parent: SelectionParent) -> int:
        """Store a selection, record its parent and return its id."""
        self.selection_list.append(node)
        selection_id = len(self.selection_list) - 1
        self.parents[selection_id] = parent
        return selection_id

    def add_to_selection_set(self, parent: SelectionParent, selection_id: int) -> None:
        """Append a selection to the selection set of its parent."""
        if parent.kind in (ParentKind.FIELD, ParentKind.INLINE_FRAGMENT):
            owner = self.get_selection(parent.id)
            if not isinstance(owner, (SelectedField, InlineFragmentSelection)):
                raise ValueError(f"impossible parent selection: {owner!r}")
            owner.selection_set.append(selection_id)
        elif parent.kind is ParentKind.FRAGMENT:
            self.get_fragment(parent.id).selection_set.append(selection_id)
        else:
            self.get_operation(parent.id).selection_set.append(selection_id)

    def parent_of(self, selection_id: int) -> SelectionParent | None:
        return self.parents.get(selection_id)

    def operations(self) -> Iterator[tuple[int, ResolvedOperation]]:
        return enumerate(self.operation_list)

    def selections(self) -> Iterator[tuple[int, Selection]]:
        return enumerate(self.selection_list)

    def get_selection(self, selection_id: int) -> Selection:
        return _get(self.selection_list, selection_id, "selection")

    def get_fragment(self, fragment_id: int) -> ResolvedFragment:
        return _get(self.fragments, fragment_id, "fragment")

    def get_operation(self, operation_id: int) -> ResolvedOperation:
        return _get(self.operation_list, operation_id, "operation")

    def select_operation(
        self, name: str, normalization: Normalization
    ) -> tuple[int, ResolvedOperation] | None:
        """The first operation whose normalized name is ``name``."""
        return next(
            (
                (index, operation)
                for index, operation in self.operations()
                if normalization.operation(operation.name) == name
            ),
            None,
        )

    def find_fragment(self, name: str) -> tuple[int, ResolvedFragment] | None:
        return next(
            ((index, frag) for index, frag in enumerate(self.fragments) if frag.name == name),
            None,
        )

    def find_operation(self, name: str) -> tuple[int, ResolvedOperation] | None:
        return next(
            ((index, op) for index, op in self.operations() if op.name == name),
            None,
        )

    def walk_selection_set(self, selection_ids: Iterable[int]) -> Iterator[tuple[int, Selection]]:
        return ((selection_id, self.get_selection(selection_id)) for selection_id in selection_ids)

    def operation_variables(self, operation_id: int) -> Iterator[tuple[int, ResolvedVariable]]:
        return (
            (index, variable)
            for index, variable in enumerate(self.variables)
            if variable.operation_id == operation_id
        )

    def operation_has_no_variables(self, operation_id: int) -> bool:
        return next(self.operation_variables(operation_id), None) is None

    def parent_schema_type_id(self, parent: SelectionParent, schema: Schema) -> TypeId:
        """The schema type the selections under ``parent`` are made on."""
        if parent.kind is ParentKind.FRAGMENT:
            return self.get_fragment(parent.id).on
        if parent.kind is ParentKind.OPERATION:
            return TypeId(TypeKind.OBJECT, self.get_operation(parent.id).object_id)
        selection = self.get_selection(parent.id)
        if parent.kind is ParentKind.FIELD:
            if not isinstance(selection, SelectedField):
                raise ValueError(f"selection {parent.id} is not a field")
            return schema.get_field(selection.field_id).type.id
        if not isinstance(selection, InlineFragmentSelection):
            raise ValueError(f"selection {parent.id} is not an inline fragment")
        return selection.type_id

    def _selection_segment(self, selection: Selection, schema: Schema) -> str:
        if isinstance(selection, SelectedField):
            if selection.alias is not None:
                return to_upper_camel_case(selection.alias)
            return to_upper_camel_case(schema.get_field(selection.field_id).name)
        if isinstance(selection, InlineFragmentSelection):
            return "On" + to_upper_camel_case(selection.type_id.name(schema))
        raise ValueError(f"{selection!r} has no path segment")

    def path_segment(self, parent: SelectionParent, schema: Schema) -> str:
        if parent.kind in (ParentKind.FIELD, ParentKind.INLINE_FRAGMENT):
            return self._selection_segment(self.get_selection(parent.id), schema)
        if parent.kind is ParentKind.OPERATION:
            return to_upper_camel_case(self.get_operation(parent.id).name)
        return to_upper_camel_case(self.get_fragment(parent.id).name)

    def full_path_prefix(self, selection_id: int, schema: Schema) -> str:
        """The camel-cased path from the root operation or fragment down to a selection."""
        selection = self.get_selection(selection_id)
        if isinstance(selection, (FragmentSpreadSelection, InlineFragmentSelection)):
            path = []
        else:
            path = [self._selection_segment(selection, schema)]
        item = selection_id
        while (parent := self.parents.get(item)) is not None:
            path.append(self.path_segment(parent, schema))
            if parent.kind not in (ParentKind.FIELD, ParentKind.INLINE_FRAGMENT):
                break
            item = parent.id
        return "".join(reversed(path))

    def _collect_used_types(self, selection: Selection, used: UsedTypes, schema: Schema) -> None:
        if isinstance(selection, SelectedField):
            used.types.add(schema.get_field(selection.field_id).type.id)
        elif isinstance(selection, InlineFragmentSelection):
            used.types.add(selection.type_id)
        elif isinstance(selection, FragmentSpreadSelection):
            if selection.fragment_id in used.fragments:
                return
            used.fragments.add(selection.fragment_id)
            fragment = self.get_fragment(selection.fragment_id)
            for _id, child in self.walk_selection_set(fragment.selection_set):
                self._collect_used_types(child, used, schema)
            return
        for _id, child in self.walk_selection_set(_subselection(selection)):
            self._collect_used_types(child, used, schema)

    def all_used_types(self, operation_id: int, schema: Schema) -> UsedTypes:
        """Every type and fragment the operation and its variables refer to."""
        used = UsedTypes()
        operation = self.get_operation(operation_id)
        for _id, selection in self.walk_selection_set(operation.selection_set):
            self._collect_used_types(selection, used, schema)
        for _id, variable in self.operation_variables(operation_id):
            variable._collect_used_types(used, schema)
        return used

    def contains_fragment(self, selection_id: int, fragment_id: int) -> bool:
        """Whether the selection spreads the fragment, directly or below it."""
        selection = self.get_selection(selection_id)
        if isinstance(selection, FragmentSpreadSelection):
            return selection.fragment_id == fragment_id
        return any(
            self.contains_fragment(child, fragment_id) for child in _subselection(selection)
        )

    def fragment_is_recursive(self, fragment_id: int) -> bool:
        fragment = self.get_fragment(fragment_id)
        return any(
            self.contains_fragment(selection_id, fragment_id)
            for selection_id in fragment.selection_set
        )