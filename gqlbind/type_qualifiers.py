"""Qualifiers wrapping a named GraphQL type."""

from __future__ import annotations

import enum

from .syntax import ListType, NamedType, NonNullType, TypeRef


class TypeQualifier(enum.Enum):
    """A non-null or list wrapper around a type."""

    REQUIRED = "required"
    LIST = "list"

    def is_required(self) -> bool:
        return self is TypeQualifier.REQUIRED


def type_depth(type_ref: TypeRef) -> int:
    """The number of list and non-null wrappers around the named type."""
    depth = 0
    while not isinstance(type_ref, NamedType):
        if not isinstance(type_ref, (ListType, NonNullType)):
            raise TypeError(f"not a type reference: {type_ref!r}")
        depth += 1
        type_ref = type_ref.of_type
    return depth