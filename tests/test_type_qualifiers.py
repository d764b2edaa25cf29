import pytest

from gqlbind.syntax import ListType, NamedType, NonNullType
from gqlbind.type_qualifiers import TypeQualifier, type_depth


def test_is_required():
    assert TypeQualifier.REQUIRED.is_required()
    assert not TypeQualifier.LIST.is_required()


def test_named_type_has_no_depth():
    assert type_depth(NamedType("Int")) == 0


def test_depth_counts_every_wrapper():
    inner = NonNullType(NamedType("Int"))
    outer = NonNullType(ListType(inner))
    assert type_depth(outer) == type_depth(inner) + 2


def test_rejects_non_type():
    with pytest.raises(TypeError):
        type_depth("Int")