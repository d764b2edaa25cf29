import pytest

from gqlbind.normalization import Normalization, to_snake_case, to_upper_camel_case

NAMES = ["user_repositories", "userRepositories", "HTTPServer", "a1b2", "x", ""]


def test_upper_camel_case_from_snake():
    assert to_upper_camel_case("user_repositories") == "UserRepositories"


def test_upper_camel_case_acronym():
    assert to_upper_camel_case("HTTPServer") == "HttpServer"


def test_snake_case_from_camel():
    assert to_snake_case("userRepositories") == "user_repositories"


@pytest.mark.parametrize("name", NAMES)
def test_conversions_are_idempotent(name):
    camel = to_upper_camel_case(name)
    snake = to_snake_case(name)
    assert to_upper_camel_case(camel) == camel
    assert to_snake_case(snake) == snake


@pytest.mark.parametrize("name", NAMES)
def test_camel_case_has_only_alphanumerics(name):
    assert all(ch.isalnum() for ch in to_upper_camel_case(name))


def test_parse():
    assert Normalization.parse("rust") is Normalization.RUST
    assert Normalization.parse(" none ") is Normalization.NONE


@pytest.mark.parametrize("text", ["Rust", "camel", ""])
def test_parse_rejects_unknown(text):
    with pytest.raises(ValueError):
        Normalization.parse(text)


@pytest.mark.parametrize("name", NAMES)
def test_none_keeps_names(name):
    norm = Normalization.NONE
    for method in (
        norm.operation,
        norm.enum_variant,
        norm.enum_name,
        norm.field_type,
        norm.input_name,
        norm.scalar_name,
    ):
        assert method(name) == name


@pytest.mark.parametrize("name", ["user_repositories", "someEnum", "MY_VALUE"])
def test_rust_applies_camel_case(name):
    norm = Normalization.RUST
    expected = to_upper_camel_case(name)
    assert norm.operation(name) == expected
    assert norm.enum_variant(name) == expected
    assert norm.enum_name(name) == expected
    assert norm.field_type(name) == expected
    assert norm.input_name(name) == expected
    assert norm.scalar_name(name) == expected


@pytest.mark.parametrize("name", ["ID", "__typename", "__Schema"])
def test_field_type_keeps_id_and_introspection_names(name):
    assert Normalization.RUST.field_type(name) == name