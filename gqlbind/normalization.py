"""Naming conventions applied to generated names."""

from __future__ import annotations

import enum
import itertools
from collections.abc import Iterator


class _Mode(enum.Enum):
    BOUNDARY = enum.auto()
    LOWERCASE = enum.auto()
    UPPERCASE = enum.auto()


def _split_word(word: str) -> Iterator[str]:
    start = 0
    mode = _Mode.BOUNDARY
    for i, (char, following) in enumerate(zip(word, word[1:])):
        if char.islower():
            next_mode = _Mode.LOWERCASE
        elif char.isupper():
            next_mode = _Mode.UPPERCASE
        else:
            next_mode = mode
        if next_mode is _Mode.LOWERCASE and following.isupper():
            yield word[start:i + 1]
            start = i + 1
            mode = _Mode.BOUNDARY
        elif mode is _Mode.UPPERCASE and char.isupper() and following.islower():
            yield word[start:i]
            start = i
            mode = _Mode.BOUNDARY
        else:
            mode = next_mode
    if word:
        yield word[start:]


def _words(name: str) -> Iterator[str]:
    for is_word, chars in itertools.groupby(name, str.isalnum):
        if is_word:
            yield from _split_word("".join(chars))


def to_upper_camel_case(name: str) -> str:
    """Convert a name to UpperCamelCase."""
    return "".join(word[0].upper() + word[1:].lower() for word in _words(name))


def to_snake_case(name: str) -> str:
    """Convert a name to snake_case."""
    return "_".join(word.lower() for word in _words(name))


class Normalization(enum.Enum):
    """Normalization conventions available for generated code."""

    NONE = "none"
    RUST = "rust"

    @classmethod
    def parse(cls, text: str) -> Normalization:
        """Parse ``none`` or ``rust``, ignoring surrounding whitespace."""
        try:
            return cls(text.strip())
        except ValueError:
            raise ValueError(f"unknown normalization: {text!r}") from None

    def _camel_case(self, name: str) -> str:
        if self is Normalization.RUST:
            return to_upper_camel_case(name)
        return name

    def operation(self, name: str) -> str:
        return self._camel_case(name)

    def enum_variant(self, name: str) -> str:
        return self._camel_case(name)

    def enum_name(self, name: str) -> str:
        return self._camel_case(name)

    def field_type(self, name: str) -> str:
        """Normalize a field type name; ``ID`` and introspection types are kept."""
        if name == "ID" or name.startswith("__"):
            return name
        return self._camel_case(name)

    def input_name(self, name: str) -> str:
        return self._camel_case(name)

    def scalar_name(self, name: str) -> str:
        return self._camel_case(name)