"""Parsing and reading of ``graphql(...)`` attribute configuration."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple, Union

from .deprecation import DeprecationStrategy
from .normalization import Normalization

DEPRECATION_ERROR = "deprecated must be one of 'allow', 'deny', or 'warn'"
NORMALIZATION_ERROR = "normalization must be one of 'none' or 'rust'"

_ATTRIBUTE_PATH = "graphql"


class GraphqlAttributeError(ValueError):
    """Raised when attribute text is malformed or a parameter is missing or invalid."""


LiteralValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class _Literal:
    value: LiteralValue


@dataclass(frozen=True)
class _Word:
    path: str


@dataclass(frozen=True)
class _NameValue:
    path: str
    value: LiteralValue


@dataclass(frozen=True)
class _MetaList:
    path: str
    items: tuple


class _Token(NamedTuple):
    kind: str
    text: str


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+|//[^\n]*)
    |(?P<string>"(?:[^"\\]|\\.)*")
    |(?P<number>\d+(?:\.\d+)?)
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<punct>::|[^\s\w"])
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]{1,6}\}|x[0-7][0-9a-fA-F]|\n\s*|.)", re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"', "'": "'"}


def _unescape(body: str) -> str:
    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape.startswith("u{"):
            return chr(int(escape[2:-1], 16))
        if escape.startswith("x") and len(escape) == 3:
            return chr(int(escape[1:], 16))
        if escape.startswith("\n"):
            return ""
        try:
            return _SIMPLE_ESCAPES[escape]
        except KeyError:
            raise GraphqlAttributeError(f"unknown character escape: \\{escape}") from None

    return _ESCAPE_RE.sub(replace, body)


def _tokenize(text: str) -> Iterator[_Token]:
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise GraphqlAttributeError(f"unexpected input at offset {pos}: {text[pos:pos + 10]!r}")
        pos = match.end()
        kind = match.lastgroup
        if kind != "ws":
            yield _Token(kind, match.group())


class _Parser:
    def __init__(self, text: str) -> None:
        self._tokens = list(_tokenize(text))
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def at(self, kind: str, text: str | None = None) -> bool:
        if self.at_end():
            return False
        token = self._tokens[self._pos]
        return token.kind == kind and (text is None or token.text == text)

    def take(self) -> _Token:
        if self.at_end():
            raise GraphqlAttributeError("unexpected end of attribute input")
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def expect(self, kind: str, text: str | None = None) -> _Token:
        if not self.at(kind, text):
            found = "end of input" if self.at_end() else repr(self._tokens[self._pos].text)
            raise GraphqlAttributeError(f"expected {text or kind}, found {found}")
        return self.take()

    def at_literal(self) -> bool:
        return (
            self.at("string")
            or self.at("number")
            or self.at("ident", "true")
            or self.at("ident", "false")
        )

    def literal(self) -> LiteralValue:
        token = self.take()
        if token.kind == "string":
            return _unescape(token.text[1:-1])
        if token.kind == "number":
            return float(token.text) if "." in token.text else int(token.text)
        if token.kind == "ident" and token.text in ("true", "false"):
            return token.text == "true"
        raise GraphqlAttributeError(f"expected a literal, found {token.text!r}")

    def path(self) -> str:
        segments = [self.expect("ident").text]
        while self.at("punct", "::"):
            self.take()
            segments.append(self.expect("ident").text)
        return "::".join(segments)

    def meta(self):
        path = self.path()
        if self.at("punct", "("):
            self.take()
            return _MetaList(path, tuple(self.nested_items(")")))
        if self.at("punct", "="):
            self.take()
            return _NameValue(path, self.literal())
        return _Word(path)

    def nested(self):
        if self.at_literal():
            return _Literal(self.literal())
        return self.meta()

    def nested_items(self, closing: str | None) -> list:
        items = []
        while not self._at_close(closing):
            items.append(self.nested())
            if not self.at("punct", ","):
                break
            self.take()
        if closing is None:
            if not self.at_end():
                raise GraphqlAttributeError(f"unexpected token {self.take().text!r}")
        else:
            self.expect("punct", closing)
        return items

    def _at_close(self, closing: str | None) -> bool:
        return self.at_end() if closing is None else self.at("punct", closing)


def parse_attributes(text: str) -> list | None:
    """Parse the items of the ``graphql`` attribute.

    ``text`` is either a sequence of ``#[...]`` attributes, optionally followed by
    the item they decorate, or the bare contents of the ``graphql(...)`` list.
    Returns ``None`` when attributes are given but none is ``graphql``.
    """
    parser = _Parser(text)
    if not parser.at("punct", "#"):
        return parser.nested_items(None)

    found: list | None = None
    while parser.at("punct", "#"):
        parser.take()
        if parser.at("punct", "!"):
            parser.take()
        parser.expect("punct", "[")
        meta = parser.meta()
        parser.expect("punct", "]")
        if found is None and meta.path == _ATTRIBUTE_PATH:
            found = list(meta.items) if isinstance(meta, _MetaList) else []
    return found


def _require(attrs: list | None) -> list:
    if attrs is None:
        raise GraphqlAttributeError("The graphql attribute is missing")
    return attrs


def extract_attr(attrs: list | None, name: str) -> str:
    """Return the string value of the ``name = "..."`` parameter."""
    for item in _require(attrs):
        if isinstance(item, _NameValue) and item.path == name and isinstance(item.value, str):
            return item.value
    raise GraphqlAttributeError(f"Attribute `{name}` not found")


def extract_attr_list(attrs: list | None, name: str) -> list[str]:
    """Return the string values of the ``name("a", "b", ...)`` parameter."""
    for item in _require(attrs):
        if isinstance(item, _MetaList) and item.path == name:
            values = []
            for entry in item.items:
                if not (isinstance(entry, _Literal) and isinstance(entry.value, str)):
                    raise GraphqlAttributeError("Attribute inside value list must be a literal")
                values.append(entry.value)
            return values
    raise GraphqlAttributeError("Attribute not found")


def extract_deprecation_strategy(attrs: list | None) -> DeprecationStrategy:
    """Read the ``deprecated`` parameter, case-insensitively."""
    value = extract_attr(attrs, "deprecated").lower()
    try:
        return DeprecationStrategy.parse(value)
    except ValueError:
        raise GraphqlAttributeError(DEPRECATION_ERROR) from None


def extract_normalization(attrs: list | None) -> Normalization:
    """Read the ``normalization`` parameter, case-insensitively."""
    value = extract_attr(attrs, "normalization").lower()
    try:
        return Normalization.parse(value)
    except ValueError:
        raise GraphqlAttributeError(NORMALIZATION_ERROR) from None


def extract_fragments_other_variant(attrs: list | None) -> bool:
    """Read ``fragments_other_variant``; anything but exactly ``"true"`` means false."""
    try:
        return extract_attr(attrs, "fragments_other_variant") == "true"
    except GraphqlAttributeError:
        return False