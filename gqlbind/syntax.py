"""Parsing of GraphQL query and schema documents into syntax trees."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Union


class GraphQLSyntaxError(ValueError):
    """Raised when a GraphQL document cannot be parsed."""


@dataclass(frozen=True)
class Variable:
    """A reference to a variable, ``$name``."""

    name: str


@dataclass(frozen=True)
class EnumValue:
    """A bare enum value in a document."""

    name: str


@dataclass(frozen=True)
class NamedType:
    name: str


@dataclass(frozen=True)
class ListType:
    of_type: TypeRef


@dataclass(frozen=True)
class NonNullType:
    of_type: TypeRef


TypeRef = Union[NamedType, ListType, NonNullType]


@dataclass
class Directive:
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class Field:
    name: str
    alias: str | None = None
    arguments: dict[str, Any] = field(default_factory=dict)
    directives: list[Directive] = field(default_factory=list)
    selection_set: list = field(default_factory=list)


@dataclass
class FragmentSpread:
    fragment_name: str
    directives: list[Directive] = field(default_factory=list)


@dataclass
class InlineFragment:
    type_condition: str | None
    directives: list[Directive] = field(default_factory=list)
    selection_set: list = field(default_factory=list)


@dataclass
class VariableDefinition:
    name: str
    var_type: TypeRef
    default_value: Any = None
    directives: list[Directive] = field(default_factory=list)


@dataclass
class OperationDefinition:
    """An operation; ``shorthand`` marks a bare selection set at the root."""

    operation: str
    selection_set: list
    name: str | None = None
    variable_definitions: list[VariableDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    shorthand: bool = False


@dataclass
class FragmentDefinition:
    name: str
    type_condition: str
    selection_set: list
    directives: list[Directive] = field(default_factory=list)


@dataclass
class QueryDocument:
    definitions: list


@dataclass
class InputValueDefinition:
    name: str
    value_type: TypeRef
    default_value: Any = None
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class FieldDefinition:
    name: str
    field_type: TypeRef
    arguments: list[InputValueDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class ScalarTypeDefinition:
    name: str
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class ObjectTypeDefinition:
    name: str
    fields: list[FieldDefinition] = field(default_factory=list)
    implements_interfaces: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class InterfaceTypeDefinition:
    name: str
    fields: list[FieldDefinition] = field(default_factory=list)
    implements_interfaces: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class UnionTypeDefinition:
    name: str
    types: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class EnumTypeDefinition:
    name: str
    values: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class InputObjectTypeDefinition:
    name: str
    fields: list[InputValueDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    description: str | None = None


@dataclass
class SchemaDefinition:
    query: str | None = None
    mutation: str | None = None
    subscription: str | None = None
    directives: list[Directive] = field(default_factory=list)


@dataclass
class SchemaDocument:
    definitions: list


class _Token(NamedTuple):
    kind: str
    text: str
    pos: int


_TOKEN_RE = re.compile(
    r'''
    (?P<skip>[\s,\ufeff]+|\#[^\n\r]*)
    |(?P<block>"""(?:\\"""|[^"]|"(?!""))*""")
    |(?P<string>"(?:[^"\\\n\r]|\\.)*")
    |(?P<float>-?(?:0|[1-9][0-9]*)(?:\.[0-9]+(?:[eE][+-]?[0-9]+)?|[eE][+-]?[0-9]+))
    |(?P<int>-?(?:0|[1-9][0-9]*))
    |(?P<name>[_A-Za-z][_0-9A-Za-z]*)
    |(?P<punct>\.\.\.|[!$&():=@\[\]{|}])
    ''',
    re.VERBOSE,
)

_ESCAPE_RE = re.compile(r"\\(u[0-9A-Fa-f]{4}|.)")
_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t"}
_DEFINITION_KEYWORDS = frozenset(
    {"schema", "scalar", "type", "interface", "union", "enum", "input", "directive", "extend"}
)


def _location(text: str, pos: int) -> str:
    line = text.count("\n", 0, pos) + 1
    column = pos - (text.rfind("\n", 0, pos) + 1) + 1
    return f"line {line}, column {column}"


def _tokenize(text: str) -> Iterator[_Token]:
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise GraphQLSyntaxError(
                f"unexpected character {text[pos]!r} at {_location(text, pos)}"
            )
        if match.lastgroup != "skip":
            yield _Token(match.lastgroup, match.group(), pos)
        pos = match.end()


def _string_value(body: str) -> str:
    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if len(escape) == 5:
            return chr(int(escape[1:], 16))
        try:
            return _ESCAPES[escape]
        except KeyError:
            raise GraphQLSyntaxError(f"invalid escape sequence \\{escape}") from None

    return _ESCAPE_RE.sub(replace, body)


def _block_string_value(raw: str) -> str:
    lines = raw.replace('\\"""', '"""').splitlines()
    indents = [len(line) - len(line.lstrip(" \t")) for line in lines[1:] if line.strip(" \t")]
    common = min(indents, default=0)
    lines = [*lines[:1], *(line[common:] for line in lines[1:])]
    while lines and not lines[0].strip(" \t"):
        lines.pop(0)
    while lines and not lines[-1].strip(" \t"):
        lines.pop()
    return "\n".join(lines)


class _Parser:
    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = list(_tokenize(text))
        self._pos = 0

    # token helpers

    def _peek(self, offset: int = 0) -> _Token | None:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _error(self, message: str) -> GraphQLSyntaxError:
        token = self._peek()
        pos = token.pos if token else len(self._text)
        return GraphQLSyntaxError(f"{message} at {_location(self._text, pos)}")

    def _describe(self) -> str:
        token = self._peek()
        return "end of input" if token is None else repr(token.text)

    def at_end(self) -> bool:
        return self._peek() is None

    def at_punct(self, text: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "punct" and token.text == text

    def at_name(self, text: str | None = None) -> bool:
        token = self._peek()
        return token is not None and token.kind == "name" and (text is None or token.text == text)

    def take(self) -> _Token:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of input")
        self._pos += 1
        return token

    def expect_punct(self, text: str) -> None:
        if not self.at_punct(text):
            raise self._error(f"expected {text!r}, found {self._describe()}")
        self.take()

    def expect_name(self) -> str:
        if not self.at_name():
            raise self._error(f"expected a name, found {self._describe()}")
        return self.take().text

    def expect_keyword(self, keyword: str) -> None:
        if not self.at_name(keyword):
            raise self._error(f"expected {keyword!r}, found {self._describe()}")
        self.take()

    # shared grammar

    def value(self, const: bool) -> Any:
        token = self._peek()
        if token is None:
            raise self._error("expected a value, found end of input")
        if token.kind == "punct":
            if token.text == "$":
                if const:
                    raise self._error("variables are not allowed in constant values")
                self.take()
                return Variable(self.expect_name())
            if token.text == "[":
                self.take()
                items = []
                while not self.at_punct("]"):
                    items.append(self.value(const))
                self.take()
                return items
            if token.text == "{":
                self.take()
                obj = {}
                while not self.at_punct("}"):
                    key = self.expect_name()
                    self.expect_punct(":")
                    obj[key] = self.value(const)
                self.take()
                return obj
            raise self._error(f"expected a value, found {token.text!r}")
        self.take()
        if token.kind == "int":
            return int(token.text)
        if token.kind == "float":
            return float(token.text)
        if token.kind == "string":
            return _string_value(token.text[1:-1])
        if token.kind == "block":
            return _block_string_value(token.text[3:-3])
        if token.text in ("true", "false"):
            return token.text == "true"
        if token.text == "null":
            return None
        return EnumValue(token.text)

    def type_ref(self) -> TypeRef:
        if self.at_punct("["):
            self.take()
            inner: TypeRef = ListType(self.type_ref())
            self.expect_punct("]")
        else:
            inner = NamedType(self.expect_name())
        if self.at_punct("!"):
            self.take()
            return NonNullType(inner)
        return inner

    def arguments(self, const: bool) -> dict[str, Any]:
        args: dict[str, Any] = {}
        if self.at_punct("("):
            self.take()
            while not self.at_punct(")"):
                name = self.expect_name()
                self.expect_punct(":")
                args[name] = self.value(const)
            self.take()
        return args

    def directives(self, const: bool) -> list[Directive]:
        found = []
        while self.at_punct("@"):
            self.take()
            name = self.expect_name()
            found.append(Directive(name, self.arguments(const)))
        return found

    # executable documents

    def selection_set(self) -> list:
        self.expect_punct("{")
        items = [self.selection()]
        while not self.at_punct("}"):
            items.append(self.selection())
        self.take()
        return items

    def selection(self):
        if self.at_punct("..."):
            self.take()
            if self.at_name() and not self.at_name("on"):
                name = self.expect_name()
                return FragmentSpread(name, self.directives(False))
            condition = None
            if self.at_name("on"):
                self.take()
                condition = self.expect_name()
            directives = self.directives(False)
            return InlineFragment(condition, directives, self.selection_set())
        name = self.expect_name()
        alias = None
        if self.at_punct(":"):
            self.take()
            alias, name = name, self.expect_name()
        arguments = self.arguments(False)
        directives = self.directives(False)
        selections = self.selection_set() if self.at_punct("{") else []
        return Field(name, alias, arguments, directives, selections)

    def variable_definitions(self) -> list[VariableDefinition]:
        definitions = []
        if self.at_punct("("):
            self.take()
            while not self.at_punct(")"):
                self.expect_punct("$")
                name = self.expect_name()
                self.expect_punct(":")
                var_type = self.type_ref()
                default = None
                if self.at_punct("="):
                    self.take()
                    default = self.value(True)
                definitions.append(
                    VariableDefinition(name, var_type, default, self.directives(True))
                )
            self.take()
        return definitions

    def executable_definition(self):
        if self.at_punct("{"):
            return OperationDefinition("query", self.selection_set(), shorthand=True)
        if self.at_name("fragment"):
            self.take()
            if self.at_name("on"):
                raise self._error("a fragment cannot be named 'on'")
            name = self.expect_name()
            self.expect_keyword("on")
            condition = self.expect_name()
            directives = self.directives(False)
            return FragmentDefinition(name, condition, self.selection_set(), directives)
        if self.at_name("query") or self.at_name("mutation") or self.at_name("subscription"):
            operation = self.take().text
            name = self.expect_name() if self.at_name() else None
            variables = self.variable_definitions()
            directives = self.directives(False)
            return OperationDefinition(
                operation, self.selection_set(), name, variables, directives
            )
        raise self._error(f"expected a definition, found {self._describe()}")

    def query_document(self) -> QueryDocument:
        if self.at_end():
            raise self._error("the query document is empty")
        definitions = []
        while not self.at_end():
            definitions.append(self.executable_definition())
        return QueryDocument(definitions)

    # type system documents

    def description(self) -> str | None:
        token = self._peek()
        if token is not None and token.kind in ("string", "block"):
            return self.value(True)
        return None

    def input_value_definition(self) -> InputValueDefinition:
        description = self.description()
        name = self.expect_name()
        self.expect_punct(":")
        value_type = self.type_ref()
        default = None
        if self.at_punct("="):
            self.take()
            default = self.value(True)
        return InputValueDefinition(name, value_type, default, self.directives(True), description)

    def argument_definitions(self) -> list[InputValueDefinition]:
        definitions = []
        if self.at_punct("("):
            self.take()
            while not self.at_punct(")"):
                definitions.append(self.input_value_definition())
            self.take()
        return definitions

    def field_definitions(self) -> list[FieldDefinition]:
        fields = []
        if self.at_punct("{"):
            self.take()
            while not self.at_punct("}"):
                description = self.description()
                name = self.expect_name()
                arguments = self.argument_definitions()
                self.expect_punct(":")
                field_type = self.type_ref()
                fields.append(
                    FieldDefinition(name, field_type, arguments, self.directives(True), description)
                )
            self.take()
        return fields

    def implements(self) -> list[str]:
        names: list[str] = []
        if not self.at_name("implements"):
            return names
        self.take()
        if self.at_punct("&"):
            self.take()
        names.append(self.expect_name())
        while self.at_punct("&") or (
            self.at_name() and self._peek().text not in _DEFINITION_KEYWORDS
        ):
            if self.at_punct("&"):
                self.take()
            names.append(self.expect_name())
        return names

    def type_system_definition(self):
        description = self.description()
        if not self.at_name():
            raise self._error(f"expected a definition, found {self._describe()}")
        keyword = self.take().text
        if keyword == "extend":
            self.type_system_definition()
            return None
        if keyword == "schema":
            directives = self.directives(True)
            roots: dict[str, str] = {}
            self.expect_punct("{")
            while not self.at_punct("}"):
                operation = self.expect_name()
                if operation not in ("query", "mutation", "subscription"):
                    raise self._error(f"unknown operation type {operation!r}")
                self.expect_punct(":")
                roots[operation] = self.expect_name()
            self.take()
            return SchemaDefinition(directives=directives, **roots)
        if keyword == "scalar":
            name = self.expect_name()
            return ScalarTypeDefinition(name, self.directives(True), description)
        if keyword in ("type", "interface"):
            name = self.expect_name()
            interfaces = self.implements()
            directives = self.directives(True)
            fields = self.field_definitions()
            kind = ObjectTypeDefinition if keyword == "type" else InterfaceTypeDefinition
            return kind(name, fields, interfaces, directives, description)
        if keyword == "union":
            name = self.expect_name()
            directives = self.directives(True)
            members = []
            if self.at_punct("="):
                self.take()
                if self.at_punct("|"):
                    self.take()
                members.append(self.expect_name())
                while self.at_punct("|"):
                    self.take()
                    members.append(self.expect_name())
            return UnionTypeDefinition(name, members, directives, description)
        if keyword == "enum":
            name = self.expect_name()
            directives = self.directives(True)
            values = []
            if self.at_punct("{"):
                self.take()
                while not self.at_punct("}"):
                    self.description()
                    values.append(self.expect_name())
                    self.directives(True)
                self.take()
            return EnumTypeDefinition(name, values, directives, description)
        if keyword == "input":
            name = self.expect_name()
            directives = self.directives(True)
            fields = []
            if self.at_punct("{"):
                self.take()
                while not self.at_punct("}"):
                    fields.append(self.input_value_definition())
                self.take()
            return InputObjectTypeDefinition(name, fields, directives, description)
        if keyword == "directive":
            self.expect_punct("@")
            self.expect_name()
            self.argument_definitions()
            if self.at_name("repeatable"):
                self.take()
            self.expect_keyword("on")
            if self.at_punct("|"):
                self.take()
            self.expect_name()
            while self.at_punct("|"):
                self.take()
                self.expect_name()
            return None
        self._pos -= 1
        raise self._error(f"unknown definition {keyword!r}")

    def schema_document(self) -> SchemaDocument:
        definitions = []
        while not self.at_end():
            definition = self.type_system_definition()
            if definition is not None:
                definitions.append(definition)
        return SchemaDocument(definitions)


def parse_query(text: str) -> QueryDocument:
    """Parse an executable GraphQL document."""
    return _Parser(text).query_document()


def parse_schema(text: str) -> SchemaDocument:
    """Parse a GraphQL schema definition document; extensions and directive definitions are skipped."""
    return _Parser(text).schema_document()