"""Loading schema and query files and choosing the operations to generate code for."""

from __future__ import annotations

import json
import re
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .attributes import (
    GraphqlAttributeError,
    extract_attr,
    extract_attr_list,
    extract_deprecation_strategy,
    extract_fragments_other_variant,
    extract_normalization,
)
from .normalization import to_snake_case
from .options import CodegenMode, CodegenOptions
from .query import Query, ResolvedOperation
from .resolve import resolve
from .schema import Schema
from .schema_json import build_schema_from_introspection
from .schema_sdl import build_schema_from_sdl
from .syntax import GraphQLSyntaxError, QueryDocument, parse_query, parse_schema

_MODULE_PATH_RE = re.compile(r"(?:::)?[A-Za-z_][A-Za-z0-9_]*(?:::[A-Za-z_][A-Za-z0-9_]*)*")


class GeneralError(Exception):
    """A failure described by its message alone."""


class ReadFileError(Exception):
    """A schema or query file could not be read."""

    def __init__(self, path: str | Path, message: str | None = None) -> None:
        self.path = str(path)
        super().__init__(message or f"Error reading file at: {self.path}")


class MissingFileError(ReadFileError):
    """A schema or query file could not be opened."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(
            path,
            f"Could not find file with path: {path}\n\n"
            "Hint: file paths in the graphql attribute are relative to the project root. "
            'Example: query_path = "src/my_query.graphql".',
        )


class OperationNotFound(Exception):
    """The requested operation is not defined in the query document."""

    def __init__(self, operation_name: str) -> None:
        self.operation_name = operation_name
        super().__init__(
            f"Could not find an operation named {operation_name} in the query document."
        )


_lock = threading.Lock()
_schema_cache: dict[Path, Schema] = {}
_query_cache: dict[Path, tuple[str, QueryDocument]] = {}


def read_file(path: str | Path) -> str:
    """Read a whole text file, raising a ReadFileError that names the path."""
    try:
        handle = open(path, encoding="utf-8")
    except OSError as error:
        raise MissingFileError(path) from error
    with handle:
        try:
            return handle.read()
        except (OSError, UnicodeDecodeError) as error:
            raise ReadFileError(path) from error


def _extension(path: Path) -> str:
    suffix = path.suffix
    return suffix[1:] if suffix else "INVALID"


def load_schema(path: str | Path) -> Schema:
    """Load a ``.graphql``, ``.gql`` or ``.json`` schema, caching it by path."""
    path = Path(path)
    with _lock:
        cached = _schema_cache.get(path)
        if cached is not None:
            return cached
        text = read_file(path)
        extension = _extension(path)
        if extension in ("graphql", "gql"):
            try:
                document = parse_schema(text)
            except GraphQLSyntaxError as error:
                raise GeneralError(f"Parser error: {error}") from error
            schema = build_schema_from_sdl(document)
        elif extension == "json":
            data: Any = json.loads(text)
            schema = build_schema_from_introspection(data)
        else:
            raise GeneralError(
                f"Unsupported extension for the GraphQL schema: {extension} "
                "(only .json and .graphql are supported)"
            )
        _schema_cache[path] = schema
        return schema


def load_query(path: str | Path) -> tuple[str, QueryDocument]:
    """Load and parse a query document, caching the text and tree by path."""
    path = Path(path)
    with _lock:
        cached = _query_cache.get(path)
        if cached is not None:
            return cached
        text = read_file(path)
        try:
            document = parse_query(text)
        except GraphQLSyntaxError as error:
            raise GeneralError(f"Query parser error: {error}") from error
        _query_cache[path] = (text, document)
        return text, document


def clear_caches() -> None:
    """Forget every cached schema and query."""
    with _lock:
        _schema_cache.clear()
        _query_cache.clear()


def resolve_query_file(
    query_path: str | Path, schema_path: str | Path
) -> tuple[Schema, str, Query]:
    """Load the schema and the query and bind them: (schema, query text, resolved query)."""
    schema = load_schema(schema_path)
    query_string, document = load_query(query_path)
    return schema, query_string, resolve(schema, document)


def derive_operation_not_found_error(struct_name: str | None, query: Query) -> str:
    """The message for a struct whose name matches no operation of the query."""
    available = ", ".join(operation.name for _id, operation in query.operations())
    return (
        "The struct name does not match any defined operation in the query file.\n"
        f"Struct name: {struct_name or ''}\n"
        f"Defined operations: {available}"
    )


def select_operations(
    query: Query, options: CodegenOptions
) -> list[tuple[int, ResolvedOperation]]:
    """The operations to generate code for, according to the options."""
    if options.operation_name is not None:
        selected = query.select_operation(options.operation_name, options.normalization)
        if selected is not None:
            return [selected]
    if options.mode is CodegenMode.CLI:
        return list(query.operations())
    raise GeneralError(derive_operation_not_found_error(options.struct_ident, query))


def module_name(operation: str) -> str:
    """The name of the generated module for an operation."""
    return to_snake_case(operation)


def root_operation(query: Query, operation: str, options: CodegenOptions) -> int:
    """The id of the operation called ``operation`` once normalized."""
    name = options.normalization.operation(operation)
    selected = query.select_operation(name, options.normalization)
    if selected is None:
        raise OperationNotFound(name)
    return selected[0]


def build_query_and_schema_path(manifest_dir: str | Path, attrs: Any) -> tuple[Path, Path]:
    """The query and schema paths named by the attributes, under the project root."""
    query_path = Path(f"{manifest_dir}/{extract_attr(attrs, 'query_path')}")
    schema_path = Path(manifest_dir) / extract_attr(attrs, "schema_path")
    return query_path, schema_path


def _optional_attr(attrs: Any, name: str) -> str | None:
    try:
        return extract_attr(attrs, name)
    except GraphqlAttributeError:
        return None


def build_derive_options(
    attrs: Any, query_path: str | Path, struct_name: str, visibility: Any
) -> CodegenOptions:
    """Code generation options for a struct carrying the given graphql attributes."""
    options = CodegenOptions(mode=CodegenMode.DERIVE)
    options.query_file = Path(query_path)
    options.fragments_other_variant = extract_fragments_other_variant(attrs)

    variables_derives = _optional_attr(attrs, "variables_derives")
    if variables_derives is not None:
        options.variables_derives = variables_derives

    response_derives = _optional_attr(attrs, "response_derives")
    if response_derives is not None:
        options.response_derives = response_derives

    try:
        options.deprecation_strategy = extract_deprecation_strategy(attrs)
    except (GraphqlAttributeError, ValueError):
        pass

    try:
        options.normalization = extract_normalization(attrs)
    except (GraphqlAttributeError, ValueError):
        pass

    custom_scalars_module = _optional_attr(attrs, "custom_scalars_module")
    if custom_scalars_module is not None:
        module_path = custom_scalars_module.strip()
        if not _MODULE_PATH_RE.fullmatch(module_path):
            raise GraphqlAttributeError(
                f"custom_scalars_module is not a valid module path: {custom_scalars_module}"
            )
        options.custom_scalars_module = module_path

    try:
        options.extern_enums = list(extract_attr_list(attrs, "extern_enums"))
    except GraphqlAttributeError:
        pass

    options.struct_ident = struct_name
    options.module_visibility = visibility
    options.operation_name = struct_name
    return options


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)