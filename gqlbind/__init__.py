"""Bind GraphQL query documents to a schema and validate them for code generation."""

__version__ = "0.1.0"