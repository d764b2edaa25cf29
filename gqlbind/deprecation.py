"""Deprecation status of schema items and the strategies for handling them."""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class DeprecationStatus:
    """Whether an item is deprecated, with the reason if one was given."""

    deprecated: bool = False
    reason: str | None = None


class DeprecationStrategy(enum.Enum):
    """How to treat deprecated items used in queries."""

    ALLOW = "allow"
    DENY = "deny"
    WARN = "warn"

    @classmethod
    def parse(cls, text: str) -> DeprecationStrategy:
        """Parse ``allow``, ``deny`` or ``warn``, ignoring surrounding whitespace."""
        try:
            return cls(text.strip())
        except ValueError:
            raise ValueError(f"unknown deprecation strategy: {text!r}") from None