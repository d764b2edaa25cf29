"""Options controlling code generation."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from .deprecation import DeprecationStrategy
from .normalization import Normalization


class CodegenMode(enum.Enum):
    """The context in which code generation takes place."""

    CLI = "cli"
    DERIVE = "derive"


def _split_derives(derives: str | None) -> list[str]:
    if derives is None:
        return []
    return [part.strip() for part in derives.split(",")]


@dataclass
class CodegenOptions:
    """Configuration for a code generation run."""

    mode: CodegenMode
    operation_name: str | None = None
    struct_name: str | None = None
    struct_ident: str | None = None
    variables_derives: str | None = None
    response_derives: str | None = None
    deprecation_strategy: DeprecationStrategy | None = None
    module_visibility: str = ""
    query_file: Path | None = None
    schema_file: Path | None = None
    normalization: Normalization = Normalization.NONE
    custom_scalars_module: str | None = None
    extern_enums: list[str] = field(default_factory=list)
    fragments_other_variant: bool = False

    def resolved_deprecation_strategy(self) -> DeprecationStrategy:
        """The deprecation strategy to adopt, warning by default."""
        return self.deprecation_strategy or DeprecationStrategy.WARN

    def all_variable_derives(self) -> list[str]:
        """All the derives rendered on variables."""
        return ["Serialize", *_split_derives(self.variables_derives)]

    def additional_response_derives(self) -> list[str]:
        """Derives requested for responses on top of the base one."""
        return _split_derives(self.response_derives)

    def all_response_derives(self) -> list[str]:
        """All the derives rendered on responses, without duplicating the base one."""
        extra = [d for d in self.additional_response_derives() if d != "Deserialize"]
        return ["Deserialize", *extra]