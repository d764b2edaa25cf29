from pathlib import Path

from gqlbind.deprecation import DeprecationStrategy
from gqlbind.normalization import Normalization
from gqlbind.options import CodegenMode, CodegenOptions


def test_defaults():
    options = CodegenOptions(CodegenMode.CLI)
    assert options.normalization is Normalization.NONE
    assert options.operation_name is None
    assert options.query_file is None
    assert options.extern_enums == []
    assert options.fragments_other_variant is False


def test_extern_enums_not_shared():
    first = CodegenOptions(CodegenMode.CLI)
    second = CodegenOptions(CodegenMode.DERIVE)
    first.extern_enums.append("Color")
    assert second.extern_enums == []


def test_deprecation_strategy_defaults_to_warn():
    assert CodegenOptions(CodegenMode.CLI).resolved_deprecation_strategy() is DeprecationStrategy.WARN


def test_deprecation_strategy_explicit():
    options = CodegenOptions(CodegenMode.CLI, deprecation_strategy=DeprecationStrategy.DENY)
    assert options.resolved_deprecation_strategy() is DeprecationStrategy.DENY


def test_variable_derives_default():
    assert CodegenOptions(CodegenMode.CLI).all_variable_derives() == ["Serialize"]


def test_variable_derives_additional_are_trimmed():
    options = CodegenOptions(CodegenMode.CLI, variables_derives="Debug, PartialEq")
    assert options.all_variable_derives() == ["Serialize", "Debug", "PartialEq"]


def test_response_derives_default():
    options = CodegenOptions(CodegenMode.CLI)
    assert options.additional_response_derives() == []
    assert options.all_response_derives() == ["Deserialize"]


def test_response_derives_skip_duplicate_base():
    options = CodegenOptions(CodegenMode.CLI, response_derives="Deserialize, Debug ,Clone")
    assert options.additional_response_derives() == ["Deserialize", "Debug", "Clone"]
    assert options.all_response_derives() == ["Deserialize", "Debug", "Clone"]
    assert options.all_response_derives().count("Deserialize") == 1


def test_fields_are_settable():
    options = CodegenOptions(CodegenMode.DERIVE)
    options.query_file = Path("queries/q.graphql")
    options.normalization = Normalization.RUST
    assert options.query_file == Path("queries/q.graphql")
    assert options.normalization is Normalization.RUST
    assert options.mode is CodegenMode.DERIVE