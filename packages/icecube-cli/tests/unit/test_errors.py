"""Unit tests for icecube_cli.errors module."""

from __future__ import annotations

import pytest
import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from icecube_cli.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    format_pydantic_error,
    handle_file_not_found,
    handle_icecube_error,
    handle_permission_error,
    handle_validation_error,
    handle_yaml_error,
)
from icecube_core.errors import CompilerConfigNotFoundError


class TestCLIError:
    """Tests for CLIError exception."""

    def test_cli_error_message(self) -> None:
        """CLIError stores its message."""
        error = CLIError("Test error message")
        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_exit_codes(self) -> None:
        """The default exit code is 1; a custom one can be given."""
        assert CLIError("x").exit_code == EXIT_USER_ERROR
        assert CLIError("x", exit_code=EXIT_SYSTEM_ERROR).exit_code == EXIT_SYSTEM_ERROR


class TestFormatPydanticError:
    """Tests for format_pydantic_error function."""

    def test_nested_field_path(self) -> None:
        """Errors are listed with their dotted field path."""

        class Inner(BaseModel):
            script_compiler: int

        class Outer(BaseModel):
            compilers: dict[str, Inner]

        with pytest.raises(PydanticValidationError) as exc_info:
            Outer(compilers={"default": {"script_compiler": "x"}})

        formatted = format_pydantic_error(exc_info.value)
        assert formatted.startswith("Validation failed:")
        assert "  - compilers.default.script_compiler:" in formatted


class TestHandlers:
    """Tests for the handle_* helpers."""

    def test_handle_file_not_found(self) -> None:
        """Missing files are system errors with a hint."""
        with pytest.raises(CLIError) as exc_info:
            handle_file_not_found("icecube.yaml")

        assert "File not found: icecube.yaml" in str(exc_info.value)
        assert "--config" in str(exc_info.value)
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR

    def test_handle_permission_error(self) -> None:
        """Permission errors name the operation."""
        with pytest.raises(CLIError) as exc_info:
            handle_permission_error("/path/to/file", "write")

        assert "Permission denied: Cannot write /path/to/file" in str(exc_info.value)
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR

    def test_handle_yaml_error_with_position(self) -> None:
        """YAML errors report line and column."""
        with pytest.raises(yaml.YAMLError) as yaml_exc:
            yaml.safe_load("compilers:\n  default: [unclosed")

        with pytest.raises(CLIError) as exc_info:
            handle_yaml_error(yaml_exc.value, "icecube.yaml")

        assert "Invalid YAML in icecube.yaml" in str(exc_info.value)
        assert "line" in str(exc_info.value)

    def test_handle_validation_error(self) -> None:
        """Validation errors name the file."""

        class Model(BaseModel):
            name: str

        with pytest.raises(PydanticValidationError) as pydantic_exc:
            Model()  # type: ignore[call-arg]

        with pytest.raises(CLIError) as exc_info:
            handle_validation_error(pydantic_exc.value, "icecube.yaml")

        assert "Invalid configuration in icecube.yaml" in str(exc_info.value)
        assert "name" in str(exc_info.value)

    def test_handle_icecube_error(self) -> None:
        """icecube-core errors surface their user message."""
        with pytest.raises(CLIError) as exc_info:
            handle_icecube_error(CompilerConfigNotFoundError("admin", ["default"]))

        assert str(exc_info.value) == (
            "Compiler configuration 'admin' not found. Available: default"
        )
        assert exc_info.value.exit_code == EXIT_USER_ERROR
