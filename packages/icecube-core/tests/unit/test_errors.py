"""Unit tests for the icecube-core exception hierarchy."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from icecube_core.errors import (
    BadComponentRequest,
    CompilationError,
    CompilerConfigNotFoundError,
    ComponentNameCollisionError,
    ComponentNotFoundError,
    ConfigurationError,
    IceCubeError,
)


class TestIceCubeError:
    """Tests for the base IceCubeError exception."""

    def test_stores_user_message(self) -> None:
        """IceCubeError should store and expose user_message."""
        error = IceCubeError("Something went wrong")
        assert error.user_message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_logs_internal_details(self) -> None:
        """Internal details go to the log, not to the message."""
        with capture_logs() as logs:
            error = IceCubeError("User sees this", internal_details="/secret/path.py:42")

        assert "/secret/path.py" not in str(error)
        assert len(logs) == 1
        assert logs[0]["event"] == "icecube_error"
        assert logs[0]["log_level"] == "error"
        assert logs[0]["error_type"] == "IceCubeError"
        assert logs[0]["internal_details"] == "/secret/path.py:42"

    def test_no_log_without_internal_details(self) -> None:
        """Nothing is logged when there are no internal details."""
        with capture_logs() as logs:
            IceCubeError("Just a user message")
        assert logs == []

    @pytest.mark.parametrize(
        "error",
        [
            CompilationError("x"),
            ConfigurationError("x"),
            CompilerConfigNotFoundError("x", []),
            ComponentNotFoundError("x"),
            ComponentNameCollisionError("a_b", "a.b", "a_b"),
            BadComponentRequest("x"),
        ],
    )
    def test_subclasses_are_icecube_errors(self, error: IceCubeError) -> None:
        """Every icecube exception can be caught as IceCubeError."""
        assert isinstance(error, IceCubeError)


class TestConfigurationError:
    """Tests for ConfigurationError context."""

    def test_message_includes_file_and_field(self) -> None:
        """File and field context are appended to the message."""
        error = ConfigurationError(
            "Unknown script compiler",
            file_path="icecube.yaml",
            field_path="compilers.default.script_compiler",
        )
        assert error.user_message == (
            "Unknown script compiler "
            "(in icecube.yaml, field 'compilers.default.script_compiler')"
        )
        assert error.file_path == "icecube.yaml"
        assert error.field_path == "compilers.default.script_compiler"

    def test_message_without_context(self) -> None:
        """Without context the message is unchanged."""
        assert ConfigurationError("Bad value").user_message == "Bad value"


class TestCompilerConfigNotFoundError:
    """Tests for CompilerConfigNotFoundError."""

    def test_lists_available_configs(self) -> None:
        """The message lists the available configuration names."""
        error = CompilerConfigNotFoundError("admin", ["default", "mail"])
        assert str(error) == "Compiler configuration 'admin' not found. Available: default, mail"
        assert error.config_name == "admin"
        assert error.available_configs == ["default", "mail"]

    def test_no_available_configs(self) -> None:
        """An empty list is reported as none."""
        error = CompilerConfigNotFoundError("admin", [])
        assert str(error).endswith("Available: none")


class TestComponentErrors:
    """Tests for component lookup errors."""

    def test_component_not_found(self) -> None:
        """ComponentNotFoundError names the identifier."""
        error = ComponentNotFoundError("app.components.Missing")
        assert str(error) == "Component 'app.components.Missing' not found"
        assert error.identifier == "app.components.Missing"

    def test_name_collision(self) -> None:
        """ComponentNameCollisionError names both identifiers and the shared name."""
        error = ComponentNameCollisionError("a_b_C", "a_b.C", "a.b.C")
        assert "a_b.C" in str(error)
        assert "a.b.C" in str(error)
        assert "a_b_C" in str(error)
        assert error.existing_identifier == "a.b.C"

    def test_bad_request_status_code(self) -> None:
        """Rejected remote calls map to HTTP 400."""
        assert BadComponentRequest("Bad request").status_code == 400
