"""Exceptions raised by icecube-core.

Every exception derives from IceCubeError and carries a user_message that
the CLI or a request handler can show as is. Paths, decoder errors and
preprocessor output go in internal_details, which is logged with structlog
when the error is created and never becomes part of the message.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class IceCubeError(Exception):
    """Base class of icecube exceptions.

    Args:
        user_message: Message shown to users.
        internal_details: Diagnostic text for the log only.

    Example:
        >>> raise CompilationError(
        ...     "Component 'app.components.Counter' could not be read",
        ...     internal_details="UnicodeDecodeError in app/components/Counter.ice.py",
        ... )
    """

    def __init__(self, user_message: str, *, internal_details: str | None = None) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "icecube_error",
                error_type=type(self).__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class CompilationError(IceCubeError):
    """A component source could not be read or one of its styles rejected."""


class ConfigurationError(IceCubeError):
    """icecube.yaml or the environment holds an unusable value.

    The file and field, when given, are appended to the message:
    ``Unknown script compiler (in icecube.yaml, field 'compilers.default.script_compiler')``.

    Attributes:
        file_path: Configuration file, if known.
        field_path: Dotted path of the offending field, if known.
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context = []
        if file_path:
            context.append(f"in {file_path}")
        if field_path:
            context.append(f"field '{field_path}'")
        if context:
            user_message = f"{user_message} ({', '.join(context)})"

        super().__init__(user_message, internal_details=internal_details)
        self.file_path = file_path
        self.field_path = field_path


class CompilerConfigNotFoundError(IceCubeError):
    """No compiler configuration has the requested name.

    Attributes:
        config_name: Requested name.
        available_configs: Names declared in icecube.yaml.
    """

    def __init__(
        self,
        config_name: str,
        available_configs: list[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        available = ", ".join(available_configs) or "none"
        super().__init__(
            f"Compiler configuration '{config_name}' not found. Available: {available}",
            internal_details=internal_details,
        )
        self.config_name = config_name
        self.available_configs = available_configs


class ComponentNotFoundError(IceCubeError):
    """Raised when a component identifier cannot be resolved.

    Attributes:
        identifier: The identifier that could not be resolved.
    """

    def __init__(
        self,
        identifier: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            f"Component '{identifier}' not found",
            internal_details=internal_details,
        )
        self.identifier = identifier


class ComponentNameCollisionError(IceCubeError):
    """Raised when two distinct identifiers flatten to the same component name.

    Flattened names key the on-disk artifacts and the style scope, so a
    collision would silently overwrite another component's output.

    Attributes:
        component_name: The shared flattened name.
        identifier: The identifier being registered.
        existing_identifier: The identifier that already owns the name.
    """

    def __init__(
        self,
        component_name: str,
        identifier: str,
        existing_identifier: str,
    ) -> None:
        super().__init__(
            f"Component '{identifier}' collides with '{existing_identifier}' "
            f"(both compile to '{component_name}')"
        )
        self.component_name = component_name
        self.identifier = identifier
        self.existing_identifier = existing_identifier


class BadComponentRequest(IceCubeError):
    """Raised when a remote component call is rejected.

    The request handler maps this to a client error response. Nothing has
    been executed on the component when this is raised.

    Attributes:
        status_code: HTTP status code for the rejection (always 400).
    """

    status_code = 400
