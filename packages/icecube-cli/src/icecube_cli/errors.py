"""Map failures to CLI messages and exit codes.

Exit codes:
    1 (EXIT_USER_ERROR): something the user can fix, such as an invalid
        icecube.yaml, an unknown --compiler name or a broken component source.
    2 (EXIT_SYSTEM_ERROR): the environment got in the way, such as a missing
        config file or a permission problem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click

from icecube_cli.output import error

if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError

    from icecube_core.errors import IceCubeError


EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2


class CLIError(click.ClickException):
    """Click exception rendered through the Rich console.

    Attributes:
        message: User-facing error message.
        exit_code: Process exit code.
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """List validation errors one per line with their dotted field path.

    Example:
        >>> print(format_pydantic_error(err))
        Validation failed:
          - compilers.default.script_compiler: Input should be 'embedded' or 'external-bundler'
    """
    lines = ["Validation failed:"]
    lines.extend(
        f"  - {'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
        for detail in err.errors()
    )
    return "\n".join(lines)


def handle_yaml_error(err: Exception, file_path: str) -> NoReturn:
    """Raise a CLIError for unparsable YAML, with its position when known."""
    detail = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        detail = (
            f"YAML syntax error at line {mark.line + 1}, column {mark.column + 1}: "
            f"{getattr(err, 'problem', '')}"
        )
    raise CLIError(f"Invalid YAML in {file_path}: {detail}")


def handle_validation_error(err: PydanticValidationError, file_path: str) -> NoReturn:
    """Raise a CLIError for an icecube.yaml that does not match the schema."""
    raise CLIError(f"Invalid configuration in {file_path}:\n{format_pydantic_error(err)}")


def handle_file_not_found(file_path: str) -> NoReturn:
    """Raise a CLIError for a missing config file."""
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Create icecube.yaml, or use --config to specify a path.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Raise a CLIError for a path the process may not read or write."""
    raise CLIError(f"Permission denied: Cannot {operation} {path}", exit_code=EXIT_SYSTEM_ERROR)


def handle_icecube_error(err: IceCubeError) -> NoReturn:
    """Raise a CLIError carrying only the user-facing message.

    Internal details were logged by icecube-core when the error was raised.
    """
    raise CLIError(err.user_message, exit_code=EXIT_USER_ERROR)
