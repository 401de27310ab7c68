"""Error types raised by cfdot commands and the exit codes they carry."""

from __future__ import annotations

__all__ = [
    "BBSError",
    "CFDotError",
    "cfdot_error",
    "component_error",
    "validation_error",
    "missing_arguments",
    "extra_arguments",
    "invalid_process_guid",
    "invalid_index",
]

VALIDATION_EXIT_CODE = 3
COMPONENT_EXIT_CODE = 4
GENERIC_EXIT_CODE = 5


class BBSError(Exception):
    """An error reported by the BBS, identified by a numeric type and its name."""

    def __init__(self, type_code: int, type_name: str, message: str) -> None:
        super().__init__(message)
        self.type_code = type_code
        self.type_name = type_name
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"BBSError(type_code={self.type_code!r}, "
            f"type_name={self.type_name!r}, message={self.message!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BBSError):
            return NotImplemented
        return (self.type_code, self.type_name, self.message) == (
            other.type_code,
            other.type_name,
            other.message,
        )

    def __hash__(self) -> int:
        return hash((self.type_code, self.type_name, self.message))


class CFDotError(Exception):
    """A command failure wrapping its cause together with a process exit code."""

    def __init__(self, error: BaseException, exit_code: int, silence_usage: bool = False) -> None:
        super().__init__(error)
        self.error = error
        self._exit_code = exit_code
        self.silence_usage = silence_usage

    @property
    def exit_code(self) -> int:
        """The exit code the process should end with."""
        return self._exit_code

    def __str__(self) -> str:
        if isinstance(self.error, BBSError):
            return (
                "BBS error\n"
                f"Type {self.error.type_code}: {self.error.type_name}\n"
                f"Message: {self.error.message}"
            )
        return str(self.error)


def cfdot_error(err: BaseException) -> CFDotError:
    """Wrap a failure from a BBS call; BBS errors exit with 4, others with 5."""
    if isinstance(err, BBSError):
        return CFDotError(err, COMPONENT_EXIT_CODE, silence_usage=True)
    return CFDotError(err, GENERIC_EXIT_CODE, silence_usage=True)


def component_error(err: BaseException) -> CFDotError:
    """Wrap a failure from a remote component; exits with 4."""
    return CFDotError(err, COMPONENT_EXIT_CODE, silence_usage=True)


def validation_error(err: BaseException) -> CFDotError:
    """Wrap an invalid-input failure; exits with 3 and keeps the usage message."""
    return CFDotError(err, VALIDATION_EXIT_CODE, silence_usage=False)


def missing_arguments() -> ValueError:
    return ValueError("Missing arguments")


def extra_arguments() -> ValueError:
    return ValueError("Too many arguments specified")


def invalid_process_guid() -> ValueError:
    return ValueError("Process guid should be non empty string")


def invalid_index() -> ValueError:
    return ValueError("Index must be a non-negative integer")