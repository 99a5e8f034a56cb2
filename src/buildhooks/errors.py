"""Exception classes for buildhooks.

Hooks report problems to the host with two kinds of exceptions:

- HookFailure: a well-understood, recoverable condition (non-zero exit code,
  non-2xx status, missing required parameter). The host stops the pipeline and
  rolls back the steps that already ran.
- HookExecutionError: an unexpected lower-level error (I/O failure, process
  launch failure) wrapped together with its original cause.
"""

from __future__ import annotations


class HookError(Exception):
    """Base exception for hook errors.

    Attributes:
        message: User-facing error message
        cause: Underlying exception, if any
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class HookFailure(HookError):
    """Raised when a hook fails in an expected, recoverable way."""

    pass


class HookExecutionError(HookError):
    """Raised when a hook hits an unexpected error."""

    pass
