"""Project-specific exception types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .results import RunReport


class VMBootError(RuntimeError):
    """Base error for domain-level vmboot failures."""


class MissingInputError(VMBootError):
    """Raised when a required positional input is empty or malformed."""


class PrivilegeError(VMBootError):
    """Raised when a procedure needs root but is not running as root."""


class ConfigError(VMBootError):
    """Raised when a config file is missing, unparsable, or holds bad values."""


class RepoRewriteError(VMBootError):
    """Raised when zypper repository definitions cannot be rewritten."""


class StepFailedError(VMBootError):
    """Raised from a failed run report; carries the report."""

    def __init__(self, report: 'RunReport'):
        self.report = report
        super().__init__(report.summary())


class FatalError(VMBootError):
    """Raised by :func:`vmboot.logs.fatal` after the fatal line is logged."""

    def __init__(self, message: str, exit_code: int = 1):
        self.exit_code = exit_code
        super().__init__(message)
