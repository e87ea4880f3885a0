"""
Exceptions

Error taxonomy shared by the checker runner, the orchestrator and the
formatters.
"""

import threading
from typing import List, Optional


class ManifestError(Exception):
    """Base exception for all manifest errors."""


class ConfigError(ManifestError):
    """Configuration could not be read or is invalid."""


class CheckerError(ManifestError):
    """A single checker could not produce a usable result."""

    def __init__(self, checker: str, message: str):
        super().__init__(f"{checker}: {message}")
        self.checker = checker


class CheckerExecutionError(CheckerError):
    """The checker could not be launched or exited with a non-zero status."""

    def __init__(self, checker: str, message: str, exit_code: Optional[int] = None, stderr: str = ""):
        super().__init__(checker, message)
        self.exit_code = exit_code
        self.stderr = stderr


class CheckerOutputError(CheckerError):
    """The checker exited cleanly but its output is not a valid result."""

    def __init__(self, checker: str, message: str, output: str = ""):
        super().__init__(checker, message)
        self.output = output


class CheckerReportedFailure(CheckerError):
    """The checker reported that it could not complete its analysis."""

    def __init__(self, checker: str, result):
        super().__init__(checker, f"checker reported a failure: {result.failure}")
        self.result = result


class HookError(ManifestError):
    """A formatter lifecycle hook failed."""


class ReconciliationError(ManifestError):
    """Posting or resolving a comment against the review host failed."""


class ChecksReportedError(ManifestError):
    """Every checker ran, but at least one reported an error diagnostic."""

    def __init__(self):
        super().__init__("one or more checkers reported an error")


class InspectionError(ManifestError):
    """
    Aggregate of every error recorded during an inspection run.

    Safe to add to from concurrent tasks.
    """

    def __init__(self):
        super().__init__()
        self._errors: List[Exception] = []
        self._lock = threading.Lock()

    def add(self, error: Exception) -> None:
        with self._lock:
            self._errors.append(error)

    def any(self) -> bool:
        with self._lock:
            return bool(self._errors)

    @property
    def errors(self) -> List[Exception]:
        with self._lock:
            return list(self._errors)

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self.errors)
