"""Error taxonomy shared by every scaffolding operation.

All failures raised by the engine derive from :class:`ScaffoldError`.  Each
carries the error level reported back to the caller (``0`` means success,
anything else means the command was aborted) and, for multi-step operations,
the name of the step that failed so a re-run can be reasoned about.
"""

from __future__ import annotations

ABORT_ERROR_LEVEL = 2


class ScaffoldError(Exception):
    """Base class for every fatal scaffolding failure."""

    error_level: int = ABORT_ERROR_LEVEL

    def __init__(self, message: str, step: str = "") -> None:
        self.message = message
        self.step = step
        super().__init__(f"{message} (step: {step})" if step else message)


class ValidationError(ScaffoldError):
    """A prerequisite is missing, the target already exists, or the path is
    not a valid project.  Nothing has been written."""


class GenerationConflictError(ScaffoldError):
    """The module, controller or method to be generated already exists."""


class ParseError(ScaffoldError):
    """An existing file does not have the shape this engine generates."""


class NetworkError(ScaffoldError):
    """The remote template source could not be reached."""


class ArchiveError(ScaffoldError):
    """The skeleton archive could not be downloaded or extracted."""


class ScaffoldIOError(ScaffoldError):
    """Reading or writing a file on disk failed."""
