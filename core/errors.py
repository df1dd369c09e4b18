"""
Error types for filekit.

Every error is an OSError so callers can keep catching I/O failures the
usual way, and each kind also mixes in the closest builtin exception.
"""

import shutil
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class DeleteFailure:
    """A child that could not be removed during a directory clean."""
    path: str
    error: OSError


class FileOpsError(OSError):
    """Base class for all filekit errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return self.message


class InvalidArgumentError(FileOpsError, ValueError):
    """A required path is missing, or is not the kind the operation expects."""


class NotFoundError(FileOpsError, FileNotFoundError):
    """A path that must exist does not."""


class DirectoryConflictError(FileOpsError):
    """A path is a directory where a file is required, or the other way round."""


class IsDirectoryError(DirectoryConflictError, IsADirectoryError):
    """A path exists but is a directory."""


class NotDirectoryError(DirectoryConflictError, NotADirectoryError):
    """A path exists but is not a directory."""


class AccessDeniedError(FileOpsError, PermissionError):
    """A path cannot be read or written."""


class SameFileError(FileOpsError, shutil.SameFileError):
    """Copy source and destination resolve to the same file."""


class IncompleteCopyError(FileOpsError):
    """Source and destination sizes differ after a copy."""


class OperationFailedError(FileOpsError):
    """The host refused a create, delete or list request."""


class CleanDirectoryError(OperationFailedError):
    """
    One or more children of a directory could not be deleted.

    All failures are kept in ``failures``; the last one is chained as the
    exception cause.
    """

    def __init__(self, path: str, failures: List[DeleteFailure]):
        last = failures[-1]
        message = (
            f"Failed to delete {len(failures)} item(s) in {path}; "
            f"last error: {last.error}"
        )
        super().__init__(message, path=path)
        self.failures = failures
