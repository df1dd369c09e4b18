# filekit - Core Module
"""
Shared infrastructure for filekit: settings, host description, errors and
the audit log.
"""

from .config import Settings, load_settings, save_settings
from .errors import (
    FileOpsError,
    InvalidArgumentError,
    NotFoundError,
    DirectoryConflictError,
    IsDirectoryError,
    NotDirectoryError,
    AccessDeniedError,
    SameFileError,
    IncompleteCopyError,
    OperationFailedError,
    CleanDirectoryError,
    DeleteFailure,
)
from .host import HostPathSemantics, POSIX_HOST, WINDOWS_HOST
from .logger import AuditLogger, AuditEntry, ActionType, ActionStatus

__all__ = [
    "Settings",
    "load_settings",
    "save_settings",
    "FileOpsError",
    "InvalidArgumentError",
    "NotFoundError",
    "DirectoryConflictError",
    "IsDirectoryError",
    "NotDirectoryError",
    "AccessDeniedError",
    "SameFileError",
    "IncompleteCopyError",
    "OperationFailedError",
    "CleanDirectoryError",
    "DeleteFailure",
    "HostPathSemantics",
    "POSIX_HOST",
    "WINDOWS_HOST",
    "AuditLogger",
    "AuditEntry",
    "ActionType",
    "ActionStatus",
]

__version__ = "0.1.0"
