"""
Host path semantics for filekit.

Describes the host file system once so operations that depend on it can be
handed a value instead of reading process-wide state.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class HostPathSemantics:
    """Path conventions of the host file system."""
    separator: str

    @property
    def supports_symlinks(self) -> bool:
        """Backslash-separated hosts are treated as having no symlinks."""
        return self.separator != "\\"

    @classmethod
    def detect(cls) -> "HostPathSemantics":
        """Describe the host this process runs on."""
        return cls(separator=os.sep)


POSIX_HOST = HostPathSemantics(separator="/")
WINDOWS_HOST = HostPathSemantics(separator="\\")
