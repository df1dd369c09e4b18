"""
Audit log for filekit.

Each file operation run through a FileOperator with a logger appends one JSON
object per outcome to a JSONL file. The file is only ever appended to.
"""

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from enum import Enum


class ActionType(Enum):
    """Kinds of file operations that are recorded."""
    READ = "read"
    WRITE = "write"
    COPY = "copy"
    DELETE = "delete"
    MKDIR = "mkdir"
    LIST = "list"


class ActionStatus(Enum):
    """Outcome of a recorded operation."""
    EXECUTED = "executed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class AuditEntry:
    """One line of the audit log."""
    action_type: str
    action_description: str
    target: Optional[str]
    status: str
    result: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AuditLogger:
    """Append-only JSONL log of file operations."""

    def __init__(self, log_path: str = "data/audit_log.jsonl"):
        """
        Args:
            log_path: Path to the JSONL log file; created with its directory
        """
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_path.touch(exist_ok=True)

    def log_action(
        self,
        action_type: ActionType,
        description: str,
        target: Optional[str] = None,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Append an entry and return it.
        """
        entry = AuditEntry(
            action_type=action_type.value,
            action_description=description,
            target=target,
            status=status.value,
            result=result,
            metadata=metadata or {}
        )
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(entry), ensure_ascii=False, default=str) + "\n")
        return entry

    def _read_entries(self) -> List[AuditEntry]:
        with open(self.log_path, "r", encoding="utf-8") as f:
            return [AuditEntry(**json.loads(line)) for line in f if line.strip()]

    def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """
        Get the most recent audit entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of AuditEntry objects, most recent first
        """
        if limit <= 0:
            return []
        return list(reversed(self._read_entries()[-limit:]))

    def get_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditEntry]:
        """Get entries of one action type, oldest first."""
        matches = [e for e in self._read_entries() if e.action_type == action_type.value]
        return matches[:limit]

    def get_failures(self, limit: int = 50) -> List[AuditEntry]:
        """
        Get operations that ended in an error, oldest first.

        Useful when tracking down why a cleanup left files behind.
        """
        matches = [e for e in self._read_entries() if e.status == ActionStatus.FAILED.value]
        return matches[:limit]
