"""
Settings for filekit.

Settings live in a YAML file under a top-level ``filekit`` key. A missing or
unreadable file yields the defaults, so the library works without one.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import yaml


# 50 MiB; bounds peak memory on large copies.
DEFAULT_CHUNK_SIZE = 52428800
DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_AUDIT_LOG = "data/audit_log.jsonl"


@dataclass
class Settings:
    """Runtime settings for file operations."""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    preserve_timestamp: bool = True
    audit_enabled: bool = True
    audit_log_path: str = DEFAULT_AUDIT_LOG

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "Settings":
        """Build settings from the parsed ``filekit`` section."""
        copy = config.get("copy") or {}
        audit = config.get("audit") or {}

        chunk_size = copy.get("chunk_size", DEFAULT_CHUNK_SIZE)
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            chunk_size = DEFAULT_CHUNK_SIZE

        return cls(
            chunk_size=chunk_size,
            preserve_timestamp=bool(copy.get("preserve_timestamp", True)),
            audit_enabled=bool(audit.get("enabled", True)),
            audit_log_path=str(audit.get("log_path", DEFAULT_AUDIT_LOG)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the settings in the layout of the config file."""
        return {
            "copy": {
                "chunk_size": self.chunk_size,
                "preserve_timestamp": self.preserve_timestamp,
            },
            "audit": {
                "enabled": self.audit_enabled,
                "log_path": self.audit_log_path,
            },
        }


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        config_path: Path to the YAML file (default: config.yaml)

    Returns:
        Settings read from the file, or the defaults if it cannot be read
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return Settings()

    if not isinstance(config, dict):
        return Settings()
    section = config.get("filekit", config)
    if not isinstance(section, dict):
        return Settings()
    return Settings.from_dict(section)


def save_settings(settings: Settings, config_path: Optional[str] = None) -> None:
    """
    Write settings to a YAML file, keeping other top-level keys intact.

    Args:
        settings: Settings to save
        config_path: Path to the YAML file (default: config.yaml)
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    config: Dict[str, Any] = {}

    # Merge with existing config
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                existing = yaml.safe_load(f) or {}
            if isinstance(existing, dict):
                config = existing
        except (OSError, yaml.YAMLError):
            config = {}

    config["filekit"] = settings.to_dict()

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False)
