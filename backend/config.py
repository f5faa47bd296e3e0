from dataclasses import dataclass, field
from pathlib import Path
import os
import tempfile

# Notification log file (JSON array of records)
NOTIFICATION_LOG = Path(os.getenv("NOTIFLOG_PATH", "captures/notifications.json"))

# Secondary location used when the primary write fails
FALLBACK_LOG = Path(os.getenv(
    "NOTIFLOG_FALLBACK_PATH",
    str(Path(tempfile.gettempdir()) / "notification_logger" / "notifications.json"),
))

# Corrupted log content is moved here before the log is reset
QUARANTINE_DIR = Path(os.getenv("NOTIFLOG_QUARANTINE_DIR", "captures/quarantine"))

# "array" rewrites one JSON array, "jsonl" appends one record per line
LOG_FORMAT = os.getenv("NOTIFLOG_FORMAT", "array")

# Comma separated package names whose notifications are kept
ALLOWED_SOURCES = os.getenv("NOTIFLOG_ALLOWED_SOURCES", "com.whatsapp")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
SCHEMA_VERSION = 1

HOST = os.getenv("NOTIFLOG_HOST", "0.0.0.0")
PORT = int(os.getenv("NOTIFLOG_PORT", "3000"))


def parse_sources(value):
    return tuple(s.strip() for s in value.split(",") if s.strip())


@dataclass
class LoggerConfig:
    """Paths and filter settings handed to the store and the source filter."""

    log_path: Path = NOTIFICATION_LOG
    fallback_path: Path = FALLBACK_LOG
    quarantine_dir: Path = QUARANTINE_DIR
    allowed_sources: tuple = field(default_factory=lambda: parse_sources(ALLOWED_SOURCES))
    log_format: str = LOG_FORMAT

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        return cls(
            log_path=Path(os.getenv("NOTIFLOG_PATH", str(NOTIFICATION_LOG))),
            fallback_path=Path(os.getenv("NOTIFLOG_FALLBACK_PATH", str(FALLBACK_LOG))),
            quarantine_dir=Path(os.getenv("NOTIFLOG_QUARANTINE_DIR", str(QUARANTINE_DIR))),
            allowed_sources=parse_sources(os.getenv("NOTIFLOG_ALLOWED_SOURCES", ALLOWED_SOURCES)),
            log_format=os.getenv("NOTIFLOG_FORMAT", LOG_FORMAT),
        )
