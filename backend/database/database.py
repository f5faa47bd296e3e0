from datetime import datetime
from pathlib import Path
from typing import Optional
import json
import threading

from log_setup import get_logger

logger = get_logger(__name__)


class StoreError(Exception):
    """A log file could not be written."""


def _write_text(path: Path, content: str):
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
    except OSError as e:
        raise StoreError(f"{path}: {type(e).__name__}: {e}") from e


def _append_text(path: Path, content: str):
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(content)
            f.flush()
    except OSError as e:
        raise StoreError(f"{path}: {type(e).__name__}: {e}") from e


class AppendLogStore:
    """
    Keeps every record in one JSON array file.

    Each append reads the whole array back, adds the record and rewrites the
    file. Content that no longer parses as an array, including bytes that are
    not UTF-8, is copied to the quarantine directory and the log restarts from
    an empty array.
    """

    def __init__(self, path: Path, fallback_path: Optional[Path] = None,
                 quarantine_dir: Optional[Path] = None):
        self.path = Path(path)
        self.fallback_path = Path(fallback_path) if fallback_path else None
        self.quarantine_dir = Path(quarantine_dir) if quarantine_dir else None
        self._lock = threading.Lock()

    def append(self, record: dict) -> bool:
        with self._lock:
            try:
                records = self._load_for_append()
            except (OSError, StoreError) as e:
                logger.error(f"Could not read {self.path}: {type(e).__name__}: {e}")
                records = []

            records.append(record)

            try:
                _write_text(self.path, json.dumps(records, ensure_ascii=False))
                return True
            except StoreError as e:
                logger.error(f"Error saving notification: {e}")

            if self.fallback_path is None:
                logger.error("No fallback location configured, notification lost")
                return False

            # The fallback keeps its own history; seed it from the primary only once
            fallback_records = self._read_fallback()
            if fallback_records is None:
                fallback_records = records
            else:
                fallback_records.append(record)

            try:
                _write_text(self.fallback_path, json.dumps(fallback_records, ensure_ascii=False))
                logger.warning(f"Notification written to fallback log {self.fallback_path}")
                return True
            except StoreError as e:
                logger.error(f"Fallback write failed, notification lost: {e}")
                return False

    def read_all(self) -> list:
        if not self.path.exists():
            return []
        records = _parse_array(self.path.read_bytes())
        return records if records is not None else []

    def _load_for_append(self) -> list:
        if not self.path.exists():
            _write_text(self.path, "[]")
            logger.info(f"Created notification log {self.path}")
            return []

        raw = self.path.read_bytes()
        records = _parse_array(raw)
        if records is None:
            self._quarantine(raw)
            return []
        return records

    def _read_fallback(self) -> Optional[list]:
        try:
            if not self.fallback_path.is_file():
                return None
            records = _parse_array(self.fallback_path.read_bytes())
        except OSError as e:
            logger.error(f"Could not read fallback log {self.fallback_path}: {e}")
            return None
        if records is None:
            logger.warning(f"Fallback log {self.fallback_path} is unreadable, rewriting it")
        return records

    def _quarantine(self, raw: bytes):
        if self.quarantine_dir is None:
            logger.warning(f"Discarding unreadable content of {self.path}")
            return
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        target = self.quarantine_dir / f"{self.path.stem}.{stamp}.corrupt"
        try:
            self.quarantine_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(raw)
            logger.warning(f"Unreadable log content moved to {target}")
        except OSError as e:
            logger.error(f"Could not quarantine unreadable log content: {e}")


def _parse_array(raw: bytes) -> Optional[list]:
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if not content.strip():
        return []
    try:
        data = json.loads(content)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, list) else None


class JsonLinesLogStore:
    """Appends one JSON object per line, never reading the file back."""

    def __init__(self, path: Path, fallback_path: Optional[Path] = None):
        self.path = Path(path)
        self.fallback_path = Path(fallback_path) if fallback_path else None
        self._lock = threading.Lock()

    def append(self, record: dict) -> bool:
        line = json.dumps(record, ensure_ascii=False) + "\n"
        with self._lock:
            try:
                _append_text(self.path, line)
                return True
            except StoreError as e:
                logger.error(f"Error saving notification: {e}")

            if self.fallback_path is None:
                logger.error("No fallback location configured, notification lost")
                return False

            try:
                _append_text(self.fallback_path, line)
                logger.warning(f"Notification written to fallback log {self.fallback_path}")
                return True
            except StoreError as e:
                logger.error(f"Fallback write failed, notification lost: {e}")
                return False

    def read_all(self) -> list:
        if not self.path.exists():
            return []
        records = []
        with open(self.path, "rb") as f:
            for number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    records.append(json.loads(line))
                except (ValueError, RecursionError):
                    logger.warning(f"Skipping unreadable line {number} of {self.path}")
        return records


def build_store(config):
    if config.log_format == "jsonl":
        return JsonLinesLogStore(config.log_path, config.fallback_path)
    if config.log_format != "array":
        raise ValueError(f"Unknown log format: {config.log_format}")
    return AppendLogStore(config.log_path, config.fallback_path, config.quarantine_dir)
