from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from config import SCHEMA_VERSION, TIMESTAMP_FORMAT
from log_setup import get_logger

logger = get_logger(__name__)

# Keys of the extras bundle forwarded by the device-side listener
EXTRA_TITLE = "android.title"
EXTRA_TEXT = "android.text"
EXTRA_BIG_TEXT = "android.bigText"
EXTRA_TEXT_LINES = "android.textLines"
EXTRA_SUMMARY_TEXT = "android.summaryText"


@dataclass
class Notification:
    title: str
    text: str
    expanded_text: str
    package_name: str
    timestamp: str
    notification_id: int
    notification_key: str

    @property
    def has_expanded_content(self) -> bool:
        return has_expanded_content(self.expanded_text, self.text)

    def to_record(self) -> dict:
        return {
            "title": self.title,
            "text": self.text,
            "packageName": self.package_name,
            "timestamp": self.timestamp,
            "expandedText": self.expanded_text,
            "hasExpandedContent": self.has_expanded_content,
            "notificationId": self.notification_id,
            "notificationKey": self.notification_key,
            "schemaVersion": SCHEMA_VERSION,
        }


def has_expanded_content(expanded_text: str, text: str) -> bool:
    return bool(expanded_text) and expanded_text != text


def merge_expanded_text(big_text: str, text_lines: Iterable[str], summary: str) -> str:
    """
    Build the expanded form of a notification.

    Big text comes first, then every inbox line, then the summary unless the
    summary already occurs somewhere in what was collected.
    """
    expanded = big_text or ""

    for line in text_lines or ():
        if expanded:
            expanded += "\n"
        expanded += line

    if summary and summary not in expanded:
        if expanded:
            expanded += "\n"
        expanded += summary

    return expanded


def format_timestamp(post_time_ms: Optional[int]) -> str:
    if post_time_ms is None:
        moment = datetime.now()
    else:
        moment = datetime.fromtimestamp(post_time_ms / 1000)
    return moment.strftime(TIMESTAMP_FORMAT)


def _read_str(source: Mapping[str, Any], key: str) -> str:
    try:
        value = source.get(key)
        return "" if value is None else str(value)
    except Exception as e:
        logger.warning(f"Could not read {key}: {type(e).__name__}: {e}")
        return ""


def _read_lines(extras: Mapping[str, Any]) -> list:
    try:
        lines = extras.get(EXTRA_TEXT_LINES)
        if not isinstance(lines, (list, tuple)):
            return []
        return [str(line) for line in lines if line is not None]
    except Exception as e:
        logger.warning(f"Could not read {EXTRA_TEXT_LINES}: {type(e).__name__}: {e}")
        return []


def _read_int(source: Mapping[str, Any], key: str, default: Optional[int] = 0) -> Optional[int]:
    try:
        value = source.get(key)
        if value is None or isinstance(value, bool):
            return default
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Could not read {key}: {type(e).__name__}: {e}")
        return default


def _format_post_time(raw: Mapping[str, Any]) -> str:
    try:
        return format_timestamp(_read_int(raw, "postTime", default=None))
    except (OverflowError, OSError, ValueError) as e:
        logger.warning(f"Unusable postTime, using arrival time: {e}")
        return format_timestamp(None)


def extract(raw: Any) -> Notification:
    """
    Reduce a posted notification payload to a Notification.

    Never raises: any field that cannot be read becomes an empty value.
    """
    if not isinstance(raw, Mapping):
        raw = {}

    extras = raw.get("extras")
    if not isinstance(extras, Mapping):
        extras = {}

    text = _read_str(extras, EXTRA_TEXT)
    expanded_text = merge_expanded_text(
        _read_str(extras, EXTRA_BIG_TEXT),
        _read_lines(extras),
        _read_str(extras, EXTRA_SUMMARY_TEXT),
    )

    return Notification(
        title=_read_str(extras, EXTRA_TITLE),
        text=text,
        expanded_text=expanded_text,
        package_name=_read_str(raw, "packageName"),
        timestamp=_format_post_time(raw),
        notification_id=_read_int(raw, "id"),
        notification_key=_read_str(raw, "key"),
    )
