"""Tests for the extract -> filter -> append pipeline"""

from __future__ import annotations

import json
from datetime import datetime

from database.database import AppendLogStore
from extractor.source_filter import SourceFilter
from notification_handler import NotificationHandler


def _handler(log_config):
    store = AppendLogStore(log_config.log_path, log_config.fallback_path, log_config.quarantine_dir)
    return NotificationHandler(SourceFilter(log_config.allowed_sources), store), store


def test_two_notifications_logged_in_order(log_config, make_payload):
    handler, _ = _handler(log_config)
    t1, t2 = 1700000000000, 1700000060000

    handler.handle_notification(make_payload(title="A", text="B", post_time=t1))
    handler.handle_notification(make_payload(title="C", text="D", post_time=t2))

    records = json.loads(log_config.log_path.read_text(encoding="utf-8"))
    assert [(r["title"], r["text"], r["timestamp"]) for r in records] == [
        ("A", "B", datetime.fromtimestamp(t1 / 1000).strftime("%Y-%m-%d %H:%M:%S")),
        ("C", "D", datetime.fromtimestamp(t2 / 1000).strftime("%Y-%m-%d %H:%M:%S")),
    ]


def test_other_source_leaves_log_untouched(log_config, make_payload):
    handler, _ = _handler(log_config)
    handler.handle_notification(make_payload(title="kept"))
    before = log_config.log_path.read_bytes()

    result = handler.handle_notification(make_payload(title="dropped", package="com.whatsapp"))

    assert result is None
    assert log_config.log_path.read_bytes() == before


def test_rejected_first_event_creates_no_file(log_config, make_payload):
    handler, _ = _handler(log_config)

    handler.handle_notification(make_payload(package="com.other.app"))

    assert not log_config.log_path.exists()


def test_corrupt_log_leaves_exactly_one_record(log_config, make_payload):
    log_config.log_path.write_text("not json at all", encoding="utf-8")
    handler, store = _handler(log_config)

    handler.handle_notification(make_payload(title="fresh"))

    records = store.read_all()
    assert len(records) == 1
    assert records[0]["title"] == "fresh"


def test_store_errors_do_not_escape(log_config, make_payload, caplog):
    class ExplodingStore:
        def append(self, record):
            raise RuntimeError("disk on fire")

    handler = NotificationHandler(SourceFilter(log_config.allowed_sources), ExplodingStore())

    assert handler.handle_notification(make_payload()) is None
    assert "Error processing notification" in caplog.text


def test_returns_stored_notification(log_config, make_payload):
    handler, _ = _handler(log_config)

    notification = handler.handle_notification(
        make_payload(text="Hi", extras={"android.textLines": ["Hi", "How are you?"]})
    )

    assert notification.expanded_text == "Hi\nHow are you?"
    assert notification.has_expanded_content is True


def test_deeply_nested_log_heals_on_next_notification(log_config, make_payload):
    log_config.log_path.write_text("[" * 100000, encoding="utf-8")
    handler, store = _handler(log_config)

    assert handler.handle_notification(make_payload(title="first")) is not None
    assert handler.handle_notification(make_payload(title="second")) is not None

    assert [r["title"] for r in store.read_all()] == ["first", "second"]
