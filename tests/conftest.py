"""
Pytest configuration for the notification logger

Provides temporary log locations and payload builders shared across tests
"""

from pathlib import Path

import pytest

from config import LoggerConfig


@pytest.fixture
def log_config(tmp_path: Path) -> LoggerConfig:
    """Config pointing every location into the test's temp dir"""
    return LoggerConfig(
        log_path=tmp_path / "notifications.json",
        fallback_path=tmp_path / "fallback" / "notifications.json",
        quarantine_dir=tmp_path / "quarantine",
        allowed_sources=("com.example.target",),
        log_format="array",
    )


@pytest.fixture
def make_payload():
    """Build a raw notification payload as the device bridge posts it"""

    def _make(title="A", text="B", package="com.example.target", post_time=1700000000000,
              notification_id=1, key="0|com.example.target|1|null|10001", extras=None):
        payload_extras = {"android.title": title, "android.text": text}
        payload_extras.update(extras or {})
        return {
            "packageName": package,
            "postTime": post_time,
            "id": notification_id,
            "key": key,
            "extras": payload_extras,
        }

    return _make
