from typing import Iterable

from log_setup import get_logger

logger = get_logger(__name__)


class SourceFilter:
    """Keeps notifications whose package name is on the allow-list."""

    def __init__(self, allowed_sources: Iterable[str]):
        self.allowed_sources = frozenset(allowed_sources)

    def accept(self, notification) -> bool:
        if notification.package_name in self.allowed_sources:
            return True
        logger.debug(f"Dropping notification from {notification.package_name or 'unknown'}")
        return False
