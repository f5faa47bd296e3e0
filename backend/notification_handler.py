from typing import Optional

from extractor.extraction import Notification, extract
from log_setup import get_logger

logger = get_logger(__name__)


class NotificationHandler:
    def __init__(self, source_filter, store):
        self.source_filter = source_filter
        self.store = store

    def handle_notification(self, data) -> Optional[Notification]:
        """
        Process a single notification sent from the device.

        Returns the stored notification, or None when it was filtered out or
        could not be processed. Errors stop here so the next notification is
        still handled.
        """
        try:
            notification = extract(data)
            if not self.source_filter.accept(notification):
                return None

            if not self.store.append(notification.to_record()):
                return None

            logger.info(f"Notification saved: {notification.title} from {notification.package_name}")
            if notification.has_expanded_content:
                logger.debug(f"Expanded content captured: {notification.expanded_text}")
            return notification
        except Exception:
            logger.exception("Error processing notification")
            return None
