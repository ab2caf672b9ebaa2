import logging

logger = logging.getLogger(__name__)


class Diagnostics:
    """Collects debug messages for a single analysis call.

    An instance is created per call and handed to whatever wants to report
    on itself. When disabled, messages are dropped without being formatted.
    """

    def __init__(self, enabled=False):
        self.enabled = enabled
        self._messages = []

    def add_message(self, key, value):
        if not self.enabled:
            return
        self._messages.append({key: value})
        logger.debug("%s: %r", key, value)

    @property
    def messages(self):
        return list(self._messages)

    def __len__(self):
        return len(self._messages)
