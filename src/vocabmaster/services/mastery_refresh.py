"""Notification of mastery data changes to interested listeners."""
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], None]


class MasteryRefreshManager:
    """Observer list told when mastery data changed and should be re-read."""

    def __init__(self):
        self._listeners: List[RefreshCallback] = []
        self.version = 0

    def subscribe(self, callback: RefreshCallback) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(callback)
        logger.debug(f"Mastery refresh listener subscribed. Total listeners: {len(self._listeners)}")

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)
                logger.debug(f"Mastery refresh listener removed. Remaining: {len(self._listeners)}")

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def refresh(self) -> None:
        """Bump the version and notify every listener."""
        self.version += 1
        logger.debug(f"Triggering mastery refresh v{self.version} for {len(self._listeners)} listeners")
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("Error in mastery refresh listener")
