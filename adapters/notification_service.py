from concurrent.futures import ThreadPoolExecutor

from plyer import notification

from core import logger
from core.event_bus import EventBus
from core.constants.events import PomodoroEvent


class NotificationService:
    """
    Desktop notifications for finished pomodoro intervals.

    Fire-and-forget: notifications are shown on a single worker thread and any failure
    of the platform backend is logged, never raised.
    """

    def __init__(self, event_bus: EventBus, enabled: bool = True, app_name: str = "Clique Lounge",
                 timeout: int = 10):
        self._bus = event_bus
        self.enabled = enabled
        self._app_name = app_name
        self._timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="Notify")

        self._bus.subscribe(PomodoroEvent.INTERVAL_COMPLETED, self.on_interval_completed)

    def on_interval_completed(self, payload: dict):
        """
        :param payload: {title, message, mode, completed_sessions, long_break}
        :return:
        """
        if not self.enabled:
            logger.debug("[Notifications] Permission not granted, skipping")
            return None
        return self._executor.submit(self._show, payload.get("title", ""), payload.get("message", ""))

    def _show(self, title: str, message: str):
        try:
            notification.notify(title=title, message=message, app_name=self._app_name, timeout=self._timeout)
        except Exception as e:
            logger.warning(f"[Notifications] Could not show '{title}': {e}")

    def shutdown(self):
        self._executor.shutdown(wait=False)
