from core import logger
from core.event_bus import EventBus
from core.scheduler import Scheduler
from core.constants.events import PomodoroEvent


class PomodoroTicker:
    """Keeps one 1-second tick job alive exactly while the pomodoro is running"""
    job_name = "pomodoro.tick"

    def __init__(self, controller, scheduler: Scheduler, event_bus: EventBus, interval: float = 1):
        self._controller = controller
        self._scheduler = scheduler
        self._interval = interval
        event_bus.subscribe(PomodoroEvent.RUNNING_CHANGED, self.on_running_changed)
        if controller.is_running:
            self.on_running_changed(True)

    @property
    def active(self) -> bool:
        return self._scheduler.has_job(self.job_name)

    def on_running_changed(self, running: bool):
        if running:
            self._scheduler.add_interval_job(self.job_name, self._controller.tick, self._interval)
            logger.debug("[Pomodoro Ticker] Started")
        else:
            self._scheduler.remove_job_by_name(self.job_name)
            logger.debug("[Pomodoro Ticker] Stopped")
