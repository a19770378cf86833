from typing import Any, Dict, Optional

from core import logger
from core.event_bus import EventBus
from core.constants.events import PomodoroEvent
from adapters.config_store import ConfigStore, scope_key, POMODORO_PREFIX
from domain.enums.pomodoro import PomodoroMode
from domain.models.session import PomodoroSnapshot


DEFAULTS = {
    "work_duration": 25,
    "break_duration": 5,
    "long_break_duration": 15,
    "sessions_until_long_break": 4,
    "completed_sessions": 0,
    "auto_start_breaks": False,
    "auto_start_work": False,
}

MIN_SESSIONS_UNTIL_LONG_BREAK = 2

MINIMUMS = {
    "work_duration": 1,
    "break_duration": 1,
    "long_break_duration": 1,
    "sessions_until_long_break": MIN_SESSIONS_UNTIL_LONG_BREAK,
    "completed_sessions": 0,
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _coerce(field: str, value: Any) -> Any:
    """
    Convert a stored value to the type of its default, clamped to the field minimum
    :param field:
    :param value:
    :return: the converted value, or the default if it cannot be converted
    """
    default = DEFAULTS[field]
    if isinstance(default, bool):
        if isinstance(value, (bool, int)):
            return bool(value)
        logger.warning(f"[Pomodoro] Ignoring stored {field}={value!r}")
        return default

    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"[Pomodoro] Ignoring stored {field}={value!r}")
        return default
    return max(MINIMUMS[field], number)


class PomodoroController:
    """
    Work/break countdown driven by external one-second ticks.

    Configuration and the completed session counter are persisted per identity.
    Persistence failures never reach the caller, the controller keeps its in-memory
    values instead.
    """

    def __init__(self, event_bus: EventBus, store: Optional[ConfigStore] = None):
        self._bus = event_bus
        self._store = store

        self.mode = PomodoroMode.WORK
        self.work_duration = DEFAULTS["work_duration"]
        self.break_duration = DEFAULTS["break_duration"]
        self.long_break_duration = DEFAULTS["long_break_duration"]
        self.sessions_until_long_break = DEFAULTS["sessions_until_long_break"]
        self.completed_sessions = DEFAULTS["completed_sessions"]
        self.auto_start_breaks = DEFAULTS["auto_start_breaks"]
        self.auto_start_work = DEFAULTS["auto_start_work"]
        self.time_remaining = self.work_duration * 60
        self.current_task = ""
        self.is_running = False
        self.user_id: Optional[str] = None

    def snapshot(self) -> PomodoroSnapshot:
        return PomodoroSnapshot(
            mode=self.mode,
            time_remaining=self.time_remaining,
            work_duration=self.work_duration,
            break_duration=self.break_duration,
            long_break_duration=self.long_break_duration,
            sessions_until_long_break=self.sessions_until_long_break,
            completed_sessions=self.completed_sessions,
            current_task=self.current_task,
            auto_start_breaks=self.auto_start_breaks,
            auto_start_work=self.auto_start_work,
            is_running=self.is_running,
            user_id=self.user_id,
        )

    # Identity
    def set_user_id(self, user_id: Optional[str]):
        self.user_id = user_id or None
        self.load_user_data()

    def load_user_data(self):
        """
        Replace the configuration with the record stored for the current identity,
        defaulting anything missing. Always lands on an idle work interval.
        :return:
        """
        data = self._load()
        for field, default in DEFAULTS.items():
            value = data.get(field)
            if value is None:
                # records written by the web client use camelCase
                value = data.get(_camel(field))
            setattr(self, field, default if value is None else _coerce(field, value))

        self.mode = PomodoroMode.WORK
        self.time_remaining = self.work_duration * 60
        logger.info(f"[Pomodoro] Loaded settings for {scope_key(POMODORO_PREFIX, self.user_id)}")
        self._set_running(False)
        self._notify()

    # Run state
    def start(self):
        if self.is_running:
            return
        self._set_running(True)
        self._notify()

    def pause(self):
        if not self.is_running:
            return
        self._set_running(False)
        self._notify()

    def reset(self):
        """
        Refill the current interval and stop. Mode and counters are untouched
        :return:
        """
        if self.mode == PomodoroMode.WORK:
            self.time_remaining = self.work_duration * 60
        else:
            self.time_remaining = self._break_seconds(self.completed_sessions)
        self._set_running(False)
        self._notify()

    def tick(self):
        """
        One elapsed second. Completes the interval instead of reaching zero
        :return:
        """
        if not self.is_running:
            return

        if self.time_remaining > 1:
            self.time_remaining -= 1
            self._notify()
            return

        self._complete_interval()

    def _complete_interval(self):
        finished = self.mode
        new_mode = finished.other
        if finished == PomodoroMode.WORK:
            self.completed_sessions += 1

        long_break = new_mode == PomodoroMode.BREAK and self._is_long_break(self.completed_sessions)
        self.mode = new_mode
        if new_mode == PomodoroMode.WORK:
            self.time_remaining = self.work_duration * 60
        else:
            self.time_remaining = self._break_seconds(self.completed_sessions)

        self._set_running(self.auto_start_work if new_mode == PomodoroMode.WORK else self.auto_start_breaks)
        self._save(completed_sessions=self.completed_sessions)
        logger.info(f"[Pomodoro] {finished.value} interval complete, entering {new_mode.value}"
                    f" (sessions: {self.completed_sessions})")
        self._notify()
        self._bus.publish(PomodoroEvent.INTERVAL_COMPLETED, self._completion_message(new_mode, long_break))

    def skip_to_break(self):
        self.completed_sessions += 1
        self.mode = PomodoroMode.BREAK
        self.time_remaining = self._break_seconds(self.completed_sessions)
        self._set_running(self.auto_start_breaks)
        self._save(completed_sessions=self.completed_sessions)
        self._notify()

    def skip_to_work(self):
        self.mode = PomodoroMode.WORK
        self.time_remaining = self.work_duration * 60
        self._set_running(self.auto_start_work)
        self._notify()

    def set_task(self, task: str):
        self.current_task = task
        self._notify()

    # Settings
    def set_work_duration(self, minutes: int):
        self.work_duration = self._minutes(minutes)
        self._save(work_duration=self.work_duration)
        if self.mode == PomodoroMode.WORK and not self.is_running:
            self.time_remaining = self.work_duration * 60
        self._notify()

    def set_break_duration(self, minutes: int):
        self.break_duration = self._minutes(minutes)
        self._save(break_duration=self.break_duration)
        if self.mode == PomodoroMode.BREAK and not self.is_running:
            self.time_remaining = self.break_duration * 60
        self._notify()

    def set_long_break_duration(self, minutes: int):
        self.long_break_duration = self._minutes(minutes)
        self._save(long_break_duration=self.long_break_duration)
        self._notify()

    def set_sessions_until_long_break(self, sessions: int):
        self.sessions_until_long_break = max(MIN_SESSIONS_UNTIL_LONG_BREAK, int(sessions))
        self._save(sessions_until_long_break=self.sessions_until_long_break)
        self._notify()

    def toggle_auto_start_breaks(self) -> bool:
        self.auto_start_breaks = not self.auto_start_breaks
        self._save(auto_start_breaks=self.auto_start_breaks)
        self._notify()
        return self.auto_start_breaks

    def toggle_auto_start_work(self) -> bool:
        self.auto_start_work = not self.auto_start_work
        self._save(auto_start_work=self.auto_start_work)
        self._notify()
        return self.auto_start_work

    # Helpers
    def _is_long_break(self, sessions: int) -> bool:
        return sessions % self.sessions_until_long_break == 0

    def _break_seconds(self, sessions: int) -> int:
        if sessions > 0 and self._is_long_break(sessions):
            return self.long_break_duration * 60
        return self.break_duration * 60

    @staticmethod
    def _minutes(minutes) -> int:
        return max(1, int(minutes))

    def _completion_message(self, new_mode: PomodoroMode, long_break: bool) -> Dict[str, Any]:
        if new_mode == PomodoroMode.WORK:
            title, message = "Break over!", "Time to focus again!"
        else:
            title = "Great work!"
            message = (f"Session {self.completed_sessions} complete. "
                       f"Take a {'long ' if long_break else ''}break!")
        return {
            "title": title,
            "message": message,
            "mode": new_mode,
            "completed_sessions": self.completed_sessions,
            "long_break": long_break,
        }

    def _set_running(self, running: bool):
        if running == self.is_running:
            return
        self.is_running = running
        self._bus.publish(PomodoroEvent.RUNNING_CHANGED, running)

    def _notify(self):
        self._bus.publish(PomodoroEvent.STATE_CHANGED, self.snapshot())

    def _scope(self) -> str:
        return scope_key(POMODORO_PREFIX, self.user_id)

    def _load(self) -> Dict[str, Any]:
        if not self._store:
            return {}
        try:
            return self._store.load(self._scope()) or {}
        except Exception as e:
            logger.warning(f"[Pomodoro] Could not read {self._scope()}, using defaults: {e}")
            return {}

    def _save(self, **patch):
        if not self._store:
            return
        try:
            self._store.save(self._scope(), patch)
        except Exception as e:
            logger.warning(f"[Pomodoro] Dropped write to {self._scope()}: {e}")
