from enum import Enum


class PomodoroMode(Enum):
    WORK = "work"
    BREAK = "break"

    @property
    def other(self) -> "PomodoroMode":
        return PomodoroMode.BREAK if self is PomodoroMode.WORK else PomodoroMode.WORK
