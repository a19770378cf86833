from dataclasses import dataclass
from typing import Optional, Tuple

from domain.enums.playback import RepeatMode
from domain.enums.pomodoro import PomodoroMode
from domain.models.song import Track


@dataclass(frozen=True)
class PlaybackSnapshot:
    current_track: Optional[Track]
    queue: Tuple[Track, ...]
    is_playing: bool
    volume: float
    progress: float
    duration: float
    repeat: RepeatMode
    shuffle: bool
    is_expanded: bool

    @property
    def progress_percent(self) -> float:
        if self.duration > 0:
            return min(100.0, self.progress / self.duration * 100)
        return 0.0


@dataclass(frozen=True)
class PomodoroSnapshot:
    mode: PomodoroMode
    time_remaining: int
    work_duration: int
    break_duration: int
    long_break_duration: int
    sessions_until_long_break: int
    completed_sessions: int
    current_task: str
    auto_start_breaks: bool
    auto_start_work: bool
    is_running: bool
    user_id: Optional[str]
