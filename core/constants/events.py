from enum import Enum


class EventType(Enum):
    pass


class PlaybackEvent(EventType):
    TRACK_CHANGED = "playback.track_changed"  # Data: Track | None
    TRACK_RESTARTED = "playback.track_restarted"  # Data: Track
    PLAY_STATE_CHANGED = "playback.play_state"  # Data: bool
    VOLUME_CHANGED = "playback.volume"  # Data: float [0, 1]
    PROGRESS = "playback.progress"  # Data: dict {"elapsed": float, "total": float, "track_id": str}
    DURATION_CHANGED = "playback.duration"  # Data: float
    QUEUE_UPDATED = "playback.queue_updated"  # Data: list[Track]
    SHUFFLE_TOGGLE = "playback.shuffle_toggled"  # Data: bool
    REPEAT_MODE = "playback.repeat_mode"  # Data: RepeatMode
    EXPANDED_CHANGED = "playback.expanded"  # Data: bool
    STATE_CHANGED = "playback.state"  # Data: PlaybackSnapshot


class PlaybackEngineEvent(EventType):
    PLAYBACK_COMPLETED = "engine.completed"  # Data: Track
    PLAYBACK_ERROR = "engine.error"  # Data: str (error message)
    KILL = "engine.kill"  # Data int exit code


class PomodoroEvent(EventType):
    STATE_CHANGED = "pomodoro.state"  # Data: PomodoroSnapshot
    RUNNING_CHANGED = "pomodoro.running"  # Data: bool
    INTERVAL_COMPLETED = "pomodoro.interval_completed"  # Data: dict {title, message, mode, completed_sessions, long_break}


class MediaScannerEvent(EventType):
    SCANNER_STARTED = "scanner.started"  # Payload: str (path)
    SCANNER_PROGRESS = "scanner.progress"  # Payload: dict {"file": str, "count": int}
    SCANNER_FINISHED = "scanner.finished"  # Payload: list[Track]
    SCANNER_ERROR = "scanner.error"  # Payload Exception object
