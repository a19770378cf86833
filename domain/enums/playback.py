from enum import Enum


class RepeatMode(Enum):
    OFF = "off"
    ALL = "all"
    ONE = "one"

    def next(self) -> "RepeatMode":
        """off -> all -> one -> off"""
        order = [RepeatMode.OFF, RepeatMode.ALL, RepeatMode.ONE]
        return order[(order.index(self) + 1) % len(order)]


class PlaybackBackend(Enum):
    NATIVE = "native"
    EMBEDDED = "embedded"


class EmbeddedPlayerState(Enum):
    UNSTARTED = -1
    ENDED = 0
    PLAYING = 1
    PAUSED = 2
    BUFFERING = 3
    CUED = 5
