from enum import Enum


class AudioEngineError(Enum):
    CHANNEL_LOAD_ERROR = "channel.load_file.error"
    CHANNEL_SEEK_ERROR = "channel.seek.error"
    PLAYBACK_ERROR = "engine.play.error"
    STREAM_ERROR = "engine.stream.error"
