from enum import Enum
from urllib.parse import urlparse, unquote

from core import logger
from domain.enums.playback import PlaybackBackend
from domain.models.source import NativeSource
from .audio_engine.core.engine import CoreEngine


class AudioServiceState(Enum):
    ACTIVE = "active"
    DORMANT = "dormant"


def local_path(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return unquote(parsed.path)
    return url


class AudioEngineService:
    """Native audio driver: plays NativeSource media through the CoreEngine"""
    backend = PlaybackBackend.NATIVE

    def __init__(self, engine: CoreEngine = None, buffer_size=1024, samplerate=44100):
        """
        :param engine: created lazily on first load when omitted
        :param buffer_size:
        :param samplerate:
        """
        self.__engine = engine
        self._buffer_size = buffer_size
        self._samplerate = samplerate
        self._listener = None
        self._source: NativeSource | None = None
        self._generation = 0

    @property
    def engine(self) -> CoreEngine:
        if self.__engine is None:
            self.__engine = CoreEngine(sample_rate=self._samplerate, buffer_size=self._buffer_size)
        return self.__engine

    @property
    def state(self):
        if self._source and self.engine.is_playing():
            return AudioServiceState.ACTIVE
        return AudioServiceState.DORMANT

    def attach(self, listener):
        self._listener = listener

    def load(self, source: NativeSource) -> bool:
        """
        :param source:
        :return: True when the media could be opened
        """
        self._generation += 1
        generation = self._generation
        self._source = source

        engine = self.engine
        engine.register_end_event(lambda _: self._emit(generation, "on_ended"))
        engine.register_position_event(lambda elapsed, total: self._emit(generation, "on_progress", elapsed))
        engine.register_error_event(lambda error: self._emit(generation, "on_error", error[1]))

        if not engine.load_file(local_path(source.url)):
            return False
        self._emit(generation, "on_duration", engine.get_file_length())
        logger.info(f"[AudioService] Loaded {source.url}")
        return True

    def play(self):
        if self._source is None:
            return
        if self.engine.play():
            logger.info("[AudioService] Start playback")

    def pause(self):
        if self._source is None:
            return
        self.engine.pause()

    def seek(self, seconds: float):
        if self._source is None:
            return
        self.engine.seek(seconds)

    def set_volume(self, volume: float):
        self.engine.set_volume(volume)

    def teardown(self):
        """
        Stop output and forget the source. Late engine callbacks are ignored afterwards
        :return:
        """
        self._generation += 1
        if self._source is None:
            return
        self._source = None
        self.engine.clear_handlers()
        self.engine.stop(shutdown=True)

    def _emit(self, generation, name, *args):
        if generation != self._generation or self._listener is None:
            return
        getattr(self._listener, name)(self, *args)
