from typing import Callable, Optional, Protocol

from core import logger
from core.scheduler import Scheduler
from domain.enums.playback import PlaybackBackend, EmbeddedPlayerState
from domain.models.source import EmbeddedSource


class EmbeddedPlayerHandle(Protocol):
    """The host's embedded video player. Volume is on a 0-100 scale"""

    def play_video(self) -> None: ...

    def pause_video(self) -> None: ...

    def seek_to(self, seconds: float, allow_seek_ahead: bool) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def get_current_time(self) -> float: ...

    def get_duration(self) -> float: ...

    def destroy(self) -> None: ...


class EmbeddedPlayerService:
    """
    Embedded video driver.

    The host creates a player for a video id through `handle_factory` and forwards the
    player's ready / state-change / error callbacks to on_ready, on_state_change and
    on_error. Duration is only known once the player reports ready. Commands issued
    before that are remembered and applied on ready.
    """
    backend = PlaybackBackend.EMBEDDED
    poll_job = "embedded.progress"

    def __init__(self, handle_factory: Callable[[str, "EmbeddedPlayerService"], EmbeddedPlayerHandle],
                 scheduler: Scheduler, poll_interval: float = 1):
        self._factory = handle_factory
        self._scheduler = scheduler
        self._poll_interval = poll_interval
        self._listener = None

        self._handle: Optional[EmbeddedPlayerHandle] = None
        self._source: Optional[EmbeddedSource] = None
        self._ready = False
        self._want_playing = False
        self._volume = 1.0

    def attach(self, listener):
        self._listener = listener

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def polling(self) -> bool:
        return self._scheduler.has_job(self.poll_job)

    def load(self, source: EmbeddedSource) -> bool:
        self.teardown()
        self._source = source
        self._want_playing = False
        try:
            self._handle = self._factory(source.video_id, self)
        except Exception as e:
            logger.warning(f"[Embedded Player] Could not create player for {source.video_id}: {e}")
            self._source = None
            self._emit("on_error", f"Could not create player: {e}")
            return False
        logger.info(f"[Embedded Player] Loading {source.video_id}")
        return True

    def play(self):
        self._want_playing = True
        if self._ready:
            self._call("play_video")

    def pause(self):
        self._want_playing = False
        if self._ready:
            self._call("pause_video")

    def seek(self, seconds: float):
        self._call("seek_to", seconds, True)

    def set_volume(self, volume: float):
        self._volume = volume
        if self._ready:
            self._call("set_volume", volume * 100)

    def teardown(self):
        """
        Stop polling and drop the player. Callbacks from it are ignored afterwards
        :return:
        """
        self._stop_polling()
        handle, self._handle = self._handle, None
        self._source = None
        self._ready = False
        if handle is not None:
            try:
                handle.destroy()
            except Exception as e:
                logger.debug(f"[Embedded Player] Destroy failed: {e}")

    # Callbacks from the embedded player
    def on_ready(self, handle=None):
        if not self._is_current(handle):
            return
        self._ready = True
        self._call("set_volume", self._volume * 100)
        duration = self._call("get_duration")
        if duration is not None:
            self._emit("on_duration", duration)
        if self._want_playing:
            self._call("play_video")

    def on_state_change(self, state: int, handle=None):
        if not self._is_current(handle):
            return
        try:
            state = EmbeddedPlayerState(state)
        except ValueError:
            logger.debug(f"[Embedded Player] Unknown state {state}")
            return

        if state == EmbeddedPlayerState.PLAYING:
            self._scheduler.add_interval_job(self.poll_job, self._poll_progress, self._poll_interval)
        elif state in (EmbeddedPlayerState.PAUSED, EmbeddedPlayerState.ENDED):
            self._stop_polling()
            if state == EmbeddedPlayerState.ENDED:
                self._emit("on_ended")

    def on_error(self, code, handle=None):
        if not self._is_current(handle):
            return
        logger.warning(f"[Embedded Player] Player error {code} for {self._source.video_id}")
        self._stop_polling()
        self._emit("on_error", f"Embedded player error {code}")

    # Helpers
    def _poll_progress(self):
        current = self._call("get_current_time")
        if current is not None:
            self._emit("on_progress", current)

    def _stop_polling(self):
        self._scheduler.remove_job_by_name(self.poll_job)

    def _is_current(self, handle) -> bool:
        if self._handle is None:
            return False
        return handle is None or handle is self._handle

    def _call(self, method, *args):
        if self._handle is None:
            return None
        try:
            return getattr(self._handle, method)(*args)
        except Exception as e:
            # player not ready yet, the next callback reconciles
            logger.debug(f"[Embedded Player] {method} failed: {e}")
            return None

    def _emit(self, name, *args):
        if self._listener is not None:
            getattr(self._listener, name)(self, *args)
