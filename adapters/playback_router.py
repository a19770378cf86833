from typing import Callable, Dict, Optional, Protocol

from core import logger
from core.event_bus import EventBus
from core.constants.events import PlaybackEvent, PlaybackEngineEvent
from domain.enums.playback import PlaybackBackend, RepeatMode
from domain.models.song import Track
from domain.playback_controller import PlaybackController


class PlaybackDriver(Protocol):
    backend: PlaybackBackend

    def attach(self, listener) -> None: ...

    def load(self, source) -> bool: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, seconds: float) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def teardown(self) -> None: ...


def _direct(name, func, *args):
    func(*args)


class PlaybackRouter:
    """
    Connects the PlaybackController to the backend drivers.

    Exactly one driver is mounted per current track, picked from the track's source.
    Driver callbacks (on_progress, on_duration, on_ended, on_error) are accepted from the
    mounted driver only and handed to `dispatch` so that all controller mutation runs on
    one owner thread.
    """

    def __init__(self, controller: PlaybackController, event_bus: EventBus,
                 drivers: Dict[PlaybackBackend, PlaybackDriver],
                 dispatch: Callable = None):
        self._controller = controller
        self._bus = event_bus
        self._drivers = drivers
        self._dispatch = dispatch or _direct
        self._active: Optional[PlaybackDriver] = None
        self._track: Optional[Track] = None

        for driver in drivers.values():
            driver.attach(self)

        self._bus.subscribe(PlaybackEvent.TRACK_CHANGED, self.on_track_changed, priority=5)
        self._bus.subscribe(PlaybackEvent.TRACK_RESTARTED, self.on_track_restarted)
        self._bus.subscribe(PlaybackEvent.PLAY_STATE_CHANGED, self.on_play_state_changed)
        self._bus.subscribe(PlaybackEvent.VOLUME_CHANGED, self.on_volume_changed)
        self._bus.subscribe(PlaybackEngineEvent.KILL, self.on_kill)

    @property
    def active_driver(self) -> Optional[PlaybackDriver]:
        return self._active

    # UI commands
    def seek(self, seconds: float):
        seconds = max(0.0, float(seconds))
        if self._active is not None:
            self._active.seek(seconds)
        self._controller.set_progress(seconds)

    def set_volume(self, volume: float):
        self._controller.set_volume(volume)

    # Controller events
    def on_track_changed(self, track: Optional[Track]):
        self._unmount()
        self._track = track
        if track is None:
            return

        source = track.source
        if source is None:
            logger.warning(f"[Router] Track {track.id} has no playable source")
            return

        driver = self._drivers.get(source.backend)
        if driver is None:
            logger.warning(f"[Router] No driver for {source.backend.value}")
            return

        self._active = driver
        self._controller.set_duration(0 if track.is_live else track.duration)
        if not driver.load(source):
            return
        # load may have failed through a callback
        if self._active is not driver:
            return
        driver.set_volume(self._controller.volume)
        if self._controller.is_playing:
            driver.play()
        logger.info(f"[Router] Mounted {source.backend.value} driver for {track.id}")

    def on_track_restarted(self, track: Track):
        if self._active is not None:
            self._active.seek(0)

    def on_play_state_changed(self, playing: bool):
        if self._active is None:
            return
        if playing:
            self._active.play()
        else:
            self._active.pause()

    def on_volume_changed(self, volume: float):
        if self._active is not None:
            self._active.set_volume(volume)

    def on_kill(self, exit_code=None):
        logger.info(f"[Router] Shutting down drivers ({exit_code})")
        self._unmount()

    # Driver callbacks
    def on_progress(self, driver, seconds):
        if driver is self._active:
            self._dispatch("playback.progress", self._apply, driver, self._controller.set_progress, seconds)

    def on_duration(self, driver, seconds):
        if driver is self._active:
            self._dispatch("playback.duration", self._apply, driver, self._controller.set_duration, seconds)

    def on_ended(self, driver):
        if driver is self._active:
            self._dispatch("playback.ended", self._apply, driver, self._handle_ended)

    def on_error(self, driver, message):
        if driver is self._active:
            self._dispatch("playback.error", self._apply, driver, self._handle_error, message)

    def _apply(self, driver, func, *args):
        # the driver may have been swapped while the call was queued
        if driver is self._active:
            func(*args)

    def _handle_ended(self):
        track = self._controller.current_track
        self._bus.publish(PlaybackEngineEvent.PLAYBACK_COMPLETED, track)

        if self._controller.repeat == RepeatMode.ONE:
            self._active.seek(0)
            self._controller.set_progress(0)
            self._active.play()
        elif self._controller.has_next():
            self._controller.next_track()
        else:
            self._controller.pause()

    def _handle_error(self, message):
        track = self._controller.current_track
        logger.warning(f"[Router] Playback failed for {track.id if track else None}: {message}")
        self._bus.publish(PlaybackEngineEvent.PLAYBACK_ERROR, message)

        # skip only when the queue offers something other than the failing track
        others = [t for t in self._controller.queue if track is None or t.id != track.id]
        if self._controller.has_next() and others:
            self._controller.next_track()
        else:
            self._unmount()
            self._controller.pause()

    def _unmount(self):
        driver, self._active = self._active, None
        if driver is not None:
            driver.teardown()
