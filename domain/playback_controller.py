import random
from typing import List, Optional, Iterable

from core import logger
from core.event_bus import EventBus
from core.constants.events import PlaybackEvent
from adapters.config_store import ConfigStore, PLAYER_PREFERENCES_KEY
from domain.enums.playback import RepeatMode
from domain.models.session import PlaybackSnapshot
from domain.models.song import Track


# seconds into a track after which "previous" restarts it instead of skipping back
RESTART_THRESHOLD = 3
DEFAULT_VOLUME = 0.7


class PlaybackController:
    """
    Single source of truth for what is playing, in what order and at what position.

    Commands are synchronous and permissive: anything that cannot apply (empty queue,
    unknown id) changes nothing. Backend drivers observe the published events and report
    ground truth back through set_progress / set_duration.
    """

    def __init__(self, event_bus: EventBus, store: Optional[ConfigStore] = None,
                 rng: Optional[random.Random] = None):
        self._bus = event_bus
        self._store = store
        self._rng = rng or random.Random()

        # State
        self._current_track: Optional[Track] = None
        self._queue: List[Track] = []
        self._is_playing = False
        self._progress = 0.0
        self._duration = 0.0
        self._is_expanded = False

        # Settings, persisted
        self._volume = DEFAULT_VOLUME
        self._repeat = RepeatMode.OFF
        self._shuffle = False

        self._load_preferences()

    # Read access
    @property
    def current_track(self) -> Optional[Track]:
        return self._current_track

    @property
    def queue(self) -> List[Track]:
        return list(self._queue)

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def repeat(self) -> RepeatMode:
        return self._repeat

    @property
    def shuffle(self) -> bool:
        return self._shuffle

    @property
    def is_expanded(self) -> bool:
        return self._is_expanded

    def snapshot(self) -> PlaybackSnapshot:
        return PlaybackSnapshot(
            current_track=self._current_track,
            queue=tuple(self._queue),
            is_playing=self._is_playing,
            volume=self._volume,
            progress=self._progress,
            duration=self._duration,
            repeat=self._repeat,
            shuffle=self._shuffle,
            is_expanded=self._is_expanded,
        )

    # Track and queue
    def set_current_track(self, track: Optional[Track]):
        """
        Replace the current track and rewind. No validation, an unplayable track is accepted
        :param track:
        :return:
        """
        self._assign_track(track)
        self._notify()

    def set_queue(self, tracks: Iterable[Track]):
        self._queue = list(tracks)
        self._bus.publish(PlaybackEvent.QUEUE_UPDATED, self.queue)
        self._notify()

    def add_to_queue(self, track: Track):
        self._queue.append(track)
        self._bus.publish(PlaybackEvent.QUEUE_UPDATED, self.queue)
        self._notify()

    def remove_from_queue(self, track_id: str):
        """
        Removes every entry with this id, unknown ids are ignored
        :param track_id:
        :return:
        """
        remaining = [t for t in self._queue if t.id != track_id]
        if len(remaining) == len(self._queue):
            return
        self._queue = remaining
        self._bus.publish(PlaybackEvent.QUEUE_UPDATED, self.queue)
        self._notify()

    def clear_queue(self):
        if not self._queue:
            return
        self._queue = []
        self._bus.publish(PlaybackEvent.QUEUE_UPDATED, self.queue)
        self._notify()

    # Transport
    def play(self):
        self._set_playing(True)

    def pause(self):
        self._set_playing(False)

    def toggle(self):
        self._set_playing(not self._is_playing)

    def set_volume(self, volume: float):
        volume = min(1.0, max(0.0, float(volume)))
        if volume == self._volume:
            return
        self._volume = volume
        self._save_preferences(volume=volume)
        self._bus.publish(PlaybackEvent.VOLUME_CHANGED, volume)
        self._notify()

    def set_progress(self, progress: float):
        self._progress = max(0.0, float(progress))
        self._publish_progress()
        self._notify()

    def set_duration(self, duration: float):
        duration = float(duration or 0)
        if duration == self._duration:
            return
        self._duration = duration
        self._bus.publish(PlaybackEvent.DURATION_CHANGED, duration)
        self._notify()

    # Navigation logic
    def next_track(self):
        """
        Advance through the queue. Shuffle picks uniformly over the whole queue, current
        track included. Without shuffle the end of the queue wraps only on repeat all,
        otherwise the last entry is kept.
        :return:
        """
        if not self._queue:
            return

        current_index = self._current_index()
        if self._shuffle:
            next_index = self._rng.randrange(len(self._queue))
        elif current_index == len(self._queue) - 1:
            next_index = 0 if self._repeat == RepeatMode.ALL else current_index
        else:
            next_index = current_index + 1

        self._assign_track(self._queue[next_index])
        self._notify()

    def prev_track(self):
        """
        Restart the current track once it is past the threshold, otherwise step back,
        wrapping to the last entry from the first.
        :return:
        """
        if not self._queue:
            return

        if self._progress > RESTART_THRESHOLD:
            self._progress = 0.0
            self._publish_progress()
            if self._current_track is not None:
                self._bus.publish(PlaybackEvent.TRACK_RESTARTED, self._current_track)
            self._notify()
            return

        current_index = self._current_index() if self._current_track else 0
        prev_index = current_index - 1 if current_index > 0 else len(self._queue) - 1
        self._assign_track(self._queue[prev_index])
        self._notify()

    def has_next(self) -> bool:
        """
        Whether next_track would move somewhere other than staying on the last entry
        :return:
        """
        if not self._queue:
            return False
        if self._shuffle or self._repeat == RepeatMode.ALL:
            return True
        return self._current_index() < len(self._queue) - 1

    # Toggles
    def toggle_repeat(self) -> RepeatMode:
        self._repeat = self._repeat.next()
        self._save_preferences(repeat=self._repeat.value)
        self._bus.publish(PlaybackEvent.REPEAT_MODE, self._repeat)
        self._notify()
        return self._repeat

    def toggle_shuffle(self) -> bool:
        self._shuffle = not self._shuffle
        self._save_preferences(shuffle=self._shuffle)
        self._bus.publish(PlaybackEvent.SHUFFLE_TOGGLE, self._shuffle)
        self._notify()
        return self._shuffle

    def set_expanded(self, expanded: bool):
        expanded = bool(expanded)
        if expanded == self._is_expanded:
            return
        self._is_expanded = expanded
        self._bus.publish(PlaybackEvent.EXPANDED_CHANGED, expanded)
        self._notify()

    # Helpers
    def _current_index(self) -> int:
        if self._current_track is None:
            return -1
        for idx, track in enumerate(self._queue):
            if track.id == self._current_track.id:
                return idx
        return -1

    def _assign_track(self, track: Optional[Track]):
        self._current_track = track
        self._progress = 0.0
        logger.info(f"[Playback] Current track: {track.id if track else None}")
        self._bus.publish(PlaybackEvent.TRACK_CHANGED, track)
        self._publish_progress()

    def _set_playing(self, playing: bool):
        if playing == self._is_playing:
            return
        self._is_playing = playing
        self._bus.publish(PlaybackEvent.PLAY_STATE_CHANGED, playing)
        self._notify()

    def _publish_progress(self):
        self._bus.publish(PlaybackEvent.PROGRESS, {
            'elapsed': self._progress,
            'total': self._duration,
            'track_id': self._current_track.id if self._current_track else None
        })

    def _notify(self):
        self._bus.publish(PlaybackEvent.STATE_CHANGED, self.snapshot())

    def _load_preferences(self):
        if not self._store:
            return
        try:
            prefs = self._store.load(PLAYER_PREFERENCES_KEY) or {}
            if 'volume' in prefs:
                self._volume = min(1.0, max(0.0, float(prefs['volume'])))
            if 'repeat' in prefs:
                self._repeat = RepeatMode(prefs['repeat'])
            if 'shuffle' in prefs:
                self._shuffle = bool(prefs['shuffle'])
        except Exception as e:
            logger.warning(f"[Playback] Could not load preferences, using defaults: {e}")

    def _save_preferences(self, **patch):
        if not self._store:
            return
        try:
            self._store.save(PLAYER_PREFERENCES_KEY, patch)
        except Exception as e:
            logger.warning(f"[Playback] Dropped preference write {patch}: {e}")
