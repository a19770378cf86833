from typing import Iterable, Optional

from adapters.video_search import VideoResult, video_to_track
from domain.models.song import Track
from domain.playback_controller import PlaybackController
from domain.recently_played import RecentlyPlayed


class PlayerActions:
    """User-level play commands composed from the controller primitives"""

    def __init__(self, playback: PlaybackController, recent: RecentlyPlayed):
        self._playback = playback
        self._recent = recent

    def play_track(self, track: Track, queue: Optional[Iterable[Track]] = None):
        """
        Start a track, optionally replacing the queue it belongs to, and record it as recently played
        :param track:
        :param queue:
        :return:
        """
        self._playback.set_current_track(track)
        if queue is not None:
            self._playback.set_queue(queue)
        self._recent.add(track)
        self._playback.play()

    def play_video(self, video: VideoResult) -> Track:
        track = video_to_track(video)
        self._playback.set_current_track(track)
        self._playback.play()
        return track
