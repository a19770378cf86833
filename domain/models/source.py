from dataclasses import dataclass
from typing import Optional, Union

from domain.enums.playback import PlaybackBackend


@dataclass(frozen=True)
class NativeSource:
    url: str
    backend = PlaybackBackend.NATIVE


@dataclass(frozen=True)
class EmbeddedSource:
    video_id: str
    backend = PlaybackBackend.EMBEDDED


PlaybackSource = Union[NativeSource, EmbeddedSource]


def resolve_source(track) -> Optional[PlaybackSource]:
    """
    Embedded when only a video id is present, native when there is a media url.
    A track with neither cannot be played.
    :param track:
    :return:
    """
    if track is None:
        return None
    if track.youtube_id and not track.audio_url:
        return EmbeddedSource(track.youtube_id)
    if track.audio_url:
        return NativeSource(track.audio_url)
    return None
