from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.utility.utils import is_live_duration
from domain.models.source import resolve_source


@dataclass(frozen=True)
class Track:
    id: str
    name: str
    artist: str
    album: Optional[str] = None
    duration: float = 0
    cover_url: Optional[str] = None
    audio_url: Optional[str] = None
    youtube_id: Optional[str] = None

    @property
    def is_live(self) -> bool:
        """0 or anything past a day means no fixed end"""
        return is_live_duration(self.duration)

    @property
    def source(self):
        return resolve_source(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "artist": self.artist,
            "album": self.album,
            "duration": self.duration,
            "cover_url": self.cover_url,
            "audio_url": self.audio_url,
            "youtube_id": self.youtube_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        """
        Build a track from a stored record. Accepts the camelCase keys of the hosted records too
        :param data:
        :return:
        """
        def pick(snake, camel=None):
            if data.get(snake) is not None:
                return data.get(snake)
            return data.get(camel) if camel else None

        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            artist=data.get("artist") or "",
            album=data.get("album"),
            duration=data.get("duration") or 0,
            cover_url=pick("cover_url", "coverUrl"),
            audio_url=pick("audio_url", "audioUrl"),
            youtube_id=pick("youtube_id", "youtubeId"),
        )
