from typing import List, Optional

from core import logger
from adapters.config_store import ConfigStore, scope_key, RECENTLY_PLAYED_PREFIX
from domain.models.song import Track


MAX_RECENT = 10


class RecentlyPlayed:
    """Most-recent-first history of started tracks, one list per identity"""

    def __init__(self, store: ConfigStore, user_id: Optional[str] = None, limit: int = MAX_RECENT):
        self._store = store
        self._limit = limit
        self.user_id = user_id

    def set_user_id(self, user_id: Optional[str]):
        self.user_id = user_id or None

    @property
    def scope(self) -> str:
        return scope_key(RECENTLY_PLAYED_PREFIX, self.user_id)

    def tracks(self) -> List[Track]:
        try:
            record = self._store.load(self.scope) or {}
            return [Track.from_dict(item) for item in record.get("tracks", [])]
        except Exception as e:
            logger.warning(f"[Recently Played] Could not read {self.scope}: {e}")
            return []

    def add(self, track: Track) -> List[Track]:
        """
        Move the track to the front, dropping older duplicates and anything past the limit
        :param track:
        :return: the updated list
        """
        recent = [t for t in self.tracks() if t.id != track.id]
        recent.insert(0, track)
        recent = recent[:self._limit]
        try:
            self._store.save(self.scope, {"tracks": [t.to_dict() for t in recent]})
        except Exception as e:
            logger.warning(f"[Recently Played] Dropped write to {self.scope}: {e}")
        return recent
