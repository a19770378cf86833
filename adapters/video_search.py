import html
import time
from dataclasses import dataclass
from typing import List, Optional

import requests

from core import logger
from domain.models.song import Track


SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"


class VideoSearchError(Exception):
    """The search provider could not be reached or refused the request"""


@dataclass(frozen=True)
class VideoResult:
    id: str
    title: str
    channel: str
    thumbnail: str
    published_at: Optional[str] = None


class VideoSearchClient:
    def __init__(self, api_key: str, session: requests.Session = None, timeout: int = 30):
        self._api_key = api_key
        self._session = session or requests.Session()
        self._timeout = timeout

    def search(self, query: str, max_results: int = 12) -> List[VideoResult]:
        """
        Search embeddable music videos
        :param query:
        :param max_results:
        :return:
        """
        query = (query or "").strip()
        if not query:
            return []

        params = {
            "part": "snippet",
            "type": "video",
            "videoCategoryId": "10",
            "videoEmbeddable": "true",
            "maxResults": max_results,
            "q": query,
            "key": self._api_key,
        }
        try:
            response = self._session.get(SEARCH_URL, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning(f"[Video Search] Request failed: {e}")
            raise VideoSearchError("Failed to search. Please try again.") from e

        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = None
            logger.warning(f"[Video Search] Search returned {response.status_code}: {message}")
            raise VideoSearchError(message or "Search failed")

        return [r for r in (self._parse_item(item) for item in response.json().get("items", [])) if r]

    @staticmethod
    def _parse_item(item: dict) -> Optional[VideoResult]:
        video_id = (item.get("id") or {}).get("videoId")
        if not video_id:
            return None
        snippet = item.get("snippet") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = (thumbnails.get("high") or thumbnails.get("medium") or thumbnails.get("default") or {}).get("url", "")
        return VideoResult(
            id=video_id,
            title=html.unescape(snippet.get("title", "")),
            channel=html.unescape(snippet.get("channelTitle", "")),
            thumbnail=thumbnail,
            published_at=snippet.get("publishedAt"),
        )


def video_to_track(video: VideoResult, now_ms: int = None) -> Track:
    """
    A search result as a playable track. Length stays indeterminate until the player reports it
    :param video:
    :param now_ms: makes the id unique per selection
    :return:
    """
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return Track(
        id=f"yt-{video.id}-{now_ms}",
        name=video.title,
        artist=video.channel,
        duration=0,
        cover_url=video.thumbnail,
        youtube_id=video.id,
    )
