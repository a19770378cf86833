"""Tests for the video search client with a mocked HTTP session."""

from unittest.mock import MagicMock

import pytest
import requests

from adapters.video_search import SEARCH_URL, VideoResult, VideoSearchClient, VideoSearchError, video_to_track


def response(status_code, payload):
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = payload
    return mock


ITEMS = {"items": [
    {
        "id": {"videoId": "abc123"},
        "snippet": {
            "title": "Rock &amp; Roll",
            "channelTitle": "Band&#39;s Channel",
            "publishedAt": "2024-01-01T00:00:00Z",
            "thumbnails": {"default": {"url": "https://i/default.jpg"}, "high": {"url": "https://i/high.jpg"}},
        },
    },
    {"id": {"kind": "youtube#channel"}, "snippet": {"title": "Not a video"}},
]}


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return VideoSearchClient("test-key", session=session, timeout=5)


class TestSearch:
    def test_parses_results(self, client, session):
        session.get.return_value = response(200, ITEMS)
        results = client.search("  rock  ")
        assert results == [VideoResult(
            id="abc123", title="Rock & Roll", channel="Band's Channel",
            thumbnail="https://i/high.jpg", published_at="2024-01-01T00:00:00Z",
        )]

    def test_request_parameters(self, client, session):
        session.get.return_value = response(200, {"items": []})
        client.search("jazz", max_results=5)
        args, kwargs = session.get.call_args
        assert args[0] == SEARCH_URL
        assert kwargs["params"]["q"] == "jazz"
        assert kwargs["params"]["maxResults"] == 5
        assert kwargs["params"]["key"] == "test-key"
        assert kwargs["params"]["videoEmbeddable"] == "true"
        assert kwargs["timeout"] == 5

    def test_blank_query_skips_request(self, client, session):
        assert client.search("   ") == []
        session.get.assert_not_called()

    def test_api_error_message(self, client, session):
        session.get.return_value = response(403, {"error": {"message": "quota exceeded"}})
        with pytest.raises(VideoSearchError, match="quota exceeded"):
            client.search("rock")

    def test_network_failure(self, client, session):
        session.get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(VideoSearchError, match="Failed to search"):
            client.search("rock")


def test_video_to_track():
    video = VideoResult(id="abc123", title="Song", channel="Band", thumbnail="https://i/high.jpg")
    track = video_to_track(video, now_ms=1700000000000)
    assert track.id == "yt-abc123-1700000000000"
    assert track.youtube_id == "abc123"
    assert track.audio_url is None
    assert track.duration == 0
    assert track.is_live is True
    assert track.cover_url == "https://i/high.jpg"
