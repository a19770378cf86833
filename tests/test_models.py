"""Tests for tracks and playback source resolution."""

from domain.enums.playback import PlaybackBackend, RepeatMode
from domain.enums.pomodoro import PomodoroMode
from domain.models.song import Track
from domain.models.source import EmbeddedSource, NativeSource, resolve_source
from fakes import make_track


class TestResolveSource:
    def test_native(self):
        source = resolve_source(make_track("a"))
        assert source == NativeSource("/music/a.mp3")
        assert source.backend == PlaybackBackend.NATIVE

    def test_embedded(self):
        source = make_track("v", youtube_id="abc").source
        assert source == EmbeddedSource("abc")
        assert source.backend == PlaybackBackend.EMBEDDED

    def test_audio_url_wins_over_video_id(self):
        assert make_track("both", youtube_id="abc", audio_url="/x.mp3").source == NativeSource("/x.mp3")

    def test_unplayable(self):
        assert make_track("none", audio_url=None).source is None
        assert resolve_source(None) is None


class TestTrack:
    def test_from_dict_camel_case(self):
        track = Track.from_dict({"id": 7, "name": "Song", "artist": "Band", "coverUrl": "c.jpg", "youtubeId": "abc"})
        assert track.id == "7"
        assert track.cover_url == "c.jpg"
        assert track.youtube_id == "abc"
        assert track.duration == 0

    def test_to_dict_round_trip(self):
        track = make_track("a", album="Album", cover_url="c.jpg")
        assert Track.from_dict(track.to_dict()) == track

    def test_is_live(self):
        assert make_track("a", duration=0).is_live is True
        assert make_track("a", duration=240).is_live is False


def test_repeat_mode_cycle():
    assert RepeatMode.OFF.next() == RepeatMode.ALL
    assert RepeatMode.ALL.next() == RepeatMode.ONE
    assert RepeatMode.ONE.next() == RepeatMode.OFF


def test_pomodoro_mode_other():
    assert PomodoroMode.WORK.other == PomodoroMode.BREAK
    assert PomodoroMode.BREAK.other == PomodoroMode.WORK
