"""Tests for building native tracks from a music directory."""

import pytest

from adapters.media_scanner import MediaScanner
from core.constants.events import MediaScannerEvent
from core.utility.tag_reader import TagReader
from domain.enums.media_scanner import ScannerState
from fakes import EventLog, write_tone


@pytest.fixture
def music_dir(tmp_path):
    root = tmp_path / "music"
    (root / "album").mkdir(parents=True)
    write_tone(root / "b_song.wav", seconds=1)
    write_tone(root / "album" / "a_song.WAV", seconds=2)
    (root / "notes.txt").write_text("not audio")
    return root


class TestMediaScanner:
    def test_scan(self, bus, music_dir):
        scanner = MediaScanner(bus)
        log = EventLog(bus, MediaScannerEvent.SCANNER_STARTED, MediaScannerEvent.SCANNER_FINISHED)

        tracks = scanner.scan_directory(str(music_dir))

        assert sorted(t.name for t in tracks) == ["a_song", "b_song"]
        assert scanner.status == ScannerState.COMPLETE
        assert log.of(MediaScannerEvent.SCANNER_STARTED) == [str(music_dir)]
        assert log.of(MediaScannerEvent.SCANNER_FINISHED) == [tracks]

    def test_track_fields(self, bus, music_dir):
        track = MediaScanner(bus).read_track(str(music_dir / "b_song.wav"))
        assert track.id.startswith("local-")
        assert track.audio_url == str(music_dir / "b_song.wav")
        assert track.artist == "Unknown artist"
        assert track.duration == 1
        assert track.cover_url is None
        assert track.source.url == track.audio_url

    def test_ids_are_stable(self, bus, music_dir):
        scanner = MediaScanner(bus)
        path = str(music_dir / "b_song.wav")
        assert scanner.read_track(path).id == scanner.read_track(path).id

    def test_extension_filter(self, bus, music_dir):
        scanner = MediaScanner(bus, extensions=["mp3", "xyz"])
        assert scanner.extensions == ["mp3"]
        assert scanner.scan_directory(str(music_dir)) == []

    def test_progress_events(self, bus, music_dir):
        log = EventLog(bus, MediaScannerEvent.SCANNER_PROGRESS)
        MediaScanner(bus).scan_directory(str(music_dir))
        assert [p["count"] for p in log.of(MediaScannerEvent.SCANNER_PROGRESS)] == [1, 2]


def test_untagged_file_length(music_dir):
    """A file without tags still reports its length."""
    tag = TagReader(path=str(music_dir / "album" / "a_song.WAV"), autoextract=True)
    assert tag.file_length == pytest.approx(2.0)
    assert tag.artist == "Unknown artist"
