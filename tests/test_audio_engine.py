"""Tests for the audio channel and engine without an output device."""

from unittest.mock import patch

import numpy as np
import pytest

from adapters.audio_engine.core.channel import CoreAudioChannel
from adapters.audio_engine.core.engine import CoreEngine
from adapters.audio_engine.errors import AudioEngineError
from fakes import write_tone


@pytest.fixture
def tone(tmp_path):
    return write_tone(tmp_path / "tone.wav")


class Ended:
    def __init__(self):
        self.count = 0

    def __call__(self, *args):
        self.count += 1


class TestCoreAudioChannel:
    def test_load(self, tone):
        channel = CoreAudioChannel(44100, 1024)
        assert channel.load_file(tone) is None
        assert channel.file_length == pytest.approx(0.1)
        assert channel.up_factor == 1

    def test_missing_file(self, tmp_path):
        channel = CoreAudioChannel()
        error = channel.load_file(str(tmp_path / "missing.wav"))
        assert error[0] == AudioEngineError.CHANNEL_LOAD_ERROR
        assert channel.do_not_play is True

    def test_silent_until_played(self, tone):
        channel = CoreAudioChannel(44100, 1024)
        channel.load_file(tone)
        assert not channel.get_next_buffer().any()
        channel.play()
        buffer = channel.get_next_buffer()
        assert buffer.shape == (1024, 2)
        assert buffer.any()

    def test_volume_scales_output(self, tone):
        channel = CoreAudioChannel(44100, 1024)
        channel.load_file(tone)
        channel.set_volume(0)
        channel.play()
        assert not channel.get_next_buffer().any()

    def test_end_of_file(self, tone):
        channel = CoreAudioChannel(44100, 1024)
        ended = Ended()
        channel.on_playback_end = ended
        channel.load_file(tone)
        channel.play()
        for _ in range(10):
            channel.get_next_buffer()
        assert ended.count == 1
        assert channel.playing is False

    def test_seek(self, tone):
        channel = CoreAudioChannel(44100, 1024)
        channel.load_file(tone)
        assert channel.set_position(0.05) is None
        assert channel.get_position() == pytest.approx(0.05)

    def test_mono_file_is_resampled_to_stereo(self, tmp_path):
        path = write_tone(tmp_path / "mono.wav", samplerate=22050, channels=1)
        channel = CoreAudioChannel(44100, 1024)
        channel.load_file(path)
        assert (channel.up_factor, channel.down_factor) == (2, 1)
        channel.play()
        buffer = channel.get_next_buffer()
        assert buffer.shape == (1024, 2)
        assert np.allclose(buffer[:, 0], buffer[:, 1])


class TestCoreEngine:
    def test_load_error_reaches_handler(self, tmp_path):
        engine = CoreEngine()
        errors = []
        engine.register_error_event(errors.append)
        assert engine.load_file(str(tmp_path / "missing.wav")) is False
        assert errors[0][0] == AudioEngineError.CHANNEL_LOAD_ERROR
        assert engine.last_error() is errors[0]

    def test_play_without_file(self):
        engine = CoreEngine()
        assert engine.play() is None
        assert engine.last_error()[0] == AudioEngineError.PLAYBACK_ERROR

    def test_stream_failure_is_reported(self, tone):
        engine = CoreEngine()
        engine.load_file(tone)
        with patch.object(engine, "start_stream", side_effect=RuntimeError("no device")):
            assert engine.play() is None
        assert engine.last_error()[0] == AudioEngineError.STREAM_ERROR

    def test_callback_reports_position(self, tone):
        engine = CoreEngine(buffer_size=1024)
        positions = []
        engine.register_position_event(lambda elapsed, total: positions.append((elapsed, total)))
        engine.load_file(tone)
        with patch.object(engine, "start_stream"):
            assert engine.play() is True

        outdata = np.zeros((1024, 2), dtype=np.float32)
        engine._audio_callback(outdata, 1024, None, None)

        assert outdata.any()
        assert positions == [(pytest.approx(1024 / 44100), pytest.approx(0.1))]

    def test_errors_are_capped(self):
        engine = CoreEngine()
        for i in range(15):
            engine.add_error([AudioEngineError.PLAYBACK_ERROR, str(i)])
        assert len(engine.errors) == 10
        assert engine.last_error()[1] == "14"
