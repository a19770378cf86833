import time
import threading

import numpy as np

from adapters.audio_engine.errors import AudioEngineError
from adapters.audio_engine.core.channel import CoreAudioChannel
from core import logger


class CoreEngine:
    """
    Streams one channel to the default output device.

    Handlers are plain callables invoked from the audio thread:
    end(True), position(elapsed, total), error([AudioEngineError, message]).
    """

    def __init__(self, sample_rate=44100, buffer_size=1024, position_interval=0.25):
        self.buffer_size = buffer_size
        self.sample_rate = sample_rate
        self.position_interval = position_interval
        self.lock = threading.Lock()
        self.output_stream = None

        self._channel = CoreAudioChannel(sample_rate, buffer_size)
        self._channel.on_playback_end = self.handle_playback_end
        self._volume = 1.0
        self._last_position_report = 0.0

        # events
        self.end_event_handler = None
        self.position_event_handler = None
        self.error_event_handler = None

        self.errors = []

    def register_end_event(self, handle):
        self.end_event_handler = handle

    def register_position_event(self, handle):
        self.position_event_handler = handle

    def register_error_event(self, handle):
        self.error_event_handler = handle

    def clear_handlers(self):
        self.end_event_handler = None
        self.position_event_handler = None
        self.error_event_handler = None

    def add_error(self, error: list):
        """
        :param error: [AudioEngineError, error string]
        :return:
        """
        self.errors.append(error)
        # keep only last 10
        self.errors = self.errors[-10:]
        if self.error_event_handler:
            self.error_event_handler(error)

    def last_error(self):
        return self.errors[-1] if self.errors else None

    def is_playing(self):
        return self._channel.playing and not self._channel.paused

    def load_file(self, path):
        """
        :param path:
        :return: True when the file can be played
        """
        error = self._channel.load_file(path)
        if error:
            self.add_error(error)
            return False
        self._channel.set_volume(self._volume)
        return True

    def play(self):
        """
        Start or resume streaming the loaded file
        :return:
        """
        if self._channel.do_not_play:
            self.add_error([AudioEngineError.PLAYBACK_ERROR, "No playable file loaded"])
            return None

        try:
            self.start_stream()
        except Exception as e:
            self.add_error([AudioEngineError.STREAM_ERROR, f"Could not open output stream: {e}"])
            return None

        return self._channel.play()

    def start_stream(self):
        # PortAudio is only loaded once output is actually needed
        import sounddevice as sd

        with self.lock:
            if self.output_stream is not None:
                return
            self.output_stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=2,
                blocksize=self.buffer_size,
                callback=self._audio_callback,
                dtype="float32",
            )
            self.output_stream.start()

    def _audio_callback(self, outdata, frames, time_info, status):
        if status:
            logger.debug(f"[Audio Engine] Stream status: {status}")
        try:
            data = self._channel.get_next_buffer()
        except Exception as e:
            logger.warning(f"[Audio Engine] Buffer read failed: {e}")
            data = np.zeros((frames, 2), dtype=np.float32)
        outdata[:] = data[:frames]

        now = time.monotonic()
        if self.position_event_handler and self.is_playing() \
                and now - self._last_position_report >= self.position_interval:
            self._last_position_report = now
            self.position_event_handler(self.get_pos(), self.get_file_length())

    def handle_playback_end(self, channel):
        if self.end_event_handler:
            self.end_event_handler(True)

    def get_pos(self):
        return self._channel.get_position()

    def get_file_length(self):
        return self._channel.file_length

    def pause(self):
        self._channel.pause()

    def seek(self, seconds):
        error = self._channel.set_position(seconds)
        if error:
            self.add_error(error)

    def set_volume(self, volume):
        """
        Set volume in range 0 - 1
        :param volume:
        :return:
        """
        self._volume = float(min(1.0, max(0.0, volume)))
        self._channel.set_volume(self._volume)

    def stop(self, shutdown=False):
        self._channel.close()
        if shutdown:
            self.shutdown()

    def shutdown(self):
        with self.lock:
            stream, self.output_stream = self.output_stream, None
        if stream is not None:
            try:
                stream.stop()
                stream.close()
            except Exception as e:
                logger.warning(f"[Audio Engine] Stream close failed: {e}")
