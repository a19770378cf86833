import math
import threading
from fractions import Fraction

import numpy as np
import soundfile as sf
import scipy.signal as sps

from adapters.audio_engine.errors import AudioEngineError
from core import logger


class CoreAudioChannel:
    def __init__(self, sample_rate=44100, buffer_size=512):
        self.file_path = ""
        self.buffer_size = buffer_size
        self.sample_rate = sample_rate
        self.audio_file = None  # Current audio file handle
        self.current_is_mono = False
        self.resample_ratio = 1.0  # Target rate / file rate
        self.up_factor = 1  # For resample_poly: numerator
        self.down_factor = 1  # For resample_poly: denominator
        self.playing = False
        self.paused = False
        self.do_not_play = True
        self.volume = 1.0
        self.lock = threading.Lock()
        self.on_playback_end = None
        self.file_length = 0.0

    def load_file(self, file_path):
        """
        Load a new audio file for playback, closing any existing file
        :param file_path:
        :return: [AudioEngineError, message] on failure
        """
        with self.lock:
            try:
                audio_file = sf.SoundFile(file_path, 'r')
            except Exception as e:
                error = f"Error loading file {file_path}: {e}"
                self.do_not_play = True
                logger.warning(f"[Audio Channel] {error}")
                return [AudioEngineError.CHANNEL_LOAD_ERROR, error]

            if self.audio_file is not None:
                self.audio_file.close()
            self.audio_file = audio_file
            self.file_path = file_path
            self.current_is_mono = audio_file.channels == 1
            self.do_not_play = False
            self.playing = False
            self.paused = False
            self.file_length = audio_file.frames / audio_file.samplerate

            # Determine resampling factors if the file's sample rate doesn't match.
            if audio_file.samplerate != self.sample_rate:
                self.resample_ratio = self.sample_rate / audio_file.samplerate
                frac = Fraction(self.sample_rate, audio_file.samplerate).limit_denominator(1000)
                self.up_factor = frac.numerator
                self.down_factor = frac.denominator
                logger.info(f"[Audio Channel] Resampling {audio_file.samplerate} -> {self.sample_rate} "
                            f"(up={self.up_factor}, down={self.down_factor})")
            else:
                self.resample_ratio = 1.0
                self.up_factor = 1
                self.down_factor = 1
        return None

    def get_next_buffer(self):
        """
        Return a buffer of self.buffer_size stereo frames at the target sample rate.
        :return:
        """
        ended = False
        with self.lock:
            if not self.playing or self.paused or self.audio_file is None:
                return np.zeros((self.buffer_size, 2), dtype=np.float32)

            if self.resample_ratio != 1.0:
                in_frames = int(math.ceil(self.buffer_size / self.resample_ratio))
            else:
                in_frames = self.buffer_size

            data = self.audio_file.read(in_frames, dtype='float32', always_2d=True)
            if len(data) < in_frames:
                ended = True

            if len(data) > 0:
                if self.current_is_mono:
                    data = np.tile(data, (1, 2))
                elif data.shape[1] > 2:
                    data = data[:, :2]
                if self.resample_ratio != 1.0:
                    data = sps.resample_poly(data, self.up_factor, self.down_factor, axis=0)

            output = np.zeros((self.buffer_size, 2), dtype=np.float32)
            frames = min(len(data), self.buffer_size)
            output[:frames] = data[:frames]
            output *= self.volume

            if ended:
                self.playing = False

        # handler may call back into the channel
        if ended and self.on_playback_end:
            self.on_playback_end(self)
        return output

    def set_volume(self, volume):
        """
        :param volume: 0 - 1
        :return:
        """
        with self.lock:
            self.volume = float(min(1.0, max(0.0, volume)))

    def set_position(self, pos):
        """
        :param pos: seconds
        :return: [AudioEngineError, message] on failure
        """
        with self.lock:
            if self.audio_file is None:
                return None
            frame = int(min(max(0.0, pos), self.file_length) * self.audio_file.samplerate)
            try:
                self.audio_file.seek(frame)
            except (ValueError, RuntimeError) as e:
                return [AudioEngineError.CHANNEL_SEEK_ERROR, f"Seek to {pos} failed: {e}"]
        return None

    def get_position(self):
        with self.lock:
            if self.audio_file is not None:
                return self.audio_file.tell() / self.audio_file.samplerate
            return 0.0

    def play(self):
        with self.lock:
            if self.audio_file is not None and not self.do_not_play:
                self.playing = True
                self.paused = False
            return self.playing

    def pause(self):
        with self.lock:
            self.paused = True

    def close(self):
        """
        Close any open file handles
        :return:
        """
        with self.lock:
            self.playing = False
            if self.audio_file is not None:
                self.audio_file.close()
                self.audio_file = None
            self.do_not_play = True
