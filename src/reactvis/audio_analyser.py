import logging
import sys

import librosa
import numpy as np

from reactvis.constants import (
    DB_FLOOR,
    HOP_LENGTH,
    LOW_BAND,
    MID_BAND,
    N_BINS,
    N_FFT,
    SILENCE_RMS,
)
from reactvis.spectrum_frame import SpectrumFrame

logger = logging.getLogger(__name__)


class AudioAnalyser:
    """
    Handles loading audio and turning it into one SpectrumFrame per render tick.
    """

    def __init__(self, y, sr):
        self.y = np.asarray(y, dtype=np.float32)
        self.sr = sr
        self.duration = librosa.get_duration(y=self.y, sr=self.sr) if len(self.y) else 0.0
        self.nyquist_hz = sr / 2

        # Pre-calculate features
        logger.info("[+] Analyzing audio frequencies and dynamics...")
        self._calculate_spectrogram()
        self._calculate_rms()
        self._calculate_band_slices()

    @classmethod
    def load(cls, filepath):
        logger.info(f"[+] Loading audio: {filepath}...")
        try:
            # Load audio with original sampling rate
            y, sr = librosa.load(filepath, sr=None)
        except Exception as e:
            sys.exit(f"[!] Error loading audio file: {e}")
        return cls(y, sr)

    def _calculate_spectrogram(self):
        """
        Compute a linear-frequency magnitude spectrogram.
        Linear bins keep harmonics at integer multiples for pitch estimation.
        """
        if len(self.y) == 0:
            self.S_norm = np.zeros((N_BINS, 0))
            return

        # Drop the Nyquist bin so each frame has exactly N_BINS values
        magnitude = np.abs(librosa.stft(self.y, n_fft=N_FFT, hop_length=HOP_LENGTH))[:N_BINS]

        # Convert to decibels and normalize to 0-1, clipping the noise floor
        S_dB = librosa.amplitude_to_db(magnitude, ref=np.max)
        self.S_norm = np.clip((S_dB - DB_FLOOR) / -DB_FLOOR, 0, 1)

    def _calculate_rms(self):
        """
        Raw RMS per frame, used to decide whether the source is audible.
        """
        if len(self.y) == 0:
            self.rms = np.zeros(0)
            return
        self.rms = librosa.feature.rms(y=self.y, frame_length=N_FFT, hop_length=HOP_LENGTH)[0]

    def _calculate_band_slices(self):
        bin_width = self.nyquist_hz / N_BINS
        self.low_bins = slice(int(LOW_BAND[0] / bin_width), max(1, int(LOW_BAND[1] / bin_width)))
        self.mid_bins = slice(int(MID_BAND[0] / bin_width), max(1, int(MID_BAND[1] / bin_width)))

    def is_ready(self):
        return self.S_norm.shape[1] > 0

    def frame_index_at(self, t):
        frame_index = librosa.time_to_frames(t, sr=self.sr, hop_length=HOP_LENGTH)
        return int(np.clip(frame_index, 0, max(0, self.S_norm.shape[1] - 1)))

    def frame_at(self, t, tick):
        """
        Returns the SpectrumFrame for timestamp `t`.
        """
        if not self.is_ready():
            return SpectrumFrame.silent(N_BINS, tick=tick, nyquist_hz=self.nyquist_hz)

        frame_index = self.frame_index_at(t)
        spectrum = self.S_norm[:, frame_index]
        rms = self.rms[frame_index] if frame_index < len(self.rms) else 0.0
        is_active = bool(0 <= t <= self.duration and rms > SILENCE_RMS)

        return SpectrumFrame(
            magnitudes=spectrum,
            low_energy=float(np.mean(spectrum[self.low_bins])),
            mid_energy=float(np.mean(spectrum[self.mid_bins])),
            tick=tick,
            is_active=is_active,
            nyquist_hz=self.nyquist_hz,
        )
