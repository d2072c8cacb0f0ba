import logging
import math
from dataclasses import dataclass
from typing import ClassVar, Optional

import numpy as np

from reactvis.constants import NOTE_NAMES, PITCH_MAX_FREQ, PITCH_MIN_FREQ

logger = logging.getLogger(__name__)


def note_class_from_frequency(frequency_hz):
    """Chromatic note class in [0, 11] (C=0), or None for a missing pitch."""
    if frequency_hz is None or not math.isfinite(frequency_hz) or frequency_hz <= 0:
        return None
    midi = round(12 * math.log2(frequency_hz / 440.0) + 69)
    return (midi % 12 + 12) % 12


@dataclass(frozen=True)
class PitchEstimate:
    frequency_hz: Optional[float] = None
    note_class: Optional[int] = None

    NONE: ClassVar["PitchEstimate"]

    @property
    def note_name(self):
        if self.note_class is None:
            return None
        return NOTE_NAMES[self.note_class]


PitchEstimate.NONE = PitchEstimate()


class PitchEstimator:
    """
    Single-pitch estimator using the Harmonic Product Spectrum.

    Multiplying a bin with its 2x and 3x harmonics reinforces the fundamental,
    while noise and inharmonic content do not line up across the three bins.
    The winning bin is refined with a parabola through its neighbours.
    """

    def __init__(self, min_freq=PITCH_MIN_FREQ, max_freq=PITCH_MAX_FREQ):
        if min_freq <= 0 or max_freq <= min_freq:
            raise ValueError(f"Invalid pitch band {min_freq}-{max_freq} Hz")
        self.min_freq = min_freq
        self.max_freq = max_freq

    def bin_range(self, n_bins, bin_width_hz):
        """Candidate fundamental bins, capped so 3x the last bin is in range."""
        if n_bins == 0 or bin_width_hz <= 0:
            return 0, -1
        start_bin = max(1, math.ceil(self.min_freq / bin_width_hz))
        end_bin = min(math.floor(self.max_freq / bin_width_hz), (n_bins - 1) // 3)
        return start_bin, end_bin

    def hps_scores(self, magnitudes, start_bin, end_bin):
        bins = np.arange(start_bin, end_bin + 1)
        return magnitudes[bins] * magnitudes[2 * bins] * magnitudes[3 * bins]

    def estimate(self, frame) -> PitchEstimate:
        if not frame.is_active or frame.n_bins == 0:
            return PitchEstimate.NONE

        start_bin, end_bin = self.bin_range(frame.n_bins, frame.bin_width_hz)
        if end_bin < start_bin:
            return PitchEstimate.NONE

        scores = self.hps_scores(frame.magnitudes, start_bin, end_bin)
        peak = int(np.argmax(scores))
        if scores[peak] <= 0:
            return PitchEstimate.NONE

        # Parabolic interpolation, neighbours clamped to the search range
        left = scores[max(peak - 1, 0)]
        centre = scores[peak]
        right = scores[min(peak + 1, len(scores) - 1)]
        denominator = left - 2 * centre + right
        offset = 0.0 if denominator == 0 else 0.5 * (left - right) / denominator

        estimated_bin = start_bin + peak + offset
        frequency_hz = float(estimated_bin / frame.n_bins * frame.nyquist_hz)
        if not math.isfinite(frequency_hz) or frequency_hz <= 0:
            return PitchEstimate.NONE

        estimate = PitchEstimate(frequency_hz, note_class_from_frequency(frequency_hz))
        logger.debug(f"Tick {frame.tick}: {frequency_hz:.1f} Hz ({estimate.note_name})")
        return estimate
