from dataclasses import dataclass

import numpy as np

from reactvis.constants import DEFAULT_NYQUIST_HZ


@dataclass(frozen=True, eq=False)
class SpectrumFrame:
    """
    One tick of analysis data: a magnitude spectrum plus two band energies.

    Magnitudes are coerced to a non-negative float array on construction so
    consumers never see NaN, inf or negative bins.
    """

    magnitudes: np.ndarray
    low_energy: float = 0.0
    mid_energy: float = 0.0
    tick: int = 0
    is_active: bool = True
    nyquist_hz: float = DEFAULT_NYQUIST_HZ
    full_scale: float = 1.0

    def __post_init__(self):
        mags = np.nan_to_num(np.asarray(self.magnitudes, dtype=np.float64).ravel(), nan=0.0, posinf=0.0, neginf=0.0)
        mags = np.clip(mags, 0.0, None)
        mags.setflags(write=False)
        object.__setattr__(self, "magnitudes", mags)

    @classmethod
    def silent(cls, n_bins, tick=0, nyquist_hz=DEFAULT_NYQUIST_HZ, full_scale=1.0):
        """An all-zero, inactive frame for ticks with no source."""
        return cls(np.zeros(n_bins), tick=tick, is_active=False, nyquist_hz=nyquist_hz, full_scale=full_scale)

    @property
    def n_bins(self):
        return len(self.magnitudes)

    @property
    def bin_width_hz(self):
        if self.n_bins == 0:
            return 0.0
        return self.nyquist_hz / self.n_bins

    @property
    def onset_energy(self):
        """Mean of the low and mid band energies, normalised to 0..1."""
        if self.full_scale <= 0:
            return 0.0
        energy = (self.low_energy + self.mid_energy) / 2 / self.full_scale
        if not np.isfinite(energy) or energy < 0:
            return 0.0
        return float(energy)
