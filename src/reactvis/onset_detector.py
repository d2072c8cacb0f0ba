import logging
import math
from dataclasses import dataclass

from reactvis.constants import BASE_BEAT_RATIO, ONSET_ENERGY_FLOOR, ONSET_SMOOTHING, REFRACTORY_TICKS

logger = logging.getLogger(__name__)


@dataclass
class OnsetState:
    rolling_energy_average: float = 0.0
    last_beat_tick: int = -(REFRACTORY_TICKS + 1)
    sensitivity: float = BASE_BEAT_RATIO  # Ratio the energy must exceed over the average


class OnsetDetector:
    """
    Flags beats when the energy jumps well above a slow rolling baseline.

    Comparing against a rolling average rather than a fixed threshold keeps
    detection working across quiet and loud passages and across sources.
    """

    def __init__(self, refractory_ticks=REFRACTORY_TICKS, energy_floor=ONSET_ENERGY_FLOOR, smoothing=ONSET_SMOOTHING):
        self.refractory_ticks = refractory_ticks
        self.energy_floor = energy_floor
        self.smoothing = smoothing
        self.state = OnsetState(last_beat_tick=-(refractory_ticks + 1))

    def reset(self):
        self.state = OnsetState(
            last_beat_tick=-(self.refractory_ticks + 1),
            sensitivity=self.state.sensitivity,
        )

    def update(self, energy, tick, is_active=True) -> bool:
        """Feed one tick of energy; returns True if a beat fired."""
        if energy is None or not math.isfinite(energy) or energy < 0:
            energy = 0.0

        state = self.state
        state.rolling_energy_average += (energy - state.rolling_energy_average) * self.smoothing

        if not is_active:
            return False
        if energy <= state.rolling_energy_average * state.sensitivity:
            return False
        if energy <= self.energy_floor:
            return False
        if tick - state.last_beat_tick <= self.refractory_ticks:
            return False

        state.last_beat_tick = tick
        logger.debug(f"Beat at tick {tick}: energy={energy:.4f} avg={state.rolling_energy_average:.4f}")
        return True
