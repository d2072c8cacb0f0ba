import math
from dataclasses import dataclass, field

import numpy as np

from reactvis.constants import (
    BASE_BEAT_RATIO,
    DARK_BACKGROUND,
    DEFAULT_COLOR_INDEX,
    DEFAULT_PALETTE,
    LIGHT_BACKGROUND,
    MAX_INTENSITY,
    MIN_BEAT_RATIO,
    MIN_INTENSITY,
    PALETTES,
)


def intensity_from_slider(value):
    """Map a 0-100 slider position onto the intensity range."""
    value = float(np.clip(value, 0, 100))
    return MIN_INTENSITY + (MAX_INTENSITY - MIN_INTENSITY) * value / 100


@dataclass
class VisualizationContext:
    """
    Session settings shared by every component.

    Passed explicitly into each per-tick call instead of living in module
    globals, so one palette/background change reaches all renderers at once.
    """

    intensity: float = 1.0
    sensitivity: float = 1.0
    palette: tuple = field(default_factory=lambda: PALETTES[DEFAULT_PALETTE])
    background_is_dark: bool = True

    def __post_init__(self):
        if not math.isfinite(self.intensity):
            raise ValueError(f"Intensity must be finite, got {self.intensity}")
        if not math.isfinite(self.sensitivity) or self.sensitivity <= 0:
            raise ValueError(f"Sensitivity must be a positive number, got {self.sensitivity}")
        self.intensity = float(np.clip(self.intensity, MIN_INTENSITY, MAX_INTENSITY))
        if len(self.palette) < 5:
            raise ValueError(f"Palette needs at least 5 colours, got {len(self.palette)}")
        self.palette = tuple(tuple(int(c) for c in color) for color in self.palette)

    @classmethod
    def from_palette_name(cls, name, **kwargs):
        if name not in PALETTES:
            raise ValueError(f"Unknown palette '{name}'. Choose from: {', '.join(sorted(PALETTES))}")
        return cls(palette=PALETTES[name], **kwargs)

    @property
    def background_color(self):
        return DARK_BACKGROUND if self.background_is_dark else LIGHT_BACKGROUND

    @property
    def beat_ratio(self):
        # Higher intensity lowers the threshold while also enlarging particles
        drive = self.intensity * self.sensitivity
        if not math.isfinite(drive) or drive <= 0:
            return BASE_BEAT_RATIO
        return max(MIN_BEAT_RATIO, BASE_BEAT_RATIO / drive)

    def palette_color(self, index):
        """Palette colour for a note class or bin index, wrapped modulo the palette."""
        if index is None or not math.isfinite(index):
            index = DEFAULT_COLOR_INDEX
        return self.palette[int(index) % len(self.palette)]
