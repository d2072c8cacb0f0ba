import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from reactvis.constants import DEFAULT_FPS, N_BINS
from reactvis.onset_detector import OnsetDetector
from reactvis.particle_system import EventParticleSystem
from reactvis.pitch_estimator import PitchEstimate, PitchEstimator
from reactvis.spectrogram import SpectrogramBuffer
from reactvis.spectrum_frame import SpectrumFrame
from reactvis.spectrum_views import OpticalFlowView, draw_circular_spectrum, draw_info, draw_spectrum_bars

logger = logging.getLogger(__name__)


class RenderMode(Enum):
    PARTICLES = "particles"
    SPECTROGRAM = "spectrogram"
    COMBINED = "combined"
    OPTICAL = "optical"
    BARS = "bars"
    CIRCULAR = "circular"


@dataclass(frozen=True, eq=False)
class TickResult:
    pitch: PitchEstimate
    beat: bool
    particle_count: int
    frame: SpectrumFrame
    canvas: np.ndarray


class VisualiserRenderer:
    """
    Drives the reactive components from one SpectrumFrame per tick.

    A source is attached in two phases: bind_source() wires it in and resets
    per-source state, activate() turns rendering on only if the source is
    ready. Until then every frame is treated as inactive.
    """

    def __init__(
        self, context, width, height, mode=RenderMode.COMBINED, show_grid=True, rng=None, fps=DEFAULT_FPS, show_info=False
    ):
        self.context = context
        self.w = width
        self.h = height
        self.mode = RenderMode(mode)
        self.show_grid = show_grid
        self.show_info = show_info
        self.fps = fps

        self.pitch_estimator = PitchEstimator()
        self.onset_detector = OnsetDetector()
        self.particles = EventParticleSystem(width, height, rng=rng)
        self.spectrogram = SpectrogramBuffer(width, height, context)
        self.optical = OpticalFlowView(width, height, rng=rng)

        self.source = None
        self.active = False
        self.tick = 0
        self._last_frame = None  # (tick, canvas) of the most recent make_frame call

    def bind_source(self, source):
        """Attach a frame source; history from the previous source is dropped."""
        self.source = source
        self.active = False
        self.onset_detector.reset()
        self.particles.clear()
        self.spectrogram.resize(self.w, self.h, self.context)
        self._last_frame = None
        logger.info(f"[+] Bound source {type(source).__name__}")

    def activate(self):
        """Start rendering from the bound source. Fails closed if it is not ready."""
        if self.source is None:
            logger.warning("[!] activate() called with no source bound")
            self.active = False
        elif not self.source.is_ready():
            logger.warning("[!] Source not ready, staying inactive")
            self.active = False
        else:
            self.active = True
        return self.active

    def resize(self, width, height):
        self.w = width
        self.h = height
        self.particles.resize(width, height)
        self.spectrogram.resize(width, height, self.context)
        self.optical.resize(width, height)

    def new_canvas(self):
        return np.full((self.h, self.w, 3), self.context.background_color, dtype=np.uint8)

    def render_tick(self, frame, canvas=None):
        """
        Run one tick: pitch and onset from the same frame, spawn on beat,
        then draw the mode's background layer and advance particles over it.
        """
        if canvas is None:
            canvas = self.new_canvas()
        if canvas.shape[:2] != (self.h, self.w):
            self.resize(canvas.shape[1], canvas.shape[0])

        is_active = self.active and frame.is_active

        if is_active:
            pitch = self.pitch_estimator.estimate(frame)
        else:
            pitch = PitchEstimate.NONE

        energy = frame.onset_energy
        self.onset_detector.state.sensitivity = self.context.beat_ratio
        beat = self.onset_detector.update(energy, frame.tick, is_active=is_active)
        draws_particles = self.mode in (RenderMode.PARTICLES, RenderMode.COMBINED)
        if beat and draws_particles:
            self.particles.on_beat(energy, pitch.note_class, self.context)

        if self.mode in (RenderMode.SPECTROGRAM, RenderMode.COMBINED):
            self.spectrogram.update(frame, is_active, self.context)
            self.spectrogram.render(canvas, self.context, show_grid=self.show_grid)
        else:
            canvas[:] = self.context.background_color

        if self.mode is RenderMode.OPTICAL:
            self.optical.render(canvas, frame, frame.tick, self.context, is_active=is_active)
        elif is_active and self.mode is RenderMode.BARS:
            draw_spectrum_bars(canvas, frame, self.context)
        elif is_active and self.mode is RenderMode.CIRCULAR:
            draw_circular_spectrum(canvas, frame, self.context)

        if draws_particles:
            self.particles.advance_and_render(canvas, self.context)

        return TickResult(pitch, beat, len(self.particles), frame, canvas)

    def make_frame(self, t):
        """
        The callback function for MoviePy.
        Generates a single RGB video frame at time t.

        The tick is derived from t, so a repeated request for the same frame
        (MoviePy renders t=0 once while building the clip) returns the cached
        canvas instead of advancing the simulation.
        """
        tick = int(round(t * self.fps))
        if self._last_frame is not None and self._last_frame[0] == tick:
            return self._last_frame[1]

        self.tick = tick
        if self.active:
            frame = self.source.frame_at(t, tick)
        else:
            frame = SpectrumFrame.silent(N_BINS, tick=tick)

        result = self.render_tick(frame)
        if result.beat:
            logger.debug(f"[i] Beat at {t:.2f}s, note {result.pitch.note_name}, {result.particle_count} particles")

        if self.show_info:
            duration = getattr(self.source, "duration", None)
            level = min(1.0, frame.onset_energy)
            draw_info(result.canvas, t, duration, level, self.active and frame.is_active, self.context)

        self._last_frame = (tick, result.canvas)
        return result.canvas
