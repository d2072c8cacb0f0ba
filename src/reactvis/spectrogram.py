import logging

import cv2
import numpy as np

from reactvis.constants import GRID_FREQUENCIES_HZ, GRID_LINE_ALPHA

logger = logging.getLogger(__name__)


def _format_frequency(freq_hz):
    if freq_hz >= 1000:
        return f"{freq_hz / 1000:g} kHz"
    return f"{freq_hz:g} Hz"


class SpectrogramBuffer:
    """
    Scrolling time-frequency heat map kept as a persistent raster.

    Each active tick shifts the image one column left and paints the newest
    spectrum into the last column, so per-tick cost does not depend on how
    long the visualisation has been running. Resizing discards the history.
    """

    def __init__(self, width, height, context):
        self.surface = None
        self.nyquist_hz = None
        self.n_bins = None
        self.resize(width, height, context)

    @property
    def width(self):
        return self.surface.shape[1]

    @property
    def height(self):
        return self.surface.shape[0]

    def resize(self, width, height, context):
        width = max(1, int(width))
        height = max(1, int(height))
        self.background = context.background_color
        self.surface = np.full((height, width, 3), self.background, dtype=np.uint8)
        self._row_cache = None
        logger.debug(f"Spectrogram reset to {width}x{height}")

    def _row_bins(self, half, context):
        """First bin of each row's band, top row first, for y = map(bin, 0, half, height, 0)."""
        key = (self.height, half, context.palette)
        if self._row_cache is None or self._row_cache[0] != key:
            rows = np.arange(self.height)
            lo = np.floor((self.height - rows - 1) * half / self.height).astype(np.intp)
            lo = np.clip(lo, 0, half - 1)
            colors = np.array([context.palette_color(b) for b in lo], dtype=np.float64)
            self._row_cache = (key, lo, colors)
        return self._row_cache[1], self._row_cache[2]

    def _sync_background(self, context):
        if context.background_color != self.background:
            logger.info("[i] Background changed, resetting spectrogram")
            self.resize(self.width, self.height, context)

    def update(self, frame, is_active, context):
        self._sync_background(context)
        if not is_active or frame.n_bins < 2:
            return

        self.nyquist_hz = frame.nyquist_hz
        self.n_bins = frame.n_bins

        # The upper half of the spectrum is dropped as visually uninformative
        half = frame.n_bins // 2
        scale = frame.full_scale if frame.full_scale > 0 else 1.0
        levels = np.clip(frame.magnitudes[:half] / scale, 0.0, 1.0)

        row_lo, row_colors = self._row_bins(half, context)
        # Rows covering several bins show the loudest one
        starts = row_lo[::-1]
        row_levels = np.maximum.reduceat(levels, starts)[::-1]

        background = np.asarray(context.background_color, dtype=np.float64)
        column = background + (row_colors - background) * row_levels[:, None]

        self.surface[:, :-1] = self.surface[:, 1:]
        self.surface[:, -1] = np.round(column).astype(np.uint8)

    def frequency_to_y(self, freq_hz):
        """Row for a frequency, or None if it is off the displayed range."""
        if self.nyquist_hz is None or freq_hz > self.nyquist_hz:
            return None
        half = self.n_bins // 2
        bin_index = freq_hz / self.nyquist_hz * self.n_bins
        y = self.height - bin_index * self.height / half
        if y < 0 or y > self.height:
            return None
        return int(round(y))

    def render(self, canvas, context, show_grid=True):
        if canvas.shape != self.surface.shape:
            logger.info(f"[i] Viewport changed to {canvas.shape[1]}x{canvas.shape[0]}, resetting spectrogram")
            self.resize(canvas.shape[1], canvas.shape[0], context)
        self._sync_background(context)

        canvas[:] = self.surface
        if show_grid:
            self._draw_grid(canvas, context)

    def _draw_grid(self, canvas, context):
        background = np.asarray(context.background_color, dtype=np.float64)
        foreground = 255 - background
        line_color = tuple(int(c) for c in background + (foreground - background) * GRID_LINE_ALPHA)
        text_color = tuple(int(c) for c in foreground)

        for freq_hz in GRID_FREQUENCIES_HZ:
            y = self.frequency_to_y(freq_hz)
            if y is None:
                continue
            cv2.line(canvas, (0, y), (self.width - 1, y), line_color, 1)
            cv2.putText(
                canvas,
                _format_frequency(freq_hz),
                (4, max(10, y - 3)),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.4,
                text_color,
                1,
                cv2.LINE_AA,
            )
