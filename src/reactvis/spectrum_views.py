import math

import cv2
import numpy as np

from reactvis.constants import (
    CIRCULAR_BARS,
    OPTICAL_GAP,
    OPTICAL_MAX_DISPLACEMENT,
    OPTICAL_MID_GATE,
    OPTICAL_NOISE_AMPLITUDE,
    SPECTRUM_BARS,
)


def foreground_color(context):
    """Colour that contrasts with the background, for strokes and text."""
    return tuple(255 - c for c in context.background_color)


def band_level(energy, full_scale):
    """Band energy on the 0-255 byte scale the optical view thresholds against."""
    if full_scale <= 0 or not math.isfinite(energy):
        return 0.0
    return float(np.clip(energy / full_scale, 0, 1)) * 255


def optical_displacement(xs, y, time, bass, mid, intensity, noise_row):
    """
    Vertical offset of one optical-flow line at sample points `xs`.

    Bass bends the sine fabric; mid above the gate adds a noise glitch.
    """
    curve_amp = bass / 255 * OPTICAL_MAX_DISPLACEMENT * intensity
    displacement = np.sin(xs * 0.02 + time) * np.cos(y * 0.03 + time) * curve_amp
    if mid > OPTICAL_MID_GATE:
        displacement = displacement + noise_row * (mid / 255 * OPTICAL_NOISE_AMPLITUDE)
    return displacement


class OpticalFlowView:
    """
    Horizontal lines warped into a moire-like fabric by the low and mid bands.
    """

    def __init__(self, width, height, rng=None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.resize(width, height)

    def resize(self, width, height):
        self.w = width
        self.h = height
        self.xs = np.arange(0, width, OPTICAL_GAP, dtype=np.float64)
        self.ys = np.arange(0, height, OPTICAL_GAP)
        # Fixed per grid point, like a noise lookup at integer coordinates
        self.noise = self.rng.random((len(self.ys), len(self.xs)))

    def render(self, canvas, frame, tick, context, is_active=True):
        if canvas.shape[:2] != (self.h, self.w):
            self.resize(canvas.shape[1], canvas.shape[0])

        if is_active:
            bass = band_level(frame.low_energy, frame.full_scale)
            mid = band_level(frame.mid_energy, frame.full_scale)
        else:
            bass = mid = 0.0

        time = tick * 0.05
        color = foreground_color(context)
        lines = []
        for row, y in enumerate(self.ys):
            offsets = optical_displacement(self.xs, y, time, bass, mid, context.intensity, self.noise[row])
            points = np.stack([self.xs, y + offsets], axis=1)
            lines.append(np.round(points).astype(np.int32))
        cv2.polylines(canvas, lines, False, color, 1, cv2.LINE_AA)


def bar_colors(num_bars):
    """Hue sweep across the bars, red at the low end."""
    hsv = np.zeros((1, num_bars, 3), dtype=np.uint8)
    hsv[0, :, 0] = np.arange(num_bars) * 180 // num_bars
    hsv[0, :, 1] = 204
    hsv[0, :, 2] = 255
    return cv2.cvtColor(hsv, cv2.COLOR_HSV2RGB)[0]


def draw_spectrum_bars(canvas, frame, context, num_bars=SPECTRUM_BARS):
    """Current spectrum as vertical bars, lowest bins on the left."""
    h, w = canvas.shape[:2]
    num_bars = min(num_bars, frame.n_bins)
    if num_bars == 0 or frame.full_scale <= 0:
        return

    levels = np.clip(frame.magnitudes[:num_bars] / frame.full_scale, 0, 1)
    edges = np.linspace(0, w, num_bars + 1).astype(int)
    colors = bar_colors(num_bars)

    for i, level in enumerate(levels):
        bar_height = int(level * h)
        if bar_height < 1:
            continue
        color = tuple(int(c) for c in colors[i])
        left = int(edges[i])
        right = max(left, int(edges[i + 1]) - 1)
        cv2.rectangle(canvas, (left, h - bar_height), (right, h - 1), color, -1)


def draw_circular_spectrum(canvas, frame, context, num_bars=CIRCULAR_BARS):
    """Spectrum bars radiating from a ring around the centre."""
    h, w = canvas.shape[:2]
    num_bars = min(num_bars, frame.n_bins)
    if num_bars == 0 or frame.full_scale <= 0:
        return

    center = (w // 2, h // 2)
    radius = min(w, h) * 0.25
    max_bar = min(w, h) * 0.375

    # Define polar to cartesian helper
    def pol2cart(rho, phi):
        x = int(rho * np.cos(phi) + center[0])
        y = int(rho * np.sin(phi) + center[1])
        return (x, y)

    levels = np.clip(frame.magnitudes[:num_bars] / frame.full_scale, 0, 1)
    for i, level in enumerate(levels):
        bar_len = level * max_bar
        if bar_len < 1:
            continue
        angle = i / num_bars * 2 * np.pi
        color = (255, int(50 + level * 205), 200)
        cv2.line(canvas, pol2cart(radius, angle), pol2cart(radius + bar_len, angle), color, 2, cv2.LINE_AA)


def format_playback(t, duration, is_active):
    if not is_active:
        return "Paused"
    if duration:
        return f"Playing: {t:.1f}s / {duration:.1f}s"
    return f"Playing: {t:.1f}s"


def draw_info(canvas, t, duration, level, is_active, context):
    """Playback position and input level in the top-left corner."""
    color = foreground_color(context)
    lines = (format_playback(t, duration, is_active), f"Level: {level * 100:.1f}%")
    for row, text in enumerate(lines):
        cv2.putText(canvas, text, (10, 20 + row * 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA)
