import logging
import math

import cv2
import numpy as np

from reactvis.constants import MAX_PARTICLES, MAX_SPAWN_COUNT
from reactvis.particle import Particle, ShapeKind

logger = logging.getLogger(__name__)

SHAPES = tuple(ShapeKind)


def base_size(energy):
    """Particle radius before intensity and jitter are applied."""
    return 10 + 70 * float(np.clip(energy, 0, 1))


def spawn_count(energy, intensity):
    if not math.isfinite(intensity) or intensity <= 0:
        return 1
    return int(np.clip(math.floor((1 + 4 * energy) * intensity), 1, MAX_SPAWN_COUNT))


def _blend(background, color, weight):
    return tuple(int(round(b + (c - b) * weight)) for b, c in zip(background, color))


class EventParticleSystem:
    """
    Beat-driven particles that drift, grow, rotate and fade into the background.

    Particles live in one dense list that is compacted once per tick, so
    removal never happens while iterating.
    """

    def __init__(self, width, height, max_particles=MAX_PARTICLES, rng=None):
        self.w = width
        self.h = height
        self.max_particles = max_particles
        self.rng = rng if rng is not None else np.random.default_rng()
        self.particles = []

    def __len__(self):
        return len(self.particles)

    def resize(self, width, height):
        self.w = width
        self.h = height

    def clear(self):
        self.particles = []

    def on_beat(self, energy, note_class, context):
        """Spawn a burst of particles tinted by the current note class."""
        if energy is None or not math.isfinite(energy) or energy < 0:
            energy = 0.0

        color = context.palette_color(note_class)
        count = spawn_count(energy, context.intensity)
        size_base = base_size(energy) * context.intensity

        for _ in range(count):
            self.particles.append(
                Particle(
                    x=self.rng.uniform(0, self.w),
                    y=self.rng.uniform(0, self.h),
                    size=size_base * self.rng.uniform(0.5, 2.0),
                    color=color,
                    decay_rate=self.rng.uniform(1.0, 2.5),
                    growth_rate=self.rng.uniform(0.1, 0.8),
                    vx=self.rng.uniform(-1.5, 1.5) * context.intensity,
                    vy=self.rng.uniform(-1.5, 1.5) * context.intensity,
                    rotation=self.rng.uniform(0, 2 * math.pi),
                    rotation_speed=self.rng.uniform(-0.05, 0.05),
                    shape=SHAPES[self.rng.integers(len(SHAPES))],
                )
            )

        if len(self.particles) > self.max_particles:
            dropped = len(self.particles) - self.max_particles
            self.particles = self.particles[-self.max_particles :]
            logger.debug(f"Particle cap reached, dropped {dropped} oldest")

        return count

    def advance(self):
        """Update every particle and drop the expired ones."""
        for particle in self.particles:
            particle.update()
        self.particles = [p for p in self.particles if p.is_alive()]

    def advance_and_render(self, canvas, context):
        self.advance()
        background = context.background_color
        for particle in self.particles:
            self._draw(canvas, particle, background)

    def _draw(self, canvas, particle, background):
        color = _blend(background, particle.color, particle.opacity())
        center = (int(particle.x), int(particle.y))
        radius = max(1, int(particle.size))

        if particle.shape is ShapeKind.CIRCLE:
            cv2.circle(canvas, center, radius, color, -1, cv2.LINE_AA)
        elif particle.shape is ShapeKind.FLATTENED_ELLIPSE:
            axes = (radius, max(1, int(radius * 0.4)))
            cv2.ellipse(canvas, center, axes, math.degrees(particle.rotation), 0, 360, color, -1, cv2.LINE_AA)
        elif particle.shape is ShapeKind.ROUNDED_BAR:
            dx = math.cos(particle.rotation) * radius
            dy = math.sin(particle.rotation) * radius
            start = (int(particle.x - dx), int(particle.y - dy))
            end = (int(particle.x + dx), int(particle.y + dy))
            cv2.line(canvas, start, end, color, max(1, int(radius * 0.4)), cv2.LINE_AA)
        else:
            # Ring: punch the hole by painting the inner disc in the background colour
            cv2.circle(canvas, center, radius, color, -1, cv2.LINE_AA)
            cv2.circle(canvas, center, max(1, int(radius * 0.6)), background, -1, cv2.LINE_AA)
