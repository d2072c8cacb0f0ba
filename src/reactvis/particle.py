from enum import Enum

from reactvis.constants import PARTICLE_START_ALPHA


class ShapeKind(Enum):
    CIRCLE = "circle"
    FLATTENED_ELLIPSE = "flattened_ellipse"
    ROUNDED_BAR = "rounded_bar"
    RING = "ring"


class Particle:
    """Represents a single beat particle that drifts, grows and fades out."""

    __slots__ = (
        "x",
        "y",
        "vx",
        "vy",
        "size",
        "color",
        "alpha",
        "decay_rate",
        "growth_rate",
        "rotation",
        "rotation_speed",
        "shape",
    )

    def __init__(
        self,
        x,
        y,
        size,
        color,
        decay_rate,
        growth_rate=0.0,
        vx=0.0,
        vy=0.0,
        rotation=0.0,
        rotation_speed=0.0,
        shape=ShapeKind.CIRCLE,
        alpha=PARTICLE_START_ALPHA,
    ):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.size = size
        self.color = color
        self.alpha = alpha
        self.decay_rate = decay_rate
        self.growth_rate = growth_rate
        self.rotation = rotation
        self.rotation_speed = rotation_speed
        self.shape = shape

    def update(self):
        """Advance the particle by one tick."""
        self.x += self.vx
        self.y += self.vy
        self.alpha -= self.decay_rate
        self.size += self.growth_rate
        self.rotation += self.rotation_speed

    def is_alive(self):
        return self.alpha > 0

    def opacity(self):
        """Alpha as a 0..1 blend weight."""
        return min(1.0, max(0.0, self.alpha / PARTICLE_START_ALPHA))
