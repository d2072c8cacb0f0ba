import unittest

import numpy as np

from reactvis.context import VisualizationContext
from reactvis.particle import Particle, ShapeKind
from reactvis.particle_system import EventParticleSystem, spawn_count


class TestParticle(unittest.TestCase):
    def test_update_applies_tick_rule(self):
        particle = Particle(
            x=10, y=20, size=5, color=(1, 2, 3), decay_rate=2.0, growth_rate=0.5,
            vx=1.0, vy=-2.0, rotation=0.1, rotation_speed=0.2, alpha=100.0,
        )
        particle.update()
        self.assertEqual((particle.x, particle.y), (11, 18))
        self.assertEqual(particle.alpha, 98.0)
        self.assertEqual(particle.size, 5.5)
        self.assertAlmostEqual(particle.rotation, 0.3)

    def test_dead_once_alpha_reaches_zero(self):
        particle = Particle(x=0, y=0, size=1, color=(0, 0, 0), decay_rate=1.0, alpha=1.0)
        self.assertTrue(particle.is_alive())
        particle.update()
        self.assertFalse(particle.is_alive())


class TestEventParticleSystem(unittest.TestCase):
    def setUp(self):
        self.context = VisualizationContext.from_palette_name("neon")
        self.system = EventParticleSystem(160, 120, rng=np.random.default_rng(1))

    def canvas(self):
        return np.full((120, 160, 3), self.context.background_color, dtype=np.uint8)

    def test_spawn_count_scales_and_is_bounded(self):
        self.assertEqual(spawn_count(0.0, 1.0), 1)
        self.assertEqual(spawn_count(1.0, 1.0), 5)
        self.assertEqual(spawn_count(0.25, 1.0), 2)
        self.assertEqual(spawn_count(0.5, 4.0), 5)
        self.assertEqual(spawn_count(0.0, 0.5), 1)

    def test_spawn_count_survives_bad_intensity(self):
        self.assertEqual(spawn_count(1.0, float("nan")), 1)
        self.assertEqual(spawn_count(1.0, float("inf")), 1)
        self.assertEqual(spawn_count(1.0, 0.0), 1)

    def test_on_beat_uses_note_class_color(self):
        count = self.system.on_beat(0.5, 7, self.context)
        self.assertEqual(len(self.system), count)
        self.assertTrue(all(p.color == self.context.palette_color(7) for p in self.system.particles))

    def test_degenerate_beat_falls_back_to_default_color(self):
        self.system.on_beat(0.0, None, self.context)
        self.system.on_beat(float("nan"), None, self.context)
        self.system.on_beat(-2.0, None, self.context)
        self.assertEqual(len(self.system), 3)
        self.assertTrue(all(p.color == self.context.palette[0] for p in self.system.particles))

    def test_spawn_parameters_in_range(self):
        for _ in range(50):
            self.system.on_beat(1.0, 3, self.context)
        for particle in self.system.particles:
            self.assertGreaterEqual(particle.decay_rate, 1.0)
            self.assertLessEqual(particle.decay_rate, 2.5)
            self.assertGreaterEqual(particle.size, 80 * 0.5)
            self.assertLessEqual(particle.size, 80 * 2.0)
            self.assertIsInstance(particle.shape, ShapeKind)

    def test_advance_never_grows_and_prunes_dead(self):
        for _ in range(20):
            self.system.on_beat(1.0, 2, self.context)
        previous = len(self.system)
        for _ in range(300):
            self.system.advance_and_render(self.canvas(), self.context)
            self.assertLessEqual(len(self.system), previous)
            self.assertTrue(all(p.alpha > 0 for p in self.system.particles))
            previous = len(self.system)
        self.assertEqual(len(self.system), 0)

    def test_safety_cap_drops_oldest(self):
        system = EventParticleSystem(100, 100, max_particles=10, rng=np.random.default_rng(2))
        system.on_beat(1.0, 0, self.context)
        first = system.particles[0]
        for _ in range(10):
            system.on_beat(1.0, 1, self.context)
        self.assertEqual(len(system), 10)
        self.assertNotIn(first, system.particles)

    def test_render_draws_onto_canvas(self):
        self.system.on_beat(1.0, 1, self.context)
        canvas = self.canvas()
        self.system.advance_and_render(canvas, self.context)
        self.assertTrue(canvas.any())

    def test_ring_has_background_hole(self):
        self.system.particles.append(
            Particle(x=50, y=50, size=20, color=(255, 0, 0), decay_rate=0.0, shape=ShapeKind.RING)
        )
        canvas = self.canvas()
        self.system.advance_and_render(canvas, self.context)
        self.assertEqual(tuple(canvas[50, 50]), self.context.background_color)
        self.assertEqual(tuple(canvas[50, 66]), (255, 0, 0))

    def test_fading_particle_blends_toward_background(self):
        light = VisualizationContext(background_is_dark=False)
        self.system.particles.append(
            Particle(x=50, y=50, size=10, color=(0, 0, 0), decay_rate=0.0, alpha=127.5, shape=ShapeKind.CIRCLE)
        )
        canvas = np.full((120, 160, 3), 255, dtype=np.uint8)
        self.system.advance_and_render(canvas, light)
        self.assertEqual(tuple(canvas[50, 50]), (128, 128, 128))

    def test_clear_and_resize(self):
        self.system.on_beat(1.0, 1, self.context)
        self.system.clear()
        self.assertEqual(len(self.system), 0)
        self.system.resize(10, 5)
        self.system.on_beat(1.0, 1, self.context)
        self.assertTrue(all(0 <= p.x <= 10 and 0 <= p.y <= 5 for p in self.system.particles))


if __name__ == "__main__":
    unittest.main()
