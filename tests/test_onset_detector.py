import unittest

import numpy as np

from reactvis.constants import BASE_BEAT_RATIO, REFRACTORY_TICKS
from reactvis.onset_detector import OnsetDetector


class TestOnsetDetector(unittest.TestCase):
    def test_silence_then_hit_fires_on_the_hit(self):
        detector = OnsetDetector()
        beats = [detector.update(0.001, tick) for tick in range(1, 9)]
        self.assertEqual(beats, [False] * 8)
        self.assertLess(detector.state.rolling_energy_average, 0.001)

        self.assertTrue(detector.update(0.5, 9))
        self.assertEqual(detector.state.last_beat_tick, 9)

    def test_energy_equal_to_average_does_not_fire(self):
        detector = OnsetDetector()
        detector.state.rolling_energy_average = 0.25
        detector.state.sensitivity = 1.0
        self.assertFalse(detector.update(0.25, 100))
        self.assertEqual(detector.state.rolling_energy_average, 0.25)

    def test_refractory_period_blocks_repeat_triggers(self):
        detector = OnsetDetector()
        fired = [tick for tick in range(10) if detector.update(1.0, tick)]
        self.assertEqual(fired, [0, REFRACTORY_TICKS + 1])

    def test_never_fires_twice_within_refractory_period(self):
        rng = np.random.default_rng(7)
        detector = OnsetDetector()
        detector.state.sensitivity = 1.05
        energies = rng.choice([0.0, 0.01, 0.2, 1.0], size=2000) * rng.uniform(0.5, 1.5, size=2000)
        fired = [tick for tick, energy in enumerate(energies) if detector.update(float(energy), tick)]
        self.assertGreater(len(fired), 10)
        self.assertTrue(all(b - a > REFRACTORY_TICKS for a, b in zip(fired, fired[1:])))

    def test_energy_floor_rejects_near_silence(self):
        detector = OnsetDetector()
        self.assertFalse(detector.update(0.004, 50))

    def test_inactive_source_never_fires_but_tracks_average(self):
        detector = OnsetDetector()
        self.assertFalse(detector.update(1.0, 50, is_active=False))
        self.assertAlmostEqual(detector.state.rolling_energy_average, 0.04)

    def test_degenerate_energy_is_treated_as_zero(self):
        detector = OnsetDetector()
        self.assertFalse(detector.update(float("nan"), 1))
        self.assertFalse(detector.update(-1.0, 2))
        self.assertFalse(detector.update(None, 3))
        self.assertEqual(detector.state.rolling_energy_average, 0.0)

    def test_higher_ratio_is_less_sensitive(self):
        def beats_with_ratio(ratio):
            detector = OnsetDetector()
            detector.state.sensitivity = ratio
            energies = [0.1, 0.1, 0.1, 0.1, 0.3] * 40
            return sum(detector.update(e, tick) for tick, e in enumerate(energies))

        self.assertGreater(beats_with_ratio(1.2), beats_with_ratio(4.0))

    def test_reset_keeps_sensitivity(self):
        detector = OnsetDetector()
        detector.state.sensitivity = 2.0
        detector.update(1.0, 0)
        detector.reset()
        self.assertEqual(detector.state.rolling_energy_average, 0.0)
        self.assertEqual(detector.state.last_beat_tick, -(REFRACTORY_TICKS + 1))
        self.assertEqual(detector.state.sensitivity, 2.0)

    def test_default_sensitivity(self):
        self.assertEqual(OnsetDetector().state.sensitivity, BASE_BEAT_RATIO)


if __name__ == "__main__":
    unittest.main()
