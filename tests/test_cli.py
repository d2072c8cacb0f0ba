import unittest

from reactvis.__main__ import build_context, build_parser, main


class TestCli(unittest.TestCase):
    def test_defaults(self):
        args = build_parser().parse_args(["song.wav"])
        self.assertEqual(args.output, "output.mp4")
        self.assertEqual(args.mode, "combined")
        self.assertEqual(args.palette, "bauhaus")
        self.assertEqual(args.intensity, 1.0)
        self.assertFalse(args.light_background)

    def test_rejects_unknown_mode(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args(["song.wav", "--mode", "waveform"])

    def test_new_view_modes_are_accepted(self):
        for mode in ("optical", "bars", "circular"):
            self.assertEqual(build_parser().parse_args(["song.wav", "--mode", mode]).mode, mode)

    def test_intensity_slider_overrides_intensity(self):
        args = build_parser().parse_args(["song.wav", "--intensity", "2.0", "--intensity-slider", "100"])
        self.assertEqual(build_context(args).intensity, 4.0)
        args = build_parser().parse_args(["song.wav", "--intensity-slider", "0"])
        self.assertEqual(build_context(args).intensity, 0.5)

    def test_intensity_without_slider_is_clamped(self):
        args = build_parser().parse_args(["song.wav", "--intensity", "9"])
        self.assertEqual(build_context(args).intensity, 4.0)

    def test_non_finite_intensity_is_a_value_error(self):
        args = build_parser().parse_args(["song.wav", "--intensity", "nan"])
        with self.assertRaises(ValueError):
            build_context(args)

    def test_missing_input_exits(self):
        with self.assertRaises(SystemExit):
            main(["/nonexistent/track.wav"])


if __name__ == "__main__":
    unittest.main()
