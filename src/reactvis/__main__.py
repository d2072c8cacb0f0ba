#!/usr/bin/env python3
"""
Audio-Reactive Visualizer CLI Tool
==================================

Renders a video of audio-reactive visuals from an audio file. Each video
frame is one render tick: the audio is analysed into a magnitude spectrum,
a Harmonic Product Spectrum pitch estimate picks the note colour, an
adaptive onset detector fires beat particles, and a scrolling spectrogram
paints the spectrum history.

Usage:
    python -m reactvis input.wav --output result.mp4 --mode combined
    python -m reactvis -h (for help)
"""

import argparse
import logging
import os
import sys

from moviepy import AudioFileClip, VideoClip

from reactvis.audio_analyser import AudioAnalyser
from reactvis.constants import DEFAULT_FPS, DEFAULT_PALETTE, DEFAULT_RESOLUTION, PALETTES
from reactvis.context import VisualizationContext, intensity_from_slider
from reactvis.visualiser_renderer import RenderMode, VisualiserRenderer

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Generate an audio-reactive visualisation video from an audio file.")
    parser.add_argument("input", help="Path to input audio file (WAV/MP3)")
    parser.add_argument("--output", "-o", default="output.mp4", help="Path to output video file")
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Video width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Video height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--duration", type=int, help="Limit duration in seconds (optional)")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in RenderMode],
        default=RenderMode.COMBINED.value,
        help="Which reactive renderers to draw",
    )
    parser.add_argument("--intensity", type=float, default=1.0, help="Particle size/count and beat drive (0.5-4.0)")
    parser.add_argument(
        "--intensity-slider", type=float, help="Intensity as a 0-100 slider position, overrides --intensity"
    )
    parser.add_argument("--sensitivity", type=float, default=1.0, help="Beat sensitivity, higher fires more beats")
    parser.add_argument("--palette", choices=sorted(PALETTES), default=DEFAULT_PALETTE, help="Colour palette")
    parser.add_argument("--light-background", action="store_true", help="Use a white background")
    parser.add_argument("--no-grid", action="store_true", help="Hide spectrogram frequency gridlines")
    parser.add_argument("--show-info", action="store_true", help="Overlay playback position and input level")
    parser.add_argument("--log-level", default="INFO", help="DEBUG/INFO/WARNING/ERROR")
    return parser


def build_context(args):
    intensity = args.intensity
    if args.intensity_slider is not None:
        intensity = intensity_from_slider(args.intensity_slider)
    return VisualizationContext.from_palette_name(
        args.palette,
        intensity=intensity,
        sensitivity=args.sensitivity,
        background_is_dark=not args.light_background,
    )


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 1. Validation
    if not os.path.exists(args.input):
        sys.exit(f"[!] Input file not found: {args.input}")

    try:
        context = build_context(args)
    except ValueError as e:
        sys.exit(f"[!] {e}")

    # 2. Analyze Audio
    analyser = AudioAnalyser.load(args.input)

    # 3. Setup Video Generation
    duration = analyser.duration
    if args.duration and args.duration < duration:
        duration = args.duration
        logger.info(f"[i] Truncating duration to {duration} seconds.")

    logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps, mode={args.mode}")
    logger.info(f"[+] Duration: {duration:.2f} seconds")

    renderer = VisualiserRenderer(
        context,
        args.width,
        args.height,
        mode=args.mode,
        show_grid=not args.no_grid,
        fps=args.fps,
        show_info=args.show_info,
    )
    renderer.bind_source(analyser)
    if not renderer.activate():
        sys.exit("[!] Audio analysis produced no frames")

    # 4. Create MoviePy Clip, frames are rendered in RGB directly
    video_clip = VideoClip(renderer.make_frame, duration=duration)

    # Attach original audio
    audio_clip = AudioFileClip(args.input)
    # Ensure audio is cut if we truncated duration
    audio_clip = audio_clip.subclipped(0, duration)
    video_clip = video_clip.with_audio(audio_clip)

    # 5. Export
    logger.info("[+] Rendering video... (This may take a while)")
    video_clip.write_videofile(
        args.output,
        fps=args.fps,
        codec="libx264",
        audio_codec="aac",
        threads=4,
        preset="medium",  # Balance between speed and compression
        logger="bar",
    )

    logger.info(f"[+] Done! Saved to {args.output}")


if __name__ == "__main__":
    main()
