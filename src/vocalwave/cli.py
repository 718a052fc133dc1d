"""
CLI entry point for offline voice waveform analysis.

Usage:
    vocalwave <audio_file> [options]
    python -m vocalwave <audio_file> [options]
"""

import argparse
import logging
import sys
import time
from collections import Counter
from pathlib import Path

from vocalwave.config import PipelineConfig, load_config
from vocalwave.core.capture import SignalCaptureSource
from vocalwave.core.pitch import PITCH_ALGORITHMS
from vocalwave.core.emotion import EmotionType
from vocalwave.errors import VocalwaveError
from vocalwave.io.exporter import FrameExporter
from vocalwave.pipeline import VoicePipeline


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vocalwave",
        description="Emotion-aware voice waveform analysis: audio in, per-frame visual parameters out",
    )

    parser.add_argument(
        "audio",
        type=Path,
        help="Input audio file (wav, mp3, flac)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output manifest path (default: <audio>_vocalwave.json, or .npz with --npz)",
    )
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (default: from config, 60)")

    # Analysis
    parser.add_argument(
        "--algorithm", type=str, default=None,
        choices=PITCH_ALGORITHMS,
        help="Pitch detection algorithm (default: yin)",
    )
    parser.add_argument(
        "--emotion", type=str, default=None,
        choices=[e.value for e in EmotionType],
        help="Force a fixed emotion instead of inferring it",
    )
    parser.add_argument("--band-count", type=int, default=None, help="Number of spectrum bands (default: 24)")
    parser.add_argument(
        "--config", type=Path, default=None,
        help="JSON pipeline configuration file",
    )

    # Limits
    parser.add_argument(
        "--max-duration", type=float, default=None,
        help="Limit output to N seconds",
    )

    # Output
    parser.add_argument("--npz", action="store_true", help="Write a NumPy archive instead of JSON")
    parser.add_argument("--no-features", action="store_true", help="Omit raw audio features from the manifest")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


def _build_config(args) -> PipelineConfig:
    config = load_config(args.config) if args.config is not None else PipelineConfig()

    if args.algorithm is not None:
        config.pitch.algorithm = args.algorithm
    if args.band_count is not None:
        if args.band_count < 1:
            raise VocalwaveError(f"--band-count must be positive, got {args.band_count}")
        config.audio.band_count = args.band_count
    if args.fps is not None:
        if args.fps < 1:
            raise VocalwaveError(f"--fps must be positive, got {args.fps}")
        config.animation.fps = args.fps
    return config


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)
    if args.config is not None and not args.config.exists():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    output = args.output
    if output is None:
        suffix = "npz" if args.npz else "json"
        output = args.audio.with_name(f"{args.audio.stem}_vocalwave.{suffix}")

    try:
        config = _build_config(args)
        fps = config.animation.fps

        print(f"Analyzing audio: {args.audio}")
        t0 = time.time()

        source = SignalCaptureSource.from_file(
            args.audio,
            fft_size=config.audio.fft_size,
            smoothing_time_constant=config.audio.smoothing_time_constant,
        )
        pipeline = VoicePipeline(config)
        if args.emotion is not None:
            pipeline.set_emotion(args.emotion)

        total = pipeline.expected_frames(source, fps)
        if args.max_duration is not None:
            max_frames = max(0, int(args.max_duration * fps))
            if max_frames < total:
                total = max_frames
                print(f"  Limiting to {args.max_duration}s ({max_frames} frames)")

        print(f"  Sample rate: {source.sample_rate} Hz")
        print(f"  Duration: {source.duration:.1f}s")
        print(f"  Frames: {total} at {fps} fps")

        frames = []
        features = []
        for frame in pipeline.process_source(source, fps=fps, max_frames=total):
            frames.append(frame)
            features.append(pipeline.last_features)
            _progress_bar(len(frames), total)

        pipeline.disconnect()
    except VocalwaveError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"  Analysis took {time.time() - t0:.1f}s")

    emotions = Counter(f.emotion.type.value for f in features)
    if emotions:
        summary = ", ".join(f"{name} {count}" for name, count in emotions.most_common())
        print(f"  Emotions: {summary}")

    exporter = FrameExporter()
    if args.npz:
        exporter.export_numpy(frames, fps, output)
    else:
        exporter.export_json(frames, fps, output, features=None if args.no_features else features)

    print(f"Wrote {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
