"""
Frame manifest serialization.

Exports a sequence of pipeline frames (and optionally the audio features
behind them) to JSON for renderers that replay a recording offline.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import numpy as np

from vocalwave import __version__
from vocalwave.mapping.params import ColorParams
from vocalwave.mapping.presets import preset_key
from vocalwave.pipeline import AudioFeatures, FrameData
from vocalwave.utils.hsl import HSLColor, hsl_to_string


@dataclass
class ManifestMetadata:
    """Metadata header for the frame manifest."""

    fps: int
    n_frames: int
    duration: float
    version: str = __version__
    schema_version: str = "1.0"


class FrameExporter:
    """
    Exports FrameData sequences to JSON manifest format.

    Each frame carries the interpolated color, shape and dynamic
    parameters plus the spectrum bands; colors are written both as HSL
    triples and CSS strings.
    """

    def __init__(self, precision: int = 4):
        """
        Initialize the exporter.

        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: float) -> float:
        """Round to configured precision."""
        return round(float(value), self.precision)

    def _color(self, color: HSLColor) -> dict[str, Any]:
        return {
            "hue": self._round(color.hue),
            "saturation": self._round(color.saturation),
            "lightness": self._round(color.lightness),
            "css": hsl_to_string(color),
        }

    def _palette(self, color: ColorParams) -> dict[str, Any]:
        return {
            "primary": self._color(color.primary),
            "secondary": self._color(color.secondary),
            "glow": self._color(color.glow),
        }

    def _features(self, features: AudioFeatures) -> dict[str, Any]:
        return {
            "volume": {
                "rms": self._round(features.volume.rms),
                "peak": self._round(features.volume.peak),
                "smoothed": self._round(features.volume.smoothed),
            },
            "pitch": {
                "frequency": self._round(features.pitch.frequency),
                "confidence": self._round(features.pitch.confidence),
                "change_rate": self._round(features.pitch.change_rate),
            },
            "speed": {
                "activity_rate": self._round(features.speed.activity_rate),
                "change_rate": self._round(features.speed.change_rate),
                "is_active": bool(features.speed.is_active),
            },
            "emotion": {
                "type": features.emotion.type.value,
                "confidence": self._round(features.emotion.confidence),
                "arousal": self._round(features.emotion.arousal),
                "valence": self._round(features.emotion.valence),
            },
        }

    def frame_to_dict(
        self,
        frame: FrameData,
        features: Optional[AudioFeatures] = None,
        index: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Build a single frame's data dictionary.

        Args:
            frame: Pipeline output for the frame.
            features: Audio features behind the frame, if available.
            index: Frame index to record.

        Returns:
            Dictionary with all frame data.
        """
        shape = frame.shape
        dynamic = frame.dynamic

        data: dict[str, Any] = {}
        if index is not None:
            data["frame_index"] = index
        data.update({
            "time": self._round(frame.timestamp),
            "state": frame.state.value,
            "phase": self._round(frame.phase),
            "color": self._palette(frame.color),
            "shape": {
                "amplitude": self._round(shape.amplitude),
                "spacing": self._round(shape.spacing),
                "active_count": int(shape.active_count),
                "variance": self._round(shape.variance),
                "spacing_mode": preset_key(shape.spacing_mode),
            },
            "dynamic": {
                "speed_multiplier": self._round(dynamic.speed_multiplier),
                "wave_pattern": preset_key(dynamic.wave_pattern),
                "glow_intensity": self._round(dynamic.glow_intensity),
                "transition_duration": self._round(dynamic.transition_duration),
            },
            "bands": [self._round(b) for b in frame.bands],
        })

        if features is not None:
            data["features"] = self._features(features)

        return data

    def build_manifest(
        self,
        frames: Sequence[FrameData],
        fps: int,
        features: Optional[Sequence[AudioFeatures]] = None,
    ) -> dict[str, Any]:
        """
        Build the complete manifest dictionary.

        Args:
            frames: Pipeline frames in order.
            fps: Frame rate the frames were produced at.
            features: Per-frame audio features, aligned with frames.

        Returns:
            Complete manifest dictionary ready for serialization.
        """
        if features is not None and len(features) != len(frames):
            raise ValueError(f"Got {len(features)} feature sets for {len(frames)} frames")

        metadata = ManifestMetadata(
            fps=fps,
            n_frames=len(frames),
            duration=self._round(len(frames) / fps) if fps else 0.0,
        )

        return {
            "metadata": {
                "fps": metadata.fps,
                "n_frames": metadata.n_frames,
                "duration": metadata.duration,
                "version": metadata.version,
                "schema_version": metadata.schema_version,
            },
            "frames": [
                self.frame_to_dict(frame, features[i] if features is not None else None, index=i)
                for i, frame in enumerate(frames)
            ],
        }

    def export_json(
        self,
        frames: Sequence[FrameData],
        fps: int,
        output_path: Union[str, Path],
        features: Optional[Sequence[AudioFeatures]] = None,
        indent: int = 2,
    ) -> Path:
        """
        Export manifest to JSON file.

        Args:
            frames: Pipeline frames.
            fps: Frame rate.
            output_path: Path for output JSON file.
            features: Per-frame audio features, aligned with frames.
            indent: JSON indentation level.

        Returns:
            Path to written file.
        """
        manifest = self.build_manifest(frames, fps, features)
        output_path = Path(output_path)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=indent)

        return output_path

    def export_numpy(
        self,
        frames: Sequence[FrameData],
        fps: int,
        output_path: Union[str, Path],
    ) -> Path:
        """
        Export the numeric frame series as a NumPy .npz archive.

        Args:
            frames: Pipeline frames.
            fps: Frame rate.
            output_path: Path for output .npz file.

        Returns:
            Path to written file.
        """
        output_path = Path(output_path)

        np.savez_compressed(
            output_path,
            time=np.array([f.timestamp for f in frames], dtype=np.float64),
            amplitude=np.array([f.shape.amplitude for f in frames], dtype=np.float64),
            spacing=np.array([f.shape.spacing for f in frames], dtype=np.float64),
            active_count=np.array([f.shape.active_count for f in frames], dtype=np.int64),
            variance=np.array([f.shape.variance for f in frames], dtype=np.float64),
            speed_multiplier=np.array([f.dynamic.speed_multiplier for f in frames], dtype=np.float64),
            glow_intensity=np.array([f.dynamic.glow_intensity for f in frames], dtype=np.float64),
            primary_hsl=np.array(
                [(f.color.primary.hue, f.color.primary.saturation, f.color.primary.lightness) for f in frames],
                dtype=np.float64,
            ).reshape(-1, 3),
            bands=np.array([f.bands for f in frames], dtype=np.float64),
            fps=fps,
            n_frames=len(frames),
        )

        return output_path
