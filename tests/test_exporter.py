"""Tests for the FrameExporter module."""

import json

import numpy as np
import pytest

from vocalwave import __version__
from vocalwave.io.exporter import FrameExporter
from vocalwave.pipeline import VoicePipeline

FPS = 60


class TestFrameExporter:
    """Tests for manifest serialization."""

    @pytest.fixture
    def recorded(self, loud_spectrum, sine_buffer):
        """Ten voiced frames and the features behind them."""
        pipeline = VoicePipeline()
        frames = []
        features = []
        for i in range(10):
            frames.append(pipeline.process_frame(loud_spectrum, sine_buffer(400.0), i / FPS, 1000.0 / FPS))
            features.append(pipeline.last_features)
        return frames, features

    def test_build_manifest_structure(self, recorded):
        frames, _ = recorded
        manifest = FrameExporter().build_manifest(frames, FPS)

        assert set(manifest) == {"metadata", "frames"}
        assert len(manifest["frames"]) == 10

    def test_metadata_fields(self, recorded):
        frames, _ = recorded
        metadata = FrameExporter().build_manifest(frames, FPS)["metadata"]

        assert metadata["fps"] == FPS
        assert metadata["n_frames"] == 10
        assert metadata["duration"] == round(10 / FPS, 4)
        assert metadata["version"] == __version__
        assert metadata["schema_version"] == "1.0"

    def test_frame_fields(self, recorded):
        frames, _ = recorded
        frame = FrameExporter().build_manifest(frames, FPS)["frames"][3]

        assert frame["frame_index"] == 3
        assert frame["time"] == round(3 / FPS, 4)
        assert frame["state"] == "listening"
        assert set(frame["color"]) == {"primary", "secondary", "glow"}
        assert set(frame["shape"]) == {"amplitude", "spacing", "active_count", "variance", "spacing_mode"}
        assert set(frame["dynamic"]) == {"speed_multiplier", "wave_pattern", "glow_intensity", "transition_duration"}
        assert len(frame["bands"]) == 24
        assert "features" not in frame

    def test_categorical_values_are_strings(self, recorded):
        frames, _ = recorded
        frame = FrameExporter().frame_to_dict(frames[0])

        assert frame["shape"]["spacing_mode"] == "uniform"
        assert frame["dynamic"]["wave_pattern"] == "breathing"
        assert isinstance(frame["shape"]["active_count"], int)

    def test_css_strings(self, recorded):
        frames, _ = recorded
        color = FrameExporter().frame_to_dict(frames[0])["color"]["primary"]

        assert color["css"].startswith("hsl(")
        assert color["css"].endswith("%)")

    def test_precision(self, recorded):
        frames, _ = recorded
        frame = FrameExporter(precision=2).frame_to_dict(frames[0])
        amplitude = frame["shape"]["amplitude"]
        assert amplitude == round(amplitude, 2)

    def test_features_included(self, recorded):
        frames, features = recorded
        frame = FrameExporter().build_manifest(frames, FPS, features)["frames"][-1]

        assert set(frame["features"]) == {"volume", "pitch", "speed", "emotion"}
        assert frame["features"]["speed"]["is_active"] is True
        assert frame["features"]["emotion"]["type"] in {
            "happy", "sad", "calm", "angry", "excited", "neutral",
        }

    def test_feature_length_mismatch(self, recorded):
        frames, features = recorded
        with pytest.raises(ValueError):
            FrameExporter().build_manifest(frames, FPS, features[:-1])

    def test_empty_manifest(self):
        manifest = FrameExporter().build_manifest([], FPS)
        assert manifest["metadata"]["n_frames"] == 0
        assert manifest["metadata"]["duration"] == 0.0
        assert manifest["frames"] == []

    def test_export_json(self, recorded, tmp_path):
        frames, features = recorded
        output = tmp_path / "manifest.json"

        result = FrameExporter().export_json(frames, FPS, output, features=features)

        assert result == output
        with open(output) as f:
            loaded = json.load(f)
        assert loaded["metadata"]["n_frames"] == 10
        assert loaded["frames"][0]["features"]["volume"]["smoothed"] >= 0.0

    def test_export_numpy(self, recorded, tmp_path):
        frames, _ = recorded
        output = tmp_path / "frames.npz"

        FrameExporter().export_numpy(frames, FPS, output)

        with np.load(output) as data:
            assert data["amplitude"].shape == (10,)
            assert data["primary_hsl"].shape == (10, 3)
            assert data["bands"].shape == (10, 24)
            assert int(data["fps"]) == FPS
            assert int(data["n_frames"]) == 10
            assert np.allclose(data["time"], np.arange(10) / FPS)
