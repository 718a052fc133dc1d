"""
Vocalwave: emotion-aware voice waveform engine.

Extracts volume, pitch, speaking activity and emotion from voice audio
and maps them to color, shape and motion parameters for a waveform
renderer.
"""

__version__ = "0.1.0"

from vocalwave.config import PipelineConfig, load_config
from vocalwave.core.emotion import EmotionType
from vocalwave.errors import CaptureError, ConfigurationError, VocalwaveError
from vocalwave.pipeline import AudioFeatures, FrameData, VoicePipeline
from vocalwave.rendering import AgentState, Renderer

__all__ = [
    "PipelineConfig",
    "load_config",
    "EmotionType",
    "CaptureError",
    "ConfigurationError",
    "VocalwaveError",
    "AudioFeatures",
    "FrameData",
    "VoicePipeline",
    "AgentState",
    "Renderer",
]
