"""Capture sources and feature extractors."""

from vocalwave.core.capture import CaptureSource, SignalCaptureSource
from vocalwave.core.emotion import EmotionData, EmotionExtractor, EmotionType
from vocalwave.core.multiband import MultibandProcessor
from vocalwave.core.pitch import PitchData, PitchExtractor
from vocalwave.core.speed import SpeedData, SpeedExtractor
from vocalwave.core.volume import VolumeData, VolumeExtractor

__all__ = [
    "CaptureSource",
    "SignalCaptureSource",
    "EmotionData",
    "EmotionExtractor",
    "EmotionType",
    "MultibandProcessor",
    "PitchData",
    "PitchExtractor",
    "SpeedData",
    "SpeedExtractor",
    "VolumeData",
    "VolumeExtractor",
]
