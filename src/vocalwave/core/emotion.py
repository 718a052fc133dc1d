"""
Emotion inference from vocal features.

Uses Russell's circumplex model: arousal (energy/activation) comes from
loudness and speech activity, valence (pleasantness) from pitch height
and pitch movement. The smoothed (arousal, valence) point is classified
by its nearest emotion region.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from vocalwave.core.pitch import PitchData
from vocalwave.core.speed import SpeedData
from vocalwave.core.volume import VolumeData
from vocalwave.errors import ConfigurationError, require
from vocalwave.utils.numeric import clamp, ema

logger = logging.getLogger(__name__)


class EmotionType(str, Enum):
    """The six basic emotions."""

    HAPPY = "happy"
    SAD = "sad"
    CALM = "calm"
    ANGRY = "angry"
    EXCITED = "excited"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class EmotionRegion:
    """Axis-aligned rectangle in arousal-valence space."""

    arousal_min: float
    arousal_max: float
    valence_min: float
    valence_max: float

    @property
    def center(self) -> tuple[float, float]:
        """(arousal, valence) midpoint."""
        return (
            (self.arousal_min + self.arousal_max) / 2,
            (self.valence_min + self.valence_max) / 2,
        )


# Iteration order breaks classification ties.
EMOTION_REGIONS: Mapping[EmotionType, EmotionRegion] = MappingProxyType({
    EmotionType.HAPPY: EmotionRegion(0.4, 0.8, 0.3, 0.8),
    EmotionType.EXCITED: EmotionRegion(0.7, 1.0, 0.2, 1.0),
    EmotionType.ANGRY: EmotionRegion(0.7, 1.0, -1.0, -0.3),
    EmotionType.SAD: EmotionRegion(0.0, 0.4, -1.0, -0.2),
    EmotionType.CALM: EmotionRegion(0.0, 0.3, -0.2, 0.5),
    EmotionType.NEUTRAL: EmotionRegion(0.2, 0.5, -0.2, 0.2),
})

def parse_emotion(value) -> EmotionType:
    """Coerce a name or EmotionType, raising ConfigurationError for unknown names."""
    try:
        return EmotionType(value)
    except ValueError:
        raise ConfigurationError(
            f"Unknown emotion {value!r}, expected one of {[e.value for e in EmotionType]}"
        ) from None


INITIAL_AROUSAL = 0.3
INITIAL_VALENCE = 0.0

# Pitch detections at or below this confidence are ignored.
PITCH_CONFIDENCE_GATE = 0.5


@dataclass(frozen=True)
class EmotionData:
    """Per-frame emotion estimate."""

    type: EmotionType
    confidence: float  # [0.0, 1.0]
    arousal: float     # [0.0, 1.0], smoothed
    valence: float     # [-1.0, 1.0], smoothed


class EmotionExtractor:
    """
    Infers an emotion from volume, pitch and speed features.

    Supports a manual override driven by an external source (an NLP
    sentiment model, a script, a user toggle).
    """

    def __init__(
        self,
        smoothing_factor: float = 0.9,
        regions: Mapping[EmotionType, EmotionRegion] = EMOTION_REGIONS,
    ):
        """
        Initialize the extractor.

        Args:
            smoothing_factor: EMA weight of the previous arousal/valence.
            regions: Ordered emotion region table.
        """
        require(0.0 <= smoothing_factor <= 1.0, f"emotion smoothing must be in [0, 1], got {smoothing_factor}")
        require(len(regions) > 0, "emotion region table is empty")
        self.smoothing_factor = smoothing_factor
        self._regions = dict(regions)

        self._manual_emotion: EmotionType | None = None
        self._current_emotion = EmotionType.NEUTRAL
        self._current_arousal = INITIAL_AROUSAL
        self._current_valence = INITIAL_VALENCE

    @property
    def arousal(self) -> float:
        return self._current_arousal

    @property
    def valence(self) -> float:
        return self._current_valence

    @property
    def current_emotion(self) -> EmotionType:
        return self._current_emotion

    @property
    def manual_emotion(self) -> EmotionType | None:
        return self._manual_emotion

    def extract(self, volume: VolumeData, pitch: PitchData, speed: SpeedData) -> EmotionData:
        """
        Update the arousal-valence state with one frame and classify it.

        Args:
            volume: Loudness features.
            pitch: Pitch features.
            speed: Speech activity features.

        Returns:
            EmotionData for this frame.
        """
        if self._manual_emotion is not None:
            return self._override_data(self._manual_emotion)

        pitch_confident = pitch.confidence > PITCH_CONFIDENCE_GATE

        raw_arousal = clamp(
            volume.smoothed * 0.5 + speed.activity_rate * 0.3 + (0.2 if pitch_confident else 0.0),
            0.0,
            1.0,
        )

        # High, rising pitch reads as positive; low, falling pitch as negative.
        raw_valence = 0.0
        if pitch_confident and pitch.frequency > 0:
            raw_valence = clamp((pitch.frequency - 200.0) / 200.0, -1.0, 1.0) * 0.6
            raw_valence += clamp(pitch.change_rate / 100.0, -0.4, 0.4)

        self._current_arousal = clamp(ema(self._current_arousal, raw_arousal, self.smoothing_factor), 0.0, 1.0)
        self._current_valence = clamp(ema(self._current_valence, raw_valence, self.smoothing_factor), -1.0, 1.0)

        emotion, confidence = self.classify(self._current_arousal, self._current_valence)
        if emotion != self._current_emotion:
            logger.debug("Emotion %s -> %s (confidence %.2f)", self._current_emotion.value, emotion.value, confidence)
        self._current_emotion = emotion

        return EmotionData(
            type=emotion,
            confidence=confidence,
            arousal=self._current_arousal,
            valence=self._current_valence,
        )

    def snapshot(self) -> EmotionData:
        """Current emotion without consuming a frame."""
        if self._manual_emotion is not None:
            return self._override_data(self._manual_emotion)
        _, confidence = self.classify(self._current_arousal, self._current_valence)
        return EmotionData(
            type=self._current_emotion,
            confidence=confidence,
            arousal=self._current_arousal,
            valence=self._current_valence,
        )

    def classify(self, arousal: float, valence: float) -> tuple[EmotionType, float]:
        """
        Nearest region by Euclidean distance to its center.

        Returns:
            (emotion, confidence) where confidence = clamp(1 - distance, 0, 1).
            The first region in table order wins ties.
        """
        best_emotion = EmotionType.NEUTRAL
        best_distance = math.inf

        for emotion, region in self._regions.items():
            center_arousal, center_valence = region.center
            distance = math.hypot(arousal - center_arousal, valence - center_valence)
            if distance < best_distance:
                best_distance = distance
                best_emotion = emotion

        return best_emotion, clamp(1.0 - best_distance, 0.0, 1.0)

    def _override_data(self, emotion: EmotionType) -> EmotionData:
        arousal, valence = self._regions[emotion].center
        return EmotionData(type=emotion, confidence=1.0, arousal=arousal, valence=valence)

    def set_manual_emotion(self, emotion: EmotionType | str) -> None:
        """Override automatic detection until cleared."""
        emotion = parse_emotion(emotion)
        require(emotion in self._regions, f"No region defined for emotion {emotion.value!r}")
        self._manual_emotion = emotion
        self._current_emotion = emotion

    def clear_manual_emotion(self) -> None:
        """Resume automatic detection."""
        self._manual_emotion = None

    def reset(self) -> None:
        self._manual_emotion = None
        self._current_emotion = EmotionType.NEUTRAL
        self._current_arousal = INITIAL_AROUSAL
        self._current_valence = INITIAL_VALENCE
