"""
Voice visualization pipeline.

Orchestrates the three stages for every frame:

1. Feature extraction: volume, pitch, speed, emotion and spectrum bands
   from a pair of analyser buffers.
2. Mapping: emotion -> color, volume/pitch -> shape, rhythm -> dynamics,
   then unified interpolation.
3. Output: an immutable FrameData handed to an attached renderer and to
   frame listeners.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Optional

import numpy as np

from vocalwave.config import PipelineConfig
from vocalwave.core.capture import DEFAULT_SAMPLE_RATE, CaptureSource, SignalCaptureSource
from vocalwave.core.emotion import (
    INITIAL_AROUSAL,
    INITIAL_VALENCE,
    EmotionData,
    EmotionExtractor,
    EmotionType,
    parse_emotion,
)
from vocalwave.core.multiband import MultibandProcessor
from vocalwave.core.pitch import PitchData, PitchExtractor
from vocalwave.core.speed import SpeedData, SpeedExtractor
from vocalwave.core.volume import VolumeData, VolumeExtractor
from vocalwave.errors import ConfigurationError, require
from vocalwave.mapping.color import ColorChannel
from vocalwave.mapping.dynamic import DynamicChannel
from vocalwave.mapping.interpolator import UnifiedInterpolator
from vocalwave.mapping.params import ColorParams, DynamicParams, ShapeParams
from vocalwave.mapping.presets import EmotionColorPreset
from vocalwave.mapping.shape import ShapeChannel
from vocalwave.rendering import AgentState, Renderer

logger = logging.getLogger(__name__)

EVENTS = ("emotion_change", "state_change", "frame_update")


@dataclass(frozen=True)
class AudioFeatures:
    """All features extracted from one frame."""

    volume: VolumeData
    pitch: PitchData
    speed: SpeedData
    emotion: EmotionData
    bands: tuple[float, ...]
    timestamp: float  # Seconds


@dataclass(frozen=True)
class FrameData:
    """Everything a renderer needs to draw one frame."""

    state: AgentState
    timestamp: float  # Seconds
    color: ColorParams
    shape: ShapeParams
    dynamic: DynamicParams
    bands: tuple[float, ...]  # Smoothed spectrum bands, [0.0, 1.0]
    phase: float              # Animation phase accumulator, seconds of frame time


class VoicePipeline:
    """
    Complete audio-to-frame processing pipeline.

    Single-threaded and frame driven: call tick() (with a connected
    capture source) or process_frame() (with raw buffers) once per frame.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration. Defaults to PipelineConfig().
        """
        self.config = config or PipelineConfig()
        audio = self.config.audio
        mapping = self.config.mapping

        self.volume = VolumeExtractor(
            smoothing_factor=audio.smoothing_time_constant,
            min_db=audio.min_decibels,
            max_db=audio.max_decibels,
            peak_decay=audio.peak_decay,
        )
        self.pitch = self._build_pitch_extractor(DEFAULT_SAMPLE_RATE)
        self.speed = SpeedExtractor(
            threshold=self.config.vad.threshold,
            window_size=self.config.vad.window_size,
            min_db=audio.min_decibels,
            max_db=audio.max_decibels,
        )
        self.emotion = EmotionExtractor(smoothing_factor=mapping.emotion_smoothing)
        self.multiband = MultibandProcessor(
            band_count=audio.band_count,
            min_db=audio.min_decibels,
            max_db=audio.max_decibels,
            smoothing_factor=audio.band_smoothing,
        )

        self.color = ColorChannel()
        for name, preset in mapping.presets.items():
            self.color.register_preset(name, preset)
        self.shape = ShapeChannel(
            amplitude_range=mapping.amplitude_range,
            spacing_range=mapping.spacing_range,
            bar_count=audio.band_count,
            pitch_range=(self.config.pitch.min_frequency, self.config.pitch.max_frequency),
        )
        self.dynamic = DynamicChannel(
            speed_range=mapping.speed_range,
            transition_range=mapping.transition_range,
            seed=self.config.animation.seed,
        )
        self.interpolator = UnifiedInterpolator(lerp_speed=self.config.animation.lerp_speed)

        self._source: Optional[CaptureSource] = None
        self._renderer: Optional[Renderer] = None
        self._listeners: dict[str, list[Callable[..., Any]]] = {event: [] for event in EVENTS}

        self._state = AgentState.LISTENING
        self._phase = 0.0
        self._blend_weights: Optional[dict[str, float]] = None
        self._last_frame: Optional[FrameData] = None
        self._last_features: Optional[AudioFeatures] = None

        self._applied_emotion = mapping.initial_emotion
        self._apply_emotion_preset(self._applied_emotion)

    def _build_pitch_extractor(self, sample_rate: float) -> PitchExtractor:
        pitch = self.config.pitch
        return PitchExtractor(
            sample_rate=sample_rate,
            min_frequency=pitch.min_frequency,
            max_frequency=pitch.max_frequency,
            confidence_threshold=pitch.confidence_threshold,
            algorithm=pitch.algorithm,
        )

    # Capture

    @property
    def source(self) -> Optional[CaptureSource]:
        return self._source

    @property
    def is_connected(self) -> bool:
        return self._source is not None

    def connect(self, source: CaptureSource) -> None:
        """Attach a capture source; pitch detection follows its sample rate."""
        if self._source is not None and self._source is not source:
            self.disconnect()
        self._source = source
        self.pitch = self._build_pitch_extractor(source.sample_rate)
        logger.debug("Connected capture source at %d Hz", source.sample_rate)

    def disconnect(self) -> None:
        if self._source is None:
            return
        self._source.disconnect()
        self._source = None
        logger.debug("Disconnected capture source")

    # Frame processing

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def phase(self) -> float:
        return self._phase

    @property
    def last_frame(self) -> Optional[FrameData]:
        return self._last_frame

    @property
    def last_features(self) -> Optional[AudioFeatures]:
        return self._last_features

    def tick(self, timestamp: float, delta_ms: float) -> FrameData:
        """
        Run one frame from the connected source.

        Without a source, idle features are used and the visuals ease
        toward the current emotion's resting look.
        """
        if self._source is None:
            return self._render(self._idle_features(timestamp), delta_ms)

        return self.process_frame(
            self._source.get_frequency_data(),
            self._source.get_time_domain_data(),
            timestamp,
            delta_ms,
        )

    def process_frame(
        self,
        frequency_data,
        time_domain_data,
        timestamp: float,
        delta_ms: float,
    ) -> FrameData:
        """
        Run one frame from raw analyser buffers.

        Args:
            frequency_data: Magnitude spectrum in decibels.
            time_domain_data: Samples normalized to [-1, 1].
            timestamp: Frame time in seconds.
            delta_ms: Time since the previous frame in milliseconds.

        Returns:
            The interpolated FrameData.
        """
        return self._render(self.extract_features(frequency_data, time_domain_data, timestamp), delta_ms)

    def extract_features(self, frequency_data, time_domain_data, timestamp: float) -> AudioFeatures:
        """Stage 1 only: update the extractors with one frame."""
        frequency_data = np.asarray(frequency_data, dtype=np.float64)
        time_domain_data = np.asarray(time_domain_data, dtype=np.float64)

        silent = self._is_silent(time_domain_data)
        if silent:
            frequency_data = np.full(frequency_data.shape, self.config.audio.min_decibels)

        volume = self.volume.extract(frequency_data)
        pitch = self.pitch.extract(time_domain_data, timestamp)
        speed = self.speed.extract(frequency_data, timestamp)
        if silent:
            emotion = self.emotion.snapshot()
        else:
            emotion = self.emotion.extract(volume, pitch, speed)
        bands = self.multiband.process(frequency_data)

        return AudioFeatures(
            volume=volume,
            pitch=pitch,
            speed=speed,
            emotion=emotion,
            bands=tuple(float(b) for b in bands),
            timestamp=timestamp,
        )

    def _is_silent(self, time_domain_data: np.ndarray) -> bool:
        if time_domain_data.size == 0:
            return True
        return float(np.max(np.abs(time_domain_data))) < self.config.audio.silence_floor

    def _idle_features(self, timestamp: float) -> AudioFeatures:
        return AudioFeatures(
            volume=VolumeData(rms=0.0, peak=0.0, smoothed=0.0),
            pitch=PitchData(frequency=0.0, confidence=0.0, change_rate=0.0),
            speed=SpeedData(activity_rate=0.0, change_rate=0.0, is_active=False),
            emotion=EmotionData(
                type=self._applied_emotion,
                confidence=1.0,
                arousal=INITIAL_AROUSAL,
                valence=INITIAL_VALENCE,
            ),
            bands=(0.0,) * self.multiband.band_count,
            timestamp=timestamp,
        )

    def _render(self, features: AudioFeatures, delta_ms: float) -> FrameData:
        """Stages 2 and 3: map, interpolate, publish."""
        self._phase += max(delta_ms, 0.0) * 0.001

        if features.emotion.type != self._applied_emotion:
            self._change_emotion(features.emotion.type)

        if self._blend_weights is not None:
            target_color = self.color.map_blended(self._blend_weights)
        else:
            target_color = self.color.map(features.emotion)
        target_shape = self.shape.map(features.volume, features.pitch)
        target_dynamic = self.dynamic.map(features.speed, features.volume)

        current = self.interpolator.interpolate(target_color, target_shape, target_dynamic, delta_ms)

        frame = FrameData(
            state=self._state,
            timestamp=features.timestamp,
            color=current.color,
            shape=current.shape,
            dynamic=current.dynamic,
            bands=features.bands,
            phase=self._phase,
        )

        self._last_features = features
        self._last_frame = frame
        if self._renderer is not None:
            self._renderer.draw(frame)
        self._emit("frame_update", frame)
        return frame

    def process_source(
        self,
        source: SignalCaptureSource,
        fps: Optional[int] = None,
        max_frames: Optional[int] = None,
    ) -> Iterator[FrameData]:
        """
        Drive a signal source at a fixed frame rate (offline analysis).

        The source is rewound, connected, and advanced by one frame period
        before each frame until it runs out of samples.

        Args:
            source: Seekable capture source.
            fps: Frame rate. Defaults to the configured animation fps.
            max_frames: Stop after this many frames.

        Yields:
            FrameData for each frame.
        """
        fps = fps or self.config.animation.fps
        require(fps > 0, f"fps must be positive, got {fps}")
        period = 1.0 / fps

        self.connect(source)
        source.seek(0.0)

        count = 0
        while not source.finished and (max_frames is None or count < max_frames):
            source.advance(period)
            yield self.tick(source.position, period * 1000.0)
            count += 1

    def expected_frames(self, source: SignalCaptureSource, fps: Optional[int] = None) -> int:
        """Number of frames process_source() yields for a full pass."""
        fps = fps or self.config.animation.fps
        return math.ceil(source.duration * fps)

    # Emotion

    @property
    def current_emotion(self) -> EmotionType:
        return self._applied_emotion

    def set_emotion(self, emotion) -> None:
        """Override automatic detection with a fixed emotion."""
        emotion = parse_emotion(emotion)
        self._blend_weights = None
        self.emotion.set_manual_emotion(emotion)
        if emotion != self._applied_emotion:
            self._change_emotion(emotion)

    def set_blended_emotion(self, weights: Mapping[Any, float]) -> None:
        """
        Override with a weighted mix, e.g. {"happy": 0.7, "excited": 0.3}.

        Colors blend across all weighted emotions; shape and dynamics
        follow the dominant one.
        """
        blend = {parse_emotion(name).value: float(w) for name, w in weights.items() if w > 0}
        if not blend:
            raise ConfigurationError("Blended emotion needs at least one positive weight")

        dominant = max(blend, key=blend.get)
        self.set_emotion(dominant)
        self._blend_weights = blend

    def clear_emotion(self) -> None:
        """Resume automatic detection."""
        self._blend_weights = None
        self.emotion.clear_manual_emotion()

    def _change_emotion(self, emotion: EmotionType) -> None:
        previous = self._applied_emotion
        self._applied_emotion = emotion
        self._apply_emotion_preset(emotion)
        logger.debug("Applied emotion preset %s -> %s", previous.value, emotion.value)
        self._emit("emotion_change", previous, emotion)

    def _apply_emotion_preset(self, emotion: EmotionType) -> None:
        preset = self.color.get_preset(emotion)
        if preset is not None:
            self.shape.apply_preset(preset)
            self.dynamic.apply_preset(preset)

    # Presets

    def register_preset(self, name: str, preset: EmotionColorPreset) -> None:
        self.color.register_preset(name, preset)
        if name == self._applied_emotion.value:
            self._apply_emotion_preset(self._applied_emotion)

    def get_presets(self) -> Mapping[str, EmotionColorPreset]:
        return self.color.get_presets()

    # Rendering and state

    def attach_renderer(self, renderer: Renderer, container: Any = None) -> None:
        """Mount a renderer; it receives every subsequent frame."""
        self.detach_renderer()
        renderer.mount(container)
        self._renderer = renderer

    def detach_renderer(self) -> None:
        if self._renderer is not None:
            self._renderer.dispose()
            self._renderer = None

    def set_state(self, state) -> None:
        """Force the agent state shown by the visuals."""
        state = AgentState(state)
        previous = self._state
        if state == previous:
            return
        self._state = state
        if self._renderer is not None:
            self._renderer.on_state_change(state)
        self._emit("state_change", previous, state)

    # Events

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        """
        Register a listener.

        Events and their arguments:
            emotion_change: (previous, current) EmotionType
            state_change: (previous, current) AgentState
            frame_update: (frame) FrameData
        """
        if event not in self._listeners:
            raise ConfigurationError(f"Unknown event {event!r}, expected one of {EVENTS}")
        self._listeners[event].append(callback)

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def _emit(self, event: str, *args) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(*args)
            except Exception:
                logger.exception("Listener for %r failed", event)

    def reset(self) -> None:
        """Return every component to its initial state. Listeners, renderer and source stay attached."""
        self.volume.reset()
        self.pitch.reset()
        self.speed.reset()
        self.emotion.reset()
        self.multiband.reset()
        self.interpolator.reset()

        self._phase = 0.0
        self._blend_weights = None
        self._last_frame = None
        self._last_features = None
        self._applied_emotion = self.config.mapping.initial_emotion
        self._apply_emotion_preset(self._applied_emotion)
