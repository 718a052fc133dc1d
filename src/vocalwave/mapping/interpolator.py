"""
Unified interpolation across the three channels.

Channel targets jump whenever features or emotion change; the
interpolator eases the emitted parameters toward them with a
frame-rate independent exponential blend.
"""

from dataclasses import dataclass

from vocalwave.errors import require
from vocalwave.mapping.params import (
    DEFAULT_COLOR,
    DEFAULT_DYNAMIC,
    DEFAULT_SHAPE,
    ColorParams,
    DynamicParams,
    ShapeParams,
)
from vocalwave.utils.hsl import lerp_hsl
from vocalwave.utils.numeric import lerp, round_half_up, time_lerp_factor

# Per-frame blend factor above which categorical fields jump to the target.
CATEGORICAL_SWITCH = 0.5


@dataclass(frozen=True)
class VisualParams:
    """Interpolated output of all three channels."""

    color: ColorParams
    shape: ShapeParams
    dynamic: DynamicParams


def lerp_color(a: ColorParams, b: ColorParams, t: float) -> ColorParams:
    return ColorParams(
        primary=lerp_hsl(a.primary, b.primary, t),
        secondary=lerp_hsl(a.secondary, b.secondary, t),
        glow=lerp_hsl(a.glow, b.glow, t),
    )


class UnifiedInterpolator:
    """
    Eases color, shape and dynamic parameters toward their targets.

    Starts from the neutral defaults. The blend factor for an elapsed
    interval dt is 1 - exp(-lerp_speed * dt / 1000). Numeric fields blend
    every frame (hue along the shortest arc); the lit bar count is eased
    as a float and rounded on output; spacing mode and wave pattern jump to
    the target only on frames whose blend factor exceeds one half, and
    hold otherwise.
    """

    def __init__(self, lerp_speed: float = 5.0):
        """
        Args:
            lerp_speed: Convergence rate per second.
        """
        self.set_lerp_speed(lerp_speed)
        self.reset()

    @property
    def lerp_speed(self) -> float:
        return self._lerp_speed

    @property
    def current(self) -> VisualParams:
        return self._current

    def set_lerp_speed(self, speed: float) -> None:
        require(speed > 0, f"lerp_speed must be positive, got {speed}")
        self._lerp_speed = float(speed)

    def interpolate(
        self,
        color: ColorParams,
        shape: ShapeParams,
        dynamic: DynamicParams,
        delta_ms: float,
    ) -> VisualParams:
        """Advance toward the targets by `delta_ms` and return the new state."""
        delta_ms = max(delta_ms, 0.0)
        t = time_lerp_factor(self._lerp_speed, delta_ms)
        current = self._current
        switch = t > CATEGORICAL_SWITCH

        self._active_level = lerp(self._active_level, shape.active_count, t)
        new_shape = ShapeParams(
            amplitude=lerp(current.shape.amplitude, shape.amplitude, t),
            spacing=lerp(current.shape.spacing, shape.spacing, t),
            active_count=round_half_up(self._active_level),
            variance=lerp(current.shape.variance, shape.variance, t),
            spacing_mode=shape.spacing_mode if switch else current.shape.spacing_mode,
        )
        new_dynamic = DynamicParams(
            speed_multiplier=lerp(current.dynamic.speed_multiplier, dynamic.speed_multiplier, t),
            wave_pattern=dynamic.wave_pattern if switch else current.dynamic.wave_pattern,
            glow_intensity=lerp(current.dynamic.glow_intensity, dynamic.glow_intensity, t),
            transition_duration=lerp(current.dynamic.transition_duration, dynamic.transition_duration, t),
        )

        self._current = VisualParams(
            color=lerp_color(current.color, color, t),
            shape=new_shape,
            dynamic=new_dynamic,
        )
        return self._current

    def snap(self, color: ColorParams, shape: ShapeParams, dynamic: DynamicParams) -> VisualParams:
        """Jump straight to the targets."""
        self._current = VisualParams(color, shape, dynamic)
        self._active_level = float(shape.active_count)
        return self._current

    def reset(self) -> None:
        self._current = VisualParams(DEFAULT_COLOR, DEFAULT_SHAPE, DEFAULT_DYNAMIC)
        self._active_level = float(DEFAULT_SHAPE.active_count)
