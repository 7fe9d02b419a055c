"""Adjustment parameters driving the editor's render pipeline."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Mapping

# The order matches the editor sidebar so the same tuple can be reused when iterating over
# parameters in the UI, when logging a render and when serialising a session.
ADJUSTMENT_KEYS = (
    "brightness",
    "contrast",
    "saturation",
    "sharpness",
    "rotation",
    "zoom",
)

ADJUSTMENT_RANGES: Mapping[str, tuple[float, float]] = {
    "brightness": (0.0, 200.0),
    "contrast": (0.0, 200.0),
    "saturation": (0.0, 200.0),
    "sharpness": (0.0, 100.0),
    "rotation": (0.0, 270.0),
    "zoom": (0.5, 3.0),
}
"""Inclusive domain of every parameter.  Rotation wraps instead of clamping."""

ADJUSTMENT_DEFAULTS: Mapping[str, float] = {
    "brightness": 100.0,
    "contrast": 100.0,
    "saturation": 100.0,
    "sharpness": 0.0,
    "rotation": 0.0,
    "zoom": 1.0,
}

ROTATION_STEP = 90
ZOOM_STEP = 0.1


def _clamp(value: float, minimum: float, maximum: float) -> float:
    """Return *value* limited to the inclusive ``[minimum, maximum]`` range."""

    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def normalise_rotation(value: float) -> float:
    """Wrap *value* into ``[0, 360)`` and snap it to the nearest quarter turn."""

    wrapped = math.fmod(value, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    quarter_turns = math.floor(wrapped / ROTATION_STEP + 0.5)
    return float((quarter_turns * ROTATION_STEP) % 360)


def coerce_parameter(name: str, value: float) -> float:
    """Return *value* brought into the domain of parameter *name*.

    Out-of-range values are clamped to the nearest boundary, rotation wraps
    modulo 360.  ``NaN`` carries no direction so it falls back to the default.
    Unknown names raise :class:`KeyError` and non-numeric values raise
    :class:`TypeError`; both indicate a programming error rather than user input.
    """

    if name not in ADJUSTMENT_RANGES:
        raise KeyError(f"Unknown adjustment: {name!r}")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Adjustment {name!r} expects a number, got {type(value).__name__}")

    numeric = float(value)
    if math.isnan(numeric):
        return ADJUSTMENT_DEFAULTS[name]
    if name == "rotation":
        if math.isinf(numeric):
            return ADJUSTMENT_DEFAULTS[name]
        return normalise_rotation(numeric)
    minimum, maximum = ADJUSTMENT_RANGES[name]
    return _clamp(numeric, minimum, maximum)


@dataclass
class AdjustmentState:
    """Mutable parameter set owned by the engine.

    Every mutation goes through :meth:`set` (or the step helpers built on top of
    it) so the values always stay inside their domains.
    """

    brightness: float = ADJUSTMENT_DEFAULTS["brightness"]
    contrast: float = ADJUSTMENT_DEFAULTS["contrast"]
    saturation: float = ADJUSTMENT_DEFAULTS["saturation"]
    sharpness: float = ADJUSTMENT_DEFAULTS["sharpness"]
    rotation: float = ADJUSTMENT_DEFAULTS["rotation"]
    zoom: float = ADJUSTMENT_DEFAULTS["zoom"]

    def __post_init__(self) -> None:
        for field in fields(self):
            setattr(self, field.name, coerce_parameter(field.name, getattr(self, field.name)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, float] | None) -> AdjustmentState:
        """Build a state from *values*, ignoring keys that are not adjustments."""

        state = cls()
        for key, value in (values or {}).items():
            if key in ADJUSTMENT_RANGES:
                state.set(key, value)
        return state

    def set(self, name: str, value: float) -> float:
        """Store *value* for *name* after clamping and return the stored value."""

        coerced = coerce_parameter(name, value)
        setattr(self, name, coerced)
        return coerced

    def get(self, name: str) -> float:
        if name not in ADJUSTMENT_RANGES:
            raise KeyError(f"Unknown adjustment: {name!r}")
        return float(getattr(self, name))

    def rotate_step(self) -> float:
        return self.set("rotation", self.rotation + ROTATION_STEP)

    def zoom_in(self) -> float:
        return self.set("zoom", round(self.zoom + ZOOM_STEP, 6))

    def zoom_out(self) -> float:
        return self.set("zoom", round(self.zoom - ZOOM_STEP, 6))

    def reset(self) -> None:
        for key, value in ADJUSTMENT_DEFAULTS.items():
            setattr(self, key, value)

    def color_is_identity(self) -> bool:
        """Return ``True`` when brightness, contrast and saturation are neutral."""

        return (
            self.brightness == ADJUSTMENT_DEFAULTS["brightness"]
            and self.contrast == ADJUSTMENT_DEFAULTS["contrast"]
            and self.saturation == ADJUSTMENT_DEFAULTS["saturation"]
        )

    def geometry_is_identity(self) -> bool:
        return self.rotation == 0.0 and self.zoom == 1.0

    def is_identity(self) -> bool:
        return self.color_is_identity() and self.geometry_is_identity() and self.sharpness == 0.0

    def as_dict(self) -> dict[str, float]:
        return {key: float(value) for key, value in asdict(self).items()}

    def copy(self) -> AdjustmentState:
        return AdjustmentState(**self.as_dict())


__all__ = [
    "ADJUSTMENT_DEFAULTS",
    "ADJUSTMENT_KEYS",
    "ADJUSTMENT_RANGES",
    "AdjustmentState",
    "ROTATION_STEP",
    "ZOOM_STEP",
    "coerce_parameter",
    "normalise_rotation",
]
