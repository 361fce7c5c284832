from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.validators import LEVEL_MAX, LEVEL_MIN, is_in_range, to_number


class Emotion(str, Enum):
    JOY = "joy"
    TRUST = "trust"
    FEAR = "fear"
    SURPRISE = "surprise"
    SAD = "sad"
    DISGUST = "disgust"
    ANGRY = "angry"
    ANXIETY = "anxiety"


VALID_EMOTIONS: tuple[str, ...] = tuple(item.value for item in Emotion)


@dataclass(frozen=True)
class ComponentCheck:
    valid: bool
    error: str | None = None


@dataclass
class EmotionStats:
    dominant: str | None = None
    average: float = 0
    breakdown: dict[str, int | float] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "dominant": self.dominant,
            "average": self.average,
            "breakdown": dict(self.breakdown),
        }


def is_valid_emotion(value: Any) -> bool:
    return isinstance(value, str) and value.lower() in VALID_EMOTIONS


def is_valid_intensity(value: Any) -> bool:
    return is_in_range(value, LEVEL_MIN, LEVEL_MAX)


def validate_mood_components(components: Any) -> ComponentCheck:
    """Check a raw component list, stopping at the first violation."""

    if not isinstance(components, list):
        return ComponentCheck(False, "Components must be an array")

    seen: set[str] = set()
    for component in components:
        if (
            not isinstance(component, Mapping)
            or "emotion" not in component
            or "intensity" not in component
        ):
            return ComponentCheck(False, "Each component must have emotion and intensity")

        emotion = component["emotion"]
        if not is_valid_emotion(emotion):
            return ComponentCheck(False, f"Invalid emotion: {emotion}")

        if not is_valid_intensity(component["intensity"]):
            return ComponentCheck(False, f"Invalid intensity for {emotion}: must be 1-10")

        emotion_lower = emotion.lower()
        if emotion_lower in seen:
            return ComponentCheck(False, f"Duplicate emotion: {emotion}")
        seen.add(emotion_lower)

    return ComponentCheck(True)


def _component_value(component: Any, key: str) -> Any:
    if isinstance(component, Mapping):
        return component.get(key)
    return getattr(component, key, None)


def calculate_emotion_stats(components: Iterable[Any] | None) -> EmotionStats:
    """Summarise components into dominant emotion, mean intensity and breakdown.

    Ties on the highest intensity keep the first component seen.
    """

    stats = EmotionStats()
    items = list(components or [])
    if not items:
        return stats

    max_intensity = 0.0
    total = 0.0
    for component in items:
        emotion = _component_value(component, "emotion")
        intensity = to_number(_component_value(component, "intensity")) or 0.0
        total += intensity
        stats.breakdown[emotion] = _normalize(intensity)
        if intensity > max_intensity:
            max_intensity = intensity
            stats.dominant = emotion

    stats.average = total / len(items)
    return stats


def _normalize(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


__all__ = [
    "VALID_EMOTIONS",
    "ComponentCheck",
    "Emotion",
    "EmotionStats",
    "calculate_emotion_stats",
    "is_valid_emotion",
    "is_valid_intensity",
    "validate_mood_components",
]
