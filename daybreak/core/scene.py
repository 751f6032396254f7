"""Scene model and scene-number ordering for Daybreak."""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class TimeOfDay(Enum):
    """Time of day as written in a scene heading."""
    DAWN = "DAWN"
    DAY = "DAY"
    DUSK = "DUSK"
    NIGHT = "NIGHT"
    UNKNOWN = ""

    @property
    def is_definitive(self) -> bool:
        return self is not TimeOfDay.UNKNOWN

    @property
    def is_daytime(self) -> bool:
        return self in (TimeOfDay.DAWN, TimeOfDay.DAY)

    @property
    def is_nighttime(self) -> bool:
        return self in (TimeOfDay.DUSK, TimeOfDay.NIGHT)

    @classmethod
    def parse(cls, value: Optional[str]) -> "TimeOfDay":
        """Map a raw heading value to a member; anything unrecognised is UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


class TimelineType(Enum):
    """The independent narrative continuities of a production."""
    MAIN = "main"
    FLASHBACK = "flashback"
    DREAM = "dream"
    OTHER = "other"


class Confidence(Enum):
    """How directly a story-day assignment came from scene metadata."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_LEADING_DIGITS = re.compile(r"^\d+")


def scene_sort_key(scene_number: str) -> Tuple[int, str]:
    """Natural ordering key: leading number first, then the full string.

    >>> sorted(["18", "17B", "17", "17A"], key=scene_sort_key)
    ['17', '17A', '17B', '18']
    """
    text = str(scene_number).strip()
    match = _LEADING_DIGITS.match(text)
    number = int(match.group()) if match else 0
    return number, text


def sort_scene_numbers(scene_numbers: Iterable[str]) -> List[str]:
    """Return scene numbers in natural order."""
    return sorted((str(s) for s in scene_numbers), key=scene_sort_key)


@dataclass(frozen=True)
class Scene:
    """A scene from the shooting script.

    The script collaborator owns scenes; Daybreak only reads ``time_of_day``
    and writes the story-day back-references. Any other fields the script
    stores travel untouched in ``extra``.
    """

    scene_number: str
    time_of_day: TimeOfDay = TimeOfDay.UNKNOWN
    story_day: Optional[int] = None
    timeline_type: Optional[TimelineType] = None
    detection_confidence: Optional[Confidence] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "scene_number", str(self.scene_number))

    @property
    def effective_timeline(self) -> TimelineType:
        """Timeline the scene belongs to; unassigned scenes count as main."""
        return self.timeline_type or TimelineType.MAIN

    def assign(self, timeline_type: TimelineType, story_day: int) -> "Scene":
        """Return a copy pointing at a new (timeline, day) pair."""
        return replace(self, timeline_type=timeline_type, story_day=story_day)

    def to_dict(self) -> Dict[str, Any]:
        """Convert scene to the script collaborator's wire format."""
        data = dict(self.extra)
        # metadata belongs to the script and is written back as it was read
        if "metadata" not in data:
            data["metadata"] = {"timeOfDay": self.time_of_day.value}
        data["sceneNumber"] = self.scene_number
        data["storyDay"] = self.story_day
        data["timelineType"] = self.timeline_type.value if self.timeline_type else None
        data["detectionConfidence"] = (
            self.detection_confidence.value if self.detection_confidence else None
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scene":
        """Create scene from the script collaborator's wire format."""
        metadata = data.get("metadata") or {}
        story_day = data.get("storyDay")
        timeline = data.get("timelineType")
        confidence = data.get("detectionConfidence")

        extra = {
            key: value for key, value in data.items()
            if key not in ("sceneNumber", "storyDay", "timelineType", "detectionConfidence")
        }

        return cls(
            scene_number=str(data["sceneNumber"]),
            time_of_day=TimeOfDay.parse(metadata.get("timeOfDay")),
            story_day=int(story_day) if story_day not in (None, "") else None,
            timeline_type=TimelineType(timeline) if timeline else None,
            detection_confidence=Confidence(confidence) if confidence else None,
            extra=extra,
        )

    def __str__(self) -> str:
        day = self.story_day if self.story_day is not None else "?"
        return f"Scene {self.scene_number} ({self.effective_timeline.value}, day {day})"
