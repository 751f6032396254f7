"""Story-day partition of scenes, one store per timeline type."""

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .exceptions import NotFoundError, ValidationError
from .scene import Scene, TimelineType, sort_scene_numbers

_DAY_KEY = re.compile(r"^day(\d+)$")


def day_label(key: int) -> str:
    """Document key for a story day: ``3 -> "day3"``."""
    return f"day{key}"


def parse_day_label(label: Any) -> int:
    """Inverse of :func:`day_label`; bare integers are accepted too."""
    if isinstance(label, int):
        return label
    text = str(label).strip()
    match = _DAY_KEY.match(text)
    if match:
        return int(match.group(1))
    if text.isdigit():
        return int(text)
    raise ValidationError(f"Invalid story day key: {label!r}")


@dataclass(frozen=True)
class StoryDay:
    """One in-story day: an ordered run of scenes."""

    key: int
    scenes: Tuple[str, ...] = ()
    detected_from_scenes: Tuple[str, ...] = ()
    manually_created: bool = False
    reordered: bool = False
    elements: Tuple[Any, ...] = ()

    def __contains__(self, scene_number: str) -> bool:
        return str(scene_number) in self.scenes

    @property
    def is_empty(self) -> bool:
        return not self.scenes

    def scene_span(self) -> Optional[Tuple[str, str]]:
        """First and last scene in natural order, or None for an empty day."""
        if not self.scenes:
            return None
        ordered = sort_scene_numbers(self.scenes)
        return ordered[0], ordered[-1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenes": list(self.scenes),
            "elements": list(self.elements),
            "detectedFromScenes": list(self.detected_from_scenes),
            "manuallyCreated": self.manually_created,
            "reordered": self.reordered,
        }

    @classmethod
    def from_dict(cls, key: int, data: Dict[str, Any]) -> "StoryDay":
        return cls(
            key=key,
            scenes=tuple(str(s) for s in data.get("scenes", [])),
            detected_from_scenes=tuple(str(s) for s in data.get("detectedFromScenes", [])),
            manually_created=bool(data.get("manuallyCreated", False)),
            reordered=bool(data.get("reordered", False)),
            elements=tuple(data.get("elements", [])),
        )


@dataclass(frozen=True)
class TimelineStore:
    """Ordered story days for a single timeline type.

    Stores are values: every mutation in :mod:`daybreak.editor.day_mutator`
    builds a new store and leaves this one untouched.
    """

    timeline_type: TimelineType
    days: Tuple[StoryDay, ...] = ()

    @property
    def day_count(self) -> int:
        return len(self.days)

    def day_keys(self) -> List[int]:
        """Current story-day keys in order."""
        return [day.key for day in self.days]

    def has_day(self, key: int) -> bool:
        return any(day.key == key for day in self.days)

    def day_index(self, key: int) -> int:
        """Position of a day in the store."""
        for i, day in enumerate(self.days):
            if day.key == key:
                return i
        raise NotFoundError(f"Day {key} does not exist on the {self.timeline_type.value} timeline")

    def get_day(self, key: int) -> StoryDay:
        """Get a story day by key."""
        return self.days[self.day_index(key)]

    def scenes_for_day(self, key: int) -> List[str]:
        """Scene numbers of a day in their stored order."""
        return list(self.get_day(key).scenes)

    def find_scene(self, scene_number: str) -> Optional[int]:
        """Key of the day holding a scene, or None."""
        scene_number = str(scene_number)
        for day in self.days:
            if scene_number in day.scenes:
                return day.key
        return None

    def scene_numbers(self) -> List[str]:
        """All scene numbers, day by day."""
        return [number for day in self.days for number in day.scenes]

    def scene_count(self) -> int:
        return sum(len(day.scenes) for day in self.days)

    def scenes_in_order(self) -> List[str]:
        """All scene numbers of the timeline in natural order."""
        return sort_scene_numbers(self.scene_numbers())

    def scene_range(self) -> Tuple[Optional[str], Optional[str]]:
        """First and last scene of the timeline in natural order."""
        ordered = self.scenes_in_order()
        if not ordered:
            return None, None
        return ordered[0], ordered[-1]

    @property
    def next_key(self) -> int:
        """Key for a day appended after the last one."""
        return max(self.day_keys(), default=0) + 1

    def is_contiguous(self) -> bool:
        return self.day_keys() == list(range(1, len(self.days) + 1))

    def with_days(self, days: Iterable[StoryDay]) -> "TimelineStore":
        return replace(self, days=tuple(days))

    def renumbered(self, **day_changes) -> "TimelineStore":
        """Regenerate keys 1..N in the current order."""
        return self.with_days(
            replace(day, key=i, **day_changes) for i, day in enumerate(self.days, 1)
        )

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {day_label(day.key): day.to_dict() for day in self.days}

    @classmethod
    def from_dict(cls, timeline_type: TimelineType, data: Optional[Dict[str, Any]]) -> "TimelineStore":
        """Create a store from the ``"dayN" -> day`` document mapping."""
        data = data or {}
        days = [StoryDay.from_dict(parse_day_label(label), day) for label, day in data.items()]
        days.sort(key=lambda day: day.key)
        return cls(timeline_type=timeline_type, days=tuple(days))


@dataclass(frozen=True)
class TimelineDocument:
    """The four timeline stores of a production."""

    stores: Dict[TimelineType, TimelineStore] = field(default_factory=dict)

    def __post_init__(self):
        stores = dict(self.stores)
        for timeline_type in TimelineType:
            stores.setdefault(timeline_type, TimelineStore(timeline_type))
        object.__setattr__(self, "stores", stores)

    @classmethod
    def initial(cls) -> "TimelineDocument":
        """A new project: an empty first day on the main timeline."""
        main = TimelineStore(TimelineType.MAIN, (StoryDay(key=1),))
        return cls({TimelineType.MAIN: main})

    def store(self, timeline_type: TimelineType) -> TimelineStore:
        return self.stores[timeline_type]

    def with_store(self, store: TimelineStore) -> "TimelineDocument":
        stores = dict(self.stores)
        stores[store.timeline_type] = store
        return TimelineDocument(stores)

    def locate(self, scene_number: str) -> Optional[Tuple[TimelineType, int]]:
        """The (timeline, day) pair holding a scene, or None."""
        for timeline_type in TimelineType:
            key = self.stores[timeline_type].find_scene(scene_number)
            if key is not None:
                return timeline_type, key
        return None

    def is_empty(self) -> bool:
        """True when no timeline holds any scene."""
        return all(store.scene_count() == 0 for store in self.stores.values())

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {t.value: self.stores[t].to_dict() for t in TimelineType}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TimelineDocument":
        data = data or {}
        stores = {}
        for name, days in data.items():
            try:
                timeline_type = TimelineType(name)
            except ValueError:
                raise ValidationError(f"Unknown timeline type in document: {name!r}")
            stores[timeline_type] = TimelineStore.from_dict(timeline_type, days)
        return cls(stores)


def assign_back_references(scenes: Iterable[Scene], store: TimelineStore) -> Tuple[Scene, ...]:
    """Rewrite ``story_day`` and ``timeline_type`` for every scene in a store.

    Scenes the store does not hold are returned unchanged; scene numbers in
    the store with no matching scene are ignored.
    """
    placement = {number: day.key for day in store.days for number in day.scenes}
    updated = []
    for scene in scenes:
        key = placement.get(scene.scene_number)
        if key is not None and (scene.story_day != key or scene.timeline_type != store.timeline_type):
            scene = scene.assign(store.timeline_type, key)
        updated.append(scene)
    return tuple(updated)


__all__ = [
    "StoryDay",
    "TimelineStore",
    "TimelineDocument",
    "assign_back_references",
    "day_label",
    "parse_day_label",
]
