"""Continuity tracking for attributes that span story days."""

import logging
import uuid
import warnings
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.exceptions import (
    InvalidRangeError,
    MissingDayAssignmentError,
    NotFoundError,
    StaleReferenceWarning,
    ValidationError,
)
from ..core.scene import Scene, TimelineType, sort_scene_numbers
from ..core.timeline import day_label, parse_day_label

logger = logging.getLogger(__name__)


class ElementType(Enum):
    """Kind of attribute being tracked."""
    INJURY = "injury"
    MAKEUP = "makeup"
    COSTUME = "costume"
    PROPS = "props"
    HAIR = "hair"
    AGING = "aging"
    WEATHER_EFFECTS = "weather_effects"
    VEHICLE_DAMAGE = "vehicle_damage"
    CUSTOM = "custom"


@dataclass(frozen=True)
class DailyEntry:
    """Per-day status of a continuity element."""
    status: str = ""
    notes: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"status": self.status, "notes": self.notes}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DailyEntry":
        data = data or {}
        return cls(status=data.get("status", "") or "", notes=data.get("notes", "") or "")


@dataclass(frozen=True)
class ContinuityElement:
    """An attribute that must stay consistent from ``start_day`` to ``end_day``."""

    id: str
    name: str
    type: ElementType
    timeline: TimelineType
    start_day: int
    end_day: int
    start_scene: str = ""
    end_scene: str = ""
    character_id: Optional[str] = None
    daily_tracking: Dict[int, DailyEntry] = field(default_factory=dict, hash=False)

    def day_range(self) -> range:
        return range(self.start_day, self.end_day + 1)

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "timeline": self.timeline.value,
            "startDay": self.start_day,
            "endDay": self.end_day,
            "startScene": self.start_scene,
            "endScene": self.end_scene,
            "characterId": self.character_id or "",
            "dailyTracking": {
                day_label(day): entry.to_dict() for day, entry in sorted(self.daily_tracking.items())
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContinuityElement":
        """Create element from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=ElementType(data.get("type", "custom")),
            timeline=TimelineType(data.get("timeline", "main")),
            start_day=int(data["startDay"]),
            end_day=int(data["endDay"]),
            start_scene=str(data.get("startScene", "") or ""),
            end_scene=str(data.get("endScene", "") or ""),
            character_id=data.get("characterId") or None,
            daily_tracking={
                parse_day_label(label): DailyEntry.from_dict(entry)
                for label, entry in (data.get("dailyTracking") or {}).items()
            },
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.type.value}, {self.timeline.value} days {self.start_day}-{self.end_day})"


@dataclass(frozen=True)
class ContinuityForm:
    """User input for creating or editing an element."""
    name: str = ""
    type: ElementType = ElementType.INJURY
    timeline: TimelineType = TimelineType.MAIN
    start_scene: str = ""
    end_scene: str = ""
    character_id: Optional[str] = None
    daily_notes: Dict[int, DailyEntry] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class VisibleElement:
    """An element clipped to the days currently on screen."""
    element: ContinuityElement
    display_start_day: int
    display_end_day: int


def new_element_id() -> str:
    return f"element_{uuid.uuid4().hex[:12]}"


class ContinuityTracker:
    """Tracks continuity elements.

    The tracker is a value: ``create``, ``edit`` and ``delete`` return a new
    tracker. Day ranges are stored as absolute keys and are never rewritten
    when story days are renumbered; :meth:`compute_visible` clamps them to
    the days that exist and warns about the ones that went stale.
    """

    def __init__(self, elements: Iterable[ContinuityElement] = ()):
        self._elements: Tuple[ContinuityElement, ...] = tuple(elements)

    @property
    def elements(self) -> Tuple[ContinuityElement, ...]:
        return self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self):
        return iter(self._elements)

    def get(self, element_id: str) -> ContinuityElement:
        for element in self._elements:
            if element.id == element_id:
                return element
        raise NotFoundError(f"Continuity element {element_id} not found")

    def elements_for_timeline(self, timeline_type: TimelineType) -> List[ContinuityElement]:
        return [element for element in self._elements if element.timeline == timeline_type]

    def create(self, form: ContinuityForm, scenes: Sequence[Scene]) -> "ContinuityTracker":
        """Add an element whose day range comes from the chosen scenes."""
        start_day, end_day = self._resolve_days(form, scenes)
        tracking = {
            day: form.daily_notes.get(day, DailyEntry())
            for day in range(start_day, end_day + 1)
        }
        element = ContinuityElement(
            id=new_element_id(),
            name=form.name.strip(),
            type=form.type,
            timeline=form.timeline,
            start_day=start_day,
            end_day=end_day,
            start_scene=str(form.start_scene),
            end_scene=str(form.end_scene),
            character_id=form.character_id or None,
            daily_tracking=tracking,
        )
        logger.info(f"Added continuity element {element.id}: {element}")
        return ContinuityTracker(self._elements + (element,))

    def edit(self, element_id: str, form: ContinuityForm, scenes: Sequence[Scene]) -> "ContinuityTracker":
        """Replace an element, keeping per-day entries for days still in range."""
        existing = self.get(element_id)
        start_day, end_day = self._resolve_days(form, scenes)
        tracking = {}
        for day in range(start_day, end_day + 1):
            if day in form.daily_notes:
                tracking[day] = form.daily_notes[day]
            else:
                tracking[day] = existing.daily_tracking.get(day, DailyEntry())

        element = replace(
            existing,
            name=form.name.strip(),
            type=form.type,
            timeline=form.timeline,
            start_day=start_day,
            end_day=end_day,
            start_scene=str(form.start_scene),
            end_scene=str(form.end_scene),
            character_id=form.character_id or None,
            daily_tracking=tracking,
        )
        logger.info(f"Updated continuity element {element_id}: {element}")
        return ContinuityTracker(element if e.id == element_id else e for e in self._elements)

    def delete(self, element_id: str) -> "ContinuityTracker":
        """Remove an element; unknown ids are ignored."""
        remaining = tuple(e for e in self._elements if e.id != element_id)
        if len(remaining) != len(self._elements):
            logger.info(f"Deleted continuity element {element_id}")
        return ContinuityTracker(remaining)

    def update_daily_entry(self, element_id: str, day: int, entry: DailyEntry) -> "ContinuityTracker":
        """Set the status and notes for one day of an element."""
        element = self.get(element_id)
        if day not in element.daily_tracking:
            raise InvalidRangeError(
                f"Day {day} is outside {element.name} (days {element.start_day}-{element.end_day})"
            )
        tracking = dict(element.daily_tracking)
        tracking[day] = entry
        updated = replace(element, daily_tracking=tracking)
        return ContinuityTracker(updated if e.id == element_id else e for e in self._elements)

    def find_stale(self, timeline_type: TimelineType, day_keys: Iterable[int]) -> List[StaleReferenceWarning]:
        """Elements whose start or end day is not one of ``day_keys``."""
        keys = set(day_keys)
        return [
            StaleReferenceWarning(element.id, element.start_day, element.end_day)
            for element in self.elements_for_timeline(timeline_type)
            if element.start_day not in keys or element.end_day not in keys
        ]

    def compute_visible(self, timeline_type: TimelineType, current_day_keys: Iterable[int]) -> List[VisibleElement]:
        """Clamp each element of a timeline to the current day range."""
        keys = list(current_day_keys)
        if not keys:
            return []
        low, high = min(keys), max(keys)

        for stale in self.find_stale(timeline_type, keys):
            warnings.warn(stale, stacklevel=2)

        visible = []
        for element in self.elements_for_timeline(timeline_type):
            start = max(element.start_day, low)
            end = min(element.end_day, high)
            if start <= end:
                visible.append(VisibleElement(element, start, end))
        return visible

    def form_for(self, element_id: str, scenes: Sequence[Scene]) -> ContinuityForm:
        """Prefill an edit form from a stored element.

        Older records may lack scene snapshots; they get the first scene of
        the start day and the last scene of the end day instead.
        """
        element = self.get(element_id)
        start_scene = element.start_scene
        end_scene = element.end_scene

        if not start_scene or not end_scene:
            def on_day(day: int) -> List[str]:
                return sort_scene_numbers(
                    s.scene_number for s in scenes
                    if s.story_day == day and s.effective_timeline == element.timeline
                )

            start_candidates = on_day(element.start_day)
            end_candidates = on_day(element.end_day)
            start_scene = start_scene or (start_candidates[0] if start_candidates else "")
            end_scene = end_scene or (end_candidates[-1] if end_candidates else "")

        return ContinuityForm(
            name=element.name,
            type=element.type,
            timeline=element.timeline,
            start_scene=start_scene,
            end_scene=end_scene,
            character_id=element.character_id,
            daily_notes=dict(element.daily_tracking),
        )

    def _resolve_days(self, form: ContinuityForm, scenes: Sequence[Scene]) -> Tuple[int, int]:
        """Validate a form and look up the story days of its scenes."""
        if not form.name or not form.name.strip():
            raise ValidationError("Continuity element needs a name")
        if not form.start_scene or not form.end_scene:
            raise ValidationError("Continuity element needs a start scene and an end scene")

        by_number = {scene.scene_number: scene for scene in scenes}
        days = []
        for number in (str(form.start_scene), str(form.end_scene)):
            scene = by_number.get(number)
            if scene is None:
                raise NotFoundError(f"Scene {number} not found")
            if scene.effective_timeline != form.timeline:
                raise ValidationError(
                    f"Scene {number} is on the {scene.effective_timeline.value} timeline, "
                    f"not {form.timeline.value}"
                )
            if scene.story_day is None:
                raise MissingDayAssignmentError(
                    f"Scene {number} has no story day assignment; run analysis first"
                )
            days.append(scene.story_day)

        start_day, end_day = days
        if start_day > end_day:
            raise InvalidRangeError(
                f"Start day {start_day} (scene {form.start_scene}) comes after "
                f"end day {end_day} (scene {form.end_scene})"
            )
        return start_day, end_day

    def to_list(self) -> List[Dict[str, Any]]:
        return [element.to_dict() for element in self._elements]

    @classmethod
    def from_list(cls, data: Optional[Iterable[Dict[str, Any]]]) -> "ContinuityTracker":
        return cls(ContinuityElement.from_dict(item) for item in (data or []))
