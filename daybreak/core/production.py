"""Production session: the command surface over one project's timelines."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .exceptions import PersistenceError, TimelineLockedError, ValidationError
from .scene import Scene, TimelineType, sort_scene_numbers
from .timeline import TimelineDocument, TimelineStore
from ..config import Settings
from ..editor.consistency_checker import ConsistencyChecker
from ..editor.continuity_tracker import ContinuityForm, ContinuityTracker, DailyEntry, VisibleElement
from ..editor.day_mutator import DayMutator, DocumentMutationResult, MutationResult
from ..editor.detector import StoryDayDetector

logger = logging.getLogger(__name__)


class Persistence(ABC):
    """Receives every new snapshot after a successful command."""

    @abstractmethod
    def save_scenes(self, scenes: Tuple[Scene, ...]) -> None:
        ...

    @abstractmethod
    def save_timeline(self, document: TimelineDocument) -> None:
        ...

    @abstractmethod
    def save_elements(self, tracker: ContinuityTracker) -> None:
        ...

    @abstractmethod
    def save_project(self, production: "Production") -> None:
        ...


class Production:
    """One production's scenes, story-day timelines and continuity elements.

    The session is the single writer. Each command validates, computes a new
    snapshot, makes it current, then hands it to the persistence
    collaborator. A failed hand-off raises :class:`PersistenceError` but the
    new snapshot stays current.
    """

    def __init__(
        self,
        title: str = "",
        scenes: Iterable[Scene] = (),
        document: Optional[TimelineDocument] = None,
        tracker: Optional[ContinuityTracker] = None,
        locked: bool = False,
        persistence: Optional[Persistence] = None,
        settings: Optional[Settings] = None,
    ):
        self.title = title
        self.locked = locked
        self.persistence = persistence
        self.settings = settings or Settings()
        self._scenes: Tuple[Scene, ...] = tuple(scenes)
        self._document = document or TimelineDocument.initial()
        self._tracker = tracker or ContinuityTracker()
        self.detector = StoryDayDetector()
        self.mutator = DayMutator()

    @property
    def scenes(self) -> Tuple[Scene, ...]:
        return self._scenes

    @property
    def document(self) -> TimelineDocument:
        return self._document

    @property
    def tracker(self) -> ContinuityTracker:
        return self._tracker

    def store(self, timeline_type: TimelineType) -> TimelineStore:
        return self._document.store(timeline_type)

    # Analysis

    def analyze(self) -> MutationResult:
        """Re-detect the main timeline from scene time-of-day metadata.

        Scenes placed on flashback, dream or other timelines keep their
        assignment and are left out of detection.
        """
        if not self._scenes:
            raise ValidationError("No scenes loaded. Load a script first.")

        elsewhere = set()
        for timeline_type in TimelineType:
            if timeline_type is not TimelineType.MAIN:
                elsewhere.update(self.store(timeline_type).scene_numbers())

        candidates = [scene for scene in self._scenes if scene.scene_number not in elsewhere]
        detected, main_store = self.detector.detect(candidates)
        by_number = {scene.scene_number: scene for scene in detected}
        scenes = tuple(by_number.get(scene.scene_number, scene) for scene in self._scenes)

        self._commit(document=self._document.with_store(main_store), scenes=scenes)
        return MutationResult(main_store, scenes)

    def analyze_if_empty(self) -> bool:
        """Run analysis once for a project whose timelines hold no scenes."""
        if not self.settings.auto_analyze or not self._scenes or not self._document.is_empty():
            return False
        logger.info(f"Timeline for '{self.title}' is empty; analyzing {len(self._scenes)} scenes")
        self.analyze()
        return True

    # Day and scene commands

    def create_day(self, timeline_type: TimelineType = TimelineType.MAIN) -> MutationResult:
        self._require_unlocked()
        result = self.mutator.create_day(self.store(timeline_type), self._scenes)
        return self._apply(result)

    def remove_day(self, timeline_type: TimelineType, day_key: int) -> MutationResult:
        self._require_unlocked()
        result = self.mutator.remove_day(self.store(timeline_type), day_key, self._scenes)
        return self._apply(result)

    def move_scene(
        self,
        timeline_type: TimelineType,
        scene_number: str,
        source_day: int,
        target_day: int,
        insert_index: Optional[int] = None,
    ) -> MutationResult:
        self._require_unlocked()
        result = self.mutator.move_scene(
            self.store(timeline_type), scene_number, source_day, target_day, insert_index, self._scenes
        )
        return self._apply(result)

    def reorder_days(self, timeline_type: TimelineType, source_index: int, target_index: int) -> MutationResult:
        self._require_unlocked()
        result = self.mutator.reorder_days(self.store(timeline_type), source_index, target_index, self._scenes)
        return self._apply(result)

    def reorder_scene_in_day(
        self, timeline_type: TimelineType, day_key: int, source_index: int, target_index: int
    ) -> MutationResult:
        self._require_unlocked()
        result = self.mutator.reorder_scene_in_day(
            self.store(timeline_type), day_key, source_index, target_index, self._scenes
        )
        return self._apply(result)

    def change_scene_timeline(
        self, scene_number: str, from_type: TimelineType, to_type: TimelineType
    ) -> DocumentMutationResult:
        self._require_unlocked()
        result = self.mutator.change_scene_timeline(
            self._document, scene_number, from_type, to_type, self._scenes
        )
        if result.document is not self._document:
            self._commit(document=result.document, scenes=result.scenes)
        return result

    def lock(self) -> None:
        """Freeze day and scene layout."""
        self.locked = True
        self._commit(project=True)

    def unlock(self) -> None:
        self.locked = False
        self._commit(project=True)

    # Continuity elements

    def add_element(self, form: ContinuityForm) -> ContinuityTracker:
        tracker = self._tracker.create(form, self._scenes)
        self._commit(tracker=tracker)
        return tracker

    def edit_element(self, element_id: str, form: ContinuityForm) -> ContinuityTracker:
        tracker = self._tracker.edit(element_id, form, self._scenes)
        self._commit(tracker=tracker)
        return tracker

    def delete_element(self, element_id: str) -> ContinuityTracker:
        tracker = self._tracker.delete(element_id)
        if len(tracker) != len(self._tracker):
            self._commit(tracker=tracker)
        return tracker

    def set_element_day(self, element_id: str, day: int, entry: DailyEntry) -> ContinuityTracker:
        tracker = self._tracker.update_daily_entry(element_id, day, entry)
        self._commit(tracker=tracker)
        return tracker

    def element_form(self, element_id: str) -> ContinuityForm:
        return self._tracker.form_for(element_id, self._scenes)

    def visible_elements(self, timeline_type: TimelineType) -> List[VisibleElement]:
        return self._tracker.compute_visible(timeline_type, self.story_days(timeline_type))

    # Queries

    def story_days(self, timeline_type: TimelineType = TimelineType.MAIN) -> List[int]:
        return self.store(timeline_type).day_keys()

    def scenes_for_day(self, timeline_type: TimelineType, day_key: int) -> List[Scene]:
        """Scenes of one day, in the day's order."""
        by_number = {scene.scene_number: scene for scene in self._scenes}
        return [
            by_number[number]
            for number in self.store(timeline_type).scenes_for_day(day_key)
            if number in by_number
        ]

    def all_scenes_in_order(self, timeline_type: TimelineType = TimelineType.MAIN) -> List[Scene]:
        """Every scene on a timeline, in natural scene-number order."""
        by_number = {scene.scene_number: scene for scene in self._scenes}
        return [
            by_number[number]
            for number in self.store(timeline_type).scenes_in_order()
            if number in by_number
        ]

    def scene_range(self, timeline_type: TimelineType = TimelineType.MAIN) -> Tuple[Optional[str], Optional[str]]:
        return self.store(timeline_type).scene_range()

    def available_scenes(self, timeline_type: TimelineType = TimelineType.MAIN) -> List[Scene]:
        """Scenes a continuity element on ``timeline_type`` may start or end on."""
        by_number = {scene.scene_number: scene for scene in self._scenes}
        numbers = sort_scene_numbers(
            scene.scene_number for scene in self._scenes if scene.effective_timeline == timeline_type
        )
        return [by_number[number] for number in numbers]

    def validate(self) -> List[str]:
        """Return a list of consistency issues."""
        return ConsistencyChecker().check(self._document, self._scenes, self._tracker)

    def get_statistics(self) -> Dict[str, Any]:
        """Day and scene counts per timeline."""
        timelines = {}
        for timeline_type in TimelineType:
            store = self.store(timeline_type)
            timelines[timeline_type.value] = {
                "days": store.day_count,
                "scenes": store.scene_count(),
            }
        return {
            "title": self.title,
            "total_scenes": len(self._scenes),
            "unassigned_scenes": sum(1 for scene in self._scenes if scene.story_day is None),
            "continuity_elements": len(self._tracker),
            "locked": self.locked,
            "timelines": timelines,
        }

    # Internals

    def _require_unlocked(self) -> None:
        if self.locked:
            raise TimelineLockedError("Timeline is locked; unlock it before changing days or scenes")

    def _apply(self, result: MutationResult) -> MutationResult:
        if result.store is not self.store(result.store.timeline_type):
            self._commit(document=self._document.with_store(result.store), scenes=result.scenes)
        return result

    def _commit(
        self,
        document: Optional[TimelineDocument] = None,
        scenes: Optional[Tuple[Scene, ...]] = None,
        tracker: Optional[ContinuityTracker] = None,
        project: bool = False,
    ) -> None:
        """Make a snapshot current, then hand it to persistence."""
        if document is not None:
            self._document = document
        if scenes is not None:
            self._scenes = tuple(scenes)
        if tracker is not None:
            self._tracker = tracker

        if self.persistence is None:
            return

        try:
            if document is not None:
                self.persistence.save_timeline(self._document)
            if scenes is not None:
                self.persistence.save_scenes(self._scenes)
            if tracker is not None:
                self.persistence.save_elements(self._tracker)
            if project:
                self.persistence.save_project(self)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Saving '{self.title}' failed: {e}")
            raise PersistenceError(f"Changes applied but not saved: {e}") from e
