"""Day and scene mutations on story-day timelines.

Every operation validates its arguments first, then builds a new store (or
document) and a new scene tuple. Nothing passed in is modified, so a failed
command leaves the caller's snapshot exactly as it was.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from ..core.exceptions import NotFoundError
from ..core.scene import Scene, TimelineType, scene_sort_key
from ..core.timeline import StoryDay, TimelineDocument, TimelineStore, assign_back_references

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a single-timeline command."""
    store: TimelineStore
    scenes: Tuple[Scene, ...]


@dataclass(frozen=True)
class DocumentMutationResult:
    """Outcome of a command that touches more than one timeline."""
    document: TimelineDocument
    scenes: Tuple[Scene, ...]


def _check_index(index: int, length: int, what: str) -> None:
    if not 0 <= index < length:
        raise NotFoundError(f"No {what} at position {index} (have {length})")


class DayMutator:
    """Creates, removes and reorders story days and moves scenes between them."""

    def create_day(self, store: TimelineStore, scenes: Sequence[Scene] = ()) -> MutationResult:
        """Append an empty, manually created day N+1."""
        day = StoryDay(key=store.next_key, manually_created=True)
        logger.info(f"Created day {day.key} on the {store.timeline_type.value} timeline")
        return MutationResult(store.with_days(store.days + (day,)), tuple(scenes))

    def remove_day(self, store: TimelineStore, day_key: int, scenes: Sequence[Scene] = ()) -> MutationResult:
        """Remove a day, merging its scenes into a neighbour, then renumber.

        Orphaned scenes go to the end of the previous day, or the next day
        when the first day is removed. Removing the only day leaves a single
        day 1 that still holds its scenes.
        """
        index = store.day_index(day_key)
        removed = store.days[index]
        remaining = list(store.days[:index] + store.days[index + 1:])

        if not remaining:
            remaining = [StoryDay(
                key=1,
                scenes=removed.scenes,
                detected_from_scenes=removed.detected_from_scenes,
            )]
        else:
            target = index - 1 if index > 0 else 0
            merged = remaining[target]
            remaining[target] = replace(
                merged,
                scenes=merged.scenes + removed.scenes,
                detected_from_scenes=merged.detected_from_scenes + removed.detected_from_scenes,
            )

        new_store = store.with_days(remaining).renumbered()
        if removed.scenes:
            logger.info(
                f"Removed day {day_key} from the {store.timeline_type.value} timeline; "
                f"moved scenes {', '.join(removed.scenes)}"
            )
        else:
            logger.info(f"Removed empty day {day_key} from the {store.timeline_type.value} timeline")
        return MutationResult(new_store, assign_back_references(scenes, new_store))

    def move_scene(
        self,
        store: TimelineStore,
        scene_number: str,
        source_day: int,
        target_day: int,
        insert_index: Optional[int] = None,
        scenes: Sequence[Scene] = (),
    ) -> MutationResult:
        """Move a scene between days and keep the target day in natural order.

        A missing target day is created only when it is the next key (N+1);
        numbering is otherwise untouched.
        """
        scene_number = str(scene_number)
        source = store.get_day(source_day)
        if scene_number not in source.scenes:
            raise NotFoundError(f"Scene {scene_number} is not on day {source_day}")

        creates_target = not store.has_day(target_day)
        if creates_target and target_day != store.next_key:
            raise NotFoundError(
                f"Day {target_day} does not exist on the {store.timeline_type.value} timeline"
            )

        days = list(store.days)
        source_index = store.day_index(source_day)
        days[source_index] = replace(
            source,
            scenes=tuple(s for s in source.scenes if s != scene_number),
            detected_from_scenes=tuple(s for s in source.detected_from_scenes if s != scene_number),
        )

        if creates_target:
            days.append(StoryDay(key=target_day, scenes=(scene_number,), manually_created=True))
        else:
            target_index = store.day_index(target_day)
            target = days[target_index]
            target_scenes: List[str] = list(target.scenes)
            if insert_index is not None and 0 <= insert_index < len(target_scenes):
                target_scenes.insert(insert_index, scene_number)
            else:
                target_scenes.append(scene_number)
            target_scenes.sort(key=scene_sort_key)
            days[target_index] = replace(target, scenes=tuple(target_scenes))

        new_store = store.with_days(days)
        updated = tuple(
            scene.assign(store.timeline_type, target_day) if scene.scene_number == scene_number else scene
            for scene in scenes
        )
        logger.info(f"Scene {scene_number} moved from day {source_day} to day {target_day}")
        return MutationResult(new_store, updated)

    def reorder_days(
        self,
        store: TimelineStore,
        source_index: int,
        target_index: int,
        scenes: Sequence[Scene] = (),
    ) -> MutationResult:
        """Move a day by position and regenerate keys 1..N."""
        _check_index(source_index, store.day_count, "day")
        _check_index(target_index, store.day_count, "day")
        if source_index == target_index:
            return MutationResult(store, tuple(scenes))

        days = list(store.days)
        moved = days.pop(source_index)
        days.insert(target_index, moved)

        new_store = store.with_days(days).renumbered(reordered=True)
        logger.info(f"Days reordered: moved day {moved.key} from position {source_index} to {target_index}")
        return MutationResult(new_store, assign_back_references(scenes, new_store))

    def reorder_scene_in_day(
        self,
        store: TimelineStore,
        day_key: int,
        source_index: int,
        target_index: int,
        scenes: Sequence[Scene] = (),
    ) -> MutationResult:
        """Reorder scenes within one day; back-references do not change."""
        index = store.day_index(day_key)
        day = store.days[index]
        _check_index(source_index, len(day.scenes), f"scene on day {day_key}")
        _check_index(target_index, len(day.scenes), f"scene on day {day_key}")
        if source_index == target_index:
            return MutationResult(store, tuple(scenes))

        order = list(day.scenes)
        moved = order.pop(source_index)
        order.insert(target_index, moved)

        days = list(store.days)
        days[index] = replace(day, scenes=tuple(order))
        logger.debug(f"Scene {moved} reordered in day {day_key} from {source_index} to {target_index}")
        return MutationResult(store.with_days(days), tuple(scenes))

    def change_scene_timeline(
        self,
        document: TimelineDocument,
        scene_number: str,
        from_type: TimelineType,
        to_type: TimelineType,
        scenes: Sequence[Scene] = (),
    ) -> DocumentMutationResult:
        """Move a scene to another timeline at its chronological position.

        The destination day is the first one whose natural scene range
        contains the scene; failing that, day 1 (created if needed). The
        source day stays in place even if it becomes empty.
        """
        scene_number = str(scene_number)
        if from_type == to_type:
            return DocumentMutationResult(document, tuple(scenes))

        source_store = document.store(from_type)
        source_key = source_store.find_scene(scene_number)
        if source_key is None:
            raise NotFoundError(f"Scene {scene_number} is not on the {from_type.value} timeline")

        source_index = source_store.day_index(source_key)
        source_day = source_store.days[source_index]
        source_days = list(source_store.days)
        source_days[source_index] = replace(
            source_day,
            scenes=tuple(s for s in source_day.scenes if s != scene_number),
            detected_from_scenes=tuple(s for s in source_day.detected_from_scenes if s != scene_number),
        )

        dest_store = document.store(to_type)
        dest_days = list(dest_store.days)
        target_key = self._chronological_day(dest_store, scene_number)

        if target_key is None:
            if dest_days:
                target_key = dest_days[0].key
            else:
                dest_days.append(StoryDay(key=1))
                target_key = 1

        target_index = next(i for i, day in enumerate(dest_days) if day.key == target_key)
        target = dest_days[target_index]
        dest_days[target_index] = replace(
            target, scenes=tuple(sorted(target.scenes + (scene_number,), key=scene_sort_key))
        )

        new_document = (
            document
            .with_store(source_store.with_days(source_days))
            .with_store(dest_store.with_days(dest_days))
        )
        updated = tuple(
            scene.assign(to_type, target_key) if scene.scene_number == scene_number else scene
            for scene in scenes
        )
        logger.info(
            f"Scene {scene_number} moved from {from_type.value} to {to_type.value} timeline (day {target_key})"
        )
        return DocumentMutationResult(new_document, updated)

    @staticmethod
    def _chronological_day(store: TimelineStore, scene_number: str) -> Optional[int]:
        """Key of the first day whose scene range contains ``scene_number``."""
        key = scene_sort_key(scene_number)
        for day in store.days:
            span = day.scene_span()
            if span and scene_sort_key(span[0]) <= key <= scene_sort_key(span[1]):
                return day.key
        return None
