"""Story-day detection from scene time-of-day metadata."""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from ..core.scene import Confidence, Scene, TimeOfDay, TimelineType
from ..core.timeline import StoryDay, TimelineStore

logger = logging.getLogger(__name__)


class StoryDayDetector:
    """Assigns scenes to main-timeline story days in a single forward pass.

    A daytime scene (DAWN, DAY) that follows a nighttime scene (DUSK, NIGHT)
    starts a new story day. Scenes without a time of day borrow the next
    definitive value further down the script; if there is none they stay on
    the current day with low confidence.
    """

    timeline_type = TimelineType.MAIN

    def detect(self, scenes: Sequence[Scene]) -> Tuple[Tuple[Scene, ...], TimelineStore]:
        """Partition scenes in script order.

        Returns the scenes annotated with ``story_day``, ``timeline_type`` and
        ``detection_confidence``, plus the new main-timeline store.
        """
        current_day = 1
        last_definitive: Optional[TimeOfDay] = None

        day_scenes: List[List[str]] = []
        day_detected: List[List[str]] = []
        updated: List[Scene] = []

        for index, scene in enumerate(scenes):
            time_of_day = scene.time_of_day

            if time_of_day.is_definitive:
                effective = time_of_day
                confidence = Confidence.HIGH
            else:
                effective = self._next_definitive(scenes, index)
                confidence = Confidence.MEDIUM if effective else Confidence.LOW

            if effective is not None:
                if effective.is_daytime and last_definitive is not None and last_definitive.is_nighttime:
                    current_day += 1
                last_definitive = effective

            while len(day_scenes) < current_day:
                day_scenes.append([])
                day_detected.append([])

            day_scenes[current_day - 1].append(scene.scene_number)
            if confidence is Confidence.HIGH:
                day_detected[current_day - 1].append(scene.scene_number)

            updated.append(replace(
                scene,
                story_day=current_day,
                timeline_type=self.timeline_type,
                detection_confidence=confidence,
            ))

        days = tuple(
            StoryDay(key=i, scenes=tuple(numbers), detected_from_scenes=tuple(detected))
            for i, (numbers, detected) in enumerate(zip(day_scenes, day_detected), 1)
        )
        store = TimelineStore(self.timeline_type, days)

        logger.info(f"Detected {len(days)} story days from {len(updated)} scenes")
        return tuple(updated), store

    @staticmethod
    def _next_definitive(scenes: Sequence[Scene], index: int) -> Optional[TimeOfDay]:
        """Time of day of the next scene that has one."""
        for scene in scenes[index + 1:]:
            if scene.time_of_day.is_definitive:
                return scene.time_of_day
        return None


def detect(scenes: Sequence[Scene]) -> Tuple[Tuple[Scene, ...], TimelineStore]:
    """Module-level shortcut for :meth:`StoryDayDetector.detect`."""
    return StoryDayDetector().detect(scenes)
