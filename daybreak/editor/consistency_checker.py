"""Consistency checking for timeline snapshots."""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.scene import Scene, TimelineType
from ..core.timeline import TimelineDocument
from .continuity_tracker import ContinuityTracker


class ConsistencyChecker:
    """Checks a loaded snapshot for broken numbering and stale references."""

    def check(
        self,
        document: TimelineDocument,
        scenes: Sequence[Scene],
        tracker: Optional[ContinuityTracker] = None,
    ) -> List[str]:
        """Return a list of issues; empty means the snapshot is consistent."""
        issues = []
        issues.extend(self._check_numbering(document))
        issues.extend(self._check_membership(document, scenes))
        if tracker is not None:
            issues.extend(self._check_elements(document, tracker))
        return issues

    def _check_numbering(self, document: TimelineDocument) -> List[str]:
        issues = []
        for timeline_type in TimelineType:
            store = document.store(timeline_type)
            if not store.is_contiguous():
                keys = ", ".join(str(k) for k in store.day_keys())
                issues.append(
                    f"{timeline_type.value} timeline days are not numbered 1..{store.day_count}: {keys}"
                )
        return issues

    def _check_membership(self, document: TimelineDocument, scenes: Sequence[Scene]) -> List[str]:
        issues = []
        placements: Dict[str, List[Tuple[TimelineType, int]]] = defaultdict(list)
        for timeline_type in TimelineType:
            for day in document.store(timeline_type).days:
                for number in day.scenes:
                    placements[number].append((timeline_type, day.key))

        for number, places in placements.items():
            if len(places) > 1:
                where = "; ".join(f"{t.value} day {k}" for t, k in places)
                issues.append(f"Scene {number} appears in more than one day: {where}")

        known = set()
        for scene in scenes:
            known.add(scene.scene_number)
            places = placements.get(scene.scene_number)
            if not places:
                if scene.story_day is not None:
                    issues.append(
                        f"Scene {scene.scene_number} says story day {scene.story_day} but is on no timeline"
                    )
                continue
            timeline_type, key = places[0]
            if scene.story_day != key:
                issues.append(
                    f"Scene {scene.scene_number} says story day {scene.story_day} "
                    f"but sits on {timeline_type.value} day {key}"
                )
            if scene.effective_timeline != timeline_type:
                issues.append(
                    f"Scene {scene.scene_number} says {scene.effective_timeline.value} timeline "
                    f"but sits on the {timeline_type.value} timeline"
                )

        for number in placements:
            if number not in known:
                issues.append(f"Timeline references scene {number}, which is not in the script")
        return issues

    def _check_elements(self, document: TimelineDocument, tracker: ContinuityTracker) -> List[str]:
        issues = []
        for element in tracker:
            if sorted(element.daily_tracking) != list(element.day_range()):
                issues.append(
                    f"Continuity element {element.name} tracks days "
                    f"{sorted(element.daily_tracking)} instead of {element.start_day}-{element.end_day}"
                )
        for timeline_type in TimelineType:
            keys = document.store(timeline_type).day_keys()
            for stale in tracker.find_stale(timeline_type, keys):
                issues.append(str(stale))
        return issues
