"""Timeline editing and continuity modules."""

from .detector import StoryDayDetector, detect
from .day_mutator import DayMutator, MutationResult, DocumentMutationResult
from .continuity_tracker import (
    ContinuityElement,
    ContinuityForm,
    ContinuityTracker,
    DailyEntry,
    ElementType,
    VisibleElement,
)
from .consistency_checker import ConsistencyChecker

__all__ = [
    "StoryDayDetector",
    "detect",
    "DayMutator",
    "MutationResult",
    "DocumentMutationResult",
    "ContinuityElement",
    "ContinuityForm",
    "ContinuityTracker",
    "DailyEntry",
    "ElementType",
    "VisibleElement",
    "ConsistencyChecker",
]
