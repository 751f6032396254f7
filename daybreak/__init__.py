"""
Daybreak - story-day timelines and continuity tracking for film productions.
"""

__version__ = "1.0.0"
__author__ = "Daybreak Team"

from .core import (
    Production,
    Scene,
    StoryDay,
    TimelineDocument,
    TimelineStore,
    TimelineType,
    TimeOfDay,
)
from .editor import ConsistencyChecker, ContinuityTracker, DayMutator, StoryDayDetector

__all__ = [
    "Production",
    "Scene",
    "StoryDay",
    "TimelineDocument",
    "TimelineStore",
    "TimelineType",
    "TimeOfDay",
    "StoryDayDetector",
    "DayMutator",
    "ContinuityTracker",
    "ConsistencyChecker",
]
