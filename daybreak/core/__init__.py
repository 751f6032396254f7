"""Core domain models for Daybreak."""

from .exceptions import (
    DaybreakError,
    ValidationError,
    TimelineLockedError,
    NotFoundError,
    InvalidRangeError,
    MissingDayAssignmentError,
    PersistenceError,
    StaleReferenceWarning,
)
from .scene import Scene, TimeOfDay, TimelineType, Confidence, scene_sort_key, sort_scene_numbers
from .timeline import StoryDay, TimelineStore, TimelineDocument
from .production import Production, Persistence

__all__ = [
    "DaybreakError",
    "ValidationError",
    "TimelineLockedError",
    "NotFoundError",
    "InvalidRangeError",
    "MissingDayAssignmentError",
    "PersistenceError",
    "StaleReferenceWarning",
    "Scene",
    "TimeOfDay",
    "TimelineType",
    "Confidence",
    "scene_sort_key",
    "sort_scene_numbers",
    "StoryDay",
    "TimelineStore",
    "TimelineDocument",
    "Production",
    "Persistence",
]
