"""
Error taxonomy for Daybreak.
Every command validates before it mutates, so any of these errors means the
previous snapshot is still the current one.
"""


class DaybreakError(Exception):
    """Base class for every recoverable command failure."""
    pass


class ValidationError(DaybreakError):
    """Malformed input, such as a continuity element without a name."""
    pass


class TimelineLockedError(ValidationError):
    """A day or scene mutation was attempted while the timeline is locked."""
    pass


class NotFoundError(DaybreakError):
    """Unknown day, scene, element id or position."""
    pass


class InvalidRangeError(DaybreakError):
    """A day range whose start comes after its end."""
    pass


class MissingDayAssignmentError(DaybreakError):
    """A scene has no story day yet; run analysis first."""
    pass


class PersistenceError(DaybreakError):
    """Handing a snapshot to storage failed. The in-memory change still stands."""
    pass


class StaleReferenceWarning(UserWarning):
    """A continuity element points at day keys that no longer exist."""

    def __init__(self, element_id: str, start_day: int, end_day: int, message: str = ""):
        self.element_id = element_id
        self.start_day = start_day
        self.end_day = end_day
        super().__init__(
            message or f"Continuity element {element_id} spans days {start_day}-{end_day}, "
                       f"which no longer match the current story days"
        )
