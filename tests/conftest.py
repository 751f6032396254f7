"""Shared fixtures for Daybreak tests."""

import pytest

from daybreak.core.scene import Scene, TimeOfDay, TimelineType
from daybreak.core.timeline import StoryDay, TimelineStore


def make_scenes(*pairs):
    """Build scenes from ``(number, time_of_day)`` pairs."""
    return tuple(Scene(scene_number=number, time_of_day=TimeOfDay.parse(tod)) for number, tod in pairs)


def make_store(*day_scenes, timeline_type=TimelineType.MAIN):
    """Build a store whose day N holds the N-th list of scene numbers."""
    days = tuple(StoryDay(key=i, scenes=tuple(numbers)) for i, numbers in enumerate(day_scenes, 1))
    return TimelineStore(timeline_type, days)


def placed(store, scenes):
    """Scenes with back-references matching ``store``."""
    placement = {number: day.key for day in store.days for number in day.scenes}
    return tuple(
        scene.assign(store.timeline_type, placement[scene.scene_number])
        if scene.scene_number in placement else scene
        for scene in scenes
    )


@pytest.fixture
def three_day_store():
    return make_store(["1", "2"], ["10", "11"], ["20"])


@pytest.fixture
def three_day_scenes(three_day_store):
    scenes = make_scenes(("1", "DAY"), ("2", "NIGHT"), ("10", "DAY"), ("11", "NIGHT"), ("20", "DAY"))
    return placed(three_day_store, scenes)


@pytest.fixture
def scene_list_data():
    """A scene list as the script collaborator exports it."""
    return [
        {"sceneNumber": "1", "heading": "INT. KITCHEN - DAY", "metadata": {"timeOfDay": "DAY"}},
        {"sceneNumber": "2", "heading": "EXT. STREET", "metadata": {"timeOfDay": ""}},
        {"sceneNumber": "3", "heading": "INT. BAR - NIGHT", "metadata": {"timeOfDay": "NIGHT"}},
        {"sceneNumber": "4", "heading": "INT. KITCHEN - DAY", "metadata": {"timeOfDay": "DAY"}},
        {"sceneNumber": "5", "heading": "EXT. ROOF - DUSK", "metadata": {"timeOfDay": "DUSK"}},
        {"sceneNumber": "6", "heading": "INT. HOSPITAL - DAWN", "metadata": {"timeOfDay": "DAWN"}},
    ]
