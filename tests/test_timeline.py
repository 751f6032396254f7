"""Tests for scenes, story days and timeline documents."""

import pytest

from daybreak.core.exceptions import NotFoundError, ValidationError
from daybreak.core.scene import Confidence, Scene, TimeOfDay, TimelineType, scene_sort_key, sort_scene_numbers
from daybreak.core.timeline import (
    StoryDay,
    TimelineDocument,
    TimelineStore,
    assign_back_references,
    day_label,
    parse_day_label,
)

from conftest import make_scenes, make_store


def test_natural_scene_order():
    """Scene numbers sort by leading number, then by full text."""
    assert sort_scene_numbers(["18", "17B", "17", "17A"]) == ["17", "17A", "17B", "18"]
    assert sort_scene_numbers(["100", "9", "A1"]) == ["A1", "9", "100"]
    assert scene_sort_key("12C") == (12, "12C")


def test_time_of_day_parse():
    """Heading values map to members; anything else is unknown."""
    assert TimeOfDay.parse("night") is TimeOfDay.NIGHT
    assert TimeOfDay.parse(" Dawn ") is TimeOfDay.DAWN
    assert TimeOfDay.parse("") is TimeOfDay.UNKNOWN
    assert TimeOfDay.parse(None) is TimeOfDay.UNKNOWN
    assert TimeOfDay.parse("CONTINUOUS") is TimeOfDay.UNKNOWN
    assert TimeOfDay.DUSK.is_nighttime and not TimeOfDay.DUSK.is_daytime
    assert not TimeOfDay.UNKNOWN.is_definitive


def test_scene_keeps_unknown_fields():
    """Fields owned by the script survive a load and save."""
    data = {
        "sceneNumber": 7,
        "heading": "INT. OFFICE - NIGHT",
        "metadata": {"timeOfDay": "NIGHT", "location": "Office"},
        "storyDay": 3,
        "timelineType": "flashback",
        "detectionConfidence": "medium",
    }
    scene = Scene.from_dict(data)

    assert scene.scene_number == "7"
    assert scene.time_of_day is TimeOfDay.NIGHT
    assert scene.story_day == 3
    assert scene.timeline_type is TimelineType.FLASHBACK
    assert scene.detection_confidence is Confidence.MEDIUM

    saved = scene.to_dict()
    assert saved["heading"] == "INT. OFFICE - NIGHT"
    assert saved["metadata"] == {"timeOfDay": "NIGHT", "location": "Office"}
    assert saved["sceneNumber"] == "7"


def test_unassigned_scene_counts_as_main():
    """A scene with no timeline belongs to main."""
    scene = Scene(scene_number="1")
    assert scene.effective_timeline is TimelineType.MAIN
    assert scene.to_dict()["storyDay"] is None


def test_day_labels():
    """Day keys are written as dayN."""
    assert day_label(4) == "day4"
    assert parse_day_label("day12") == 12
    assert parse_day_label("3") == 3
    assert parse_day_label(5) == 5
    with pytest.raises(ValidationError):
        parse_day_label("tuesday")


def test_store_queries():
    """Stores answer lookups by key and by scene."""
    store = make_store(["3", "1"], ["12A", "12"], [])

    assert store.day_keys() == [1, 2, 3]
    assert store.find_scene("12A") == 2
    assert store.find_scene("99") is None
    assert store.scenes_for_day(1) == ["3", "1"]
    assert store.scenes_in_order() == ["1", "3", "12", "12A"]
    assert store.scene_range() == ("1", "12A")
    assert store.get_day(3).is_empty
    assert store.is_contiguous()
    with pytest.raises(NotFoundError):
        store.get_day(4)


def test_store_document_format():
    """Stores are written as dayN mappings and read back sorted by key."""
    data = {
        "day2": {"scenes": ["5"], "manuallyCreated": True},
        "day1": {"scenes": ["1", "2"], "detectedFromScenes": ["1"], "reordered": True},
    }
    store = TimelineStore.from_dict(TimelineType.MAIN, data)

    assert store.day_keys() == [1, 2]
    assert store.get_day(1).detected_from_scenes == ("1",)
    assert store.get_day(2).manually_created
    assert list(store.to_dict()) == ["day1", "day2"]
    assert store.to_dict()["day1"]["reordered"] is True


def test_initial_document():
    """A new project has one empty day on main and empty other timelines."""
    document = TimelineDocument.initial()

    assert document.store(TimelineType.MAIN).days == (StoryDay(key=1),)
    assert document.store(TimelineType.DREAM).day_count == 0
    assert document.is_empty()
    assert set(document.to_dict()) == {"main", "flashback", "dream", "other"}


def test_document_rejects_unknown_timeline():
    """Only the four timeline types are accepted."""
    with pytest.raises(ValidationError):
        TimelineDocument.from_dict({"sideplot": {}})


def test_document_locate():
    """Scenes are found on whichever timeline holds them."""
    document = TimelineDocument.initial().with_store(
        make_store(["40"], timeline_type=TimelineType.FLASHBACK)
    )
    assert document.locate("40") == (TimelineType.FLASHBACK, 1)
    assert document.locate("41") is None
    assert not document.is_empty()


def test_assign_back_references():
    """Back-references follow the store; other scenes are untouched."""
    scenes = make_scenes(("1", "DAY"), ("2", "NIGHT"), ("3", "DAY"))
    store = make_store(["1"], ["2"])

    updated = assign_back_references(scenes, store)

    assert [s.story_day for s in updated] == [1, 2, None]
    assert updated[0].timeline_type is TimelineType.MAIN
    assert updated[2] is scenes[2]


def test_scene_metadata_written_back_unchanged():
    """Time-of-day text the detector does not know is saved as it was read."""
    scene = Scene.from_dict({"sceneNumber": "7", "metadata": {"timeOfDay": "CONTINUOUS"}})
    assert scene.time_of_day is TimeOfDay.UNKNOWN
    assert scene.to_dict()["metadata"]["timeOfDay"] == "CONTINUOUS"

    lower = Scene.from_dict({"sceneNumber": "8", "metadata": {"timeOfDay": "day"}})
    assert lower.time_of_day is TimeOfDay.DAY
    assert lower.to_dict()["metadata"]["timeOfDay"] == "day"

    built = Scene(scene_number="9", time_of_day=TimeOfDay.NIGHT)
    assert built.to_dict()["metadata"] == {"timeOfDay": "NIGHT"}
