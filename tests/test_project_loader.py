"""Tests for project files."""

import json

import pytest
import yaml

from daybreak.config import PROJECT_CONFIG_FILE, Settings, load_settings
from daybreak.core.exceptions import ValidationError
from daybreak.core.scene import Scene, TimelineType
from daybreak.editor.continuity_tracker import ContinuityForm
from daybreak.io.file_handler import FileHandler
from daybreak.io.project_loader import ProjectLoader


@pytest.fixture
def scene_file(tmp_path, scene_list_data):
    path = tmp_path / "scenes_export.json"
    path.write_text(json.dumps({"scenes": scene_list_data}), encoding="utf-8")
    return path


@pytest.mark.parametrize("data_format", ["json", "yaml"])
def test_create_and_load_project(tmp_path, scene_file, data_format):
    """A created project loads back with the same timelines and elements."""
    loader = ProjectLoader(Settings(data_format="json"))
    project_path = tmp_path / "film"

    production = loader.create_project(project_path, loader.load_scenes(scene_file), title="Film", data_format=data_format)
    production.add_element(ContinuityForm(name="Sling", start_scene="1", end_scene="4"))
    production.change_scene_timeline("5", TimelineType.MAIN, TimelineType.FLASHBACK)

    suffix = ".json" if data_format == "json" else ".yaml"
    assert (project_path / f"timeline{suffix}").exists()
    assert (project_path / f"scenes{suffix}").exists()
    assert (project_path / f"continuity{suffix}").exists()

    loaded = loader.load_project(project_path)

    assert loaded.title == "Film"
    assert loaded.settings.data_format == data_format
    assert loaded.document.to_dict() == production.document.to_dict()
    assert loaded.tracker.to_list() == production.tracker.to_list()
    assert [s.to_dict() for s in loaded.scenes] == [s.to_dict() for s in production.scenes]
    assert loaded.scenes[0].extra["heading"] == "INT. KITCHEN - DAY"


def test_timeline_file_uses_day_labels(tmp_path, scene_file):
    """The stored document maps timeline type to dayN keys."""
    loader = ProjectLoader(Settings(data_format="json"))
    loader.create_project(tmp_path / "film", loader.load_scenes(scene_file))

    data = json.loads((tmp_path / "film" / "timeline.json").read_text(encoding="utf-8"))

    assert list(data["main"]) == ["day1", "day2", "day3"]
    assert data["main"]["day1"]["scenes"] == ["1", "2", "3"]
    assert data["flashback"] == {}


def test_lock_state_is_saved(tmp_path, scene_file):
    """Locking is stored with the project."""
    loader = ProjectLoader(Settings(data_format="json"))
    production = loader.create_project(tmp_path / "film", loader.load_scenes(scene_file))

    production.lock()

    assert loader.load_project(tmp_path / "film").locked


def test_create_project_twice(tmp_path, scene_file):
    """An existing project is not overwritten."""
    loader = ProjectLoader(Settings(data_format="json"))
    loader.create_project(tmp_path / "film", loader.load_scenes(scene_file))

    with pytest.raises(ValidationError):
        loader.create_project(tmp_path / "film", [])


def test_load_missing_project(tmp_path):
    """Loading needs a project file."""
    with pytest.raises(ValidationError):
        ProjectLoader().load_project(tmp_path)


def test_load_analyzes_empty_timeline(tmp_path, scene_list_data):
    """A project whose timeline file was never written gets analyzed on load."""
    project_path = tmp_path / "film"
    handler = FileHandler()
    handler.write_yaml(project_path / "project.yaml", {"title": "Film", "locked": False})
    handler.write_json(project_path / "scenes.json", scene_list_data)

    production = ProjectLoader(Settings(data_format="json")).load_project(project_path)

    assert production.story_days() == [1, 2, 3]
    assert (project_path / "timeline.json").exists()


def test_load_scenes_accepts_list_and_yaml(tmp_path, scene_list_data):
    """Scene exports may be a bare list, in JSON or YAML."""
    path = tmp_path / "scenes.yaml"
    path.write_text(yaml.safe_dump(scene_list_data), encoding="utf-8")

    scenes = ProjectLoader().load_scenes(path)

    assert [s.scene_number for s in scenes] == ["1", "2", "3", "4", "5", "6"]
    assert isinstance(scenes[0], Scene)


def test_load_scenes_rejects_bad_data(tmp_path):
    """Scene exports must hold a list of scenes."""
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"scenes": [{"heading": "no number"}]}), encoding="utf-8")
    with pytest.raises(ValidationError):
        ProjectLoader().load_scenes(path)

    path.write_text(json.dumps("nope"), encoding="utf-8")
    with pytest.raises(ValidationError):
        ProjectLoader().load_scenes(path)


def test_project_settings_override_base(tmp_path):
    """daybreak.yaml in a project overrides the given settings."""
    (tmp_path / PROJECT_CONFIG_FILE).write_text("data_format: yaml\nauto_analyze: false\n", encoding="utf-8")

    settings = load_settings(tmp_path, base=Settings(data_format="json", log_level="debug"))

    assert settings.data_format == "yaml"
    assert settings.auto_analyze is False
    assert settings.log_level == "DEBUG"


def test_settings_reject_unknown_format():
    """Only json and yaml are supported."""
    with pytest.raises(ValidationError):
        Settings(data_format="xml")


def test_settings_from_environment(monkeypatch):
    """Settings default to environment variables."""
    monkeypatch.setenv("DAYBREAK_DATA_FORMAT", "YAML")
    monkeypatch.setenv("DAYBREAK_AUTO_ANALYZE", "no")

    settings = Settings()

    assert settings.data_format == "yaml"
    assert settings.auto_analyze is False


def test_load_renumbers_day_gaps(tmp_path, scene_list_data):
    """Timelines saved with gaps in their day keys load as 1..N."""
    project_path = tmp_path / "film"
    handler = FileHandler()
    scenes = [
        dict(item, storyDay=1 if i < 3 else 3, timelineType="main")
        for i, item in enumerate(scene_list_data)
    ]
    handler.write_yaml(project_path / "project.yaml", {"title": "Film", "locked": False})
    handler.write_json(project_path / "scenes.json", scenes)
    handler.write_json(project_path / "timeline.json", {
        "main": {"day1": {"scenes": ["1", "2", "3"]}, "day3": {"scenes": ["4", "5", "6"]}},
    })

    production = ProjectLoader(Settings(data_format="json")).load_project(project_path)

    assert production.story_days() == [1, 2]
    assert {s.scene_number: s.story_day for s in production.scenes}["4"] == 2
    assert production.validate() == []

    production.create_day(TimelineType.MAIN)

    saved = json.loads((project_path / "timeline.json").read_text(encoding="utf-8"))
    assert list(saved["main"]) == ["day1", "day2", "day3"]
    assert saved["main"]["day2"]["scenes"] == ["4", "5", "6"]
    assert saved["main"]["day3"]["scenes"] == []
