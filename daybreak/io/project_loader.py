"""Project loading and saving utilities."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..config import PROJECT_CONFIG_FILE, Settings, load_settings
from ..core.exceptions import PersistenceError, ValidationError
from ..core.production import Persistence, Production
from ..core.scene import Scene, TimelineType
from ..core.timeline import TimelineDocument, assign_back_references
from ..editor.continuity_tracker import ContinuityTracker
from .file_handler import FileHandler

logger = logging.getLogger(__name__)

PROJECT_FILE = "project.yaml"


class FilePersistence(Persistence):
    """Writes each snapshot into a project directory.

    Layout::

        project.yaml          title and lock state
        scenes.<fmt>          scene list with story-day back-references
        timeline.<fmt>        timeline type -> "dayN" -> day
        continuity.<fmt>      continuity elements
    """

    def __init__(self, project_path: Union[str, Path], data_format: str = "json"):
        self.project_path = Path(project_path)
        self.file_handler = FileHandler()
        self.suffix = self.file_handler.suffix_for(data_format)

    @property
    def scenes_file(self) -> Path:
        return self.project_path / f"scenes{self.suffix}"

    @property
    def timeline_file(self) -> Path:
        return self.project_path / f"timeline{self.suffix}"

    @property
    def continuity_file(self) -> Path:
        return self.project_path / f"continuity{self.suffix}"

    @property
    def project_file(self) -> Path:
        return self.project_path / PROJECT_FILE

    def save_scenes(self, scenes: Tuple[Scene, ...]) -> None:
        self._write(self.scenes_file, [scene.to_dict() for scene in scenes])

    def save_timeline(self, document: TimelineDocument) -> None:
        self._write(self.timeline_file, document.to_dict())

    def save_elements(self, tracker: ContinuityTracker) -> None:
        self._write(self.continuity_file, tracker.to_list())

    def save_project(self, production: Production) -> None:
        data = {"title": production.title, "locked": production.locked}
        try:
            self.file_handler.write_yaml(self.project_file, data)
        except OSError as e:
            raise PersistenceError(f"Could not write {self.project_file}: {e}") from e

    def _write(self, path: Path, data: Any) -> None:
        try:
            self.file_handler.write(path, data)
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e
        logger.debug(f"Saved {path}")


class ProjectLoader:
    """Handles loading and saving projects."""

    def __init__(self, settings: Optional[Settings] = None):
        self.file_handler = FileHandler()
        self.settings = settings

    def create_project(
        self,
        project_path: Union[str, Path],
        scenes: Iterable[Scene],
        title: str = "",
        data_format: Optional[str] = None,
    ) -> Production:
        """Create a project directory from a scene list and save it."""
        project_path = Path(project_path)
        if (project_path / PROJECT_FILE).exists():
            raise ValidationError(f"A project already exists in {project_path}")
        project_path.mkdir(parents=True, exist_ok=True)

        settings = self._settings_for(project_path)
        if data_format:
            settings = settings.merged({"data_format": data_format})

        production = Production(
            title=title or project_path.name,
            scenes=scenes,
            settings=settings,
            persistence=FilePersistence(project_path, settings.data_format),
        )
        self.save_project(production)
        # format chosen at creation sticks with the project
        self.file_handler.write_yaml(project_path / PROJECT_CONFIG_FILE, {"data_format": settings.data_format})
        production.analyze_if_empty()
        logger.info(f"Created project '{production.title}' in {project_path}")
        return production

    def load_project(self, project_path: Union[str, Path]) -> Production:
        """Load a project directory into a session."""
        project_path = Path(project_path)
        project_file = project_path / PROJECT_FILE
        if not project_file.exists():
            raise ValidationError(f"No project found in {project_path} (missing {PROJECT_FILE})")

        settings = self._settings_for(project_path)
        persistence = FilePersistence(project_path, settings.data_format)
        meta: Dict[str, Any] = self.file_handler.read_yaml(project_file) or {}

        scenes = [Scene.from_dict(item) for item in self._read(persistence.scenes_file, [])]
        document = (
            TimelineDocument.from_dict(self._read(persistence.timeline_file, {}))
            if persistence.timeline_file.exists()
            else None
        )
        tracker = ContinuityTracker.from_list(self._read(persistence.continuity_file, []))
        if document is not None:
            document, scenes = self._close_gaps(document, scenes)

        production = Production(
            title=meta.get("title", project_path.name),
            scenes=scenes,
            document=document,
            tracker=tracker,
            locked=bool(meta.get("locked", False)),
            persistence=persistence,
            settings=settings,
        )
        production.analyze_if_empty()
        return production

    def save_project(self, production: Production) -> None:
        """Write every part of a session to its persistence."""
        if production.persistence is None:
            raise PersistenceError(f"Project '{production.title}' has no storage configured")
        production.persistence.save_project(production)
        production.persistence.save_scenes(production.scenes)
        production.persistence.save_timeline(production.document)
        production.persistence.save_elements(production.tracker)

    def load_scenes(self, file_path: Union[str, Path]) -> list:
        """Read a scene list exported by the script collaborator."""
        data = self.file_handler.read(file_path)
        if isinstance(data, dict):
            data = data.get("scenes", [])
        if not isinstance(data, list):
            raise ValidationError(f"{file_path} does not contain a scene list")
        try:
            return [Scene.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid scene in {file_path}: {e}") from e

    def _close_gaps(
        self, document: TimelineDocument, scenes: List[Scene]
    ) -> Tuple[TimelineDocument, List[Scene]]:
        """Renumber stores whose day keys are not 1..N and fix back-references."""
        for timeline_type in TimelineType:
            store = document.store(timeline_type)
            if store.is_contiguous():
                continue
            renumbered = store.renumbered()
            logger.warning(
                f"{timeline_type.value} timeline had day keys {store.day_keys()}; "
                f"renumbered to 1..{renumbered.day_count}"
            )
            document = document.with_store(renumbered)
            scenes = list(assign_back_references(scenes, renumbered))
        return document, scenes

    def _settings_for(self, project_path: Path) -> Settings:
        return load_settings(project_path, base=self.settings)

    def _read(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        data = self.file_handler.read(path)
        return default if data is None else data
