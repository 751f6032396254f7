"""File I/O and persistence modules."""

from .file_handler import FileHandler
from .project_loader import FilePersistence, ProjectLoader

__all__ = [
    "FileHandler",
    "FilePersistence",
    "ProjectLoader",
]
