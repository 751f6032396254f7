"""File handling utilities."""

import json
from pathlib import Path
from typing import Any, Union

import yaml


class FileHandler:
    """Reads and writes JSON and YAML documents."""

    SUFFIXES = {
        "json": ".json",
        "yaml": ".yaml",
    }

    def read(self, file_path: Union[str, Path]) -> Any:
        """Read a document, picking the format from the file suffix."""
        path = Path(file_path)
        if path.suffix.lower() in (".yaml", ".yml"):
            return self.read_yaml(path)
        return self.read_json(path)

    def write(self, file_path: Union[str, Path], data: Any) -> None:
        """Write a document, picking the format from the file suffix."""
        path = Path(file_path)
        if path.suffix.lower() in (".yaml", ".yml"):
            self.write_yaml(path, data)
        else:
            self.write_json(path, data)

    def read_json(self, file_path: Union[str, Path]) -> Any:
        """Read JSON file."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return json.load(f)

    def write_json(self, file_path: Union[str, Path], data: Any) -> None:
        """Write JSON file."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def read_yaml(self, file_path: Union[str, Path]) -> Any:
        """Read YAML file."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    def write_yaml(self, file_path: Union[str, Path], data: Any) -> None:
        """Write YAML file."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def suffix_for(self, data_format: str) -> str:
        """File suffix for ``json`` or ``yaml``."""
        try:
            return self.SUFFIXES[data_format.lower()]
        except KeyError:
            raise ValueError(f"Unsupported format: {data_format}")
