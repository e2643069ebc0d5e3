"""
Beat pattern registry - discovers and loads ready-made scripts.

The registry serves the built-in library (one YAML file per pattern) and
user-owned patterns in a project directory. Project files shadow library
files of the same name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from chuk_mcp_sonic_pi.models.beat_pattern import BeatPattern, BeatPatternMetadata

logger = logging.getLogger(__name__)


class BeatPatternRegistry:
    """
    Discovers and loads beat patterns from library and project.

    Loaded patterns and their metadata are cached; copy_to_project()
    invalidates the caches so the project copy takes precedence.
    """

    def __init__(
        self,
        library_path: Path | None = None,
        project_path: Path | None = None,
    ):
        """
        Initialize the registry.

        Args:
            library_path: Path to the built-in pattern library
            project_path: Path to project patterns (user-owned)
        """
        self.library_path = library_path
        self.project_path = project_path
        self._cache: dict[str, BeatPattern] = {}
        self._metadata_cache: dict[str, BeatPatternMetadata] = {}

    @staticmethod
    def normalize_name(name: str) -> str:
        """Pattern lookups ignore case, surrounding space and hyphens."""
        return name.strip().lower().replace("-", "_")

    def list_patterns(self, tag: str | None = None) -> list[BeatPatternMetadata]:
        """
        List available patterns.

        Args:
            tag: Only patterns carrying this tag

        Returns:
            Pattern metadata sorted by name
        """
        self._ensure_metadata_loaded()
        result = list(self._metadata_cache.values())
        if tag:
            wanted = tag.strip().lower()
            result = [m for m in result if wanted in (t.lower() for t in m.tags)]
        return sorted(result, key=lambda m: m.name)

    def pattern_names(self) -> list[str]:
        return [m.name for m in self.list_patterns()]

    def get_pattern(self, name: str) -> BeatPattern | None:
        """
        Get a pattern by name (e.g., 'blues').

        Returns:
            BeatPattern or None if not found
        """
        key = self.normalize_name(name)
        if key in self._cache:
            return self._cache[key]

        pattern = self._load_pattern(key)
        if pattern:
            self._cache[key] = pattern
        return pattern

    def get_pattern_metadata(self, name: str) -> BeatPatternMetadata | None:
        self._ensure_metadata_loaded()
        return self._metadata_cache.get(self.normalize_name(name))

    def copy_to_project(self, name: str) -> Path | None:
        """
        Copy a pattern into the project so it can be edited.

        Returns:
            Path to the copy, or None if the pattern does not exist
        """
        if not self.project_path:
            raise ValueError("No project path configured")

        pattern = self.get_pattern(name)
        if not pattern:
            return None

        self.project_path.mkdir(parents=True, exist_ok=True)
        target_path = self.project_path / f"{pattern.name}.yaml"
        with open(target_path, "w") as f:
            yaml.safe_dump(
                self._pattern_to_yaml_dict(pattern), f, default_flow_style=False, sort_keys=False
            )

        self._cache.pop(pattern.name, None)
        self._metadata_cache.clear()
        return target_path

    def _ensure_metadata_loaded(self) -> None:
        if self._metadata_cache:
            return

        if self.library_path and self.library_path.exists():
            self._scan_directory(self.library_path)
        # Project scanned last so it shadows the library
        if self.project_path and self.project_path.exists():
            self._scan_directory(self.project_path)

    def _scan_directory(self, base_path: Path) -> None:
        for pattern_file in sorted(base_path.glob("*.yaml")):
            pattern = self._load_pattern_file(pattern_file)
            if pattern is None:
                continue
            self._metadata_cache[pattern.name] = BeatPatternMetadata.from_pattern(
                pattern, path=str(pattern_file)
            )

    def _load_pattern(self, name: str) -> BeatPattern | None:
        for base in (self.project_path, self.library_path):
            if not base:
                continue
            pattern_file = base / f"{name}.yaml"
            if pattern_file.exists():
                return self._load_pattern_file(pattern_file)
        return None

    def _load_pattern_file(self, path: Path) -> BeatPattern | None:
        """Load a pattern from a YAML file; unreadable files are skipped."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                raise ValueError("pattern file must be a mapping")
            data.setdefault("name", path.stem)
            return BeatPattern.model_validate(data)
        except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
            logger.warning(f"Skipping beat pattern {path}: {e}")
            return None

    def _pattern_to_yaml_dict(self, pattern: BeatPattern) -> dict[str, Any]:
        return {
            "schema": pattern.schema_version,
            "name": pattern.name,
            "description": pattern.description,
            "tempo": pattern.tempo,
            "tags": list(pattern.tags),
            "code": pattern.code,
        }
