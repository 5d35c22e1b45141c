"""Input file discovery and JSON loading for the catalog import."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from catalog_import.config import (
    DEFAULT_BASE_PATHS,
    FILE_SEARCH_PATTERNS,
    SUPPORTED_LANGUAGES,
)
from catalog_import.errors import MissingInputFileError
from catalog_import.logging_config import get_logger
from catalog_import.models import CatalogInputs

__all__ = ["FileResolver", "default_base_paths"]

logger = get_logger("files")


def default_base_paths(extra_dirs: Iterable[Path] = ()) -> List[Path]:
    """Base directories in search order: extra dirs, package dirs, cwd."""
    paths: List[Path] = []
    for path in list(extra_dirs) + DEFAULT_BASE_PATHS + [Path.cwd()]:
        resolved = Path(path).resolve()
        if resolved not in paths:
            paths.append(resolved)
    return paths


class FileResolver:
    """Finds the catalog JSON files and caches paths and parsed content.

    One resolver belongs to one run, so nothing is shared between runs.
    """

    def __init__(
        self,
        base_paths: Optional[Iterable[Path]] = None,
        patterns: Optional[Dict[str, List[str]]] = None,
    ):
        self.base_paths = [Path(p) for p in base_paths] if base_paths is not None else default_base_paths()
        self.patterns = patterns if patterns is not None else FILE_SEARCH_PATTERNS
        self._paths: Dict[str, Optional[Path]] = {}
        self._json: Dict[Path, Any] = {}

    def resolve_file(self, file_type: str) -> Optional[Path]:
        """Return the first existing base_path/pattern for a file type, or None."""
        if file_type in self._paths:
            return self._paths[file_type]

        if file_type not in self.patterns:
            raise ValueError(f"Unknown file type: {file_type}. Must be one of {list(self.patterns)}")

        found: Optional[Path] = None
        for base_path in self.base_paths:
            for pattern in self.patterns[file_type]:
                candidate = base_path / pattern
                if candidate.is_file():
                    found = candidate
                    break
            if found:
                break

        self._paths[file_type] = found
        return found

    def load_json(self, path: Optional[Path]) -> Any:
        """Parse a JSON file, caching by path.

        Returns:
            Parsed content, or None if the path is missing

        Raises:
            ValueError: If the file is not valid JSON
        """
        if path is None or not path.is_file():
            return None
        if path in self._json:
            return self._json[path]

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e

        self._json[path] = data
        return data

    def load_inputs(self, languages: Iterable[str] = SUPPORTED_LANGUAGES) -> CatalogInputs:
        """Load the required static catalog and the optional language overlays.

        Raises:
            MissingInputFileError: If the static file is missing, unparseable
                or lacks the 'categories' tree
        """
        static_path = self.resolve_file("static")
        if static_path is None:
            raise MissingInputFileError("static")

        try:
            static_data = self.load_json(static_path)
        except (OSError, ValueError) as e:
            raise MissingInputFileError("static", str(static_path), reason=f"could not be parsed ({e})") from e

        if not isinstance(static_data, dict) or not isinstance(static_data.get("categories"), dict):
            raise MissingInputFileError("static", str(static_path), reason="has no 'categories' tree")

        overlays: Dict[str, Optional[Dict[str, Any]]] = {}
        for language in languages:
            path = self.resolve_file(language)
            if path is None:
                logger.warning(f"⚠️ {language} data file not found (optional)")
                overlays[language] = None
                continue
            try:
                data = self.load_json(path)
            except (OSError, ValueError) as e:
                logger.warning(f"⚠️ Ignoring unreadable {language} data file {path}: {e}")
                data = None
            overlays[language] = data if isinstance(data, dict) else None

        status = ", ".join(
            f"{lang}: {'✅' if overlays.get(lang) else '⚠️'}" for lang in overlays
        )
        logger.info(f"Data files loaded - static: ✅ ({static_path}), {status}")

        return CatalogInputs(static=static_data, overlays=overlays)
