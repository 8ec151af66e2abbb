# sidel/settings/manifest.py
"""
Extension manifest: maps file extensions to language names.

Manifest format (TOML):

    [[language]]
    name = "rust"
    extensions = ["rs"]

A bad entry is dropped on its own; the rest of the manifest still loads.
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, List, Optional, Tuple

import toml

from ..utils.exceptions import ManifestError
from ..utils.logger import get_logger


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """One language and the file extensions it claims."""

    name: str
    extensions: Tuple[str, ...]

    @classmethod
    def from_dict(cls, data: Any, index: int) -> "ManifestEntry":
        """Validate one ``[[language]]`` table, raising ManifestError if unusable."""
        if not isinstance(data, dict):
            raise ManifestError("entry is not a table", index)

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ManifestError("missing or empty 'name'", index)

        raw_extensions = data.get("extensions")
        if not isinstance(raw_extensions, list) or not raw_extensions:
            raise ManifestError(f"language '{name}' has no 'extensions' list", index)

        extensions = []
        for ext in raw_extensions:
            if not isinstance(ext, str) or not normalize_extension(ext):
                raise ManifestError(
                    f"language '{name}' has an invalid extension {ext!r}", index
                )
            normalized = normalize_extension(ext)
            if normalized not in extensions:
                extensions.append(normalized)

        return cls(name=name.strip(), extensions=tuple(extensions))


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and strip its leading dots: ``.RS`` -> ``rs``."""
    return extension.strip().lstrip(".").lower()


class ManifestRegistry:
    """
    Extension to language lookup table.

    ``errors`` keeps every ManifestError recovered during the last ``load``.
    """

    def __init__(self):
        self.logger = get_logger("sidel.settings.manifest")
        self._by_extension: Dict[str, str] = {}
        self._entries: Dict[str, ManifestEntry] = {}
        self.errors: List[ManifestError] = []

    def load(self, manifest_source: str) -> Dict[str, str]:
        """
        Parse a manifest and replace the current table with its contents.

        Returns:
            The extension -> language name mapping.
        """
        self._by_extension = {}
        self._entries = {}
        self.errors = []

        try:
            data = toml.loads(manifest_source)
        except (toml.TomlDecodeError, IndexError, TypeError, ValueError) as e:
            self._record(ManifestError(f"not valid TOML: {e}"))
            return dict(self._by_extension)

        raw_entries = data.get("language", [])
        if not isinstance(raw_entries, list):
            self._record(ManifestError("'language' must be an array of tables"))
            return dict(self._by_extension)

        for index, raw in enumerate(raw_entries):
            try:
                entry = ManifestEntry.from_dict(raw, index)
                if entry.name in self._entries:
                    raise ManifestError(f"duplicate language name '{entry.name}'", index)
            except ManifestError as e:
                self._record(e)
                continue
            self.register(entry, index)

        self.logger.debug(
            f"Loaded manifest: {len(self._entries)} languages, "
            f"{len(self._by_extension)} extensions, {len(self.errors)} errors"
        )
        return dict(self._by_extension)

    def register(self, entry: ManifestEntry, index: Optional[int] = None) -> None:
        """Add an entry; extensions already claimed keep their first language."""
        claimed = []
        for ext in entry.extensions:
            owner = self._by_extension.get(ext)
            if owner is not None and owner != entry.name:
                self._record(
                    ManifestError(
                        f"extension '{ext}' of '{entry.name}' already belongs to '{owner}'",
                        index,
                    )
                )
                continue
            self._by_extension[ext] = entry.name
            claimed.append(ext)
        self._entries[entry.name] = ManifestEntry(entry.name, tuple(claimed))

    def _record(self, error: ManifestError) -> None:
        self.errors.append(error)
        self.logger.warning(str(error))

    def resolve(self, extension: str) -> Optional[str]:
        """Language name for an extension, or None when nothing claims it."""
        if not extension:
            return None
        return self._by_extension.get(normalize_extension(extension))

    def resolve_filename(self, filename) -> Optional[str]:
        """Language name for a file path, judged by its suffix."""
        suffix = PurePath(str(filename)).suffix
        return self.resolve(suffix) if suffix else None

    def has_language(self, name: str) -> bool:
        return name in self._entries

    def languages(self) -> List[str]:
        return sorted(self._entries)

    def entries(self) -> List[ManifestEntry]:
        return [self._entries[name] for name in self.languages()]

    @property
    def mapping(self) -> Dict[str, str]:
        return dict(self._by_extension)
