# sidel/settings/resources.py
"""
Name to raw-text lookup for manifest and language definition files.

Implements the layered loading strategy:
1. User layer: directories on disk (SIDE_SYNTAX_DIR, ~/.config/sidel)
2. System layer: read-only files bundled in the ``sidel.data`` package

A resource found in an earlier layer completely overrides later ones.
"""

from importlib import resources
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Sequence

from ..utils.logger import get_logger


class ResourceStore:
    """Read-only lookup of raw text by resource name."""

    def get_text(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def names(self) -> List[str]:
        raise NotImplementedError


class MemoryResources(ResourceStore):
    """Resources held in a dict; used for built-ins and tests."""

    def __init__(self, texts: Optional[Dict[str, str]] = None):
        self._texts = dict(texts or {})

    def get_text(self, name: str) -> Optional[str]:
        return self._texts.get(name)

    def names(self) -> List[str]:
        return sorted(self._texts)


class DirectoryResources(ResourceStore):
    """
    Resources read from a directory on disk.

    ``syntax/rust.sidel`` is looked up as ``<root>/syntax/rust.sidel`` and then
    as ``<root>/rust.sidel``, so a flat directory of definitions works too.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.logger = get_logger("sidel.settings.resources")

    def _candidates(self, name: str) -> Iterable[Path]:
        relative = PurePosixPath(name)
        yield self.root.joinpath(*relative.parts)
        if len(relative.parts) > 1:
            yield self.root / relative.name

    def get_text(self, name: str) -> Optional[str]:
        if not self.root.is_dir():
            return None
        for path in self._candidates(name):
            if not path.is_file():
                continue
            try:
                return path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.logger.warning(f"Failed to read {path}: {e}")
                return None
        return None

    def names(self) -> List[str]:
        if not self.root.is_dir():
            return []
        found = set()
        for path in self.root.rglob("*"):
            if path.is_file():
                found.add(path.relative_to(self.root).as_posix())
        return sorted(found)

    def __repr__(self) -> str:
        return f"DirectoryResources({str(self.root)!r})"


class PackageResources(ResourceStore):
    """Resources bundled inside a Python package (default: ``sidel.data``)."""

    def __init__(self, package: str = "sidel.data"):
        self.package = package
        self.logger = get_logger("sidel.settings.resources")

    def _root(self):
        return resources.files(self.package)

    def get_text(self, name: str) -> Optional[str]:
        node = self._root()
        for part in PurePosixPath(name).parts:
            node = node.joinpath(part)
        try:
            if not node.is_file():
                return None
            return node.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Failed to read bundled resource {name}: {e}")
            return None

    def names(self) -> List[str]:
        found: List[str] = []

        def walk(node, prefix: str) -> None:
            for child in node.iterdir():
                child_name = f"{prefix}{child.name}"
                if child.is_dir():
                    if child.name != "__pycache__":
                        walk(child, f"{child_name}/")
                elif not child.name.endswith((".py", ".pyc")):
                    found.append(child_name)

        walk(self._root(), "")
        return sorted(found)


class LayeredResources(ResourceStore):
    """Queries stores in order; the first store holding a name wins."""

    def __init__(self, layers: Sequence[ResourceStore]):
        self.layers = tuple(layers)

    def get_text(self, name: str) -> Optional[str]:
        for layer in self.layers:
            text = layer.get_text(name)
            if text is not None:
                return text
        return None

    def names(self) -> List[str]:
        found = set()
        for layer in self.layers:
            found.update(layer.names())
        return sorted(found)
