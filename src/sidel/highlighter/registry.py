# sidel/highlighter/registry.py
"""
Language registry: the context object that ties the manifest, the definition
loader, the rule compiler and the engine together.

A registry is built once at startup and passed to whatever needs
highlighting. Compiled languages are cached per registry for its lifetime;
separate registries (e.g. in tests) share nothing.
"""

import threading
from pathlib import Path
from typing import Dict, List, Optional

from ..settings.config import DEFAULT_COLOR, SidelConfig, syntax_resource_name
from ..settings.definitions import DefinitionLoader
from ..settings.manifest import ManifestEntry, ManifestRegistry
from ..settings.resources import (
    DirectoryResources,
    LayeredResources,
    MemoryResources,
    PackageResources,
    ResourceStore,
)
from ..utils.logger import get_logger
from .constants import BUILTIN_SIDEL_DEFINITION, SIDEL_EXTENSIONS, SIDEL_LANGUAGE
from .engine import Span, highlight
from .rules import CompiledLanguage, compile_language

PLAIN_LANGUAGE = "plain"


def builtin_resources() -> MemoryResources:
    """Resources compiled into the library rather than shipped as data files."""
    return MemoryResources({syntax_resource_name(SIDEL_LANGUAGE): BUILTIN_SIDEL_DEFINITION})


def default_resources(config: SidelConfig) -> ResourceStore:
    """User directories first, then bundled data, then built-ins."""
    layers: List[ResourceStore] = [DirectoryResources(Path(d)) for d in config.user_syntax_dirs]
    layers.append(PackageResources())
    layers.append(builtin_resources())
    return LayeredResources(layers)


class LanguageRegistry:
    """
    Resolves files to languages and hands out compiled languages.

    Usage:
        registry = LanguageRegistry.from_environment()
        language_id = registry.resolve_language("main.rs")
        compiled = registry.get_compiled_language(language_id)
        spans = registry.highlight(text, compiled)
    """

    def __init__(
        self,
        resources: Optional[ResourceStore] = None,
        config: Optional[SidelConfig] = None,
    ):
        self.logger = get_logger("sidel.highlighter.registry")
        self.config = config or SidelConfig()
        if resources is None:
            resources = default_resources(self.config)
        else:
            resources = LayeredResources([resources, builtin_resources()])
        self._resources = resources

        self._loader = DefinitionLoader(resources)
        self._manifest = ManifestRegistry()
        self._cache: Dict[str, CompiledLanguage] = {}
        self._lock = threading.Lock()

        self._load_manifest()
        self._plain = CompiledLanguage(
            name=PLAIN_LANGUAGE, default_color=DEFAULT_COLOR, is_fallback=True
        )

    @classmethod
    def from_environment(cls) -> "LanguageRegistry":
        """Registry over the user's config directory and the bundled data."""
        return cls(config=SidelConfig.from_env())

    def _load_manifest(self) -> None:
        source = self._resources.get_text(self.config.manifest_name)
        if source is None:
            self.logger.warning(f"Manifest '{self.config.manifest_name}' not found")
        else:
            self._manifest.load(source)

        # The rule file format highlights itself like any other language.
        if not self._manifest.has_language(SIDEL_LANGUAGE):
            self._manifest.register(ManifestEntry(SIDEL_LANGUAGE, SIDEL_EXTENSIONS))

        self.logger.info(
            f"Registered {len(self._manifest.languages())} languages "
            f"({len(self._manifest.errors)} manifest errors)"
        )

    @property
    def manifest(self) -> ManifestRegistry:
        return self._manifest

    @property
    def resources(self) -> ResourceStore:
        return self._resources

    def languages(self) -> List[str]:
        return self._manifest.languages()

    def resolve_language(self, filename) -> Optional[str]:
        """Language id for a filename, or None so the caller can use plain text."""
        return self._manifest.resolve_filename(filename)

    def get_compiled_language(self, language_id: Optional[str]) -> CompiledLanguage:
        """
        Load, compile and cache a language.

        Never raises: unknown or broken languages compile to a rule-less
        language that renders in the default color. Concurrent first requests
        for the same language produce a single shared instance.
        """
        if not language_id:
            return self._plain

        compiled = self._cache.get(language_id)
        if compiled is not None:
            return compiled

        with self._lock:
            compiled = self._cache.get(language_id)
            if compiled is None:
                compiled = compile_language(self._loader.load(language_id))
                self._cache[language_id] = compiled
                self.logger.debug(f"Cached compiled language '{language_id}'")
        return compiled

    def language_for_file(self, filename) -> CompiledLanguage:
        """Compiled language for a file, plain text when nothing matches."""
        return self.get_compiled_language(self.resolve_language(filename))

    def preload(self) -> None:
        """Eagerly compile every language in the manifest."""
        for name in self.languages():
            self.get_compiled_language(name)

    def is_cached(self, language_id: str) -> bool:
        return language_id in self._cache

    def highlight(self, text: str, language: CompiledLanguage) -> List[Span]:
        """``highlight`` with this registry's configured match budget."""
        return highlight(text, language, self.config.match_timeout)

    def highlight_file(self, filename, text: str) -> List[Span]:
        return self.highlight(text, self.language_for_file(filename))
