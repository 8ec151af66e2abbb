# sidel/settings/__init__.py
"""Configuration, resources, the extension manifest and definition loading."""

from .config import DEFAULT_COLOR, DEFAULT_MATCH_TIMEOUT, SidelConfig
from .definitions import DefinitionLoader, LanguageDefinition, Rule, parse_definition
from .manifest import ManifestEntry, ManifestRegistry
from .resources import (
    DirectoryResources,
    LayeredResources,
    MemoryResources,
    PackageResources,
    ResourceStore,
)

__all__ = [
    "DEFAULT_COLOR",
    "DEFAULT_MATCH_TIMEOUT",
    "DefinitionLoader",
    "DirectoryResources",
    "LanguageDefinition",
    "LayeredResources",
    "ManifestEntry",
    "ManifestRegistry",
    "MemoryResources",
    "PackageResources",
    "ResourceStore",
    "Rule",
    "SidelConfig",
    "parse_definition",
]
