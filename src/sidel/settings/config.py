# sidel/settings/config.py

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .. import __version__
from ..utils.exceptions import ConfigError
from ..utils.logger import get_logger

logger = get_logger("sidel.settings.config")


class AppConstants:
    """Library metadata and identification constants."""

    APP_NAME = "sidel"
    APP_TITLE = "Sidel"
    APP_VERSION = __version__


# Fallback color for languages without a usable definition.
DEFAULT_COLOR = "#D4D4D4"

# Per-rule budget for a single highlight call, in seconds.
DEFAULT_MATCH_TIMEOUT = 0.05

MANIFEST_RESOURCE = "manifest.toml"
SYNTAX_RESOURCE_DIR = "syntax"
SYNTAX_EXTENSION = ".sidel"

# Directory that overrides both user and bundled definitions.
SYNTAX_DIR_ENV = "SIDE_SYNTAX_DIR"
MATCH_TIMEOUT_ENV = "SIDEL_MATCH_TIMEOUT"


def syntax_resource_name(language: str) -> str:
    """Resource name of a language's definition file."""
    return f"{SYNTAX_RESOURCE_DIR}/{language}{SYNTAX_EXTENSION}"


class ConfigPaths:
    """XDG-aware configuration paths."""

    def __init__(self):
        self._setup_paths()

    def _setup_paths(self):
        self.CONFIG_DIR = self._get_config_dir()
        self.SYNTAX_DIR = self.CONFIG_DIR / SYNTAX_RESOURCE_DIR
        self.LOG_DIR = self.CONFIG_DIR / "logs"

    def _get_config_dir(self) -> Path:
        if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
            return Path(xdg_config) / AppConstants.APP_NAME
        return Path.home() / ".config" / AppConstants.APP_NAME


_config_paths: Optional[ConfigPaths] = None


def get_config_paths() -> ConfigPaths:
    """Get global configuration paths instance."""
    global _config_paths
    if _config_paths is None:
        _config_paths = ConfigPaths()
    return _config_paths


def parse_match_timeout(value) -> float:
    """Validate a match budget value, raising ConfigError when unusable."""
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(MATCH_TIMEOUT_ENV, value, "not a number")
    if timeout <= 0:
        raise ConfigError(MATCH_TIMEOUT_ENV, value, "must be positive")
    return timeout


@dataclass(frozen=True)
class SidelConfig:
    """
    Runtime configuration for a LanguageRegistry.

    Attributes:
        user_syntax_dirs: Directories searched before the bundled resources,
            highest precedence first. Each directory mirrors the bundled layout
            (``manifest.toml`` and ``syntax/<language>.sidel``); a bare
            directory of ``.sidel`` files is also accepted.
        match_timeout: Budget for one rule during one highlight call, seconds.
        manifest_name: Resource name of the extension manifest.
    """

    user_syntax_dirs: Tuple[Path, ...] = field(default_factory=tuple)
    match_timeout: float = DEFAULT_MATCH_TIMEOUT
    manifest_name: str = MANIFEST_RESOURCE

    @classmethod
    def from_env(cls, environ=None) -> "SidelConfig":
        """Build the configuration from the environment and the XDG config dir."""
        environ = os.environ if environ is None else environ

        dirs: List[Path] = []
        if override := environ.get(SYNTAX_DIR_ENV):
            dirs.append(Path(override).expanduser())
        dirs.append(get_config_paths().CONFIG_DIR)

        timeout = DEFAULT_MATCH_TIMEOUT
        if raw_timeout := environ.get(MATCH_TIMEOUT_ENV):
            try:
                timeout = parse_match_timeout(raw_timeout)
            except ConfigError as e:
                logger.warning(f"{e}; using {DEFAULT_MATCH_TIMEOUT}s")

        return cls(user_syntax_dirs=tuple(dirs), match_timeout=timeout)
