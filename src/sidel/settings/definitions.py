# sidel/settings/definitions.py
"""
Language definition loading.

A definition is a TOML document holding a default color and an ordered list
of ``[[rule]]`` tables:

    default_color = "#D4D4D4"

    [[rule]]
    name = "Keyword"
    pattern = '\\b(fn|let)\\b'
    color = "#C586C0"
    priority = 10

Loading policy:
- A structurally broken definition (corrupt TOML, missing or invalid
  ``default_color``) disables highlighting for that language: the loader
  returns the fallback definition, which colors everything with the default.
- A single invalid rule is skipped with a warning; the remaining rules load.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import toml

from ..utils.exceptions import DefinitionParseError, RuleError
from ..utils.logger import get_logger
from .config import DEFAULT_COLOR, syntax_resource_name
from .resources import ResourceStore

# "#RGB", "#RRGGBB" or "#RRGGBBAA"
HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

RULE_KEYS = frozenset({"name", "pattern", "color", "priority"})
TOP_LEVEL_KEYS = frozenset({"default_color", "rule"})

logger = get_logger("sidel.settings.definitions")


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and HEX_COLOR_PATTERN.match(value) is not None


@dataclass(frozen=True, slots=True)
class Rule:
    """
    One pattern -> color binding.

    Attributes:
        name: Diagnostic label.
        pattern: Regular expression source.
        color: Hex color applied to matches.
        priority: Higher priority wins overlapping matches.
    """

    name: str
    pattern: str
    color: str
    priority: int

    @classmethod
    def from_dict(cls, data: Any, language: str, index: int) -> "Rule":
        """
        Validate one ``[[rule]]`` table.

        Raises:
            RuleError: when a required field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise RuleError(language, index, "rule is not a table")

        name = data.get("name")
        label = name if isinstance(name, str) else ""
        if not isinstance(name, str) or not name.strip():
            raise RuleError(language, index, "missing or empty 'name'")

        pattern = data.get("pattern")
        if not isinstance(pattern, str) or not pattern:
            raise RuleError(language, index, "missing or empty 'pattern'", label)

        color = data.get("color")
        if not is_hex_color(color):
            raise RuleError(language, index, f"invalid hex color {color!r}", label)

        priority = data.get("priority")
        # bool is an int subclass; "priority = true" is still an authoring error.
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise RuleError(language, index, f"priority must be an integer, got {priority!r}", label)

        return cls(name=name, pattern=pattern, color=color, priority=priority)


@dataclass(frozen=True, slots=True)
class LanguageDefinition:
    """A language's default color and its rules, in authored order."""

    name: str
    default_color: str
    rules: Tuple[Rule, ...] = ()
    is_fallback: bool = False
    warnings: Tuple[str, ...] = field(default=(), compare=False)


def fallback_definition(language: str, reason: str = "") -> LanguageDefinition:
    """Definition that renders everything in the default color."""
    warnings = (reason,) if reason else ()
    return LanguageDefinition(
        name=language,
        default_color=DEFAULT_COLOR,
        rules=(),
        is_fallback=True,
        warnings=warnings,
    )


def parse_definition(source: str, language: str) -> Tuple[LanguageDefinition, List[RuleError]]:
    """
    Parse the text of a ``.sidel`` file.

    Returns:
        The definition holding every valid rule, and the RuleErrors of the
        rules that were skipped.

    Raises:
        DefinitionParseError: the document as a whole is unusable.
    """
    try:
        data: Dict[str, Any] = toml.loads(source)
    except (toml.TomlDecodeError, IndexError, TypeError, ValueError) as e:
        raise DefinitionParseError(language, f"not valid TOML: {e}")

    default_color = data.get("default_color")
    if default_color is None:
        raise DefinitionParseError(language, "missing 'default_color'")
    if not is_hex_color(default_color):
        raise DefinitionParseError(language, f"invalid default_color {default_color!r}")

    raw_rules = data.get("rule", [])
    if not isinstance(raw_rules, list):
        raise DefinitionParseError(language, "'rule' must be an array of tables")

    if unknown := set(data) - TOP_LEVEL_KEYS:
        logger.debug(f"Ignoring unknown keys in '{language}': {sorted(unknown)}")

    rules: List[Rule] = []
    errors: List[RuleError] = []
    for index, raw in enumerate(raw_rules):
        try:
            rules.append(Rule.from_dict(raw, language, index))
        except RuleError as e:
            errors.append(e)
            continue
        if extra := set(raw) - RULE_KEYS:
            logger.debug(f"Ignoring unknown keys in '{language}' rule #{index}: {sorted(extra)}")

    definition = LanguageDefinition(
        name=language,
        default_color=default_color,
        rules=tuple(rules),
        warnings=tuple(str(e) for e in errors),
    )
    return definition, errors


class DefinitionLoader:
    """Loads language definitions from a resource store, never raising."""

    def __init__(self, resources: ResourceStore):
        self.logger = get_logger("sidel.settings.definitions")
        self._resources = resources

    def read_source(self, language: str) -> Optional[str]:
        return self._resources.get_text(syntax_resource_name(language))

    def load(self, language: str) -> LanguageDefinition:
        """
        Load one language.

        Missing or structurally broken sources produce the fallback
        definition; invalid rules are dropped with a warning.
        """
        source = self.read_source(language)
        if source is None:
            self.logger.debug(f"No definition for '{language}', using default color only")
            return fallback_definition(language)

        try:
            definition, rule_errors = parse_definition(source, language)
        except DefinitionParseError as e:
            self.logger.error(str(e))
            return fallback_definition(language, str(e))

        for error in rule_errors:
            self.logger.warning(str(error))

        self.logger.debug(
            f"Loaded '{language}': {len(definition.rules)} rules, "
            f"{len(rule_errors)} skipped"
        )
        return definition
