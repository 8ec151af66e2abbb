# sidel/highlighter/rules.py
"""
Rule compiler.

This module contains:
- CompiledRule: a rule whose pattern is compiled once, at load time
- CompiledLanguage: the immutable, priority-sorted rule set used by the engine
- compile_language: turns a LanguageDefinition into a CompiledLanguage
- Helpers that derive literal pre-filters from keyword alternations
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import regex as re_engine

from ..settings.definitions import LanguageDefinition, Rule
from ..utils.exceptions import PatternCompileError
from ..utils.logger import get_logger
from .constants import KEYWORD_PART_PATTERN, KEYWORD_PATTERN, PATTERN_FLAGS

logger = get_logger("sidel.highlighter.rules")


def smart_split_alternation(inner: str) -> List[str]:
    """
    Split a regex alternation on | characters that are not inside parentheses.

    Example: "error|fail(?:ure|ed)?|fatal" -> ["error", "fail(?:ure|ed)?", "fatal"]
    """
    parts = []
    current = ""
    depth = 0
    for char in inner:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "|" and depth == 0:
            parts.append(current)
            current = ""
            continue
        current += char
    parts.append(current)
    return parts


def extract_literal_keywords(pattern: str) -> Optional[Tuple[str, ...]]:
    """
    Extract the literal stems of a word-boundary keyword alternation.

    ``\\b(fn|let|match(?:es)?)\\b`` yields ``('fn', 'let', 'match')``. Every
    match of the pattern contains one of the stems, so a text containing none
    of them cannot match.

    Returns None if the pattern is not a simple keyword alternation.
    """
    match = KEYWORD_PATTERN.match(pattern)
    if not match:
        return None

    stems = []
    for part in smart_split_alternation(match.group(1)):
        part_match = KEYWORD_PART_PATTERN.match(part)
        if not part_match:
            return None
        stem = part_match.group(1)
        if stem not in stems:
            stems.append(stem)

    return tuple(stems) if stems else None


@dataclass(frozen=True, slots=True)
class CompiledRule:
    """
    A rule with its pattern compiled into a reusable matcher.

    Attributes:
        name: Diagnostic label from the definition.
        matcher: Compiled ``regex`` pattern.
        color: Hex color for matches.
        priority: Conflict priority, higher wins.
        order: Position of the rule in the authored definition.
        literals: Stems of which at least one must occur for a match, or None.
    """

    name: str
    matcher: Any
    color: str
    priority: int
    order: int
    literals: Optional[Tuple[str, ...]] = None

    def may_match(self, text: str) -> bool:
        """Cheap test that rules out texts that cannot match."""
        if self.literals is None:
            return True
        return any(literal in text for literal in self.literals)


@dataclass(frozen=True, slots=True)
class CompiledLanguage:
    """Immutable rule set, sorted by descending priority then authored order."""

    name: str
    default_color: str
    rules: Tuple[CompiledRule, ...] = ()
    is_fallback: bool = False
    warnings: Tuple[str, ...] = field(default=(), compare=False)


def compile_rule(rule: Rule, order: int, language: str) -> CompiledRule:
    """
    Compile a single rule.

    Raises:
        PatternCompileError: the pattern is not a valid regular expression.
    """
    try:
        matcher = re_engine.compile(rule.pattern, PATTERN_FLAGS)
    except (re_engine.error, ValueError, TypeError) as e:
        raise PatternCompileError(language, order, rule.pattern, str(e), rule.name)

    return CompiledRule(
        name=rule.name,
        matcher=matcher,
        color=rule.color,
        priority=rule.priority,
        order=order,
        literals=extract_literal_keywords(rule.pattern),
    )


def compile_language(definition: LanguageDefinition) -> CompiledLanguage:
    """
    Compile every rule of a definition and sort the survivors by priority.

    Rules whose pattern fails to compile are skipped with a warning; the rest
    of the language is unaffected.
    """
    compiled: List[CompiledRule] = []
    warnings = list(definition.warnings)
    literal_count = 0

    for order, rule in enumerate(definition.rules):
        try:
            compiled_rule = compile_rule(rule, order, definition.name)
        except PatternCompileError as e:
            logger.warning(str(e))
            warnings.append(str(e))
            continue
        if compiled_rule.literals is not None:
            literal_count += 1
        compiled.append(compiled_rule)

    # sorted() is stable, so equal priorities keep their authored order.
    compiled = sorted(compiled, key=lambda r: -r.priority)

    logger.debug(
        f"Compiled {len(compiled)}/{len(definition.rules)} rules for "
        f"'{definition.name}' ({literal_count} with literal pre-filters)"
    )
    return CompiledLanguage(
        name=definition.name,
        default_color=definition.default_color,
        rules=tuple(compiled),
        is_fallback=definition.is_fallback,
        warnings=tuple(warnings),
    )
