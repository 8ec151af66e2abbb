# sidel/highlighter/engine.py
"""
Highlight engine.

``highlight`` turns a text and a CompiledLanguage into a sorted, gap-free,
non-overlapping list of colored spans. It is a pure function of its inputs:
no caches, no I/O, no compilation, so it is safe to call from any thread on
every edit.

Resolution is priority-first: rules are applied in descending priority and a
rule may only color characters that no earlier rule has claimed.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from ..settings.config import DEFAULT_MATCH_TIMEOUT
from ..utils.exceptions import RuntimeMatchError
from ..utils.logger import get_logger
from .rules import CompiledLanguage, CompiledRule

logger = get_logger("sidel.highlighter.engine")

# (start, end, color, rule name)
_Claim = Tuple[int, int, str, str]


@dataclass(frozen=True, slots=True)
class Span:
    """
    A colored character range ``[start, end)``.

    ``rule`` names the rule that produced the span (empty for default-colored
    gaps); it is diagnostic only and ignored by equality.
    """

    start: int
    end: int
    color: str
    rule: str = field(default="", compare=False)

    @property
    def length(self) -> int:
        return self.end - self.start


def _scan_rule(
    text: str,
    rule: CompiledRule,
    language: str,
    match_timeout: Optional[float],
    errors: Optional[List[RuntimeMatchError]],
) -> List[Tuple[int, int]]:
    """Non-empty, non-overlapping matches of one rule, in text order."""
    matches = []
    try:
        for match in rule.matcher.finditer(text, timeout=match_timeout):
            start, end = match.span()
            # Zero-width matches would produce empty spans.
            if start != end:
                matches.append((start, end))
    except TimeoutError:
        error = RuntimeMatchError(language, rule.name, match_timeout)
        logger.warning(str(error))
        if errors is not None:
            errors.append(error)
    return matches


def _claim(claimed: List[_Claim], matches: List[Tuple[int, int]], rule: CompiledRule) -> List[_Claim]:
    """
    Merge one rule's matches into the claimed ranges.

    Both inputs are sorted and internally disjoint. Parts of a match that
    overlap an existing claim are clipped away; the remainder is claimed for
    ``rule``. Runs in a single linear pass over both lists.
    """
    result: List[_Claim] = []
    i = 0
    count = len(claimed)

    for start, end in matches:
        while i < count and claimed[i][1] <= start:
            result.append(claimed[i])
            i += 1

        cursor = start
        while cursor < end:
            if i < count and claimed[i][0] < end:
                claim_start, claim_end = claimed[i][0], claimed[i][1]
                if claim_start > cursor:
                    result.append((cursor, claim_start, rule.color, rule.name))
                cursor = max(cursor, claim_end)
                if claim_end > end:
                    # Still needed for the next match; emitted later.
                    break
                result.append(claimed[i])
                i += 1
            else:
                result.append((cursor, end, rule.color, rule.name))
                cursor = end

    result.extend(claimed[i:])
    return result


def _fill_gaps(claimed: List[_Claim], length: int, default_color: str) -> List[Span]:
    spans: List[Span] = []
    position = 0
    for start, end, color, name in claimed:
        if start > position:
            spans.append(Span(position, start, default_color))
        spans.append(Span(start, end, color, name))
        position = end
    if position < length:
        spans.append(Span(position, length, default_color))
    return spans


def highlight(
    text: str,
    language: CompiledLanguage,
    match_timeout: Optional[float] = DEFAULT_MATCH_TIMEOUT,
    errors: Optional[List[RuntimeMatchError]] = None,
) -> List[Span]:
    """
    Color a text with a compiled language.

    Args:
        text: Whole document or any slice of it, e.g. a single line.
        language: Pre-compiled rule set.
        match_timeout: Budget in seconds for each rule during this call, or
            None for no limit. A rule that runs out keeps the matches found so
            far and its remaining matches are abandoned.
        errors: Optional list that receives a RuntimeMatchError for every rule
            that exhausted its budget.

    Returns:
        Spans sorted by start that partition ``text`` exactly; empty for an
        empty text.
    """
    if not text:
        return []

    claimed: List[_Claim] = []
    for rule in language.rules:
        if not rule.may_match(text):
            continue
        matches = _scan_rule(text, rule, language.name, match_timeout, errors)
        if matches:
            claimed = _claim(claimed, matches, rule)

    return _fill_gaps(claimed, len(text), language.default_color)


def highlight_lines(
    text: str,
    language: CompiledLanguage,
    match_timeout: Optional[float] = DEFAULT_MATCH_TIMEOUT,
) -> List[List[Span]]:
    """
    Highlight each ``\\n``-separated line independently.

    Offsets are relative to the start of each line and the newline itself is
    not part of any line. Patterns that would span a line boundary cannot
    match here; that is a limitation of line-wise highlighting.
    """
    return [highlight(line, language, match_timeout) for line in text.split("\n")]


def segments(text: str, spans: List[Span]) -> Iterator[Tuple[str, str]]:
    """Yield ``(substring, color)`` pairs for rendering."""
    for span in spans:
        yield text[span.start:span.end], span.color
