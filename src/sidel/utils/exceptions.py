# sidel/utils/exceptions.py

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    MANIFEST = "manifest"
    DEFINITION = "definition"
    RULE = "rule"
    MATCH = "match"
    CONFIG = "config"


class SidelError(Exception):
    """Base exception class for all sidel errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.DEFINITION,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.category.value.upper()}:{self.severity.value.upper()}] {self.message}"


class ManifestError(SidelError):
    """Raised for a manifest entry that cannot be registered."""

    def __init__(self, reason: str, entry_index: Optional[int] = None, **kwargs):
        if entry_index is None:
            message = f"Invalid manifest: {reason}"
        else:
            message = f"Invalid manifest entry #{entry_index}: {reason}"
        kwargs.setdefault("category", ErrorCategory.MANIFEST)
        kwargs.setdefault("details", {"entry_index": entry_index, "reason": reason})
        super().__init__(message, **kwargs)
        self.reason = reason
        self.entry_index = entry_index


class DefinitionParseError(SidelError):
    """Raised when a language definition is structurally broken."""

    def __init__(self, language: str, reason: str, **kwargs):
        message = f"Language definition '{language}' is unusable: {reason}"
        kwargs.setdefault("category", ErrorCategory.DEFINITION)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"language": language, "reason": reason})
        super().__init__(message, **kwargs)
        self.language = language
        self.reason = reason


class RuleError(SidelError):
    """Raised for a single invalid rule inside an otherwise valid definition."""

    def __init__(self, language: str, rule_index: int, reason: str, rule_name: str = "", **kwargs):
        label = f"'{rule_name}'" if rule_name else f"#{rule_index}"
        message = f"Rule {label} in '{language}' skipped: {reason}"
        kwargs.setdefault("category", ErrorCategory.RULE)
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        kwargs.setdefault(
            "details",
            {
                "language": language,
                "rule_index": rule_index,
                "rule_name": rule_name,
                "reason": reason,
            },
        )
        super().__init__(message, **kwargs)
        self.language = language
        self.rule_index = rule_index
        self.rule_name = rule_name
        self.reason = reason


class PatternCompileError(RuleError):
    """Raised when a rule's pattern is not a valid regular expression."""

    def __init__(self, language: str, rule_index: int, pattern: str, reason: str, rule_name: str = "", **kwargs):
        super().__init__(
            language,
            rule_index,
            f"invalid pattern {pattern!r}: {reason}",
            rule_name=rule_name,
            **kwargs,
        )
        self.pattern = pattern


class RuntimeMatchError(SidelError):
    """Raised when a rule exceeds its matching budget during a highlight call."""

    def __init__(self, language: str, rule_name: str, budget: Optional[float], **kwargs):
        limit = f"{budget:.3f}s" if budget is not None else "unbounded"
        message = (
            f"Rule '{rule_name}' in '{language}' exceeded its {limit} "
            "match budget; remaining matches abandoned"
        )
        kwargs.setdefault("category", ErrorCategory.MATCH)
        kwargs.setdefault("severity", ErrorSeverity.MEDIUM)
        kwargs.setdefault(
            "details", {"language": language, "rule_name": rule_name, "budget": budget}
        )
        super().__init__(message, **kwargs)
        self.language = language
        self.rule_name = rule_name
        self.budget = budget


class ConfigError(SidelError):
    """Raised for unusable configuration values."""

    def __init__(self, config_key: str, value: Any, reason: str, **kwargs):
        message = f"Invalid configuration for '{config_key}' (value: {value!r}): {reason}"
        kwargs.setdefault("category", ErrorCategory.CONFIG)
        kwargs.setdefault("details", {"config_key": config_key, "value": value, "reason": reason})
        super().__init__(message, **kwargs)
        self.config_key = config_key
