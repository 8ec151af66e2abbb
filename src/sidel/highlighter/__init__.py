# sidel/highlighter/__init__.py
"""
Rule-driven syntax highlighting.

This package provides:
- LanguageRegistry: filename -> language resolution and compiled-language cache
- highlight / highlight_lines: the pure highlight engine
- compile_language: the rule compiler
- render_ansi: terminal rendering of spans

Usage:
    from sidel.highlighter import LanguageRegistry, highlight

    registry = LanguageRegistry.from_environment()
    compiled = registry.get_compiled_language(registry.resolve_language("main.rs"))
    spans = highlight(text, compiled)
"""

from .engine import Span, highlight, highlight_lines, segments
from .output import render_ansi
from .registry import PLAIN_LANGUAGE, LanguageRegistry
from .rules import CompiledLanguage, CompiledRule, compile_language

__all__ = [
    "CompiledLanguage",
    "CompiledRule",
    "LanguageRegistry",
    "PLAIN_LANGUAGE",
    "Span",
    "compile_language",
    "highlight",
    "highlight_lines",
    "render_ansi",
    "segments",
]
