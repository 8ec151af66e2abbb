# sidel/highlighter/constants.py
"""
Constants and pre-compiled patterns for the highlighter.

This module contains:
- Keyword alternation detection used for literal pre-filters
- ANSI sequences for the terminal renderer
- The built-in definition for ``.sidel`` files
"""

import re

import regex as re_engine

# Matches the outer shape of \b(word1|word2(?:suffix)?)\b
KEYWORD_PATTERN = re.compile(r"^\\b\(([a-zA-Z_|?:()]+)\)\\b$")

# Part of a keyword alternation: a literal word, optionally followed by
# (?:suffix1|suffix2) with or without a trailing "?".
KEYWORD_PART_PATTERN = re.compile(r"^([a-zA-Z_]+)(?:\(\?:[a-zA-Z_|]+\)\??)?$")

# Flags for every rule pattern; MULTILINE makes ^ and $ line anchors so a
# whole document and its individual lines highlight the same way.
PATTERN_FLAGS = re_engine.MULTILINE | re_engine.VERSION0

ANSI_RESET = "\033[0m"
ANSI_FOREGROUND = "\033[38;2;{};{};{}m"

SIDEL_LANGUAGE = "sidel"
SIDEL_EXTENSIONS = ("sidel",)

# Highlighting for the rule files themselves, registered like any language.
BUILTIN_SIDEL_DEFINITION = r"""
default_color = "#D4D4D4"

[[rule]]
name = "Comment"
pattern = "(?<=^(?:[^\"'\\n#]|\"[^\"\\n]*\"|'[^'\\n]*')*)#.*"
color = "#6A9955"
priority = 100

[[rule]]
name = "Literal String"
pattern = "'[^'\\n]*'"
color = "#CE9178"
priority = 90

[[rule]]
name = "Hex Color"
pattern = '"#(?:[0-9A-Fa-f]{8}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})"'
color = "#4EC9B0"
priority = 85

[[rule]]
name = "String"
pattern = '"(?:[^"\\\n]|\\.)*"'
color = "#CE9178"
priority = 80

[[rule]]
name = "Table Header"
pattern = '^[ \t]*\[\[?[A-Za-z_][A-Za-z0-9_.]*\]\]?'
color = "#569CD6"
priority = 70

[[rule]]
name = "Key"
pattern = '^[ \t]*[A-Za-z_][A-Za-z0-9_]*(?=\s*=)'
color = "#9CDCFE"
priority = 60

[[rule]]
name = "Number"
pattern = '(?<![\w.])[-+]?\d+(?![\w.])'
color = "#B5CEA8"
priority = 50

[[rule]]
name = "Boolean"
pattern = '\b(true|false)\b'
color = "#569CD6"
priority = 50
"""
