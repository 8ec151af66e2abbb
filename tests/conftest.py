import logging
import textwrap

import pytest

from sidel.highlighter.registry import LanguageRegistry
from sidel.highlighter.rules import compile_language
from sidel.settings.config import SidelConfig, syntax_resource_name
from sidel.settings.definitions import parse_definition
from sidel.settings.resources import MemoryResources
from sidel.utils.logger import LoggerManager

KEYWORD_DEFINITION = textwrap.dedent(
    """
    default_color = "#D4D4D4"

    [[rule]]
    name = "Keyword"
    pattern = '\\b(fn|let)\\b'
    color = "#C586C0"
    priority = 10
    """
)

TEST_MANIFEST = textwrap.dedent(
    """
    [[language]]
    name = "mini"
    extensions = ["mini", "mn"]

    [[language]]
    name = "broken"
    extensions = ["brk"]
    """
)


def compile_source(source: str, name: str = "test"):
    definition, _errors = parse_definition(textwrap.dedent(source), name)
    return compile_language(definition)


def make_registry(definitions=None, manifest=TEST_MANIFEST, **config) -> LanguageRegistry:
    texts = {"manifest.toml": textwrap.dedent(manifest)}
    for name, source in (definitions or {}).items():
        texts[syntax_resource_name(name)] = textwrap.dedent(source)
    return LanguageRegistry(MemoryResources(texts), SidelConfig(**config))


def assert_partition(text, spans):
    """Spans are sorted, non-empty, non-overlapping and cover text exactly."""
    if not text:
        assert spans == []
        return
    assert spans[0].start == 0
    assert spans[-1].end == len(text)
    for span in spans:
        assert span.start < span.end
    for left, right in zip(spans, spans[1:]):
        assert left.end == right.start


@pytest.fixture
def keyword_language():
    return compile_source(KEYWORD_DEFINITION, "mini")


@pytest.fixture
def registry():
    return make_registry(
        {
            "mini": KEYWORD_DEFINITION,
            "broken": "default_color = \n[[rule]\n",
        }
    )


@pytest.fixture
def sidel_caplog(caplog):
    """caplog wired to the sidel loggers, which do not propagate to the root logger."""
    loggers = [logging.getLogger(name) for name in list(LoggerManager()._loggers)]
    for logger in loggers:
        logger.addHandler(caplog.handler)
    yield caplog
    for logger in loggers:
        logger.removeHandler(caplog.handler)
