import threading

import pytest

from conftest import KEYWORD_DEFINITION, make_registry

from sidel.core.tasks import HighlightDispatcher
from sidel.highlighter import Span


class _BlockingRegistry:
    """Wraps a registry so the first highlight call waits for a signal."""

    def __init__(self, registry):
        self._registry = registry
        self.started = threading.Event()
        self.release = threading.Event()
        self._first = True

    def get_compiled_language(self, language_id):
        return self._registry.get_compiled_language(language_id)

    def highlight(self, text, compiled):
        if self._first:
            self._first = False
            self.started.set()
            assert self.release.wait(5)
        return self._registry.highlight(text, compiled)


@pytest.fixture
def dispatcher():
    created = []

    def factory(registry, max_workers=1):
        instance = HighlightDispatcher(registry, max_workers=max_workers)
        created.append(instance)
        return instance

    yield factory
    for instance in created:
        instance.shutdown(wait=True)


def test_submit_delivers_spans(dispatcher):
    registry = make_registry({"mini": KEYWORD_DEFINITION})
    received = []
    future = dispatcher(registry).submit("buf", "fn x", "mini", received.append)

    assert future.result(timeout=5) == [Span(0, 2, "#C586C0"), Span(2, 4, "#D4D4D4")]
    assert received == [[Span(0, 2, "#C586C0"), Span(2, 4, "#D4D4D4")]]


def test_last_request_wins(dispatcher):
    blocking = _BlockingRegistry(make_registry({"mini": KEYWORD_DEFINITION}))
    instance = dispatcher(blocking)
    received = []

    running = instance.submit("buf", "let", "mini", lambda spans: received.append(("first", spans)))
    assert blocking.started.wait(5)

    queued = instance.submit("buf", "x", "mini", lambda spans: received.append(("second", spans)))
    newest = instance.submit("buf", "fn", "mini", lambda spans: received.append(("third", spans)))

    assert queued.cancelled()
    blocking.release.set()

    assert newest.result(timeout=5) == [Span(0, 2, "#C586C0")]
    assert running.result(timeout=5) is None
    assert received == [("third", [Span(0, 2, "#C586C0")])]


def test_buffers_are_independent(dispatcher):
    registry = make_registry({"mini": KEYWORD_DEFINITION})
    instance = dispatcher(registry, max_workers=2)
    results = {}

    first = instance.submit("a", "fn", "mini", lambda spans: results.setdefault("a", spans))
    second = instance.submit("b", "let", "mini", lambda spans: results.setdefault("b", spans))
    first.result(timeout=5)
    second.result(timeout=5)

    assert results == {"a": [Span(0, 2, "#C586C0")], "b": [Span(0, 3, "#C586C0")]}


def test_cancel_drops_in_flight_result(dispatcher):
    blocking = _BlockingRegistry(make_registry({"mini": KEYWORD_DEFINITION}))
    instance = dispatcher(blocking)
    received = []

    future = instance.submit("buf", "fn", "mini", received.append)
    assert blocking.started.wait(5)
    instance.cancel("buf")
    blocking.release.set()

    assert future.result(timeout=5) is None
    assert received == []


def test_cancelled_request_finishing_after_resubmit_is_dropped(dispatcher):
    blocking = _BlockingRegistry(make_registry({"mini": KEYWORD_DEFINITION}))
    instance = dispatcher(blocking, max_workers=2)
    delivered = []

    old = instance.submit("buf", "let", "mini", lambda spans: delivered.append("old"))
    assert blocking.started.wait(5)
    instance.cancel("buf")

    new = instance.submit("buf", "fn", "mini", lambda spans: delivered.append("new"))
    assert new.result(timeout=5) == [Span(0, 2, "#C586C0")]

    blocking.release.set()
    assert old.result(timeout=5) is None
    assert delivered == ["new"]


def test_failing_callback_is_contained(dispatcher):
    registry = make_registry({"mini": KEYWORD_DEFINITION})

    def explode(spans):
        raise RuntimeError("boom")

    future = dispatcher(registry).submit("buf", "fn", "mini", explode)
    assert future.result(timeout=5) == [Span(0, 2, "#C586C0")]


def test_unknown_language_uses_default_color(dispatcher):
    registry = make_registry()
    future = dispatcher(registry).submit("buf", "text", None, lambda spans: None)
    assert future.result(timeout=5) == [Span(0, 4, "#D4D4D4")]


def test_submit_after_shutdown_is_ignored():
    instance = HighlightDispatcher(make_registry(), max_workers=1)
    instance.shutdown(wait=True)
    assert instance.submit("buf", "x", None, lambda spans: None) is None
    instance.shutdown()
