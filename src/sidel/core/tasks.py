# sidel/core/tasks.py
"""
Background highlight dispatching with last-request-wins per buffer.

Editors that move highlighting off their event thread submit a request for
every edit. Only the newest request for a buffer delivers its spans; older
requests still queued are cancelled and older requests already running have
their results dropped.

Usage:
    dispatcher = HighlightDispatcher(registry)
    dispatcher.submit("buffer-1", text, "rust", on_spans)
    ...
    dispatcher.shutdown()
"""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from ..highlighter.engine import Span
from ..highlighter.registry import LanguageRegistry
from ..utils.logger import get_logger, log_error_with_context

SpansCallback = Callable[[List[Span]], None]


class HighlightDispatcher:
    """Runs highlight requests on a worker pool, newest request per buffer wins."""

    POOL_SIZE = max(1, min(4, os.cpu_count() or 1))

    def __init__(self, registry: LanguageRegistry, max_workers: Optional[int] = None):
        self.logger = get_logger("sidel.core.tasks")
        self._registry = registry
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=max_workers or self.POOL_SIZE,
            thread_name_prefix="sidel-highlight",
        )
        self._lock = threading.Lock()
        # buffer_id -> generation of the newest request
        self._generations: Dict[str, int] = {}
        # buffer_id -> future of the newest request
        self._pending: Dict[str, Future] = {}
        self._is_shutdown = False

    def submit(
        self,
        buffer_id: str,
        text: str,
        language_id: Optional[str],
        callback: SpansCallback,
    ) -> Optional[Future]:
        """
        Queue a highlight request for a buffer.

        ``callback`` is invoked on a worker thread with the spans, and only if
        no newer request for the same buffer arrived in the meantime.

        Returns:
            The request's Future, or None if the dispatcher is shut down.
        """
        with self._lock:
            if self._is_shutdown or self._executor is None:
                self.logger.warning("Highlight request submitted after shutdown, ignoring")
                return None

            generation = self._generations.get(buffer_id, 0) + 1
            self._generations[buffer_id] = generation

            previous = self._pending.get(buffer_id)
            if previous is not None and previous.cancel():
                self.logger.debug(f"Cancelled queued request for buffer '{buffer_id}'")

            future = self._executor.submit(
                self._run, buffer_id, generation, text, language_id, callback
            )
            self._pending[buffer_id] = future
            return future

    def _is_current(self, buffer_id: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get(buffer_id) == generation

    def _run(
        self,
        buffer_id: str,
        generation: int,
        text: str,
        language_id: Optional[str],
        callback: SpansCallback,
    ) -> Optional[List[Span]]:
        if not self._is_current(buffer_id, generation):
            return None

        compiled = self._registry.get_compiled_language(language_id)
        spans = self._registry.highlight(text, compiled)

        if not self._is_current(buffer_id, generation):
            self.logger.debug(f"Dropped stale result for buffer '{buffer_id}'")
            return None

        try:
            callback(spans)
        except Exception as e:
            log_error_with_context(e, f"highlight callback for buffer '{buffer_id}'", "sidel.core.tasks")
        return spans

    def cancel(self, buffer_id: str) -> None:
        """Forget a buffer's pending request; any in-flight result for it is dropped."""
        with self._lock:
            # Never reset; a resubmitted buffer must not reuse a running request's generation.
            self._generations[buffer_id] = self._generations.get(buffer_id, 0) + 1
            future = self._pending.pop(buffer_id, None)
            if future is not None:
                future.cancel()

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the worker pool.

        Args:
            wait: If True, wait for running requests to finish.
        """
        with self._lock:
            if self._is_shutdown:
                return
            self._is_shutdown = True
            executor, self._executor = self._executor, None
            if not wait:
                self._generations.clear()
            self._pending.clear()

        if executor is not None:
            executor.shutdown(wait=wait, cancel_futures=not wait)
        self.logger.debug(f"HighlightDispatcher shut down (wait={wait})")
