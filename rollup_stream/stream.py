"""
Bundle Stream

The public push stream returned by ``rollup_stream()``. The stream object is
created synchronously; the pipeline that fills it runs as an asyncio task:

    CREATED -> RESOLVING -> INVOKING -> ANNOTATING -> EMITTED
        (any stage) -> FAILED

Three events are emitted:

- ``data``: at most once, with the whole bundle as a single ``str`` chunk
  (skipped when the bundle is empty)
- ``end``: exactly once on success, after ``data``
- ``error``: at most once, instead of ``data``/``end``, with the failing
  stage's exception unmodified

When the stream is created inside a running event loop the pipeline task is
scheduled immediately but only starts on the loop's next iteration, so
listeners attached right after the call never miss an event. Outside a loop
the pipeline starts when the stream is first consumed.

Usage:
    >>> stream = rollup_stream({"entry": "./main.js"})
    >>> stream.on("error", lambda e: print(e))
    >>> code = await stream.collect()
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from rollup_stream.backend.invoker import BundleInvoker
from rollup_stream.config.resolver import ConfigurationResolver
from rollup_stream.errors import RollupStreamError, StreamConsumedError
from rollup_stream.sourcemap import annotate


logger = logging.getLogger(__name__)

EVENTS = ("data", "end", "error")

Listener = Callable[..., Any]


class StreamState(Enum):
    """Lifecycle states of a bundle stream."""
    CREATED = "created"
    RESOLVING = "resolving"
    INVOKING = "invoking"
    ANNOTATING = "annotating"
    EMITTED = "emitted"
    FAILED = "failed"


TERMINAL_STATES = (StreamState.EMITTED, StreamState.FAILED)


@dataclass
class StageResult:
    """Outcome of one pipeline stage: a value or the error that stopped it."""
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BundleStream:
    """Single-producer, single-consumer stream of bundle output.

    Listeners are registered with ``on``/``once``; alternatively the stream
    can be consumed once with ``collect()``, ``async for`` or ``pipe()``,
    which raise the pipeline's error instead of returning output.
    """

    def __init__(
        self,
        options: Any = None,
        resolver: Optional[ConfigurationResolver] = None,
        invoker: Optional[BundleInvoker] = None,
    ):
        self.state = StreamState.CREATED
        self._resolver = resolver or ConfigurationResolver()
        self._invoker = invoker or BundleInvoker()
        self._listeners: Dict[str, List[Listener]] = {event: [] for event in EVENTS}
        self._chunks: List[str] = []
        self._error: Optional[BaseException] = None
        self._consumed = False
        self._error_observed = False
        self._task: Optional[asyncio.Task] = None

        try:
            self._captured = StageResult(value=self._resolver.capture(options))
        except RollupStreamError as e:
            self._captured = StageResult(error=e)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._start(loop)

    # Listener registration

    def on(self, event: str, listener: Listener) -> "BundleStream":
        """Register ``listener`` for ``event`` (data, end or error)."""
        self._check_event(event)
        self._listeners[event].append(listener)
        return self

    def once(self, event: str, listener: Listener) -> "BundleStream":
        """Register ``listener`` to run at most once."""
        self._check_event(event)

        def wrapper(*args):
            self.remove_listener(event, wrapper)
            return listener(*args)

        self._listeners[event].append(wrapper)
        return self

    def remove_listener(self, event: str, listener: Listener) -> "BundleStream":
        self._check_event(event)
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)
        return self

    def listener_count(self, event: str) -> int:
        self._check_event(event)
        return len(self._listeners[event])

    def _check_event(self, event: str) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown stream event '{event}'. Valid options: {', '.join(EVENTS)}")

    def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            listener(*args)

    # Pipeline

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def _start(self, loop: asyncio.AbstractEventLoop) -> None:
        self._task = loop.create_task(self._run())

    async def _attempt(self, stage: Callable[..., Any], *args: Any) -> StageResult:
        try:
            value = stage(*args)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            return StageResult(error=e)
        return StageResult(value=value)

    async def _run(self) -> None:
        self.state = StreamState.RESOLVING
        outcome = self._captured
        if outcome.ok:
            outcome = await self._attempt(self._resolver.resolve, outcome.value)
        if not outcome.ok:
            return self._fail(outcome.error)
        options = outcome.value

        self.state = StreamState.INVOKING
        outcome = await self._attempt(self._invoker.invoke, options)
        if not outcome.ok:
            return self._fail(outcome.error)
        result = outcome.value

        self.state = StreamState.ANNOTATING
        outcome = await self._attempt(annotate, result.code, result.map, options.source_map)
        if not outcome.ok:
            return self._fail(outcome.error)

        self._finish(outcome.value)

    def _finish(self, code: str) -> None:
        """Emit the bundle to listeners.

        A listener that raises aborts the stream: ``end`` is not emitted, the
        stream ends in FAILED and the exception propagates to whoever awaits
        the pipeline.
        """
        self._chunks = [code] if code else []
        try:
            for chunk in self._chunks:
                self._emit("data", chunk)
            self._emit("end")
        except Exception as e:
            self.state = StreamState.FAILED
            self._error = e
            self._error_observed = True
            logger.debug(f"Bundle stream listener failed: {type(e).__name__}: {e}")
            raise
        self.state = StreamState.EMITTED

    def _fail(self, error: BaseException) -> None:
        self.state = StreamState.FAILED
        self._error = error
        logger.debug(f"Bundle stream failed: {type(error).__name__}: {error}")

        if self._listeners["error"]:
            self._error_observed = True
            self._emit("error", error)

    def __del__(self):
        # Consumers may claim a failed stream late, so only a stream dropped
        # without an error listener or consumer reports its error.
        if getattr(self, "state", None) is StreamState.FAILED and not getattr(self, "_error_observed", True):
            logger.warning(f"Unhandled bundle stream error: {self._error}")

    # Consumption

    def _claim(self) -> None:
        if self._consumed:
            raise StreamConsumedError("Bundle stream has already been consumed")
        self._consumed = True
        self._error_observed = True
        if self._task is None:
            self._start(asyncio.get_running_loop())

    async def _outcome(self) -> List[str]:
        await self._task
        if self._error is not None:
            raise self._error
        return list(self._chunks)

    async def collect(self) -> str:
        """Wait for the pipeline and return the whole bundle.

        Raises:
            StreamConsumedError: If the stream was already consumed
            Exception: The error that failed the pipeline
        """
        self._claim()
        return "".join(await self._outcome())

    async def __aiter__(self) -> AsyncIterator[str]:
        self._claim()
        for chunk in await self._outcome():
            yield chunk

    async def pipe(self, sink: Any) -> Any:
        """Write the bundle to ``sink`` (anything with ``write``) and return it."""
        async for chunk in self:
            written = sink.write(chunk)
            if inspect.isawaitable(written):
                await written
        flush = getattr(sink, "flush", None)
        if callable(flush):
            flushed = flush()
            if inspect.isawaitable(flushed):
                await flushed
        return sink

    def __repr__(self) -> str:
        return f"<BundleStream state={self.state.value}>"


def rollup_stream(
    options: Any = None,
    resolver: Optional[ConfigurationResolver] = None,
    invoker: Optional[BundleInvoker] = None,
) -> BundleStream:
    """Bundle ``options`` and return a stream of the output.

    Args:
        options: Options mapping, or the path of a configuration file
        resolver: Optional resolver (e.g. with a custom config loader)
        invoker: Optional invoker (e.g. with a custom backend factory)

    Returns:
        A BundleStream, created before any asynchronous work begins
    """
    return BundleStream(options, resolver=resolver, invoker=invoker)
