"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Iterative map/reduce coordinator.

Keys are mapped to futures, successful results are folded into an
accumulator, and the reduce and end functions may feed new keys back in
until no work remains::

    coordinator = IterativeCoordinator([root])
    coordinator.init(set())
    coordinator.reduce(lambda seen, page, remap, key, *_: visit(seen, page, remap))
    coordinator.map(fetch_page)  # starts immediately, initial keys are set
    seen = await coordinator
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from collections.abc import Callable, Generator, Iterable, Sized
from typing import Any

from ..observability.metrics import (
    END_CYCLES,
    KEYS_DUPLICATE,
    KEYS_MAPPED,
    KEYS_REJECTED,
    KEYS_RESOLVED,
    REDUCE_APPLIED,
    CoordinatorMetrics,
    NoOpCoordinatorMetrics,
)
from ..observability.sinks import create_telemetry_sink
from ..observability.telemetry import (
    COORDINATOR_SETTLED,
    COORDINATOR_STARTED,
    END_FIRED,
    KEY_MAPPED,
    KEY_REJECTED,
    KEY_RESOLVED,
    RUN_SPAN,
    JSONValue,
    TelemetryEvent,
    TelemetrySink,
    TelemetrySpan,
    describe_key,
    now_ms,
)
from .config import CoordinatorConfig
from .errors import (
    CoordinatorConfigurationError,
    CoordinatorRejectedError,
    MapFunctionNotConfiguredError,
)
from .futures import failed, normalize, payload_of
from .registry import KeyEquality, KeyRegistry, default_equals
from .types import CoordinatorSnapshot, CoordinatorState, EndFn, MapFn, ReduceFn

logger = logging.getLogger("itermap.core.coordinator")

_UNSET: Any = object()


class IterativeCoordinator:
    """
    Self-feeding asynchronous map/reduce process.

    The coordinator owns an ``asyncio.Future`` that settles exactly once:
    resolved with the final accumulator by the end step, or resolved/rejected
    explicitly through ``resolve``/``reject`` at any time. It is awaitable.

    Individual key failures never reject the coordinator; they are listed in
    ``rejected_keys`` for the reduce and end functions to judge.
    """

    def __init__(
        self,
        keys: Iterable[Any] | None = None,
        *,
        equals: KeyEquality | None = None,
        name: str | None = None,
        config: CoordinatorConfig | None = None,
        metrics: CoordinatorMetrics | None = None,
        telemetry: TelemetrySink | str | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[Any] = self._loop.create_future()
        self._config = config or CoordinatorConfig()
        self._metrics: CoordinatorMetrics = metrics or NoOpCoordinatorMetrics()
        self._telemetry = create_telemetry_sink(
            telemetry if telemetry is not None else self._config.telemetry_backend
        )
        self._id = uuid.uuid4().hex
        self._name = name
        self._tags = {"coordinator": name or "default"}

        self._equals = equals or default_equals
        custom_equality = (
            equals is not None
            or type(self).equal_keys is not IterativeCoordinator.equal_keys
        )
        self._registry = KeyRegistry(
            equals=self.equal_keys if custom_equality else None
        )

        self._initial_keys = keys
        self._map_fn: MapFn | None = None
        self._reduce_fn: ReduceFn | None = None
        self._end_fn: EndFn | None = None
        self._accumulator: Any = None

        self._started = False
        self._end_due = False
        self._cycles = 0
        self._in_flight = 0
        self._outstanding: set[asyncio.Future[Any]] = set()
        self._resolved: list[Any] = []
        self._rejected: list[Any] = []
        self._pending_reduces: deque[tuple[Any, tuple[Any, ...]]] = deque()
        self._auto_resolve: asyncio.Handle | None = None
        self._span: TelemetrySpan | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def map(self, map_fn: MapFn) -> IterativeCoordinator:
        """
        Set the map function and start if initial keys are already known.

        ``map_fn(key)`` returns an awaitable, a future, a plain value (treated
        as an immediate success) or ``None`` for "nothing to wait for".
        """
        self._map_fn = _require_callable("map", map_fn)
        if self._initial_keys is not None:
            self.start()
        return self

    def init(self, value: Any) -> IterativeCoordinator:
        """Set the accumulator seed."""
        self._accumulator = value
        return self

    def reduce(
        self, reduce_fn: ReduceFn, initial: Any = _UNSET
    ) -> IterativeCoordinator:
        """
        Set the reduce function, replaying results that arrived before it.

        Called as ``reduce_fn(previous, *payload, remap, key, resolved,
        rejected)`` and returns the next accumulator. ``remap(key)`` submits a
        new key and returns whether it was accepted. To stop early call
        ``resolve``/``reject`` on the coordinator.
        """
        self._reduce_fn = _require_callable("reduce", reduce_fn)
        if initial is not _UNSET:
            self.init(initial)

        while self._pending_reduces and not self._future.done():
            key, payload = self._pending_reduces.popleft()
            self._launch_reduce(key, payload)
        return self

    def end(self, end_fn: EndFn) -> IterativeCoordinator:
        """
        Set the end function, firing it at once if the process is idle.

        Called as ``end_fn(result, remap, resolved, rejected)`` whenever no
        mapped future is outstanding and no reduce is buffered. Keys handed to
        ``remap`` start another cycle; otherwise the process resolves with
        ``result`` unless the end function settled it itself. Remapping when
        no map function is set fails like an end function that raised.
        """
        self._end_fn = _require_callable("end", end_fn)
        if self._end_due and self._is_quiescent():
            self._launch_end()
        return self

    def start(self, keys: Iterable[Any] | None = None) -> IterativeCoordinator:
        """Map the initial keys. Only the first call has any effect."""
        if self._started:
            return self
        if keys is not None:
            self._initial_keys = keys
        if self._initial_keys is None:
            raise CoordinatorConfigurationError(
                "No keys to map: pass keys to the constructor or to start()"
            )

        initial = self._initial_keys
        if not isinstance(initial, Sized):
            initial = list(initial)
            self._initial_keys = initial
        count = len(initial)
        if count and self._map_fn is None:
            raise MapFunctionNotConfiguredError(
                "A map function must be set before starting with keys"
            )

        self._started = True
        self._span = self._telemetry.start_span(
            RUN_SPAN, attributes=self._attributes(initial_keys=count)
        )
        self._emit(COORDINATOR_STARTED, initial_keys=count)
        logger.debug("Coordinator %s starting with %d key(s)", self._label, count)

        for key in initial:
            self.submit_key(key)
        self._check_finish()
        return self

    def equal_keys(self, key1: Any, key2: Any) -> bool:
        """Whether two keys designate the same unit of work."""
        return self._equals(key1, key2)

    # ------------------------------------------------------------------
    # Key registry
    # ------------------------------------------------------------------

    def submit_key(self, key: Any) -> bool:
        """
        Map ``key`` unless an equal key was already mapped.

        Returns True when the key was newly registered, including keys whose
        map function returned ``None``.
        """
        if self._future.done():
            logger.debug("Coordinator %s is settled; ignoring key %r", self._label, key)
            return False
        if self._map_fn is None:
            raise MapFunctionNotConfiguredError(
                f"Cannot map key {key!r}: no map function configured"
            )
        if not self._registry.add(key):
            self._metrics.incr(KEYS_DUPLICATE, tags=self._tags)
            logger.debug("Coordinator %s skipping duplicate key %r", self._label, key)
            return False

        self._metrics.incr(KEYS_MAPPED, tags=self._tags)
        try:
            future = normalize(self._map_fn(key), loop=self._loop)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Coordinator %s map function raised for key %r", self._label, key
            )
            future = failed(exc, loop=self._loop)

        self._emit(KEY_MAPPED, key=describe_key(key), has_work=future is not None)
        if future is None:
            return True

        self._in_flight += 1
        self._outstanding.add(future)
        future.add_done_callback(lambda done: self._on_settled(key, done))
        return True

    def _on_settled(self, key: Any, future: asyncio.Future[Any]) -> None:
        self._in_flight -= 1
        self._outstanding.discard(future)
        error = _failure_of(future)
        if self._future.done():
            return

        if error is not None:
            self._rejected.append(key)
            self._metrics.incr(KEYS_REJECTED, tags=self._tags)
            self._emit(KEY_REJECTED, key=describe_key(key), error=repr(error))
            logger.debug(
                "Coordinator %s key %r rejected: %r", self._label, key, error
            )
            self._check_finish()
            return

        self._resolved.append(key)
        self._metrics.incr(KEYS_RESOLVED, tags=self._tags)
        self._emit(KEY_RESOLVED, key=describe_key(key))
        self._launch_reduce(key, payload_of(future.result()))

    # ------------------------------------------------------------------
    # Reduce and end steps
    # ------------------------------------------------------------------

    def _launch_reduce(self, key: Any, payload: tuple[Any, ...]) -> None:
        if self._reduce_fn is None:
            self._pending_reduces.append((key, payload))
            return

        try:
            self._accumulator = self._reduce_fn(
                self._accumulator,
                *payload,
                self.submit_key,
                key,
                self.resolved_keys,
                self.rejected_keys,
            )
        except Exception as exc:
            self._hook_failed("reduce", exc)
            return
        self._metrics.incr(REDUCE_APPLIED, tags=self._tags)
        self._check_finish()

    def _is_quiescent(self) -> bool:
        return (
            self._in_flight == 0
            and not self._pending_reduces
            and not self._future.done()
        )

    def _check_finish(self) -> None:
        if self._is_quiescent():
            self._launch_end()

    def _launch_end(self) -> None:
        self._end_due = True
        if self._end_fn is None:
            self._schedule_auto_resolve()
            return
        self._cancel_auto_resolve()

        # Loop instead of recursing: keys handed back may all map to no work.
        while not self._future.done():
            self._cycles += 1
            self._metrics.incr(END_CYCLES, tags=self._tags)
            collected: list[Any] = []
            try:
                self._end_fn(
                    self._accumulator,
                    collected.append,
                    self.resolved_keys,
                    self.rejected_keys,
                )
            except Exception as exc:
                self._hook_failed("end", exc)
                return
            self._emit(END_FIRED, cycle=self._cycles, remapped=len(collected))

            if self._future.done():
                return
            if not collected:
                self._settle(result=self._accumulator)
                return

            accepted = 0
            try:
                for key in collected:
                    if self.submit_key(key):
                        accepted += 1
            except MapFunctionNotConfiguredError as exc:
                self._hook_failed("end", exc)
                return
            if not self._is_quiescent():
                return

            if self._config.duplicate_remap_policy == "stall":
                logger.warning(
                    "Coordinator %s end function remapped %d key(s) that started "
                    "no work; process left pending",
                    self._label,
                    len(collected),
                )
                return
            if not accepted:
                logger.debug(
                    "Coordinator %s end function only remapped known keys",
                    self._label,
                )
                self._settle(result=self._accumulator)
                return

    def _schedule_auto_resolve(self) -> None:
        if not self._config.resolve_without_end or self._auto_resolve is not None:
            return
        self._auto_resolve = self._loop.call_soon(self._resolve_without_end)

    def _cancel_auto_resolve(self) -> None:
        if self._auto_resolve is not None:
            self._auto_resolve.cancel()
            self._auto_resolve = None

    def _resolve_without_end(self) -> None:
        self._auto_resolve = None
        if self._end_fn is None and self._is_quiescent():
            self._settle(result=self._accumulator)

    def _hook_failed(self, hook: str, exc: Exception) -> None:
        logger.exception("Coordinator %s %s function raised", self._label, hook)
        if not self._config.reject_on_hook_error:
            raise exc
        if self._future.done():
            # The hook settled the process before raising; that result stands.
            return
        self._settle(error=exc)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def resolve(self, value: Any = None) -> bool:
        """Resolve the process now. Returns False if it already settled."""
        if self._future.done():
            return False
        self._settle(result=value)
        return True

    def reject(self, reason: Any) -> bool:
        """
        Reject the process now. Returns False if it already settled.

        Non-exception reasons are wrapped in ``CoordinatorRejectedError``.
        """
        if self._future.done():
            return False
        if not isinstance(reason, BaseException):
            reason = CoordinatorRejectedError(reason)
        self._settle(error=reason)
        return True

    def _settle(
        self, *, result: Any = None, error: BaseException | None = None
    ) -> None:
        self._cancel_auto_resolve()
        if error is None:
            self._future.set_result(result)
        else:
            self._future.set_exception(error)
        state = self.state
        self._emit(COORDINATOR_SETTLED, state=state)
        self._telemetry.end_span(
            self._span,
            status="ok" if error is None else "error",
            error=None if error is None else repr(error),
            attributes=self._attributes(state=state),
        )
        logger.debug(
            "Coordinator %s %s (mapped=%d resolved=%d rejected=%d in_flight=%d)",
            self._label,
            state,
            len(self._registry),
            len(self._resolved),
            len(self._rejected),
            self._in_flight,
        )

    def cancel_outstanding(self) -> int:
        """Cancel every mapped future still running; returns how many."""
        pending = [future for future in self._outstanding if not future.done()]
        for future in pending:
            future.cancel()
        return len(pending)

    def __await__(self) -> Generator[Any, None, Any]:
        return self._future.__await__()

    def done(self) -> bool:
        return self._future.done()

    def resolved(self) -> bool:
        return self.state == "resolved"

    def rejected(self) -> bool:
        return self.state == "rejected"

    def result(self) -> Any:
        """Settled value; raises like ``asyncio.Future.result``."""
        return self._future.result()

    def exception(self) -> BaseException | None:
        return self._future.exception()

    def add_done_callback(
        self, callback: Callable[[IterativeCoordinator], Any]
    ) -> None:
        """Call ``callback(coordinator)`` once the process has settled."""
        self._future.add_done_callback(lambda _future: callback(self))

    @property
    def future(self) -> asyncio.Future[Any]:
        """Completion future; use ``resolve``/``reject`` to settle it."""
        return self._future

    @property
    def state(self) -> CoordinatorState:
        if not self._future.done():
            return "pending"
        if self._future.cancelled() or self._future.exception() is not None:
            return "rejected"
        return "resolved"

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def coordinator_id(self) -> str:
        return self._id

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def started(self) -> bool:
        return self._started

    @property
    def end_due(self) -> bool:
        return self._end_due

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def accumulator(self) -> Any:
        return self._accumulator

    @property
    def mapped_keys(self) -> tuple[Any, ...]:
        return self._registry.keys()

    @property
    def resolved_keys(self) -> tuple[Any, ...]:
        return tuple(self._resolved)

    @property
    def rejected_keys(self) -> tuple[Any, ...]:
        return tuple(self._rejected)

    @property
    def pending_reduces(self) -> int:
        return len(self._pending_reduces)

    @property
    def cycles(self) -> int:
        return self._cycles

    def snapshot(self) -> CoordinatorSnapshot:
        """Return a serializable view of the current counters."""
        return CoordinatorSnapshot(
            coordinator_id=self._id,
            name=self._name,
            state=self.state,
            started=self._started,
            end_due=self._end_due,
            in_flight=self._in_flight,
            mapped=len(self._registry),
            resolved=len(self._resolved),
            rejected=len(self._rejected),
            pending_reduces=len(self._pending_reduces),
            cycles=self._cycles,
        )

    @property
    def _label(self) -> str:
        return self._name or self._id[:8]

    def _attributes(self, **extra: JSONValue) -> dict[str, JSONValue]:
        attributes: dict[str, JSONValue] = {"coordinator_id": self._id}
        if self._name is not None:
            attributes["coordinator"] = self._name
        attributes.update(extra)
        return attributes

    def _emit(self, name: str, **attributes: JSONValue) -> None:
        self._telemetry.record_event(
            TelemetryEvent(
                name=name,
                timestamp_ms=now_ms(),
                attributes=self._attributes(**attributes),
            )
        )

    def __repr__(self) -> str:
        return (
            f"<IterativeCoordinator {self._label} state={self.state} "
            f"mapped={len(self._registry)} in_flight={self._in_flight}>"
        )


def _require_callable(role: str, fn: Any) -> Any:
    if not callable(fn):
        raise CoordinatorConfigurationError(
            f"{role} function must be callable, got {type(fn).__name__}"
        )
    return fn


def _failure_of(future: asyncio.Future[Any]) -> BaseException | None:
    # Always retrieve the exception so asyncio does not warn about it.
    if future.cancelled():
        return asyncio.CancelledError()
    return future.exception()
