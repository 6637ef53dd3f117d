"""
Serialized event dispatcher.

One asyncio queue, one consumer task. Every state mutation runs as a
synchronous handler on that task, so handlers never interleave and the store
needs no locks. I/O is started with `spawn()` and reports back by posting a
completion event.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from .types import DeferredCall

if TYPE_CHECKING:
  from collections.abc import Callable, Coroutine

log = logging.getLogger("skill.mailsync.events.dispatcher")

E = TypeVar("E")


class EventDispatcher:
  def __init__(self) -> None:
    self._queue: asyncio.Queue[Any] = asyncio.Queue()
    self._handlers: dict[type, list[Callable[[Any], None]]] = {}
    self._requests: set[asyncio.Task[Any]] = set()
    self._producers: set[asyncio.Task[Any]] = set()
    self._runner: asyncio.Task[None] | None = None

  # ---------------------------------------------------------------------------
  # Registration
  # ---------------------------------------------------------------------------

  def on(self, event_type: type[E]) -> Callable[[Callable[[E], None]], Callable[[E], None]]:
    """Register a handler for an event type.

    Usage:
        @dispatcher.on(MessageDeleted)
        def on_message_deleted(event: MessageDeleted) -> None: ...
    """

    def decorator(fn: Callable[[E], None]) -> Callable[[E], None]:
      self._handlers.setdefault(event_type, []).append(fn)
      return fn

    return decorator

  # ---------------------------------------------------------------------------
  # Producers
  # ---------------------------------------------------------------------------

  def post(self, event: Any) -> None:
    self._queue.put_nowait(event)

  def call_soon(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Queue a plain call behind every event already posted."""
    self.post(DeferredCall(fn, args, kwargs))

  def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
    """Run a request coroutine. Its completion must come back through `post()`."""
    task = asyncio.get_running_loop().create_task(coro, name=name)
    self._requests.add(task)
    task.add_done_callback(self._on_request_done)
    return task

  def attach(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
    """Run a long-lived stream producer. Producers are not awaited by `wait_idle()`."""
    task = asyncio.get_running_loop().create_task(coro, name=name)
    self._producers.add(task)
    task.add_done_callback(self._producers.discard)
    return task

  def _on_request_done(self, task: asyncio.Task[Any]) -> None:
    self._requests.discard(task)
    if task.cancelled():
      return
    exc = task.exception()
    if exc is not None:
      log.error("Request task %s failed: %s", task.get_name(), exc, exc_info=exc)

  # ---------------------------------------------------------------------------
  # Consumer
  # ---------------------------------------------------------------------------

  def dispatch(self, event: Any) -> None:
    if isinstance(event, DeferredCall):
      event.fn(*event.args, **event.kwargs)
      return
    handlers = self._handlers.get(type(event))
    if not handlers:
      log.warning("No handler registered for %s", type(event).__name__)
      return
    for handler in handlers:
      handler(event)

  async def _run(self) -> None:
    while True:
      event = await self._queue.get()
      try:
        self.dispatch(event)
      except Exception:
        # A failing handler must not stop the controller
        log.exception("Error handling %s", type(event).__name__)
      finally:
        self._queue.task_done()

  def start(self) -> None:
    if self.is_running:
      return
    self._runner = asyncio.get_running_loop().create_task(self._run(), name="mailsync-dispatcher")

  @property
  def is_running(self) -> bool:
    return self._runner is not None and not self._runner.done()

  async def wait_idle(self) -> None:
    """Wait until the queue is drained and no request is in flight."""
    if not self.is_running:
      raise RuntimeError("Dispatcher not started. Call start() first.")
    while True:
      await self._queue.join()
      if self._requests:
        await asyncio.gather(*list(self._requests), return_exceptions=True)
        continue
      if self._queue.empty():
        return

  async def stop(self) -> None:
    tasks = [*self._producers, *self._requests]
    if self._runner is not None:
      tasks.append(self._runner)
    for task in tasks:
      task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
      await asyncio.gather(*tasks, return_exceptions=True)
    self._producers.clear()
    self._requests.clear()
    self._runner = None
