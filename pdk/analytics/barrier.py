"""Bounded best-effort analytics around command execution.

A report is started on a daemon thread before the command's behavior runs,
and the caller waits for it afterwards for at most the flush deadline. A slow
or unreachable backend therefore costs a command at most FLUSH_DURATION, and
a failing one costs it nothing but a DEBUG log line.
"""
from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol

from pdk.analytics.client import FLUSH_DURATION

logger = logging.getLogger(__name__)

# Analytics for these are sent by the server during its startup.
EXEMPT_COMMANDS = frozenset({"wash", "server"})


class Reporter(Protocol):
    def screenview(self, name: str, params: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class Invocation:
    """One user-triggered command conclusion."""
    name: str
    params: dict[str, Any] = field(default_factory=dict)


class NotificationHandle:
    """Completion signal for one in-flight report."""

    def __init__(self, name: str):
        self.name = name
        self._event = threading.Event()
        self._lock = threading.Lock()

    def complete(self) -> bool:
        """Fire the completion signal. Returns False if it had already fired."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True

    def done(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = "done" if self.done() else "pending"
        return f"<NotificationHandle {self.name!r} {state}>"


class TelemetryBarrier:
    """Decouples "notify the analytics backend" from "run the command"."""

    def __init__(
        self,
        reporter: Reporter,
        flush_deadline: float = FLUSH_DURATION,
        exempt_commands: Iterable[str] = EXEMPT_COMMANDS,
    ):
        self.reporter = reporter
        self.flush_deadline = flush_deadline
        self.exempt_commands = frozenset(exempt_commands)

    def is_exempt(self, invocation: Invocation) -> bool:
        return invocation.name in self.exempt_commands

    def notify(self, invocation: Invocation) -> NotificationHandle:
        """Start reporting `invocation` in the background and return at once."""
        if not invocation.name:
            raise ValueError("invocation requires a command name")

        handle = NotificationHandle(invocation.name)
        if self.is_exempt(invocation):
            handle.complete()
            return handle

        thread = threading.Thread(
            target=self._report,
            args=(invocation, handle),
            name=f"pdk-analytics-{invocation.name}",
            daemon=True,
        )
        thread.start()
        return handle

    def await_or_timeout(self, handle: NotificationHandle) -> None:
        """Wait for `handle` or the flush deadline, whichever comes first."""
        if not handle.wait(self.flush_deadline):
            logger.debug("Analytics for %s still pending after %.2fs, moving on",
                         handle.name, self.flush_deadline)

    def wrap(
        self,
        behavior: Callable[..., Any],
        name: str | Callable[[], str],
        only_on: type[BaseException] | tuple[type[BaseException], ...] | None = None,
        when: Callable[[], bool] | None = None,
    ) -> Callable[..., Any]:
        """Return `behavior` wrapped so that each call is reported once.

        Without `only_on` the report starts before `behavior` runs and is
        awaited after it returns or raises. With `only_on` the normal path is
        not reported; a matching exception is reported once, then re-raised.
        `when`, if given, is checked before the call and can skip reporting.
        """
        def resolve_name() -> str:
            return name() if callable(name) else name

        @functools.wraps(behavior)
        def wrapper(*args, **kwargs):
            if when is not None and not when():
                return behavior(*args, **kwargs)

            if only_on is not None:
                try:
                    return behavior(*args, **kwargs)
                except only_on as e:
                    # Guard for stacked only_on wrappers sharing one error.
                    if not getattr(e, "_analytics_reported", False):
                        e._analytics_reported = True
                        self.await_or_timeout(self.notify(Invocation(resolve_name())))
                    raise

            handle = self.notify(Invocation(resolve_name()))
            try:
                return behavior(*args, **kwargs)
            finally:
                self.await_or_timeout(handle)

        return wrapper

    def _report(self, invocation: Invocation, handle: NotificationHandle) -> None:
        # Errors are never shown to the user.
        try:
            self.reporter.screenview(invocation.name, dict(invocation.params))
        except Exception as e:
            logger.debug("Analytics for %s failed: %s", invocation.name, e)
        finally:
            handle.complete()
