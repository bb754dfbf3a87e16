"""Cooperative cancellation primitives.

A :class:`CancelToken` is a thread-safe, one-shot flag.  Callers create
one, pass it into a request through
:class:`~monime.http_client.RequestConfig`, and call
:meth:`CancelToken.cancel` from any thread to abandon the request.

:func:`any_of` fans several tokens into a :class:`CompositeToken` that
trips as soon as any source trips.  The request executor uses it to
combine the caller's token with a timer-backed token created through a
:class:`TimerScheduler`.

Example::

    token = CancelToken()
    threading.Timer(2.0, token.cancel).start()
    client.payouts.list(config=RequestConfig(cancel_token=token))
"""

from __future__ import annotations

import itertools
import threading
import time
from typing import Callable, Dict, List, Optional

from monime.errors import RequestCancelledError


def _noop() -> None:
    return None


class CancelToken:
    """One-shot cancellation flag with callback subscriptions."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._ids = itertools.count()
        self._error: Optional[RequestCancelledError] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def error(self) -> Optional[RequestCancelledError]:
        """The exception raised on behalf of this token, once cancelled."""
        return self._error

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Trip the token.  Returns ``False`` if it was already cancelled."""
        with self._lock:
            if self._event.is_set():
                return False
            self._error = RequestCancelledError(reason)
            self._event.set()
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            callback()
        return True

    def raise_if_cancelled(self) -> None:
        if self._error is not None:
            raise self._error

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or *timeout* elapses; return whether cancelled."""
        return self._event.wait(timeout)

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* when the token trips and return an unsubscribe function.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                key = next(self._ids)
                self._callbacks[key] = callback

                def _remove() -> None:
                    with self._lock:
                        self._callbacks.pop(key, None)

                return _remove
        callback()
        return _noop

    def __repr__(self) -> str:
        return f"<CancelToken cancelled={self.cancelled}>"


class CompositeToken(CancelToken):
    """A token that trips when any of its source tokens trips.

    The first source to fire wins and is recorded in :attr:`source`.
    :meth:`close` releases the subscriptions held on the sources; use the
    token as a context manager to make that automatic.
    """

    def __init__(self, sources: List[CancelToken]) -> None:
        super().__init__()
        self.source: Optional[CancelToken] = None
        self._unsubscribers: List[Callable[[], None]] = []
        for token in sources:
            self._unsubscribers.append(
                token.add_callback(lambda token=token: self._trip(token))
            )

    def _trip(self, token: CancelToken) -> None:
        with self._lock:
            if self.source is None:
                self.source = token
        error = token.error
        self.cancel(error.reason if error is not None else None)

    def close(self) -> None:
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    def __enter__(self) -> "CompositeToken":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def any_of(*tokens: Optional[CancelToken]) -> CompositeToken:
    """Combine *tokens* (``None`` entries are skipped) into one composite."""
    return CompositeToken([t for t in tokens if t is not None])


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------


class TimerHandle:
    """A scheduled callback that can be cancelled before it fires."""

    def __init__(self, scheduler: "TimerScheduler", delay: float, callback: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._callback = callback
        self._timer = threading.Timer(delay, self._fire)
        self._timer.daemon = True

    def _start(self) -> None:
        self._timer.start()

    def _fire(self) -> None:
        if self._scheduler._release(self):
            self._callback()

    def cancel(self) -> None:
        self._timer.cancel()
        self._scheduler._release(self)


class TimerScheduler:
    """Schedules timers on background threads and tracks which are pending.

    :meth:`pending` reports how many timers are scheduled but have neither
    fired nor been cancelled.  The request executor relies on it reaching
    zero once a call resolves.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: set = set()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self, delay, callback)
        with self._lock:
            self._handles.add(handle)
        handle._start()
        return handle

    def _release(self, handle: TimerHandle) -> bool:
        with self._lock:
            if handle in self._handles:
                self._handles.discard(handle)
                return True
            return False

    def pending(self) -> int:
        with self._lock:
            return len(self._handles)

    def sleep(self, seconds: float, token: Optional[CancelToken] = None) -> bool:
        """Sleep for *seconds*; return ``True`` early if *token* trips."""
        if seconds <= 0:
            return token.cancelled if token is not None else False
        if token is not None:
            return token.wait(seconds)
        time.sleep(seconds)
        return False


__all__ = [
    "CancelToken",
    "CompositeToken",
    "TimerHandle",
    "TimerScheduler",
    "any_of",
]
