"""Per-key call de-duplication.

Concurrent callers asking for the same key share one execution: the first
caller runs the function, the others block until it finishes and receive the
same result (or the same exception). Once the call completes the key is
forgotten, so later calls run afresh.
"""
import threading
from typing import Any, Callable, Dict, Hashable, Tuple, TypeVar

T = TypeVar("T")


class _Call:
    __slots__ = ("done", "result", "error", "waiters")

    def __init__(self):
        self.done = threading.Event()
        self.result: Any = None
        self.error: BaseException | None = None
        self.waiters = 0


class SingleFlight:
    """Keyed single-flight group, scoped to one process."""

    def __init__(self):
        self._lock = threading.Lock()
        self._calls: Dict[Hashable, _Call] = {}

    def do(self, key: Hashable, fn: Callable[[], T]) -> Tuple[T, bool]:
        """
        Run ``fn`` once per in-flight ``key``.

        Returns:
            (result, shared) where ``shared`` is True when the result came
            from another caller's execution.
        """
        with self._lock:
            call = self._calls.get(key)
            if call is not None:
                call.waiters += 1
                leader = False
            else:
                call = _Call()
                self._calls[key] = call
                leader = True

        if not leader:
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.result, True

        try:
            call.result = fn()
        except BaseException as exc:
            call.error = exc
            raise
        finally:
            with self._lock:
                self._calls.pop(key, None)
            call.done.set()

        return call.result, call.waiters > 0

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._calls
