"""Debounced deferred actions (autosave)."""
import threading
from typing import Any, Callable, Optional


class Debouncer:
    """Run ``action`` once input has been quiet for ``delay`` seconds.

    Each ``trigger`` cancels the pending call and schedules a new one with the
    latest arguments. ``cancel`` drops whatever is pending; call it on
    teardown so nothing fires after the owner is gone.

    ``guard`` is held while a due call checks it is still current and runs.
    An owner that cancels while holding the same lock can be sure no older
    call runs after it.
    """

    def __init__(self, delay: float, action: Callable[..., Any],
                 timer_factory: Callable[..., Any] = threading.Timer,
                 guard: Optional[Any] = None):
        self.delay = delay
        self.action = action
        self._timer_factory = timer_factory
        self._timer: Optional[Any] = None
        self._generation = 0
        self._lock = threading.Lock()
        self._guard = guard if guard is not None else threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self.delay, self._fire, args=(self._generation, args, kwargs))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self) -> bool:
        """Drop the pending call. Returns True if one was pending."""
        with self._lock:
            timer, self._timer = self._timer, None
            self._generation += 1
        if timer is None:
            return False
        timer.cancel()
        return True

    def _fire(self, generation: int, args: tuple, kwargs: dict) -> None:
        with self._guard:
            with self._lock:
                # superseded by a later trigger or cancelled
                if generation != self._generation:
                    return
                self._timer = None
            self.action(*args, **kwargs)
