# commentblocks/core/Debouncer.py
"""Debouncer Module
================
Coalesces bursts of triggers (document edits) into a single delayed call.

Every `schedule()` cancels the pending timer and starts a new one, and bumps
a generation counter. The scheduled callback receives its generation as the
first argument, so work that finishes after a newer trigger can ask
`is_current()` and throw its result away instead of applying it out of order.
"""

import logging
import threading
from typing import Any, Callable, Optional


class Debouncer:
    """Cancellable, reschedulable delayed call built on `threading.Timer`.

    Attributes:
        delay (float): Quiet interval in seconds before the callback fires.
        generation (int): Number of the most recent `schedule()` call.
    """

    def __init__(self, delay: float) -> None:
        self.delay: float = delay
        self.generation: int = 0
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[tuple[Callable[..., Any], tuple[Any, ...]]] = None
        self._lock = threading.Lock()

    def schedule(self, callback: Callable[..., Any], *args: Any) -> int:
        """Runs `callback(generation, *args)` after `delay`, superseding any pending call.

        Returns:
            int: The generation assigned to this call.
        """
        with self._lock:
            self._cancel_timer()
            self.generation += 1
            generation = self.generation
            self._pending = (callback, (generation, *args))
            self._timer = threading.Timer(self.delay, self._fire, args=(generation,))
            self._timer.daemon = True
            self._timer.name = "DebouncerTimer"
            self._timer.start()
        logging.debug(f"Debouncer: scheduled generation {generation} in {self.delay:.3f}s.")
        return generation

    def is_current(self, generation: int) -> bool:
        """True if no newer call was scheduled (or cancelled) since `generation`."""
        with self._lock:
            return generation == self.generation

    def cancel(self) -> None:
        """Drops the pending call, if any. Work already running becomes stale."""
        with self._lock:
            if self._timer is not None:
                logging.debug(f"Debouncer: cancelled generation {self.generation}.")
            self._cancel_timer()
            self.generation += 1

    def flush(self) -> bool:
        """Runs the pending call right now on the calling thread.

        Returns:
            bool: True if there was a pending call to run.
        """
        with self._lock:
            pending = self._pending
            self._cancel_timer()
        if pending is None:
            return False
        callback, args = pending
        callback(*args)
        return True

    @property
    def is_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self.generation or self._pending is None:
                return
            callback, args = self._pending
            self._pending = None
            self._timer = None
        try:
            callback(*args)
        except Exception as e:
            logging.error(f"Debouncer: scheduled call failed: {e}", exc_info=True)

    def _cancel_timer(self) -> None:
        # Caller holds self._lock.
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
