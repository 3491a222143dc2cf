import logging
import threading
from typing import Callable, List, Optional, Set

from webscraper.exceptions import InvalidStateError

logger = logging.getLogger(__name__)


class WorkerPool:
    """Resizable set of threads that all run the same task.

    The task is expected to loop and call `should_stop()` at iteration
    boundaries; stopping is cooperative and never interrupts a running
    iteration. A unit that returns from the task leaves the pool. The unit
    whose exit leaves no task running calls `on_last_exit` (exactly once per
    emptying), which is how the owner learns the crawl is over.

    `size()` is the configured size: the initial size, updated by
    `add_more_threads` and `decrease_threads_to`. It is what a snapshot
    records, while `live_count()` is how many units are running right now.
    """

    def __init__(self, initial_size: int, name_prefix: str = "webscraper-worker"):
        if int(initial_size) <= 0:
            raise ValueError("initial_size must be positive")
        self.initial_size = int(initial_size)
        self.name_prefix = name_prefix
        self._size = self.initial_size
        self._cond = threading.Condition()
        self._task: Optional[Callable[[], None]] = None
        self._on_last_exit: Optional[Callable[[], None]] = None
        self._stop_requested = False
        # Units still running the task, and units not yet fully retired
        # (a unit running the last-exit callback has left _active only).
        self._active: Set[threading.Thread] = set()
        self._units: List[threading.Thread] = []
        self._shrink_target: Optional[int] = None
        self._retiring: Set[threading.Thread] = set()
        self._spawned = 0

    def set_task(self, task: Callable[[], None], on_last_exit: Optional[Callable[[], None]] = None) -> "WorkerPool":
        with self._cond:
            self._task = task
            self._on_last_exit = on_last_exit
        return self

    def has_task(self) -> bool:
        return self._task is not None

    def start(self) -> "WorkerPool":
        with self._cond:
            if self._task is None:
                raise InvalidStateError("Task is not set")
            self._stop_requested = False
            self._shrink_target = None
            self._size = self.initial_size
            self._allocate_locked(self.initial_size)
        return self

    def stop(self) -> None:
        with self._cond:
            self._stop_requested = True
            self._cond.notify_all()

    def should_stop(self) -> bool:
        """Polled by the task. True on stop, or when this unit is picked to retire for a shrink."""
        me = threading.current_thread()
        with self._cond:
            if self._stop_requested or me in self._retiring:
                return True
            if self._shrink_target is not None and me in self._active:
                if len(self._active) - len(self._retiring) > self._shrink_target:
                    self._retiring.add(me)
                    return True
            return False

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def add_more_threads(self, n: int) -> int:
        """Grow to `n` running units. Returns the number of units spawned."""
        with self._cond:
            if self._task is None:
                raise InvalidStateError("Task is not set")
            if self._stop_requested:
                logger.warning("Not growing pool to %d: stop pending", n)
                return 0
            spawned = self._allocate_locked(n)
            self._size = max(int(n), len(self._active))
            return spawned

    def decrease_threads_to(self, n: int, timeout: Optional[float] = None) -> bool:
        """Retire units until at most `n` are running, blocking until they have left.

        Returns False if `timeout` elapsed first; the shrink request is
        withdrawn either way so the remaining units keep running.
        """
        n = int(n)
        if n < 0:
            raise ValueError("n must not be negative")
        if threading.current_thread() in self._units:
            raise InvalidStateError("decrease_threads_to cannot be called from a pool unit")
        with self._cond:
            self._shrink_target = n
            try:
                done = self._cond.wait_for(lambda: len(self._active) <= n, timeout=timeout)
            finally:
                self._shrink_target = None
            self._size = n
        logger.debug("Pool shrunk to %d units (done=%s)", n, done)
        return done

    def _allocate_locked(self, n: int) -> int:
        spawned = 0
        while len(self._active) < n:
            self._spawned += 1
            unit = threading.Thread(
                target=self._run_unit,
                name=f"{self.name_prefix}-{self._spawned}",
                daemon=True,
            )
            self._active.add(unit)
            self._units.append(unit)
            unit.start()
            spawned += 1
        return spawned

    def _run_unit(self) -> None:
        me = threading.current_thread()
        try:
            self._task()
        except Exception:
            logger.exception("Worker %s stopped on an unexpected error", me.name)
        finally:
            with self._cond:
                self._active.discard(me)
                self._retiring.discard(me)
                callback = self._on_last_exit if not self._active else None
                self._cond.notify_all()
            try:
                if callback is not None:
                    callback()
            except Exception:
                logger.exception("Last-exit callback failed in %s", me.name)
            finally:
                with self._cond:
                    if me in self._units:
                        self._units.remove(me)
                    self._cond.notify_all()

    def all_terminated(self) -> bool:
        with self._cond:
            return self._task is not None and not self._units

    def is_last_thread(self) -> bool:
        with self._cond:
            return len(self._active) == 1

    def live_count(self) -> int:
        with self._cond:
            return len(self._active)

    def size(self) -> int:
        return self._size

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until every unit has fully exited. Returns False on timeout."""
        if threading.current_thread() in self._units:
            raise InvalidStateError("join cannot be called from a pool unit")
        with self._cond:
            return self._cond.wait_for(lambda: not self._units, timeout=timeout)

    def __repr__(self):
        return f"<WorkerPool size={self._size} live={len(self._active)} stop={self._stop_requested}>"
