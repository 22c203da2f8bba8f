from __future__ import annotations

from dataclasses import dataclass
import logging
import queue
import threading
import time
from typing import Callable, Generic, Optional, Protocol, TypeVar

LOGGER = logging.getLogger(__name__)

SceneT = TypeVar("SceneT")

DEFAULT_MAX_PENDING = 4
_SUBMIT_POLL_S = 0.1


class ScenePresenter(Protocol[SceneT]):
    def start(self) -> None:
        ...

    def present(self, scene: SceneT) -> None:
        ...

    def redraw(self) -> None:
        ...

    def pump_events(self) -> None:
        ...

    def should_close(self) -> bool:
        ...

    def stop(self) -> None:
        ...


@dataclass(frozen=True)
class PresentTick(Generic[SceneT]):
    sequence: int
    scene: SceneT


class DisplayRuntime(Generic[SceneT]):
    """Hands finished scenes to a presenter that lives on its own thread.

    `submit` blocks while `max_pending` scenes are waiting (backpressure, no
    dropping). The presenter is created on the display thread and never
    touched by any other thread. Once the presenter reports a close request
    the loop ends and further submits raise `RuntimeError`.

    At most one presenter loop ever runs: the thread started by `start` (or
    the first `submit`), or the caller of `run_main_thread`.
    """

    def __init__(
        self,
        presenter_factory: Callable[[], ScenePresenter[SceneT]],
        max_pending: int = DEFAULT_MAX_PENDING,
        idle_sleep: float = 1 / 120,
    ) -> None:
        if max_pending <= 0:
            raise ValueError("max_pending must be > 0")
        if idle_sleep < 0:
            raise ValueError("idle_sleep must be >= 0")
        self._presenter_factory = presenter_factory
        self._queue: queue.Queue[SceneT] = queue.Queue(maxsize=max_pending)
        self._idle_sleep = idle_sleep
        self._running = threading.Event()
        self._closed = threading.Event()
        self._start_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._loop_active = False
        self._sequence = 0
        self._last_error: Exception | None = None

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def is_closed(self) -> bool:
        return self._closed.is_set()

    def pending_count(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        with self._start_lock:
            if self._closed.is_set():
                raise RuntimeError("display runtime is closed")
            if self._loop_active:
                return
            self._loop_active = True
            self._running.set()
            self._thread = threading.Thread(target=self._run_loop, name="tessera-display", daemon=True)
            self._thread.start()

    def submit(self, scene: SceneT, timeout: float | None = None) -> None:
        if self._closed.is_set():
            raise RuntimeError("display runtime is closed; the window is gone")
        if not self._loop_active:
            self.start()
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if self._closed.is_set():
                raise RuntimeError("display runtime is closed; the window is gone")
            wait = _SUBMIT_POLL_S
            if deadline is not None:
                wait = min(wait, max(0.0, deadline - time.monotonic()))
            try:
                self._queue.put(scene, timeout=wait)
                return
            except queue.Full:
                if deadline is not None and time.monotonic() >= deadline:
                    raise

    def wait_closed(self, timeout: float | None = None) -> bool:
        """Block until the presenter loop has ended; False on timeout."""
        return self._closed.wait(timeout)

    def stop(self) -> None:
        self._running.clear()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        self._thread = None

    def run_main_thread(self) -> None:
        """Run the presenter loop on the caller thread until the window closes."""
        with self._start_lock:
            if self._loop_active:
                raise RuntimeError("display runtime loop is already running")
            self._loop_active = True
            self._running.set()
        self._run_loop()

    def run_once(self, presenter: ScenePresenter[SceneT], timeout: float | None = None) -> PresentTick[SceneT] | None:
        try:
            if timeout is None:
                scene = self._queue.get_nowait()
            else:
                scene = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

        # Coalesce queued scenes so only the newest one is presented.
        while True:
            try:
                scene = self._queue.get_nowait()
            except queue.Empty:
                break
        self._sequence += 1
        presenter.present(scene)
        return PresentTick(sequence=self._sequence, scene=scene)

    def _run_loop(self) -> None:
        presenter: ScenePresenter[SceneT] | None = None
        try:
            presenter = self._presenter_factory()
            presenter.start()
            while self._running.is_set():
                presenter.pump_events()
                if presenter.should_close():
                    break
                tick = self.run_once(presenter)
                if tick is None:
                    presenter.redraw()
                    if self._idle_sleep > 0:
                        time.sleep(self._idle_sleep)
        except Exception as exc:  # noqa: BLE001
            self._last_error = exc
            LOGGER.exception("DisplayRuntime loop failed: %s", exc)
        finally:
            self._closed.set()
            self._running.clear()
            if presenter is not None:
                presenter.stop()
