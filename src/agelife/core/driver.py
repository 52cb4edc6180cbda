"""Simulation driver: repeated transitions under a cadence, with cancellation."""

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import Enum
from typing import Callable, Deque, Optional, Tuple, Union

from .config import DEFAULT_MAX_PENDING_NOTIFICATIONS, Cadence, LifeConfig, resolve_cadence
from .engine import TransitionEngine
from .grid import Grid

logger = logging.getLogger(__name__)

Observer = Callable[[Grid, int], None]


class DriverState(Enum):
    """Lifecycle of a simulation driver."""

    IDLE = "idle"
    RUNNING = "running"
    MANUAL = "manual"
    STOPPED = "stopped"


class SimulationDriver:
    """Steps a grid through generations and reports each one to an observer.

    The driver owns two grids: the current generation and a scratch buffer
    the next generation is computed into. The two are swapped after every
    step, so an observer only ever receives complete generations. Observers
    are handed a snapshot copy together with the generation number.

    Unless ``block_on_observer`` is set, notifications run in order on a
    single worker thread. At most ``max_pending_notifications`` of them may
    be queued; once the queue is full the next step waits for the oldest to
    be delivered. An observer exception stops the driver and is raised from
    run(), join() or the next step().

    Cancellation is cooperative: it is checked between steps and never
    interrupts a step that has already started.
    """

    def __init__(
        self,
        grid: Grid,
        engine: Optional[TransitionEngine] = None,
        observer: Optional[Observer] = None,
        block_on_observer: bool = False,
        cadence: Union[Cadence, str, int] = "immediate",
        max_generations: Optional[int] = None,
        max_pending_notifications: int = DEFAULT_MAX_PENDING_NOTIFICATIONS,
    ) -> None:
        """Initialize the driver.

        Args:
            grid: Initial generation (copied, the caller keeps its grid)
            engine: Transition engine, a default one when omitted
            observer: Called with (grid, generation) after every step
            block_on_observer: Call the observer inline instead of on a
                background worker, so stepping waits for it
            cadence: Cadence used by run() and start() when none is given
            max_generations: Step limit used by run() and start() when none
                is given, None for no limit
            max_pending_notifications: Queued notifications allowed before
                stepping waits for the observer
        """
        if max_pending_notifications < 1:
            raise ValueError(f"max_pending_notifications must be at least 1, got {max_pending_notifications}")

        self.engine = engine or TransitionEngine()
        self.observer = observer
        self.block_on_observer = block_on_observer
        self.cadence = resolve_cadence(cadence)
        self.max_generations = max_generations
        self.max_pending_notifications = max_pending_notifications

        self._current = grid.copy()
        self._scratch: Optional[Grid] = None
        self._generation = 0

        self._state = DriverState.IDLE
        self._condition = threading.Condition()
        self._cancelled = False
        self._looping = False
        self._pending_advances = 0

        # At most one step in flight
        self._step_lock = threading.Lock()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._notifications: Deque[Future] = deque()
        self._observer_error: Optional[Exception] = None

        self._thread: Optional[threading.Thread] = None
        self._thread_error: Optional[BaseException] = None

    @classmethod
    def from_config(cls, grid: Grid, config: LifeConfig, observer: Optional[Observer] = None) -> "SimulationDriver":
        """Build a driver whose engine, pacing and observer coupling follow ``config``."""
        return cls(
            grid,
            engine=TransitionEngine(config.max_age),
            observer=observer,
            block_on_observer=config.block_on_observer,
            cadence=config.cadence,
            max_generations=config.max_generations,
            max_pending_notifications=config.max_pending_notifications,
        )

    @property
    def current(self) -> Grid:
        """The current generation. Overwritten by later steps; copy to keep it."""
        return self._current

    @property
    def generation(self) -> int:
        """Number of generations computed so far."""
        return self._generation

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending_notifications(self) -> int:
        """Number of queued observer notifications not yet delivered."""
        return sum(1 for future in list(self._notifications) if not future.done())

    def step(self) -> Grid:
        """Advance the simulation by one generation.

        Returns:
            The new current grid

        Raises:
            RuntimeError: If the driver has been stopped
            Exception: An earlier failure of a background observer
        """
        with self._condition:
            error, self._observer_error = self._observer_error, None
            stopped = self._state is DriverState.STOPPED or self._cancelled
        if error is not None:
            self._stop()
            raise error
        if stopped:
            raise RuntimeError("Simulation has been stopped")

        try:
            return self._step()
        except Exception:
            self._stop()
            raise

    def _step(self, unless_cancelled: bool = False) -> Optional[Grid]:
        with self._step_lock:
            # Past this check the step is in flight and will be reported
            if unless_cancelled:
                with self._condition:
                    if self._cancelled:
                        return None

            rows, cols = self._current.dimensions()
            if self._scratch is None:
                self._scratch = Grid(rows, cols)
            elif self._scratch.shape != self._current.shape:
                self._scratch.resize(rows, cols)

            next_grid = self.engine.compute_next(self._current, self._scratch)
            self._current, self._scratch = next_grid, self._current
            self._generation += 1
            logger.debug("Generation %d: population %d", self._generation, self._current.population)

            self._notify(self._current, self._generation)
            return self._current

    def _notify(self, grid: Grid, generation: int) -> None:
        if self.observer is None:
            return

        snapshot = grid.copy()
        if self.block_on_observer:
            self.observer(snapshot, generation)
            return

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="agelife-observer")

        while self._notifications and self._notifications[0].done():
            self._notifications.popleft()
        if len(self._notifications) >= self.max_pending_notifications:
            wait([self._notifications.popleft()])

        self._notifications.append(self._executor.submit(self._deliver, snapshot, generation))

    def _deliver(self, snapshot: Grid, generation: int) -> None:
        try:
            self.observer(snapshot, generation)
        except Exception as e:
            logger.error("Observer failed at generation %d: %s", generation, e)
            with self._condition:
                if self._observer_error is None:
                    self._observer_error = e
                self._cancelled = True
                self._pending_advances = 0
                if not self._looping:
                    self._state = DriverState.STOPPED
                self._condition.notify_all()
            raise

    def drain(self) -> None:
        """Wait for every queued observer notification to finish.

        Raises:
            Exception: The first exception raised by the observer, if any
        """
        pending = list(self._notifications)
        self._notifications.clear()
        wait(pending)

        with self._condition:
            error, self._observer_error = self._observer_error, None
        if error is not None:
            raise error

    def _drain_after_failure(self) -> None:
        try:
            self.drain()
        except Exception as e:
            logger.warning("Observer also failed: %s", e)

    def run(
        self,
        cadence: Union[Cadence, str, int, None] = None,
        max_generations: Optional[int] = None,
    ) -> int:
        """Step repeatedly at ``cadence`` until cancelled.

        Blocks the calling thread. The driver is stopped when this returns,
        either because ``cancel()`` was called or ``max_generations`` steps
        were performed.

        Args:
            cadence: A Cadence, a cadence string ('immediate', 'delay:D',
                'manual') or a speed preset number (1-4); the driver's
                cadence when omitted
            max_generations: Limit on the number of steps; the driver's
                limit when omitted

        Returns:
            Number of generations computed by this run
        """
        cadence, max_generations = self._resolve_run_settings(cadence, max_generations)
        self._enter_loop(cadence)
        return self._loop(cadence, max_generations)

    def start(
        self,
        cadence: Union[Cadence, str, int, None] = None,
        max_generations: Optional[int] = None,
    ) -> threading.Thread:
        """Run the simulation on a background thread.

        Args:
            cadence: Same as for run()
            max_generations: Same as for run()

        Returns:
            The started thread; use join() to wait for it
        """
        cadence, max_generations = self._resolve_run_settings(cadence, max_generations)
        self._enter_loop(cadence)
        self._thread = threading.Thread(
            target=self._loop_in_thread,
            args=(cadence, max_generations),
            name="agelife-driver",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def _resolve_run_settings(
        self, cadence: Union[Cadence, str, int, None], max_generations: Optional[int]
    ) -> Tuple[Cadence, Optional[int]]:
        cadence = self.cadence if cadence is None else resolve_cadence(cadence)
        if max_generations is None:
            max_generations = self.max_generations
        return cadence, max_generations

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for a run started with start() to finish.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            True if the run has finished

        Raises:
            Exception: Whatever ended the background run abnormally
        """
        if self._thread is None:
            return True

        self._thread.join(timeout)
        if self._thread.is_alive():
            return False

        if self._thread_error is not None:
            error, self._thread_error = self._thread_error, None
            raise error
        return True

    def _loop_in_thread(self, cadence: Cadence, max_generations: Optional[int]) -> None:
        try:
            self._loop(cadence, max_generations)
        except BaseException as e:
            logger.error("Simulation stopped at generation %d: %s", self._generation, e)
            self._thread_error = e

    def _enter_loop(self, cadence: Cadence) -> None:
        with self._condition:
            if self._state is DriverState.STOPPED or self._cancelled:
                raise RuntimeError("Simulation has been stopped")
            if self._looping:
                raise RuntimeError("Simulation is already running")

            self._looping = True
            self._state = DriverState.MANUAL if cadence.is_manual else DriverState.RUNNING

        logger.info("Simulation %s with cadence %s", self._state.value, cadence)

    def _loop(self, cadence: Cadence, max_generations: Optional[int]) -> int:
        steps = 0
        try:
            while max_generations is None or steps < max_generations:
                if not self._wait_for_turn(cadence):
                    break
                if self._step(unless_cancelled=True) is None:
                    break
                steps += 1
        except BaseException:
            self._stop()
            # The step error wins over any observer error still queued
            self._drain_after_failure()
            raise

        self._stop()
        self.drain()

        logger.info("Simulation stopped after %d generations (generation %d)", steps, self._generation)
        return steps

    def _wait_for_turn(self, cadence: Cadence) -> bool:
        """Block until the next step is due. Returns False once cancelled."""
        with self._condition:
            if cadence.is_manual:
                self._condition.wait_for(lambda: self._cancelled or self._pending_advances > 0)
                if self._cancelled:
                    return False
                self._pending_advances -= 1
                return True

            if cadence.delay_ms:
                self._condition.wait_for(lambda: self._cancelled, timeout=cadence.delay_seconds)
            return not self._cancelled

    def advance(self) -> bool:
        """Signal a manual-mode run to perform one step.

        Returns:
            False if the driver is already cancelled and the signal was dropped
        """
        with self._condition:
            if self._cancelled or self._state is DriverState.STOPPED:
                return False
            self._pending_advances += 1
            self._condition.notify_all()
            return True

    def cancel(self) -> None:
        """Stop the simulation.

        A step already in progress completes and is reported; no step starts
        afterwards. Pending advance signals are discarded.
        """
        with self._condition:
            if self._cancelled:
                return
            self._cancelled = True
            self._pending_advances = 0
            if not self._looping:
                self._state = DriverState.STOPPED
            self._condition.notify_all()

        logger.info("Cancellation requested at generation %d", self._generation)

    def _stop(self) -> None:
        with self._condition:
            self._state = DriverState.STOPPED
            self._looping = False
            self._pending_advances = 0
            self._condition.notify_all()

    def close(self) -> None:
        """Cancel, wait for the run and notifications, release the observer worker."""
        self.cancel()
        try:
            self.join()
            self.drain()
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
