"""Per-point simulation scheduler.

Keeps one asyncio task per collection point whose simulation is running.
Each task fires every ``interval_seconds``. A firing (tick) re-reads the
point, stops itself if the point is gone or no longer eligible, and
otherwise generates and persists a small batch of transactions.

State per point is either Stopped (no registry entry) or Running (one
entry). The registry is only touched from the event loop thread, so it
needs no lock. Store calls go through ``asyncio.to_thread`` and never block
other points' ticks.

Stopping is cooperative: ``stop`` sets the entry's event and removes the
entry. No new tick starts afterwards, but a tick that is already persisting
its batch is allowed to finish.

The stored ``simulation_enabled`` flag and the registry are updated in two
separate steps, so ``status()`` is eventually consistent with the store.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field

from collection_simulator.config import SchedulerSettings
from collection_simulator.persistence.models import CollectionPointRecord, TransactionRecord
from collection_simulator.persistence.store import (
    CollectionPointNotFoundError,
    CollectionPointStore,
)
from collection_simulator.simulation.generator import TransactionGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of ``SimulationScheduler.toggle``."""

    active: bool
    message: str


@dataclass(frozen=True)
class SchedulerStatus:
    """Point-in-time view of the running simulations."""

    active_count: int
    running_ids: list[str]
    initialized: bool


@dataclass(eq=False)
class _SimulationHandle:
    point_id: str
    stop_requested: asyncio.Event = field(default_factory=asyncio.Event)
    task: asyncio.Task[None] | None = None


class SimulationScheduler:
    """Runs periodic transaction generation for eligible collection points.

    ``start``, ``stop`` and ``stop_all`` are synchronous but must be called
    from the event loop that should own the tasks.

    Usage:
        scheduler = SimulationScheduler(store, SchedulerSettings())
        await scheduler.initialize()
        scheduler.start("Q1AB2")
        ...
        await scheduler.shutdown()
    """

    def __init__(
        self,
        store: CollectionPointStore,
        settings: SchedulerSettings | None = None,
        generator: TransactionGenerator | None = None,
    ) -> None:
        self._store = store
        self.settings = settings or SchedulerSettings()
        self._generator = generator or TransactionGenerator(self.settings)
        self._registry: dict[str, _SimulationHandle] = {}
        self._draining: set[asyncio.Task[None]] = set()
        self._toggle_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def store(self) -> CollectionPointStore:
        return self._store

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> int:
        """Resume simulations for every eligible point in the store.

        Only the first successful call does anything. A point that fails
        to start is logged and skipped. If the store cannot be read at all
        the scheduler stays uninitialized so a later call can retry.

        Returns:
            Number of simulations started by this call
        """
        async with self._init_lock:
            if self._initialized:
                return 0

            logger.info("Initializing simulation scheduler")
            try:
                points = await asyncio.to_thread(self._store.find_eligible_for_simulation)
            except Exception:
                logger.exception("Could not load collection points to resume")
                return 0

            started = 0
            for point in points:
                try:
                    if self.start(point.point_id):
                        started += 1
                except Exception:
                    logger.exception("Failed to resume simulation for %s", point.point_id)

            self._initialized = True
            logger.info("Resumed %d of %d simulations", started, len(points))
            return started

    def start(self, point_id: str) -> bool:
        """Start the periodic task for ``point_id``.

        Does not check eligibility; the caller validates the point and
        persists ``simulation_enabled`` first.

        Returns:
            False if a simulation is already running for the point
        """
        if point_id in self._registry:
            logger.warning("Simulation already running for %s", point_id)
            return False

        handle = _SimulationHandle(point_id)
        handle.task = asyncio.get_running_loop().create_task(
            self._run(handle), name=f"simulation:{point_id}"
        )
        self._registry[point_id] = handle
        logger.info("Started simulation for %s", point_id)
        return True

    def stop(self, point_id: str) -> bool:
        """Stop the periodic task for ``point_id``.

        Returns:
            False if no simulation was running for the point
        """
        handle = self._registry.pop(point_id, None)
        if handle is None:
            logger.warning("No running simulation for %s", point_id)
            return False

        self._release(handle)
        logger.info("Stopped simulation for %s", point_id)
        return True

    def forget(self, point_id: str) -> bool:
        """Stop the simulation for a deleted point and drop its toggle lock.

        Returns:
            True if a simulation was running
        """
        running = self.stop(point_id) if point_id in self._registry else False
        self._toggle_locks.pop(point_id, None)
        return running

    async def toggle(self, point_id: str) -> ToggleResult:
        """Flip the stored flag for ``point_id`` and start or stop to match.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
        """
        async with self._toggle_locks[point_id]:
            point = await asyncio.to_thread(self._store.find_by_id, point_id)
            if point is None:
                raise CollectionPointNotFoundError(point_id)

            if point.simulation_enabled:
                await asyncio.to_thread(self._store.set_simulation_enabled, point_id, False)
                self.stop(point_id)
                return ToggleResult(active=False, message=f"Simulation stopped for {point_id}")

            updated = await asyncio.to_thread(self._store.set_simulation_enabled, point_id, True)
            if updated is None:
                raise CollectionPointNotFoundError(point_id)
            if not updated.simulation_enabled:
                # the store keeps Inactive points disabled
                return ToggleResult(
                    active=False,
                    message=f"Cannot start simulation for inactive collection point {point_id}",
                )
            self.start(point_id)
            return ToggleResult(active=True, message=f"Simulation started for {point_id}")

    def stop_all(self) -> int:
        """Stop every running simulation. Safe when nothing is running.

        Returns:
            Number of simulations that were running
        """
        handles = list(self._registry.values())
        self._registry.clear()
        for handle in handles:
            self._release(handle)
        logger.info("Stopped all simulations (%d running)", len(handles))
        return len(handles)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for stopped tasks to finish their in-flight tick.

        Tasks still running after ``timeout`` seconds are cancelled.
        """
        pending = set(self._draining)
        if not pending:
            return

        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning(
                "Cancelling %d simulation task(s) that did not stop in time",
                len(still_running),
            )
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)

    async def shutdown(self, timeout: float | None = None) -> None:
        """``stop_all`` and wait for the tasks, before the store goes away."""
        self.stop_all()
        await self.drain(self.settings.shutdown_timeout_seconds if timeout is None else timeout)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def status(self) -> SchedulerStatus:
        running = sorted(self._registry)
        return SchedulerStatus(
            active_count=len(running),
            running_ids=running,
            initialized=self._initialized,
        )

    def is_running(self, point_id: str) -> bool:
        return point_id in self._registry

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def tick(self, point_id: str) -> list[TransactionRecord] | None:
        """Run one generation step for ``point_id`` now.

        Uses the running entry when there is one, so an ineligible point
        also stops its simulation.

        Returns:
            The persisted transactions, or None if nothing was generated
        """
        handle = self._registry.get(point_id) or _SimulationHandle(point_id)
        return await self._tick(handle)

    async def _run(self, handle: _SimulationHandle) -> None:
        loop = asyncio.get_running_loop()
        interval = self.settings.interval_seconds
        next_fire = loop.time() + interval

        while True:
            try:
                await asyncio.wait_for(
                    handle.stop_requested.wait(),
                    timeout=max(0.0, next_fire - loop.time()),
                )
            except asyncio.TimeoutError:
                pass
            else:
                return

            await self._tick(handle)
            # fixed rate; an overrunning tick does not queue up a burst
            next_fire = max(next_fire + interval, loop.time())

    async def _tick(self, handle: _SimulationHandle) -> list[TransactionRecord] | None:
        point_id = handle.point_id
        try:
            point = await asyncio.to_thread(self._store.find_by_id, point_id)
            if point is None or not point.is_eligible:
                await self._self_terminate(handle, point)
                return None
            if handle.stop_requested.is_set():
                return None

            persisted: list[TransactionRecord] = []
            for record in self._generator.generate_batch(point):
                persisted.append(
                    await asyncio.to_thread(self._store.create_transaction, record)
                )
        except Exception:
            logger.exception("Transaction generation failed for %s", point_id)
            return None

        logger.debug("Generated %d transaction(s) for %s", len(persisted), point_id)
        return persisted

    async def _self_terminate(
        self, handle: _SimulationHandle, point: CollectionPointRecord | None
    ) -> None:
        point_id = handle.point_id
        if point is None:
            reason = "not found"
        else:
            reason = f"status={point.status.value}, simulation_enabled={point.simulation_enabled}"
        logger.info("Collection point %s is no longer eligible (%s)", point_id, reason)

        # a stop+start may have replaced this entry already, and an explicit
        # stop means the caller owns the stored flag
        was_registered = self._registry.get(point_id) is handle
        if was_registered:
            del self._registry[point_id]
            self._release(handle)
        handle.stop_requested.set()

        if point is not None and was_registered and self.settings.clear_flag_on_self_stop:
            await asyncio.to_thread(self._store.set_simulation_enabled, point_id, False)

    def _release(self, handle: _SimulationHandle) -> None:
        handle.stop_requested.set()
        task = handle.task
        if task is not None and not task.done() and task is not asyncio.current_task():
            self._draining.add(task)
            task.add_done_callback(self._draining.discard)
