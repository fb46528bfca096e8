"""Progressive safe-spot search driven from the event loop that owns the world."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from mc_safe_teleport.adapters.capabilities import Actor, Messenger, WorldReader
from mc_safe_teleport.models import (
    ActorMode,
    ChunkCoordinate,
    SafeSpot,
    ScanOutcome,
    ScanResult,
    SearchMode,
    SearchState,
    SearchStateError,
    TargetPoint,
    WorldUnavailableError,
)
from mc_safe_teleport.regions import SearchRegion
from mc_safe_teleport.scanner import AsyncScanWorker
from mc_safe_teleport.snapshots import ChunkSnapshot
from mc_safe_teleport.telemetry import LoggingTelemetry, Telemetry
from mc_safe_teleport.teleport import TeleportExecutor, restore_observation_mode

_TRANSITIONS: dict[SearchState, frozenset[SearchState]] = {
    SearchState.SCANNING: frozenset({SearchState.BUSY, SearchState.COMPLETED, SearchState.CANCELLED}),
    SearchState.BUSY: frozenset({SearchState.SCANNING, SearchState.COMPLETED, SearchState.CANCELLED}),
    SearchState.COMPLETED: frozenset(),
    SearchState.CANCELLED: frozenset(),
}


@dataclass(slots=True, eq=False)
class SearchJob:
    """One actor's search. Only the owning scheduler mutates it."""

    actor: Actor
    region: SearchRegion
    mode: SearchMode
    queue: deque[ChunkCoordinate]
    home_slot: int = 1
    failure_message: str = ""
    id: str = field(default_factory=lambda: uuid4().hex)
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    state: SearchState = SearchState.SCANNING
    best_so_far: SafeSpot | None = None
    original_mode: ActorMode | None = None
    batches_dispatched: int = 0
    teleported_to: SafeSpot | None = None
    error: str | None = None
    scheduler: SearchScheduler | None = None

    @property
    def target(self) -> TargetPoint:
        return self.region.origin


class SearchScheduler:
    """Periodic driver that advances a :class:`SearchJob` one batch at a time.

    Each step runs on the event loop: pop up to ``batch_size`` chunk
    coordinates, snapshot them, then await the scan worker. The driver does not
    step again until the batch result has been applied, so at most one batch is
    ever in flight for the job.
    """

    def __init__(
        self,
        job: SearchJob,
        *,
        world: WorldReader,
        worker: AsyncScanWorker,
        executor: TeleportExecutor,
        messenger: Messenger,
        batch_size: int = 50,
        tick_seconds: float = 0.25,
        max_batches: int | None = None,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._job = job
        self._world = world
        self._worker = worker
        self._executor = executor
        self._messenger = messenger
        self._batch_size = batch_size
        self._tick_seconds = tick_seconds
        self._max_batches = max_batches
        self._telemetry = telemetry or LoggingTelemetry()
        self._logger = logger or logging.getLogger("mc_safe_teleport.search")

        self._task: asyncio.Task[None] | None = None
        self._driver_released = False
        self.driver_releases = 0
        self.teleports_executed = 0
        job.scheduler = self

    @property
    def job(self) -> SearchJob:
        return self._job

    @property
    def driver_released(self) -> bool:
        return self._driver_released

    async def start(self) -> None:
        """Start the periodic driver once for this job."""
        if self._task is not None or self._job.state.is_terminal:
            return

        self._task = asyncio.create_task(self._drive(), name=f"safe-spot-search-{self._job.id}")
        self._logger.info(
            "search_started",
            extra={
                "job_id": self._job.id,
                "actor_id": self._job.actor.id,
                "mode": self._job.mode.value,
                "radius": self._job.region.radius,
                "chunks": len(self._job.queue),
            },
        )

    async def wait(self) -> SearchJob:
        """Wait until the job reaches a terminal state and return it."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                if self._job.state is not SearchState.CANCELLED:
                    raise
        return self._job

    async def run(self) -> SearchJob:
        await self.start()
        return await self.wait()

    def cancel(self) -> bool:
        """Stop the search without teleporting. Returns False if it had already finished."""
        job = self._job
        if job.state.is_terminal:
            return False

        self._transition(SearchState.CANCELLED)
        restore_observation_mode(job, self._executor.mover)
        self._logger.info("search_cancelled", extra={"job_id": job.id, "batches": job.batches_dispatched})
        self._emit_finished("cancelled")
        return True

    def release_driver(self) -> None:
        """Stop periodic stepping. Safe to call more than once."""
        if self._driver_released:
            return
        self._driver_released = True
        self.driver_releases += 1

        task = self._task
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
        self._logger.debug("search_driver_released", extra={"job_id": self._job.id})

    async def _drive(self) -> None:
        job = self._job
        while not job.state.is_terminal:
            batch = self.take_batch()
            if batch is None:
                return

            try:
                result = await self._worker.scan(batch, job.mode, job.best_so_far)
            except Exception as exc:  # noqa: BLE001 - a failed batch ends the job instead of the event loop.
                if job.state.is_terminal:
                    return
                self._logger.exception("search_scan_failed", extra={"job_id": job.id})
                self._abort(f"{type(exc).__name__}: {exc}")
                return

            if job.state.is_terminal:
                self._logger.info("search_batch_discarded", extra={"job_id": job.id})
                return

            self.apply_result(result)
            if not job.state.is_terminal:
                await asyncio.sleep(self._tick_seconds)

    def take_batch(self) -> list[ChunkSnapshot] | None:
        """Snapshot the next batch and mark the job busy.

        Returns None when the job was finalized instead (queue exhausted,
        batch ceiling reached, or the world could not be read).
        """
        job = self._job
        if job.state is not SearchState.SCANNING:
            raise SearchStateError(f"Cannot dispatch a batch while job {job.id} is {job.state.value}")

        ceiling_hit = self._max_batches is not None and job.batches_dispatched >= self._max_batches
        if not job.queue or ceiling_hit:
            if ceiling_hit and job.queue:
                self._logger.warning(
                    "search_batch_ceiling_reached",
                    extra={"job_id": job.id, "batches": job.batches_dispatched, "remaining": len(job.queue)},
                )
            self._finalize_exhausted()
            return None

        coords = [job.queue.popleft() for _ in range(min(self._batch_size, len(job.queue)))]
        try:
            snapshots = [self._world.snapshot(job.target.world, coord) for coord in coords]
        except WorldUnavailableError as exc:
            self._logger.exception("search_world_unavailable", extra={"job_id": job.id, "world": job.target.world})
            self._abort(str(exc))
            return None
        except Exception as exc:  # noqa: BLE001 - any host fault while reading chunks ends the job.
            self._logger.exception("search_world_unavailable", extra={"job_id": job.id, "world": job.target.world})
            self._abort(f"{type(exc).__name__}: {exc}")
            return None

        self._transition(SearchState.BUSY)
        job.batches_dispatched += 1
        self._logger.debug(
            "search_batch_dispatched",
            extra={"job_id": job.id, "chunks": len(snapshots), "remaining": len(job.queue)},
        )
        return snapshots

    def apply_result(self, result: ScanResult) -> None:
        """Feed a worker result back into the state machine."""
        job = self._job
        if job.state is not SearchState.BUSY:
            raise SearchStateError(f"Job {job.id} has no batch in flight (state {job.state.value})")

        if result.outcome is ScanOutcome.FOUND and result.spot is not None:
            self._complete(result.spot)
            return

        if result.outcome is ScanOutcome.BEST_SO_FAR and job.best_so_far is None:
            job.best_so_far = result.spot
        self._transition(SearchState.SCANNING)

    def _finalize_exhausted(self) -> None:
        job = self._job
        if job.mode is SearchMode.PORTAL_SEARCH and job.best_so_far is not None:
            self._logger.info("portal_not_found_using_best_spot", extra={"job_id": job.id, "spot": job.best_so_far})
            self._complete(job.best_so_far)
            return

        self._transition(SearchState.COMPLETED)
        job.error = "No safe spot found"
        self._notify_failure()
        restore_observation_mode(job, self._executor.mover)
        self._logger.info("search_no_safe_spot", extra={"job_id": job.id, "batches": job.batches_dispatched})
        self._emit_finished("no_safe_spot")

    def _complete(self, spot: SafeSpot) -> None:
        job = self._job
        if job.teleported_to is not None:
            raise SearchStateError(f"Job {job.id} already teleported")
        self._transition(SearchState.COMPLETED)
        self.teleports_executed += 1
        try:
            self._executor.execute(job, spot)
        except Exception as exc:  # noqa: BLE001 - a refused relocation is reported on the job.
            self._logger.exception("search_teleport_failed", extra={"job_id": job.id, "spot": spot})
            job.error = f"{type(exc).__name__}: {exc}"
            self._notify_failure()
            self._emit_finished("failed")
            return
        job.teleported_to = spot
        self._emit_finished("portal" if spot.is_portal else "teleported")

    def _abort(self, error: str) -> None:
        job = self._job
        self._transition(SearchState.CANCELLED)
        job.error = error
        self._notify_failure()
        restore_observation_mode(job, self._executor.mover)
        self._emit_finished("failed")

    def _notify_failure(self) -> None:
        job = self._job
        if job.failure_message:
            self._messenger.send_message(job.actor, job.failure_message)

    def _transition(self, new_state: SearchState) -> None:
        job = self._job
        if new_state not in _TRANSITIONS[job.state]:
            raise SearchStateError(f"Illegal transition {job.state.value} -> {new_state.value} for job {job.id}")
        job.state = new_state
        if new_state.is_terminal:
            self.release_driver()

    def _emit_finished(self, outcome: str) -> None:
        job = self._job
        self._telemetry.emit(
            "search_finished",
            {
                "job_id": job.id,
                "actor_id": job.actor.id,
                "state": job.state.value,
                "outcome": outcome,
                "batches": job.batches_dispatched,
                "spot": job.teleported_to,
                "error": job.error,
            },
        )


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
