"""Actor relocation and the actor-state transitions around it.

Everything here mutates live actor state and must run on the event loop that
owns the world, never in a scan worker thread.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mc_safe_teleport.adapters.capabilities import ActorMover, PlayerDataStore
from mc_safe_teleport.models import ActorMode, SafeSpot, SearchMode

if TYPE_CHECKING:
    from mc_safe_teleport.search import SearchJob

OBSERVATION_MODE = ActorMode.SPECTATOR


def enter_observation_mode(job: SearchJob, mover: ActorMover) -> None:
    """Switch a surviving player to spectator while its search runs."""
    actor = job.actor
    if not actor.is_player:
        return
    current = mover.get_mode(actor)
    if current is ActorMode.SURVIVAL:
        job.original_mode = current
        mover.set_mode(actor, OBSERVATION_MODE)


def restore_observation_mode(job: SearchJob, mover: ActorMover) -> bool:
    """Undo :func:`enter_observation_mode`. Returns True if the mode was toggled back."""
    original = job.original_mode
    if original is None:
        return False
    job.original_mode = None
    if mover.get_mode(job.actor) is not OBSERVATION_MODE:
        # Something else changed the mode during the search; leave it alone.
        return False
    mover.set_mode(job.actor, original)
    return True


class TeleportExecutor:
    def __init__(
        self,
        mover: ActorMover,
        player_data: PlayerDataStore,
        logger: logging.Logger | None = None,
    ) -> None:
        self._mover = mover
        self._player_data = player_data
        self._logger = logger or logging.getLogger("mc_safe_teleport.teleport")

    @property
    def mover(self) -> ActorMover:
        return self._mover

    def execute(self, job: SearchJob, spot: SafeSpot) -> None:
        """Relocate the job's actor to ``spot``.

        Order matters: the periodic driver is released first, the home slot is
        written before the move, and velocity is restored after it because a
        relocation resets momentum for non-player entities. The observation
        mode is restored even when the host refuses the move.
        """
        job.scheduler.release_driver()
        actor = job.actor

        try:
            if job.mode is SearchMode.TELEPORT and actor.is_player:
                self._player_data.set_home_slot(actor.id, spot, job.home_slot)

            velocity = self._mover.get_velocity(actor)
            self._mover.teleport(actor, spot)
            if not actor.is_player:
                self._mover.set_velocity(actor, velocity)
        finally:
            restored = restore_observation_mode(job, self._mover)

        self._logger.info(
            "actor_teleported",
            extra={
                "job_id": job.id,
                "actor_id": actor.id,
                "spot": spot,
                "portal": spot.is_portal,
                "mode_restored": restored,
            },
        )
