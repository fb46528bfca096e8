from __future__ import annotations

from collections import deque

import pytest

from mc_safe_teleport.adapters import InMemoryPlayerData, LocalActor, LocalActorMover
from mc_safe_teleport.models import ActorMode, SafeSpot, SearchMode, TargetPoint
from mc_safe_teleport.regions import SearchRegion
from mc_safe_teleport.search import SearchJob
from mc_safe_teleport.teleport import TeleportExecutor, enter_observation_mode, restore_observation_mode

SPOT = SafeSpot("world", 4.5, 65.0, 4.5)


class StubScheduler:
    def __init__(self) -> None:
        self.releases = 0

    def release_driver(self) -> None:
        self.releases += 1


def _job(actor: LocalActor, mode: SearchMode = SearchMode.TELEPORT, home_slot: int = 2) -> SearchJob:
    job = SearchJob(
        actor=actor,
        region=SearchRegion(origin=TargetPoint("world", 0, 0), radius=0),
        mode=mode,
        queue=deque(),
        home_slot=home_slot,
    )
    job.scheduler = StubScheduler()
    return job


def test_player_teleport_sets_home_and_leaves_spectator() -> None:
    actor = LocalActor(id="alex")
    mover = LocalActorMover()
    homes = InMemoryPlayerData()
    job = _job(actor)
    enter_observation_mode(job, mover)

    assert actor.mode == ActorMode.SPECTATOR

    TeleportExecutor(mover, homes).execute(job, SPOT)

    assert job.scheduler.releases == 1
    assert homes.homes == {("alex", 2): SPOT}
    assert actor.location == SPOT
    assert actor.mode == ActorMode.SURVIVAL
    assert mover.mode_changes == [("alex", ActorMode.SPECTATOR), ("alex", ActorMode.SURVIVAL)]


def test_portal_search_does_not_touch_home_slots() -> None:
    actor = LocalActor(id="alex")
    homes = InMemoryPlayerData()

    TeleportExecutor(LocalActorMover(), homes).execute(_job(actor, SearchMode.PORTAL_SEARCH), SPOT)

    assert homes.homes == {}
    assert actor.location == SPOT


def test_entity_keeps_its_velocity() -> None:
    pig = LocalActor(id="pig", is_player=False, velocity=(0.3, 0.0, -0.2))
    homes = InMemoryPlayerData()
    mover = LocalActorMover()

    TeleportExecutor(mover, homes).execute(_job(pig), SPOT)

    assert pig.velocity == (0.3, 0.0, -0.2)
    assert homes.homes == {}
    assert mover.teleports == [("pig", SPOT)]


def test_player_velocity_is_not_restored() -> None:
    actor = LocalActor(id="alex", velocity=(1.0, 0.0, 0.0))

    TeleportExecutor(LocalActorMover(), InMemoryPlayerData()).execute(_job(actor), SPOT)

    assert actor.velocity == (0.0, 0.0, 0.0)


def test_observation_mode_only_applies_to_surviving_players() -> None:
    mover = LocalActorMover()
    creative = LocalActor(id="builder", mode=ActorMode.CREATIVE)
    entity = LocalActor(id="cow", is_player=False)

    enter_observation_mode(_job(creative), mover)
    enter_observation_mode(_job(entity), mover)

    assert creative.mode == ActorMode.CREATIVE
    assert entity.mode == ActorMode.SURVIVAL
    assert mover.mode_changes == []


def test_restore_leaves_externally_changed_mode_alone() -> None:
    actor = LocalActor(id="alex")
    mover = LocalActorMover()
    job = _job(actor)
    enter_observation_mode(job, mover)
    actor.mode = ActorMode.CREATIVE

    assert restore_observation_mode(job, mover) is False
    assert actor.mode == ActorMode.CREATIVE
    assert job.original_mode is None


def test_refused_move_still_restores_mode() -> None:
    class RefusingMover(LocalActorMover):
        def teleport(self, actor, spot):
            raise RuntimeError("teleport refused")

    actor = LocalActor(id="alex")
    mover = RefusingMover()
    job = _job(actor)
    enter_observation_mode(job, mover)

    with pytest.raises(RuntimeError, match="teleport refused"):
        TeleportExecutor(mover, InMemoryPlayerData()).execute(job, SPOT)

    assert job.scheduler.releases == 1
    assert actor.location is None
    assert actor.mode == ActorMode.SURVIVAL
    assert job.original_mode is None
