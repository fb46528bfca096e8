"""Boundary for the host game runtime.

The search core only talks to the world and to actors through these narrow
capabilities, so it can run against a live server or the in-memory adapters.
"""

from __future__ import annotations

from typing import Protocol

from mc_safe_teleport.models import ActorMode, ChunkCoordinate, SafeSpot
from mc_safe_teleport.snapshots import ChunkSnapshot

Velocity = tuple[float, float, float]


class Actor(Protocol):
    """Anything that can be relocated: a player or another entity."""

    @property
    def id(self) -> str: ...

    @property
    def is_player(self) -> bool: ...


class ProtectedRegion(Protocol):
    """A managed area with its own protection radius and arbitrary shape."""

    @property
    def protection_radius(self) -> int: ...

    def contains(self, x: int, z: int) -> bool:
        """Return True when block column ``(x, z)`` lies inside the region."""


class RegionProvider(Protocol):
    def region_at(self, world: str, x: int, z: int) -> ProtectedRegion | None:
        """Return the managed region containing the block, if any."""


class WorldReader(Protocol):
    """Synchronous access to chunk data. Must only be called from the world owner."""

    def snapshot(self, world: str, coord: ChunkCoordinate) -> ChunkSnapshot:
        """Load the chunk if needed and return an immutable copy of it.

        Raises ``WorldUnavailableError`` when the world or chunk cannot be read.
        """


class ActorMover(Protocol):
    def teleport(self, actor: Actor, spot: SafeSpot) -> None: ...

    def get_velocity(self, actor: Actor) -> Velocity: ...

    def set_velocity(self, actor: Actor, velocity: Velocity) -> None: ...

    def get_mode(self, actor: Actor) -> ActorMode: ...

    def set_mode(self, actor: Actor, mode: ActorMode) -> None: ...


class PlayerDataStore(Protocol):
    def set_home_slot(self, actor_id: str, spot: SafeSpot, slot: int) -> None:
        """Persist ``spot`` as the actor's numbered home."""


class Messenger(Protocol):
    def send_message(self, actor: Actor, text: str) -> None:
        """Deliver already-localized text to the actor."""
