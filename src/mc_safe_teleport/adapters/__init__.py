"""Host runtime capabilities and in-process implementations of them."""

from .capabilities import (
    Actor,
    ActorMover,
    Messenger,
    PlayerDataStore,
    ProtectedRegion,
    RegionProvider,
    Velocity,
    WorldReader,
)
from .local import (
    InMemoryPlayerData,
    InMemoryWorld,
    LocalActor,
    LocalActorMover,
    RecordingMessenger,
    SquareRegion,
    StaticRegionProvider,
    WorldLayout,
    load_world_layout,
)

__all__ = [
    "Actor",
    "ActorMover",
    "InMemoryPlayerData",
    "InMemoryWorld",
    "LocalActor",
    "LocalActorMover",
    "Messenger",
    "PlayerDataStore",
    "ProtectedRegion",
    "RecordingMessenger",
    "RegionProvider",
    "SquareRegion",
    "StaticRegionProvider",
    "Velocity",
    "WorldLayout",
    "WorldReader",
    "load_world_layout",
]
