"""In-process adapters for demos, the CLI and tests.

These implement the host capabilities over plain Python data so a full search
can run without a game server.
"""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

from mc_safe_teleport.adapters.capabilities import Actor, ProtectedRegion, Velocity
from mc_safe_teleport.models import CHUNK_SIZE, ActorMode, ChunkCoordinate, SafeSpot, WorldUnavailableError
from mc_safe_teleport.snapshots import EMPTY_BLOCK, ChunkSnapshot


class InMemoryWorld:
    """Sparse block store for a single named world."""

    def __init__(self, name: str = "world", height: int = 256) -> None:
        self.name = name
        self.height = height
        self.unavailable_chunks: set[ChunkCoordinate] = set()
        self.snapshots_taken: list[ChunkCoordinate] = []
        self._chunks: dict[ChunkCoordinate, dict[tuple[int, int], dict[int, str]]] = defaultdict(dict)

    def set_block(self, x: int, y: int, z: int, block: str) -> None:
        if not 0 <= y < self.height:
            raise ValueError(f"y={y} is outside the world (height {self.height})")
        coord = ChunkCoordinate.from_block(x, z)
        column = self._chunks[coord].setdefault((x % CHUNK_SIZE, z % CHUNK_SIZE), {})
        if block == EMPTY_BLOCK:
            column.pop(y, None)
        else:
            column[y] = block

    def fill(self, start: tuple[int, int, int], end: tuple[int, int, int], block: str) -> None:
        (x1, y1, z1), (x2, y2, z2) = start, end
        for x in range(min(x1, x2), max(x1, x2) + 1):
            for y in range(min(y1, y2), max(y1, y2) + 1):
                for z in range(min(z1, z2), max(z1, z2) + 1):
                    self.set_block(x, y, z, block)

    def block_at(self, x: int, y: int, z: int) -> str:
        column = self._chunks.get(ChunkCoordinate.from_block(x, z), {}).get((x % CHUNK_SIZE, z % CHUNK_SIZE), {})
        return column.get(y, EMPTY_BLOCK)

    def snapshot(self, world: str, coord: ChunkCoordinate) -> ChunkSnapshot:
        self._check_world(world)
        if coord in self.unavailable_chunks:
            raise WorldUnavailableError(f"Chunk {coord.cx},{coord.cz} in {world} could not be loaded")

        columns: dict[tuple[int, int], list[str]] = {}
        for key, blocks in self._chunks.get(coord, {}).items():
            if blocks:
                top = max(blocks)
                columns[key] = [blocks.get(y, EMPTY_BLOCK) for y in range(top + 1)]

        self.snapshots_taken.append(coord)
        return ChunkSnapshot.from_columns(world, coord, self.height, columns)

    def _check_world(self, world: str) -> None:
        if world != self.name:
            raise WorldUnavailableError(f"World {world!r} is not loaded")


@dataclass(frozen=True, slots=True)
class SquareRegion:
    """Axis-aligned protected square centred on a block column."""

    center_x: int
    center_z: int
    protection_radius: int

    def contains(self, x: int, z: int) -> bool:
        return (
            abs(x - self.center_x) <= self.protection_radius
            and abs(z - self.center_z) <= self.protection_radius
        )


@dataclass(slots=True)
class StaticRegionProvider:
    """Region lookup over a fixed list of regions (first match wins)."""

    regions: list[ProtectedRegion] = field(default_factory=list)

    def region_at(self, world: str, x: int, z: int) -> ProtectedRegion | None:
        for region in self.regions:
            if region.contains(x, z):
                return region
        return None


@dataclass(slots=True)
class LocalActor:
    id: str
    is_player: bool = True
    mode: ActorMode = ActorMode.SURVIVAL
    location: SafeSpot | None = None
    velocity: Velocity = (0.0, 0.0, 0.0)


@dataclass(slots=True)
class LocalActorMover:
    """Moves :class:`LocalActor` objects; relocation resets velocity like a real server does."""

    teleports: list[tuple[str, SafeSpot]] = field(default_factory=list)
    mode_changes: list[tuple[str, ActorMode]] = field(default_factory=list)

    def teleport(self, actor: LocalActor, spot: SafeSpot) -> None:
        actor.location = spot
        actor.velocity = (0.0, 0.0, 0.0)
        self.teleports.append((actor.id, spot))

    def get_velocity(self, actor: LocalActor) -> Velocity:
        return actor.velocity

    def set_velocity(self, actor: LocalActor, velocity: Velocity) -> None:
        actor.velocity = velocity

    def get_mode(self, actor: LocalActor) -> ActorMode:
        return actor.mode

    def set_mode(self, actor: LocalActor, mode: ActorMode) -> None:
        actor.mode = mode
        self.mode_changes.append((actor.id, mode))


@dataclass(slots=True)
class InMemoryPlayerData:
    homes: dict[tuple[str, int], SafeSpot] = field(default_factory=dict)

    def set_home_slot(self, actor_id: str, spot: SafeSpot, slot: int) -> None:
        self.homes[(actor_id, slot)] = spot


@dataclass(slots=True)
class RecordingMessenger:
    messages: list[tuple[str, str]] = field(default_factory=list)

    def send_message(self, actor: Actor, text: str) -> None:
        self.messages.append((actor.id, text))


class _Fill(BaseModel):
    start: tuple[int, int, int] = Field(alias="from")
    end: tuple[int, int, int] = Field(alias="to")
    block: str


class _Region(BaseModel):
    center: tuple[int, int]
    radius: int = Field(ge=0)


class WorldLayout(BaseModel):
    """JSON description of a small world used by the CLI."""

    world: str = "world"
    height: int = Field(default=256, gt=0)
    fills: list[_Fill] = Field(default_factory=list)
    regions: list[_Region] = Field(default_factory=list)

    def build(self) -> tuple[InMemoryWorld, StaticRegionProvider]:
        world = InMemoryWorld(name=self.world, height=self.height)
        for item in self.fills:
            world.fill(item.start, item.end, item.block.upper())
        provider = StaticRegionProvider(
            [SquareRegion(region.center[0], region.center[1], region.radius) for region in self.regions]
        )
        return world, provider


def load_world_layout(path: str | Path) -> tuple[InMemoryWorld, StaticRegionProvider]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return WorldLayout.model_validate(payload).build()
