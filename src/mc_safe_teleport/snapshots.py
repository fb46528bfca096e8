"""Immutable chunk snapshots handed from the world owner to scan workers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from mc_safe_teleport.models import CHUNK_SIZE, ChunkCoordinate

EMPTY_BLOCK = "AIR"


@dataclass(frozen=True, slots=True)
class ChunkSnapshot:
    """Point-in-time copy of one chunk's block names.

    Columns are stored bottom-up and trimmed above their highest non-empty
    block; anything above that (or outside the world) reads as air.
    """

    world: str
    coord: ChunkCoordinate
    max_height: int
    columns: tuple[tuple[str, ...], ...]

    @classmethod
    def from_columns(
        cls,
        world: str,
        coord: ChunkCoordinate,
        max_height: int,
        columns: Mapping[tuple[int, int], Iterable[str]],
    ) -> ChunkSnapshot:
        """Build a snapshot from ``(x, z) -> bottom-up block names`` with local column keys."""
        packed: list[tuple[str, ...]] = []
        for x in range(CHUNK_SIZE):
            for z in range(CHUNK_SIZE):
                blocks = list(columns.get((x, z), ()))[:max_height]
                while blocks and blocks[-1] == EMPTY_BLOCK:
                    blocks.pop()
                packed.append(tuple(blocks))
        return cls(world=world, coord=coord, max_height=max_height, columns=tuple(packed))

    def block_type(self, x: int, y: int, z: int) -> str:
        column = self.columns[x * CHUNK_SIZE + z]
        if 0 <= y < len(column):
            return column[y]
        return EMPTY_BLOCK

    def highest_block_y(self, x: int, z: int) -> int:
        """Y of the top non-empty block in the column, or -1 for an empty column."""
        return len(self.columns[x * CHUNK_SIZE + z]) - 1
