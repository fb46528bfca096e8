"""Search region resolution and ring-ordered chunk enumeration."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from mc_safe_teleport.adapters.capabilities import ProtectedRegion, RegionProvider
from mc_safe_teleport.models import ChunkCoordinate, TargetPoint


@dataclass(frozen=True, slots=True)
class SearchRegion:
    origin: TargetPoint
    radius: int
    protected: ProtectedRegion | None = None

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError(f"Search radius must be >= 0, got {self.radius}")


def resolve_region(origin: TargetPoint, provider: RegionProvider, default_radius: int) -> SearchRegion:
    """Use the managed region's protection radius when the origin is inside one."""
    protected = provider.region_at(origin.world, origin.block_x, origin.block_z)
    if protected is None:
        return SearchRegion(origin=origin, radius=default_radius)
    return SearchRegion(origin=origin, radius=protected.protection_radius, protected=protected)


def _ring(x: int, z: int, radius: int) -> Iterator[tuple[int, int]]:
    """Yield the block columns on the perimeter of the square ring at ``radius``."""
    if radius == 0:
        yield x, z
        return
    for i in range(x - radius, x + radius + 1):
        yield i, z - radius
        yield i, z + radius
    for j in range(z - radius + 1, z + radius):
        yield x - radius, j
        yield x + radius, j


def enumerate_chunks(region: SearchRegion) -> list[ChunkCoordinate]:
    """Return the chunks to scan, nearest square ring first, each chunk once.

    Ring 0 is always examined; further rings while ``ring < region.radius``.
    Rings are walked only along their perimeter because every interior column
    belongs to an earlier ring.
    """
    x, z = region.origin.block_x, region.origin.block_z
    protected = region.protected

    result: list[ChunkCoordinate] = []
    seen: set[ChunkCoordinate] = set()
    ring = 0
    while True:
        for i, j in _ring(x, z, ring):
            coord = ChunkCoordinate.from_block(i, j)
            if coord in seen:
                continue
            if protected is not None and not protected.contains(i, j):
                continue
            seen.add(coord)
            result.append(coord)
        ring += 1
        if ring >= region.radius:
            break
    return result
