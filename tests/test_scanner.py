from __future__ import annotations

import asyncio

from mc_safe_teleport.adapters import InMemoryWorld
from mc_safe_teleport.models import WORLD_HEIGHT_MARGIN, ChunkCoordinate, SafeSpot, ScanOutcome, SearchMode
from mc_safe_teleport.scanner import AsyncScanWorker, scan_batch

ORIGIN = ChunkCoordinate(0, 0)


def _world(height: int = 128) -> InMemoryWorld:
    return InMemoryWorld(name="world", height=height)


def test_column_is_walked_top_down() -> None:
    world = _world()
    world.set_block(3, 10, 4, "STONE")
    world.set_block(3, 60, 4, "STONE")

    result = scan_batch([world.snapshot("world", ORIGIN)], SearchMode.TELEPORT)

    assert result.outcome == ScanOutcome.FOUND
    assert result.spot == SafeSpot("world", 3.5, 61.0, 4.5)


def test_walk_starts_below_the_height_margin() -> None:
    world = _world(height=100)
    world.set_block(2, 90, 2, "STONE")
    world.set_block(2, 50, 2, "GRASS")

    result = scan_batch([world.snapshot("world", ORIGIN)], SearchMode.TELEPORT, height_margin=WORLD_HEIGHT_MARGIN)

    assert result.spot == SafeSpot("world", 2.5, 51.0, 2.5)


def test_spot_offset_uses_chunk_origin() -> None:
    world = _world()
    world.set_block(-14, 30, 33, "DIRT")
    coord = ChunkCoordinate.from_block(-14, 33)

    result = scan_batch([world.snapshot("world", coord)], SearchMode.TELEPORT)

    assert coord == ChunkCoordinate(-1, 2)
    assert result.spot == SafeSpot("world", -13.5, 31.0, 33.5)


def test_hazard_tops_are_skipped_for_lower_ground() -> None:
    world = _world()
    world.set_block(5, 70, 5, "LAVA")
    world.set_block(5, 40, 5, "STONE")

    result = scan_batch([world.snapshot("world", ORIGIN)], SearchMode.TELEPORT)

    assert result.spot == SafeSpot("world", 5.5, 41.0, 5.5)


def test_portal_mode_records_first_safe_spot_and_keeps_looking() -> None:
    world = _world()
    world.set_block(1, 64, 1, "STONE")
    world.set_block(2, 64, 2, "STONE")

    result = scan_batch([world.snapshot("world", ORIGIN)], SearchMode.PORTAL_SEARCH)

    assert result.outcome == ScanOutcome.BEST_SO_FAR
    assert result.spot == SafeSpot("world", 1.5, 65.0, 1.5)
    assert result.columns_checked == 256


def test_portal_mode_never_overwrites_existing_best() -> None:
    world = _world()
    world.set_block(1, 64, 1, "STONE")
    earlier = SafeSpot("world", 100.5, 70.0, 100.5)

    result = scan_batch([world.snapshot("world", ORIGIN)], SearchMode.PORTAL_SEARCH, best_so_far=earlier)

    assert result.outcome == ScanOutcome.BEST_SO_FAR
    assert result.spot == earlier


def test_portal_short_circuits_the_batch() -> None:
    world = _world()
    world.set_block(0, 64, 0, "STONE")
    world.fill((9, 64, 9), (9, 66, 9), "PORTAL")
    other = ChunkCoordinate(1, 0)
    world.set_block(20, 64, 0, "STONE")

    snapshots = [world.snapshot("world", ORIGIN), world.snapshot("world", other)]
    result = scan_batch(snapshots, SearchMode.PORTAL_SEARCH)

    assert result.outcome == ScanOutcome.FOUND
    assert result.spot == SafeSpot("world", 9.5, 67.0, 9.5, is_portal=True)
    assert result.columns_checked < 512


def test_empty_batch_reports_no_match() -> None:
    world = _world()

    result = scan_batch([world.snapshot("world", ORIGIN)], SearchMode.TELEPORT)

    assert result.outcome == ScanOutcome.NO_MATCH
    assert result.spot is None


def test_async_worker_matches_direct_scan() -> None:
    world = _world()
    world.set_block(7, 12, 8, "SAND")
    snapshots = [world.snapshot("world", ORIGIN)]

    result = asyncio.run(AsyncScanWorker().scan(snapshots, SearchMode.TELEPORT))

    assert result == scan_batch(snapshots, SearchMode.TELEPORT)
