"""Off-thread scanning of captured chunk snapshots."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from mc_safe_teleport.blocks import DEFAULT_RULES, BlockRules, classify
from mc_safe_teleport.models import (
    CHUNK_SIZE,
    WORLD_HEIGHT_MARGIN,
    SafeSpot,
    ScanOutcome,
    ScanResult,
    SearchMode,
    Verdict,
)
from mc_safe_teleport.snapshots import ChunkSnapshot

logger = logging.getLogger("mc_safe_teleport.scanner")


def scan_batch(
    snapshots: Sequence[ChunkSnapshot],
    mode: SearchMode,
    *,
    best_so_far: SafeSpot | None = None,
    height_margin: int = WORLD_HEIGHT_MARGIN,
    rules: BlockRules = DEFAULT_RULES,
) -> ScanResult:
    """Walk every column of every snapshot top-down and report what was found.

    Teleport mode stops at the first safe column. Portal mode stops at the first
    portal; the first ordinary safe column is kept as best-so-far unless one was
    already recorded by an earlier batch.
    """
    best = best_so_far
    checked = 0
    for chunk in snapshots:
        ceiling = chunk.max_height - height_margin
        for x in range(CHUNK_SIZE):
            for z in range(CHUNK_SIZE):
                checked += 1
                for y in range(min(chunk.highest_block_y(x, z), ceiling), -1, -1):
                    verdict = classify(
                        chunk.block_type(x, y, z),
                        chunk.block_type(x, min(y + 1, ceiling), z),
                        chunk.block_type(x, min(y + 2, ceiling), z),
                        mode,
                        rules,
                    )
                    if verdict is Verdict.UNSAFE:
                        continue

                    spot = SafeSpot.in_chunk(
                        chunk.world, chunk.coord, x, y, z, is_portal=verdict is Verdict.SAFE_PORTAL
                    )
                    if verdict is Verdict.SAFE_PORTAL:
                        logger.info("portal_found", extra={"spot": spot})
                        return ScanResult(ScanOutcome.FOUND, spot, checked)
                    if mode is SearchMode.TELEPORT:
                        logger.info("safe_spot_found", extra={"spot": spot})
                        return ScanResult(ScanOutcome.FOUND, spot, checked)
                    if best is None:
                        best = spot
                        logger.info("best_spot_stashed", extra={"spot": spot})

    if best is not None:
        return ScanResult(ScanOutcome.BEST_SO_FAR, best, checked)
    return ScanResult(ScanOutcome.NO_MATCH, None, checked)


class AsyncScanWorker:
    """Runs :func:`scan_batch` in a worker thread and returns its result value."""

    def __init__(self, *, height_margin: int = WORLD_HEIGHT_MARGIN, rules: BlockRules = DEFAULT_RULES) -> None:
        self._height_margin = height_margin
        self._rules = rules

    async def scan(
        self,
        snapshots: Sequence[ChunkSnapshot],
        mode: SearchMode,
        best_so_far: SafeSpot | None = None,
    ) -> ScanResult:
        return await asyncio.to_thread(
            scan_batch,
            tuple(snapshots),
            mode,
            best_so_far=best_so_far,
            height_margin=self._height_margin,
            rules=self._rules,
        )
