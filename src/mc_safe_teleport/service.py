from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from .adapters.capabilities import Actor, ActorMover, Messenger, PlayerDataStore, RegionProvider, WorldReader
from .blocks import DEFAULT_RULES, BlockRules
from .config import Settings, settings as default_settings
from .models import SearchMode, TargetPoint
from .regions import enumerate_chunks, resolve_region
from .scanner import AsyncScanWorker
from .search import SearchJob, SearchScheduler
from .telemetry import Telemetry
from .teleport import TeleportExecutor, enter_observation_mode


@dataclass(slots=True)
class SafeTeleportRequest:
    """What a command handler asks for: who goes where, and how."""

    actor: Actor
    target: TargetPoint
    portal: bool = False
    home_slot: int = 1
    failure_message: str = ""

    @property
    def mode(self) -> SearchMode:
        return SearchMode.PORTAL_SEARCH if self.portal else SearchMode.TELEPORT


class SafeSpotTeleport:
    def __init__(
        self,
        *,
        world: WorldReader,
        regions: RegionProvider,
        mover: ActorMover,
        player_data: PlayerDataStore,
        messenger: Messenger,
        settings: Settings | None = None,
        rules: BlockRules = DEFAULT_RULES,
        telemetry: Telemetry | None = None,
    ):
        self.settings = settings or default_settings
        self.world = world
        self.regions = regions
        self.mover = mover
        self.messenger = messenger
        self.telemetry = telemetry
        self.executor = TeleportExecutor(mover, player_data)
        self.worker = AsyncScanWorker(height_margin=self.settings.world_height_margin, rules=rules)
        self._logger = logging.getLogger("mc_safe_teleport.service")

    def prepare(self, request: SafeTeleportRequest) -> SearchScheduler:
        """Build the job and its scheduler without starting it."""
        region = resolve_region(request.target, self.regions, self.settings.default_protection_radius)
        job = SearchJob(
            actor=request.actor,
            region=region,
            mode=request.mode,
            queue=deque(enumerate_chunks(region)),
            home_slot=request.home_slot,
            failure_message=request.failure_message,
        )
        return SearchScheduler(
            job,
            world=self.world,
            worker=self.worker,
            executor=self.executor,
            messenger=self.messenger,
            batch_size=self.settings.batch_size,
            tick_seconds=self.settings.tick_seconds,
            max_batches=self.settings.max_batches,
            telemetry=self.telemetry,
        )

    async def teleport(self, request: SafeTeleportRequest) -> SearchScheduler:
        """Start a search for ``request`` and return its running scheduler."""
        scheduler = self.prepare(request)
        if self.settings.observation_mode_enabled:
            enter_observation_mode(scheduler.job, self.mover)
        await scheduler.start()
        self._logger.debug(
            "safe_teleport_requested",
            extra={"job_id": scheduler.job.id, "protected": scheduler.job.region.protected is not None},
        )
        return scheduler
