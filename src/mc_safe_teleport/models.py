from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

CHUNK_SIZE = 16
WORLD_HEIGHT_MARGIN = 20


class SafeTeleportError(Exception):
    """Base error for safe-spot search failures."""


class WorldUnavailableError(SafeTeleportError):
    """Raised by a world reader when a chunk cannot be loaded or snapshotted."""


class InvalidBlockRulesError(SafeTeleportError):
    """Raised when a block rule table is internally inconsistent."""


class SearchStateError(SafeTeleportError):
    """Raised on an illegal search job state transition."""


class SearchMode(str, Enum):
    TELEPORT = "teleport"
    PORTAL_SEARCH = "portal_search"


class SearchState(str, Enum):
    """Lifecycle states for a search job."""

    SCANNING = "scanning"
    BUSY = "busy"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SearchState.COMPLETED, SearchState.CANCELLED)


class ActorMode(str, Enum):
    SURVIVAL = "survival"
    CREATIVE = "creative"
    ADVENTURE = "adventure"
    SPECTATOR = "spectator"


class Verdict(str, Enum):
    UNSAFE = "unsafe"
    SAFE = "safe"
    SAFE_PORTAL = "safe_portal"


class ScanOutcome(str, Enum):
    """Result kinds carried back from the scan worker."""

    FOUND = "found"
    BEST_SO_FAR = "best_so_far"
    NO_MATCH = "no_match"


@dataclass(frozen=True, slots=True)
class ChunkCoordinate:
    cx: int
    cz: int

    @classmethod
    def from_block(cls, x: int, z: int) -> ChunkCoordinate:
        return cls(x // CHUNK_SIZE, z // CHUNK_SIZE)


@dataclass(frozen=True, slots=True)
class TargetPoint:
    """Search origin in a named world."""

    world: str
    x: float
    z: float
    y: float | None = None

    @property
    def block_x(self) -> int:
        return math.floor(self.x)

    @property
    def block_z(self) -> int:
        return math.floor(self.z)


@dataclass(frozen=True, slots=True)
class SafeSpot:
    world: str
    x: float
    y: float
    z: float
    is_portal: bool = False

    @classmethod
    def in_chunk(cls, world: str, coord: ChunkCoordinate, x: int, y: int, z: int, *, is_portal: bool) -> SafeSpot:
        """Build the standing spot above column ``(x, z)`` of a chunk at block ``y``."""
        return cls(
            world=world,
            x=coord.cx * CHUNK_SIZE + x + 0.5,
            y=float(y + 1),
            z=coord.cz * CHUNK_SIZE + z + 0.5,
            is_portal=is_portal,
        )


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Explicit value returned by one scan batch."""

    outcome: ScanOutcome
    spot: SafeSpot | None = None
    columns_checked: int = 0
