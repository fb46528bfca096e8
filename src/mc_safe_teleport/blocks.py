"""Declarative block rules and the column safety classifier.

Every block name falls into exactly one category. The classifier only looks at
categories, so the rule set can be audited (``mc-safe-teleport block-rules``)
and tested without running a scan.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from mc_safe_teleport.models import InvalidBlockRulesError, SearchMode, Verdict


class BlockCategory(str, Enum):
    AIR = "air"
    PORTAL = "portal"
    HAZARD = "hazard"
    FENCE_LIKE = "fence_like"
    ORDINARY = "ordinary"


AIR_BLOCKS = frozenset({"AIR", "CAVE_AIR", "VOID_AIR"})

PORTAL_BLOCKS = frozenset({"PORTAL", "NETHER_PORTAL"})

HAZARD_BLOCKS = frozenset(
    {
        "ANVIL",
        "BARRIER",
        "BOAT",
        "CACTUS",
        "DOUBLE_PLANT",
        "ENDER_PORTAL",
        "FIRE",
        "FLOWER_POT",
        "LADDER",
        "LAVA",
        "LEVER",
        "LONG_GRASS",
        "MINECART",
        "PISTON_EXTENSION",
        "PISTON_MOVING_PIECE",
        "SIGN_POST",
        "SKULL",
        "STANDING_BANNER",
        "STATIONARY_LAVA",
        "STATIONARY_WATER",
        "STONE_BUTTON",
        "TORCH",
        "TRIPWIRE",
        "WATER",
        "WEB",
        "WOOD_BUTTON",
    }
)

FENCE_LIKE_SUBSTRINGS = ("FENCE", "DOOR", "GATE", "PLATE")


class BlockRules:
    """Validated lookup table from block name to :class:`BlockCategory`."""

    __slots__ = ("air", "portal", "hazard", "fence_like_substrings", "_cache")

    def __init__(
        self,
        *,
        air: Iterable[str] = AIR_BLOCKS,
        portal: Iterable[str] = PORTAL_BLOCKS,
        hazard: Iterable[str] = HAZARD_BLOCKS,
        fence_like_substrings: Iterable[str] = FENCE_LIKE_SUBSTRINGS,
    ) -> None:
        self.air = frozenset(air)
        self.portal = frozenset(portal)
        self.hazard = frozenset(hazard)
        self.fence_like_substrings = tuple(fence_like_substrings)
        self._cache: dict[str, BlockCategory] = {}
        self._validate()

    def _validate(self) -> None:
        for name in (*self.air, *self.portal, *self.hazard, *self.fence_like_substrings):
            if not name or name != name.upper():
                raise InvalidBlockRulesError(f"Block names must be non-empty upper case: {name!r}")

        if overlap := self.hazard & self.portal:
            raise InvalidBlockRulesError(f"Blocks cannot be both hazard and portal: {sorted(overlap)}")
        if overlap := self.air & (self.hazard | self.portal):
            raise InvalidBlockRulesError(f"Air blocks cannot carry another category: {sorted(overlap)}")

        # Portal names would otherwise shadow the fence-like rejection.
        for name in self.portal:
            if any(fragment in name for fragment in self.fence_like_substrings):
                raise InvalidBlockRulesError(f"Portal block {name} matches a fence-like fragment")

    def category(self, block: str) -> BlockCategory:
        cached = self._cache.get(block)
        if cached is not None:
            return cached

        name = block.upper()
        if name in self.air:
            category = BlockCategory.AIR
        elif name in self.portal:
            category = BlockCategory.PORTAL
        elif name in self.hazard:
            category = BlockCategory.HAZARD
        elif any(fragment in name for fragment in self.fence_like_substrings):
            category = BlockCategory.FENCE_LIKE
        else:
            category = BlockCategory.ORDINARY

        self._cache[block] = category
        return category

    def describe(self) -> dict[str, list[str]]:
        return {
            BlockCategory.AIR.value: sorted(self.air),
            BlockCategory.PORTAL.value: sorted(self.portal),
            BlockCategory.HAZARD.value: sorted(self.hazard),
            BlockCategory.FENCE_LIKE.value: [f"*{fragment}*" for fragment in self.fence_like_substrings],
        }


DEFAULT_RULES = BlockRules()


def classify(
    candidate: str,
    above: str,
    above2: str,
    mode: SearchMode,
    rules: BlockRules = DEFAULT_RULES,
) -> Verdict:
    """Decide whether an actor can stand on ``candidate`` with ``above``/``above2`` as head room."""
    kind = rules.category(candidate)
    if kind is BlockCategory.AIR:
        return Verdict.UNSAFE

    first, second = rules.category(above), rules.category(above2)
    clear = first is BlockCategory.AIR and second is BlockCategory.AIR
    in_portal = first is BlockCategory.PORTAL and second is BlockCategory.PORTAL
    if not (clear or in_portal):
        return Verdict.UNSAFE

    if kind in (BlockCategory.HAZARD, BlockCategory.FENCE_LIKE):
        return Verdict.UNSAFE
    if kind is BlockCategory.PORTAL:
        return Verdict.SAFE_PORTAL if mode is SearchMode.PORTAL_SEARCH else Verdict.UNSAFE
    return Verdict.SAFE
