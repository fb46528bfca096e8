"""CLI entrypoint for running safe-spot searches against a local world layout."""

from __future__ import annotations

import asyncio
from dataclasses import asdict

import typer
from rich import print

from mc_safe_teleport.adapters import (
    InMemoryPlayerData,
    LocalActor,
    LocalActorMover,
    RecordingMessenger,
    load_world_layout,
)
from mc_safe_teleport.blocks import DEFAULT_RULES
from mc_safe_teleport.config import settings
from mc_safe_teleport.models import InvalidBlockRulesError, TargetPoint
from mc_safe_teleport.service import SafeSpotTeleport, SafeTeleportRequest
from mc_safe_teleport.telemetry import configure_logging

app = typer.Typer(help="Safe-spot teleport search")


@app.callback()
def main(log_level: str = typer.Option(None, help="Override MC_SAFE_TELEPORT_LOG_LEVEL")) -> None:
    configure_logging(log_level or settings.log_level)


@app.command()
def start() -> None:
    """Show effective search configuration."""
    print(settings.model_dump())


@app.command("block-rules")
def block_rules() -> None:
    """Print the block categories the classifier uses."""
    print(DEFAULT_RULES.describe())


@app.command("find-spot")
def find_spot(
    layout: str = typer.Option(..., help="Path to a JSON world layout"),
    x: float = typer.Option(..., help="Target X"),
    z: float = typer.Option(..., help="Target Z"),
    portal: bool = typer.Option(False, help="Prefer portal blocks, fall back to the first safe spot"),
    entity: bool = typer.Option(False, help="Move a non-player entity instead of a player"),
    home_slot: int = typer.Option(1, help="Home slot written on success (player, non-portal)"),
    failure_message: str = typer.Option("No safe spot found", help="Message sent when nothing is found"),
    default_radius: int = typer.Option(None, help="Radius when the target is outside every region"),
) -> None:
    """Search a world layout for a safe spot near (x, z) and report where the actor ended up."""
    try:
        world, regions = load_world_layout(layout)
    except (OSError, ValueError, InvalidBlockRulesError) as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=2)

    overrides: dict = {"seconds_per_tick": 0.0}
    if default_radius is not None:
        overrides["default_protection_radius"] = default_radius
    run_settings = settings.model_copy(update=overrides)

    actor = LocalActor(id="cli-actor", is_player=not entity)
    mover = LocalActorMover()
    player_data = InMemoryPlayerData()
    messenger = RecordingMessenger()
    service = SafeSpotTeleport(
        world=world,
        regions=regions,
        mover=mover,
        player_data=player_data,
        messenger=messenger,
        settings=run_settings,
    )
    request = SafeTeleportRequest(
        actor=actor,
        target=TargetPoint(world=world.name, x=x, z=z),
        portal=portal,
        home_slot=home_slot,
        failure_message=failure_message,
    )

    async def _run():
        scheduler = await service.teleport(request)
        return await scheduler.wait()

    job = asyncio.run(_run())
    print(
        {
            "job_id": job.id,
            "state": job.state.value,
            "batches": job.batches_dispatched,
            "spot": asdict(job.teleported_to) if job.teleported_to else None,
            "messages": [text for _, text in messenger.messages],
            "homes": {slot: asdict(spot) for (_, slot), spot in player_data.homes.items()},
            "actor_mode": actor.mode.value,
        }
    )
    if job.teleported_to is None:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
