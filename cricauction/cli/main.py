"""
cricauction CLI - Command Line Interface for the auction simulator

Main entry point for all CLI commands.
"""

import random
from typing import Optional

import click

from cricauction.utils.logger import AuctionLogger, parse_levels, setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-dir", default=None, help="Also write logs to this directory")
@click.option("--log-levels", default=None, help="Per-subsystem levels, e.g. ai=DEBUG,timer=WARNING")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, log_dir, log_levels):
    """IPL-style cricket auction simulator"""
    import logging

    try:
        levels = parse_levels(log_levels)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-levels")

    level = logging.DEBUG if debug else logging.INFO
    setup_logging(level=level, log_dir=log_dir, log_to_file=log_dir is not None, levels=levels)

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


# =============================================================================
# Catalog Commands
# =============================================================================


@cli.command("generate-catalog")
@click.option("--count", default=500, type=int, help="Number of players")
@click.option("--seed", default=None, type=int, help="Random seed")
@click.option("--out", "out_path", default="players.json", help="Output JSON file")
def generate_catalog_cmd(count, seed, out_path):
    """Generate a random player catalog"""
    from cricauction.core.catalog import generate_catalog

    catalog = generate_catalog(count=count, seed=seed)
    catalog.to_json(out_path)
    click.echo(f"✓ {len(catalog)} players written to {out_path}")


@cli.command("teams")
def teams_cmd():
    """List the franchises"""
    from cricauction.core.catalog import FRANCHISES

    for team_id, name in FRANCHISES:
        click.echo(f"  {team_id:>2}. {name}")


# =============================================================================
# Simulation
# =============================================================================


def _parse_ids(raw: Optional[str]):
    if not raw:
        return []
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated player ids, got {raw!r}")


@cli.command("simulate")
@click.option("--team", "team_id", default=8, type=int, help="Human team id (see `teams`)")
@click.option("--seed", default=None, type=int, help="Random seed")
@click.option("--count", default=500, type=int, help="Generated catalog size")
@click.option("--catalog", "catalog_path", default=None, help="Catalog JSON (generated if omitted)")
@click.option("--previous", "previous_path", default=None, help="Previous rosters JSON")
@click.option("--config", "config_path", default=None, help="League config JSON")
@click.option("--retain", default=None, help="Comma-separated player ids to retain")
@click.option("--force-end", is_flag=True, help="End the auction even if squads are short")
@click.option("--export", "export_path", default=None, help="Write the auction sheet (.csv or .json)")
@click.option("--quiet", is_flag=True, help="Only print the summary")
def simulate(team_id, seed, count, catalog_path, previous_path, config_path, retain,
             force_end, export_path, quiet):
    """Run a complete auction with the human team idle"""
    from cricauction.core.auction import AuctionPhase, EventKind
    from cricauction.core.catalog import (
        FRANCHISES,
        PlayerCatalog,
        generate_catalog,
        generate_previous_rosters,
        load_previous_rosters,
    )
    from cricauction.core.config import load_config
    from cricauction.core.engine import AuctionEngine
    from cricauction.core.errors import CatalogError, ConfigError
    from cricauction.core.report import build_report, write_report
    from cricauction.core.timer import VirtualScheduler

    try:
        config = load_config(config_path)
        if catalog_path:
            catalog = PlayerCatalog.from_json(catalog_path)
        else:
            catalog = generate_catalog(count=count, rng=random.Random(seed))
        if previous_path:
            previous = load_previous_rosters(previous_path)
        else:
            previous = generate_previous_rosters(
                catalog, [tid for tid, _ in FRANCHISES], rng=random.Random(seed)
            )
    except (CatalogError, ConfigError) as e:
        raise click.ClickException(str(e))

    scheduler = VirtualScheduler()
    AuctionLogger.bind_clock(scheduler.now)
    engine = AuctionEngine(
        catalog,
        config=config,
        scheduler=scheduler,
        rng=random.Random(seed),
        previous_rosters=previous,
    )

    shown = {EventKind.SOLD, EventKind.ROSTER_INCOMPLETE, EventKind.RETENTION_CONFIRMED,
             EventKind.RULE_VIOLATION, EventKind.AUCTION_ENDED}
    if not quiet:
        engine.subscribe(lambda event: click.echo(f"  {event.message}") if event.kind in shown else None)

    ok, err = engine.start(team_id)
    if not ok:
        raise click.ClickException(err)

    if engine.phase is AuctionPhase.RETENTION:
        ids = _parse_ids(retain)
        selection = engine.retention
        for player_id in ids:
            ok, err = selection.toggle(player_id)
            if not ok:
                click.echo(f"⚠️  {err}")
        if selection.selected_ids:
            selected_ids, prices = selection.confirm()
            ok, err = engine.confirm_retention(team_id, selected_ids, prices)
            if not ok:
                raise click.ClickException(err)
        else:
            engine.skip_retention()

    scheduler.run_until_idle()

    if engine.phase is AuctionPhase.BLOCKED:
        if force_end:
            engine.force_end()
        else:
            click.echo("⚠️  Auction blocked: some squads are below the minimum size (use --force-end)")

    click.echo()
    click.echo(f"{'Team':<30} {'Players':>7} {'Overseas':>8} {'Spent':>8} {'Left':>8}")
    click.echo("-" * 65)
    for team in engine.get_teams():
        stats = engine.team_stats(team.id)
        marker = " *" if team.id == team_id else ""
        click.echo(
            f"{team.name + marker:<30} {team.size:>7} {stats.overseas_players:>8} "
            f"{stats.total_spent:>8} {team.budget:>8}"
        )
    click.echo(f"\nSimulated time: {scheduler.now():.1f}s, phase: {engine.phase.name}")

    if export_path:
        path = write_report(build_report(engine.get_transaction_log()), export_path)
        click.echo(f"✓ Auction sheet saved to {path}")


if __name__ == "__main__":
    cli()
