"""Main CLI entry point for WasteMap."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

import click

from wastemap import __version__
from wastemap.config.settings import Settings, configure_settings, get_settings


def _store():
    from wastemap.database import configure_engine, init_db
    from wastemap.store import SqlDetectionStore

    settings = get_settings()
    configure_engine(settings.database.url, echo=settings.database.echo)
    init_db()
    return SqlDetectionStore()


def _reconciler():
    from wastemap.detection import DetectionReconciler

    settings = get_settings()
    return DetectionReconciler(
        lat_threshold=settings.reconcile.lat_threshold,
        lon_threshold=settings.reconcile.lon_threshold,
    )


@click.group()
@click.version_option(version=__version__, prog_name="wastemap")
@click.option("--config", type=click.Path(exists=True), help="Path to config YAML")
@click.option("--database-url", help="Override the database URL")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(config: Optional[str], database_url: Optional[str], verbose: bool) -> None:
    """WasteMap - garbage overflow heatmap engine.

    Reconcile cleaned signals against active detections and keep the
    heatmap store tidy.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_yaml(Path(config)) if config else Settings()
    if database_url:
        settings.database.url = database_url
    configure_settings(settings)


@cli.command("init-db")
def init_db_command() -> None:
    """Create the detection tables."""
    _store()
    click.echo(f"Database ready at {get_settings().database.url}")


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_documents(path: str) -> None:
    """Import raw detection documents from a JSON file.

    The file holds a list of documents in any of the accepted shapes
    (nested or flat location, confidence array or scalar).
    """
    with open(path) as f:
        documents = json.load(f)

    if isinstance(documents, dict):
        documents = [dict(doc, id=doc_id) for doc_id, doc in documents.items()]

    added = _store().add_documents(documents)
    click.echo(f"Import complete: {added} imported, {len(documents) - added} skipped")


@cli.command()
@click.option("--apply", is_flag=True, help="Delete retired detections from the store")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def reconcile(apply: bool, as_json: bool) -> None:
    """Show which detections cleaned signals would retire."""
    from wastemap.detection import HeatmapSummary

    store = _store()
    result = _reconciler().reconcile(store.list_detections())
    summary = HeatmapSummary.from_result(result)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "decisions": [d.to_dict() for d in result.decisions],
                    "active_records": [r.to_dict() for r in result.active_records],
                    "summary": summary.to_dict(),
                },
                indent=2,
            )
        )
    else:
        click.echo(f"{'Cleaned':<34} {'Outcome':<8} {'Retired':<34} {'Distance'}")
        click.echo("-" * 90)
        for decision in result.decisions:
            distance = (
                f"{decision.distance_m:.0f} m" if decision.distance_m is not None else "-"
            )
            click.echo(
                f"{decision.cleaned_record_id:<34} {decision.outcome.value:<8} "
                f"{decision.retired_record_id or '-':<34} {distance}"
            )
        click.echo()
        click.echo(f"Heatmap points: {summary.total_points}")
        click.echo(f"Average intensity: {summary.average_intensity:.2f}")
        click.echo(f"To remove: {summary.removed_count}")

    if apply:
        from wastemap.cleanup import CleanupScheduler

        stats = CleanupScheduler.from_settings(store, get_settings()).apply(result)
        click.echo(json.dumps(stats.summary()))


@cli.command()
@click.argument("record_id")
def inspect(record_id: str) -> None:
    """Show what reconciliation does with a single detection."""
    store = _store()
    result = _reconciler().reconcile(store.list_detections())
    outcome = result.outcome_for(record_id)
    if outcome is None:
        raise click.ClickException(f"Detection {record_id} not found")

    click.echo(f"Detection {record_id}: {outcome.value}")
    for decision in result.decisions:
        if record_id in (decision.cleaned_record_id, decision.retired_record_id):
            click.echo(f"  {decision.reason}")


@cli.command()
def cleanup() -> None:
    """Run one cleanup pass now."""
    from wastemap.cleanup import CleanupScheduler

    scheduler = CleanupScheduler.from_settings(_store(), get_settings())
    stats = scheduler.run_once()

    if stats.removed_count == 0 and stats.error_count == 0:
        click.echo("Nothing to clean")
    click.echo(json.dumps(stats.summary()))


@cli.command()
@click.option("--interval", type=float, help="Seconds between runs (default from settings)")
def schedule(interval: Optional[float]) -> None:
    """Run cleanup on a schedule until interrupted."""
    from wastemap.cleanup import CleanupScheduler

    settings = get_settings()
    interval = interval or settings.cleanup.interval_seconds
    scheduler = CleanupScheduler.from_settings(_store(), settings)

    handle = scheduler.start(interval)
    click.echo(f"Cleaning every {interval:.0f}s. Press Ctrl+C to stop")
    try:
        while handle.running:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop(handle)
        handle.join()

    stats = scheduler.get_stats()
    if stats is not None:
        click.echo(f"Last run: {json.dumps(stats.to_dict())}")


@cli.command()
def stats() -> None:
    """Show detection counts in the store."""
    inventory = _store().inventory()
    for key, value in inventory.items():
        click.echo(f"{key.replace('_', ' ').capitalize():<22} {value}")


@cli.group()
def demo() -> None:
    """Demo data commands."""
    pass


@demo.command("generate")
@click.option("--count", default=50, help="Number of detections to generate")
@click.option("--cleaned-ratio", default=0.2, help="Share of cleaned signals")
def demo_generate(count: int, cleaned_ratio: float) -> None:
    """Generate demo detection records."""
    import random
    import uuid
    from datetime import datetime, timedelta, timezone

    from wastemap.core.records import Coordinates, DetectionRecord

    click.echo(f"Generating {count} demo detections...")

    hotspots = [
        (22.6950, 88.3794, "Belur Math Road"),
        (22.5726, 88.3639, "Esplanade"),
        (22.5868, 88.4171, "Salt Lake Sector V"),
        (22.5176, 88.3840, "Gariahat Market"),
        (22.6420, 88.4312, "Dum Dum Park"),
    ]

    records = []
    for i in range(count):
        lat, lon, address = random.choice(hotspots)
        lat += random.uniform(-0.004, 0.004)
        lon += random.uniform(-0.004, 0.004)

        objects = random.randint(1, 4)
        if random.random() < cleaned_ratio:
            scores = tuple(0.0 for _ in range(objects))
        else:
            scores = tuple(round(random.uniform(0.3, 0.98), 3) for _ in range(objects))

        records.append(
            DetectionRecord(
                id=f"DEMO_{uuid.uuid4().hex[:12]}",
                coordinates=Coordinates(latitude=lat, longitude=lon),
                confidence_scores=scores,
                address=address,
                created_at=datetime.now(timezone.utc)
                - timedelta(hours=random.randint(0, 168)),
                accuracy_m=round(random.uniform(5, 100), 1),
            )
        )

    added = _store().add(records)
    click.echo(f"Successfully created {added} demo detections")


if __name__ == "__main__":
    cli()
