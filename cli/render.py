from __future__ import annotations

from typing import Any, Iterable

import typer

from models.schemas import SensorView
from services.collector import SweepReport


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_readings(view: SensorView) -> str:
    values = " ".join(f"{value:.2f}" for value in view.readings)
    return f"({view.reading_count}/{view.reading_capacity}) {values}".rstrip()


def render_sensors(views: Iterable[SensorView], total: int) -> int:
    """Print a sensor listing and return how many sensors were shown.

    ``total`` is the registry size, used to tell an empty registry apart from
    a filter that matched nothing.
    """
    echo_heading("=== Sensor List ===")
    if not total:
        typer.echo("No sensors in system.")
        return 0

    displayed = 0
    for view in views:
        typer.echo()
        echo_key_values(
            [
                ("Sensor ID", view.sensor_id),
                ("Location", view.location),
                ("Status", view.status.name),
                ("Last Updated", f"{view.seconds_since_update} seconds ago"),
                ("Active", "YES" if view.is_active else "NO"),
                ("Readings", _format_readings(view)),
            ]
        )
        displayed += 1

    typer.echo()
    if displayed:
        typer.echo(f"Total displayed: {displayed}")
    else:
        typer.echo("No sensors match the display criteria.")
    return displayed


def render_sweep(report: SweepReport) -> None:
    for sensor_id in report.marked_ids:
        idle = report.idle_seconds.get(sensor_id, 0)
        typer.echo(
            f"Marking sensor {sensor_id} as inactive (last updated: {idle} seconds ago)"
        )
    typer.secho(
        f"Garbage collection completed. {report.count_marked} sensors marked inactive.",
        fg=typer.colors.GREEN,
    )
