from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import typer

from cli.render import render_sensors, render_sweep
from datastore.sensor_registry import SensorRegistry, build_default_registry
from logging_config import configure_logging
from models.errors import SensorRegistryError
from services.collector import StalenessCollector, build_default_collector


@dataclass
class CLIState:
    registry: SensorRegistry
    collector: StalenessCollector


app = typer.Typer(
    help="Operator shell for the traffic sensor registry.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

MENU = (
    "1. Add Traffic Sensor",
    "2. Remove Traffic Sensor",
    "3. Add Sensor Reading",
    "4. Update Traffic Light Status",
    "5. Display All Active Sensors",
    "6. Display All Sensors (including inactive)",
    "7. Run Garbage Collection",
    "8. Exit System",
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def build_state(stale_after: Optional[float] = None) -> CLIState:
    collector = build_default_collector(stale_after)
    return CLIState(registry=collector.registry, collector=collector)


def release_state(state: CLIState) -> None:
    state.registry.clear()
    build_default_collector.cache_clear()
    build_default_registry.cache_clear()


@app.callback()
def main(
    ctx: typer.Context,
    stale_after: Optional[float] = typer.Option(
        None,
        "--stale-after",
        min=0.0,
        help="Seconds of silence before a sweep marks a sensor inactive "
        "(defaults to TRAFFIC_STALE_THRESHOLD_SECONDS or 3600).",
    ),
) -> None:
    """Entry point for the CLI."""
    state = build_state(stale_after)
    ctx.obj = state
    ctx.call_on_close(lambda: release_state(state))


def _add_sensor(state: CLIState) -> None:
    sensor_id = typer.prompt("Enter sensor ID", type=int)
    location = typer.prompt("Enter location")
    sensor = state.registry.add(sensor_id, location)
    typer.echo(f"Sensor {sensor.sensor_id} at {sensor.location} added successfully.")


def _remove_sensor(state: CLIState) -> None:
    sensor_id = typer.prompt("Enter sensor ID to remove", type=int)
    state.registry.remove(sensor_id)
    typer.echo(f"Sensor {sensor_id} removed successfully.")


def _add_reading(state: CLIState) -> None:
    sensor_id = typer.prompt("Enter sensor ID", type=int)
    value = typer.prompt("Enter reading value", type=float)
    state.registry.add_reading(sensor_id, value)
    typer.echo(f"Reading {value:.2f} added to sensor {sensor_id}.")


def _update_status(state: CLIState) -> None:
    sensor_id = typer.prompt("Enter sensor ID", type=int)
    code = typer.prompt("Enter new status (0=RED, 1=YELLOW, 2=GREEN)", type=int)
    status = state.registry.set_status(sensor_id, code)
    typer.echo(f"Sensor {sensor_id} status changed to {status.name}.")


def _list_active(state: CLIState) -> None:
    render_sensors(state.registry.iter_views(include_inactive=False), total=len(state.registry))


def _list_all(state: CLIState) -> None:
    render_sensors(state.registry.iter_views(include_inactive=True), total=len(state.registry))


def _sweep(state: CLIState) -> None:
    render_sweep(state.collector.sweep())


ACTIONS: Dict[int, Callable[[CLIState], None]] = {
    1: _add_sensor,
    2: _remove_sensor,
    3: _add_reading,
    4: _update_status,
    5: _list_active,
    6: _list_all,
    7: _sweep,
}


@app.command("shell")
def shell_command(ctx: typer.Context) -> None:
    """Run the interactive traffic light management menu."""
    state = _get_state(ctx)
    typer.secho("Smart City Traffic Light Management System", bold=True)

    while True:
        typer.echo()
        typer.echo("Main Menu:")
        for line in MENU:
            typer.echo(line)
        choice = typer.prompt("Enter your choice (1-8)", type=int)

        if choice == 8:
            typer.echo("System shutdown. All sensors released.")
            return

        action = ACTIONS.get(choice)
        if action is None:
            typer.secho("Invalid choice! Please enter 1-8.", fg=typer.colors.RED, err=True)
            continue

        try:
            action(state)
        except SensorRegistryError as exc:
            typer.secho(
                f"{type(exc).__name__}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )


def run() -> None:
    """Console script entry point."""
    configure_logging()
    app()
