from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from alamira.cli.common import (
    build_registry,
    build_transport,
    load_settings_or_exit,
)
from alamira.errors import TransportError
from alamira.models import DEFAULT_CONNECTION_PORTS, ConnectionType
from alamira.utils.redaction import Redactor

app = typer.Typer(no_args_is_help=True, help="Manage paired devices")


@app.command("list")
def list_devices(
    redact: bool = typer.Option(
        False,
        "--redact",
        help="Redact sensitive values in output",
    ),
) -> None:
    """List paired devices."""
    settings = load_settings_or_exit()
    registry = build_registry(settings)
    devices = registry.list()

    console = Console()

    if not devices:
        console.print("No paired devices.")
        console.print("Use 'alamira onboard' to pair a display.")
        return

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Address")
    table.add_column("Model")
    table.add_column("Firmware")
    table.add_column("Serial")
    table.add_column("Connections")

    for device in sorted(devices, key=lambda d: d.name):
        links = ", ".join(
            f"{c.type.value}@{redactor.redact_ip(c.host)}:{c.port}"
            for c in device.connections
        )
        table.add_row(
            device.id,
            device.name,
            f"{redactor.redact_ip(device.ip)}:{device.port}",
            device.model,
            redactor.redact_version(device.firmware_version),
            redactor.redact_serial(device.serial),
            links,
        )

    console.print(table)


@app.command("rename")
def rename_device(
    device_id: str = typer.Argument(..., help="Device id"),
    name: str = typer.Argument(..., help="New display name"),
) -> None:
    """Rename a paired device."""
    settings = load_settings_or_exit()
    registry = build_registry(settings)

    console = Console()
    if registry.rename(device_id, name) is None:
        console.print(f"[yellow]![/yellow] Device '{device_id}' not found")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Renamed '{device_id}' → '{name}'")


@app.command("remove")
def remove_device(device_id: str = typer.Argument(..., help="Device id")) -> None:
    """Unpair a device."""
    settings = load_settings_or_exit()
    registry = build_registry(settings)

    console = Console()
    if registry.remove(device_id):
        console.print(f"[green]✓[/green] Removed device '{device_id}'")
    else:
        console.print(f"[yellow]![/yellow] Device '{device_id}' not found")
        raise typer.Exit(1)


@app.command("link")
def link_connection(
    device_id: str = typer.Argument(..., help="Device id"),
    connection_type: ConnectionType = typer.Argument(..., help="Data source type"),
    host: str = typer.Argument(..., help="Data source host"),
    port: int | None = typer.Option(None, "--port", "-p", help="Data source port"),
    name: str | None = typer.Option(None, "--name", help="Optional label"),
) -> None:
    """Link a Signal K or NMEA data source to a device."""
    settings = load_settings_or_exit()
    registry = build_registry(settings)
    resolved_port = port or DEFAULT_CONNECTION_PORTS[connection_type]

    console = Console()
    connection = registry.link_connection(
        device_id, connection_type, host, resolved_port, name
    )
    if connection is None:
        console.print(f"[yellow]![/yellow] Device '{device_id}' not found")
        raise typer.Exit(1)
    console.print(
        f"[green]✓[/green] Linked {connection_type.value} {host}:{resolved_port} "
        f"to '{device_id}' (id {connection.id})"
    )


@app.command("unlink")
def unlink_connection(
    device_id: str = typer.Argument(..., help="Device id"),
    connection_id: str = typer.Argument(..., help="Connection id"),
) -> None:
    """Remove a linked data source from a device."""
    settings = load_settings_or_exit()
    registry = build_registry(settings)

    console = Console()
    if registry.unlink_connection(device_id, connection_id):
        console.print(f"[green]✓[/green] Unlinked '{connection_id}'")
    else:
        console.print(f"[yellow]![/yellow] Connection '{connection_id}' not found")
        raise typer.Exit(1)


@app.command("status")
def device_status(device_id: str = typer.Argument(..., help="Device id")) -> None:
    """Query the live status of a paired device."""
    settings = load_settings_or_exit()
    registry = build_registry(settings)

    console = Console()
    device = registry.get(device_id)
    if device is None:
        console.print(f"[yellow]![/yellow] Device '{device_id}' not found")
        raise typer.Exit(1)

    transport = build_transport(settings)
    try:
        status = asyncio.run(transport.get_status(device.ip, device.port))
    except TransportError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    console.print(f"[bold]{device.name}[/bold] ({device.id})")
    console.print(f"Network: {status.ssid}")
    console.print(f"Address: {status.ip}")
    console.print(f"Signal: {status.wifi_rssi} dBm")
    console.print(f"Uptime: {status.uptime}s")
