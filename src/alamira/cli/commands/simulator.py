from __future__ import annotations

import asyncio
import io

import qrcode
import typer
from rich.console import Console

from alamira.cli.common import load_settings_or_exit
from alamira.core import DeviceState, detect_local_ip, encode_qr_payload, run_simulator
from alamira.core.simulator import RequestLogEntry


def _render_qr(data: str) -> str:
    qr = qrcode.QRCode(border=1)
    qr.add_data(data)
    qr.make(fit=True)
    buffer = io.StringIO()
    qr.print_ascii(out=buffer, invert=True)
    return buffer.getvalue()


def register(app: typer.Typer) -> None:
    @app.command()
    def simulator(
        host: str | None = typer.Option(None, "--host", help="Address to bind"),
        port: int | None = typer.Option(
            None, "--port", "-p", help="Port to listen on"
        ),
        device_id: str | None = typer.Option(
            None, "--device-id", help="Device id to report"
        ),
        advertise_ip: str | None = typer.Option(
            None,
            "--advertise-ip",
            help="Address reported after provisioning (auto-detected by default)",
        ),
    ) -> None:
        """Run a simulated display for development."""
        settings = load_settings_or_exit().simulator
        console = Console()

        bind_host = host or settings.host
        bind_port = port or settings.port
        state = DeviceState(
            device_id=device_id or settings.device_id,
            model=settings.model,
            firmware_version=settings.firmware_version,
            serial=settings.serial,
            current_ip=advertise_ip or settings.advertised_ip or detect_local_ip(),
        )
        payload = encode_qr_payload(state.qr_payload(bind_port))

        console.print(
            f"Starting simulator '{state.device_id}' on {bind_host}:{bind_port}..."
        )
        console.print(f"Pairing payload: {payload}")
        console.print(_render_qr(payload), highlight=False)
        console.print("Press Ctrl+C to stop.\n")

        def on_request(entry: RequestLogEntry) -> None:
            console.print(
                f"[dim]{entry.timestamp:%H:%M:%S}[/dim] "
                f"[cyan]{entry.method}[/cyan] {entry.path} → {entry.status}",
                highlight=False,
            )

        try:
            asyncio.run(
                run_simulator(
                    host=bind_host, port=bind_port, state=state, on_request=on_request
                )
            )
        except KeyboardInterrupt:
            console.print("\n[green]Simulator stopped.[/green]")
