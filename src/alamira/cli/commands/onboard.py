from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from alamira.cli.common import build_flow, build_registry, load_settings_or_exit
from alamira.core import OnboardingFlow
from alamira.errors import OnboardingError
from alamira.models import OnboardingStep, PairedDevice

logger = logging.getLogger(__name__)


def _print_error(console: Console, flow: OnboardingFlow) -> None:
    if flow.session.error:
        console.print(f"[red]Error:[/red] {flow.session.error}")


def _print_networks(console: Console, flow: OnboardingFlow) -> None:
    if not flow.session.networks:
        console.print("[yellow]No WiFi networks visible to the device.[/yellow]")
        return

    table = Table(title="Networks visible to the device")
    table.add_column("SSID", style="cyan")
    table.add_column("Signal (dBm)", justify="right")
    table.add_column("Security")
    for network in sorted(flow.session.networks, key=lambda n: n.rssi, reverse=True):
        table.add_row(network.ssid, str(network.rssi), network.security.value)
    console.print(table)


async def _firmware_step(
    console: Console, flow: OnboardingFlow, skip_firmware: bool
) -> bool:
    update = flow.check_firmware_update()
    if not update.update_available:
        console.print(f"Firmware v{update.current_version} is up to date.")
        return await flow.advance_past_firmware()

    console.print(
        f"Firmware update available: v{update.current_version} → "
        f"v{update.available_version}"
    )
    if update.release_notes:
        console.print(f"[dim]{update.release_notes}[/dim]")

    if skip_firmware or not typer.confirm("Install the update now?", default=True):
        return await flow.skip_firmware_update()

    await flow.apply_firmware_update(
        on_progress=lambda percent: console.print(f"  Updating... {percent}%")
    )
    return await flow.advance_past_firmware()


async def _wifi_step(
    console: Console, flow: OnboardingFlow, ssid: str | None, password: str | None
) -> bool:
    while flow.step is OnboardingStep.WIFI_SETUP:
        _print_networks(console, flow)
        chosen = ssid or typer.prompt("Network SSID")
        network = flow.session.find_network(chosen)
        secret = password
        if network is not None and network.is_open:
            secret = ""
        elif secret is None:
            secret = typer.prompt(f"Password for {chosen}", hide_input=True)

        console.print(f"Sending credentials for '{chosen}'...")
        if await flow.send_credentials(chosen, secret):
            return True

        _print_error(console, flow)
        if ssid is not None:
            return False
    return flow.step is OnboardingStep.NAME


async def _run_onboarding(
    console: Console,
    flow: OnboardingFlow,
    qr: str | None,
    demo: bool,
    ssid: str | None,
    password: str | None,
    name: str | None,
    skip_firmware: bool,
) -> PairedDevice | None:
    if demo:
        flow.simulate_device()
        console.print("[dim]Using simulated device, no network calls.[/dim]")
    else:
        raw = qr or typer.prompt("QR payload (JSON)")
        console.print("Connecting to device access point...")
        if not await flow.handle_qr_scan(raw):
            _print_error(console, flow)
            return None

    info = flow.session.device_info
    if info is None:
        raise OnboardingError("No device identified")
    console.print(f"[green]✓[/green] Found [bold]{info.model}[/bold]")
    console.print(f"Serial: {info.serial}  Firmware: v{info.firmware_version}")

    if not await _firmware_step(console, flow, skip_firmware):
        _print_error(console, flow)
        return None

    if flow.step is OnboardingStep.WIFI_SETUP and not await _wifi_step(
        console, flow, ssid, password
    ):
        return None

    if flow.session.assigned_ip:
        console.print(
            f"[green]✓[/green] Device online at {flow.session.assigned_ip}"
        )

    device_name = name or typer.prompt("Device name", default=info.model)
    flow.name_device(device_name)
    return flow.complete_onboarding()


def register(app: typer.Typer) -> None:
    @app.command()
    def onboard(
        qr: str | None = typer.Argument(
            None, help="QR payload JSON (prompted if omitted)"
        ),
        demo: bool = typer.Option(
            False, "--demo", help="Pair the built-in simulated device"
        ),
        ssid: str | None = typer.Option(None, "--ssid", help="Target network"),
        password: str | None = typer.Option(
            None, "--password", help="Target network password"
        ),
        name: str | None = typer.Option(None, "--name", help="Device name"),
        skip_firmware: bool = typer.Option(
            False, "--skip-firmware", help="Do not install firmware updates"
        ),
    ) -> None:
        """Pair a display and move it onto your WiFi network."""
        settings = load_settings_or_exit()
        registry = build_registry(settings)
        flow = build_flow(settings, registry)
        console = Console()

        try:
            device = asyncio.run(
                _run_onboarding(
                    console, flow, qr, demo, ssid, password, name, skip_firmware
                )
            )
        except KeyboardInterrupt:
            if not flow.step.is_terminal:
                flow.cancel()
            console.print("\n[yellow]Onboarding cancelled.[/yellow]")
            raise typer.Exit(1) from None
        except OnboardingError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1) from None

        if device is None:
            raise typer.Exit(1)

        console.print(
            f"[green]✓[/green] Paired '{device.name}' ({device.id}) "
            f"at {device.ip}:{device.port}"
        )
