"""MIDI command implementations."""

import logging
import time
from collections.abc import Callable
from datetime import datetime

import click
import mido

from twisterfidget.devices import DEFAULT_DEVICE_NAME, TwisterInput
from twisterfidget.exceptions import DeviceNotFoundError
from twisterfidget.midi import MidiInputManager, MidiManager

logger = logging.getLogger(__name__)


@click.group(name="midi")
def midi_group():
    """MIDI device commands."""
    pass


@midi_group.command(name="list")
@click.option("--device", default=DEFAULT_DEVICE_NAME, show_default=True, help="Name to highlight")
def list_midi(device: str):
    """List available MIDI ports."""
    ports = MidiManager.list_ports()

    def describe(port: str) -> str:
        return f"{port}  <- Twister" if device.lower() in port.lower() else port

    click.echo("MIDI Input Ports:\n")
    if not ports["input"]:
        click.echo("  No MIDI input ports found.")
    else:
        for i, port in enumerate(ports["input"]):
            click.echo(f"  [{i}] {describe(port)}")

    click.echo("\nMIDI Output Ports:\n")
    if not ports["output"]:
        click.echo("  No MIDI output ports found.")
    else:
        for i, port in enumerate(ports["output"]):
            click.echo(f"  [{i}] {describe(port)}")


def select_input_ports(ports: list[str], device: str | None) -> list[str]:
    """
    Ports to monitor: all of them, or those whose name contains `device`.

    Raises:
        DeviceNotFoundError: If `device` is given and no port matches
    """
    if device is None:
        return list(ports)
    matching = [port for port in ports if device.lower() in port.lower()]
    if not matching:
        raise DeviceNotFoundError(device, list(ports))
    return matching


@midi_group.command(name="monitor")
@click.option(
    "--decode/--raw",
    default=True,
    help="Show decoded Twister events next to raw messages (default: decode)",
)
@click.option("--device", default=None, help="Only monitor ports whose name contains this")
def monitor_midi(decode: bool, device: str | None):
    """
    Monitor MIDI input ports and print incoming messages.

    Press Ctrl+C to stop monitoring.
    """
    try:
        ports = select_input_ports(mido.get_input_names(), device)
    except DeviceNotFoundError as e:
        click.echo(e.get_full_message(), err=True)
        raise SystemExit(1) from e

    if not ports:
        click.echo("No MIDI input ports found.")
        return

    click.echo(f"Monitoring {len(ports)} MIDI input port(s):")
    for port in ports:
        click.echo(f"  - {port}")
    click.echo("\nPress Ctrl+C to stop\n")

    decoder = TwisterInput()
    managers = []

    try:
        for port_name in ports:
            def make_filter(name: str) -> Callable[[str], bool]:
                return lambda p: p == name

            manager = MidiInputManager(device_filter=make_filter(port_name), poll_interval=10.0)

            def make_callback(name):
                def callback(msg):
                    if msg.type == "clock":
                        return
                    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
                    line = f"[{timestamp}] {name}: {msg}"
                    if decode:
                        event = decoder.parse_message(msg)
                        if event is not None:
                            line += f"  => {event}"
                    click.echo(line)

                return callback

            manager.on_message(make_callback(port_name))
            manager.start()
            managers.append(manager)

        while True:
            time.sleep(0.1)

    except KeyboardInterrupt:
        click.echo("\n\nStopping monitor...")

    finally:
        for manager in managers:
            try:
                manager.stop()
            except Exception as e:
                logger.warning(f"Error stopping monitor for {manager.current_port}: {e}")
