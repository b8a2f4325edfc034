"""midi commands: port listing and a live message monitor."""

import logging
import threading
from datetime import datetime
from typing import Optional

import click
import mido

from keycast.exceptions import DeviceNotFoundError
from keycast.midi import MidiInputManager, list_ports

from .errors import echo_error

logger = logging.getLogger(__name__)


def describe_event(msg: mido.Message) -> str:
    """The key and value a message becomes, or "" when it is not an event."""
    if msg.type == "note_on":
        return f"  -> key {msg.note} value {msg.velocity}"
    if msg.type == "note_off":
        return f"  -> key {msg.note} value 0"
    if msg.type == "control_change":
        return f"  -> key {msg.control} value {msg.value}"
    return ""


def _echo_ports(direction: str, names: list[str]) -> None:
    click.echo(f"MIDI {direction} ports:\n")
    if not names:
        click.echo(f"  No MIDI {direction} ports found.")
    for i, name in enumerate(names):
        click.echo(f"  [{i}] {name}")


def _printer(port_name: str, filter_clock: bool):
    def show(msg: mido.Message) -> None:
        if filter_clock and msg.type == "clock":
            return
        stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        click.echo(f"[{stamp}] {port_name}: {msg}{describe_event(msg)}")
    return show


@click.group(name="midi")
def midi_group():
    """Inspect MIDI ports."""


@midi_group.command(name="list")
def list_midi():
    """List available MIDI ports."""
    ports = list_ports()
    _echo_ports("input", ports["input"])
    click.echo()
    _echo_ports("output", ports["output"])


@midi_group.command(name="monitor")
@click.option("--device", "-d", default=None, help="Only monitor ports whose name contains this text")
@click.option(
    "--filter-clock/--no-filter-clock",
    default=True,
    help="Hide clock messages (default: hidden)",
)
def monitor_midi(device: Optional[str], filter_clock: bool):
    """
    Print incoming MIDI messages.

    Each message is followed by the key and value it turns into, the
    numbers a config's 'key' entries refer to. Press Ctrl+C to stop.
    """
    available = list_ports()["input"]
    ports = [p for p in available if device is None or device in p]

    if not ports:
        if device is None:
            click.echo("No MIDI input ports found.")
            return
        echo_error(DeviceNotFoundError(device, available))
        raise SystemExit(1)

    click.echo(f"Monitoring {', '.join(ports)}")
    if filter_clock:
        click.echo("Clock messages hidden, use --no-filter-clock to show them")
    click.echo("Press Ctrl+C to stop\n")

    managers = []
    for port_name in ports:
        manager = MidiInputManager(lambda p, wanted=port_name: p == wanted, poll_interval=10.0)
        manager.on_message(_printer(port_name, filter_clock))
        manager.start()
        managers.append(manager)

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        click.echo("\nStopping monitor...")
    finally:
        for manager in managers:
            try:
                manager.stop()
            except Exception as e:
                logger.warning(f"Error closing {manager.current_port}: {e}")
