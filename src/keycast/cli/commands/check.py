"""Check command - validate a config without opening devices."""

import logging
import sys
from pathlib import Path

import click

from keycast.devices import DeviceRegistry
from keycast.engine import classify, is_known_type
from keycast.exceptions import ConfigurationError
from keycast.orchestration import Orchestrator

from .errors import echo_error

logger = logging.getLogger(__name__)


@click.command()
@click.argument(
    'config_file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    '--strict',
    is_flag=True,
    help='Treat unknown binding types as errors'
)
def check(config_file: Path, strict: bool):
    """
    Validate CONFIG_FILE and compile its shape scripts.

    Prints a summary of devices, bindings and targets. Exits with status 1
    if the file is invalid or a script does not compile.
    """
    try:
        # An empty registry keeps devices closed
        orchestrator = Orchestrator.from_file(config_file, registry=DeviceRegistry())
    except (ConfigurationError, FileNotFoundError) as e:
        echo_error(e)
        sys.exit(1)

    collector = orchestrator.initialize()
    config = orchestrator.config

    click.echo(f"Configuration: {config_file}")
    click.echo(f"  Default targets: {', '.join(str(t) for t in config.targets) or 'none'}")

    unknown = 0
    for binding in orchestrator.store:
        keys = ",".join(str(k) for k in orchestrator.store.keys(binding))
        line = f"  {binding.device}[{keys}] {binding.name}: {binding.kind.value}"
        if not is_known_type(binding.spec.type):
            unknown += 1
            line += f" (unknown type {binding.spec.type!r}, using {classify(binding.spec.type).value})"
        if binding.spec.targets is not None:
            line += f" -> {', '.join(str(t) for t in binding.spec.targets)}"
        click.echo(line)

    for pulse in config.pulses:
        click.echo(f"  pulse {pulse.name}: every {pulse.period * 1000:.1f} ms")

    if collector.has_errors:
        click.echo(f"\n{collector.get_summary()}", err=True)
        sys.exit(1)

    if strict and unknown:
        click.echo(f"\n{unknown} binding(s) with unknown type", err=True)
        sys.exit(1)

    click.echo("\nOK")
