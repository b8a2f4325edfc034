"""Run command - routes events until interrupted."""

import logging
import sys
from pathlib import Path

import click

from keycast.orchestration import Orchestrator

from .errors import echo_error

logger = logging.getLogger(__name__)


@click.command()
@click.argument(
    'config_file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    '--poll-interval',
    type=float,
    default=2.0,
    show_default=True,
    help='Seconds between MIDI hot-plug checks'
)
@click.option(
    '--save-on-exit',
    is_flag=True,
    help='Write live values back to the config file when stopping'
)
@click.pass_context
def run(ctx, config_file: Path, poll_interval: float, save_on_exit: bool):
    """
    Route events described by CONFIG_FILE.

    MIDI controllers named under 'in' are connected as they appear, pulses
    start firing, and every event is shaped, mapped and broadcast to its
    targets. CSV output goes to stdout. Press Ctrl+C to stop.

    \b
    Examples:
      keycast run router.yaml
      keycast run router.yaml --save-on-exit
    """
    log_path = ctx.obj.get("log_path") if ctx.obj else None
    logger.info(f"Starting keycast with {config_file}")

    orchestrator = None
    try:
        orchestrator = Orchestrator.from_file(config_file, poll_interval=poll_interval)
        orchestrator.initialize()
        click.echo("Routing events, press Ctrl+C to stop", err=True)
        orchestrator.run()
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Error running keycast")
        echo_error(e, log_path)
        sys.exit(1)
    finally:
        if orchestrator is not None:
            orchestrator.shutdown()
            if save_on_exit and orchestrator.store is not None:
                orchestrator.save()
                click.echo(f"Saved live values to {config_file}", err=True)
