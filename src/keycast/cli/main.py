"""keycast command line."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import click

from keycast import __version__

from .commands import check, midi_group, run

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# Handlers added by setup_logging, replaced on the next call
_installed_handlers: list[logging.Handler] = []


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "keycast-debug.log"
    return Path.home() / ".keycast" / "logs" / "keycast.log"


def _log_level(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> int:
    if log_file:
        return getattr(logging, log_level.upper())
    if debug or verbose >= 2:
        return logging.DEBUG
    return logging.INFO if verbose == 1 else logging.WARNING


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Send log records to a rotating file, and warnings to stderr.

    stdout is left to the csv target. ``--log-level`` only applies together
    with ``--log-file``; otherwise ``-v``/``-vv``/``--debug`` pick the level.

    Returns:
        The log file path
    """
    level = _log_level(verbose, debug, log_file, log_level)
    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root = logging.getLogger()
    root.setLevel(level)
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers[:] = [file_handler, stderr_handler]
    for handler in _installed_handlers:
        root.addHandler(handler)

    logger.info(f"Logging at {logging.getLevelName(level)} to {log_path}")
    return log_path


@click.group()
@click.version_option(version=__version__, prog_name="keycast")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v: INFO, -vv: DEBUG)")
@click.option("--debug", is_flag=True, help="DEBUG level, logging to ./keycast-debug.log")
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Custom log file path")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Level for --log-file (default: INFO)",
)
@click.pass_context
def cli(ctx, verbose: int, debug: bool, log_file: Optional[Path], log_level: str):
    """
    Route MIDI controls and timed pulses to CSV, OSC, UDP and MIDI targets.

    \b
    Examples:
      keycast run router.yaml
      keycast check router.yaml --strict
      keycast midi list
      keycast --debug midi monitor -d nanoKONTROL2
    """
    ctx.ensure_object(dict)
    ctx.obj["log_path"] = setup_logging(verbose, debug, log_file, log_level)


cli.add_command(run)
cli.add_command(check)
cli.add_command(midi_group)
