"""Allow running as ``python -m keycast``."""

from keycast.cli.main import cli

if __name__ == "__main__":
    cli()
