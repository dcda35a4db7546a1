"""Entry point for ``python -m overalls``."""

from overalls.cli.main import cli

if __name__ == "__main__":
    cli()
