"""Run the CLI with ``python -m mementos``."""
from mementos.cli import cli

if __name__ == "__main__":
    cli(obj={})
