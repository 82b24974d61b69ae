"""Main CLI entry point for bundlectl."""

from __future__ import annotations

import click

from bundlectl import __version__
from bundlectl.cli.config_cmd import config
from bundlectl.cli.upload import plan, status, upload


@click.group()
@click.version_option(version=__version__, prog_name="bundlectl")
def cli() -> None:
    """bundlectl - Batch-publish asset pairs to content-addressed storage.

    Get started:

      bundlectl config init --jwk wallet.json   # Create config file

      bundlectl plan ./assets                   # Preview batches

      bundlectl upload ./assets                 # Upload

    Use --help on any command for more information.
    """
    pass


cli.add_command(config)
cli.add_command(upload)
cli.add_command(plan)
cli.add_command(status)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
