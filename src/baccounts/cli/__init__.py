"""
baccounts CLI: the credential store command line.

Each command group lives in its own module and is registered on the
main Click group below.

Entry point: baccounts.cli:main
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from .. import BACCOUNTS_HOME, __version__
from ._common import CliState


@click.group()
@click.version_option(version=__version__, prog_name="baccounts")
@click.option("--home", default=BACCOUNTS_HOME, type=click.Path(), help="Config directory.")
@click.option("--file", "-f", "data_file", default=None, type=click.Path(), help="Encrypted store file.")
@click.option("--verbose", "-v", is_flag=True, help="Log what the core is doing.")
@click.pass_context
def main(ctx: click.Context, home: str, data_file: Optional[str], verbose: bool):
    """baccounts: GPG-encrypted site credentials, one file.

    Profiles group sites by identity; sites are keyed by host.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    ctx.obj = CliState.load(
        Path(home), Path(data_file) if data_file else None
    )


from .store_cmd import register_store_commands
from .site_cmd import register_site_commands
from .diff_cmd import register_diff_commands

register_store_commands(main)
register_site_commands(main)
register_diff_commands(main)
