"""Diff command: compare two encrypted store files."""

from __future__ import annotations

from pathlib import Path

import click

from ..diff import diff_stores
from ._common import CliState, console, pass_state


def register_diff_commands(main: click.Group) -> None:
    """Register the diff command."""

    @main.command("diff")
    @click.argument("left", type=click.Path())
    @click.argument("right", type=click.Path())
    @pass_state
    def diff_cmd(state: CliState, left: str, right: str):
        """Compare two store files; exit 1 if they differ.

        Secrets are compared but never shown, only their sizes.

        Examples:

            baccounts diff ~/.baccounts ~/Dropbox/baccounts.asc
        """
        lhs = state.load_store(Path(left))
        rhs = state.load_store(Path(right))

        def report(line: str) -> None:
            console.print(f"  {line}", markup=False, highlight=False, soft_wrap=True)

        count = diff_stores(lhs, rhs, report=report)

        if count:
            console.print(f"\n[bold]{count}[/] mismatch(es)")
            raise SystemExit(1)
        console.print("[green]No differences.[/]")
