"""Store-level commands: init, list, set-default, export, check, keys."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from ..errors import BaccountsError
from ..models import Store
from ._common import CliState, abort, console, pass_state


def register_store_commands(main: click.Group) -> None:
    """Register the store-level commands."""

    @main.command("init")
    @click.option("--account", "-a", required=True, help="Default account (and gpg recipient).")
    @click.option("--profile", "-p", default=None, help="First profile name. Defaults to the account.")
    @click.option("--force", is_flag=True, help="Overwrite an existing store file.")
    @pass_state
    def init_cmd(state: CliState, account: str, profile: Optional[str], force: bool):
        """Create a new, empty encrypted store.

        Examples:

            baccounts init -a me@example.com

            baccounts -f ~/Dropbox/accounts.asc init -a me@example.com -p work
        """
        if state.data_file.exists() and not force:
            abort(f"{state.data_file} already exists (use --force to overwrite)")

        store = Store.new(account, profile)
        state.save_store(store)
        console.print(
            f"[green]Created[/] {escape(str(state.data_file))} "
            f"with default profile [cyan]{escape(store.profiles[0].name)}[/]"
        )

    @main.command("list")
    @pass_state
    def list_cmd(state: CliState):
        """List every profile and its sites."""
        store = state.load_store()

        console.print(
            f"\nDefault account: [cyan]{escape(store.default_account or '-')}[/]"
            f"  [dim](data file version {escape(store.schema_version)})[/]\n"
        )
        if not store.profiles:
            console.print("[dim]No profiles.[/]\n")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Profile", style="cyan")
        table.add_column("Host")
        table.add_column("URL", style="dim")
        table.add_column("Account")

        for profile in store.profiles:
            name = escape(profile.name)
            label = f"{name} [green]*[/]" if profile.is_default else name
            if not profile.sites:
                table.add_row(label, "[dim]-[/]", "", "")
            for host, site in sorted(profile.sites.items()):
                table.add_row(label, escape(host), escape(site.url), escape(site.account))
                label = ""

        console.print(table)
        console.print()

    @main.command("set-default")
    @click.argument("name")
    @pass_state
    def set_default_cmd(state: CliState, name: str):
        """Make NAME the default profile."""
        store = state.load_store()
        try:
            profile = store.set_default(name)
        except BaccountsError as exc:
            abort(str(exc))

        state.save_store(store)
        console.print(f"[green]Default profile:[/] {escape(profile.name)}")

    @main.command("export")
    @click.option("--recipient", "-r", required=True, help="gpg recipient to encrypt for.")
    @click.option("--output", "-o", required=True, type=click.Path(), help="Destination file.")
    @pass_state
    def export_cmd(state: CliState, recipient: str, output: str):
        """Re-encrypt the whole store for another key.

        Examples:

            baccounts export -r laptop@example.com -o /tmp/baccounts.exported
        """
        out_path = Path(output).expanduser()
        if out_path.resolve() == state.data_file.resolve():
            abort("Refusing to export over the live store file")

        store = state.load_store()
        state.save_store(store, path=out_path, recipient=recipient)
        console.print(f"[green]Exported[/] to {escape(str(out_path))} for {escape(recipient)}")

    @main.command("check")
    @click.option("--recipient", "-r", default=None, help="gpg recipient to test.")
    @pass_state
    def check_cmd(state: CliState, recipient: Optional[str]):
        """Check that gpg can encrypt to and decrypt for your key."""
        recipient = recipient or state.config.recipient
        if not recipient:
            abort("No recipient given (use -r or set 'recipient' in config.yaml)")

        try:
            ok = state.gateway.check(recipient)
        except BaccountsError as exc:
            abort(str(exc))

        if not ok:
            abort("Round trip through gpg changed the data")
        console.print(Panel(
            f"[bold green]gpg round trip OK[/]\nRecipient: {escape(recipient)}",
            title="Check",
            border_style="green",
        ))

    @main.command("keys")
    @click.option("--secret/--no-secret", default=True, show_default=True,
                  help="Also list the secret keys.")
    @pass_state
    def keys_cmd(state: CliState, secret: bool):
        """List the gpg keys usable as recipients.

        Runs the configured gpg binary with its configured extra args, so
        a custom --homedir in config.yaml is honoured.

        Examples:

            baccounts keys

            baccounts keys --no-secret
        """
        sections = [("Public keys", False)]
        if secret:
            sections.append(("Secret keys", True))

        for title, want_secret in sections:
            try:
                listing = state.cipher.list_keys(secret=want_secret)
            except BaccountsError as exc:
                abort(str(exc))
            console.print(Rule(title, style="dim"))
            console.print(
                listing.rstrip() or "(none)", markup=False, highlight=False, soft_wrap=True
            )
