"""Site commands: generate, show, update."""

from __future__ import annotations

from typing import Optional

import click
from rich.markup import escape

from ..clipboard import ClipboardUnavailable, copy_to_clipboard
from ..errors import BaccountsError
from ..models import Site
from ..passwords import MIN_LENGTH, decode_secret, encode_secret, generate_password
from ._common import CliState, abort, console, pass_state


def _deliver(password: str, site: Site, print_it: bool) -> None:
    if print_it:
        click.echo(password)
        return
    try:
        tool = copy_to_clipboard(password)
    except ClipboardUnavailable as exc:
        abort(f"{exc} (use --print to write it to stdout)")
    console.print(
        f"Pass for {escape(site.url)} ({escape(site.name)}) copied to clipboard [dim]via {tool}[/]"
    )


def register_site_commands(main: click.Group) -> None:
    """Register the site commands."""

    @main.command("generate")
    @click.argument("url")
    @click.option("--profile", "-p", default=None, help="Profile name. Defaults to the default profile.")
    @click.option("--account", "-a", default=None, help="Account for the site. Defaults to the store's account.")
    @click.option("--length", "-l", default=None, type=int, help="Password length.")
    @click.option("--force", is_flag=True, help="Replace an existing entry for the same host.")
    @click.option("--print", "print_it", is_flag=True, help="Print the password instead of copying it.")
    @pass_state
    def generate_cmd(state: CliState, url: str, profile: Optional[str], account: Optional[str],
                     length: Optional[int], force: bool, print_it: bool):
        """Generate and save a password for the site at URL.

        Examples:

            baccounts generate https://mail.example.com/login

            baccounts generate https://bank.example -p work -l 24 --print
        """
        store = state.load_store()
        target = state.pick_profile(store, profile)

        try:
            password = generate_password(length or state.config.secret_length)
            site = Site.from_url(url, encode_secret(password), account or store.default_account)
        except (BaccountsError, ValueError) as exc:
            abort(str(exc))

        if site.host in target.sites and not force:
            abort(f"Site already exists in {target.name}: {site.host} (use --force or 'update')")

        target.update_site(site)
        try:
            store.update_profile(target)
        except BaccountsError as exc:
            abort(str(exc))
        state.save_store(store)
        console.print(f"[green]Saved[/] {escape(site.host)} in profile [cyan]{escape(target.name)}[/]")
        _deliver(password, site, print_it)

    @main.command("show")
    @click.argument("query")
    @click.option("--profile", "-p", default=None, help="Profile name. Defaults to the default profile.")
    @click.option("--print", "print_it", is_flag=True, help="Print the password instead of copying it.")
    @pass_state
    def show_cmd(state: CliState, query: str, profile: Optional[str], print_it: bool):
        """Copy the password of the one site whose URL contains QUERY."""
        store = state.load_store()
        target = state.pick_profile(store, profile)

        try:
            site = target.find_site(query)
            password = decode_secret(site.secret)
        except (BaccountsError, ValueError) as exc:
            abort(str(exc))

        _deliver(password, site, print_it)

    @main.command("update")
    @click.argument("query")
    @click.option("--profile", "-p", default=None, help="Profile name. Defaults to the default profile.")
    @click.option("--generate", "generate_new", is_flag=True, help="Generate a new password instead of prompting.")
    @click.option("--print", "print_it", is_flag=True, help="Print a generated password instead of copying it.")
    @pass_state
    def update_cmd(state: CliState, query: str, profile: Optional[str],
                   generate_new: bool, print_it: bool):
        """Rotate the password of the one site whose URL contains QUERY."""
        store = state.load_store()
        target = state.pick_profile(store, profile)

        try:
            current = target.find_site(query)
        except BaccountsError as exc:
            abort(str(exc))

        if generate_new:
            password = generate_password(state.config.secret_length)
        else:
            password = click.prompt(
                "New Password", hide_input=True, confirmation_prompt="Input Again"
            )
            if len(password) < MIN_LENGTH:
                abort(f"New password should be at least {MIN_LENGTH} chars ({len(password)})")

        rotated = current.model_copy(update={"secret": encode_secret(password)})
        try:
            target.update_site(rotated)
            store.update_profile(target)
        except BaccountsError as exc:
            abort(str(exc))

        state.save_store(store)
        console.print(f"[green]Password updated[/] for {escape(rotated.url)}")
        if generate_new:
            _deliver(password, rotated, print_it)
