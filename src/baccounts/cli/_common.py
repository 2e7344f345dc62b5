"""Shared state and helpers for all CLI command modules.

Provides the Rich console, the per-invocation CliState that wires the
config into a gateway, and the load/save helpers every command uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape

from ..config import BaccountsConfig, load_config
from ..errors import BaccountsError
from ..gateway import Gateway, GpgCipher
from ..models import Profile, Store

console = Console()


def abort(message: str) -> NoReturn:
    """Print ``message`` in red and exit with status 1."""
    console.print(f"[red]{escape(message)}[/]", soft_wrap=True)
    raise SystemExit(1)


@dataclass
class CliState:
    """Everything a command needs, resolved once per invocation."""

    home: Path
    config: BaccountsConfig
    data_file: Path
    cipher: GpgCipher
    gateway: Gateway

    @classmethod
    def load(cls, home: Path, data_file: Optional[Path] = None) -> CliState:
        home = home.expanduser()
        config = load_config(home)
        cipher = GpgCipher(config.gpg_binary, config.gpg_args)
        return cls(
            home=home,
            config=config,
            data_file=(data_file or config.data_file).expanduser(),
            cipher=cipher,
            gateway=Gateway(cipher),
        )

    def load_store(self, path: Optional[Path] = None) -> Store:
        """Decrypt the store, exiting with a message on failure."""
        try:
            return self.gateway.decrypt(path or self.data_file)
        except BaccountsError as exc:
            abort(str(exc))

    def save_store(self, store: Store, path: Optional[Path] = None,
                   recipient: Optional[str] = None) -> None:
        """Encrypt ``store`` back to disk for the configured recipient."""
        recipient = recipient or self.config.resolve_recipient(store.default_account)
        if not recipient:
            abort("No gpg recipient: set 'recipient' in config.yaml or the store's default account")
        try:
            self.gateway.encrypt(store, recipient, path or self.data_file)
        except BaccountsError as exc:
            abort(str(exc))

    def pick_profile(self, store: Store, name: Optional[str]) -> Profile:
        """Resolve ``--profile`` (or the configured/default profile)."""
        wanted = name if name is not None else self.config.default_profile
        profile = store.find_profile(wanted)
        if profile is None:
            abort(f"Profile not found: {wanted}" if wanted else "Default profile not found")
        return profile


pass_state = click.make_pass_decorator(CliState)
