"""
Configuration for the baccounts CLI.

Lives in ``$BACCOUNTS_HOME/config.yaml`` (default ``~/.baccounts.d``).
Nothing in the core reads it; the CLI resolves paths and the recipient
here and hands them to the gateway explicitly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from . import BACCOUNTS_HOME

logger = logging.getLogger("baccounts.config")

CONFIG_FILENAME = "config.yaml"


class BaccountsConfig(BaseModel):
    """Persistent settings for the command line."""

    data_file: Path = Path("~/.baccounts")
    recipient: Optional[str] = None
    gpg_binary: str = "gpg"
    gpg_args: list[str] = Field(default_factory=list)
    secret_length: int = Field(default=16, ge=8)
    default_profile: str = ""

    def resolve_recipient(self, default_account: str) -> str:
        """Pick the gpg recipient: the configured one, else the store's account."""
        return self.recipient or default_account


def config_path(home: Optional[Path] = None) -> Path:
    """Return the config file location under ``home``."""
    return (home or Path(BACCOUNTS_HOME)).expanduser() / CONFIG_FILENAME


def load_config(home: Optional[Path] = None) -> BaccountsConfig:
    """Load configuration from disk.

    Returns:
        BaccountsConfig loaded from config.yaml, or defaults.
    """
    config_file = config_path(home)
    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            return BaccountsConfig(**data)
        except (OSError, yaml.YAMLError, ValueError, TypeError) as exc:
            logger.warning("Failed to load config: %s, using defaults", exc)
    return BaccountsConfig()


def save_config(config: BaccountsConfig, home: Optional[Path] = None) -> Path:
    """Persist configuration to disk."""
    config_file = config_path(home)
    config_file.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json", exclude_none=True)
    config_file.write_text(yaml.dump(data, default_flow_style=False), encoding="utf-8")
    return config_file
