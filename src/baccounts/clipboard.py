"""Clipboard delivery through whichever copy tool the desktop provides."""

from __future__ import annotations

import logging
import shutil
import subprocess

logger = logging.getLogger("baccounts.clipboard")

CLIPBOARD_COMMANDS = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
]


class ClipboardUnavailable(Exception):
    """Raised when no clipboard tool is installed or the copy fails."""


def copy_to_clipboard(text: str) -> str:
    """Copy ``text`` to the system clipboard.

    Returns:
        Name of the tool that received the text.

    Raises:
        ClipboardUnavailable: If no tool is found or it exits non-zero.
    """
    for cmd in CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]) is None:
            continue
        try:
            # xclip and wl-copy fork a child that keeps the clipboard; it must not
            # inherit pipes we wait on
            result = subprocess.run(
                cmd,
                input=text.encode("utf-8"),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
                timeout=10,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ClipboardUnavailable(f"{cmd[0]} failed: {exc}") from exc
        if result.returncode != 0:
            raise ClipboardUnavailable(
                f"{cmd[0]} exited with status {result.returncode}"
            )
        logger.debug("Copied to clipboard via %s", cmd[0])
        return cmd[0]
    raise ClipboardUnavailable(
        "No clipboard tool found (tried pbcopy, wl-copy, xclip, xsel)"
    )
