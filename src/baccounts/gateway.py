"""
The encryption gateway -- the only way a Store touches the disk.

Plaintext never hits the filesystem. A store is serialized in memory,
piped through gpg, and the armored ciphertext lands in a temp file
beside the target before an atomic rename makes it visible.

The cipher is injected so tests can run without a gpg keyring:

    gateway = Gateway(GpgCipher("gpg2"))
    store = gateway.decrypt(Path("~/.baccounts"))
    gateway.encrypt(store, "me@example.com", Path("~/.baccounts"))
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Sequence

from .errors import DecryptFailed, EncryptFailed, KeyListingFailed, NotFound
from .models import Store

logger = logging.getLogger("baccounts.gateway")


class Cipher(Protocol):
    """Capability the gateway needs from a confidential-computation tool."""

    def decrypt(self, path: Path) -> bytes:
        """Return the plaintext of the encrypted file at ``path``."""
        ...

    def encrypt(self, plaintext: bytes, recipient: str) -> bytes:
        """Return armored ciphertext of ``plaintext`` for ``recipient``."""
        ...


class GpgCipher:
    """Cipher backed by the system ``gpg`` binary."""

    def __init__(self, binary: str = "gpg", extra_args: Sequence[str] = ()):
        """Initialize the gpg wrapper.

        Args:
            binary: gpg executable name or path.
            extra_args: Extra arguments inserted before the mode flag,
                e.g. ``("--homedir", "/tmp/keys")``.
        """
        self.binary = binary
        self.extra_args = list(extra_args)

    def _command(self, *args: str) -> list[str]:
        return [self.binary, "--batch", "--yes", "--quiet", *self.extra_args, *args]

    def decrypt(self, path: Path) -> bytes:
        cmd = self._command("--decrypt", str(path))
        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as exc:
            raise DecryptFailed(f"Cannot launch {self.binary}: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.error("gpg decrypt of %s failed: %s", path, stderr)
            raise DecryptFailed(
                f"{self.binary} exited with status {result.returncode} "
                f"decrypting {path}: {stderr}"
            )
        return result.stdout

    def encrypt(self, plaintext: bytes, recipient: str) -> bytes:
        cmd = self._command("--encrypt", "--armor", "-r", recipient)
        try:
            # run() writes all of stdin and closes it before waiting
            result = subprocess.run(
                cmd, input=plaintext, capture_output=True, check=False
            )
        except OSError as exc:
            raise EncryptFailed(f"Cannot run {self.binary}: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.error("gpg encrypt for %s failed: %s", recipient, stderr)
            raise EncryptFailed(
                f"{self.binary} exited with status {result.returncode} "
                f"encrypting for {recipient}: {stderr}"
            )
        return result.stdout

    def list_keys(self, secret: bool = False) -> str:
        """Return gpg's listing of the public (or secret) keys in the keyring.

        Raises:
            KeyListingFailed: If gpg cannot be launched or exits non-zero.
        """
        cmd = self._command("--list-secret-keys" if secret else "--list-keys")
        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as exc:
            raise KeyListingFailed(f"Cannot launch {self.binary}: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.error("gpg key listing failed: %s", stderr)
            raise KeyListingFailed(
                f"{self.binary} exited with status {result.returncode} "
                f"listing keys: {stderr}"
            )
        return result.stdout.decode("utf-8", errors="replace")


class Gateway:
    """Converts between Store objects and encrypted files on disk."""

    def __init__(self, cipher: Optional[Cipher] = None):
        """Initialize the gateway.

        Args:
            cipher: Encryption capability. Defaults to :class:`GpgCipher`.
        """
        self.cipher = cipher or GpgCipher()

    def decrypt(self, path: Path) -> Store:
        """Decrypt and parse the store at ``path``.

        The full plaintext is buffered before parsing.

        Raises:
            NotFound: If ``path`` does not exist.
            DecryptFailed: If the cipher fails.
            MalformedStore: If the plaintext is not a store document.
        """
        path = Path(path).expanduser()
        if not path.exists():
            raise NotFound(f"No such store file: {path}")

        plaintext = self.cipher.decrypt(path)
        store = Store.from_json(plaintext)
        logger.debug(
            "Decrypted %s (%d profiles, version %s)",
            path, len(store.profiles), store.schema_version,
        )
        return store

    def encrypt(self, store: Store, recipient: str, path: Path) -> None:
        """Encrypt ``store`` for ``recipient`` and atomically replace ``path``.

        The existing file is only replaced once the whole pipeline has
        succeeded. A temp file left behind by a failed write is kept.

        Raises:
            EncryptFailed: If the cipher fails or the ciphertext cannot
                be written.
        """
        path = Path(path).expanduser()
        plaintext = store.to_json().encode("utf-8")
        ciphertext = self.cipher.encrypt(plaintext, recipient)
        _atomic_write(path, ciphertext)
        logger.info("Store written to %s for %s", path, recipient)

    def check(self, recipient: str) -> bool:
        """Encrypt a sample store for ``recipient`` and read it back.

        Returns:
            True if the sample survived the round trip unchanged.
        """
        sample = Store.new(recipient, "selfcheck")
        with tempfile.TemporaryDirectory(prefix="baccounts-check-") as tmp:
            sample_path = Path(tmp) / "selfcheck.asc"
            self.encrypt(sample, recipient, sample_path)
            restored = self.decrypt(sample_path)
        return restored == sample


def _atomic_write(path: Path, data: bytes) -> None:
    """Write ``data`` to a sibling temp file, then rename it over ``path``.

    Raises:
        EncryptFailed: If the temp file cannot be written or renamed. The
            temp file, if created, is left in place.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        logger.error("Failed writing %s; partial output kept at %s", path, tmp_name)
        raise EncryptFailed(
            f"Cannot write ciphertext to {path} (temp file {tmp_name}): {exc}"
        ) from exc
