"""Password generation and the opaque secret encoding used in Site.secret."""

from __future__ import annotations

import base64
import binascii
import secrets
import string

ALPHABET = string.ascii_letters + string.digits
MIN_LENGTH = 8


def generate_password(length: int = 16, alphabet: str = ALPHABET) -> str:
    """Generate a random password from ``alphabet`` using ``secrets``.

    Raises:
        ValueError: If ``length`` is shorter than MIN_LENGTH.
    """
    if length < MIN_LENGTH:
        raise ValueError(f"Password should be at least {MIN_LENGTH} chars ({length})")
    return "".join(secrets.choice(alphabet) for _ in range(length))


def encode_secret(password: str) -> str:
    """Encode a password the way the store keeps it: base64 of its UTF-8 bytes."""
    return base64.b64encode(password.encode("utf-8")).decode("ascii")


def decode_secret(secret: str) -> str:
    """Reverse :func:`encode_secret`.

    Raises:
        ValueError: If ``secret`` is not valid base64 text.
    """
    try:
        return base64.b64decode(secret.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError(f"Secret is not a valid encoded value: {exc}") from exc
