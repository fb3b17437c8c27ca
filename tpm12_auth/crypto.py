# SPDX-License-Identifier: BSD-2
"""SHA-1 and HMAC-SHA1 primitives used by TPM 1.2 authorization sessions.

Every context is created and finalized inside a single call, nothing here is
shared between calls or threads.
"""
import secrets

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.hmac import HMAC

from .constants import TPM_NONCE_SIZE
from . import config

_digest = hashes.SHA1


def sha1(*parts: bytes) -> bytes:
    """Hash the concatenation of parts.

    Args:
        parts (bytes): Chunks fed to the hash in order.

    Returns:
        The 20 byte digest.
    """
    d = hashes.Hash(_digest(), backend=default_backend())
    for part in parts:
        d.update(bytes(part))
    return d.finalize()


def hmac_sha1(key: bytes, *parts: bytes) -> bytes:
    """Keyed hash of the concatenation of parts.

    Args:
        key (bytes): The AuthData, any length.
        parts (bytes): Chunks fed to the HMAC in order.

    Returns:
        The 20 byte HMAC.
    """
    h = HMAC(bytes(key), _digest(), backend=default_backend())
    for part in parts:
        h.update(bytes(part))
    return h.finalize()


def verify_hmac_sha1(key: bytes, expected: bytes, *parts: bytes) -> bool:
    """Check that expected is the HMAC of parts under key.

    The comparison runs in constant time unless constant_time_compare is
    disabled in config.json.

    Returns:
        True if the HMAC matches, False otherwise.
    """
    expected = bytes(expected)
    if not config.CONSTANT_TIME_COMPARE:
        return hmac_sha1(key, *parts) == expected
    h = HMAC(bytes(key), _digest(), backend=default_backend())
    for part in parts:
        h.update(bytes(part))
    try:
        h.verify(expected)
    except InvalidSignature:
        return False
    return True


def generate_nonce(size: int = TPM_NONCE_SIZE) -> bytes:
    """Returns size bytes from the operating system CSPRNG."""
    return secrets.token_bytes(size)
