"""Transaction hash helpers.

A transaction hash is the SHA-256 digest of the raw signed transaction bytes,
rendered as 64 uppercase hex characters without a 0x prefix.
"""

from __future__ import annotations

import hashlib
import re

from zigscan.core.errors import InvalidTransactionHash

_HEX64 = re.compile(r"^[0-9A-F]{64}$")


def compute_tx_hash(raw: bytes) -> str:
    """Return upper-hex(SHA-256(raw)); defined for every byte string, including b""."""
    return hashlib.sha256(raw).hexdigest().upper()


def strip_hex_prefix(value: str) -> str:
    value = value.strip()
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def normalize_hash(value: str) -> str:
    """Normalize a user- or upstream-supplied hash to bare uppercase hex.

    Raises
    ------
    InvalidTransactionHash
        If the value is not 64 hex characters once the optional 0x prefix is removed.
    """
    bare = strip_hex_prefix(value).upper()
    if not _HEX64.match(bare):
        raise InvalidTransactionHash(value)
    return bare


def hash_matches(raw: bytes, expected: str) -> bool:
    """True when `raw` hashes to `expected` (any case, optional 0x prefix)."""
    return compute_tx_hash(raw) == strip_hex_prefix(expected).upper()
