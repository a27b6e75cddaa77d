"""Transaction decoding.

This package provides:
- Hash computation and normalization
- The wire decoder for Any-wrapped protobuf messages (betterproto)
- Ordered heuristic probes for malformed or unknown input
- Transfer summary extraction from execution events
- The decode pipeline tying them together
"""

from zigscan.decoding.decoder import decode_message, decode_raw, decode_transaction
from zigscan.decoding.events import extract_transfer
from zigscan.decoding.hashing import compute_tx_hash, hash_matches, normalize_hash
from zigscan.decoding.registry import add_message_spec, make_table
from zigscan.decoding.specs import MessageSpec, MessageTable

__all__ = [
    "decode_message",
    "decode_raw",
    "decode_transaction",
    "extract_transfer",
    "compute_tx_hash",
    "hash_matches",
    "normalize_hash",
    "add_message_spec",
    "make_table",
    "MessageSpec",
    "MessageTable",
]
