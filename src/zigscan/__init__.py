from __future__ import annotations

from .core.config import ExplorerConfig
from .core.errors import TransactionNotFound, UpstreamUnreachable, ZigscanError
from .core.models import DecodedMessage, MessageKind, RecordPage, RetrievalTier, TransactionRecord
from .decoding.decoder import decode_message, decode_transaction
from .decoding.hashing import compute_tx_hash, normalize_hash
from .orchestration.orchestrator import RetrievalOrchestrator

__version__ = "0.1.0"

__all__ = [
    "ExplorerConfig",
    "RetrievalOrchestrator",
    "decode_message",
    "decode_transaction",
    "compute_tx_hash",
    "normalize_hash",
    "DecodedMessage",
    "MessageKind",
    "TransactionRecord",
    "RecordPage",
    "RetrievalTier",
    "ZigscanError",
    "TransactionNotFound",
    "UpstreamUnreachable",
]
