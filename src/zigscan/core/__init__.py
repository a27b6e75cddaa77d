"""Core data models, configuration, errors and use cases.

This package provides:
- Data models (RawTransaction, DecodedMessage, TransactionRecord, RecordPage)
- Configuration (ExplorerConfig)
- The error hierarchy (ZigscanError and subclasses)
"""

from zigscan.core.config import ExplorerConfig
from zigscan.core.models import (
    DecodedMessage,
    MessageKind,
    PaginationWindow,
    RawTransaction,
    RecordPage,
    RetrievalTier,
    TransactionRecord,
)

__all__ = [
    "ExplorerConfig",
    "DecodedMessage",
    "MessageKind",
    "PaginationWindow",
    "RawTransaction",
    "RecordPage",
    "RetrievalTier",
    "TransactionRecord",
]
