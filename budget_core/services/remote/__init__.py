"""
Remote Services Package

Abstract backend and audit storage interfaces plus in-memory
implementations.
"""

from budget_core.services.remote.interface import (
    AuditStorageInterface,
    RemoteBackend,
)
from budget_core.services.remote.memory import (
    InMemoryAuditStorage,
    InMemoryBackend,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RemoteBackend",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBackend",
]
