"""Upwell protocol definitions as Python Abstract Base Classes.

Two protocols:
    1. VersionedContent - CRDT-backed content that drafts and the
                          metadata ledger are stored in
    2. Watchable        - bundle change observation

Execution control:
    Methods that may perform IO accept an optional `opts` dict.
    Recognized key: "sync" (bool, default True).
    When sync=True (default), methods block and return direct values.
    When sync=False, methods return awaitables.
"""

from abc import ABC, abstractmethod
from typing import Set, Optional, Dict, Any, Callable


def is_sync(opts: Optional[Dict[str, Any]]) -> bool:
    return (opts or {}).get("sync", True)


# ============================================================
# Layer 1: VersionedContent (fundamental)
# ============================================================

class VersionedContent(ABC):
    """Conflict-free replicated content.

    Replicas diverge through local edits and converge again through merge.
    Mutating operations return self (mutated) for method chaining.
    """

    @abstractmethod
    def fork(self) -> "VersionedContent":
        """Independent copy sharing all history so far."""
        ...

    @abstractmethod
    def merge(self, other: "VersionedContent") -> "VersionedContent":
        """Fold every change of other into self. Returns self."""
        ...

    @abstractmethod
    def save(self) -> bytes:
        """Encode the full content, history included."""
        ...

    @classmethod
    @abstractmethod
    def load(cls, data: bytes) -> "VersionedContent":
        """Decode bytes produced by save()."""
        ...

    @abstractmethod
    def heads(self) -> Set[str]:
        """Frontier change identifiers. Equal heads mean equal content."""
        ...


# ============================================================
# Layer 2: Watchable (state change observation)
# ============================================================

class Watchable(ABC):
    """Observe bundle changes via event notification."""

    @abstractmethod
    def watch(self, upwell_id: str, callback: Callable[[Dict[str, Any]], None],
              opts: Optional[Dict[str, Any]] = None) -> str:
        """Register callback for change events on a bundle. Returns watch-id string.
        callback receives dicts with keys: type, upwell_id, draft_id, timestamp.
        type is one of: 'draft_created', 'draft_changed', 'synced'."""
        ...

    @abstractmethod
    def unwatch(self, watch_id: str, opts: Optional[Dict[str, Any]] = None) -> None:
        """Stop watching. Removes callback."""
        ...
