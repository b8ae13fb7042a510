"""Automerge adapter for the VersionedContent protocol.

Wraps an automerge.core.Document. Map keys, lists and text are Automerge
objects, so concurrent edits from forked replicas merge without conflicts.
"""

import logging
from contextlib import contextmanager
from typing import Set, List, Any, Iterator

from automerge.core import Document, ROOT, ObjType, ScalarType

from upwell.errors import MalformedContentError
from upwell.protocols import VersionedContent

logger = logging.getLogger(__name__)

MAP = ObjType.Map
LIST = ObjType.List
TEXT = ObjType.Text


def _scalar(value: Any):
    # bool before int: bool is an int subclass
    if value is None:
        return ScalarType.Null
    if isinstance(value, bool):
        return ScalarType.Boolean
    if isinstance(value, int):
        return ScalarType.Int
    if isinstance(value, float):
        return ScalarType.F64
    if isinstance(value, str):
        return ScalarType.Str
    if isinstance(value, bytes):
        return ScalarType.Bytes
    raise TypeError(f"cannot store {type(value).__name__} in versioned content")


# ============================================================
# Transaction
# ============================================================

class Transaction:
    """Edits issued inside AutomergeContent.transaction()."""

    def __init__(self, tx):
        self._tx = tx

    def put(self, obj: bytes, key: str, value: Any) -> None:
        self._tx.put(obj, key, _scalar(value), value)

    def put_object(self, obj: bytes, key: str, kind: ObjType) -> bytes:
        return self._tx.put_object(obj, key, kind)

    def delete(self, obj: bytes, key) -> None:
        """Remove a map key, or the list element at index key."""
        self._tx.delete(obj, key)

    def insert(self, obj: bytes, index: int, value: Any) -> None:
        self._tx.insert(obj, index, _scalar(value), value)

    def splice_text(self, obj: bytes, pos: int, delete: int, text: str) -> None:
        self._tx.splice_text(obj, pos, delete, text)


# ============================================================
# AutomergeContent
# ============================================================

class AutomergeContent(VersionedContent):
    """Versioned content held in an Automerge document.

    Reads go through the document; writes go through transaction().
    Read anything a transaction needs before opening it.
    """

    def __init__(self, doc: Document):
        self.doc = doc

    @property
    def actor(self) -> str:
        return bytes(self.doc.get_actor()).hex()

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Group edits into one change. An exception discards them.

        Usage:
            with content.transaction() as tx:
                tx.put(ROOT, "title", "Draft")
        """
        with self.doc.transaction() as tx:
            yield Transaction(tx)

    # -- reading --

    def get(self, obj: bytes, key) -> Any:
        """Scalar value, or the id of a nested object. None when absent."""
        found = self.doc.get(obj, key)
        if found is None:
            return None
        value, obj_id = found
        if isinstance(value, ObjType):
            return obj_id
        return value[1]

    def keys(self, obj: bytes = ROOT) -> List[str]:
        return list(self.doc.keys(obj))

    def length(self, obj: bytes) -> int:
        return self.doc.length(obj)

    def text(self, obj: bytes) -> str:
        return self.doc.text(obj)

    def to_py(self, obj: bytes = ROOT) -> Any:
        """Plain python rendering of an object and everything below it."""
        kind = self.doc.object_type(obj)
        if kind == TEXT:
            return self.text(obj)

        def render(prop):
            value, obj_id = self.doc.get(obj, prop)
            return self.to_py(obj_id) if isinstance(value, ObjType) else value[1]

        if kind == MAP:
            return {k: render(k) for k in sorted(self.keys(obj))}
        return [render(i) for i in range(self.length(obj))]

    # -- VersionedContent --

    def fork(self) -> "AutomergeContent":
        """Independent replica with a fresh actor."""
        return AutomergeContent(self.doc.fork())

    def merge(self, other: "AutomergeContent") -> "AutomergeContent":
        self.doc.merge(other.doc)
        logger.debug("merged changes from %s", other.actor)
        return self

    def save(self) -> bytes:
        return bytes(self.doc.save())

    @classmethod
    def load(cls, data: bytes) -> "AutomergeContent":
        try:
            doc = Document.load(data)
        except Exception as e:
            # the decoder reports corrupt input with its own exception type
            raise MalformedContentError(f"cannot decode content: {e}") from e
        return cls(doc)

    def heads(self) -> Set[str]:
        return {bytes(h).hex() for h in self.doc.get_heads()}

    def __repr__(self) -> str:
        return f"<AutomergeContent actor={self.actor[:8]} heads={len(self.heads())}>"


def create() -> AutomergeContent:
    """Create empty Automerge-backed content.

    Usage:
        content = create()
    """
    return AutomergeContent(Document())
