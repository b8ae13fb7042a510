"""Drafts: authored, independently editable copies of a document."""

import time
import uuid
from dataclasses import dataclass
from typing import FrozenSet, Union

from upwell.adapters import automerge
from upwell.adapters.automerge import AutomergeContent, ROOT, MAP, TEXT
from upwell.comments import Comments
from upwell.types import AuthorId, DraftId

# per-draft fields that must survive merging another draft's content
_IDENTITY = ("author", "message", "time")


class Draft:
    """A named, authored copy of versioned content.

    Every field except id lives inside the content, so it merges and
    serializes along with the text. Drafts forked from one another share
    a single content history, so the shared flag is kept per draft id in
    a map that entries are only ever added to.
    """

    def __init__(self, id: DraftId, content: AutomergeContent):
        self.id = id
        self.content = content

    @classmethod
    def create(cls, id: DraftId, author_id: AuthorId, message: str = "") -> "Draft":
        content = automerge.create()
        with content.transaction() as tx:
            tx.put(ROOT, "parent_id", id)
            tx.put(ROOT, "author", author_id)
            tx.put(ROOT, "message", message)
            tx.put(ROOT, "time", int(time.time() * 1000))
            tx.put(ROOT, "title", "")
            tx.put_object(ROOT, "shared", MAP)
            tx.put_object(ROOT, "text", TEXT)
            tx.put_object(ROOT, "comments", MAP)
        return cls(id, content)

    @classmethod
    def load(cls, id: DraftId, binary: bytes) -> "Draft":
        return cls(id, AutomergeContent.load(binary))

    def fork(self, message: str, author_id: AuthorId) -> "Draft":
        forked = Draft(uuid.uuid4().hex, self.content.fork())
        with forked.content.transaction() as tx:
            tx.put(ROOT, "parent_id", self.id)
            tx.put(ROOT, "author", author_id)
            tx.put(ROOT, "message", message)
            tx.put(ROOT, "time", int(time.time() * 1000))
        return forked

    def merge(self, other: "Draft") -> "Draft":
        self.content.merge(other.content)
        return self

    def rebase(self, onto: "Draft") -> "Draft":
        """Merge onto into this draft while keeping this draft's identity,
        then re-parent it to onto."""
        keep = {key: self.content.get(ROOT, key) for key in _IDENTITY}
        self.content.merge(onto.content)
        keep["parent_id"] = onto.id
        stale = {k: v for k, v in keep.items() if self.content.get(ROOT, k) != v}
        if stale:
            with self.content.transaction() as tx:
                for key, value in stale.items():
                    tx.put(ROOT, key, value)
        return self

    def save(self) -> bytes:
        return self.content.save()

    def heads(self) -> FrozenSet[str]:
        return frozenset(self.content.heads())

    # -- fields --

    def _set(self, key: str, value) -> None:
        if self.content.get(ROOT, key) == value:
            return
        with self.content.transaction() as tx:
            tx.put(ROOT, key, value)

    @property
    def parent_id(self) -> DraftId:
        return self.content.get(ROOT, "parent_id")

    @parent_id.setter
    def parent_id(self, value: DraftId) -> None:
        self._set("parent_id", value)

    @property
    def author_id(self) -> AuthorId:
        return self.content.get(ROOT, "author")

    @property
    def message(self) -> str:
        return self.content.get(ROOT, "message")

    @message.setter
    def message(self, value: str) -> None:
        self._set("message", value)

    @property
    def shared(self) -> bool:
        return bool(self.content.get(self.content.get(ROOT, "shared"), self.id))

    @shared.setter
    def shared(self, value: bool) -> None:
        if not value:
            if self.shared:
                raise ValueError(f"draft {self.id} is shared and cannot be unshared")
            return
        if self.shared:
            return
        shared = self.content.get(ROOT, "shared")
        with self.content.transaction() as tx:
            tx.put(shared, self.id, True)

    @property
    def time(self) -> int:
        return self.content.get(ROOT, "time")

    @property
    def title(self) -> str:
        return self.content.get(ROOT, "title")

    @title.setter
    def title(self, value: str) -> None:
        self._set("title", value)

    # -- text --

    @property
    def text(self) -> str:
        return self.content.text(self.content.get(ROOT, "text"))

    def insert_at(self, position: int, value: str) -> None:
        text = self.content.get(ROOT, "text")
        with self.content.transaction() as tx:
            tx.splice_text(text, position, 0, value)

    def delete_at(self, position: int, count: int = 1) -> None:
        text = self.content.get(ROOT, "text")
        if position < 0 or position + count > self.content.length(text):
            raise IndexError(f"cannot delete {count} characters at {position}")
        with self.content.transaction() as tx:
            tx.splice_text(text, position, count, "")

    @property
    def comments(self) -> Comments:
        return Comments(self.content, self.content.get(ROOT, "comments"))

    def __repr__(self) -> str:
        return f"<Draft id={self.id} message={self.message!r} parent={self.parent_id}>"


# ============================================================
# Stored drafts - what a bundle holds for each draft id
# ============================================================

@dataclass(frozen=True)
class Hydrated:
    """A decoded draft."""
    draft: Draft

    @property
    def id(self) -> DraftId:
        return self.draft.id


@dataclass(frozen=True)
class Raw:
    """Archived draft bytes kept undecoded until someone asks for them."""
    id: DraftId
    binary: bytes


StoredDraft = Union[Hydrated, Raw]


def hydrate(stored: StoredDraft) -> Draft:
    """The draft behind a stored entry. Raw entries are decoded afresh each call."""
    if isinstance(stored, Hydrated):
        return stored.draft
    return Draft.load(stored.id, stored.binary)


def encode(stored: StoredDraft) -> bytes:
    if isinstance(stored, Raw):
        return stored.binary
    return stored.draft.save()


def copy(stored: StoredDraft) -> StoredDraft:
    """An entry that shares no mutable state with stored."""
    if isinstance(stored, Raw):
        return stored
    return Hydrated(Draft.load(stored.id, stored.draft.save()))
