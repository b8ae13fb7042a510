"""The Upwell bundle: a root draft, working drafts and their ledger.

An Upwell is the unit of persistence and of sync. Two replicas of the
same bundle are reconciled with merge().
"""

import logging
import uuid
from typing import Dict, List, Optional, Any, Tuple

from upwell import names
from upwell.draft import Draft, Hydrated, Raw, StoredDraft, hydrate, copy
from upwell.errors import NotFoundError, UpwellError
from upwell.history import History
from upwell.metadata import UpwellMetadata
from upwell.protocols import is_sync
from upwell.types import (
    Author, AuthorId, DraftId, Lookup, UNKNOWN_AUTHOR, SPECIAL_ROOT_DOCUMENT,
)

logger = logging.getLogger(__name__)


class Upwell:
    """Multiple drafts of one document.

    The bundle is the sole owner of its drafts. Archived drafts may be held
    as raw bytes and are only decoded when asked for.
    """

    def __init__(self, metadata: UpwellMetadata, author: Author):
        self.metadata = metadata
        self.author = author
        self._drafts: Dict[DraftId, StoredDraft] = {}
        self.metadata.add_author(author)

    @classmethod
    def create(cls, id: Optional[str] = None, author: Optional[Author] = None) -> "Upwell":
        """New bundle with a root draft and one working draft forked from it."""
        id = id or uuid.uuid4().hex
        author = author or UNKNOWN_AUTHOR
        root = Draft.create(SPECIAL_ROOT_DOCUMENT, author.id)
        upwell = cls(UpwellMetadata.create(id), author)
        upwell._add(root)
        upwell.metadata.main = root.id
        upwell.create_draft()
        logger.debug("created bundle %s", id)
        return upwell

    @property
    def id(self) -> str:
        return self.metadata.id

    # -- root --

    @property
    def root_draft(self) -> Draft:
        return self.get(self.metadata.main)

    @root_draft.setter
    def root_draft(self, draft: Draft) -> None:
        self.promote_to_root(draft)

    def promote_to_root(self, draft: Draft) -> None:
        """Make draft canonical and archive the previous root."""
        if draft.id not in self._drafts:
            raise NotFoundError(f"draft {draft.id} is not part of bundle {self.id}")
        previous = self.metadata.main
        self.metadata.main = draft.id
        if previous is not None and previous != draft.id:
            self.archive(previous)

    def update_to_root(self, draft: Draft) -> None:
        """Rebase draft onto the current root, keeping its identity and message."""
        draft.rebase(self.root_draft)
        self._add(draft)

    @property
    def history(self) -> History:
        return History(self)

    # -- drafts --

    def drafts(self) -> List[Draft]:
        """Working drafts: everything neither archived nor root, in insertion order."""
        main = self.metadata.main
        return [
            self.get(draft_id) for draft_id in list(self._drafts)
            if draft_id != main and not self.is_archived(draft_id)
        ]

    def stored(self) -> List[StoredDraft]:
        return list(self._drafts.values())

    def _add(self, draft: Draft) -> None:
        self._drafts[draft.id] = Hydrated(draft)
        self.metadata.add_draft(draft.id)

    def _restore(self, stored: StoredDraft) -> None:
        self._drafts[stored.id] = stored

    def create_draft(self, message: Optional[str] = None) -> Draft:
        """Fork the root into a new working draft owned by this bundle's author."""
        if not message:
            message = names.random_dessert()
        draft = self.root_draft.fork(message, self.author.id)
        self._add(draft)
        return draft

    def _lookup(self, draft_id: DraftId) -> Tuple[Lookup, Optional[StoredDraft]]:
        stored = self._drafts.get(draft_id)
        if stored is None:
            return Lookup.NOT_FOUND, None
        if isinstance(stored, Raw):
            return Lookup.STALE, stored
        return Lookup.FOUND, stored

    def get(self, draft_id: DraftId) -> Draft:
        status, stored = self._lookup(draft_id)
        if status is Lookup.NOT_FOUND:
            raise NotFoundError(f"mystery id={draft_id}")
        draft = hydrate(stored)
        if status is Lookup.STALE and (draft_id == self.metadata.main
                                       or not self.is_archived(draft_id)):
            # no longer archived history: keep the decoded draft so edits stick
            self._drafts[draft_id] = Hydrated(draft)
        return draft

    def share(self, draft_id: DraftId) -> None:
        draft = self.get(draft_id)
        draft.shared = True
        self._add(draft)

    def is_archived(self, draft_id: DraftId) -> bool:
        return self.metadata.is_archived(draft_id)

    def archive(self, draft_id: DraftId) -> None:
        if self.is_archived(draft_id):
            logger.info("skipping archive of %s, already archived", draft_id)
            return
        if draft_id not in self._drafts:
            raise NotFoundError(f"draft with id={draft_id} does not exist")
        if draft_id == self.metadata.main:
            raise UpwellError(f"cannot archive the root draft {draft_id}")
        self.metadata.archive(draft_id)

    # -- authors --

    def get_author(self, author_id: AuthorId) -> Optional[Author]:
        return self.metadata.get_author(author_id)

    def get_author_name(self, author_id: AuthorId) -> Optional[str]:
        author = self.metadata.get_author(author_id)
        return author.name if author else None

    def get_authors(self) -> Dict[AuthorId, str]:
        return self.metadata.get_authors()

    # -- sync --

    def merge(self, other: "Upwell") -> bool:
        """Fold another replica of this bundle into this one.

        Returns True when any draft or the ledger actually changed here.
        """
        if other.id != self.id:
            raise UpwellError(f"cannot merge bundle {other.id} into {self.id}")
        changed = False
        for incoming in other.stored():
            status, local = self._lookup(incoming.id)
            if status is Lookup.NOT_FOUND:
                self._drafts[incoming.id] = copy(incoming)
                changed = True
                continue
            existing = hydrate(local)
            theirs = hydrate(incoming)
            before = existing.heads()
            if before == theirs.heads():
                continue
            existing.merge(theirs)
            if existing.heads() != before:
                self._drafts[existing.id] = Hydrated(existing)
                changed = True

        ours, theirs = self.metadata, other.metadata
        before = ours.heads()
        if before != theirs.heads():
            ours.merge(theirs)
            changed = changed or ours.heads() != before
        logger.debug("merged bundle %s, changed=%s", self.id, changed)
        return changed

    # -- persistence --

    def to_bytes(self, opts: Optional[Dict[str, Any]] = None):
        """Archive bytes. opts: {"sync": True} -- when False, returns awaitable."""
        from upwell import codec
        if is_sync(opts):
            return codec.serialize(self)
        return codec.serialize_async(self)

    @classmethod
    def from_bytes(cls, data: bytes, author: Optional[Author] = None,
                   opts: Optional[Dict[str, Any]] = None):
        """Bundle from archive bytes. opts: {"sync": True} -- when False, returns awaitable."""
        from upwell import codec
        author = author or UNKNOWN_AUTHOR
        if is_sync(opts):
            return codec.deserialize(data, author)
        return codec.deserialize_async(data, author)

    def __repr__(self) -> str:
        return f"<Upwell id={self.id} root={self.metadata.main} drafts={len(self._drafts)}>"
