"""The metadata ledger: authors, drafts, archive flags and the root id.

The ledger is versioned content too, so replicas merge it exactly the
way they merge draft content.
"""

from typing import Dict, List, Optional, FrozenSet

from upwell.adapters import automerge
from upwell.adapters.automerge import AutomergeContent, ROOT, MAP
from upwell.errors import MalformedContentError
from upwell.types import Author, AuthorId, DraftId


class UpwellMetadata:
    def __init__(self, doc: AutomergeContent):
        self.doc = doc

    @classmethod
    def create(cls, id: str) -> "UpwellMetadata":
        doc = automerge.create()
        with doc.transaction() as tx:
            tx.put(ROOT, "id", id)
            tx.put(ROOT, "main", None)
            tx.put_object(ROOT, "authors", MAP)
            tx.put_object(ROOT, "drafts", MAP)
            tx.put_object(ROOT, "archived", MAP)
        return cls(doc)

    @classmethod
    def load(cls, binary: bytes) -> "UpwellMetadata":
        doc = AutomergeContent.load(binary)
        for key in ("id", "authors", "drafts", "archived"):
            if doc.get(ROOT, key) is None:
                raise MalformedContentError(f"metadata has no {key}")
        return cls(doc)

    def _map(self, name: str) -> bytes:
        return self.doc.get(ROOT, name)

    @property
    def id(self) -> str:
        return self.doc.get(ROOT, "id")

    @property
    def main(self) -> Optional[DraftId]:
        """Id of the root draft."""
        return self.doc.get(ROOT, "main")

    @main.setter
    def main(self, draft_id: DraftId) -> None:
        if self.main == draft_id:
            return
        with self.doc.transaction() as tx:
            tx.put(ROOT, "main", draft_id)

    # -- authors --

    def add_author(self, author: Author) -> None:
        authors = self._map("authors")
        if self.doc.get(authors, author.id) is not None:
            return
        with self.doc.transaction() as tx:
            tx.put(authors, author.id, author.name)

    def get_author(self, author_id: AuthorId) -> Optional[Author]:
        name = self.doc.get(self._map("authors"), author_id)
        if name is None:
            return None
        return Author(id=author_id, name=name)

    def get_authors(self) -> Dict[AuthorId, str]:
        return self.doc.to_py(self._map("authors"))

    # -- drafts --

    def add_draft(self, draft_id: DraftId) -> None:
        drafts = self._map("drafts")
        if self.doc.get(drafts, draft_id):
            return
        with self.doc.transaction() as tx:
            tx.put(drafts, draft_id, True)

    @property
    def draft_ids(self) -> List[DraftId]:
        return self.doc.keys(self._map("drafts"))

    def archive(self, draft_id: DraftId) -> None:
        archived = self._map("archived")
        if self.doc.get(archived, draft_id):
            return
        with self.doc.transaction() as tx:
            tx.put(archived, draft_id, True)

    def is_archived(self, draft_id: DraftId) -> bool:
        # the root is never reported archived, even if a concurrent replica flagged it
        if draft_id == self.main:
            return False
        return bool(self.doc.get(self._map("archived"), draft_id))

    @property
    def archived_ids(self) -> List[DraftId]:
        return [d for d in self.doc.keys(self._map("archived")) if self.is_archived(d)]

    # -- versioned content --

    def save(self) -> bytes:
        return self.doc.save()

    def heads(self) -> FrozenSet[str]:
        return frozenset(self.doc.heads())

    def merge(self, other: "UpwellMetadata") -> "UpwellMetadata":
        self.doc.merge(other.doc)
        return self

    def to_json(self) -> Dict:
        return {
            "id": self.id,
            "main": self.main,
            "authors": self.get_authors(),
            "drafts": sorted(self.draft_ids),
            "archived": sorted(self.archived_ids),
        }
