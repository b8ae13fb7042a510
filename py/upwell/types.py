"""Core data types for the Upwell draft model.

Authors and comments are immutable dataclasses with
JSON-friendly to_json/from_json helpers.
"""

import secrets
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Tuple

AuthorId = str
DraftId = str

SPECIAL_ROOT_DOCUMENT = "UPWELL_ROOT@@@"


def create_author_id() -> AuthorId:
    """16 random bytes rendered as hex."""
    return secrets.token_bytes(16).hex()


# ============================================================
# Author
# ============================================================

@dataclass(frozen=True)
class Author:
    id: AuthorId
    name: str

    def to_json(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_json(cls, data: Dict[str, str]) -> "Author":
        return cls(id=data["id"], name=data["name"])


UNKNOWN_AUTHOR = Author(id=create_author_id(), name="Anonymous")


# ============================================================
# Comments
# ============================================================

class CommentState(Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CHILD = "CHILD"


@dataclass(frozen=True)
class Comment:
    """A comment on a draft. children holds child comment ids in thread order."""
    id: str
    author: AuthorId
    message: str
    children: Tuple[str, ...] = field(default_factory=tuple)
    state: CommentState = CommentState.OPEN

    @classmethod
    def create(cls, author: AuthorId, message: str,
               state: CommentState = CommentState.OPEN) -> "Comment":
        return cls(id=uuid.uuid4().hex, author=author, message=message, state=state)

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "message": self.message,
            "children": list(self.children),
            "state": self.state.value,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=data["id"],
            author=data["author"],
            message=data["message"],
            children=tuple(data.get("children", [])),
            state=CommentState(data.get("state", CommentState.OPEN.value)),
        )


# ============================================================
# Lookup - outcome of resolving a draft id inside a bundle
# ============================================================

class Lookup(Enum):
    FOUND = "found"  # decoded draft held in memory
    STALE = "stale"  # only raw archived bytes held, must be decoded
    NOT_FOUND = "not-found"
