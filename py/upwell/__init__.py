"""Upwell - drafts of one document that fork, merge and converge.

Bookkeeping for a canonical root draft, working drafts forked from it,
archived history, and a portable single-archive bundle format.
"""

__version__ = "0.1.0"

from upwell.protocols import VersionedContent, Watchable
from upwell.types import (
    Author, AuthorId, DraftId, Comment, CommentState, Lookup,
    UNKNOWN_AUTHOR, SPECIAL_ROOT_DOCUMENT, create_author_id,
)
from upwell.errors import (
    UpwellError, NotFoundError, MalformedArchiveError, MalformedContentError,
)
from upwell.draft import Draft
from upwell.metadata import UpwellMetadata
from upwell.history import History
from upwell.upwell import Upwell
from upwell.codec import serialize, deserialize, serialize_async, deserialize_async
from upwell.documents import Documents
from upwell.config import UpwellConfig
