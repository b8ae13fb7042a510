"""Documents: the set of open bundles for one local author.

Pass a Documents instance to whatever needs bundles instead of reaching
for module state. Call close() when done with it.
"""

import logging
import time
import uuid
from typing import Callable, Dict, Any, List, Optional, Tuple

from upwell import codec
from upwell.config import UpwellConfig, DEFAULT_CONFIG
from upwell.draft import Draft
from upwell.errors import NotFoundError, UpwellError
from upwell.protocols import Watchable
from upwell.types import Author
from upwell.upwell import Upwell

logger = logging.getLogger(__name__)

Callback = Callable[[Dict[str, Any]], None]


class Documents(Watchable):
    def __init__(self, author: Author, config: Optional[UpwellConfig] = None):
        self.author = author
        self.config = config or DEFAULT_CONFIG
        self._upwells: Dict[str, Upwell] = {}
        self._watchers: Dict[str, Tuple[str, Callback]] = {}

    # -- bundles --

    def create(self, id: Optional[str] = None) -> Upwell:
        if id is not None and id in self._upwells:
            raise UpwellError(f"bundle {id} is already open")
        upwell = Upwell.create(id, self.author)
        self._upwells[upwell.id] = upwell
        return upwell

    def open(self, data: bytes) -> Upwell:
        """Load archive bytes. An already open bundle absorbs them instead."""
        incoming = codec.deserialize(data, self.author, self.config)
        existing = self._upwells.get(incoming.id)
        if existing is None:
            self._upwells[incoming.id] = incoming
            return incoming
        if existing.merge(incoming):
            self._notify(existing.id, "synced", None)
        return existing

    def get(self, id: str) -> Upwell:
        try:
            return self._upwells[id]
        except KeyError:
            raise NotFoundError(f"no open bundle with id={id}") from None

    def list(self) -> List[str]:
        return list(self._upwells)

    def save(self, id: str) -> bytes:
        return codec.serialize(self.get(id), self.config)

    def sync(self, id: str, data: bytes) -> bool:
        """Merge a remote replica's archive into the open bundle id."""
        upwell = self.get(id)
        incoming = codec.deserialize(data, self.author, self.config)
        if incoming.id != id:
            logger.warning("refusing to sync bundle %s into %s", incoming.id, id)
            raise UpwellError(f"archive holds bundle {incoming.id}, not {id}")
        changed = upwell.merge(incoming)
        if changed:
            self._notify(id, "synced", None)
        return changed

    # -- drafts --

    def create_draft(self, id: str, message: Optional[str] = None) -> Draft:
        draft = self.get(id).create_draft(message)
        self._notify(id, "draft_created", draft.id)
        return draft

    def draft_changed(self, id: str, draft: Draft) -> None:
        """Tell watchers a draft was edited in place."""
        upwell = self.get(id)
        upwell.get(draft.id)  # NotFoundError for drafts of another bundle
        self._notify(id, "draft_changed", draft.id)

    # -- Watchable --

    def watch(self, upwell_id: str, callback: Callback,
              opts: Optional[Dict[str, Any]] = None) -> str:
        watch_id = uuid.uuid4().hex
        self._watchers[watch_id] = (upwell_id, callback)
        return watch_id

    def unwatch(self, watch_id: str, opts: Optional[Dict[str, Any]] = None) -> None:
        self._watchers.pop(watch_id, None)

    def _notify(self, upwell_id: str, kind: str, draft_id: Optional[str]) -> None:
        event = {
            "type": kind,
            "upwell_id": upwell_id,
            "draft_id": draft_id,
            "timestamp": int(time.time() * 1000),
        }
        for watched, callback in list(self._watchers.values()):
            if watched == upwell_id:
                callback(event)

    def close(self) -> None:
        self._watchers.clear()
        self._upwells.clear()
