"""Walk the chain of root promotions backwards through parent links."""

from typing import Iterator, List, TYPE_CHECKING

from upwell.errors import UpwellError

if TYPE_CHECKING:
    from upwell.draft import Draft
    from upwell.upwell import Upwell


class History:
    """Lazy sequence of drafts, newest first: the current root, its parent,
    and so on until a draft that is its own parent.

    Every iteration starts over from the current root. Archived ancestors
    are decoded on demand.
    """

    def __init__(self, upwell: "Upwell"):
        self._upwell = upwell

    def __iter__(self) -> Iterator["Draft"]:
        seen = set()
        draft = self._upwell.root_draft
        while True:
            if draft.id in seen:
                raise UpwellError(f"parent cycle through draft {draft.id}")
            seen.add(draft.id)
            yield draft
            if draft.parent_id == draft.id:
                return
            draft = self._upwell.get(draft.parent_id)

    def get(self, n: int) -> "Draft":
        """n-th ancestor of the root, 0 being the root itself."""
        if n < 0:
            raise IndexError(f"history index must be non-negative, got {n}")
        for i, draft in enumerate(self):
            if i == n:
                return draft
        raise IndexError(f"history has no entry {n}")

    def ids(self) -> List[str]:
        return [draft.id for draft in self]

    def __len__(self) -> int:
        return sum(1 for _ in self)
