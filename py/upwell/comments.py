"""Comment threads stored inside a draft's content."""

from typing import Iterator, List

from upwell.adapters.automerge import AutomergeContent, Transaction, MAP, LIST
from upwell.errors import NotFoundError
from upwell.types import Comment, CommentState


class Comments:
    """Comments keyed by id. A thread's replies are kept in the parent's
    children list in the order they were added."""

    def __init__(self, content: AutomergeContent, obj: bytes):
        self._content = content
        self._obj = obj

    def _write(self, tx: Transaction, comment: Comment) -> None:
        node = tx.put_object(self._obj, comment.id, MAP)
        tx.put(node, "id", comment.id)
        tx.put(node, "author", comment.author)
        tx.put(node, "message", comment.message)
        tx.put(node, "state", comment.state.value)
        children = tx.put_object(node, "children", LIST)
        for i, child_id in enumerate(comment.children):
            tx.insert(children, i, child_id)

    def _node(self, comment_id: str) -> bytes:
        node = self._content.get(self._obj, comment_id)
        if node is None:
            raise NotFoundError(f"no comment with id={comment_id}")
        return node

    def insert(self, comment: Comment) -> Comment:
        with self._content.transaction() as tx:
            self._write(tx, comment)
        return comment

    def add_child(self, parent: Comment, child: Comment) -> Comment:
        """Append child to the end of parent's thread."""
        children = self._content.get(self._node(parent.id), "children")
        with self._content.transaction() as tx:
            self._write(tx, child)
            tx.insert(children, self._content.length(children), child.id)
        return self.get(child.id)

    def close(self, comment_id: str) -> Comment:
        node = self._node(comment_id)
        with self._content.transaction() as tx:
            tx.put(node, "state", CommentState.CLOSED.value)
        return self.get(comment_id)

    def get(self, comment_id: str) -> Comment:
        return Comment.from_json(self._content.to_py(self._node(comment_id)))

    def children_of(self, comment_id: str) -> List[Comment]:
        return [self.get(child_id) for child_id in self.get(comment_id).children]

    def threads(self) -> List[Comment]:
        """Top level comments."""
        return [c for c in self if c.state != CommentState.CHILD]

    def __iter__(self) -> Iterator[Comment]:
        for comment_id in self._content.keys(self._obj):
            yield self.get(comment_id)

    def __len__(self) -> int:
        return self._content.length(self._obj)
