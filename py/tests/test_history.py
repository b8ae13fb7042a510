"""Walking the chain of root promotions."""

import pytest

from upwell import (
    Author, Upwell, UpwellError, NotFoundError, SPECIAL_ROOT_DOCUMENT,
    create_author_id, serialize, deserialize,
)


def _author() -> Author:
    return Author(id=create_author_id(), name="Susan")


def _promote_chain(length: int) -> Upwell:
    d = Upwell.create(author=_author())
    for i in range(length):
        d.root_draft = d.create_draft(f"step {i}")
    return d


class TestHistory:
    def test_fresh_bundle(self):
        d = Upwell.create(author=_author())
        assert d.history.get(0).id == SPECIAL_ROOT_DOCUMENT
        assert len(d.history) == 1

    def test_chain_newest_first(self):
        d = _promote_chain(3)
        messages = [draft.message for draft in d.history]
        assert messages == ["step 2", "step 1", "step 0", ""]
        assert d.history.ids()[-1] == SPECIAL_ROOT_DOCUMENT
        assert len(d.history) == 4

    def test_get(self):
        d = _promote_chain(2)
        assert d.history.get(0).id == d.metadata.main
        assert d.history.get(2).id == SPECIAL_ROOT_DOCUMENT
        with pytest.raises(IndexError):
            d.history.get(3)
        with pytest.raises(IndexError):
            d.history.get(-1)

    def test_ancestors_are_archived(self):
        d = _promote_chain(2)
        root, *ancestors = list(d.history)
        assert not d.is_archived(root.id)
        assert all(d.is_archived(a.id) for a in ancestors)

    def test_restartable_and_live(self):
        d = _promote_chain(1)
        history = d.history
        assert len(history) == 2
        d.root_draft = d.create_draft("later")
        assert history.get(0).message == "later"
        assert len(history) == 3
        assert len(history) == 3

    def test_lazy(self):
        d = _promote_chain(2)
        walk = iter(d.history)
        assert next(walk).id == d.metadata.main

    def test_resolves_unhydrated_ancestors(self):
        d = _promote_chain(3)
        d.root_draft.insert_at(0, "latest")
        e = deserialize(serialize(d), _author())
        assert [x.id for x in e.history] == d.history.ids()
        assert e.history.get(0).text == "latest"

    def test_cycle_detected(self):
        d = _promote_chain(1)
        d.get(SPECIAL_ROOT_DOCUMENT).parent_id = d.metadata.main
        with pytest.raises(UpwellError):
            list(d.history)

    def test_dangling_parent(self):
        d = _promote_chain(1)
        d.root_draft.parent_id = "missing"
        with pytest.raises(NotFoundError):
            d.history.get(1)
