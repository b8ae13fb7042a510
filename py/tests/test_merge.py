"""Reconciling two replicas of one bundle."""

import pytest

from upwell import Author, Upwell, UpwellError, create_author_id, serialize, deserialize
from upwell.draft import Raw


def _author(name: str) -> Author:
    return Author(id=create_author_id(), name=name)


def _copy(upwell: Upwell, author: Author) -> Upwell:
    return deserialize(serialize(upwell), author)


def _state(upwell: Upwell):
    return (
        upwell.metadata.to_json(),
        {d.id: (d.text, d.message, d.shared) for d in upwell.drafts()},
        upwell.root_draft.text,
    )


def _replicas():
    ada, bob = _author("Ada"), _author("Bob")
    base = Upwell.create(author=ada)
    base.drafts()[0].insert_at(0, "Hello")
    base.create_draft("second")
    a = _copy(base, ada)
    b = _copy(base, bob)
    return a, b, ada, bob


class TestMerge:
    def test_merge_with_unchanged_copy(self):
        ada = _author("Ada")
        a = Upwell.create(author=ada)
        assert a.merge(_copy(a, ada)) is False

    def test_repeat_merge_reports_no_change(self):
        a, b, _, _ = _replicas()
        b.drafts()[0].insert_at(5, " from bob")
        a.drafts()[1].insert_at(0, "ada: ")
        assert a.merge(b) is True
        assert a.merge(b) is False

    def test_new_draft_added(self):
        a, b, _, _ = _replicas()
        fresh = b.create_draft("bob's idea")
        fresh.insert_at(0, "idea")
        assert a.merge(b) is True
        assert a.get(fresh.id).text == "idea"
        assert a.get(fresh.id).message == "bob's idea"
        assert fresh.id in [d.id for d in a.drafts()]

    def test_added_draft_is_not_aliased(self):
        a, b, _, _ = _replicas()
        fresh = b.create_draft("bob's idea")
        a.merge(b)
        fresh.insert_at(0, "later")
        assert a.get(fresh.id).text == ""
        a.get(fresh.id).insert_at(0, "mine")
        assert fresh.text == "later"

    def test_existing_draft_merged_in_place(self):
        a, b, _, _ = _replicas()
        ours = a.drafts()[0]
        b.drafts()[0].insert_at(5, " world")
        assert a.merge(b) is True
        assert ours.text == "Hello world"
        assert a.drafts()[0] is ours

    def test_convergence_both_orders(self):
        a, b, ada, bob = _replicas()
        a.drafts()[0].insert_at(5, "!")
        b.drafts()[1].insert_at(0, "Bob was here")
        b.share(b.drafts()[1].id)
        a.archive(a.create_draft("throwaway").id)

        ab = _copy(a, ada)
        ab.merge(_copy(b, bob))
        ba = _copy(b, bob)
        ba.merge(_copy(a, ada))
        assert _state(ab) == _state(ba)
        assert ab.metadata.heads() == ba.metadata.heads()

    def test_concurrent_edits_to_same_draft(self):
        a, b, _, _ = _replicas()
        a.drafts()[0].insert_at(5, " world")
        b.drafts()[0].insert_at(0, ">> ")
        a2 = _copy(a, a.author)
        a.merge(b)
        b.merge(a2)
        assert a.drafts()[0].text == b.drafts()[0].text == ">> Hello world"

    def test_ledger_merged(self):
        a, b, ada, bob = _replicas()
        target = b.drafts()[1]
        b.archive(target.id)
        assert a.merge(b) is True
        assert a.is_archived(target.id)
        assert a.get_authors() == {ada.id: "Ada", bob.id: "Bob"}

    def test_promotion_travels(self):
        a, b, _, _ = _replicas()
        old_root = a.metadata.main
        b.root_draft = b.drafts()[0]
        a.merge(b)
        assert a.metadata.main == b.metadata.main
        assert a.is_archived(old_root)
        assert not a.is_archived(a.metadata.main)

    def test_concurrent_promotions_keep_single_root(self):
        a, b, _, _ = _replicas()
        a.root_draft = a.drafts()[0]
        b.root_draft = b.drafts()[1]
        a.merge(b)
        b.merge(a)
        assert a.metadata.main == b.metadata.main
        for bundle in (a, b):
            assert not bundle.is_archived(bundle.metadata.main)
            assert bundle.metadata.main not in [d.id for d in bundle.drafts()]

    def test_raw_archived_draft_carried_over(self):
        a, b, _, bob = _replicas()
        gone = b.create_draft("gone")
        gone.insert_at(0, "bye")
        b.archive(gone.id)
        b = _copy(b, bob)
        assert isinstance({s.id: s for s in b.stored()}[gone.id], Raw)
        assert a.merge(b) is True
        assert a.get(gone.id).text == "bye"
        assert a.is_archived(gone.id)

    def test_stale_local_entry_updated(self):
        a, b, ada, _ = _replicas()
        old_root = a.metadata.main
        a.root_draft = a.drafts()[0]
        a = _copy(a, ada)
        assert isinstance({s.id: s for s in a.stored()}[old_root], Raw)
        b.get(old_root).insert_at(0, "late edit ")
        assert a.merge(b) is True
        assert a.get(old_root).text.startswith("late edit ")

    def test_share_survives_concurrent_rebase(self):
        a, b, _, _ = _replicas()
        target = a.drafts()[1].id
        a.share(target)

        promoted = b.drafts()[0]
        b.share(promoted.id)
        b.root_draft = promoted
        b.update_to_root(b.get(target))

        a.merge(b)
        b.merge(a)
        assert a.get(target).shared is True
        assert b.get(target).shared is True
        assert a.get(target).parent_id == promoted.id

    def test_different_bundles_refused(self):
        a = Upwell.create(author=_author("Ada"))
        other = Upwell.create(author=_author("Bob"))
        with pytest.raises(UpwellError):
            a.merge(other)
        assert a.get_authors() == {a.author.id: "Ada"}
