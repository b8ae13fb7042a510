"""Protocol-agnostic compliance test suite for VersionedContent adapters.

Adapters provide a fixture dict:

    fixture = {
        "create_content": lambda: ...,          # fresh, empty content
        "write_entry": lambda c, k, v: ...,     # write keyed entry, return content
        "read_entry": lambda c, k: ...,         # read by key, or None
        "count_entries": lambda c: ...,         # count entries in current state
        "delete_entry": lambda c, k: ...,       # delete by key, return content (or None)
        "append_text": lambda c, s: ...,        # append to a shared text, return content
        "insert_text": lambda c, i, s: ...,     # insert into the shared text, return content
        "read_text": lambda c: ...,             # the shared text
    }

Usage with pytest:

    from upwell.compliance import run_compliance_tests

    def test_compliance():
        run_compliance_tests(AUTOMERGE_FIXTURE)
"""

from typing import Dict, Any


# ============================================================
# Layer 1: Persistable tests
# ============================================================

def test_save_load_roundtrip(fix: Dict[str, Any]) -> None:
    """load(save()) reproduces entries, text and heads."""
    c = fix["create_content"]()
    c = fix["write_entry"](c, "k", "v")
    c = fix["append_text"](c, "hello")
    loaded = type(c).load(c.save())
    assert fix["read_entry"](loaded, "k") == "v"
    assert fix["read_text"](loaded) == "hello"
    assert loaded.heads() == c.heads(), "heads should survive save/load"


def test_heads_change_on_write(fix: Dict[str, Any]) -> None:
    """Every write moves the heads."""
    c = fix["create_content"]()
    c = fix["write_entry"](c, "a", "1")
    first = c.heads()
    c = fix["write_entry"](c, "b", "2")
    assert c.heads() != first, "heads should move after a write"
    assert len(c.heads()) == 1, "a single writer has a single head"


# ============================================================
# Layer 2: Forkable tests
# ============================================================

def test_fork_shares_history(fix: Dict[str, Any]) -> None:
    """A fresh fork has the same heads and state as its origin."""
    c = fix["create_content"]()
    c = fix["write_entry"](c, "k", "v")
    f = c.fork()
    assert f.heads() == c.heads()
    assert fix["read_entry"](f, "k") == "v"


def test_fork_isolation(fix: Dict[str, Any]) -> None:
    """Writes to a fork don't affect the origin, and vice versa."""
    c = fix["create_content"]()
    c = fix["write_entry"](c, "shared", "base")
    f = c.fork()
    f = fix["write_entry"](f, "fork-only", "x")
    c = fix["write_entry"](c, "origin-only", "y")
    assert fix["read_entry"](c, "fork-only") is None, \
        "origin should NOT see fork data"
    assert fix["read_entry"](f, "origin-only") is None, \
        "fork should NOT see origin data"
    assert fix["read_entry"](f, "shared") == "base"


# ============================================================
# Layer 3: Mergeable tests
# ============================================================

def test_merge_brings_remote_writes(fix: Dict[str, Any]) -> None:
    """merge returns self with the other side's writes applied."""
    c = fix["create_content"]()
    f = c.fork()
    f = fix["write_entry"](f, "remote", "r")
    merged = c.merge(f)
    assert merged is c, "merge should return self"
    assert fix["read_entry"](c, "remote") == "r"
    assert c.heads() == f.heads(), "merging a descendant should fast-forward"


def test_merge_idempotent(fix: Dict[str, Any]) -> None:
    """Merging the same replica twice changes nothing the second time."""
    c = fix["create_content"]()
    f = c.fork()
    f = fix["write_entry"](f, "k", "v")
    c = fix["write_entry"](c, "j", "w")
    c.merge(f)
    heads = c.heads()
    c.merge(f)
    assert c.heads() == heads


def test_merge_commutative(fix: Dict[str, Any]) -> None:
    """a.merge(b) and b.merge(a) converge to the same state and heads."""
    c = fix["create_content"]()
    c = fix["write_entry"](c, "k", "base")
    a = c.fork()
    b = c.fork()
    a = fix["write_entry"](a, "k", "from-a")
    a = fix["write_entry"](a, "a", "1")
    b = fix["write_entry"](b, "k", "from-b")
    b = fix["write_entry"](b, "b", "2")
    a2, b2 = a.fork(), b.fork()
    a2.merge(b)
    b2.merge(a)
    assert a2.heads() == b2.heads()
    assert len(a2.heads()) == 2, "concurrent writers leave two heads"
    for key in ("k", "a", "b"):
        assert fix["read_entry"](a2, key) == fix["read_entry"](b2, key)
    assert fix["read_entry"](a2, "k") in ("from-a", "from-b")


def test_concurrent_text_edits_converge(fix: Dict[str, Any]) -> None:
    """Concurrent inserts into the same text keep both edits on both sides."""
    c = fix["create_content"]()
    c = fix["append_text"](c, "Hello")
    a = c.fork()
    b = c.fork()
    a = fix["append_text"](a, " world")
    b = fix["insert_text"](b, 0, ">> ")
    a.merge(b)
    b.merge(a)
    assert fix["read_text"](a) == fix["read_text"](b) == ">> Hello world"


# ============================================================
# Data Consistency tests
# ============================================================

def test_multiple_entries_readable(fix: Dict[str, Any]) -> None:
    """Multiple entries are independently readable."""
    c = fix["create_content"]()
    c = fix["write_entry"](c, "x", "val-x")
    c = fix["write_entry"](c, "y", "val-y")
    assert fix["read_entry"](c, "x") == "val-x"
    assert fix["read_entry"](c, "y") == "val-y"
    assert fix["read_entry"](c, "nonexistent") is None, \
        "Non-existent key should return None"


def test_count_after_writes(fix: Dict[str, Any]) -> None:
    """count_entries increases after writes."""
    c = fix["create_content"]()
    assert fix["count_entries"](c) == 0, "Fresh content should have 0 entries"
    c = fix["write_entry"](c, "a", "1")
    assert fix["count_entries"](c) == 1
    c = fix["write_entry"](c, "b", "2")
    c = fix["write_entry"](c, "c", "3")
    assert fix["count_entries"](c) == 3


def test_delete_entry_consistency(fix: Dict[str, Any]) -> None:
    """Deleted entry is no longer readable."""
    if fix.get("delete_entry") is None:
        return
    c = fix["create_content"]()
    c = fix["write_entry"](c, "keep", "keep-val")
    c = fix["write_entry"](c, "remove", "remove-val")
    c = fix["delete_entry"](c, "remove")
    assert fix["count_entries"](c) == 1, "Count should decrease after delete"
    assert fix["read_entry"](c, "remove") is None
    assert fix["read_entry"](c, "keep") == "keep-val"


def test_overwrite_entry(fix: Dict[str, Any]) -> None:
    """Overwriting an entry updates its value."""
    c = fix["create_content"]()
    c = fix["write_entry"](c, "key", "original")
    c = fix["write_entry"](c, "key", "updated")
    assert fix["read_entry"](c, "key") == "updated"
    assert fix["count_entries"](c) == 1, "Count should remain 1 after overwrite"


# ============================================================
# Full test suite
# ============================================================

ALL_TESTS = {
    "persistable": [
        test_save_load_roundtrip,
        test_heads_change_on_write,
    ],
    "forkable": [
        test_fork_shares_history,
        test_fork_isolation,
    ],
    "mergeable": [
        test_merge_brings_remote_writes,
        test_merge_idempotent,
        test_merge_commutative,
        test_concurrent_text_edits_converge,
    ],
    "data_consistency": [
        test_multiple_entries_readable,
        test_count_after_writes,
        test_delete_entry_consistency,
        test_overwrite_entry,
    ],
}


def run_compliance_tests(fixture: Dict[str, Any]) -> None:
    """Run all compliance tests for the given fixture.

    Required fixture keys:
        create_content - () -> content
        write_entry    - (content, key, value) -> content
        read_entry     - (content, key) -> value or None
        count_entries  - (content) -> int
        delete_entry   - (content, key) -> content (or None to skip delete tests)
        append_text    - (content, text) -> content
        insert_text    - (content, index, text) -> content
        read_text      - (content) -> str
    """
    for layer, tests in ALL_TESTS.items():
        for test_fn in tests:
            test_fn(fixture)
