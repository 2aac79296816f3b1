"""Tests for bookmark records — normalization, dedupe, listing resolution."""


def test_normalize_canonical_fields():
    from herostats.bookmarks import BookmarkRecord, normalize_record
    rec = normalize_record({"id": "P1", "nickname": "Alice", "saveTime": 10, "lastUsed": 20})
    assert rec == BookmarkRecord(id="P1", nickname="Alice", save_time=10, last_used=20)


def test_normalize_snake_case_fields():
    """Files written by the old backend use save_time / last_used."""
    from herostats.bookmarks import normalize_record
    rec = normalize_record({"id": "P1", "nickname": "Alice", "save_time": 10, "last_used": 20})
    assert rec.save_time == 10
    assert rec.last_used == 20


def test_normalize_pascal_case_fields():
    from herostats.bookmarks import BookmarkRecord, normalize_record
    rec = normalize_record({"ID": "P1", "Nickname": "Alice", "SaveTime": 10, "LastUsed": 20})
    assert rec == BookmarkRecord(id="P1", nickname="Alice", save_time=10, last_used=20)


def test_normalize_prefers_canonical_case():
    from herostats.bookmarks import normalize_record
    rec = normalize_record({
        "id": "P1", "ID": "other",
        "nickname": "Alice",
        "saveTime": 10, "save_time": 99, "SaveTime": 77,
        "lastUsed": 20, "last_used": 98,
    })
    assert rec.id == "P1"
    assert rec.save_time == 10
    assert rec.last_used == 20


def test_normalize_rejects_missing_id_or_nickname():
    from herostats.bookmarks import normalize_record
    assert normalize_record({"nickname": "Alice"}) is None
    assert normalize_record({"id": "P1", "nickname": "   "}) is None
    assert normalize_record("not a dict") is None


def test_normalize_missing_timestamps_default_to_zero():
    from herostats.bookmarks import normalize_record
    rec = normalize_record({"id": "P1", "nickname": "Alice", "saveTime": "oops"})
    assert rec.save_time == 0
    assert rec.last_used == 0


def test_normalize_records_skips_bad_entries_and_dedupes():
    from herostats.bookmarks import normalize_records
    records = normalize_records([
        {"id": "P1", "nickname": "Alice"},
        {"bogus": True},
        {"id": "P2", "nickname": "Bob"},
        {"id": "P1", "nickname": "Alice2"},
    ])
    assert [(r.id, r.nickname) for r in records] == [("P1", "Alice2"), ("P2", "Bob")]


def test_dedupe_keeps_first_position():
    from herostats.bookmarks import BookmarkRecord, dedupe_records
    a1 = BookmarkRecord("A", "one")
    b = BookmarkRecord("B", "two")
    a2 = BookmarkRecord("A", "three")
    assert dedupe_records([a1, b, a2]) == [a2, b]


def test_upsert_replaces_in_place():
    from herostats.bookmarks import BookmarkRecord, upsert
    records = [BookmarkRecord("A", "a"), BookmarkRecord("B", "b")]
    result = upsert(records, BookmarkRecord("A", "new"))
    assert [r.nickname for r in result] == ["new", "b"]
    assert records[0].nickname == "a"


def test_resolve_listing_primary_wins_when_non_empty():
    from herostats.bookmarks import BookmarkRecord, Ok, resolve_listing
    p1 = BookmarkRecord("P1", "Alice")
    p2 = BookmarkRecord("P2", "Bob")
    records, mirror = resolve_listing(Ok((p1,)), Ok((p2,)))
    assert records == [p1]
    assert mirror is True


def test_resolve_listing_empty_primary_uses_fallback():
    from herostats.bookmarks import BookmarkRecord, Ok, resolve_listing
    p2 = BookmarkRecord("P2", "Bob")
    records, mirror = resolve_listing(Ok(()), Ok((p2,)))
    assert records == [p2]
    assert mirror is False


def test_resolve_listing_unavailable_primary_uses_fallback():
    from herostats.bookmarks import BookmarkRecord, Ok, Unavailable, resolve_listing
    p2 = BookmarkRecord("P2", "Bob")
    records, mirror = resolve_listing(Unavailable("disk gone"), Ok((p2,)))
    assert records == [p2]
    assert mirror is False


def test_resolve_listing_both_unavailable_is_empty():
    from herostats.bookmarks import Unavailable, resolve_listing
    assert resolve_listing(Unavailable("a"), Unavailable("b")) == ([], False)
