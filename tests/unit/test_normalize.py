"""Tests for match-key normalization."""

from __future__ import annotations

from idsync.matching.normalize import match_key, normalize


def test_trims_and_lowercases():
    assert normalize("  Alice TRAN ") == "alice tran"


def test_none_is_empty():
    assert normalize(None) == ""


def test_non_string_is_stringified():
    assert normalize(900000001) == "900000001"


def test_diacritics_are_kept():
    assert normalize("Nguyễn Như Huyền") == "nguyễn như huyền"


def test_match_key_shapes():
    assert match_key("alice", "0900") == "alice|0900"
    assert match_key("", "0900") == "|0900"
    assert match_key("alice", "") == "alice|"
