import pytest
from hypothesis import given
from hypothesis import strategies as st

from yaskkserv2.candidates import (
    merge_trimmed_slash_candidates,
    need_quote,
    quote_and_add_prefix,
    remove_duplicates,
    remove_duplicates_bytes,
    remove_duplicates_str,
    trim_one_slash,
)

word = st.binary(min_size=1, max_size=6).map(
    lambda b: bytes(c for c in b if c not in b"/;\r\n") or b"x"
)
unique_words = st.lists(word, min_size=1, max_size=6, unique=True)


@pytest.mark.parametrize("source", [b"a\rb", b"a\nb", b"a\\b", b'a"b', b"a;b", b"a/b"])
def test_need_quote_true(source):
    assert need_quote(source) is True


def test_need_quote_false():
    assert need_quote(b"plain text") is False


def test_quote_slash_and_semicolon():
    assert quote_and_add_prefix(b"/", None) == b'(concat "\\057")'
    assert quote_and_add_prefix(b";", None) == b'(concat "\\073")'


def test_quote_backslash_quote_and_newlines():
    assert quote_and_add_prefix(b'a\\"\r\n', None) == b'a\\\\\\"'


def test_quote_prefix():
    assert quote_and_add_prefix(b"abc", ord("1")) == b"1abc"


@given(st.binary(max_size=30))
def test_quoted_output_has_no_raw_separators(source):
    quoted = quote_and_add_prefix(source, None)
    assert b"/" not in quoted
    assert b";" not in quoted
    assert b"\n" not in quoted


@given(st.binary(max_size=30))
def test_unquoted_source_is_unchanged(source):
    if not need_quote(source):
        assert quote_and_add_prefix(source, None) == source


def test_trim_one_slash_examples():
    assert trim_one_slash(b"/abc/") == b"abc"
    assert trim_one_slash(b"//abc//") == b"/abc/"
    assert trim_one_slash(b"") == b""
    assert trim_one_slash(b"/") == b""


@given(unique_words)
def test_trim_one_slash_inverts_wrapping(words):
    inner = b"/".join(words)
    assert trim_one_slash(b"/" + inner + b"/") == inner
    assert trim_one_slash(inner) == inner


def test_merge_simple():
    assert merge_trimmed_slash_candidates(b"a/b", b"b/c") == b"/a/b/c/"


def test_merge_annotation_from_new_when_base_has_none():
    assert merge_trimmed_slash_candidates(b"a/b", b"b;note/c") == b"/a/b;note/c/"


def test_merge_annotation_base_wins():
    assert merge_trimmed_slash_candidates(b"a;x", b"a;y") == b"/a;x/"


@given(unique_words)
def test_merge_into_empty_base(words):
    new = b"/".join(words)
    assert merge_trimmed_slash_candidates(b"", new) == b"/" + new + b"/"


@given(unique_words)
def test_merge_with_itself(words):
    joined = b"/".join(words)
    assert merge_trimmed_slash_candidates(joined, joined) == b"/" + joined + b"/"


@given(unique_words, unique_words)
def test_merge_keeps_base_order_and_adds_new(base_words, new_words):
    result = merge_trimmed_slash_candidates(b"/".join(base_words), b"/".join(new_words))
    units = trim_one_slash(result).split(b"/")
    assert units[: len(base_words)] == base_words
    assert set(units) == set(base_words) | set(new_words)
    assert len(units) == len(set(units))


@given(unique_words, unique_words)
def test_merge_annotated_matches_on_stripped_units(base_words, new_words):
    base = b"/".join(w + b";b" for w in base_words)
    new = b"/".join(w + b";n" for w in new_words)
    units = trim_one_slash(merge_trimmed_slash_candidates(base, new)).split(b"/")
    stripped = [u.split(b";")[0] for u in units]
    assert stripped[: len(base_words)] == base_words
    assert set(stripped) == set(base_words) | set(new_words)
    assert all(u.endswith(b";b") for u in units[: len(base_words)])


def test_remove_duplicates_keeps_first_order():
    assert remove_duplicates([3, 1, 3, 2, 1]) == [3, 1, 2]


def test_remove_duplicates_bytes_documented_example():
    assert remove_duplicates_bytes(b"/abc/def/") == b"/abc/def/"
    assert remove_duplicates_bytes(b"/abc/abc/def/") == b"/abc/def/"


def test_remove_duplicates_str():
    assert remove_duplicates_str("/abc/def/abc/") == "/abc/def/"


@given(st.lists(word, min_size=1, max_size=8))
def test_remove_duplicates_bytes_invariants(words):
    result = remove_duplicates_bytes(b"/" + b"/".join(words) + b"/")
    units = trim_one_slash(result).split(b"/")
    assert result.startswith(b"/") and result.endswith(b"/")
    assert units == remove_duplicates(words)