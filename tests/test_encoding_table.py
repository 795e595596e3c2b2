import re
import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from yaskkserv2.encoding_table import (
    EUC_2_TO_UTF8_INDEX_MAXIMUM,
    UTF8_3_TO_EUC_INDEX_MAXIMUM,
    EncodingTable,
    create_src_table,
    create_table,
    euc_2_to_utf8_index,
    euc_code_to_euc_3_bytes,
    unicode_code_to_utf8_8_bytes,
    unicode_to_utf8,
    utf8_3_to_euc_index,
)
from yaskkserv2.errors import EncodingError

TABLE_TEXT = (
    "## sample mapping\n"
    "0x41\tU+0041\t# LATIN CAPITAL LETTER A\n"
    "0xA1F1\tU+00A2\t# CENT SIGN\n"
    "0xA4A2\tU+3042\t# HIRAGANA LETTER A\n"
    "0xA4F7\tU+304B+309A\t# [2000]\n"
    "0xABC4\tU+00E6+0300\t# [2000]\n"
    "0xAEA2\tU+20089\t# [2000]\n"
    "0x8FA1A1\tU+4E02\t# <cjk>\n"
    "0xA1A2\tU+XXXX\n"
)


@pytest.fixture
def table_path(tmp_path):
    path = tmp_path / "table.txt"
    path.write_text(TABLE_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def table(table_path):
    return EncodingTable.from_bytes(create_table(table_path))


def test_euc_2_index_bounds():
    assert euc_2_to_utf8_index(0x8E, 0xA1) == 0
    assert euc_2_to_utf8_index(0xFE, 0xFE) == EUC_2_TO_UTF8_INDEX_MAXIMUM
    assert euc_2_to_utf8_index(0x41, 0xA1) == 1
    assert euc_2_to_utf8_index(0xA4, 0x20) == 1


def test_euc_2_index_is_injective_over_euc_range():
    indices = {
        euc_2_to_utf8_index(high, low)
        for high in range(0x8E, 0xFF)
        for low in range(0xA1, 0xFF)
    }
    assert len(indices) == (0xFF - 0x8E) * (0xFF - 0xA1)


@given(st.integers(0, 255), st.integers(0, 255))
def test_euc_2_index_in_range(high, low):
    assert 0 <= euc_2_to_utf8_index(high, low) <= EUC_2_TO_UTF8_INDEX_MAXIMUM


def test_utf8_3_index_bounds():
    assert utf8_3_to_euc_index(b"\xe1\xb8\xbe") == 0
    assert utf8_3_to_euc_index(b"\xc3\xa0\x80") == 2
    assert utf8_3_to_euc_index(b"\xe0\x80\x80") == 2


@given(st.integers(0x800, 0xFFFF).filter(lambda c: not 0xD800 <= c <= 0xDFFF))
def test_utf8_3_index_in_range(code_point):
    index = utf8_3_to_euc_index(chr(code_point).encode("utf-8"))
    assert 0 <= index <= UTF8_3_TO_EUC_INDEX_MAXIMUM


@given(st.characters(blacklist_categories=("Cs",)))
def test_unicode_to_utf8_matches_codec(character):
    assert unicode_to_utf8(ord(character)) == character.encode("utf-8")


def test_unicode_to_utf8_out_of_range():
    assert unicode_to_utf8(0x200000) == b""


def test_unicode_code_single():
    utf8_8, is_combine = unicode_code_to_utf8_8_bytes("U+3042")
    assert utf8_8 == "\u3042".encode("utf-8").ljust(8, b"\x00")
    assert is_combine is False


def test_unicode_code_five_digits():
    utf8_8, is_combine = unicode_code_to_utf8_8_bytes("U+20089")
    assert utf8_8 == "\U00020089".encode("utf-8") + bytes(4)
    assert is_combine is False


def test_unicode_code_combining():
    utf8_8, is_combine = unicode_code_to_utf8_8_bytes("U+304B+309A")
    expected = "\u304b".encode("utf-8") + b"\x00" + "\u309a".encode("utf-8") + b"\x00"
    assert utf8_8 == expected
    assert is_combine is True


def test_unicode_code_bad_digits_leave_zero():
    assert unicode_code_to_utf8_8_bytes("U+ZZZZ") == (bytes(8), False)


def test_unicode_code_bad_length():
    with pytest.raises(EncodingError):
        unicode_code_to_utf8_8_bytes("U+30")


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("0x41", b"\x41\x00\x00"),
        ("0xA4A2", b"\xa4\xa2\x00"),
        ("0x8FA1A1", b"\x8f\xa1\xa1"),
    ],
)
def test_euc_code(code, expected):
    assert euc_code_to_euc_3_bytes(code) == expected


@pytest.mark.parametrize("code", ["0xA", "0xA4A2A", "0xGG", "0xA4ZZ"])
def test_euc_code_errors(code):
    with pytest.raises(EncodingError):
        euc_code_to_euc_3_bytes(code)


def test_create_table_layout(table_path):
    data = create_table(table_path)
    version, header_length, combine_length, plain_length = struct.unpack_from("=4I", data)
    assert (version, header_length) == (1, 32)
    assert (combine_length, plain_length) == (2, 5)
    assert data[16:32] == bytes(16)
    assert len(data) == 32 + combine_length * 11 + plain_length * 7


def test_create_src_table_matches_binary(table_path):
    text = create_src_table(table_path)
    assert text.startswith("// header\n")
    values = bytes(int(token, 16) for token in re.findall(r"0x([0-9a-f]{2}),", text))
    assert values == create_table(table_path)


def test_table_plain_lookups(table):
    hiragana_a = "\u3042".encode("utf-8")
    assert table.euc_2_to_utf8[euc_2_to_utf8_index(0xA4, 0xA2)] == hiragana_a
    assert table.utf8_3_to_euc[utf8_3_to_euc_index(hiragana_a)] == b"\xa4\xa2"
    assert table.euc_2_to_utf8[euc_2_to_utf8_index(0xA1, 0xF1)] == "\u00a2".encode("utf-8")
    assert table.utf8_2_4_to_euc["\u00a2".encode("utf-8")] == b"\xa1\xf1"
    assert table.utf8_2_4_to_euc["\U00020089".encode("utf-8")] == b"\xae\xa2"
    assert table.euc_3_to_utf8[b"\x8f\xa1\xa1"] == "\u4e02".encode("utf-8")


def test_table_unparsed_entry_stays_empty(table):
    assert table.euc_2_to_utf8[euc_2_to_utf8_index(0xA1, 0xA2)] is None


def test_table_combining_lookups(table):
    ka_maru = "\u304b\u309a".encode("utf-8")
    ae_grave = "\u00e6\u0300".encode("utf-8")
    assert table.combine_euc_to_utf8[b"\xa4\xf7"] == ka_maru
    assert table.combine_utf8_6_to_euc[ka_maru] == b"\xa4\xf7"
    assert table.combine_euc_to_utf8[b"\xab\xc4"] == ae_grave
    assert table.combine_utf8_4_to_euc[ae_grave] == b"\xab\xc4"


def test_table_ascii_is_not_mapped(table):
    assert b"A" not in table.utf8_2_4_to_euc
    assert all(value != b"A" for value in table.utf8_3_to_euc if value is not None)


def test_table_truncated(table_path):
    data = create_table(table_path)
    with pytest.raises(EncodingError):
        EncodingTable.from_bytes(data[:-1])
    with pytest.raises(EncodingError):
        EncodingTable.from_bytes(data[:10])


def test_table_bad_combining_lead(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("0xA4F7\tU+0041+0300\t# bad\n", encoding="utf-8")
    with pytest.raises(EncodingError):
        EncodingTable.from_bytes(create_table(path))