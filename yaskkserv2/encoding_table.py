"""EUC-JIS-2004 / UTF-8 conversion tables.

A table file is built from a text mapping such as ``euc-jis-2004-std.txt``
and has this layout (integers in native byte order):

- header of 32 bytes: version, header length, number of combining entries,
  number of plain entries and four reserved words;
- combining entries of 11 bytes each: euc (3 bytes) and two utf8 characters
  (4 bytes each);
- plain entries of 7 bytes each: euc (3 bytes) and utf8 (4 bytes).

:class:`EncodingTable` turns such a file into lookup structures. Every value
held in them is already cut to the length of the character it encodes.
"""

from __future__ import annotations

import re
import struct
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from yaskkserv2.errors import EncodingError

TABLE_VERSION = 1
TABLE_HEADER_LENGTH = 32
EUC_UTF8_COMBINE_UNIT_LENGTH = 3 + 8
EUC_UTF8_UNIT_LENGTH = 3 + 4

EUC_2_TO_UTF8_INDEX_MAXIMUM = 0x5D70
_EUC_2_TO_UTF8_INDEX_EMPTY = 1

UTF8_3_TO_EUC_INDEX_RAW_MINIMUM = 0x1E3E
_UTF8_3_GAP_START = 0x8165
_UTF8_3_GAP_END = 0xDADE
UTF8_3_TO_EUC_INDEX_MAXIMUM = (
    0xFF9F - UTF8_3_TO_EUC_INDEX_RAW_MINIMUM - (_UTF8_3_GAP_END - _UTF8_3_GAP_START)
)
_UTF8_3_TO_EUC_INDEX_EMPTY = 2

_HEADER = struct.Struct("=4I")
_RESERVED = bytes(4 * 4)
_RE_COMMENT = re.compile(r"^\s*#")
_RE_LINE = re.compile(r"^(\S+)\s+(\S+)\s+#")
_RE_HEX = re.compile(r"\+?[0-9A-Fa-f]+")


def euc_2_to_utf8_index(high: int, low: int) -> int:
    """Return the slot of a two-byte EUC character in the decode table.

    Pairs outside the EUC range share slot 1, which is otherwise unused.
    """
    if low < 0xA1 or high < 0x8E:
        return _EUC_2_TO_UTF8_INDEX_EMPTY
    result = ((low - 0xA1) << 8) | (high - 0x8E)
    if result > EUC_2_TO_UTF8_INDEX_MAXIMUM:
        return _EUC_2_TO_UTF8_INDEX_EMPTY
    return result


def utf8_3_to_euc_index(utf8: bytes) -> int:
    """Return the slot of a three-byte UTF-8 character in the encode table.

    Sequences outside the mapped range share slot 2, which is otherwise unused.
    """
    if utf8[0] < 0xE0 or utf8[1] < 0x80 or utf8[2] < 0x80:
        return _UTF8_3_TO_EUC_INDEX_EMPTY
    raw_index = ((utf8[0] - 0xE0) << 12) | ((utf8[1] - 0x80) << 6) | (utf8[2] - 0x80)
    if raw_index > _UTF8_3_GAP_END:
        raw_index -= _UTF8_3_GAP_END - _UTF8_3_GAP_START
    if raw_index < UTF8_3_TO_EUC_INDEX_RAW_MINIMUM:
        return _UTF8_3_TO_EUC_INDEX_EMPTY
    result = raw_index - UTF8_3_TO_EUC_INDEX_RAW_MINIMUM
    if result > UTF8_3_TO_EUC_INDEX_MAXIMUM:
        return _UTF8_3_TO_EUC_INDEX_EMPTY
    return result


def unicode_to_utf8(unicode: int) -> bytes:
    """Encode a code point as UTF-8; values above 0x1fffff give ``b""``."""
    if 0 <= unicode <= 0x7F:
        return bytes((unicode,))
    if unicode <= 0x7FF:
        return bytes((((unicode >> 6) & 0x1F) + 0xC0, (unicode & 0x3F) + 0x80))
    if unicode <= 0xFFFF:
        return bytes(
            (
                ((unicode >> 12) & 0x0F) + 0xE0,
                ((unicode >> 6) & 0x3F) + 0x80,
                (unicode & 0x3F) + 0x80,
            )
        )
    if unicode <= 0x1FFFFF:
        return bytes(
            (
                ((unicode >> 18) & 0x07) + 0xF0,
                ((unicode >> 12) & 0x3F) + 0x80,
                ((unicode >> 6) & 0x3F) + 0x80,
                (unicode & 0x3F) + 0x80,
            )
        )
    return b""


def _parse_hex(text: str) -> int | None:
    if _RE_HEX.fullmatch(text) is None:
        return None
    return int(text, 16)


def _pad4(utf8: bytes) -> bytes:
    return utf8.ljust(4, b"\x00")


def unicode_code_to_utf8_8_bytes(unicode_code: str) -> tuple[bytes, bool]:
    """Convert ``U+XXXX``, ``U+XXXXX`` or ``U+XXXX+XXXX`` to 8 bytes of UTF-8.

    The first character fills the first four bytes and a combining second
    character the last four. Returns the bytes and whether the code was a
    combining pair. Unparsable digits leave the bytes zero.
    """
    first = bytes(4)
    second = bytes(4)
    is_combine = False
    length = len(unicode_code)
    if length == 2 + 4:
        value = _parse_hex(unicode_code[2:6])
        if value is not None:
            first = _pad4(unicode_to_utf8(value))
    elif length == 2 + 5:
        value = _parse_hex(unicode_code[2:7])
        if value is not None:
            first = _pad4(unicode_to_utf8(value))
    elif length == 2 + 4 + 1 + 4:
        value = _parse_hex(unicode_code[2:6])
        if value is not None:
            first = _pad4(unicode_to_utf8(value))
            combining = _parse_hex(unicode_code[7:11])
            if combining is not None:
                second = _pad4(unicode_to_utf8(combining))
                is_combine = True
    else:
        raise EncodingError(f"unsupported unicode code {unicode_code!r}")
    return first + second, is_combine


def euc_code_to_euc_3_bytes(euc_code: str) -> bytes:
    """Convert ``0xXX``, ``0xXXXX`` or ``0xXXXXXX`` to 3 bytes of EUC, zero padded."""
    digits = len(euc_code) - 2
    if digits not in (2, 4, 6):
        raise EncodingError(f"unsupported euc code {euc_code!r}")
    result = bytearray(3)
    for position in range(digits // 2):
        start = 2 + 2 * position
        value = _parse_hex(euc_code[start : start + 2])
        if value is None:
            raise EncodingError(f"invalid digit in euc code {euc_code!r}")
        result[position] = value
    return bytes(result)


def _read_entries(table_path: str | Path) -> Iterator[tuple[bytes, bytes, bool]]:
    with open(table_path, encoding="utf-8") as reader:
        for line in reader:
            if _RE_COMMENT.match(line):
                continue
            match = _RE_LINE.match(line)
            if match is None:
                continue
            euc_3 = euc_code_to_euc_3_bytes(match[1])
            utf8_8, is_combine = unicode_code_to_utf8_8_bytes(match[2])
            yield euc_3, utf8_8, is_combine


def create_table(table_path: str | Path) -> bytes:
    """Build the binary conversion table from a text mapping file."""
    combine_table = bytearray()
    plain_table = bytearray()
    combine_length = 0
    plain_length = 0
    for euc_3, utf8_8, is_combine in _read_entries(table_path):
        if is_combine:
            combine_length += 1
            combine_table += euc_3 + utf8_8
        else:
            plain_length += 1
            plain_table += euc_3 + utf8_8[:4]
    header = _HEADER.pack(TABLE_VERSION, TABLE_HEADER_LENGTH, combine_length, plain_length)
    return header + _RESERVED + bytes(combine_table) + bytes(plain_table)


def _hex_bytes(data: bytes) -> str:
    return "".join(f"0x{byte:02x}," for byte in data)


def _four_bytes_line(data: bytes, suffix: str = "") -> str:
    return f"{_hex_bytes(data[:4])}{suffix}\n"


def create_src_table(table_path: str | Path) -> str:
    """Build the conversion table as commented hex byte source text."""
    combine_lines = ["// euc_utf8_combine\n// euc 3 bytes, utf8 4 bytes, utf8 4 bytes\n"]
    plain_lines = ["// euc_utf8\n// euc 3 bytes, utf8 4 bytes\n"]
    combine_length = 0
    plain_length = 0
    for euc_3, utf8_8, is_combine in _read_entries(table_path):
        if is_combine:
            combine_length += 1
            combine_lines.append(f"{_hex_bytes(euc_3)}{_hex_bytes(utf8_8)}\n")
        else:
            plain_length += 1
            plain_lines.append(_hex_bytes(euc_3) + _four_bytes_line(utf8_8))
    word = struct.Struct("=I")
    header_lines = [
        "// header\n",
        _four_bytes_line(word.pack(TABLE_VERSION), "    // version"),
        _four_bytes_line(word.pack(TABLE_HEADER_LENGTH), "    // header_length"),
        _four_bytes_line(word.pack(combine_length), "    // euc_utf8_combine_length"),
        _four_bytes_line(word.pack(plain_length), "    // euc_utf8_length"),
    ]
    header_lines.extend(
        _four_bytes_line(_RESERVED[i : i + 4], "    // reserved")
        for i in range(0, len(_RESERVED), 4)
    )
    return "".join(header_lines + combine_lines + plain_lines)


def _utf8_prefix(utf8: bytes) -> bytes:
    lead = utf8[0]
    if lead >= 0xF0:
        return utf8[:4]
    if lead >= 0xE0:
        return utf8[:3]
    if lead >= 0xC2:
        return utf8[:2]
    return utf8[:1]


def _euc_prefix(euc: bytes) -> bytes:
    lead = euc[0]
    if lead == 0x8F:
        return euc[:3]
    if lead >= 0x80:
        return euc[:2]
    return euc[:1]


@dataclass
class EncodingTable:
    """Lookup structures for converting between EUC-JIS-2004 and UTF-8.

    ``euc_2_to_utf8`` is indexed by :func:`euc_2_to_utf8_index` and
    ``utf8_3_to_euc`` by :func:`utf8_3_to_euc_index`; empty slots hold
    ``None``. The dictionaries are keyed by the exact character bytes.
    """

    euc_2_to_utf8: list[bytes | None] = field(
        default_factory=lambda: [None] * (EUC_2_TO_UTF8_INDEX_MAXIMUM + 1), repr=False
    )
    utf8_3_to_euc: list[bytes | None] = field(
        default_factory=lambda: [None] * (UTF8_3_TO_EUC_INDEX_MAXIMUM + 1), repr=False
    )
    euc_3_to_utf8: dict[bytes, bytes] = field(default_factory=dict, repr=False)
    utf8_2_4_to_euc: dict[bytes, bytes] = field(default_factory=dict, repr=False)
    combine_euc_to_utf8: dict[bytes, bytes] = field(default_factory=dict, repr=False)
    combine_utf8_4_to_euc: dict[bytes, bytes] = field(default_factory=dict, repr=False)
    combine_utf8_6_to_euc: dict[bytes, bytes] = field(default_factory=dict, repr=False)

    @classmethod
    def from_bytes(cls, data: bytes) -> EncodingTable:
        """Build the lookup structures from a binary table made by :func:`create_table`."""
        if len(data) < _HEADER.size:
            raise EncodingError("encoding table is shorter than its header")
        _version, header_length, combine_length, plain_length = _HEADER.unpack_from(data)
        combine_end = header_length + combine_length * EUC_UTF8_COMBINE_UNIT_LENGTH
        plain_end = combine_end + plain_length * EUC_UTF8_UNIT_LENGTH
        if plain_end > len(data):
            raise EncodingError("encoding table is truncated")
        table = cls()
        table._load_combining(data[header_length:combine_end])
        table._load_plain(data[combine_end:plain_end])
        return table

    def _load_combining(self, area: bytes) -> None:
        for offset in range(0, len(area), EUC_UTF8_COMBINE_UNIT_LENGTH):
            euc_3 = area[offset : offset + 3]
            first = area[offset + 3 : offset + 7]
            second = area[offset + 7 : offset + 11]
            self.combine_euc_to_utf8[_euc_prefix(euc_3)] = (
                _utf8_prefix(first) + _utf8_prefix(second)
            )
            lead = first[0]
            if 0xC2 <= lead <= 0xDF:
                self.combine_utf8_4_to_euc[first[:2] + second[:2]] = _euc_prefix(euc_3)
            elif 0xE0 <= lead <= 0xEF:
                self.combine_utf8_6_to_euc[first[:3] + second[:3]] = _euc_prefix(euc_3)
            else:
                raise EncodingError(f"combine encoding_table error {lead}")

    def _load_plain(self, area: bytes) -> None:
        for offset in range(0, len(area), EUC_UTF8_UNIT_LENGTH):
            euc_3 = area[offset : offset + 3]
            utf8 = area[offset + 3 : offset + 7]
            euc_lead = euc_3[0]
            if euc_lead == 0x8F:
                self.euc_3_to_utf8[euc_3] = _utf8_prefix(utf8)
            elif euc_lead == 0x8E or euc_lead >= 0xA0:
                index = euc_2_to_utf8_index(euc_3[0], euc_3[1])
                self.euc_2_to_utf8[index] = _utf8_prefix(utf8) if any(utf8) else None
            utf8_lead = utf8[0]
            if utf8_lead <= 0x7F:
                continue
            if 0xE0 <= utf8_lead <= 0xEF:
                index = utf8_3_to_euc_index(utf8)
                self.utf8_3_to_euc[index] = _euc_prefix(euc_3) if any(euc_3) else None
            else:
                self.utf8_2_4_to_euc[_utf8_prefix(utf8)] = _euc_prefix(euc_3)