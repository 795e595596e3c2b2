"""Conversion between EUC-JIS-2004 and UTF-8 bytes, and encoding detection.

Characters that the table cannot convert are written as ``&#x`` followed by
the hex digits of their bytes, so conversion itself never fails.
"""

from __future__ import annotations

from collections.abc import Iterator

from yaskkserv2.encoding_table import (
    EncodingTable,
    euc_2_to_utf8_index,
    utf8_3_to_euc_index,
)
from yaskkserv2.errors import EncodingError
from yaskkserv2.structures import Encoding, EncodingOptions

_UTF8_BOM = b"\xef\xbb\xbf"
_MINIMUM_DETECT_LENGTH = 3


def _hex_escape(data: bytes) -> bytes:
    return b"&#x" + data.hex().encode("ascii")


def _is_continuation(byte: int) -> bool:
    return 0x80 <= byte <= 0xBF


def _has_continuations(buffer: bytes, start: int, count: int) -> bool:
    end = start + count
    return end <= len(buffer) and all(_is_continuation(b) for b in buffer[start:end])


def decode(table: EncodingTable, euc_buffer: bytes) -> bytes:
    """Convert EUC-JIS-2004 bytes to UTF-8 bytes using ``table``."""
    return b"".join(_decode_pieces(table, bytes(euc_buffer)))


def _decode_pieces(table: EncodingTable, buffer: bytes) -> Iterator[bytes]:
    length = len(buffer)
    i = 0
    while i < length:
        lead = buffer[i]
        if lead <= 0x7F:
            yield buffer[i : i + 1]
            i += 1
        elif lead == 0x8E or 0xA1 <= lead <= 0xFE:
            if i + 2 > length:
                yield _hex_escape(buffer[i : i + 1])
                return
            pair = buffer[i : i + 2]
            utf8 = table.euc_2_to_utf8[euc_2_to_utf8_index(lead, buffer[i + 1])]
            if utf8 is None:
                utf8 = table.combine_euc_to_utf8.get(pair)
            yield utf8 if utf8 is not None else _hex_escape(pair)
            i += 2
        elif lead == 0x8F:
            if i + 3 > length:
                yield _hex_escape(buffer[i : i + 2])
                return
            key = buffer[i : i + 3]
            utf8 = table.euc_3_to_utf8.get(key)
            yield utf8 if utf8 is not None else _hex_escape(key)
            i += 3
        else:
            yield _hex_escape(buffer[i : i + 1])
            i += 1


def encode(table: EncodingTable, utf8_buffer: bytes) -> bytes:
    """Convert UTF-8 bytes to EUC-JIS-2004 bytes using ``table``."""
    return b"".join(_encode_pieces(table, bytes(utf8_buffer)))


def _encode_pieces(table: EncodingTable, buffer: bytes) -> Iterator[bytes]:
    length = len(buffer)
    i = 0
    while i < length:
        lead = buffer[i]
        if 0xE0 <= lead <= 0xEF and _has_continuations(buffer, i + 1, 2):
            piece, consumed = _encode_3_bytes(table, buffer, i)
        elif lead <= 0x7F:
            piece, consumed = buffer[i : i + 1], 1
        elif 0xC2 <= lead <= 0xDF and _has_continuations(buffer, i + 1, 1):
            piece, consumed = _encode_2_bytes(table, buffer, i)
        elif 0xF0 <= lead <= 0xF7 and _has_continuations(buffer, i + 1, 3):
            key = buffer[i : i + 4]
            euc = table.utf8_2_4_to_euc.get(key)
            piece, consumed = (euc if euc is not None else _hex_escape(key)), 4
        else:
            piece, consumed = _hex_escape(buffer[i : i + 1]), 1
        yield piece
        i += consumed


def _encode_3_bytes(table: EncodingTable, buffer: bytes, i: int) -> tuple[bytes, int]:
    if i + 6 <= len(buffer) and buffer[i + 4] == 0x82 and buffer[i + 5] == 0x9A:
        euc = table.combine_utf8_6_to_euc.get(buffer[i : i + 6])
        if euc is not None:
            return euc, 6
    key = buffer[i : i + 3]
    euc = table.utf8_3_to_euc[utf8_3_to_euc_index(key)]
    return (euc if euc is not None else _hex_escape(key)), 3


def _encode_2_bytes(table: EncodingTable, buffer: bytes, i: int) -> tuple[bytes, int]:
    if i + 4 <= len(buffer) and buffer[i + 2] in (0xCC, 0xCB):
        euc = table.combine_utf8_4_to_euc.get(buffer[i : i + 4])
        if euc is not None:
            return euc, 4
    key = buffer[i : i + 2]
    euc = table.utf8_2_4_to_euc.get(key)
    return (euc if euc is not None else _hex_escape(key)), 2


def _count_utf8_sequences(buffer: bytes) -> tuple[int, int]:
    valid = 0
    invalid = 0
    i = 0
    limit = len(buffer) - 3
    while i < limit:
        lead = buffer[i]
        if 0xC2 <= lead <= 0xDF and _is_continuation(buffer[i + 1]):
            i += 2
            valid += 1
        elif 0xE0 <= lead <= 0xEF and _has_continuations(buffer, i + 1, 2):
            i += 3
            valid += 1
        elif 0xF0 <= lead <= 0xF7 and _has_continuations(buffer, i + 1, 3):
            i += 4
            valid += 1
        elif 0x01 <= lead <= 0x7F:
            i += 1
        else:
            i += 1
            invalid += 1
    return valid, invalid


def detect_encoding(buffer: bytes) -> tuple[Encoding, EncodingOptions]:
    """Guess whether ``buffer`` holds UTF-8 or EUC text.

    Raises :class:`EncodingError` when the buffer is too short or the guess
    stays ambiguous.
    """
    buffer = bytes(buffer)
    if len(buffer) > 3 and buffer.startswith(_UTF8_BOM):
        return Encoding.UTF8, EncodingOptions.BOM
    if len(buffer) < _MINIMUM_DETECT_LENGTH:
        raise EncodingError("buffer too short to detect its encoding")
    valid, invalid = _count_utf8_sequences(buffer)
    ambiguous_threshold = len(buffer) // 100
    if abs(valid - invalid) < ambiguous_threshold:
        if b"coding: euc-" in buffer:
            return Encoding.EUC, EncodingOptions.NONE
        if b"coding: utf-8" in buffer:
            return Encoding.UTF8, EncodingOptions.NONE
        # Almost nothing but ASCII: treat as EUC.
        near_zero = min(1000, len(buffer) // 1000)
        if valid <= near_zero and invalid <= near_zero:
            return Encoding.EUC, EncodingOptions.NONE
        raise EncodingError("cannot tell UTF-8 from EUC")
    if valid > invalid:
        return Encoding.UTF8, EncodingOptions.NONE
    return Encoding.EUC, EncodingOptions.NONE