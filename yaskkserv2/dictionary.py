"""Loading of a binary dictionary: checksum validation and the in-memory index."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field, replace
from typing import BinaryIO

from yaskkserv2.encoding_table import EncodingTable
from yaskkserv2.errors import BrokenDictionaryError, EncodingError, JisyoReadError
from yaskkserv2.structures import (
    DICTIONARY_FIXED_HEADER_AREA_LENGTH,
    INDEX_ASCII_HIRAGANA_VEC_LENGTH,
    SHA1SUM_ZERO,
    BlockInformationOffsetLength,
    DictionaryBlockHeads,
    DictionaryBlockInformation,
    DictionaryFixedHeader,
    IndexDataHeader,
    IndexDataHeaderBlockHeader,
)

DEFAULT_SHA1_READ_BUFFER_LENGTH = 64 * 1024
BLOCK_BUFFER_LENGTH_LIMIT = 2 * 1024 * 1024

_HIRAGANA_LEAD = 0xA4


def _empty_ascii_hiragana_vec() -> list[list[DictionaryBlockInformation]]:
    return [[] for _ in range(INDEX_ASCII_HIRAGANA_VEC_LENGTH)]


@dataclass
class OnMemory:
    """Index of a dictionary file held in memory.

    Block lists whose key starts with an ASCII byte or with the hiragana lead
    byte 0xa4 live in ``index_ascii_hiragana_vec`` (slots 0x00-0x7f for ASCII,
    the second EUC byte for 0xa4); all other keys live in ``index_map``.
    """

    dictionary_fixed_header: DictionaryFixedHeader = field(
        default_factory=DictionaryFixedHeader
    )
    index_map: dict[bytes, list[DictionaryBlockInformation]] = field(default_factory=dict)
    index_ascii_hiragana_vec: list[list[DictionaryBlockInformation]] = field(
        default_factory=_empty_ascii_hiragana_vec
    )
    encoding_table: EncodingTable | None = field(default=None, repr=False)

    @staticmethod
    def ascii_hiragana_index(dictionary_midashi_key: bytes) -> int | None:
        """Return the slot of ``dictionary_midashi_key`` in the ASCII/hiragana list."""
        lead = dictionary_midashi_key[0]
        if lead <= 0x7F:
            return lead
        if lead == _HIRAGANA_LEAD:
            return dictionary_midashi_key[1]
        return None

    def block_informations(
        self, dictionary_midashi_key: bytes
    ) -> list[DictionaryBlockInformation]:
        """Return the block informations stored under ``dictionary_midashi_key``."""
        index = self.ascii_hiragana_index(dictionary_midashi_key)
        if index is not None:
            return self.index_ascii_hiragana_vec[index]
        return self.index_map.get(bytes(dictionary_midashi_key), [])


def get_dictionary_midashi_key(euc_buffer: bytes) -> bytes:
    """Return the four-byte index key of the first EUC character in ``euc_buffer``."""
    if not euc_buffer:
        raise EncodingError("empty midashi")
    lead = euc_buffer[0]
    if lead == 0x8E or 0xA1 <= lead <= 0xFE:
        width = 2
    elif lead <= 0x7F:
        width = 1
    elif lead == 0x8F:
        width = 3
    else:
        raise EncodingError(f"invalid euc lead byte 0x{lead:02x}")
    if len(euc_buffer) < width:
        raise EncodingError("truncated euc character")
    return bytes(euc_buffer[:width]).ljust(4, b"\x00")


def get_midashi_candidates(buffer: bytes) -> tuple[bytes, bytes]:
    """Split a jisyo line into its midashi and its ``/.../`` candidates."""
    space = buffer.find(b" ")
    last_slash = buffer.rfind(b"/")
    if space < 0 or last_slash < 0:
        raise JisyoReadError()
    return bytes(buffer[:space]), bytes(buffer[space + 1 : last_slash + 1])


def _read_exact(reader: BinaryIO, length: int) -> bytes:
    data = reader.read(length)
    if len(data) != length:
        raise BrokenDictionaryError("unexpected end of dictionary file")
    return data


def _validate_except_fixed_header(
    reader: BinaryIO,
    hasher: "hashlib._Hash",
    dictionary_length: int,
    sha1sum: bytes,
    sha1_read_buffer_length: int,
) -> None:
    if dictionary_length < DICTIONARY_FIXED_HEADER_AREA_LENGTH:
        raise BrokenDictionaryError()
    reader.seek(DICTIONARY_FIXED_HEADER_AREA_LENGTH)
    total_scan_length = DICTIONARY_FIXED_HEADER_AREA_LENGTH
    while total_scan_length < dictionary_length:
        chunk = reader.read(min(sha1_read_buffer_length, dictionary_length - total_scan_length))
        if not chunk:
            break
        hasher.update(chunk)
        total_scan_length += len(chunk)
    if total_scan_length != dictionary_length:
        raise BrokenDictionaryError()
    if hasher.digest() != sha1sum:
        raise BrokenDictionaryError()


def _block_informations(buffer: bytes, offset: int) -> tuple[DictionaryBlockHeads, list[DictionaryBlockInformation], int]:
    heads = DictionaryBlockHeads.from_bytes(buffer, offset)
    informations_offset = offset + DictionaryBlockHeads.SIZE
    midashi_offset = (
        informations_offset + heads.information_length * BlockInformationOffsetLength.SIZE
    )
    midashi_end = midashi_offset + heads.information_midashi_length
    if midashi_end > len(buffer):
        raise BrokenDictionaryError("index unit exceeds its block")
    joined_midashi = buffer[midashi_offset:midashi_end].split(b" ")
    if len(joined_midashi) != heads.information_length:
        raise BrokenDictionaryError("midashi count does not match the index unit")
    informations = []
    for i, midashi in enumerate(joined_midashi):
        location = BlockInformationOffsetLength.from_bytes(
            buffer, informations_offset + i * BlockInformationOffsetLength.SIZE
        )
        informations.append(
            DictionaryBlockInformation(midashi=midashi, offset=location.offset, length=location.length)
        )
    return heads, informations, midashi_end


def _load_index(
    on_memory: OnMemory,
    reader: BinaryIO,
    index_data_offset: int,
    header_buffer: bytes,
) -> None:
    index_data_header = IndexDataHeader.from_bytes(header_buffer)
    if index_data_header.block_buffer_length >= BLOCK_BUFFER_LENGTH_LIMIT:
        raise BrokenDictionaryError("index block buffer too large")
    for i in range(index_data_header.block_header_length):
        block_header = IndexDataHeaderBlockHeader.from_bytes(
            header_buffer, IndexDataHeader.SIZE + i * IndexDataHeaderBlockHeader.SIZE
        )
        if block_header.length > index_data_header.block_buffer_length:
            raise BrokenDictionaryError("index block longer than the block buffer")
        reader.seek(index_data_offset + block_header.offset)
        buffer = _read_exact(reader, block_header.length)
        offset = 0
        for _ in range(block_header.unit_length):
            heads, informations, offset = _block_informations(buffer, offset)
            key = heads.dictionary_midashi_key
            index = OnMemory.ascii_hiragana_index(key)
            if index is None:
                on_memory.index_map[key] = informations
            else:
                on_memory.index_ascii_hiragana_vec[index] = informations


def setup_dictionary(
    dictionary_path, sha1_read_buffer_length: int = DEFAULT_SHA1_READ_BUFFER_LENGTH
) -> OnMemory:
    """Validate the dictionary at ``dictionary_path`` and load its index.

    The checksum in the fixed header covers the whole file with that checksum
    zeroed. The returned header keeps the checksum zeroed.
    """
    if sha1_read_buffer_length <= 0:
        raise ValueError("sha1_read_buffer_length must be positive")
    with open(dictionary_path, "rb") as reader:
        area = _read_exact(reader, DICTIONARY_FIXED_HEADER_AREA_LENGTH)
        stored = DictionaryFixedHeader.from_bytes(area)
        header = replace(stored, sha1sum=SHA1SUM_ZERO)
        hasher = hashlib.sha1(header.to_bytes() + area[DictionaryFixedHeader.SIZE :])
        _validate_except_fixed_header(
            reader, hasher, header.dictionary_length, stored.sha1sum, sha1_read_buffer_length
        )
        reader.seek(header.encoding_table_offset)
        encoding_table = EncodingTable.from_bytes(
            _read_exact(reader, header.encoding_table_length)
        )
        reader.seek(header.index_data_header_offset)
        index_header_buffer = _read_exact(reader, header.index_data_header_length)
        on_memory = OnMemory(dictionary_fixed_header=header, encoding_table=encoding_table)
        _load_index(on_memory, reader, header.index_data_offset, index_header_buffer)
    return on_memory