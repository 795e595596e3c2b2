"""Shared settings, enumerations and the fixed binary records of a dictionary file."""

from __future__ import annotations

import enum
import struct
from dataclasses import astuple, dataclass, field
from typing import ClassVar

DICTIONARY_FIXED_HEADER_AREA_LENGTH = 256
DICTIONARY_VERSION = 1
DEFAULT_PORT = 1178
DEFAULT_MAX_CONNECTIONS = 16
DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_CONFIG_FULL_PATH = "/etc/yaskkserv2.conf"
DEFAULT_HOSTNAME_AND_IP_ADDRESS_FOR_PROTOCOL_3 = "localhost:127.0.0.1"
DEFAULT_GOOGLE_TIMEOUT_MILLISECONDS = 1000
DEFAULT_GOOGLE_CACHE_FULL_PATH = "/tmp/yaskkserv2.google_cache"
DEFAULT_GOOGLE_CACHE_ENTRIES = 1024
DEFAULT_GOOGLE_CACHE_EXPIRE_SECONDS = 30 * 24 * 60 * 60
DEFAULT_GOOGLE_MAX_CANDIDATES_LENGTH = 5 * 5
DEFAULT_MAX_SERVER_COMPLETIONS = 64
GOOGLE_JAPANESE_INPUT_URL = "://www.google.com/transliterate?langpair=ja-Hira|ja&text="
GOOGLE_SUGGEST_URL = "://www.google.com/complete/search?hl=ja&output=toolbar&q="
JISYO_MAXIMUM_LINE_LENGTH = 128 * 1024
JISYO_MINIMUM_LINE_LENGTH = 5
JISYO_MINIMUM_CANDIDATES_LENGTH = 3
PROTOCOL_RESULT_ERROR = b"0\n"
SHA1SUM_LENGTH = 20
SHA1SUM_ZERO = bytes(SHA1SUM_LENGTH)
INDEX_ASCII_HIRAGANA_VEC_LENGTH = 256
DICTIONARY_MIDASHI_KEY_LENGTH = 4


class Encoding(enum.Enum):
    """Character encoding of a dictionary or of the protocol."""

    EUC = 0
    UTF8 = 1

    @classmethod
    def from_u32(cls, value: int) -> Encoding:
        """Return the encoding stored as ``value`` in a dictionary header."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown value={value}") from None

    def __str__(self) -> str:
        return "Euc" if self is Encoding.EUC else "Utf8"


class EncodingOptions(enum.Enum):
    """Extra facts found while detecting an encoding."""

    NONE = enum.auto()
    BOM = enum.auto()


class GoogleTiming(enum.Enum):
    """When the remote conversion service is consulted."""

    NOT_FOUND = enum.auto()
    DISABLE = enum.auto()
    LAST = enum.auto()
    FIRST = enum.auto()


@dataclass
class Config:
    """Server and tool settings with their defaults."""

    port: str = str(DEFAULT_PORT)
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    hostname_and_ip_address_for_protocol_3: str = (
        DEFAULT_HOSTNAME_AND_IP_ADDRESS_FOR_PROTOCOL_3
    )
    dictionary_full_path: str = ""
    full_path: str = DEFAULT_CONFIG_FULL_PATH
    google_timeout_milliseconds: int = DEFAULT_GOOGLE_TIMEOUT_MILLISECONDS
    google_timing: GoogleTiming = GoogleTiming.NOT_FOUND
    google_cache_full_path: str = DEFAULT_GOOGLE_CACHE_FULL_PATH
    google_cache_entries: int = DEFAULT_GOOGLE_CACHE_ENTRIES
    google_cache_expire_seconds: int = DEFAULT_GOOGLE_CACHE_EXPIRE_SECONDS
    google_max_candidates_length: int = DEFAULT_GOOGLE_MAX_CANDIDATES_LENGTH
    max_server_completions: int = DEFAULT_MAX_SERVER_COMPLETIONS
    google_insert_hiragana_only_candidate: bool = False
    google_insert_katakana_only_candidate: bool = False
    google_insert_hankaku_katakana_only_candidate: bool = False
    is_http_enabled: bool = False
    is_google_cache_enabled: bool = False
    is_google_suggest_enabled: bool = False
    is_midashi_utf8: bool = False
    encoding: Encoding = Encoding.EUC
    is_no_daemonize: bool = False
    is_verbose: bool = False


def _pack(record, fmt: struct.Struct) -> bytes:
    try:
        return fmt.pack(*astuple(record))
    except struct.error as exc:
        raise ValueError(f"{type(record).__name__}: {exc}") from exc


def _unpack(cls, fmt: struct.Struct, data: bytes, offset: int):
    try:
        values = fmt.unpack_from(data, offset)
    except struct.error as exc:
        raise ValueError(f"{cls.__name__}: {exc}") from exc
    return cls(*values)


def _check_length(name: str, value: bytes, length: int) -> None:
    if len(value) != length:
        raise ValueError(f"{name} must be {length} bytes, got {len(value)}")


@dataclass
class DictionaryFixedHeader:
    """Header at the start of a dictionary file; the checksum comes last."""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"=11I{SHA1SUM_LENGTH}s")
    SIZE: ClassVar[int] = _FORMAT.size

    dictionary_version: int = DICTIONARY_VERSION
    encoding_table_offset: int = 0
    encoding_table_length: int = 0
    index_data_header_offset: int = 0
    index_data_header_length: int = 0
    index_data_offset: int = 0
    index_data_length: int = 0
    blocks_offset: int = 0
    blocks_length: int = 0
    dictionary_length: int = 0
    encoding: int = 0
    sha1sum: bytes = field(default=SHA1SUM_ZERO)

    def __post_init__(self) -> None:
        _check_length("sha1sum", self.sha1sum, SHA1SUM_LENGTH)

    def to_bytes(self) -> bytes:
        """Return the header as it is laid out in a dictionary file."""
        return _pack(self, self._FORMAT)

    @classmethod
    def from_bytes(cls, data: bytes) -> DictionaryFixedHeader:
        """Read the header from the start of ``data``."""
        return _unpack(cls, cls._FORMAT, data, 0)


@dataclass
class DictionaryBlockHeads:
    """Head of one index unit: counts and the shared midashi key."""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(
        f"=II{DICTIONARY_MIDASHI_KEY_LENGTH}s"
    )
    SIZE: ClassVar[int] = _FORMAT.size

    information_length: int
    information_midashi_length: int
    dictionary_midashi_key: bytes

    def __post_init__(self) -> None:
        _check_length(
            "dictionary_midashi_key",
            self.dictionary_midashi_key,
            DICTIONARY_MIDASHI_KEY_LENGTH,
        )

    def to_bytes(self) -> bytes:
        """Return the record as it is laid out in a dictionary file."""
        return _pack(self, self._FORMAT)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> DictionaryBlockHeads:
        """Read a record from ``data`` starting at ``offset``."""
        return _unpack(cls, cls._FORMAT, data, offset)


@dataclass
class BlockInformationOffsetLength:
    """Location of one block inside the blocks area."""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("=II")
    SIZE: ClassVar[int] = _FORMAT.size

    offset: int
    length: int

    def to_bytes(self) -> bytes:
        """Return the record as it is laid out in a dictionary file."""
        return _pack(self, self._FORMAT)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> BlockInformationOffsetLength:
        """Read a record from ``data`` starting at ``offset``."""
        return _unpack(cls, cls._FORMAT, data, offset)


@dataclass
class IndexDataHeader:
    """Header of the index data area."""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("=II")
    SIZE: ClassVar[int] = _FORMAT.size

    block_buffer_length: int = 0
    block_header_length: int = 0

    def to_bytes(self) -> bytes:
        """Return the record as it is laid out in a dictionary file."""
        return _pack(self, self._FORMAT)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> IndexDataHeader:
        """Read a record from ``data`` starting at ``offset``."""
        return _unpack(cls, cls._FORMAT, data, offset)


@dataclass
class IndexDataHeaderBlockHeader:
    """Location and unit count of one index block."""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("=III")
    SIZE: ClassVar[int] = _FORMAT.size

    offset: int
    length: int
    unit_length: int

    def to_bytes(self) -> bytes:
        """Return the record as it is laid out in a dictionary file."""
        return _pack(self, self._FORMAT)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> IndexDataHeaderBlockHeader:
        """Read a record from ``data`` starting at ``offset``."""
        return _unpack(cls, cls._FORMAT, data, offset)


@dataclass
class DictionaryBlockInformation:
    """Last midashi of a block together with the block's location."""

    midashi: bytes
    offset: int
    length: int