# yaskkserv2

Building blocks for working with SKK (Simple Kana to Kanji) dictionaries.
Everything works on raw bytes, because SKK jisyo files come in both
EUC-JIS-2004 and UTF-8. The package has no dependencies outside the
standard library.

## Modules

- `yaskkserv2.candidates`: handles the candidate lists of jisyo entries
  (`/cand1/cand2;annotation/`).
  - `need_quote` and `quote_and_add_prefix` quote backslash, double quote,
    `;` and `/`, and drop CR and LF.
  - `trim_one_slash` removes at most one slash from each end.
  - `merge_trimmed_slash_candidates` keeps the order of the base list and
    appends new candidates. Candidates are matched without their
    annotations. An annotation in the base list wins; a new annotation is
    used only where the base candidate has none.
  - `remove_duplicates`, `remove_duplicates_bytes` and
    `remove_duplicates_str` remove repeats and keep the first occurrence.
- `yaskkserv2.encoding_table`: conversion tables between EUC-JIS-2004 and
  UTF-8.
  - `create_table` builds a binary table from a mapping file in the
    `euc-jis-2004-std.txt` style, and `create_src_table` writes the same
    table as commented hex bytes.
  - `EncodingTable.from_bytes` loads a binary table into lookup structures.
  - `unicode_to_utf8`, `unicode_code_to_utf8_8_bytes`,
    `euc_code_to_euc_3_bytes`, `euc_2_to_utf8_index` and
    `utf8_3_to_euc_index` are the helpers the tables are built with.
- `yaskkserv2.euc`: conversion and detection.
  - `decode(table, euc_bytes)` converts EUC-JIS-2004 bytes to UTF-8.
  - `encode(table, utf8_bytes)` converts UTF-8 bytes to EUC-JIS-2004.
  - Neither function fails on unknown input. Bytes that cannot be
    converted come out as `&#x` followed by their hex digits.
  - `detect_encoding(buffer)` returns an `Encoding` together with an
    `EncodingOptions`, which is `BOM` when the buffer starts with a UTF-8
    byte order mark. It raises `EncodingError` when the buffer is too short
    or the guess stays ambiguous.
- `yaskkserv2.dictionary`: loads binary dictionary files.
  - `setup_dictionary(path)` checks the dictionary's length and SHA-1
    checksum and reads its embedded encoding table and midashi index. It
    returns an `OnMemory`.
  - `OnMemory.block_informations(key)` returns the block locations stored
    under a four-byte midashi key, and `get_dictionary_midashi_key` makes
    that key from EUC bytes.
  - `get_midashi_candidates` splits a jisyo line into its midashi and its
    candidates.
  - A damaged file raises `BrokenDictionaryError`.
- `yaskkserv2.structures`: the types shared by the modules above.
  - The `Config` dataclass holds settings with their defaults, for example
    port `"1178"` and 16 connections.
  - The enums `Encoding`, `EncodingOptions` and `GoogleTiming`.
  - The fixed binary records of a dictionary file, such as
    `DictionaryFixedHeader`, each with `to_bytes` and `from_bytes`.
- `yaskkserv2.errors`: `SkkError` and its subclasses `JisyoReadError`,
  `BrokenCacheError`, `CacheOpenError`, `BrokenDictionaryError`,
  `CommandLineError`, `EncodingError` and `RequestError`.

## Example

```python
from yaskkserv2 import euc
from yaskkserv2.candidates import merge_trimmed_slash_candidates, remove_duplicates_bytes
from yaskkserv2.encoding_table import EncodingTable, create_table

merge_trimmed_slash_candidates(b"a;x/b", b"b;y/c")   # b"/a;x/b;y/c/"
remove_duplicates_bytes(b"/abc/def/abc/")            # b"/abc/def/"

# The mapping file is supplied by you; it is not part of the package.
table = EncodingTable.from_bytes(create_table("euc-jis-2004-std.txt"))
euc_bytes = euc.encode(table, "かな".encode())
assert euc.decode(table, euc_bytes) == "かな".encode()
```

## What it does not do

This is a library only. It has:

- no SKK server: it does not listen on a port or answer protocol requests;
- no command-line programs;
- no way to write binary dictionary files: `setup_dictionary` only reads
  and validates them;
- no reading of whole jisyo files into entries, and no lookup of
  candidates inside dictionary blocks;
- no remote conversion service or its cache. `Config` only holds the
  related settings.

## Tests

The test suite uses pytest and hypothesis, which the `test` extra installs.