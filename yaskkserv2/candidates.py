"""Quoting, trimming, merging and de-duplicating of slash-separated candidates."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import TypeVar

T = TypeVar("T", bound=Hashable)

_SLASH = b"/"
_ANNOTATION = b";"
_NEEDS_QUOTE = frozenset(b'\r\n\\";/')
_QUOTED = {
    ord("\\"): b"\\\\",
    ord('"'): b'\\"',
    ord(";"): b'(concat "\\073")',
    ord("/"): b'(concat "\\057")',
}


def need_quote(source: bytes) -> bool:
    """Tell whether ``source`` holds a byte that must be quoted."""
    return any(byte in _NEEDS_QUOTE for byte in source)


def quote_and_add_prefix(source: bytes, prefix: int | None = None) -> bytes:
    """Quote ``source`` for use as a candidate, dropping CR and LF.

    ``prefix`` is a single byte value put in front of the result.
    """
    result = bytearray()
    if prefix is not None:
        result.append(prefix)
    for byte in source:
        if byte in (0x0D, 0x0A):
            continue
        quoted = _QUOTED.get(byte)
        if quoted is None:
            result.append(byte)
        else:
            result += quoted
    return bytes(result)


def trim_one_slash(source: bytes) -> bytes:
    """Remove at most one leading and one trailing slash."""
    if not source:
        return source
    end = len(source)
    if end > 1 and source[-1:] == _SLASH:
        end -= 1
    start = 1 if source[:1] == _SLASH else 0
    return source[start:end]


def _strip_annotation(unit: bytes) -> bytes:
    return unit.partition(_ANNOTATION)[0]


def merge_trimmed_slash_candidates(base: bytes, new: bytes) -> bytes:
    """Merge two candidate lists whose outer slashes have been trimmed.

    Candidates of ``base`` keep their order; those of ``new`` not already in
    ``base`` follow. The result has a slash at both ends.
    """
    if _ANNOTATION in base or _ANNOTATION in new:
        return _merge_annotated(base, new)
    new_units = [[unit, True] for unit in new.split(_SLASH)]
    parts: list[bytes] = []
    if base:
        for base_unit in base.split(_SLASH):
            parts.append(base_unit)
            match = next((entry for entry in new_units if entry[0] == base_unit), None)
            if match is not None:
                match[1] = False
    parts.extend(unit for unit, add in new_units if add)
    return _SLASH + b"".join(part + _SLASH for part in parts)


def _merge_annotated(base: bytes, new: bytes) -> bytes:
    # Matching ignores annotations; base annotations win unless base has none.
    new_units = [[unit, _strip_annotation(unit), True] for unit in new.split(_SLASH)]
    parts: list[bytes] = []
    if base:
        for base_unit in base.split(_SLASH):
            base_key = _strip_annotation(base_unit)
            match = next((entry for entry in new_units if entry[1] == base_key), None)
            if match is None:
                parts.append(base_unit)
                continue
            match[2] = False
            if _ANNOTATION not in base_unit and _ANNOTATION in match[0]:
                parts.append(match[0])
            else:
                parts.append(base_unit)
    parts.extend(unit for unit, _key, add in new_units if add)
    return _SLASH + b"".join(part + _SLASH for part in parts)


def remove_duplicates(candidates: Iterable[T]) -> list[T]:
    """Return the candidates without repeats, keeping first occurrences."""
    return list(dict.fromkeys(candidates))


def remove_duplicates_bytes(candidates_bytes: bytes) -> bytes:
    """Remove repeated candidates from ``b"/a/b/"``-style bytes.

    The input must start and end with a slash; so does the result.
    """
    return _SLASH.join(remove_duplicates(candidates_bytes.split(_SLASH))) + _SLASH


def remove_duplicates_str(candidates_str: str) -> str:
    """Remove repeated candidates from ``"/a/b/"``-style text."""
    return "/".join(remove_duplicates(candidates_str.split("/"))) + "/"