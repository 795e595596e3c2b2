"""Exceptions raised by the SKK server and the dictionary tools."""

from __future__ import annotations


class SkkError(Exception):
    """Base class of every error the package raises on purpose."""

    default_message = "Skk error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.default_message if message is None else message)


class JisyoReadError(SkkError):
    """A jisyo line could not be split into midashi and candidates."""

    default_message = "JisyoRead error"


class BrokenCacheError(SkkError):
    """A cache file has an unexpected layout."""

    default_message = "BrokenCache error"


class CacheOpenError(SkkError):
    """A cache file could not be opened."""

    default_message = "CacheOpen error"


class BrokenDictionaryError(SkkError):
    """A dictionary file failed its length or checksum validation."""

    default_message = "BrokenDictionary error"


class CommandLineError(SkkError):
    """The command line could not be understood."""

    default_message = "CommandLine error"


class EncodingError(SkkError):
    """Bytes could not be classified or converted between encodings."""

    default_message = "Encoding error"


class RequestError(SkkError):
    """A request to a remote conversion service failed."""

    default_message = "Request error"