"""SKK dictionary building blocks: EUC-JIS-2004/UTF-8 conversion, candidate handling and dictionary index loading."""

__version__ = "0.1.0"