"""Byte buffers and endianness, C-style time helpers, and child process running."""

__version__ = "0.1.0"
__all__ = ["bytes", "ctime", "choices", "runner"]