"""A bitmap that can be stored in and fetched from a file on the disk."""

from __future__ import annotations

from typing import Protocol

from sectorfs.bitmap import BITS_IN_BYTE, BITS_IN_WORD, Bitmap

_WORD_BYTES = BITS_IN_WORD // BITS_IN_BYTE


class _RandomAccessFile(Protocol):
    def read_at(self, num_bytes: int, position: int) -> bytes: ...

    def write_at(self, data: bytes, position: int) -> int: ...


class PersistentBitmap(Bitmap):
    """A bitmap that can be read from and written to an open file."""

    def __init__(self, num_items: int, file: _RandomAccessFile | None = None) -> None:
        super().__init__(num_items)
        if file is not None:
            self.fetch_from(file)

    def fetch_from(self, file: _RandomAccessFile) -> None:
        """Load the bitmap's storage from the start of ``file``."""
        self.load_bytes(file.read_at(self.num_words * _WORD_BYTES, 0))

    def write_back(self, file: _RandomAccessFile) -> None:
        """Store the bitmap's storage at the start of ``file``."""
        file.write_at(self.to_bytes(), 0)