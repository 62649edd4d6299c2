"""An in-memory disk of fixed-size sectors with a synchronous interface."""

from __future__ import annotations

import threading

SECTOR_SIZE = 128


class SynchDisk:
    """A disk whose reads and writes return only once they are complete.

    The disk handles one request at a time; a lock keeps concurrent callers
    from interleaving their requests.
    """

    def __init__(self, num_sectors: int, sector_size: int = SECTOR_SIZE) -> None:
        if num_sectors <= 0:
            raise ValueError("a disk needs at least one sector")
        if sector_size <= 0:
            raise ValueError("sector size must be positive")
        self.num_sectors = num_sectors
        self.sector_size = sector_size
        self._storage = bytearray(num_sectors * sector_size)
        self._lock = threading.Lock()

    def _span(self, sector: int) -> slice:
        if not 0 <= sector < self.num_sectors:
            raise IndexError(
                f"sector {sector} out of range 0..{self.num_sectors - 1}"
            )
        start = sector * self.sector_size
        return slice(start, start + self.sector_size)

    def read_sector(self, sector: int) -> bytes:
        """Return the contents of ``sector``."""
        span = self._span(sector)
        with self._lock:
            return bytes(self._storage[span])

    def write_sector(self, sector: int, data: bytes) -> None:
        """Replace the contents of ``sector`` with ``data``, one whole sector."""
        span = self._span(sector)
        if len(data) != self.sector_size:
            raise ValueError(
                f"sector data must be {self.sector_size} bytes, got {len(data)}"
            )
        with self._lock:
            self._storage[span] = data