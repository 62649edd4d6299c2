"""Open files: byte-level reads and writes on top of whole-sector disk access."""

from __future__ import annotations

from sectorfs.disk import SynchDisk
from sectorfs.filehdr import FileHeader


class OpenFile:
    """A file opened for reading and writing, with its header kept in memory.

    Reads and writes never go past the file's length, which is fixed when
    the file is created.
    """

    def __init__(self, disk: SynchDisk, sector: int) -> None:
        self._disk = disk
        self.header = FileHeader(disk)
        self.header.fetch_from(sector)
        self.position = 0

    def seek(self, position: int) -> None:
        """Set where the next ``read`` or ``write`` starts."""
        self.position = position

    def read(self, num_bytes: int) -> bytes:
        """Read up to ``num_bytes`` from the current position and advance it."""
        data = self.read_at(num_bytes, self.position)
        self.position += len(data)
        return data

    def write(self, data: bytes) -> int:
        """Write ``data`` at the current position, advance it, return bytes written."""
        written = self.write_at(data, self.position)
        self.position += written
        return written

    def _clip(self, num_bytes: int, position: int) -> int:
        """Return how many bytes a request may touch; zero if none."""
        if position < 0:
            raise ValueError(f"position {position} is negative")
        length = self.length()
        if num_bytes <= 0 or position >= length:
            return 0
        return min(num_bytes, length - position)

    def _sector_range(self, num_bytes: int, position: int) -> range:
        size = self._disk.sector_size
        return range(position // size, (position + num_bytes - 1) // size + 1)

    def read_at(self, num_bytes: int, position: int) -> bytes:
        """Read up to ``num_bytes`` starting at ``position``; the position is unchanged."""
        num_bytes = self._clip(num_bytes, position)
        if num_bytes == 0:
            return b""
        size = self._disk.sector_size
        sectors = self._sector_range(num_bytes, position)
        buf = b"".join(
            self._disk.read_sector(self.header.byte_to_sector(i * size))
            for i in sectors
        )
        start = position - sectors.start * size
        return buf[start:start + num_bytes]

    def write_at(self, data: bytes, position: int) -> int:
        """Write ``data`` starting at ``position``; return the number of bytes written."""
        data = bytes(data)
        num_bytes = self._clip(len(data), position)
        if num_bytes == 0:
            return 0
        size = self._disk.sector_size
        sectors = self._sector_range(num_bytes, position)
        first, last = sectors.start, sectors.stop - 1
        buf = bytearray(len(sectors) * size)

        first_aligned = position == first * size
        last_aligned = position + num_bytes == (last + 1) * size

        # Sectors only partly overwritten keep their other bytes.
        if not first_aligned:
            chunk = self.read_at(size, first * size)
            buf[: len(chunk)] = chunk
        if not last_aligned and (first != last or first_aligned):
            chunk = self.read_at(size, last * size)
            offset = (last - first) * size
            buf[offset:offset + len(chunk)] = chunk

        start = position - first * size
        buf[start:start + num_bytes] = data[:num_bytes]

        for index, sector in enumerate(sectors):
            self._disk.write_sector(
                self.header.byte_to_sector(sector * size),
                bytes(buf[index * size:(index + 1) * size]),
            )
        return num_bytes

    def length(self) -> int:
        """Return the file's length in bytes."""
        return self.header.file_length()