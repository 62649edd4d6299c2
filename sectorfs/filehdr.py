"""File headers: where on disk a file's data sectors are found.

A header stores the file length and the sector of the first link of a chain.
Each link fills one sector: the sector of the next link followed by as many
data sector numbers as fit. Integers are stored as little-endian 32-bit values
and -1 marks "none".
"""

from __future__ import annotations

import struct
from itertools import takewhile
from typing import Iterator

from sectorfs.bitmap import Bitmap, div_round_up
from sectorfs.disk import SynchDisk

_INT = struct.Struct("<i")
_HEADER = struct.Struct("<ii")
_NONE = -1


def linked_direct(sector_size: int) -> int:
    """Return how many data sector numbers fit in one link sector."""
    return (sector_size - _INT.size) // _INT.size


class DiskFullError(Exception):
    """Raised when the disk has too few free sectors for a request."""


class LinkedDataSector:
    """One link of the chain: a next-link sector and a run of data sectors."""

    def __init__(self, entries_per_sector: int) -> None:
        if entries_per_sector <= 0:
            raise ValueError("a link sector must hold at least one entry")
        self.link_sector = _NONE
        self.data_sectors = [_NONE] * entries_per_sector
        self.next: LinkedDataSector | None = None

    def _layout(self) -> struct.Struct:
        return struct.Struct(f"<{1 + len(self.data_sectors)}i")

    def assigned(self) -> Iterator[int]:
        """Yield the data sectors in use, stopping at the first unused slot."""
        return takewhile(lambda sector: sector != _NONE, self.data_sectors)

    def fetch_from_sector(self, disk: SynchDisk, sector: int) -> None:
        """Load this link from ``sector``."""
        raw = disk.read_sector(sector)
        self.link_sector, *rest = self._layout().unpack_from(raw)
        self.data_sectors = list(rest)

    def write_back_sector(self, disk: SynchDisk, sector: int) -> None:
        """Store this link in ``sector``."""
        packed = self._layout().pack(self.link_sector, *self.data_sectors)
        disk.write_sector(sector, packed.ljust(disk.sector_size, b"\0"))

    def push(self, sector: int) -> LinkedDataSector:
        """Attach a fresh link stored at ``sector`` after this one and return it."""
        self.link_sector = sector
        self.next = LinkedDataSector(len(self.data_sectors))
        return self.next


class SeqDataSectors:
    """The chain of link sectors that lists a file's data sectors in order."""

    def __init__(self, disk: SynchDisk) -> None:
        self._disk = disk
        self._per_link = linked_direct(disk.sector_size)
        self.front = _NONE
        self._list: LinkedDataSector | None = None

    def _chain(self) -> Iterator[tuple[int, LinkedDataSector]]:
        sector, node = self.front, self._list
        while node is not None and sector != _NONE:
            yield sector, node
            sector, node = node.link_sector, node.next

    @staticmethod
    def _take(free_map: Bitmap) -> int:
        sector = free_map.find_and_set()
        if sector is None:
            raise DiskFullError("no free sector left")
        return sector

    def allocate(self, free_map: Bitmap, file_size: int) -> None:
        """Take link and data sectors for ``file_size`` bytes from ``free_map``."""
        if file_size < 0:
            raise ValueError("file size cannot be negative")
        if self.front != _NONE:
            raise RuntimeError("data sectors are already allocated")
        needed = div_round_up(file_size, self._disk.sector_size)
        if free_map.num_clear() < needed:
            raise DiskFullError(
                f"{needed} sectors needed, {free_map.num_clear()} free"
            )
        curr: LinkedDataSector | None = None
        assigned = 0
        while assigned < needed:
            link = self._take(free_map)
            if curr is None:
                self.front = link
                curr = self._list = LinkedDataSector(self._per_link)
            else:
                curr = curr.push(link)
            count = min(self._per_link, needed - assigned)
            for idx in range(count):
                curr.data_sectors[idx] = self._take(free_map)
            assigned += count

    def deallocate(self, free_map: Bitmap) -> None:
        """Return every link and data sector of the chain to ``free_map``."""
        for sector, node in self._chain():
            for data in node.assigned():
                free_map.clear(data)
            free_map.clear(sector)
        self.front = _NONE
        self._list = None

    def fetch_from(self, data: bytes) -> None:
        """Read the front sector from ``data`` and load the chain from disk."""
        (self.front,) = _INT.unpack_from(data)
        self._list = None
        if self.front == _NONE:
            return
        node = self._list = LinkedDataSector(self._per_link)
        node.fetch_from_sector(self._disk, self.front)
        visited = {self.front}
        while (link := node.link_sector) != _NONE:
            if link in visited:
                raise ValueError(f"link sector {link} forms a cycle")
            visited.add(link)
            node = node.push(link)
            node.fetch_from_sector(self._disk, link)

    def write_back(self) -> bytes:
        """Store every link on disk and return the packed front sector."""
        for sector, node in self._chain():
            node.write_back_sector(self._disk, sector)
        return _INT.pack(self.front)

    def get_sector(self, offset: int) -> int:
        """Return the data sector that holds byte ``offset`` of the file."""
        if offset < 0:
            raise IndexError(f"offset {offset} is negative")
        index = offset // self._disk.sector_size
        node = self._list
        for _ in range(index // self._per_link):
            if node is None:
                break
            node = node.next
        if node is None:
            raise IndexError(f"offset {offset} is beyond the allocated sectors")
        sector = node.data_sectors[index % self._per_link]
        if sector == _NONE:
            raise IndexError(f"offset {offset} is beyond the allocated sectors")
        return sector

    def data_sectors(self) -> list[int]:
        """Return every data sector of the file, in file order."""
        return [data for _, node in self._chain() for data in node.assigned()]

    def __str__(self) -> str:
        parts = [f"{self.front} -> "]
        for _, node in self._chain():
            first, last = node.data_sectors[0], node.data_sectors[-1]
            if node.next is None:
                second = node.data_sectors[1] if len(node.data_sectors) > 1 else _NONE
                parts.append(f"{{ {first}, {second}... }} -> end")
            else:
                parts.append(f"{{ {first} ~ {last} }} -- {node.link_sector} -> ")
        return "".join(parts)


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else f"\\{byte:x}"


class FileHeader:
    """The on-disk record of a file's length and data sectors."""

    def __init__(self, disk: SynchDisk) -> None:
        self._disk = disk
        self.num_bytes = -1
        self.num_sectors = -1
        self.data_sector_list = SeqDataSectors(disk)

    def allocate(self, free_map: Bitmap, file_size: int) -> None:
        """Take sectors for a new file of ``file_size`` bytes from ``free_map``.

        Raises DiskFullError if the disk has too little room.
        """
        self.data_sector_list.allocate(free_map, file_size)
        self.num_bytes = file_size
        self.num_sectors = div_round_up(file_size, self._disk.sector_size)

    def deallocate(self, free_map: Bitmap) -> None:
        """Return the file's data and link sectors to ``free_map``."""
        self.data_sector_list.deallocate(free_map)

    def fetch_from(self, sector: int) -> None:
        """Load the header stored in ``sector``."""
        raw = self._disk.read_sector(sector)
        self.num_bytes, self.num_sectors = _HEADER.unpack_from(raw)
        self.data_sector_list = SeqDataSectors(self._disk)
        self.data_sector_list.fetch_from(raw[_HEADER.size:])

    def write_back(self, sector: int) -> None:
        """Store the header in ``sector`` along with its link sectors."""
        body = _HEADER.pack(self.num_bytes, self.num_sectors)
        body += self.data_sector_list.write_back()
        self._disk.write_sector(sector, body.ljust(self._disk.sector_size, b"\0"))

    def byte_to_sector(self, offset: int) -> int:
        """Return the disk sector holding byte ``offset`` of the file."""
        return self.data_sector_list.get_sector(offset)

    def file_length(self) -> int:
        """Return the file's length in bytes."""
        return self.num_bytes

    def describe(self) -> str:
        """Return the header and the file's contents as readable text."""
        size = self._disk.sector_size
        per_link = linked_direct(size)
        out = [f"FileHeader contents.  File size: {self.num_bytes}.  File blocks:\n"]
        sectors = self.data_sector_list.data_sectors()
        remaining = max(self.num_bytes, 0)
        if not sectors:
            out.append("\nFile contents:\n")
        for start in range(0, len(sectors), per_link):
            chunk_bytes = min(remaining, per_link * size)
            used = sectors[start:start + per_link][: div_round_up(chunk_bytes, size)]
            out.append("".join(f"{sector} " for sector in used))
            out.append("\nFile contents:\n")
            for sector in used:
                data = self._disk.read_sector(sector)[: min(remaining, size)]
                remaining -= len(data)
                out.append("".join(_printable(b) for b in data) + "\n")
        return "".join(out)