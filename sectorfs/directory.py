"""Directories: fixed-size tables of names and the sectors of their headers.

A directory is stored as an ordinary file. Each entry is written as an in-use
flag, three padding bytes, the header sector as a little-endian 32-bit value,
a subdirectory flag, and a 65-byte NUL-padded name.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from sectorfs.disk import SynchDisk
from sectorfs.filehdr import FileHeader
from sectorfs.openfile import OpenFile

FILE_NAME_MAX_LEN = 64
NUM_DIR_ENTRIES = 10

_ENTRY = struct.Struct(f"<?3xi?{FILE_NAME_MAX_LEN + 1}s2x")
DIRECTORY_ENTRY_SIZE = _ENTRY.size
DIRECTORY_FILE_SIZE = DIRECTORY_ENTRY_SIZE * NUM_DIR_ENTRIES


class _RandomAccessFile(Protocol):
    def read_at(self, num_bytes: int, position: int) -> bytes: ...

    def write_at(self, data: bytes, position: int) -> int: ...


class DirectoryFullError(Exception):
    """Raised when a directory has no free entry left."""


def _clip_name(name: str) -> str:
    """Cut ``name`` to the longest prefix that fits in a directory entry."""
    return name.encode()[:FILE_NAME_MAX_LEN].decode("utf-8", "ignore")


@dataclass
class DirectoryEntry:
    """One slot of a directory: a name and where its file header lives."""

    in_use: bool = False
    sector: int = 0
    is_subdir: bool = False
    name: str = ""

    def to_bytes(self) -> bytes:
        """Return the entry's on-disk form."""
        raw_name = self.name.encode()[:FILE_NAME_MAX_LEN]
        return _ENTRY.pack(self.in_use, self.sector, self.is_subdir, raw_name)

    @classmethod
    def from_bytes(cls, data: bytes) -> DirectoryEntry:
        """Build an entry from its on-disk form."""
        in_use, sector, is_subdir, raw_name = _ENTRY.unpack(data)
        raw_name = raw_name.split(b"\0", 1)[0]
        return cls(in_use, sector, is_subdir, raw_name.decode("utf-8", "replace"))


class Directory:
    """A fixed-size table of directory entries; it never grows."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("directory size cannot be negative")
        self.table = [DirectoryEntry() for _ in range(size)]

    def _to_bytes(self) -> bytes:
        return b"".join(entry.to_bytes() for entry in self.table)

    def _in_use(self) -> Iterator[DirectoryEntry]:
        return (entry for entry in self.table if entry.in_use)

    def _find_entry(self, name: str) -> DirectoryEntry | None:
        wanted = _clip_name(name)
        return next((e for e in self._in_use() if e.name == wanted), None)

    def fetch_from(self, file: _RandomAccessFile) -> None:
        """Load the table from the start of ``file``."""
        storage = bytearray(self._to_bytes())
        raw = file.read_at(len(storage), 0)[: len(storage)]
        storage[: len(raw)] = raw
        self.table = [
            DirectoryEntry.from_bytes(bytes(storage[i:i + DIRECTORY_ENTRY_SIZE]))
            for i in range(0, len(storage), DIRECTORY_ENTRY_SIZE)
        ]

    def write_back(self, file: _RandomAccessFile) -> None:
        """Store the table at the start of ``file``."""
        file.write_at(self._to_bytes(), 0)

    def find(self, name: str) -> int | None:
        """Return the header sector of ``name``, or None if it is not here."""
        entry = self._find_entry(name)
        return None if entry is None else entry.sector

    def add(self, name: str, new_sector: int, is_directory: bool = False) -> None:
        """Add ``name`` with its header at ``new_sector``.

        Raises FileExistsError if the name is taken and DirectoryFullError if
        no entry is free. Names longer than the entry holds are cut short.
        """
        if self._find_entry(name) is not None:
            raise FileExistsError(name)
        free = next((e for e in self.table if not e.in_use), None)
        if free is None:
            raise DirectoryFullError(f"no room for {name!r}")
        free.in_use = True
        free.name = _clip_name(name)
        free.sector = new_sector
        free.is_subdir = is_directory

    def remove(self, name: str) -> None:
        """Remove ``name``; raises FileNotFoundError if it is not here."""
        entry = self._find_entry(name)
        if entry is None:
            raise FileNotFoundError(name)
        entry.in_use = False

    def names(self) -> list[str]:
        """Return the names in use, in table order."""
        return [entry.name for entry in self._in_use()]

    def _walk(self, disk: SynchDisk, depth: int) -> Iterator[str]:
        tab = "\t" * depth
        for entry in self._in_use():
            if entry.is_subdir:
                yield f"{tab}[D] {entry.name}\n"
                sub = Directory(NUM_DIR_ENTRIES)
                sub.fetch_from(OpenFile(disk, entry.sector))
                yield from sub._walk(disk, depth + 1)
            else:
                # File entries carry a leading "/" that the listing leaves out.
                yield f"{tab}[F] {entry.name[1:]}\n"

    def list_recursively(self, disk: SynchDisk, depth: int = 0) -> str:
        """Return a tree listing of this directory and every subdirectory."""
        return "".join(self._walk(disk, depth))

    def describe(self, disk: SynchDisk) -> str:
        """Return every entry with its header and file contents, as text."""
        out = ["Directory contents:\n"]
        for entry in self._in_use():
            out.append(f"Name: {entry.name}, Sector: {entry.sector}\n")
            hdr = FileHeader(disk)
            hdr.fetch_from(entry.sector)
            out.append(hdr.describe())
        out.append("\n")
        return "".join(out)