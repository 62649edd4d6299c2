"""The file system: named files and nested directories on a sector disk.

Two files are kept open while the file system is in use: the bitmap of free
sectors, whose header lives in sector 0, and the root directory, whose header
lives in sector 1. Directories nest; a path names its parent directories by
their plain names, while a file's entry is stored as "/" followed by its name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import chain

from sectorfs.bitmap import BITS_IN_BYTE
from sectorfs.directory import DIRECTORY_FILE_SIZE, NUM_DIR_ENTRIES, Directory
from sectorfs.disk import SynchDisk
from sectorfs.filehdr import DiskFullError, FileHeader
from sectorfs.openfile import OpenFile
from sectorfs.pbitmap import PersistentBitmap

FREE_MAP_SECTOR = 0
DIRECTORY_SECTOR = 1
OPEN_FILE_ID = 1

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Path:
    """A path split into its parent directory's header sector and entry name."""

    dir_sector: int
    name: str


class FileSystem:
    """Files and directories stored on a ``SynchDisk``."""

    def __init__(self, disk: SynchDisk, format_disk: bool) -> None:
        self._disk = disk
        self._opened_file: OpenFile | None = None
        if format_disk:
            self._format()
        self._free_map_file = OpenFile(disk, FREE_MAP_SECTOR)
        self._directory_file = OpenFile(disk, DIRECTORY_SECTOR)
        if format_disk:
            self._initialise_files()

    def _format(self) -> None:
        _log.debug("Formatting the file system.")
        free_map = PersistentBitmap(self._disk.num_sectors)
        free_map.mark(FREE_MAP_SECTOR)
        free_map.mark(DIRECTORY_SECTOR)
        map_hdr = FileHeader(self._disk)
        dir_hdr = FileHeader(self._disk)
        map_hdr.allocate(free_map, self._free_map_file_size())
        dir_hdr.allocate(free_map, DIRECTORY_FILE_SIZE)
        map_hdr.write_back(FREE_MAP_SECTOR)
        dir_hdr.write_back(DIRECTORY_SECTOR)
        self._pending_free_map = free_map

    def _initialise_files(self) -> None:
        self._pending_free_map.write_back(self._free_map_file)
        Directory(NUM_DIR_ENTRIES).write_back(self._directory_file)
        del self._pending_free_map

    def _free_map_file_size(self) -> int:
        return self._disk.num_sectors // BITS_IN_BYTE

    def _load_free_map(self) -> PersistentBitmap:
        return PersistentBitmap(self._disk.num_sectors, self._free_map_file)

    def _load_root(self) -> Directory:
        directory = Directory(NUM_DIR_ENTRIES)
        directory.fetch_from(self._directory_file)
        return directory

    def describe_path(self, path: str) -> Path:
        """Split ``path`` at its last "/" and find or create its parent directory."""
        dir_end = path.rfind("/")
        if dir_end < 0:
            raise ValueError(f"path {path!r} contains no '/'")
        parent = "/" if dir_end == 0 else path[:dir_end]
        name = "/" + path[dir_end + 1:]
        return Path(self.traverse_directory(parent), name)

    def traverse_directory(self, path: str) -> int:
        """Walk every directory of ``path``, creating missing ones.

        Returns the header sector of the last directory.
        """
        if not path.startswith("/"):
            raise ValueError(f"directory path {path!r} must start with '/'")
        free_map = self._load_free_map()
        current_file = self._directory_file
        sector = DIRECTORY_SECTOR
        dirname = ""
        for ch in chain(path[1:], [None]):
            if ch is not None and ch != "/":
                dirname += ch
                continue
            if not dirname and ch is None:
                return DIRECTORY_SECTOR
            current = Directory(NUM_DIR_ENTRIES)
            current.fetch_from(current_file)
            found = current.find(dirname)
            if found is None:
                sector = self._make_directory(current, current_file, free_map, dirname)
            else:
                sector = found
                _log.debug("Found directory /%s in sector #%d", dirname, sector)
            current_file = OpenFile(self._disk, sector)
            if found is None:
                Directory(NUM_DIR_ENTRIES).write_back(current_file)
            dirname = ""
        return sector

    def _make_directory(
        self,
        parent: Directory,
        parent_file: OpenFile,
        free_map: PersistentBitmap,
        dirname: str,
    ) -> int:
        sector = free_map.find_and_set()
        if sector is None:
            raise DiskFullError(f"no free sector for directory {dirname!r}")
        dir_hdr = FileHeader(self._disk)
        dir_hdr.allocate(free_map, DIRECTORY_FILE_SIZE)
        parent.add(dirname, sector, True)
        dir_hdr.write_back(sector)
        parent.write_back(parent_file)
        free_map.write_back(self._free_map_file)
        _log.debug("Created directory /%s in sector #%d", dirname, sector)
        return sector

    def create(self, name: str, initial_size: int) -> None:
        """Create a file of ``initial_size`` bytes at path ``name``.

        Missing parent directories are created. Raises FileExistsError if the
        file exists, DirectoryFullError if its directory has no free entry and
        DiskFullError if the disk has too little room.
        """
        path = self.describe_path(name)
        if path.dir_sector == DIRECTORY_SECTOR:
            dir_file = self._directory_file
        else:
            dir_file = OpenFile(self._disk, path.dir_sector)
        directory = Directory(NUM_DIR_ENTRIES)
        directory.fetch_from(dir_file)
        if directory.find(path.name) is not None:
            raise FileExistsError(name)
        free_map = self._load_free_map()
        sector = free_map.find_and_set()
        if sector is None:
            raise DiskFullError(f"no free sector for the header of {name!r}")
        directory.add(path.name, sector)
        hdr = FileHeader(self._disk)
        hdr.allocate(free_map, initial_size)
        hdr.write_back(sector)
        directory.write_back(dir_file)
        free_map.write_back(self._free_map_file)

    def open(self, name: str) -> OpenFile:
        """Open the file at path ``name``; raises FileNotFoundError if absent."""
        path = self.describe_path(name)
        directory = Directory(NUM_DIR_ENTRIES)
        directory.fetch_from(OpenFile(self._disk, path.dir_sector))
        sector = directory.find(path.name)
        if sector is None:
            raise FileNotFoundError(name)
        _log.debug("Opening file %s in sector #%d", path.name, sector)
        return OpenFile(self._disk, sector)

    def open_and_store(self, name: str) -> int:
        """Open ``name`` as the current file and return its file id."""
        self._opened_file = None
        self._opened_file = self.open(name)
        return OPEN_FILE_ID

    def _current(self) -> OpenFile:
        if self._opened_file is None:
            raise ValueError("no file is open")
        return self._opened_file

    def read(self, size: int, file_id: int) -> bytes:
        """Read up to ``size`` bytes from the current file."""
        return self._current().read(size)

    def write(self, data: bytes, file_id: int) -> int:
        """Write ``data`` to the current file and return the bytes written."""
        return self._current().write(data)

    def close(self, file_id: int) -> None:
        """Close the current file."""
        self._opened_file = None

    def remove(self, name: str) -> None:
        """Delete the root-directory entry ``name`` and free its sectors.

        Raises FileNotFoundError if there is no such entry.
        """
        directory = self._load_root()
        sector = directory.find(name)
        if sector is None:
            raise FileNotFoundError(name)
        hdr = FileHeader(self._disk)
        hdr.fetch_from(sector)
        free_map = self._load_free_map()
        hdr.deallocate(free_map)
        free_map.clear(sector)
        directory.remove(name)
        free_map.write_back(self._free_map_file)
        directory.write_back(self._directory_file)

    def list(self) -> list[str]:
        """Return the entry names of the root directory."""
        return self._load_root().names()

    def list_recursively(self) -> str:
        """Return a tree listing of every directory and file."""
        return self._load_root().list_recursively(self._disk, 0)

    def describe(self) -> str:
        """Return the bitmap, the root directory and every root file, as text."""
        bit_hdr = FileHeader(self._disk)
        bit_hdr.fetch_from(FREE_MAP_SECTOR)
        dir_hdr = FileHeader(self._disk)
        dir_hdr.fetch_from(DIRECTORY_SECTOR)
        return "".join(
            [
                "Bit map file header:\n",
                bit_hdr.describe(),
                "Directory file header:\n",
                dir_hdr.describe(),
                str(self._load_free_map()),
                self._load_root().describe(self._disk),
            ]
        )