# sectorfs

A small file system on a simulated disk of fixed-size sectors that is held
in memory. It keeps a bitmap of free sectors and a root directory. Each
file header points to a chain of link sectors, and these list the file's
data sectors. Directories can be nested.

The package also contains the general-purpose pieces the file system is
built from: a bitmap, a singly linked list and a sorted list, a
self-resizing hash table, and a debug switch controlled by flags.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Usage

```python
from sectorfs.disk import SynchDisk
from sectorfs.filesys import FileSystem

disk = SynchDisk(num_sectors=1024, sector_size=128)
fs = FileSystem(disk, format_disk=True)

# Missing directories along the path are created as they are needed.
fs.create("/docs/notes", 300)
fs.create("/readme", 50)

f = fs.open("/docs/notes")
f.write(b"hello, sectors")   # returns 14
f.seek(0)
print(f.read(14))            # b'hello, sectors'
print(f.length())            # 300

print(fs.list())             # ['docs', '/readme']
print(fs.list_recursively()) # a tree with [D] for directories and [F] for files
```

A file's size is fixed when the file is created. Reads and writes never go
past the end of a file. `read` and `read_at` return only the bytes that
exist, and `write` and `write_at` return how many bytes fit.

### Errors

Failures are raised as exceptions:

- `FileSystem.create` raises `FileExistsError` if the name is taken,
  `sectorfs.directory.DirectoryFullError` if the directory has no free entry
  (a directory holds 10 entries), and `sectorfs.filehdr.DiskFullError` if
  the disk has too few free sectors.
- `FileSystem.open` raises `FileNotFoundError` if there is no such file.
- `FileSystem.remove` raises `FileNotFoundError` if the entry is missing.

### Names and paths

A path is split at its last `/`. The part before it names the parent
directories, which are created if they are missing. A file's entry is stored
as `/` followed by its name, and directories are stored under their plain
names. `FileSystem.remove` looks only in the root directory and takes the
stored entry name, so `fs.remove("/readme")` deletes the root file `readme`.
Files inside subdirectories cannot be removed.

### Open-file slot

`open_and_store(name)` opens a file as the single current file and returns
its id. `read(size, file_id)`, `write(data, file_id)` and `close(file_id)`
then act on that file; the id itself is not checked.

### Inspecting the disk

`FileSystem.describe()` returns text showing the bitmap and directory
headers, the set bits of the free map, and every root entry along with its
file contents. `FileHeader.describe()` and `Directory.describe(disk)` give
the same view of a single header or directory. Debug messages from the file
system go to the standard `logging` module under the `sectorfs.filesys`
logger.

### Lower-level pieces

- `sectorfs.disk.SynchDisk`: an in-memory disk with `read_sector` and `write_sector`, guarded by a lock.
- `sectorfs.bitmap.Bitmap`: a fixed-size bit array with `mark`, `clear`, `test`, `find_and_set` (which returns `None` when the bitmap is full), `num_clear`, `set_bits`, `to_bytes` and `load_bytes`.
- `sectorfs.pbitmap.PersistentBitmap`: a bitmap that can be loaded from and saved to an open file.
- `sectorfs.filehdr.FileHeader`, `SeqDataSectors`, `LinkedDataSector`: the on-disk header and its chain of data sectors.
- `sectorfs.openfile.OpenFile`: reads and writes at a position, or at the current seek position.
- `sectorfs.directory.Directory` and `DirectoryEntry`: a fixed-size table of named entries.
- `sectorfs.linkedlist.LinkedList` and `SortedList`, and `sectorfs.hashtable.HashTable`: general-purpose containers. Each one raises an error when an item is added twice or when a missing item is removed.
- `sectorfs.debug.Debug` and `DebugFlag`: `is_enabled` and `log` for single-character flags; the flag `"+"` turns all of them on.

## What it does not do

- The disk exists only in memory. Nothing is saved to or loaded from a file
  on the host, so the contents are lost when the `SynchDisk` object is gone.
  Passing `format_disk=False` opens a disk object that was formatted earlier
  in the same process.
- Files cannot grow after they are created, and directories cannot grow
  beyond 10 entries.
- There is no command-line tool. The package is used as a library.