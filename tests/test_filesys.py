import pytest

from sectorfs.directory import NUM_DIR_ENTRIES, DirectoryFullError
from sectorfs.disk import SynchDisk
from sectorfs.filehdr import DiskFullError
from sectorfs.filesys import DIRECTORY_SECTOR, FREE_MAP_SECTOR, FileSystem, Path
from sectorfs.openfile import OpenFile
from sectorfs.pbitmap import PersistentBitmap


@pytest.fixture
def disk():
    return SynchDisk(1024)


@pytest.fixture
def fs(disk):
    return FileSystem(disk, True)


def free_count(disk):
    free_map_file = OpenFile(disk, FREE_MAP_SECTOR)
    return PersistentBitmap(disk.num_sectors, free_map_file).num_clear()


def test_format_leaves_empty_root(fs):
    assert fs.list() == []
    assert fs.list_recursively() == ""


def test_format_marks_header_sectors(disk, fs):
    bitmap = PersistentBitmap(disk.num_sectors, OpenFile(disk, FREE_MAP_SECTOR))
    assert bitmap.test(FREE_MAP_SECTOR)
    assert bitmap.test(DIRECTORY_SECTOR)


def test_create_write_read_round_trip(fs):
    fs.create("/a", 100)
    f = fs.open("/a")
    assert f.length() == 100
    assert f.write(b"hello world") == 11
    assert fs.open("/a").read(11) == b"hello world"


def test_root_file_name_carries_slash(fs):
    fs.create("/a", 10)
    assert fs.list() == ["/a"]


def test_create_existing_raises(fs):
    fs.create("/a", 10)
    with pytest.raises(FileExistsError):
        fs.create("/a", 10)


def test_create_in_subdirectory(fs):
    fs.create("/d/f", 10)
    assert fs.list() == ["d"]
    assert fs.list_recursively() == "[D] d\n\t[F] f\n"


def test_nested_listing(fs):
    fs.create("/d/e/f", 10)
    fs.create("/g", 10)
    assert fs.list_recursively() == "[D] d\n\t[D] e\n\t\t[F] f\n[F] g\n"


def test_describe_path_root(fs):
    assert fs.describe_path("/x") == Path(DIRECTORY_SECTOR, "/x")


def test_describe_path_uses_traversed_directory(fs):
    path = fs.describe_path("/d/e/f")
    assert path.name == "/f"
    assert path.dir_sector == fs.traverse_directory("/d/e")
    assert path.dir_sector != DIRECTORY_SECTOR


def test_traverse_is_idempotent(fs):
    first = fs.traverse_directory("/d")
    assert fs.traverse_directory("/d") == first
    assert fs.list() == ["d"]


def test_traverse_root(fs):
    assert fs.traverse_directory("/") == DIRECTORY_SECTOR


def test_describe_path_without_slash_raises(fs):
    with pytest.raises(ValueError):
        fs.describe_path("noslash")


def test_traverse_relative_raises(fs):
    with pytest.raises(ValueError):
        fs.traverse_directory("relative")


def test_open_missing_raises(fs):
    with pytest.raises(FileNotFoundError):
        fs.open("/missing")


def test_remove_frees_sectors(disk, fs):
    before = free_count(disk)
    fs.create("/a", 5000)
    assert free_count(disk) < before
    fs.remove("/a")
    assert free_count(disk) == before
    assert fs.list() == []
    with pytest.raises(FileNotFoundError):
        fs.open("/a")


def test_remove_missing_raises(fs):
    with pytest.raises(FileNotFoundError):
        fs.remove("/missing")


def test_disk_full_leaves_free_map_unchanged(disk, fs):
    before = free_count(disk)
    with pytest.raises(DiskFullError):
        fs.create("/big", disk.num_sectors * disk.sector_size)
    assert free_count(disk) == before
    assert fs.list() == []


def test_directory_full_raises(fs):
    for i in range(NUM_DIR_ENTRIES):
        fs.create(f"/f{i}", 10)
    with pytest.raises(DirectoryFullError):
        fs.create("/extra", 10)
    assert len(fs.list()) == NUM_DIR_ENTRIES


def test_contents_survive_remount(disk, fs):
    fs.create("/d/f", 50)
    fs.open("/d/f").write(b"persistent")
    again = FileSystem(disk, False)
    assert again.open("/d/f").read(10) == b"persistent"
    assert again.list() == fs.list()


def test_large_file_spans_link_sectors(disk, fs):
    size = 2 * 31 * disk.sector_size + 300
    payload = bytes(i % 251 for i in range(size))
    fs.create("/big", size)
    assert fs.open("/big").write(payload) == size
    assert fs.open("/big").read(size) == payload


def test_write_is_clipped_to_length(fs):
    fs.create("/a", 10)
    f = fs.open("/a")
    assert f.write(b"x" * 20) == 10
    assert fs.open("/a").read(20) == b"x" * 10


def test_stored_file_operations(fs):
    fs.create("/s", 16)
    file_id = fs.open_and_store("/s")
    assert fs.write(b"hi", file_id) == 2
    fs.close(file_id)
    file_id = fs.open_and_store("/s")
    assert fs.read(2, file_id) == b"hi"
    fs.close(file_id)
    with pytest.raises(ValueError):
        fs.read(2, file_id)


def test_open_and_store_missing_raises(fs):
    with pytest.raises(FileNotFoundError):
        fs.open_and_store("/missing")
    with pytest.raises(ValueError):
        fs.write(b"x", 1)


def test_describe_lists_sections(fs):
    fs.create("/a", 4)
    fs.open("/a").write(b"abcd")
    text = fs.describe()
    assert text.startswith("Bit map file header:\n")
    assert "Directory file header:\n" in text
    assert "Bitmap set:\n" in text
    assert "Directory contents:\n" in text
    assert "abcd" in text