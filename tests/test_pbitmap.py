import pytest

from sectorfs.pbitmap import PersistentBitmap


class MemoryFile:
    """A fixed-length file with read_at/write_at semantics."""

    def __init__(self, length):
        self.data = bytearray(length)

    def read_at(self, num_bytes, position):
        if num_bytes <= 0 or position >= len(self.data):
            return b""
        return bytes(self.data[position:position + num_bytes])

    def write_at(self, data, position):
        if not data or position >= len(self.data):
            return 0
        chunk = data[: len(self.data) - position]
        self.data[position:position + len(chunk)] = chunk
        return len(chunk)


def test_new_bitmap_without_file_is_clear():
    bitmap = PersistentBitmap(64)
    assert bitmap.num_clear() == 64
    assert list(bitmap.set_bits()) == []


def test_write_back_and_reload_round_trip():
    file = MemoryFile(8)
    bitmap = PersistentBitmap(64)
    bitmap.mark(3)
    bitmap.mark(40)
    bitmap.write_back(file)
    reloaded = PersistentBitmap(64, file)
    assert list(reloaded.set_bits()) == [3, 40]


def test_write_back_stores_little_endian_words():
    file = MemoryFile(8)
    bitmap = PersistentBitmap(64)
    bitmap.mark(3)
    bitmap.write_back(file)
    assert bytes(file.data[:4]) == (1 << 3).to_bytes(4, "little")
    assert bytes(file.data[4:]) == bytes(4)


def test_fetch_from_overwrites_current_bits():
    file = MemoryFile(8)
    source = PersistentBitmap(64)
    source.mark(7)
    source.write_back(file)
    target = PersistentBitmap(64)
    target.mark(1)
    target.fetch_from(file)
    assert list(target.set_bits()) == [7]


def test_fetch_from_short_file_keeps_remaining_bits():
    file = MemoryFile(4)
    file.data[:4] = (1 << 2).to_bytes(4, "little")
    bitmap = PersistentBitmap(64)
    bitmap.mark(0)
    bitmap.mark(40)
    bitmap.fetch_from(file)
    assert list(bitmap.set_bits()) == [2, 40]


def test_reloaded_bitmap_keeps_bitmap_behaviour():
    file = MemoryFile(4)
    bitmap = PersistentBitmap(32)
    bitmap.mark(0)
    bitmap.write_back(file)
    reloaded = PersistentBitmap(32, file)
    assert reloaded.find_and_set() == 1
    with pytest.raises(IndexError):
        reloaded.mark(32)