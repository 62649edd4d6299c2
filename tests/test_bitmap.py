import pytest

from sectorfs.bitmap import BITS_IN_WORD, Bitmap, div_round_down, div_round_up


def test_self_test_sequence():
    bm = Bitmap(200)
    assert bm.num_clear() == 200
    assert bm.find_and_set() == 0
    bm.mark(31)
    assert bm.test(0) and bm.test(31)
    assert bm.find_and_set() == 1
    bm.clear(0)
    bm.clear(1)
    bm.clear(31)
    assert bm.num_clear() == 200
    for i in range(200):
        bm.mark(i)
    assert bm.find_and_set() is None
    assert bm.num_clear() == 0
    for i in range(200):
        bm.clear(i)
    assert bm.num_clear() == 200


def test_new_bitmap_is_clear():
    bm = Bitmap(70)
    assert len(bm) == 70
    assert list(bm.set_bits()) == []
    assert not any(bm.test(i) for i in range(70))


def test_zero_size_rejected():
    with pytest.raises(ValueError):
        Bitmap(0)


@pytest.mark.parametrize("which", [-1, 10])
def test_out_of_range(which):
    bm = Bitmap(10)
    with pytest.raises(IndexError):
        bm.mark(which)
    with pytest.raises(IndexError):
        bm.clear(which)
    with pytest.raises(IndexError):
        bm.test(which)


def test_find_and_set_fills_gaps_in_order():
    bm = Bitmap(5)
    bm.mark(0)
    bm.mark(2)
    assert bm.find_and_set() == 1
    assert bm.find_and_set() == 3
    assert bm.find_and_set() == 4
    assert bm.find_and_set() is None


def test_set_bits_and_num_clear_agree():
    bm = Bitmap(50)
    for i in (3, 17, 49):
        bm.mark(i)
    assert list(bm.set_bits()) == [3, 17, 49]
    assert bm.num_clear() == 47


def test_storage_is_whole_words():
    bm = Bitmap(33)
    assert bm.num_words == 2
    assert len(bm.to_bytes()) == 2 * BITS_IN_WORD // 8


def test_to_bytes_layout():
    bm = Bitmap(40)
    bm.mark(0)
    bm.mark(33)
    assert bm.to_bytes() == b"\x01\x00\x00\x00\x02\x00\x00\x00"


def test_bytes_round_trip():
    bm = Bitmap(100)
    for i in (0, 5, 31, 32, 64, 99):
        bm.mark(i)
    other = Bitmap(100)
    other.load_bytes(bm.to_bytes())
    assert list(other.set_bits()) == list(bm.set_bits())
    assert other.to_bytes() == bm.to_bytes()


def test_load_short_data_keeps_rest():
    bm = Bitmap(64)
    bm.mark(40)
    bm.load_bytes(b"\x01")
    assert bm.test(0)
    assert bm.test(40)


def test_str_lists_set_bits():
    bm = Bitmap(8)
    bm.mark(2)
    bm.mark(5)
    assert str(bm) == "Bitmap set:\n2, 5, \n"


@pytest.mark.parametrize("n,s", [(0, 4), (1, 4), (4, 4), (7, 3), (128, 128), (129, 128)])
def test_division_bounds(n, s):
    up = div_round_up(n, s)
    down = div_round_down(n, s)
    assert down * s <= n < (down + 1) * s
    assert (up - 1) * s < n <= up * s
    assert up - down in (0, 1)
    assert (up == down) == (n % s == 0)


def test_division_by_zero():
    with pytest.raises(ZeroDivisionError):
        div_round_up(3, 0)