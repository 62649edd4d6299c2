"""A fixed-size bitmap stored as 32-bit words, used to track free sectors."""

from __future__ import annotations

from collections.abc import Iterator

BITS_IN_BYTE = 8
BITS_IN_WORD = 4 * BITS_IN_BYTE
_WORD_BYTES = BITS_IN_WORD // BITS_IN_BYTE


def _truncating_divmod(n: int, s: int) -> tuple[int, int]:
    """Divide rounding toward zero; the remainder takes the sign of ``n``."""
    if s == 0:
        raise ZeroDivisionError("division by zero")
    q = abs(n) // abs(s)
    if (n < 0) != (s < 0):
        q = -q
    return q, n - q * s


def div_round_down(n: int, s: int) -> int:
    """Integer division rounding toward zero."""
    return _truncating_divmod(n, s)[0]


def div_round_up(n: int, s: int) -> int:
    """Integer division, rounded up when there is a positive remainder."""
    q, r = _truncating_divmod(n, s)
    return q + (1 if r > 0 else 0)


class Bitmap:
    """An array of bits, each of which can be set, cleared and tested."""

    def __init__(self, num_items: int) -> None:
        if num_items <= 0:
            raise ValueError("a bitmap needs at least one bit")
        self.num_bits = num_items
        self.num_words = div_round_up(num_items, BITS_IN_WORD)
        self._bits = 0

    def _check(self, which: int) -> None:
        if not 0 <= which < self.num_bits:
            raise IndexError(f"bit {which} out of range 0..{self.num_bits - 1}")

    def mark(self, which: int) -> None:
        """Set bit ``which``."""
        self._check(which)
        self._bits |= 1 << which

    def clear(self, which: int) -> None:
        """Clear bit ``which``."""
        self._check(which)
        self._bits &= ~(1 << which)

    def test(self, which: int) -> bool:
        """Return whether bit ``which`` is set."""
        self._check(which)
        return bool(self._bits >> which & 1)

    def find_and_set(self) -> int | None:
        """Set the lowest clear bit and return its index, or None if all are set."""
        for which in range(self.num_bits):
            if not self._bits >> which & 1:
                self._bits |= 1 << which
                return which
        return None

    def num_clear(self) -> int:
        """Return how many bits are clear."""
        return self.num_bits - sum(1 for _ in self.set_bits())

    def set_bits(self) -> Iterator[int]:
        """Yield the indices of the set bits in increasing order."""
        return (i for i in range(self.num_bits) if self._bits >> i & 1)

    def to_bytes(self) -> bytes:
        """Return the on-disk form: ``num_words`` little-endian 32-bit words."""
        return self._bits.to_bytes(self.num_words * _WORD_BYTES, "little")

    def load_bytes(self, data: bytes) -> None:
        """Overwrite the leading storage bytes with ``data``.

        Bytes beyond the end of ``data`` keep their current contents; bytes
        past the bitmap's storage are ignored.
        """
        storage = bytearray(self.to_bytes())
        chunk = bytes(data[: len(storage)])
        storage[: len(chunk)] = chunk
        self._bits = int.from_bytes(storage, "little")

    def __len__(self) -> int:
        return self.num_bits

    def __str__(self) -> str:
        listed = "".join(f"{i}, " for i in self.set_bits())
        return f"Bitmap set:\n{listed}\n"