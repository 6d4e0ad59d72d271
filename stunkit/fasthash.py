"""Fixed-capacity hash table with insertion-ordered index access."""

import math

_SIZE_MASK = 0xFFFFFFFFFFFFFFFF


class TableFullError(Exception):
    """Raised when inserting into a table that already holds its maximum."""


def find_prime(value):
    """Return the smallest prime greater than or equal to ``value`` (at least 2)."""
    if value <= 2:
        return 2
    if value == 3:
        return 3
    result = value if value % 2 else value + 1
    while True:
        stop = math.isqrt(result) + 1
        if all(result % divisor for divisor in range(3, stop + 1)):
            return result
        result += 2


def get_hash_table_width(max_items):
    """Return a table width suited to ``max_items`` entries."""
    return find_prime(max_items)


def fast_hash(key):
    """Cheap hash: integers hash to themselves, byte strings and tuples XOR their parts."""
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, int):
        return key & _SIZE_MASK
    if isinstance(key, (bytes, bytearray)):
        data = bytes(key)
        padded = data.ljust(-(-len(data) // 8) * 8, b"\0")
        result = 0
        for offset in range(0, len(padded), 8):
            result ^= int.from_bytes(padded[offset:offset + 8], "little")
        return result
    if isinstance(key, tuple):
        result = 0
        for part in key:
            result ^= fast_hash(part)
        return result
    return hash(key) & _SIZE_MASK


class FastHash:
    """Hash table holding at most ``max_items`` entries.

    Duplicate keys are allowed: a second insert does not replace the first,
    and lookups find the most recently inserted entry. Entries can also be
    reached by position; positions follow insertion order until an entry is
    removed from the middle, after which they follow table order.
    """

    def __init__(self, max_items, table_width=0):
        if max_items <= 0:
            raise ValueError("max_items must be positive")
        self._capacity = max_items
        self._width = table_width if table_width > 0 else get_hash_table_width(max_items)
        self._keys = [None] * max_items
        self._values = [None] * max_items
        self.reset()

    @property
    def capacity(self):
        """Maximum number of entries."""
        return self._capacity

    @property
    def table_width(self):
        """Number of hash buckets."""
        return self._width

    def reset(self):
        """Remove every entry."""
        self._buckets = [[] for _ in range(self._width)]
        self._free = list(range(self._capacity - 1, -1, -1))
        self._size = 0
        self._index = [0] * self._capacity
        self._index_valid = True
        self._index_start = 0
        for slot in range(self._capacity):
            self._keys[slot] = None
            self._values[slot] = None

    def __len__(self):
        return self._size

    def _find(self, key):
        bucket = self._buckets[fast_hash(key) % self._width]
        for slot in bucket:
            if self._keys[slot] == key:
                return bucket, slot
        return bucket, None

    def insert(self, key, value):
        """Add an entry; raises TableFullError when the table is full."""
        if not self._free:
            raise TableFullError(f"table is full ({self._capacity} items)")
        slot = self._free.pop()
        self._keys[slot] = key
        self._values[slot] = value
        self._buckets[fast_hash(key) % self._width].insert(0, slot)
        if self._index_valid:
            self._index[(self._size + self._index_start) % self._capacity] = slot
        self._size += 1

    def remove(self, key):
        """Remove the most recent entry for ``key``; raises KeyError if absent."""
        bucket, slot = self._find(key)
        if slot is None:
            raise KeyError(key)
        bucket.remove(slot)
        self._update_index_with_remove(slot)
        self._keys[slot] = None
        self._values[slot] = None
        self._free.append(slot)
        self._size -= 1

    def _update_index_with_remove(self, slot):
        if self._size == 0 or (self._size > 1 and not self._index_valid):
            return
        if self._size == 1:
            self._index_valid = True
            self._index_start = 0
            return
        if self._index[self._index_start] == slot:
            self._index_start = (self._index_start + 1) % self._capacity
            return
        last = (self._index_start + self._size - 1) % self._capacity
        if self._index[last] == slot:
            return
        self._index_valid = False

    def _reindex(self):
        if self._size == 0:
            return
        position = 0
        for bucket in self._buckets:
            for slot in bucket:
                self._index[position] = slot
                position += 1
        self._index_valid = True
        self._index_start = 0

    def lookup(self, key):
        """Return the value stored for ``key``, or None."""
        _, slot = self._find(key)
        return None if slot is None else self._values[slot]

    def exists(self, key):
        """Return True when ``key`` is in the table."""
        return self._find(key)[1] is not None

    __contains__ = exists

    def lookup_by_index(self, index):
        """Return the (key, value) pair at position ``index``, or None."""
        if index < 0 or index >= self._size:
            return None
        if not self._index_valid:
            self._reindex()
        slot = self._index[(self._index_start + index) % self._capacity]
        return self._keys[slot], self._values[slot]

    def lookup_value_by_index(self, index):
        """Return the value at position ``index``, or None."""
        item = self.lookup_by_index(index)
        return None if item is None else item[1]

    def __iter__(self):
        for position in range(self._size):
            yield self.lookup_by_index(position)