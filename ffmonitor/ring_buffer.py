from typing import Generic, List, Optional, TypeVar

import numpy as np

T = TypeVar("T")


class BoundedRingBuffer(Generic[T]):
    """
    Fixed-capacity sequence that keeps only the most recent values.

    The backing array is allocated once with the full capacity. Until it is full,
    values are appended after the last retained one. Once full, every push shifts
    the retained values one slot to the left, dropping the oldest, and writes the
    new value into the last slot, so the storage always reads oldest first.
    """

    def __init__(self, capacity: int, default: Optional[T] = None):
        if capacity < 0:
            raise ValueError(f"Ring buffer capacity must not be negative: {capacity}")

        self._capacity = capacity
        self._default = default
        self._length = 0
        self._storage = np.empty(capacity, dtype=object)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_empty(self) -> bool:
        return self._length == 0

    @property
    def is_full(self) -> bool:
        return self._length == self._capacity

    def __len__(self) -> int:
        return self._length

    def push(self, value: T) -> None:
        if self._capacity == 0:
            return

        if self._length < self._capacity:
            self._storage[self._length] = value
            self._length += 1
        else:
            self._storage[:-1] = self._storage[1:]
            self._storage[-1] = value

    def as_sequence(self) -> List[T]:
        return self._storage[:self._length].tolist()

    def first(self, default: Optional[T] = None) -> Optional[T]:
        if self._length == 0:
            return self._default if default is None else default
        return self._storage[0]

    def last(self, default: Optional[T] = None) -> Optional[T]:
        if self._length == 0:
            return self._default if default is None else default
        return self._storage[self._length - 1]

    def __repr__(self) -> str:
        return f"BoundedRingBuffer(capacity={self._capacity}, length={self._length})"
