"""An append-only bucket of values that can be snapshotted and cleared concurrently."""

from __future__ import annotations

import threading
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

BLOCK_SIZE = 64
"""Number of values held by a single block."""


class BlockFull(Exception):
    """Raised by `Block.push` when the block has no free slot; carries the rejected value."""

    def __init__(self, value: object) -> None:
        super().__init__("block is full")
        self.value = value


def _trailing_ones(bits: int) -> int:
    return (~bits & (bits + 1)).bit_length() - 1


class Block(Generic[T]):
    """A fixed-size chunk of values.

    Writers reserve a slot by advancing the write index, store their value, and then
    acknowledge the write by setting the slot's bit in the read bitmap.  The readable
    length is the run of acknowledged slots starting at slot zero.
    """

    __slots__ = ("_lock", "_write", "_read", "_slots", "next")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._write = 0
        self._read = 0
        self._slots: list[Optional[T]] = [None] * BLOCK_SIZE
        self.next: Optional[Block[T]] = None

    def __len__(self) -> int:
        return _trailing_ones(self._read)

    def next_len(self) -> int:
        """Length of the block written before this one, or 0 if there is none."""
        following = self.next
        return 0 if following is None else len(following)

    def is_quiesced(self) -> bool:
        """Whether no writes to this block are in flight."""
        length = len(self)
        if length == BLOCK_SIZE:
            return True
        return min(self._write, BLOCK_SIZE) == length

    def data(self) -> list[T]:
        """The values whose writes have completed, in write order."""
        return list(self._slots[: len(self)])  # type: ignore[arg-type]

    def push(self, value: T) -> None:
        """Stores `value` in the next free slot; raises BlockFull if there is none."""
        with self._lock:
            index = self._write
            self._write += 1
        if index >= BLOCK_SIZE:
            raise BlockFull(value)
        self._slots[index] = value
        with self._lock:
            self._read |= 1 << index

    def __repr__(self) -> str:
        return (
            f"Block(block_size={BLOCK_SIZE}, write={self._write}, read={self._read:#x}, "
            f"len={len(self)}, has_next={self.next is not None})"
        )


class AtomicBucket(Generic[T]):
    """An unbounded, thread-safe bucket of values built from a chain of blocks.

    Values cannot be removed one by one; the whole bucket is read or cleared.  Reads
    visit blocks newest first, while values inside a block keep their write order:
    with blocks of four and ten values written, iteration yields
    ``[6 7 8 9] [2 3 4 5] [0 1]``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tail: Optional[Block[T]] = None

    def __repr__(self) -> str:
        return f"AtomicBucket(tail={self._tail!r})"

    def _load_or_install_tail(self) -> Block[T]:
        with self._lock:
            if self._tail is None:
                self._tail = Block()
            return self._tail

    def _replace_full_tail(self, full: Block[T]) -> Optional[Block[T]]:
        """Installs a new tail linked to `full` if `full` is still the tail."""
        with self._lock:
            if self._tail is not full:
                return None
            fresh: Block[T] = Block()
            fresh.next = full
            self._tail = fresh
            return fresh

    def is_empty(self) -> bool:
        """Whether no values are readable from the bucket."""
        tail = self._tail
        if tail is None:
            return True
        return len(tail) == 0 and tail.next_len() == 0

    def push(self, value: T) -> None:
        """Adds a value to the bucket."""
        while True:
            tail = self._load_or_install_tail()
            try:
                tail.push(value)
                return
            except BlockFull:
                pass
            fresh = self._replace_full_tail(tail)
            if fresh is None:
                continue
            try:
                fresh.push(value)
                return
            except BlockFull:
                continue

    def record(self, value: T) -> None:
        """Records a histogram sample; same as `push`."""
        self.push(value)

    def data(self) -> list[T]:
        """All values in the bucket, blocks newest first, each block in write order."""
        values: list[T] = []
        self.data_with(values.extend)
        return values

    @staticmethod
    def _walk(block: Optional[Block[T]], f: Callable[[list[T]], object]) -> None:
        while block is not None:
            while not block.is_quiesced():
                time.sleep(0)
            f(block.data())
            block = block.next

    def data_with(self, f: Callable[[list[T]], object]) -> None:
        """Calls `f` with the values of each block, newest block first."""
        self._walk(self._tail, f)

    def clear(self) -> None:
        """Removes every value from the bucket."""
        self.clear_with(lambda _values: None)

    def clear_with(self, f: Callable[[list[T]], object]) -> None:
        """Detaches all blocks, calling `f` with the values of each detached block.

        Reads already in progress are not affected.
        """
        with self._lock:
            detached = self._tail
            self._tail = None
        self._walk(detached, f)