"""Snowflake-style ID generator for listings, items, orders and payments.

IDs are zero-padded to a fixed width so that string order equals numeric
order. Lock acquisition on listing_items relies on this: ORDER BY item_id in
SQL and sorted() in Python must agree.
"""

import threading
import time

ID_WIDTH = 19


class SnowflakeIdGenerator:
    """Single-process snowflake generator.

    Layout (63 bits):
      - 41 bits: millisecond timestamp since _EPOCH_MS
      - 10 bits: machine_id
      - 12 bits: per-millisecond sequence
    """

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now_ms = int(time.time() * 1000)
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    # Sequence exhausted for this millisecond; spin to the next one
                    while now_ms <= self._last_ms:
                        now_ms = int(time.time() * 1000)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return (
                ((now_ms - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self) -> str:
        return f"{self.next_int():0{ID_WIDTH}d}"


_default_generator = SnowflakeIdGenerator()


def generate_id() -> str:
    """Generate a fixed-width, monotonically increasing string ID."""
    return _default_generator.next_id()
