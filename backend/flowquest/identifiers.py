"""Entity identifiers: 24-character lowercase hex strings shaped like ObjectIds.

Layout of a generated identifier (12 bytes, hex-encoded):
  4 bytes  seconds since the epoch (big-endian)
  5 bytes  random value chosen once per process
  3 bytes  counter, seeded randomly and incremented per identifier

Within one process identifiers strictly increase, so they sort in creation
order. The seconds field never moves backwards, and when the counter wraps
it is advanced past the last second used.
"""

import os
import re
import secrets
import threading
import time

_IDENTIFIER_RE = re.compile(r"[0-9a-f]{24}")

_PROCESS_UNIQUE = os.urandom(5)
_counter = secrets.randbelow(0xFFFFFF + 1)
_last_seconds = 0
_counter_lock = threading.Lock()


def is_valid_identifier(value) -> bool:
    """Return True iff ``value`` is exactly 24 characters of ``[0-9a-f]``."""
    return isinstance(value, str) and _IDENTIFIER_RE.fullmatch(value) is not None


def generate_identifier() -> str:
    global _counter, _last_seconds
    with _counter_lock:
        seconds = max(int(time.time()), _last_seconds)
        _counter = (_counter + 1) & 0xFFFFFF
        if _counter == 0 and seconds == _last_seconds:
            seconds += 1
        _last_seconds = seconds
        count = _counter
    raw = (
        seconds.to_bytes(4, "big")
        + _PROCESS_UNIQUE
        + count.to_bytes(3, "big")
    )
    return raw.hex()
