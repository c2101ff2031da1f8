"""
Record id generation.

Ids look like ``pet_1718000000000_42_9f1c2a7b``: a prefix naming the
collection, the creation time in epoch milliseconds, a process-local sequence
number and four bytes of randomness. The timestamp alone collides when records
are created within the same millisecond; the sequence rules that out within a
process and the random suffix across processes.
"""

import itertools
import secrets
import threading

from .datetime_utils import get_current_utc

_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def _next_sequence() -> int:
    with _sequence_lock:
        return next(_sequence)


def generate_id(prefix: str = "") -> str:
    """
    Generate a new unique record id.

    Args:
        prefix: Optional collection prefix such as ``"pet"`` or ``"health"``

    Returns:
        A new id string
    """
    timestamp_ms = int(get_current_utc().timestamp() * 1000)
    parts = [str(timestamp_ms), str(_next_sequence()), secrets.token_hex(4)]
    if prefix:
        parts.insert(0, prefix)
    return "_".join(parts)
