"""Identifier helpers for records and pipeline runs."""

from __future__ import annotations

import itertools
import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
_SEQUENCE = itertools.count()


def _base36(value: int, width: int = 0) -> str:
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits)).rjust(width, "0") or "0"


def generate_cuid(length: int = 24) -> str:
    """Sortable lowercase identifier: `c` + base36 millis + counter + random tail."""
    millis = _base36(int(time.time() * 1000))
    counter = _base36(next(_SEQUENCE) % 36**4, width=4)
    tail_len = max(length - 1 - len(millis) - len(counter), 4)
    tail = "".join(secrets.choice(_ALPHABET) for _ in range(tail_len))
    return f"c{millis}{counter}{tail}"[:length]


def generate_run_id() -> str:
    """Identifier for one pipeline run, shared by its progress events and records."""
    return f"run_{generate_cuid()}"
