"""Record id generation."""

from __future__ import annotations

import secrets
import time

from autolot._constants import CATALOG_ID_PREFIX


def new_record_id(prefix: str = CATALOG_ID_PREFIX) -> str:
    """Return a new opaque id such as ``car_1771000000000_9f2c1a7e4b``.

    Epoch milliseconds plus 40 random bits; only uniqueness matters.
    """
    now_ms = int(time.time() * 1000)
    return f"{prefix}_{now_ms}_{secrets.token_hex(5)}"
