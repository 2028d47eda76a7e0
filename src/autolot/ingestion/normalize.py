"""Normalization helpers.

Centralizes defensive parsing of loosely typed listing data.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

_NUMERIC_NOISE = re.compile(r"[\s,$€£]|USD|mi(?:les)?\.?$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = _NUMERIC_NOISE.sub("", value.strip())
        if value in ("", "--"):
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def non_negative_or_zero(value: Any) -> int:
    parsed = safe_int(value)
    if parsed is None:
        return 0
    return 0 if parsed < 0 else parsed


def clean_text(value: str) -> str:
    """Collapse runs of whitespace and strip."""
    return _WHITESPACE.sub(" ", value).strip()


def normalize_vin(value: Any) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", "", str(value)).upper()


def unique_texts(values: Iterable[Any]) -> list[str]:
    """Clean *values*, dropping blanks and repeats while keeping order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value is None:
            continue
        text = clean_text(str(value))
        if not text or text in seen:
            continue
        seen.add(text)
        result.append(text)
    return result
