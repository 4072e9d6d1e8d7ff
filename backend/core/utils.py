"""
Shared utility helpers.

Pure functions — no I/O, no side effects.
"""

from __future__ import annotations

import base64
import math
from typing import Any, Dict, Iterable, List, Optional

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------

def rows_of(value: Any) -> List[Dict[str, Any]]:
    """Copy the dict rows out of a loosely typed ``data`` argument."""
    if not isinstance(value, (list, tuple)):
        return []
    return [dict(r) for r in value if isinstance(r, dict)]


def has_group(rows: Iterable[Dict[str, Any]]) -> bool:
    """True when any row carries a truthy ``group`` discriminator."""
    return any(r.get("group") for r in rows)


def style_of(args: Dict[str, Any]) -> Dict[str, Any]:
    style = args.get("style")
    return style if isinstance(style, dict) else {}


def to_number(value: Any, default: float = 0.0) -> float:
    """Best-effort float conversion; NaN/inf/garbage become *default*."""
    if isinstance(value, bool):
        return float(value)
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    return num if math.isfinite(num) else default


def fill_missing(target: Dict[str, Any], key: str, value: Any) -> None:
    """Set *key* only where the target has nothing yet; merge nested dicts."""
    current = target.get(key)
    if current is None:
        target[key] = value
    elif isinstance(current, dict) and isinstance(value, dict):
        for k, v in value.items():
            fill_missing(current, k, v)


# ---------------------------------------------------------------------------
# Image helpers
# ---------------------------------------------------------------------------

def is_png(data: Optional[bytes]) -> bool:
    return bool(data) and data[:4] == PNG_SIGNATURE[:4]


def to_data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
