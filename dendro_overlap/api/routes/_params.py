"""Query/body parameter parsing shared by the blueprints."""
from __future__ import annotations

import math
from typing import Any, Optional


class BadRequest(ValueError):
    """Raised for a malformed request parameter; routes answer 400."""


def parse_threshold(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        raise BadRequest("threshold is required")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise BadRequest(f"threshold must be a number; received {raw!r}") from exc
    if not math.isfinite(value):
        raise BadRequest("threshold must be finite")
    return value


def parse_index(raw: Any, name: str) -> int:
    if raw is None:
        raise BadRequest(f"{name} is required")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise BadRequest(f"{name} must be an integer; received {raw!r}") from exc
    if value < 0:
        raise BadRequest(f"{name} must be non-negative")
    return value


def parse_limit(raw: Optional[str], default: int) -> int:
    if raw is None or raw == "":
        return default
    value = parse_index(raw, "limit")
    if value == 0:
        raise BadRequest("limit must be positive")
    return value
