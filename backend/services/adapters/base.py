"""Abstract base class for upstream record adapters."""

import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Any

from models.schemas.raw_record import RawRecord

logger = logging.getLogger(__name__)

_YEAR_RE = re.compile(r"(\d{4})")


class BaseSourceAdapter(ABC):
    """Base class for per-source payload adapters.

    Subclasses must implement:
        - source_name: identifier used in the adapter registry
        - adapt(payload): map one upstream payload to a RawRecord

    ``adapt`` must accept any subset of the upstream fields. Missing keys,
    ``None`` values and unexpected types map to empty values, never to an
    exception.
    """

    source_name: str = ""

    @abstractmethod
    def adapt(self, payload: dict[str, Any]) -> RawRecord:
        """Convert one upstream payload to the canonical raw record."""


# ---------------------------------------------------------------------------
# Lenient field readers shared by the adapters
# ---------------------------------------------------------------------------

def first(payload: Any, *keys: str) -> Any:
    """Value of the first key present and not None in a mapping."""
    if not isinstance(payload, dict):
        return None
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def as_list(value: Any) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return []


def as_dicts(value: Any) -> list[dict]:
    return [item for item in as_list(value) if isinstance(item, dict)]


def as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "si", "sí", "yes", "x")
    return False


def as_optional_bool(value: Any) -> bool | None:
    return None if value is None else as_bool(value)


def as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if isinstance(value, str):
        cleaned = value.replace(",", "").replace("S/", "").strip()
        try:
            number = float(cleaned)
        except ValueError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    return 0.0


def as_count(value: Any) -> int:
    return max(0, int(as_float(value)))


def parse_year(value: Any) -> int | None:
    """Year out of an int or the first four digits of a date string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 1000 <= value <= 9999 else None
    if isinstance(value, float):
        return parse_year(int(value)) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _YEAR_RE.search(value)
        if match:
            return int(match.group(1))
    return None
