"""
Technician recommendations.

Each technician gets a score out of roughly 100:

    rating * 10                      (0-50)
    20 if available                  (0-20)
    min(review_count / 10, 15)       (0-15)
    completion_rate * 0.15           (0-15)

Missing, NaN or non-numeric inputs fall back to their defaults, so scoring
never fails on a half-filled profile.
"""

import math
from typing import Any, Iterable, List, Mapping, Optional

DEFAULT_RATING = 4.0
DEFAULT_REVIEW_COUNT = 0
DEFAULT_COMPLETION_RATE = 90.0


def _field(technician: Any, name: str) -> Any:
    if isinstance(technician, Mapping):
        return technician.get(name)
    return getattr(technician, name, None)


def _number(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


def score(technician: Any) -> float:
    rating = _number(_field(technician, "rating"), DEFAULT_RATING)
    review_count = _number(_field(technician, "review_count"), DEFAULT_REVIEW_COUNT)
    completion_rate = _number(_field(technician, "completion_rate"), DEFAULT_COMPLETION_RATE)
    # only an explicit False counts as unavailable
    available = _field(technician, "availability") is not False

    total = rating * 10
    if available:
        total += 20
    total += min(review_count / 10, 15)
    total += completion_rate * 0.15
    return total


def rank(technicians: Iterable[Any], limit: int = 3) -> List[Any]:
    """Return the top ``limit`` technicians, best first.

    ``sorted`` is stable, so equal scores keep their input order.
    """
    if limit <= 0:
        return []
    technicians = list(technicians)
    return sorted(technicians, key=score, reverse=True)[:limit]


def _matches(value: Any, needle: Optional[str]) -> bool:
    if not needle or not needle.strip():
        return True
    return needle.strip().lower() in str(value or "").lower()


def filter_technicians(
    technicians: Iterable[Any],
    service_type: Optional[str] = None,
    location: Optional[str] = None,
) -> List[Any]:
    """Case-insensitive substring search on service type and location."""
    return [
        t for t in technicians
        if _matches(_field(t, "service_type"), service_type) and _matches(_field(t, "location"), location)
    ]
