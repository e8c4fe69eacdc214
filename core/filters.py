from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

ALL_COLLEGES = "all"
DEFAULT_YEAR_RANGE = {"min": 2023, "max": 2025}


@dataclass(frozen=True)
class RecruitFilters:
    start_year: int = DEFAULT_YEAR_RANGE["min"]
    end_year: int = DEFAULT_YEAR_RANGE["max"]
    college: str = ALL_COLLEGES
    top_n: int = 10


def _as_int(value: object, fallback: int) -> int:
    if value is None or value == "":
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def normalize_filters(raw: dict, *, bounds: Optional[Dict[str, int]] = None) -> RecruitFilters:
    bounds = bounds or DEFAULT_YEAR_RANGE

    # An inverted range is kept as-is; filtering it yields no rows.
    start_year = _as_int(raw.get("start_year"), bounds["min"])
    end_year = _as_int(raw.get("end_year"), bounds["max"])

    college = str(raw.get("college") or "").strip() or ALL_COLLEGES

    top_n = _as_int(raw.get("top_n"), 10)
    top_n = max(1, min(50, top_n))

    return RecruitFilters(
        start_year=start_year,
        end_year=end_year,
        college=college,
        top_n=top_n,
    )
