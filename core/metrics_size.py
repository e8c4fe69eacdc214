from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Literal, Optional

import pandas as pd

from core.aggregations import aggregate_cities, aggregate_colleges, filter_records, top_n, with_college_coords
from core.charts import top_count_bar
from core.data import CollegeResolver
from core.filters import ALL_COLLEGES, RecruitFilters
from core.geo import circle_size, data_bounds

SizeView = Literal["cities", "colleges"]

# (min, max) marker size per view
_SIZE_RANGES = {"cities": (5, 50), "colleges": (8, 60)}


def _city_points(filtered: pd.DataFrame) -> pd.DataFrame:
    cities = aggregate_cities(filtered)
    cities["label"] = cities["city"].astype(str) + ", " + cities["state"].astype(str)
    return cities


def _college_points(filtered: pd.DataFrame, resolve_college: Optional[CollegeResolver]) -> pd.DataFrame:
    # Colleges without known coordinates cannot be placed on the map.
    colleges = with_college_coords(aggregate_colleges(filtered), resolve_college, default=None)
    colleges = colleges.rename(columns={"college_lat": "lat", "college_lon": "lon"})
    colleges["label"] = colleges["college"].astype(str)
    return colleges


def compute_size_graphs(
    filters: RecruitFilters,
    records: pd.DataFrame,
    *,
    view: SizeView = "cities",
    resolve_college: Optional[CollegeResolver] = None,
) -> Dict[str, Any]:
    if view not in _SIZE_RANGES:
        raise ValueError(f"Unknown size view {view!r}, expected one of {sorted(_SIZE_RANGES)}")

    # The colleges view always maps every college; the college filter only narrows cities.
    college = filters.college if view == "cities" else ALL_COLLEGES
    filtered = filter_records(records, filters.start_year, filters.end_year, college)
    if view == "cities":
        points = _city_points(filtered)
    else:
        points = _college_points(filtered, resolve_college)

    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "view": view,
        "kpis": {"total_recruits": int(len(filtered)), "points": int(len(points))},
        "points": [],
        "top": [],
        "bounds": None,
        "charts": {},
    }
    if points.empty:
        return payload

    min_size, max_size = _SIZE_RANGES[view]
    max_count = int(points["count"].max())
    points["size"] = [circle_size(int(c), max_count, min_size, max_size) for c in points["count"]]

    records_out = points.to_dict(orient="records")
    top = top_n(points, filters.top_n)
    payload["points"] = records_out
    payload["top"] = top.to_dict(orient="records")
    payload["bounds"] = data_bounds(records_out)
    payload["charts"] = {
        "top": top_count_bar(top, label="label", title="City" if view == "cities" else "College")
    }
    return payload
