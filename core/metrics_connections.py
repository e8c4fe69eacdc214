from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.aggregations import (
    aggregate_cities,
    aggregate_colleges,
    aggregate_pathways,
    filter_records,
    top_schools,
    with_college_coords,
)
from core.charts import top_count_bar
from core.data import CollegeResolver
from core.filters import RecruitFilters
from core.geo import data_bounds, line_opacity, line_width


def _empty_payload(filters: RecruitFilters) -> Dict[str, Any]:
    return {
        "filters": asdict(filters),
        "kpis": {"total_recruits": 0, "pathways": 0, "schools": 0, "colleges": 0},
        "pathways": [],
        "top_schools": [],
        "bounds": None,
        "charts": {},
    }


def compute_connections(
    filters: RecruitFilters,
    records: pd.DataFrame,
    *,
    resolve_college: Optional[CollegeResolver] = None,
) -> Dict[str, Any]:
    """High school -> college pathway lines for the connections map."""
    filtered = filter_records(records, filters.start_year, filters.end_year, filters.college)
    pathways = aggregate_pathways(filtered)
    if pathways.empty:
        return _empty_payload(filters)

    cities = aggregate_cities(filtered)
    city_totals = {(c, s): int(n) for c, s, n in zip(cities["city"], cities["state"], cities["count"])}
    colleges = aggregate_colleges(filtered)
    college_totals = {c: int(n) for c, n in zip(colleges["college"], colleges["count"])}

    pathways = with_college_coords(pathways, resolve_college)
    max_count = int(pathways["count"].max())

    lines: List[Dict[str, Any]] = []
    for p in pathways.to_dict(orient="records"):
        count = int(p["count"])
        lines.append(
            {
                "hs_name": p["school"],
                "hs_lat": float(p["lat"]),
                "hs_lon": float(p["lon"]),
                "hs_city": p["city"],
                "hs_state": p["state"],
                "college_name": p["college"],
                "college_lat": float(p["college_lat"]),
                "college_lon": float(p["college_lon"]),
                "recruit_count": count,
                "city_total_recruits": city_totals.get((p["city"], p["state"]), 0),
                "college_total_recruits": college_totals.get(p["college"], 0),
                "line_width": line_width(count, max_count),
                "line_opacity": line_opacity(count, max_count),
            }
        )

    endpoints = [{"lat": line["hs_lat"], "lon": line["hs_lon"]} for line in lines]
    endpoints += [{"lat": line["college_lat"], "lon": line["college_lon"]} for line in lines]

    schools = top_schools(pathways, filters.top_n)
    return {
        "filters": asdict(filters),
        "kpis": {
            "total_recruits": int(len(filtered)),
            "pathways": len(lines),
            "schools": int(pathways["school"].nunique()),
            "colleges": len(college_totals),
        },
        "pathways": lines,
        "top_schools": schools.to_dict(orient="records"),
        "bounds": data_bounds(endpoints),
        "charts": {"top_schools": top_count_bar(schools, label="school", title="High School")},
    }
