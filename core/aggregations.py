from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from core.data import CollegeResolver
from core.filters import ALL_COLLEGES, DEFAULT_YEAR_RANGE


logger = logging.getLogger(__name__)

MAX_CLASS_YEAR = 2030
US_COUNTRY = "USA"
US_CENTER: Tuple[float, float] = (39.8283, -98.5795)

PATHWAY_COLUMNS = ["school", "college", "city", "state", "lat", "lon", "count"]
CITY_COLUMNS = ["city", "state", "lat", "lon", "count"]
COLLEGE_COLUMNS = ["college", "count"]

_RENAMES = {
    "committedTo": "college",
    "stateProvince": "state",
    "latitude": "lat",
    "longitude": "lon",
}


def unique_colleges(records: pd.DataFrame) -> List[str]:
    if records.empty or "committedTo" not in records.columns:
        return []
    return sorted(records["committedTo"].astype(str).unique().tolist())


def year_bounds(records: pd.DataFrame) -> Dict[str, int]:
    """Min/max class year in (0, 2030), or the default window when none qualify."""
    if records.empty or "classYear" not in records.columns:
        return dict(DEFAULT_YEAR_RANGE)
    years = pd.to_numeric(records["classYear"], errors="coerce")
    years = years[(years > 0) & (years < MAX_CLASS_YEAR)]
    if years.empty:
        return dict(DEFAULT_YEAR_RANGE)
    return {"min": int(years.min()), "max": int(years.max())}


def filter_records(
    records: pd.DataFrame,
    start_year: int,
    end_year: int,
    college: str = ALL_COLLEGES,
) -> pd.DataFrame:
    """Rows in [start_year, end_year] with coordinates, in the USA.

    A specific ``college`` matches any ``committedTo`` containing it,
    case-insensitively, so "Ohio" also selects "Ohio State".
    """
    if records.empty:
        return records.iloc[0:0]

    mask = (
        (records["classYear"] >= start_year)
        & (records["classYear"] <= end_year)
        & records["latitude"].notna()
        & records["longitude"].notna()
        & (records["country"] == US_COUNTRY)
    )
    logger.debug("After year and location filter: %d of %d rows", int(mask.sum()), len(records))

    if college != ALL_COLLEGES:
        mask &= records["committedTo"].str.lower().str.contains(college.lower(), regex=False, na=False)
        logger.debug("After college filter (%s): %d rows", college, int(mask.sum()))

    return records[mask]


def _first_seen_counts(records: pd.DataFrame, keys: Sequence[str], columns: Sequence[str]) -> pd.DataFrame:
    if records.empty:
        return pd.DataFrame(columns=list(columns))
    keys = list(keys)
    counts = records.groupby(keys, sort=False, dropna=False)[keys[0]].transform("size")
    firsts = records.assign(count=counts).drop_duplicates(subset=keys, keep="first")
    out = firsts.rename(columns=_RENAMES)[list(columns)].reset_index(drop=True)
    out["count"] = out["count"].astype(int)
    return out


def aggregate_pathways(filtered: pd.DataFrame) -> pd.DataFrame:
    return _first_seen_counts(filtered, ["school", "committedTo"], PATHWAY_COLUMNS)


def aggregate_cities(filtered: pd.DataFrame) -> pd.DataFrame:
    return _first_seen_counts(filtered, ["city", "stateProvince"], CITY_COLUMNS)


def aggregate_colleges(filtered: pd.DataFrame) -> pd.DataFrame:
    return _first_seen_counts(filtered, ["committedTo"], COLLEGE_COLUMNS)


def top_n(aggregate: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    if aggregate.empty:
        return aggregate.assign(rank=pd.Series(dtype=int))
    ranked = aggregate.sort_values("count", ascending=False, kind="stable").head(n).reset_index(drop=True)
    ranked.insert(0, "rank", ranked.index + 1)
    return ranked


def top_schools(pathways: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """Sum pathway counts per "school, state" label."""
    if pathways.empty:
        return pd.DataFrame(columns=["school", "count"])
    labels = pathways["school"].astype(str) + ", " + pathways["state"].astype(str)
    totals = (
        pathways.assign(school=labels)
        .groupby("school", sort=False)["count"]
        .sum()
        .reset_index()
        .sort_values("count", ascending=False, kind="stable")
        .head(n)
        .reset_index(drop=True)
    )
    totals["count"] = totals["count"].astype(int)
    return totals


def with_college_coords(
    aggregate: pd.DataFrame,
    resolve_college: Optional[CollegeResolver],
    *,
    default: Optional[Tuple[float, float]] = US_CENTER,
) -> pd.DataFrame:
    """Attach ``college_lat``/``college_lon`` from the resolver.

    Unresolved colleges get ``default``; with ``default=None`` they are dropped.
    """
    out = aggregate.copy()
    if out.empty:
        out["college_lat"] = pd.Series(dtype=float)
        out["college_lon"] = pd.Series(dtype=float)
        return out

    resolved = [resolve_college(c) if resolve_college else None for c in out["college"]]
    if default is None:
        keep = [coord is not None for coord in resolved]
        out = out[keep].reset_index(drop=True)
        resolved = [coord for coord in resolved if coord is not None]
    else:
        resolved = [coord if coord is not None else default for coord in resolved]

    out["college_lat"] = [float(lat) for lat, _ in resolved]
    out["college_lon"] = [float(lon) for _, lon in resolved]
    return out
