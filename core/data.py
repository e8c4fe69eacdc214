from __future__ import annotations

import json
import logging
import re
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

import pandas as pd


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
RECRUITING_CSV = DATA_DIR / "recruiting_data.csv"
GEOCODE_CACHE = DATA_DIR / "geocode_cache.json"

# Exact header matches that bypass the lower-case/whitespace normalization.
HEADER_OVERRIDES = {
    "class_year": "classYear",
    "stateProvince": "stateProvince",
    "committedTo": "committedTo",
}

STRING_COLUMNS = ["name", "school", "committedTo", "city", "stateProvince", "country"]
INT_COLUMNS = ["year", "classYear", "ranking", "stars"]
FLOAT_COLUMNS = ["rating", "height", "weight"]
COORD_COLUMNS = ["latitude", "longitude"]
REQUIRED_COLUMNS = ["classYear", "committedTo", "school", "latitude", "longitude"]

Source = Union[str, Path]
CollegeCoords = Dict[str, Tuple[float, float]]
CollegeResolver = Callable[[str], Optional[Tuple[float, float]]]


class LoadError(RuntimeError):
    """Raised when the recruiting source cannot be read as tabular data."""

    def __init__(self, message: str, *, source: Optional[Source] = None) -> None:
        super().__init__(message)
        self.source = source


def normalize_header(header: str) -> str:
    if header in HEADER_OVERRIDES:
        return HEADER_OVERRIDES[header]
    return re.sub(r"\s+", "", str(header).lower())


def drop_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, ~df.columns.duplicated()]


# Leading-number prefixes: "2024-25" reads as 2024, "33.40N" as 33.40.
_INT_PREFIX = r"^\s*([+-]?\d+)"
_FLOAT_PREFIX = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"


def _leading_number(series: pd.Series, pattern: str) -> pd.Series:
    prefix = series.fillna("").astype(str).str.extract(pattern, expand=False)
    return pd.to_numeric(prefix, errors="coerce").astype(float)


def parse_int_column(series: pd.Series) -> pd.Series:
    """Parse the leading integer of each cell; cells without one become 0."""
    values = _leading_number(series, _INT_PREFIX)
    return values.fillna(0).astype(int)


def parse_float_column(series: pd.Series) -> pd.Series:
    return _leading_number(series, _FLOAT_PREFIX).fillna(0.0)


def parse_coord_column(series: pd.Series) -> pd.Series:
    """Parse the leading number of each cell; unparsable or zero cells become NaN."""
    values = _leading_number(series, _FLOAT_PREFIX)
    return values.where(values != 0)


def normalize_records(raw: pd.DataFrame) -> pd.DataFrame:
    """Rename headers, coerce types and apply the admission rule."""
    df = drop_duplicate_columns(raw.rename(columns=normalize_header)).copy()

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise LoadError(f"Recruiting data is missing required columns: {', '.join(missing)}")

    for col in STRING_COLUMNS + INT_COLUMNS + FLOAT_COLUMNS:
        if col not in df.columns:
            df[col] = ""
    for col in STRING_COLUMNS:
        df[col] = df[col].fillna("").astype(str)

    present = (
        (df["classYear"].fillna("").astype(str) != "")
        & (df["committedTo"] != "")
        & (df["school"] != "")
    )

    for col in INT_COLUMNS:
        df[col] = parse_int_column(df[col])
    for col in FLOAT_COLUMNS:
        df[col] = parse_float_column(df[col])
    for col in COORD_COLUMNS:
        df[col] = parse_coord_column(df[col])

    admitted = present & df["latitude"].notna() & df["longitude"].notna() & (df["classYear"] > 0)
    return df[admitted].reset_index(drop=True)


def read_recruiting_data(source: Source) -> pd.DataFrame:
    """Read the recruiting CSV (path or URL) into a normalized record frame."""
    try:
        raw = pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (OSError, ValueError) as exc:
        raise LoadError(f"Unable to read recruiting data from {source}: {exc}", source=source) from exc

    try:
        records = normalize_records(raw)
    except LoadError as exc:
        exc.source = source
        raise

    logger.info(
        "Loaded %d recruits from %s (%d rows dropped by admission rule)",
        len(records),
        source,
        len(raw) - len(records),
    )
    return records


class RecruitStore:
    """Load-once holder for the normalized recruit records.

    The first ``load()`` reads the source; callers arriving while that read is
    in flight wait on the same pending result instead of reading again. Once
    loaded, the frame is returned as-is until ``reset()``. A failed load is
    not cached, so the next call retries.

    The returned frame is shared between callers and must be treated as
    read-only.
    """

    def __init__(
        self,
        source: Source = RECRUITING_CSV,
        *,
        reader: Callable[[Source], pd.DataFrame] = read_recruiting_data,
    ) -> None:
        self.source = source
        self._reader = reader
        self._lock = threading.Lock()
        self._records: Optional[pd.DataFrame] = None
        self._pending: Optional[Future] = None
        self._generation = 0

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def load(self) -> pd.DataFrame:
        records = self._records
        if records is not None:
            return records

        with self._lock:
            if self._records is not None:
                return self._records
            pending = self._pending
            owner = pending is None
            if owner:
                pending = self._pending = Future()
                generation = self._generation

        if not owner:
            return pending.result()

        try:
            records = self._reader(self.source)
        except Exception as exc:
            with self._lock:
                if self._pending is pending:
                    self._pending = None
            pending.set_exception(exc)
            raise

        with self._lock:
            # A reset() during the read makes this result stale for the store.
            if self._generation == generation:
                self._records = records
                self._pending = None
        pending.set_result(records)
        return records

    def reset(self) -> None:
        with self._lock:
            self._generation += 1
            self._records = None
            self._pending = None


def load_college_coords(path: Source = GEOCODE_CACHE) -> CollegeCoords:
    """Read the geocode cache ``{college: {latitude, longitude}}``.

    The lookup is optional, so an unreadable file yields an empty mapping.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Unable to load college coordinates from %s: %s", path, exc)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring college coordinates in %s: expected an object", path)
        return {}

    coords: CollegeCoords = {}
    for college, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        lat, lon = entry.get("latitude"), entry.get("longitude")
        if not lat or not lon:
            continue
        try:
            coords[str(college)] = (float(lat), float(lon))
        except (TypeError, ValueError):
            continue
    return coords


def college_resolver(coords: CollegeCoords) -> CollegeResolver:
    return coords.get
