import pandas as pd
import pytest

from core.aggregations import US_CENTER
from core.filters import RecruitFilters
from core.metrics_connections import compute_connections
from core.metrics_size import compute_size_graphs

COORDS = {"Ohio State": (40.0017, -83.0197)}


def test_connections_payload(sample_records: pd.DataFrame):
    filters = RecruitFilters(start_year=2023, end_year=2025)
    payload = compute_connections(filters, sample_records, resolve_college=COORDS.get)

    assert payload["filters"]["start_year"] == 2023
    assert payload["kpis"] == {"total_recruits": 4, "pathways": 2, "schools": 2, "colleges": 2}

    ohio, alabama = payload["pathways"]
    assert ohio["hs_name"] == "Central High"
    assert ohio["college_name"] == "Ohio State"
    assert (ohio["college_lat"], ohio["college_lon"]) == COORDS["Ohio State"]
    assert ohio["recruit_count"] == 2
    assert ohio["city_total_recruits"] == 2
    assert ohio["college_total_recruits"] == 2
    assert ohio["line_width"] == pytest.approx(8)
    assert ohio["line_opacity"] == pytest.approx(0.9)

    assert (alabama["college_lat"], alabama["college_lon"]) == US_CENTER

    assert [s["school"] for s in payload["top_schools"]] == ["Central High, OH", "Hoover High, AL"]
    south, west, north, east = payload["bounds"]
    assert south == pytest.approx(33.40)
    assert north == pytest.approx(40.0017)
    assert west == pytest.approx(-98.5795)
    assert east == pytest.approx(-83.0)
    assert "encoding" in payload["charts"]["top_schools"]


def test_connections_college_filter(sample_records: pd.DataFrame):
    filters = RecruitFilters(start_year=2023, end_year=2025, college="ala")
    payload = compute_connections(filters, sample_records)
    assert [p["college_name"] for p in payload["pathways"]] == ["Alabama"]
    assert payload["kpis"]["total_recruits"] == 2


def test_connections_without_matches(sample_records: pd.DataFrame):
    filters = RecruitFilters(start_year=2025, end_year=2023)
    payload = compute_connections(filters, sample_records)
    assert payload["pathways"] == []
    assert payload["bounds"] is None
    assert payload["kpis"]["total_recruits"] == 0


def test_size_graphs_cities(sample_records: pd.DataFrame):
    filters = RecruitFilters(start_year=2022, end_year=2025, top_n=2)
    payload = compute_size_graphs(filters, sample_records, view="cities")

    assert payload["view"] == "cities"
    assert payload["kpis"] == {"total_recruits": 5, "points": 3}
    labels = [p["label"] for p in payload["points"]]
    assert labels == ["Columbus, OH", "Hoover, AL", "Seattle, WA"]
    sizes = {p["label"]: p["size"] for p in payload["points"]}
    assert sizes["Columbus, OH"] == pytest.approx(50)
    assert sizes["Seattle, WA"] == pytest.approx(27.5)
    assert [(t["rank"], t["label"]) for t in payload["top"]] == [(1, "Columbus, OH"), (2, "Hoover, AL")]
    assert payload["bounds"] == pytest.approx([33.40, -122.33, 47.60, -83.0])


def test_size_graphs_colleges_drop_unlocated(sample_records: pd.DataFrame):
    filters = RecruitFilters(start_year=2022, end_year=2025)
    payload = compute_size_graphs(filters, sample_records, view="colleges", resolve_college=COORDS.get)

    assert [p["college"] for p in payload["points"]] == ["Ohio State"]
    point = payload["points"][0]
    assert (point["lat"], point["lon"]) == COORDS["Ohio State"]
    assert point["size"] == pytest.approx(60)


def test_size_graphs_empty_and_unknown_view(sample_records: pd.DataFrame):
    filters = RecruitFilters(start_year=2022, end_year=2025)
    payload = compute_size_graphs(filters, sample_records, view="colleges")
    assert payload["points"] == []
    assert payload["charts"] == {}

    with pytest.raises(ValueError):
        compute_size_graphs(filters, sample_records, view="states")  # type: ignore[arg-type]


def test_size_graphs_colleges_ignore_college_filter(sample_records: pd.DataFrame):
    filters = RecruitFilters(start_year=2022, end_year=2025, college="Michigan")
    colleges = compute_size_graphs(filters, sample_records, view="colleges", resolve_college=COORDS.get)
    assert colleges["kpis"]["total_recruits"] == 5
    assert [p["college"] for p in colleges["points"]] == ["Ohio State"]
    assert colleges["filters"]["college"] == "Michigan"

    cities = compute_size_graphs(filters, sample_records, view="cities")
    assert [p["label"] for p in cities["points"]] == ["Seattle, WA"]
