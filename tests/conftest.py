from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from core.data import normalize_records


SAMPLE_CSV = """year,name,school,committedTo,city,stateProvince,country,class_year,latitude,longitude,ranking,height,weight,stars,rating
2024,Alpha One,Central High,Ohio State,Columbus,OH,USA,2024,39.96,-83.00,10,74,210,4,0.95
2024,Beta Two,Central High,Ohio State,Columbus,OH,USA,2024,39.96,-83.00,25,72,190,4,0.91
2023,Gamma Three,Hoover High,Alabama,Hoover,AL,USA,2023,33.40,-86.81,3,75,230,5,0.99
2025,Delta Four,Hoover High,Alabama,Hoover,AL,USA,2025,33.40,-86.81,n/a,,,,
2024,Echo Five,Toronto Prep,Ohio State,Toronto,ON,CAN,2024,43.65,-79.38,40,73,200,3,0.88
2022,Foxtrot Six,Lakeside,Michigan,Seattle,WA,USA,2022,47.60,-122.33,55,76,240,3,0.87
2024,Golf Seven,,Georgia,Atlanta,GA,USA,2024,33.75,-84.39,5,74,215,5,0.98
2024,Hotel Eight,Westlake,,Austin,TX,USA,2024,30.27,-97.74,6,74,215,5,0.98
2024,India Nine,Westlake,Texas,Austin,TX,USA,2024,,,7,74,215,5,0.98
2024,Juliet Ten,Westlake,Texas,Austin,TX,USA,0,30.27,-97.74,8,74,215,5,0.98
"""


def recruit(**overrides) -> dict:
    """Raw CSV-shaped row; keys use the source header names."""
    row = {
        "year": "2024",
        "name": "Player",
        "school": "A",
        "committedTo": "Ohio State",
        "city": "X",
        "stateProvince": "OH",
        "country": "USA",
        "class_year": "2024",
        "latitude": "1",
        "longitude": "1",
    }
    row.update({k: str(v) for k, v in overrides.items()})
    return row


def make_records(*rows: dict) -> pd.DataFrame:
    return normalize_records(pd.DataFrame(list(rows)))


@pytest.fixture
def sample_csv(tmp_path: Path) -> Path:
    path = tmp_path / "recruiting_data.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def sample_records(sample_csv: Path) -> pd.DataFrame:
    from core.data import read_recruiting_data

    return read_recruiting_data(sample_csv)
