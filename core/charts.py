from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def top_count_bar(df: pd.DataFrame, *, label: str, title: str) -> Dict[str, Any]:
    """Horizontal bar chart of ``count`` per ``label``, largest first."""
    chart = (
        alt.Chart(df[[label, "count"]])
        .mark_bar()
        .encode(
            x=alt.X("count:Q", title="Recruits", axis=alt.Axis(format="d", tickMinStep=1)),
            y=alt.Y(f"{label}:N", title=title, sort="-x"),
            tooltip=[alt.Tooltip(f"{label}:N", title=title), alt.Tooltip("count:Q", title="Recruits")],
        )
    )
    return to_vega_spec(chart)
