from __future__ import annotations

import logging
import math
from typing import Literal, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import MetaCollegesResponse, MetaYearsResponse, RecruitFiltersModel
from core.aggregations import (
    aggregate_cities,
    aggregate_colleges,
    aggregate_pathways,
    filter_records,
    unique_colleges,
    year_bounds,
)
from core.data import (
    CollegeCoords,
    LoadError,
    RecruitStore,
    college_resolver,
    load_college_coords,
)
from core.filters import RecruitFilters, normalize_filters
from core.metrics_connections import compute_connections
from core.metrics_size import compute_size_graphs


logger = logging.getLogger(__name__)

_EXPORTS = {
    "pathways": aggregate_pathways,
    "cities": aggregate_cities,
    "colleges": aggregate_colleges,
}


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception, *, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _filters_from_model(model: RecruitFiltersModel, records: pd.DataFrame) -> RecruitFilters:
    return normalize_filters(model.model_dump(), bounds=year_bounds(records))


def create_app(
    store: Optional[RecruitStore] = None,
    college_coords: Optional[CollegeCoords] = None,
) -> FastAPI:
    app = FastAPI(title="Recruiting Pathways API", version="0.1.0")
    app.state.store = store or RecruitStore()
    app.state.college_coords = college_coords

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _resolver(request: Request):
        coords = request.app.state.college_coords
        if coords is None:
            coords = request.app.state.college_coords = load_college_coords()
        return college_resolver(coords)

    @app.get("/meta/colleges")
    def meta_colleges(request: Request):
        try:
            records = request.app.state.store.load()
            return _json(MetaCollegesResponse(colleges=unique_colleges(records)).model_dump())
        except LoadError as exc:
            logger.exception("meta_colleges failed to load data")
            return _error(exc, status_code=503)
        except Exception as exc:
            logger.exception("meta_colleges failed")
            return _error(exc)

    @app.get("/meta/years")
    def meta_years(request: Request):
        try:
            records = request.app.state.store.load()
            return _json(MetaYearsResponse(**year_bounds(records)).model_dump())
        except LoadError as exc:
            logger.exception("meta_years failed to load data")
            return _error(exc, status_code=503)
        except Exception as exc:
            logger.exception("meta_years failed")
            return _error(exc)

    @app.post("/connections")
    def connections(request: Request, filters: RecruitFiltersModel):
        try:
            records = request.app.state.store.load()
            f = _filters_from_model(filters, records)
            return _json(compute_connections(f, records, resolve_college=_resolver(request)))
        except LoadError as exc:
            logger.exception("connections failed to load data")
            return _error(exc, status_code=503)
        except Exception as exc:
            logger.exception("connections failed")
            return _error(exc)

    @app.post("/size-graphs")
    def size_graphs(
        request: Request,
        filters: RecruitFiltersModel,
        view: Literal["cities", "colleges"] = Query(default="cities"),
    ):
        try:
            records = request.app.state.store.load()
            f = _filters_from_model(filters, records)
            return _json(compute_size_graphs(f, records, view=view, resolve_college=_resolver(request)))
        except LoadError as exc:
            logger.exception("size_graphs failed to load data")
            return _error(exc, status_code=503)
        except Exception as exc:
            logger.exception("size_graphs failed")
            return _error(exc)

    @app.post("/export/{view}")
    def export_view(request: Request, view: str, filters: RecruitFiltersModel):
        try:
            records = request.app.state.store.load()
        except LoadError as exc:
            logger.exception("export failed to load data")
            return _error(exc, status_code=503)

        f = _filters_from_model(filters, records)
        aggregate = _EXPORTS.get(view)
        if aggregate is None:
            export_df = pd.DataFrame()
        else:
            export_df = aggregate(filter_records(records, f.start_year, f.end_year, f.college))

        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        return Response(
            content=csv_bytes,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={view}.csv"},
        )

    return app


app = create_app()
