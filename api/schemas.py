from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class RecruitFiltersModel(BaseModel):
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    college: str = "all"
    top_n: int = 10


class MetaCollegesResponse(BaseModel):
    colleges: List[str] = Field(default_factory=list)


class MetaYearsResponse(BaseModel):
    min: int
    max: int
