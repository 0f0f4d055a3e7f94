from __future__ import annotations

from pydantic import BaseModel, Field

from ..scoring.categories import Category, OutputMode
from ..scoring.models import PaginationParams, ScoringContext


class ScoringRequest(BaseModel):
    city_id: str = Field(..., min_length=1)
    category: Category
    context: ScoringContext = Field(default_factory=ScoringContext)
    pagination: PaginationParams = Field(default_factory=PaginationParams)


class CategoryInfo(BaseModel):
    category: Category
    output_mode: OutputMode
    threshold: float
    default_page_size: int | None = None
    top_n: int | None = None
    base_weights: dict[str, float]
    tables_version: str
