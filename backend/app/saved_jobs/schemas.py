"""
Saved job Pydantic schemas
"""
from typing import List, Optional
from pydantic import Field

from app.core.schemas import CamelModel


class SavedJobRequest(CamelModel):
    job_id: str = Field(..., min_length=1)


class SavedJobItem(CamelModel):
    id: str
    job_id: str
    job_title: str
    company: str
    location: str
    work_mode: str
    job_type: str
    status: str
    applied: bool
    saved_at: str
    salary_range: Optional[str] = None


class SavedJobsStats(CamelModel):
    total: int
    open: int
    applied: int


class SavedJobsResponse(CamelModel):
    stats: SavedJobsStats
    jobs: List[SavedJobItem]
