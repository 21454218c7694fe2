"""Canonical job listing schemas produced by the Structuring Engine."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobgenie.config import DEFAULT_CURRENCY

MAX_LIST_ITEMS = 5


class CompanyInfo(BaseModel):
    about: Optional[str] = None
    size: Optional[str] = None
    industry: Optional[str] = None


class JobListing(BaseModel):
    """Normalized job posting. Never mutated after the pipeline completes."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique per pipeline run")
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: str = ""
    description: str = ""
    salary: Optional[str] = None
    currency: Optional[str] = DEFAULT_CURRENCY
    employment_type: str = "Full-time"
    workplace_type: str = "Onsite"
    requirements: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    posted_date: datetime
    source_url: str
    company_info: Optional[CompanyInfo] = None

    @field_validator("requirements", "responsibilities", mode="before")
    @classmethod
    def _cap_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        items = [str(i).strip() for i in v if i is not None and str(i).strip()]
        return items[:MAX_LIST_ITEMS]


class EnhancedJobListing(JobListing):
    """Job listing enriched with match information by the Ranking Engine."""

    match_score: int = Field(default=70, ge=0, le=100)
    match_reasons: List[str] = Field(default_factory=list, max_length=3)
    missing_skills: List[str] = Field(default_factory=list)
