"""Raw scraped job schema returned by the page-fetching service."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ScrapedJob(BaseModel):
    """Unstructured job record as scraped from a page. Any field may be empty."""

    url: str = Field(default="", description="Page the record was scraped from (or links to)")
    title: str = ""
    company: str = ""
    location: str = ""
    description: str = ""
    salary: str = ""
    employment_type: str = ""
    posted_date_text: str = Field(default="", description="Raw posting-age text, e.g. '2 days ago'")

    @property
    def is_empty(self) -> bool:
        """True when there is neither a title nor a description to work from."""
        return not self.title.strip() and not self.description.strip()


class FetchOutcome(BaseModel):
    """Result of fetching one URL: a single posting, a list of posting links, or an error."""

    kind: Literal["single", "list"] = "single"
    job: Optional[ScrapedJob] = None
    jobs: List[ScrapedJob] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def single(cls, job: ScrapedJob) -> "FetchOutcome":
        return cls(kind="single", job=job)

    @classmethod
    def listing(cls, jobs: List[ScrapedJob]) -> "FetchOutcome":
        return cls(kind="list", jobs=jobs)

    @classmethod
    def failed(cls, error: str, kind: Literal["single", "list"] = "single") -> "FetchOutcome":
        return cls(kind=kind, error=error)


class ResolveError(BaseModel):
    """A URL that yielded zero jobs, with the reason."""

    url: str
    reason: str
