"""Search result schema returned by the web search provider."""

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """One organic or jobs-box hit from the search engine."""

    title: str = Field(default="", description="Result headline")
    snippet: str = Field(default="", description="Result snippet text")
    link: str = Field(..., description="URL of the result page")
