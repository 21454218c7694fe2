"""Structured search intent (refinements) shared by every pipeline stage."""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobgenie.config import DEFAULT_DATE_RANGE_DAYS

Seniority = Literal["intern", "junior", "mid", "senior", "lead"]
ContractType = Literal["full-time", "part-time", "contract", "freelance"]
SalaryType = Literal["hourly", "yearly"]

_SENIORITY_ALIASES = {
    "internship": "intern",
    "entry": "junior",
    "entry level": "junior",
    "entry-level": "junior",
    "jr": "junior",
    "middle": "mid",
    "mid-level": "mid",
    "intermediate": "mid",
    "sr": "senior",
    "principal": "lead",
    "staff": "lead",
    "manager": "lead",
}

_CONTRACT_ALIASES = {
    "full time": "full-time",
    "fulltime": "full-time",
    "permanent": "full-time",
    "part time": "part-time",
    "parttime": "part-time",
    "contractor": "contract",
    "temporary": "contract",
    "freelancer": "freelance",
}


def _clean_str_list(value: Any) -> List[str]:
    """Accept a list or comma-separated string; drop blanks and non-strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple, set)):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class LocationPreference(_FrozenModel):
    """Where the user wants to work."""

    city: Optional[str] = Field(default=None, description="City or region name")
    remote: Optional[bool] = Field(default=None, description="Remote work acceptable")
    hybrid: Optional[bool] = Field(default=None, description="Hybrid work acceptable")
    radius: Optional[float] = Field(default=None, description="Search radius around the city")
    timezone: Optional[str] = Field(default=None, description="Preferred timezone for remote roles")

    @field_validator("city", mode="before")
    @classmethod
    def _blank_city(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class SalaryPreference(_FrozenModel):
    """Salary expectations."""

    min: Optional[float] = None
    max: Optional[float] = None
    currency: Optional[str] = None
    type: Optional[SalaryType] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def _zero_is_unset(cls, v: Any) -> Optional[float]:
        # LLM templates often echo 0 for "unknown"
        if v in (None, "", 0, "0"):
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> Optional[str]:
        key = str(v or "").strip().lower()
        if key in ("hourly", "hour", "per hour"):
            return "hourly"
        if key in ("yearly", "annual", "annually", "year", "per year"):
            return "yearly"
        return None


class Eligibility(_FrozenModel):
    visa: Optional[str] = None
    relocation: Optional[bool] = None
    languages: List[str] = Field(default_factory=lambda: ["English"])

    @field_validator("languages", mode="before")
    @classmethod
    def _languages(cls, v: Any) -> List[str]:
        return _clean_str_list(v) or ["English"]


class Exclusions(_FrozenModel):
    companies: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    agencies: bool = False

    @field_validator("companies", "keywords", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return _clean_str_list(v)

    @field_validator("agencies", mode="before")
    @classmethod
    def _agencies(cls, v: Any) -> bool:
        return bool(v)


class SearchRefinements(_FrozenModel):
    """Normalized user job-search intent. Immutable for the duration of one pipeline run."""

    job_titles: List[str] = Field(default_factory=list, description="Target role names")
    synonyms: List[str] = Field(default_factory=list, description="Alternative names for the target roles")
    location: LocationPreference = Field(default_factory=LocationPreference)
    seniority: Seniority = "mid"
    must_have_skills: List[str] = Field(default_factory=list)
    nice_to_have_skills: List[str] = Field(default_factory=list)
    salary: SalaryPreference = Field(default_factory=SalaryPreference)
    contract_type: ContractType = "full-time"
    eligibility: Eligibility = Field(default_factory=Eligibility)
    date_range: int = Field(default=DEFAULT_DATE_RANGE_DAYS, ge=0, description="Max posting age in days")
    exclusions: Exclusions = Field(default_factory=Exclusions)
    target_companies: List[str] = Field(default_factory=list)

    @field_validator(
        "job_titles", "synonyms", "must_have_skills", "nice_to_have_skills", "target_companies",
        mode="before",
    )
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return _clean_str_list(v)

    @field_validator("seniority", mode="before")
    @classmethod
    def _coerce_seniority(cls, v: Any) -> str:
        key = str(v or "").strip().lower()
        key = _SENIORITY_ALIASES.get(key, key)
        return key if key in ("intern", "junior", "mid", "senior", "lead") else "mid"

    @field_validator("contract_type", mode="before")
    @classmethod
    def _coerce_contract(cls, v: Any) -> str:
        key = str(v or "").strip().lower()
        key = _CONTRACT_ALIASES.get(key, key)
        return key if key in ("full-time", "part-time", "contract", "freelance") else "full-time"

    @field_validator("date_range", mode="before")
    @classmethod
    def _coerce_date_range(cls, v: Any) -> Any:
        if v is None or v == "":
            return DEFAULT_DATE_RANGE_DAYS
        return v

    @field_validator("location", "salary", "eligibility", "exclusions", mode="before")
    @classmethod
    def _none_to_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def all_titles(self) -> List[str]:
        """Job titles followed by synonyms, case-insensitively deduplicated."""
        seen: set[str] = set()
        out: List[str] = []
        for t in list(self.job_titles) + list(self.synonyms):
            key = t.lower()
            if key not in seen:
                seen.add(key)
                out.append(t)
        return out


def default_refinements(**overrides: Any) -> SearchRefinements:
    """Generic refinements used when intent cannot be determined: remote, mid-level, full-time."""
    data: dict = {"location": {"remote": True}, "seniority": "mid"}
    data.update(overrides)
    return SearchRefinements.model_validate(data)
