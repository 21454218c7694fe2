"""Intent Agent: turn a free-text prompt or resume text into SearchRefinements plus missing-info prompts."""

import re
from typing import Any, List, Optional

from pydantic import ValidationError

from jobgenie.config import INTENT_INPUT_MAX_CHARS
from jobgenie.exceptions import CollaboratorError
from jobgenie.schemas.refinements import SearchRefinements, default_refinements
from jobgenie.schemas.search_outcome import IntentAnalysis
from jobgenie.services.llm_service import TextGenerator, generate_with_timeout
from jobgenie.utils.json_repair import parse_llm_json_object
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

MISSING_TITLE = "Specific job title or role"
MISSING_LOCATION = "Location preference (city or remote)"
MISSING_SALARY = "Salary expectations (optional)"

PROMPT_SUGGESTIONS = [
    'Add specific job title (e.g., "Senior React Developer")',
    "Include location or mention if remote is okay",
    "Specify experience level (junior/mid/senior)",
]
FALLBACK_MISSING = ["Job title", "Location preference", "Experience level"]
FALLBACK_SUGGESTIONS = ["Add specific job title", "Specify location or remote", "Include experience level"]

RESUME_MAX_ROLES = 5
RESUME_MAX_SKILLS = 5

_LOCATION_KEYWORDS = re.compile(r"\b(remote|hybrid|on-?site|anywhere|worldwide|wfh)\b", re.IGNORECASE)
_LOCATION_PREPOSITION = re.compile(r"\b(?:in|near|around|based in)\s+[A-Z][a-zA-Z]+")
_CITY_STATE = re.compile(r"\b[A-Z][a-zA-Z]+,\s*[A-Z]{2}\b")
_SALARY = re.compile(r"[$€£]|\b\d+\s*k\b|\bsalary\b|\bper\s+(?:hour|year|annum)\b", re.IGNORECASE)

# Skill → inferred job roles, used when the LLM cannot read a resume
SKILL_TO_ROLE_MAP: dict[str, list[str]] = {
    "tensorflow": ["Machine Learning Engineer", "AI Engineer"],
    "pytorch": ["Machine Learning Engineer", "Deep Learning Engineer"],
    "nlp": ["NLP Engineer", "AI Engineer"],
    "machine learning": ["Machine Learning Engineer", "AI Engineer"],
    "data science": ["Data Scientist", "Data Analyst"],
    "pandas": ["Data Scientist", "Data Engineer"],
    "spark": ["Data Engineer", "Big Data Engineer"],
    "sql": ["Data Engineer", "Backend Developer"],
    "react": ["Frontend Developer", "React Developer"],
    "vue": ["Frontend Developer"],
    "angular": ["Frontend Developer"],
    "typescript": ["Frontend Developer", "Full Stack Developer"],
    "javascript": ["JavaScript Developer", "Frontend Developer"],
    "node.js": ["Backend Developer", "Full Stack Developer"],
    "python": ["Python Developer", "Software Engineer", "Data Engineer"],
    "java": ["Java Developer", "Software Engineer"],
    "golang": ["Backend Developer", "Software Engineer"],
    "django": ["Backend Developer", "Python Developer"],
    "fastapi": ["Backend Developer", "Python Developer"],
    "flask": ["Backend Developer", "Python Developer"],
    "aws": ["Cloud Engineer", "DevOps Engineer"],
    "azure": ["Cloud Engineer", "DevOps Engineer"],
    "gcp": ["Cloud Engineer", "DevOps Engineer"],
    "kubernetes": ["DevOps Engineer", "Cloud Engineer"],
    "docker": ["DevOps Engineer", "Software Engineer"],
    "terraform": ["DevOps Engineer", "Cloud Engineer"],
    "flutter": ["Mobile Developer"],
    "react native": ["Mobile Developer", "Frontend Developer"],
    "figma": ["Product Designer", "UI/UX Designer"],
}

# LLM may answer in camelCase despite instructions
_CAMEL_TO_SNAKE = {
    "jobTitles": "job_titles",
    "mustHaveSkills": "must_have_skills",
    "niceToHaveSkills": "nice_to_have_skills",
    "contractType": "contract_type",
    "dateRange": "date_range",
    "targetCompanies": "target_companies",
}

INTENT_PROMPT = """Extract job search parameters from the {kind} below.

{kind_upper}:
\"\"\"{text}\"\"\"

Return ONLY a JSON object with this structure:
{{
  "refinements": {{
    "job_titles": ["target job titles"],
    "synonyms": ["alternative titles for the same role"],
    "location": {{"city": "city or null", "remote": true/false, "hybrid": true/false}},
    "seniority": "intern|junior|mid|senior|lead",
    "must_have_skills": ["skill"],
    "nice_to_have_skills": ["skill"],
    "salary": {{"min": null, "max": null, "currency": "USD", "type": "yearly|hourly"}},
    "contract_type": "full-time|part-time|contract|freelance",
    "date_range": 3,
    "exclusions": {{"companies": [], "keywords": [], "agencies": false}},
    "target_companies": []
  }},
  "missing_info": ["important details the user did not give"],
  "suggestions": ["short tips to improve the search"]
}}
Use only information present in the text. Use null or empty lists when unknown."""


def _detect_local_gaps(text: str) -> List[str]:
    """Cheap checks for obviously missing details before spending an LLM call."""
    missing: List[str] = []
    if len(text.split()) <= 1:
        missing.append(MISSING_TITLE)
    if not (_LOCATION_KEYWORDS.search(text) or _LOCATION_PREPOSITION.search(text) or _CITY_STATE.search(text)):
        missing.append(MISSING_LOCATION)
    if not _SALARY.search(text):
        missing.append(MISSING_SALARY)
    return missing


def _snake_case_keys(data: dict) -> dict:
    return {_CAMEL_TO_SNAKE.get(k, k): v for k, v in data.items()}


def _refinements_from_llm(parsed: dict) -> Optional[SearchRefinements]:
    raw = parsed.get("refinements") if isinstance(parsed.get("refinements"), dict) else parsed
    data: dict[str, Any] = _snake_case_keys(raw)
    location = data.get("location")
    if isinstance(location, str):
        location = {"city": location}
    if isinstance(location, dict):
        location = dict(location)
        city = str(location.get("city") or "").strip()
        if city.lower() in ("remote", "anywhere", "worldwide"):
            location["city"] = None
            location["remote"] = True
        data["location"] = location
    try:
        return SearchRefinements.model_validate(data)
    except ValidationError as e:
        logger.warning("LLM refinements failed validation: %s", e)
        return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def infer_resume_skills(text: str) -> List[str]:
    """Known skills mentioned in the text, in table order."""
    lowered = text.lower()
    return [
        skill for skill in SKILL_TO_ROLE_MAP
        if re.search(rf"(?<![a-z0-9]){re.escape(skill)}(?![a-z0-9])", lowered)
    ]


def infer_roles_from_skills(skills: List[str], max_roles: int = RESUME_MAX_ROLES) -> List[str]:
    """Deduplicate and return up to max_roles inferred job titles from a skill list."""
    seen: set[str] = set()
    roles: List[str] = []
    for s in skills:
        for role in SKILL_TO_ROLE_MAP.get(s.strip().lower(), []):
            if role not in seen:
                seen.add(role)
                roles.append(role)
                if len(roles) >= max_roles:
                    return roles
    return roles


def fallback_analysis(text: str = "", is_resume: bool = False) -> IntentAnalysis:
    """Generic remote, mid-level refinements; for resumes, titles and skills come from the skill table."""
    if is_resume and text:
        skills = infer_resume_skills(text)
        roles = infer_roles_from_skills(skills)
        refinements = default_refinements(job_titles=roles, must_have_skills=skills[:RESUME_MAX_SKILLS])
        missing = [m for m, present in (("Job title", bool(roles)), ("Location preference", False)) if not present]
        return IntentAnalysis(
            refinements=refinements,
            missing_info=missing + ["Experience level"],
            suggestions=FALLBACK_SUGGESTIONS,
        )
    return IntentAnalysis(
        refinements=default_refinements(),
        missing_info=list(FALLBACK_MISSING),
        suggestions=list(FALLBACK_SUGGESTIONS),
    )


async def analyze_search_intent(
    text: str,
    is_resume: bool,
    generator: TextGenerator,
) -> IntentAnalysis:
    """
    Analyze a prompt or resume. Prompts missing a title or location short-circuit without an
    LLM call. Otherwise the LLM extracts refinements; any provider or parse failure yields the
    deterministic fallback. Never raises.
    """
    text = (text or "").strip()
    if not text:
        return fallback_analysis()

    if not is_resume:
        gaps = _detect_local_gaps(text)
        if MISSING_TITLE in gaps or MISSING_LOCATION in gaps:
            logger.info("Intent analysis short-circuited; missing=%s", gaps)
            return IntentAnalysis(refinements=SearchRefinements(), missing_info=gaps, suggestions=list(PROMPT_SUGGESTIONS))

    kind = "resume" if is_resume else "job search request"
    prompt = INTENT_PROMPT.format(kind=kind, kind_upper=kind.upper(), text=text[:INTENT_INPUT_MAX_CHARS])
    try:
        response = await generate_with_timeout(generator, prompt)
    except CollaboratorError as e:
        logger.warning("Intent analysis provider error: %s", e)
        return fallback_analysis(text, is_resume)
    except Exception:
        logger.exception("Intent analysis failed unexpectedly")
        return fallback_analysis(text, is_resume)

    parsed = parse_llm_json_object(response)
    if parsed is None:
        logger.warning("Intent analysis response was not parseable JSON")
        return fallback_analysis(text, is_resume)
    refinements = _refinements_from_llm(parsed)
    if refinements is None:
        return fallback_analysis(text, is_resume)

    missing = _string_list(parsed.get("missing_info") or parsed.get("missingInfo"))
    suggestions = _string_list(parsed.get("suggestions"))
    if not refinements.job_titles and "Specific job title" not in missing:
        missing.append("Specific job title")
    if not refinements.location.city and not refinements.location.remote and "Location preference" not in missing:
        missing.append("Location preference")
    logger.info(
        "Intent analysis: titles=%s city=%s remote=%s skills=%s missing=%s",
        refinements.job_titles,
        refinements.location.city,
        refinements.location.remote,
        len(refinements.must_have_skills),
        len(missing),
    )
    return IntentAnalysis(refinements=refinements, missing_info=missing, suggestions=suggestions)
