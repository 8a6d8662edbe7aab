"""
NIH RePORTER API client
Documentation: https://api.reporter.nih.gov/
"""
import logging
import re
import threading
import time
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

import requests

import config
from app.utils.constants import (
    ADJACENT_STATES,
    MEDICAL_TERM_PATTERN,
    MEDTECH_KEYWORDS,
    NIH_MAX_LIMIT,
    REGION_STATES,
)

logger = logging.getLogger(__name__)


class NIHReporterError(Exception):
    """Non-2xx answer (or transport failure) from NIH RePORTER"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RateLimiter:
    """
    Keeps at least ``min_interval`` seconds between consecutive calls.

    Callers arriving too early are delayed, not rejected. The lock is held
    while sleeping so concurrent callers are released one interval apart.
    """

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_request: Optional[float] = None

    def throttle(self) -> float:
        """Block until a request may be sent; returns the delay applied"""
        with self._lock:
            delay = 0.0
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.min_interval:
                    delay = self.min_interval - elapsed
                    self._sleep(delay)
            self._last_request = self._clock()
            return delay


# Process-wide: NIH asks for no more than one request per second from a client
rate_limiter = RateLimiter(config.NIH_RATE_LIMIT_SECONDS)


def _text_search(search_text: str, operator: str = "Or", search_field: str = "terms") -> Dict[str, str]:
    return {
        "operator": operator,
        "search_field": search_field,
        "search_text": search_text,
    }


class NIHReporterClient:

    def __init__(self, base_url: Optional[str] = None, limiter: Optional[RateLimiter] = None,
                 timeout: Optional[float] = None):
        self.base_url = (base_url or config.NIH_REPORTER_BASE_URL).rstrip("/")
        self.limiter = limiter or rate_limiter
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.limiter.throttle()

        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"NIH RePORTER API request failed: {str(e)}")
            raise NIHReporterError(f"NIH RePORTER API error: {str(e)}")

        if not response.ok:
            logger.error(f"NIH RePORTER API error: {response.status_code} {response.reason}")
            raise NIHReporterError(
                f"NIH RePORTER API error: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )
        return response.json()

    # Raw endpoints

    def search_projects(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/projects/search", request)

    def search_publications(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/publications/search", request)

    def _project_search(self, criteria: Dict[str, Any], limit: int,
                        sort_field: str = "project_start_date") -> Dict[str, Any]:
        return self.search_projects({
            "criteria": criteria,
            "limit": min(limit, NIH_MAX_LIMIT),
            "sort_field": sort_field,
            "sort_order": "desc",
        })

    # Criteria builders

    def search_projects_by_pi(self, pi_name: str, limit: int = 50) -> Dict[str, Any]:
        return self._project_search({"pi_names": [{"any_name": pi_name}], "use_relevance": True}, limit)

    def search_projects_by_organization(self, org_name: str, limit: int = 50) -> Dict[str, Any]:
        return self._project_search({"org_names": [org_name], "use_relevance": True}, limit)

    def search_projects_by_focus_area(self, search_text: str, limit: int = 50) -> Dict[str, Any]:
        return self._project_search(
            {"advanced_text_search": _text_search(search_text), "use_relevance": True}, limit
        )

    def search_projects_by_text(self, search_text: str, search_field: str = "projecttitle",
                                limit: int = 50) -> Dict[str, Any]:
        return self._project_search(
            {"advanced_text_search": _text_search(search_text, "And", search_field), "use_relevance": True},
            limit,
        )

    def get_recent_projects(self, limit: int = 50, today: Optional[date] = None) -> Dict[str, Any]:
        current_year = (today or date.today()).year
        return self._project_search(
            {"fiscal_years": [current_year, current_year - 1], "include_active_projects": True}, limit
        )

    def search_projects_by_award_amount(self, min_amount: float, max_amount: float,
                                        limit: int = 50) -> Dict[str, Any]:
        return self._project_search(
            {"award_amount_range": {"min_amount": min_amount, "max_amount": max_amount}},
            limit,
            sort_field="award_amount",
        )

    def search_projects_by_state(self, states: List[str], additional_criteria: Optional[Dict[str, Any]] = None,
                                 limit: int = 50) -> Dict[str, Any]:
        criteria = {"org_states": states, "use_relevance": True}
        criteria.update(additional_criteria or {})
        return self._project_search(criteria, limit)

    def search_projects_by_city(self, cities: List[str], additional_criteria: Optional[Dict[str, Any]] = None,
                                limit: int = 50) -> Dict[str, Any]:
        criteria = {"org_cities": cities, "use_relevance": True}
        criteria.update(additional_criteria or {})
        return self._project_search(criteria, limit)

    def search_projects_by_region(self, region: str, additional_criteria: Optional[Dict[str, Any]] = None,
                                  limit: int = 50) -> Dict[str, Any]:
        if region not in REGION_STATES:
            raise ValueError(f"Unknown region: {region}")
        return self.search_projects_by_state(REGION_STATES[region], additional_criteria, limit)

    def search_projects_by_location(self, states: Optional[List[str]] = None, cities: Optional[List[str]] = None,
                                    focus_area: Optional[str] = None, limit: int = 50) -> Dict[str, Any]:
        criteria: Dict[str, Any] = {"use_relevance": True}
        if states:
            criteria["org_states"] = states
        if cities:
            criteria["org_cities"] = cities
        if focus_area:
            criteria["advanced_text_search"] = _text_search(focus_area)
        return self._project_search(criteria, limit)

    def search_nearby_projects(self, reference_state: str, focus_area: Optional[str] = None,
                               include_adjacent_states: bool = False, limit: int = 50) -> Dict[str, Any]:
        states = [reference_state]
        if include_adjacent_states:
            states += ADJACENT_STATES.get(reference_state, [])

        additional_criteria = {}
        if focus_area:
            additional_criteria["advanced_text_search"] = _text_search(focus_area)
        return self.search_projects_by_state(states, additional_criteria, limit)

    def get_project_publications(self, core_project_num: str, limit: int = 50) -> Dict[str, Any]:
        return self.search_publications({
            "criteria": {"core_project_nums": [core_project_num]},
            "limit": min(limit, NIH_MAX_LIMIT),
        })


def get_nih_client() -> NIHReporterClient:
    return NIHReporterClient()


# Result formatting

def format_pi_names(pis: Optional[List[Dict[str, Any]]]) -> str:
    names = []
    for pi in pis or []:
        parts = [pi.get("first_name"), pi.get("middle_name"), pi.get("last_name")]
        names.append(" ".join(part for part in parts if part))
    return ", ".join(names)


def format_award_amount(amount: Optional[float]) -> str:
    if amount is None:
        return ""
    return f"${amount:,.0f}"


def format_date(date_string: Optional[str]) -> Optional[str]:
    if not date_string:
        return date_string
    try:
        parsed = datetime.fromisoformat(date_string.replace("Z", "+00:00"))
    except ValueError:
        return date_string
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def extract_focus_areas(terms: Optional[List[str]]) -> List[str]:
    """Up to five project terms that look like medical focus areas"""
    if not terms or not isinstance(terms, list):
        return []
    pattern = re.compile(MEDICAL_TERM_PATTERN, re.IGNORECASE)
    return [term for term in terms if pattern.search(term)][:5]


def is_medtech_project(project: Dict[str, Any]) -> bool:
    terms = project.get("project_terms")
    terms_text = " ".join(terms) if isinstance(terms, list) else ""
    search_text = f"{project.get('project_title') or ''} {project.get('abstract_text') or ''} {terms_text}".lower()
    return any(keyword in search_text for keyword in MEDTECH_KEYWORDS)


def truncate_abstract(text: Optional[str], length: int = 500) -> str:
    if not text:
        return ""
    return text[:length] + ("..." if len(text) > length else "")


def format_project(project: Dict[str, Any]) -> Dict[str, Any]:
    organization = project.get("organization") or {}
    return {
        "id": project.get("core_project_num"),
        "project_number": project.get("project_num"),
        "title": project.get("project_title"),
        "abstract": truncate_abstract(project.get("abstract_text")),
        "principal_investigators": format_pi_names(project.get("principal_investigators")),
        "organization": {
            "name": organization.get("org_name"),
            "city": organization.get("org_city"),
            "state": organization.get("org_state"),
            "country": organization.get("org_country"),
        },
        "funding": {
            "amount": project.get("award_amount"),
            "formatted_amount": format_award_amount(project.get("award_amount")),
            "fiscal_year": project.get("fiscal_year"),
            "start_date": project.get("project_start_date"),
            "end_date": project.get("project_end_date"),
            "formatted_start_date": format_date(project.get("project_start_date")),
            "formatted_end_date": format_date(project.get("project_end_date")),
        },
        "focus_areas": extract_focus_areas(project.get("project_terms")),
        "is_medtech": is_medtech_project(project),
        "is_active": project.get("is_active"),
        "detail_url": project.get("project_detail_url"),
        "agency": project.get("agency_ic_admin"),
        "activity_code": project.get("activity_code"),
    }


def shape_project_response(response: Dict[str, Any], offset: int, limit: int,
                           search_type: str, query: Optional[str]) -> Dict[str, Any]:
    """
    Format a project search response. ``offset`` slices the returned page
    client-side; NIH is not asked for it.
    """
    results = response.get("results") or []
    if 0 < offset < len(results):
        results = results[offset:]

    meta = response.get("meta") or {}
    total = meta.get("total", 0)
    return {
        "projects": [format_project(project) for project in results],
        "pagination": {
            "total": total,
            "offset": offset,
            "limit": limit,
            "has_more": offset + limit < total,
        },
        "search_info": {
            "search_id": meta.get("search_id"),
            "type": search_type,
            "query": query or None,
        },
    }
