"""
Match a startup profile to NIH-funded research.

Exactly one strategy is chosen, in this priority order:

1. ``location_focus``: the location's last comma-separated part looks like a
   US state and there is at least one search term
2. ``focus_keywords``: the startup has focus areas and keywords
3. ``focus``: any search term (focus areas, keywords, product types)
4. ``recent``: projects from the current and previous fiscal year

and exactly one NIH request is made for it. There is no fallback to a lower
strategy when the request fails; the NIHReporterError propagates.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.models import Startup
from app.utils.constants import STATE_NAMES
from app.utils.nih_reporter import NIHReporterClient, shape_project_response

logger = logging.getLogger(__name__)

MATCH_LIMIT = 15
RECENT_LIMIT = 10


@dataclass(frozen=True)
class MatchStrategy:
    name: str
    focus_text: Optional[str] = None
    states: List[str] = field(default_factory=list)
    limit: int = MATCH_LIMIT


def search_terms(startup: Startup) -> List[str]:
    return list(startup.focus_areas or []) + list(startup.keywords or []) + list(startup.product_types or [])


def state_from_location(location: Optional[str]) -> Optional[str]:
    """'Charleston, SC' -> 'SC'; None when the last part does not look like a state"""
    if not location:
        return None
    candidate = location.split(",")[-1].strip()
    if not candidate:
        return None
    if len(candidate) <= 3 or candidate in STATE_NAMES:
        return candidate
    return None


def select_strategy(startup: Startup) -> MatchStrategy:
    terms = search_terms(startup)
    focus_areas = list(startup.focus_areas or [])
    keywords = list(startup.keywords or [])

    state = state_from_location(startup.location)
    if state and terms:
        return MatchStrategy("location_focus", focus_text=" ".join(terms[:2]), states=[state])

    if focus_areas and keywords:
        return MatchStrategy("focus_keywords", focus_text=" ".join(focus_areas[:2] + keywords[:3]))

    if terms:
        return MatchStrategy("focus", focus_text=terms[0])

    return MatchStrategy("recent", limit=RECENT_LIMIT)


def run_strategy(client: NIHReporterClient, strategy: MatchStrategy) -> Dict[str, Any]:
    if strategy.name == "location_focus":
        return client.search_projects_by_location(
            states=strategy.states, focus_area=strategy.focus_text, limit=strategy.limit
        )
    if strategy.name in ("focus_keywords", "focus"):
        return client.search_projects_by_focus_area(strategy.focus_text, limit=strategy.limit)
    return client.get_recent_projects(limit=strategy.limit)


def find_research_matches(client: NIHReporterClient, startup: Startup) -> Dict[str, Any]:
    strategy = select_strategy(startup)
    logger.info(f"Research matching for startup {startup.id} using strategy '{strategy.name}'")

    response = run_strategy(client, strategy)
    result = shape_project_response(response, 0, strategy.limit, strategy.name, strategy.focus_text)
    result["strategy"] = strategy.name
    return result
