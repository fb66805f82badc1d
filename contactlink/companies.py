"""Company lookup against HubSpot, feeding the organization matcher."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .errors import ValidationError
from .logger import get_logger
from .matching import (
    ACCEPTANCE_THRESHOLD,
    EXACT_MATCH_SCORE,
    PREFIX_BOOST,
    CandidateRecord,
    MatchResult,
    ScoredCandidate,
    find_best_match,
    rank_candidates,
    select_candidates,
)
from .normalize import normalize_company_name
from .schema import validate_organization_name

HIGH_CONFIDENCE_SCORE = 0.9


def candidates_from_results(results: Iterable[Dict[str, Any]]) -> List[CandidateRecord]:
    """
    Convert HubSpot company rows into CandidateRecords.

    Accepts both the API shape ({"id", "properties": {"name", "domain"}}) and
    flat {"id", "name", "domain"} dicts. Rows without an id or a name are dropped.
    """
    candidates = []
    for row in results:
        props = row.get("properties") or row
        company_id = row.get("id")
        name = props.get("name")
        if not company_id or not isinstance(name, str) or not name.strip():
            continue
        domain = props.get("domain")
        candidates.append(
            CandidateRecord(
                id=str(company_id),
                name=name.strip(),
                domain=(domain.strip() or None) if isinstance(domain, str) else None,
            )
        )
    return candidates


def load_candidates(path: Path) -> List[CandidateRecord]:
    """Read candidates from a JSON file: a list of rows or {"results": [...]}."""
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("results", [])
    if not isinstance(data, list):
        raise ValidationError(f"Candidates file must contain a list of companies: {path}")
    return candidates_from_results(data)


def search_companies(
    client,
    search_term: str,
    page_size: int = 100,
    limit: int = 20,
    threshold: float = ACCEPTANCE_THRESHOLD,
    validate: bool = True,
) -> List[CandidateRecord]:
    """
    Fetch one page of companies and keep the ones worth scoring.

    validate=True applies the search-box rules (validate_organization_name);
    with validate=False only a term that normalizes to "" is rejected, so
    short names such as "HP" or "3M" still reach the matcher.
    """
    if validate:
        errors = validate_organization_name(search_term)
        if errors:
            raise ValidationError(errors[0], {"search_term": search_term})
    elif not normalize_company_name(search_term):
        # Empty, or nothing but legal suffixes: "" would prefix-match every company.
        raise ValidationError(
            "Organization name is required and cannot be empty", {"search_term": search_term}
        )

    logger = get_logger()
    companies = candidates_from_results(client.list_companies(limit=page_size))
    if not companies:
        logger.warning("No valid companies found in HubSpot", search_term=search_term)
        return []

    candidates = select_candidates(search_term, companies, limit=limit, threshold=threshold)
    logger.debug(
        "Selected candidate companies",
        search_term=search_term,
        fetched=len(companies),
        selected=len(candidates),
    )
    return candidates


@dataclass
class OrganizationSearch:
    search_term: str
    matches: List[ScoredCandidate] = field(default_factory=list)
    total_candidates: int = 0

    @property
    def has_exact_match(self) -> bool:
        return any(m.score == EXACT_MATCH_SCORE for m in self.matches)

    @property
    def has_high_confidence(self) -> bool:
        return any(m.score >= HIGH_CONFIDENCE_SCORE for m in self.matches)

    @property
    def average_confidence(self) -> float:
        if not self.matches:
            return 0.0
        return sum(m.score for m in self.matches) / len(self.matches)


def search_organizations(
    client,
    organization_name: str,
    audit=None,
    limit: int = 5,
    threshold: float = ACCEPTANCE_THRESHOLD,
    prefix_boost: float = PREFIX_BOOST,
) -> OrganizationSearch:
    """Ranked shortlist of companies for an organization name."""
    organization_name = (organization_name or "").strip()
    candidates = search_companies(client, organization_name, threshold=threshold)
    matches = rank_candidates(
        organization_name, candidates, threshold=threshold, prefix_boost=prefix_boost, limit=limit
    )
    result = OrganizationSearch(
        search_term=organization_name, matches=matches, total_candidates=len(candidates)
    )

    get_logger().info(
        f"Ranked {len(matches)} matches for organization search",
        search_term=organization_name,
        matches=[f"{m.candidate.name} ({round(m.score * 100)}%)" for m in matches],
    )
    if audit is not None:
        audit.log_organization_search(organization_name, len(matches))
    return result


def resolve_organization(
    client,
    organization_name: str,
    threshold: float = ACCEPTANCE_THRESHOLD,
    prefix_boost: float = PREFIX_BOOST,
) -> MatchResult:
    """Best company for an organization name, or NO_MATCH."""
    candidates = search_companies(client, organization_name, threshold=threshold, validate=False)
    result = find_best_match(organization_name, candidates, threshold=threshold, prefix_boost=prefix_boost)
    get_logger().record_search(result.matched)
    return result
