"""
Organization Resolver.

Responsibilities:
- Normalize the search term once and score every candidate.
- Apply the acceptance threshold.
- Return an explicit Matched / NoMatch result, or a ranked shortlist.

Non-Responsibilities:
- No CRM access (candidates arrive fully materialized).
- No feature computation beyond calling the scoring module.
- No mutation of shared state.

Invariant:
This module must be deterministic given the same inputs in the same order.
Ties are always resolved in favour of the earliest candidate.
"""

from typing import List, Optional, Sequence

from ..normalize import normalize_company_name
from .records import NO_MATCH, CandidateRecord, Matched, MatchResult, ScoredCandidate
from .scoring import ACCEPTANCE_THRESHOLD, PREFIX_BOOST, score_candidate


def find_best_match(
    search_term: str,
    candidates: Sequence[CandidateRecord],
    threshold: float = ACCEPTANCE_THRESHOLD,
    prefix_boost: float = PREFIX_BOOST,
) -> MatchResult:
    """
    Pick the single best company for a search term.

    Args:
        search_term: Raw organization name as typed by the operator
        candidates: Company records, in the order the lookup returned them
        threshold: Minimum score required to accept a candidate
        prefix_boost: Minimum score for candidates starting with the search term

    Returns:
        Matched(candidate, score) or NO_MATCH
    """
    if not candidates:
        return NO_MATCH

    normalized_search = normalize_company_name(search_term)
    best: Optional[ScoredCandidate] = None

    for candidate in candidates:
        scored = score_candidate(normalized_search, candidate, prefix_boost)
        # Strictly greater: an equal later score never displaces the first one.
        if best is None or scored.score > best.score:
            best = scored

    if best.score >= threshold:
        return Matched(candidate=best.candidate, score=best.score)
    return NO_MATCH


def rank_candidates(
    search_term: str,
    candidates: Sequence[CandidateRecord],
    threshold: float = ACCEPTANCE_THRESHOLD,
    prefix_boost: float = PREFIX_BOOST,
    limit: Optional[int] = 5,
) -> List[ScoredCandidate]:
    """Accepted candidates, best first; equal scores keep input order."""
    normalized_search = normalize_company_name(search_term)
    scored = [score_candidate(normalized_search, c, prefix_boost) for c in candidates]
    accepted = [s for s in scored if s.score >= threshold]
    accepted.sort(key=lambda s: s.score, reverse=True)
    return accepted if limit is None else accepted[:limit]
