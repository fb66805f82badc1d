"""
Scoring Logic for Organization Matching.

Responsibilities:
- Compute a deterministic score between a normalized search term and a
  normalized candidate name.
- Apply the exact-match override and the prefix boost.

Non-Responsibilities:
- No candidate selection.
- No threshold decisions.
- No I/O.

Invariant:
Given identical inputs, this module must always return the same score,
and every score lies in [0, 1].
"""

from ..normalize import normalize_company_name
from .records import CandidateRecord, ScoredCandidate
from .similarity import string_similarity

EXACT_MATCH_SCORE = 1.0
# Tuned against existing CRM data; changing either value changes which
# company existing contacts would have been associated with.
PREFIX_BOOST = 0.9
ACCEPTANCE_THRESHOLD = 0.6


def score_names(
    normalized_search: str,
    normalized_candidate: str,
    prefix_boost: float = PREFIX_BOOST,
) -> float:
    score = string_similarity(normalized_search, normalized_candidate)
    if normalized_candidate == normalized_search:
        score = EXACT_MATCH_SCORE
    elif normalized_candidate.startswith(normalized_search):
        score = max(score, prefix_boost)
    return score


def score_candidate(
    normalized_search: str,
    candidate: CandidateRecord,
    prefix_boost: float = PREFIX_BOOST,
) -> ScoredCandidate:
    """Score one candidate; a missing or empty name scores as ""."""
    normalized_candidate = normalize_company_name(candidate.name)
    return ScoredCandidate(
        candidate=candidate,
        score=score_names(normalized_search, normalized_candidate, prefix_boost),
    )
