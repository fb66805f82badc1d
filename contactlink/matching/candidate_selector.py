"""
Candidate Selection Logic.

Responsibilities:
- Narrow a page of CRM companies down to a bounded set worth scoring.
- Keep companies sharing a meaningful word with the search, containing it
  (or contained by it), or already broadly similar.

Non-Responsibilities:
- No scoring beyond the coarse similarity gate.
- No resolution decisions.

Invariant:
Candidate selection must never exclude a company the resolver would accept
(exact, prefix, or similarity at or above the acceptance threshold it is
given). It may include false positives.
Only the limit can drop candidates, and it drops the latest ones.
"""

from typing import List, Sequence

from ..normalize import normalize_company_name
from .records import CandidateRecord
from .scoring import ACCEPTANCE_THRESHOLD
from .similarity import string_similarity

MIN_WORD_LENGTH = 3
SIMILARITY_GATE = 0.5


def meaningful_words(normalized_name: str) -> List[str]:
    return [w for w in normalized_name.split() if len(w) >= MIN_WORD_LENGTH]


def _has_word_overlap(search_words: List[str], company_words: List[str]) -> bool:
    return any(
        cw in sw or sw in cw
        for sw in search_words
        for cw in company_words
    )


def is_candidate(
    normalized_search: str,
    candidate: CandidateRecord,
    threshold: float = ACCEPTANCE_THRESHOLD,
) -> bool:
    normalized_company = normalize_company_name(candidate.name)
    if _has_word_overlap(meaningful_words(normalized_search), meaningful_words(normalized_company)):
        return True
    if normalized_search in normalized_company or normalized_company in normalized_search:
        return True
    similarity = string_similarity(normalized_search, normalized_company)
    # A lowered acceptance threshold widens the gate with it.
    return similarity > SIMILARITY_GATE or similarity >= threshold


def select_candidates(
    search_term: str,
    candidates: Sequence[CandidateRecord],
    limit: int = 20,
    threshold: float = ACCEPTANCE_THRESHOLD,
) -> List[CandidateRecord]:
    normalized_search = normalize_company_name(search_term)
    selected = [c for c in candidates if is_candidate(normalized_search, c, threshold)]
    return selected[:limit]
