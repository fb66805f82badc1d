from .candidate_selector import meaningful_words, select_candidates
from .records import NO_MATCH, CandidateRecord, Matched, MatchResult, NoMatch, ScoredCandidate
from .resolver import find_best_match, rank_candidates
from .scoring import ACCEPTANCE_THRESHOLD, EXACT_MATCH_SCORE, PREFIX_BOOST, score_candidate, score_names
from .similarity import levenshtein_distance, string_similarity

__all__ = [
    "ACCEPTANCE_THRESHOLD",
    "EXACT_MATCH_SCORE",
    "PREFIX_BOOST",
    "NO_MATCH",
    "CandidateRecord",
    "Matched",
    "MatchResult",
    "NoMatch",
    "ScoredCandidate",
    "find_best_match",
    "levenshtein_distance",
    "meaningful_words",
    "rank_candidates",
    "score_candidate",
    "score_names",
    "select_candidates",
    "string_similarity",
]
