"""Value types shared by the organization matching modules."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class CandidateRecord:
    """A company record that a search term can be matched against."""
    id: str
    name: str
    domain: Optional[str] = None


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: CandidateRecord
    score: float


@dataclass(frozen=True)
class Matched:
    """A candidate accepted as the organization for a search term."""
    candidate: CandidateRecord
    score: float

    @property
    def matched(self) -> bool:
        return True


@dataclass(frozen=True)
class NoMatch:
    """No candidate reached the acceptance threshold."""

    @property
    def matched(self) -> bool:
        return False


NO_MATCH = NoMatch()

MatchResult = Union[Matched, NoMatch]
