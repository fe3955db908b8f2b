"""
Fuzzy identity resolver for name-keyed joins.

Execution records reference operatives by free-text name, not by id.
The record store's partial-name filter only narrows what is read; this
module decides which name the rows belong to and reports any others:

  normalize   trim, collapse inner whitespace, upper-case
  exact       normalized names are equal
  partial     one normalized name contains the other

Collisions (several names matching one query) are never resolved
silently: the resolution carries a confidence and the competing names.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class MissingIdentifierError(ValueError):
    """A required operative identifier (id, name, phone) was not supplied."""


class MatchConfidence(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


def normalize_name(name: str | None) -> str:
    if not name:
        return ""
    return " ".join(name.split()).upper()


def require_identifiers(**identifiers: str | None) -> None:
    """Raise MissingIdentifierError for the first blank identifier."""
    for label, value in identifiers.items():
        if value is None or not str(value).strip():
            raise MissingIdentifierError(f"required identifier missing: {label}")


@dataclass(frozen=True)
class NameResolution:
    query: str
    key: str | None
    confidence: MatchConfidence
    alternatives: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_ambiguous(self) -> bool:
        return bool(self.alternatives)

    def as_dict(self) -> dict:
        return {
            "query": self.query,
            "key": self.key,
            "confidence": self.confidence.value,
            "alternatives": list(self.alternatives),
        }


class FuzzyIdentityResolver:
    """
    Matches a queried operative name against candidate names.

    Candidates are considered in the order given; when only partial
    matches exist the first one is chosen and the rest are reported as
    alternatives with AMBIGUOUS confidence.
    """

    def matches(self, query: str, candidate: str) -> bool:
        q = normalize_name(query)
        c = normalize_name(candidate)
        if not q or not c:
            return False
        return q == c or q in c or c in q

    def resolve(self, query: str, candidates: Iterable[str]) -> NameResolution:
        q = normalize_name(query)
        seen: list[str] = []
        for candidate in candidates:
            c = normalize_name(candidate)
            if c and c not in seen and self.matches(q, c):
                seen.append(c)

        if not seen:
            return NameResolution(query=q, key=None, confidence=MatchConfidence.NONE)

        if q in seen:
            others = tuple(c for c in seen if c != q)
            return NameResolution(query=q, key=q, confidence=MatchConfidence.EXACT, alternatives=others)

        if len(seen) == 1:
            return NameResolution(query=q, key=seen[0], confidence=MatchConfidence.PARTIAL)

        return NameResolution(
            query=q,
            key=seen[0],
            confidence=MatchConfidence.AMBIGUOUS,
            alternatives=tuple(seen[1:]),
        )
