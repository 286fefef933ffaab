"""Records exchanged by the role matcher and its mapping library."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

type NormalizedKey = str
type Confidence = float


class Seniority(StrEnum):
    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"
    STAFF = "Staff"
    LEAD = "Lead"
    MANAGER = "Manager"
    DIRECTOR = "Director"
    VP = "VP"
    C_LEVEL = "C-Level"


class MatchType(StrEnum):
    EXACT = "exact"
    TAXONOMY = "taxonomy"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class TaxonomyEntry:
    role_family: str
    standardized_title: str
    seniority: Seniority
    aliases: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class MappingContext:
    industry: str | None = None
    region: str | None = None
    company_size: str | None = None

    def accepts(self, query: "MappingContext | None") -> bool:
        """True when every field set on this context equals the query's field."""
        if query is None:
            return True
        for name in ("industry", "region", "company_size"):
            own = getattr(self, name)
            if own is not None and own != getattr(query, name):
                return False
        return True


GLOBAL_CONTEXT = MappingContext()


@dataclass(frozen=True)
class RoleMapping:
    """A confirmed title mapping submitted to the library."""

    title: str
    standardized_title: str
    role_family: str
    seniority: str | None = None
    context: MappingContext = GLOBAL_CONTEXT


@dataclass(frozen=True)
class RoleMappingEntry:
    key: NormalizedKey
    original_title: str
    standardized_title: str
    role_family: str
    seniority: str | None
    context: MappingContext
    verified_count: int
    reported_count: int
    updated_at: datetime


@dataclass(frozen=True)
class RoleMatch:
    original_title: str
    standardized_title: str
    seniority: str | None
    role_family: str | None
    confidence: Confidence
    match_type: MatchType
    seniority_hint: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.match_type is not MatchType.NONE
