"""Role taxonomy matching.

Resolves free-text job titles into the canonical taxonomy and maintains the
learned mapping library that improves matching over time.
"""

from orgbench.domains.roles.library import (
    DEFAULT_ROLE_MAPPINGS,
    InMemoryMappingStore,
    MappingStore,
    seed_library,
)
from orgbench.domains.roles.matcher import RoleTaxonomyMatcher
from orgbench.domains.roles.models import (
    MappingContext,
    MatchType,
    RoleMapping,
    RoleMappingEntry,
    RoleMatch,
    Seniority,
    TaxonomyEntry,
)
from orgbench.domains.roles.normalize import normalize_title
from orgbench.domains.roles.taxonomy import TAXONOMY, TAXONOMY_VERSION, validate_taxonomy


def validate() -> dict[str, str | int]:
    """Check the taxonomy for alias conflicts and that seeded mappings load."""
    errors = validate_taxonomy(TAXONOMY)
    if errors:
        return {"status": "error", "message": "; ".join(errors)}
    seeded = seed_library(InMemoryMappingStore())
    return {"status": "ok", "entries": len(TAXONOMY), "mappings": seeded, "version": TAXONOMY_VERSION}
