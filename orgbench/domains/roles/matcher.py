"""Resolve free-text job titles to canonical roles.

Resolution runs four stages and stops at the first hit:

1. exact: the learned mapping library, keyed by normalized title
2. taxonomy: exact match against the canonical alias set, then against the
   undecorated standardized titles themselves
3. fuzzy: token-sorted similarity against every standardized title
4. none: confidence 0, the original title is echoed back

Taxonomy and fuzzy matches always carry a seniority. A title without a
seniority decoration resolves to the canonical level of its standardized
title (Mid where the taxonomy has one).
"""

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from rapidfuzz import fuzz

from orgbench.config import EngineConfig
from orgbench.errors import InvalidInputError
from orgbench.domains.roles.library import InMemoryMappingStore, MappingStore, new_entry
from orgbench.domains.roles.models import (
    MappingContext,
    MatchType,
    RoleMapping,
    RoleMappingEntry,
    RoleMatch,
    TaxonomyEntry,
)
from orgbench.domains.roles.normalize import NormalizedTitle, normalize_key, normalize_title
from orgbench.domains.roles.taxonomy import TAXONOMY, build_alias_index, build_title_index, canonical_entry

logger = logging.getLogger(__name__)


class RoleTaxonomyMatcher:
    def __init__(
        self,
        store: MappingStore | None = None,
        taxonomy: Iterable[TaxonomyEntry] = TAXONOMY,
        config: EngineConfig | None = None,
    ):
        self.store = store if store is not None else InMemoryMappingStore()
        self.config = config or EngineConfig()
        entries = tuple(taxonomy)
        self._aliases = build_alias_index(entries)
        self._titles = build_title_index(entries)

    def match(self, title: str, context: MappingContext | None = None) -> RoleMatch:
        normalized = normalize_title(title)
        for stage in (self._match_library, self._match_taxonomy, self._match_fuzzy):
            result = stage(title, normalized, context)
            if result is not None:
                return result
        return RoleMatch(
            original_title=title,
            standardized_title=title,
            seniority=None,
            role_family=None,
            confidence=0.0,
            match_type=MatchType.NONE,
            seniority_hint=normalized.seniority_hint,
        )

    def _library_candidates(self, key: str, context: MappingContext | None) -> list[RoleMappingEntry]:
        """Compatible entries, best first.

        Entries reported more than ``report_margin`` times beyond their
        verifications are dropped. The rest rank by verified count, then most
        recent update; disputed entries (reported > verified) lose the
        remaining ties, and the standardized title settles the order.
        """
        margin = self.config.report_margin
        candidates = [
            e for e in self.store.get(key)
            if e.context.accepts(context) and e.reported_count - e.verified_count <= margin
        ]
        candidates.sort(key=lambda e: e.standardized_title)
        candidates.sort(key=lambda e: e.reported_count > e.verified_count)
        candidates.sort(key=lambda e: e.updated_at, reverse=True)
        candidates.sort(key=lambda e: e.verified_count, reverse=True)
        return candidates

    def _match_library(self, title, normalized: NormalizedTitle, context) -> RoleMatch | None:
        if not normalized.key:
            return None
        candidates = self._library_candidates(normalized.key, context)
        if not candidates:
            return None
        best = candidates[0]
        penalty = self.config.report_penalty * best.reported_count
        confidence = max(self.config.exact_min_confidence, 1.0 - penalty)
        return RoleMatch(
            original_title=title,
            standardized_title=best.standardized_title,
            seniority=best.seniority,
            role_family=best.role_family,
            confidence=min(confidence, 1.0),
            match_type=MatchType.EXACT,
            seniority_hint=normalized.seniority_hint,
        )

    def _match_taxonomy(self, title, normalized: NormalizedTitle, context) -> RoleMatch | None:
        entry = self._aliases.get(normalized.key)
        if entry is None and normalized.key in self._titles:
            entry = canonical_entry(self._titles[normalized.key])
        if entry is None:
            return None
        return RoleMatch(
            original_title=title,
            standardized_title=entry.standardized_title,
            seniority=entry.seniority,
            role_family=entry.role_family,
            confidence=self.config.taxonomy_confidence,
            match_type=MatchType.TAXONOMY,
            seniority_hint=normalized.seniority_hint,
        )

    def _match_fuzzy(self, title, normalized: NormalizedTitle, context) -> RoleMatch | None:
        if not normalized.base:
            return None
        best_score, best_key = 0.0, None
        for key in sorted(self._titles):
            score = fuzz.token_sort_ratio(normalized.base, key) / 100
            if score > best_score:
                best_score, best_key = score, key
        if best_key is None or best_score < self.config.fuzzy_threshold:
            return None

        entry = canonical_entry(self._titles[best_key])
        hint = normalized.seniority_hint
        return RoleMatch(
            original_title=title,
            standardized_title=entry.standardized_title,
            seniority=hint or entry.seniority,
            role_family=entry.role_family,
            confidence=min(best_score, self.config.fuzzy_confidence_cap),
            match_type=MatchType.FUZZY,
            seniority_hint=hint,
        )

    def match_batch(self, titles: Sequence[str], context: MappingContext | None = None) -> dict[str, RoleMatch]:
        """Match many titles concurrently.

        Empty and whitespace-only titles are dropped and exact duplicates are
        matched once. The result is keyed by original title in order of first
        appearance, whatever order the workers finish in.
        """
        unique = list(dict.fromkeys(t for t in titles if t and t.strip()))
        if not unique:
            return {}
        workers = min(self.config.batch_workers, len(unique))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {title: pool.submit(self.match, title, context) for title in unique}
            results = {title: future.result() for title, future in futures.items()}

        unmatched = sum(1 for r in results.values() if not r.is_resolved)
        logger.info("Matched %d unique titles (%d unresolved)", len(results), unmatched)
        return results

    def save_to_library(self, mapping: RoleMapping) -> RoleMappingEntry:
        entry = new_entry(mapping, self.store.now())
        if not entry.key:
            raise InvalidInputError("Cannot save a mapping for an empty title")
        stored = self.store.upsert(entry)
        logger.info(
            "Saved mapping '%s' -> '%s' (verified %d)",
            stored.key, stored.standardized_title, stored.verified_count,
        )
        return stored

    def verify_mapping(self, title: str, context: MappingContext | None = None) -> int:
        touched = self.store.increment_verified(normalize_key(title), context)
        if not touched:
            logger.warning("No library mapping to verify for '%s'", title)
        return touched

    def report_mapping(self, title: str, context: MappingContext | None = None) -> int:
        touched = self.store.increment_reported(normalize_key(title), context)
        if not touched:
            logger.warning("No library mapping to report for '%s'", title)
        return touched
