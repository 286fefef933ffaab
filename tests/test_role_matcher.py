import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest

from orgbench.config import EngineConfig
from orgbench.domains.roles import (
    DEFAULT_ROLE_MAPPINGS,
    TAXONOMY,
    InMemoryMappingStore,
    MappingContext,
    MatchType,
    RoleMapping,
    RoleTaxonomyMatcher,
    Seniority,
    TaxonomyEntry,
    normalize_title,
    seed_library,
    validate_taxonomy,
)
from orgbench.domains.roles.library import new_entry
from orgbench.errors import InvalidInputError

from tests.conftest import FIXED_NOW

SR_ENG = RoleMapping("Sr Eng", "Senior Software Engineer", "Engineering", "Senior")


class TestNormalizeTitle:
    def test_abbreviation_and_punctuation(self):
        result = normalize_title("Sr. Software-Engineer")
        assert result.key == "senior software engineer"
        assert result.base == "software engineer"
        assert result.seniority_hint == Seniority.SENIOR

    def test_case_and_spacing(self):
        assert normalize_title("  SR   eng ").key == normalize_title("Sr Eng").key == "senior eng"

    def test_diacritics(self):
        result = normalize_title("Ingénieur II")
        assert result.key == "ingenieur ii"
        assert result.base == "ingenieur"
        assert result.seniority_hint == Seniority.MID

    def test_head_of(self):
        result = normalize_title("Head of Data")
        assert result.base == "data"
        assert result.seniority_hint == Seniority.DIRECTOR

    def test_decorated_and_plain_keys_differ(self):
        assert normalize_title("Sr Eng").key != normalize_title("Eng").key

    def test_roman_numeral_only_trailing(self):
        assert normalize_title("I Engineer").seniority_hint is None


class TestMatchStages:
    def test_deterministic(self, matcher, context):
        assert matcher.match("Senior Fullstack Engineer", context) == matcher.match("Senior Fullstack Engineer", context)
        assert matcher.match("Zookeeper") == matcher.match("Zookeeper")

    def test_taxonomy_alias(self, matcher):
        result = matcher.match("CEO")
        assert result.match_type == MatchType.TAXONOMY
        assert result.standardized_title == "Chief Executive Officer"
        assert result.role_family == "Leadership"
        assert result.seniority == Seniority.C_LEVEL
        assert result.confidence == 0.8

    def test_fuzzy_against_standardized_titles(self, matcher):
        result = matcher.match("Sofware Engineer")
        assert result.match_type == MatchType.FUZZY
        assert result.standardized_title == "Software Engineer"
        assert result.confidence == 0.95

    def test_fuzzy_seniority_is_hint(self, matcher):
        result = matcher.match("Senior Software Engineer")
        assert result.match_type == MatchType.FUZZY
        assert result.seniority == Seniority.SENIOR

    @pytest.mark.parametrize("title, seniority", [
        ("Software Engineer", Seniority.MID),
        ("Account Executive", Seniority.MID),
        ("Sales Manager", Seniority.MANAGER),
        ("Sales Development Representative", Seniority.JUNIOR),
    ])
    def test_standardized_title_takes_canonical_level(self, matcher, title, seniority):
        result = matcher.match(title)
        assert result.match_type == MatchType.TAXONOMY
        assert result.standardized_title == title
        assert result.seniority == seniority
        assert result.confidence == 0.8

    def test_fuzzy_without_hint_takes_canonical_level(self, matcher):
        assert matcher.match("Sofware Engineer").seniority == Seniority.MID

    def test_fuzzy_threshold_is_configurable(self, store):
        strict = RoleTaxonomyMatcher(store, config=EngineConfig(fuzzy_threshold=0.99))
        assert strict.match("Sofware Engineer").match_type == MatchType.NONE

    def test_unmatched(self, matcher):
        result = matcher.match("Zookeeper")
        assert result.match_type == MatchType.NONE
        assert result.standardized_title == "Zookeeper"
        assert result.confidence == 0.0
        assert not result.is_resolved


class TestLearnedLibrary:
    def test_saved_mapping_matches_exactly(self, matcher):
        matcher.save_to_library(SR_ENG)
        result = matcher.match("sr eng")
        assert result.match_type == MatchType.EXACT
        assert result.confidence == 1.0
        assert result.standardized_title == "Senior Software Engineer"

    def test_resave_same_title_increments_verified(self, matcher):
        matcher.save_to_library(SR_ENG)
        stored = matcher.save_to_library(SR_ENG)
        assert stored.verified_count == 2
        assert stored.updated_at == FIXED_NOW

    def test_resave_different_title_replaces(self, matcher):
        matcher.save_to_library(SR_ENG)
        matcher.save_to_library(SR_ENG)
        stored = matcher.save_to_library(replace(SR_ENG, standardized_title="Engineering Manager"))
        assert stored.verified_count == 1
        assert stored.reported_count == 0
        assert matcher.match("Sr Eng").standardized_title == "Engineering Manager"

    def test_reports_lower_confidence(self, matcher):
        matcher.save_to_library(SR_ENG)
        assert matcher.report_mapping("Sr Eng") == 1
        assert matcher.match("Sr Eng").confidence == pytest.approx(0.95)

    def test_confidence_floor(self, matcher):
        matcher.save_to_library(SR_ENG)
        matcher.verify_mapping("Sr Eng")
        matcher.verify_mapping("Sr Eng")
        for _ in range(4):
            matcher.report_mapping("Sr Eng")
        result = matcher.match("Sr Eng")
        assert result.match_type == MatchType.EXACT
        assert result.confidence == 0.85

    def test_heavily_reported_mapping_is_ignored(self, matcher):
        matcher.save_to_library(SR_ENG)
        for _ in range(4):
            matcher.report_mapping("Sr Eng")
        assert matcher.match("Sr Eng").match_type != MatchType.EXACT

    def test_increment_without_entry(self, matcher):
        assert matcher.verify_mapping("Nobody Saved This") == 0
        assert matcher.report_mapping("Nobody Saved This") == 0

    def test_empty_title_rejected(self, matcher):
        with pytest.raises(InvalidInputError):
            matcher.save_to_library(RoleMapping("  ", "Software Engineer", "Engineering"))

    def test_context_must_be_compatible(self, matcher):
        software = MappingContext(industry="Software")
        matcher.save_to_library(replace(SR_ENG, context=software))
        assert matcher.match("Sr Eng", software).match_type == MatchType.EXACT
        assert matcher.match("Sr Eng", MappingContext(industry="Software", region="Europe")).match_type == MatchType.EXACT
        assert matcher.match("Sr Eng").match_type == MatchType.EXACT
        assert matcher.match("Sr Eng", MappingContext(industry="Fintech")).match_type != MatchType.EXACT

    def test_verify_only_touches_given_context(self, matcher):
        software = MappingContext(industry="Software")
        matcher.save_to_library(SR_ENG)
        matcher.save_to_library(replace(SR_ENG, context=software))
        assert matcher.verify_mapping("Sr Eng", software) == 1
        assert matcher.verify_mapping("Sr Eng") == 2


class TestLibraryPrecedence:
    def _store(self, *entries):
        return InMemoryMappingStore(entries, clock=lambda: FIXED_NOW)

    def _entry(self, standardized, context=MappingContext(), verified=1, reported=0):
        mapping = RoleMapping("Platform Engineer", standardized, "Engineering", None, context)
        return replace(new_entry(mapping, FIXED_NOW), verified_count=verified, reported_count=reported)

    def test_highest_verified_wins(self):
        store = self._store(
            self._entry("Software Engineer", verified=3),
            self._entry("DevOps Engineer", MappingContext(industry="Software"), verified=1),
        )
        result = RoleTaxonomyMatcher(store).match("Platform Engineer", MappingContext(industry="Software"))
        assert result.standardized_title == "Software Engineer"

    def test_verified_count_outranks_dispute(self):
        store = self._store(
            self._entry("Software Engineer", verified=2, reported=3),
            self._entry("DevOps Engineer", MappingContext(industry="Software"), verified=1),
        )
        result = RoleTaxonomyMatcher(store).match("Platform Engineer", MappingContext(industry="Software"))
        assert result.standardized_title == "Software Engineer"
        assert result.confidence == pytest.approx(0.85)

    def test_disputed_entry_loses_ties(self):
        store = self._store(
            self._entry("DevOps Engineer", MappingContext(industry="Software"), verified=1, reported=2),
            self._entry("Software Engineer", verified=1),
        )
        result = RoleTaxonomyMatcher(store).match("Platform Engineer", MappingContext(industry="Software"))
        assert result.standardized_title == "Software Engineer"
        assert result.confidence == 1.0

    def test_title_breaks_remaining_ties(self):
        store = self._store(
            self._entry("Software Engineer"),
            self._entry("DevOps Engineer", MappingContext(industry="Software")),
        )
        result = RoleTaxonomyMatcher(store).match("Platform Engineer", MappingContext(industry="Software"))
        assert result.standardized_title == "DevOps Engineer"


class TestMatchBatch:
    def test_deduplicates_and_drops_empty(self, matcher):
        results = matcher.match_batch(["CEO", "ceo", "", "CEO"])
        assert list(results) == ["CEO", "ceo"]
        assert "" not in results
        assert results["CEO"].standardized_title == "Chief Executive Officer"

    def test_first_appearance_order(self, matcher):
        titles = ["Zookeeper", "Software Developer", "   ", "CTO", "Software Developer", "SDR"]
        assert list(matcher.match_batch(titles)) == ["Zookeeper", "Software Developer", "CTO", "SDR"]

    def test_same_as_single_matches(self, matcher, context):
        titles = ["Software Developer", "Senior Software Engineer", "Zookeeper"]
        results = matcher.match_batch(titles, context)
        assert all(results[t] == matcher.match(t, context) for t in titles)

    def test_empty_batch(self, matcher):
        assert matcher.match_batch([]) == {}


class TestTaxonomy:
    def test_seed_taxonomy_has_no_conflicts(self):
        assert validate_taxonomy(TAXONOMY) == []

    def test_conflicting_alias_reported(self):
        entries = (
            TaxonomyEntry("Sales", "Account Executive", Seniority.MID, ("Account Manager",)),
            TaxonomyEntry("Customer Success", "Customer Success Manager", Seniority.MID, ("Account Manager",)),
        )
        errors = validate_taxonomy(entries)
        assert len(errors) == 1
        assert "account manager" in errors[0]

    def test_seed_library(self, store):
        assert seed_library(store) == len(DEFAULT_ROLE_MAPPINGS)
        assert len(store) == len(DEFAULT_ROLE_MAPPINGS)
        assert RoleTaxonomyMatcher(store).match("Head of Engineering").match_type == MatchType.EXACT

    def test_seed_library_stamps_with_store_clock(self):
        stamped = []

        class RecordingStore(InMemoryMappingStore):
            def upsert(self, entry):
                stamped.append(entry.updated_at)
                return super().upsert(entry)

        seed_library(RecordingStore(clock=lambda: FIXED_NOW), DEFAULT_ROLE_MAPPINGS[:3])
        assert stamped == [FIXED_NOW] * 3


class TestConcurrentLibraryWrites:
    def _stored(self, matcher, title):
        (entry,) = matcher.store.get(normalize_title(title).key)
        return entry

    def test_parallel_verifications_all_land(self, matcher):
        matcher.save_to_library(SR_ENG)
        with ThreadPoolExecutor(max_workers=8) as pool:
            touched = list(pool.map(lambda _: matcher.verify_mapping("Sr Eng"), range(50)))
        assert touched == [1] * 50
        assert self._stored(matcher, "Sr Eng").verified_count == 51

    def test_counters_increment_independently(self, matcher):
        matcher.save_to_library(SR_ENG)
        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(op, "Sr Eng") for _ in range(30)
                       for op in (matcher.verify_mapping, matcher.report_mapping)]
        assert all(f.result() == 1 for f in futures)
        entry = self._stored(matcher, "Sr Eng")
        assert entry.verified_count == 31
        assert entry.reported_count == 30

    def test_parallel_saves_converge(self, matcher):
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda _: matcher.save_to_library(SR_ENG), range(40)))
        assert len(matcher.store) == 1
        assert self._stored(matcher, "Sr Eng").verified_count == 40

    def test_batch_while_library_is_written(self, store):
        matcher = RoleTaxonomyMatcher(store, config=EngineConfig(batch_workers=8))
        titles = [f"Platform Engineer {i}" for i in range(200)] + ["CEO", "Software Developer"]
        stop = threading.Event()

        def keep_writing():
            i = 0
            while not stop.is_set():
                matcher.save_to_library(RoleMapping(f"Platform Engineer {i % 200}", "Software Engineer", "Engineering"))
                matcher.verify_mapping(f"Platform Engineer {i % 200}")
                i += 1

        writer = threading.Thread(target=keep_writing)
        writer.start()
        try:
            results = matcher.match_batch(titles)
        finally:
            stop.set()
            writer.join()

        assert list(results) == titles
        assert all(results[t].original_title == t for t in titles)
        assert results["CEO"].standardized_title == "Chief Executive Officer"
        assert results["Software Developer"].seniority == Seniority.MID
