"""Learned title-mapping library.

The library is shared, mutable state. The matcher only talks to it through
the narrow MappingStore protocol so that production callers can back it with
a networked key-value store while tests use InMemoryMappingStore.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Protocol

from orgbench.domains.roles.models import (
    GLOBAL_CONTEXT,
    MappingContext,
    NormalizedKey,
    RoleMapping,
    RoleMappingEntry,
    Seniority,
)
from orgbench.domains.roles.normalize import normalize_key

logger = logging.getLogger(__name__)

type Clock = Callable[[], datetime]


class MappingStore(Protocol):
    """Read/write interface to the learned mapping library.

    Entries are keyed by (normalized title, context). Every write is a single
    atomic operation: ``upsert`` increments ``verified_count`` when the stored
    entry already maps to the same standardized title and replaces it with the
    given entry otherwise. The increment methods only touch existing entries;
    a ``None`` context touches every context stored for the key. They return
    the number of entries touched. ``now`` is the store's clock, used to stamp
    new entries.
    """

    def get(self, key: NormalizedKey) -> list[RoleMappingEntry]: ...

    def upsert(self, entry: RoleMappingEntry) -> RoleMappingEntry: ...

    def increment_verified(self, key: NormalizedKey, context: MappingContext | None = None) -> int: ...

    def increment_reported(self, key: NormalizedKey, context: MappingContext | None = None) -> int: ...

    def snapshot(self) -> tuple[RoleMappingEntry, ...]: ...

    def now(self) -> datetime: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryMappingStore:
    def __init__(self, entries: Iterable[RoleMappingEntry] = (), clock: Clock = utc_now):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[NormalizedKey, dict[MappingContext, RoleMappingEntry]] = {}
        for entry in entries:
            self._entries.setdefault(entry.key, {})[entry.context] = entry

    def now(self) -> datetime:
        return self._clock()

    def get(self, key: NormalizedKey) -> list[RoleMappingEntry]:
        with self._lock:
            return list(self._entries.get(key, {}).values())

    def upsert(self, entry: RoleMappingEntry) -> RoleMappingEntry:
        with self._lock:
            by_context = self._entries.setdefault(entry.key, {})
            existing = by_context.get(entry.context)
            now = self._clock()
            if existing is not None and existing.standardized_title == entry.standardized_title:
                stored = replace(
                    entry,
                    verified_count=existing.verified_count + 1,
                    reported_count=existing.reported_count,
                    updated_at=now,
                )
            else:
                stored = replace(entry, updated_at=now)
            by_context[entry.context] = stored
            return stored

    def _increment(self, key: NormalizedKey, context: MappingContext | None, field: str) -> int:
        with self._lock:
            by_context = self._entries.get(key, {})
            targets = list(by_context) if context is None else [c for c in by_context if c == context]
            now = self._clock()
            for ctx in targets:
                entry = by_context[ctx]
                by_context[ctx] = replace(entry, **{field: getattr(entry, field) + 1}, updated_at=now)
            return len(targets)

    def increment_verified(self, key: NormalizedKey, context: MappingContext | None = None) -> int:
        return self._increment(key, context, "verified_count")

    def increment_reported(self, key: NormalizedKey, context: MappingContext | None = None) -> int:
        return self._increment(key, context, "reported_count")

    def snapshot(self) -> tuple[RoleMappingEntry, ...]:
        with self._lock:
            entries = [e for by_context in self._entries.values() for e in by_context.values()]
        return tuple(sorted(entries, key=_snapshot_order))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(by_context) for by_context in self._entries.values())


def _snapshot_order(entry: RoleMappingEntry) -> tuple[str, str, str, str]:
    ctx = entry.context
    return (entry.key, ctx.industry or "", ctx.region or "", ctx.company_size or "")


def new_entry(mapping: RoleMapping, updated_at: datetime) -> RoleMappingEntry:
    """Build a fresh library entry for a confirmed mapping."""
    return RoleMappingEntry(
        key=normalize_key(mapping.title),
        original_title=mapping.title,
        standardized_title=mapping.standardized_title,
        role_family=mapping.role_family,
        seniority=mapping.seniority,
        context=mapping.context,
        verified_count=1,
        reported_count=0,
        updated_at=updated_at,
    )


def _m(title: str, standardized: str, seniority: Seniority, family: str) -> RoleMapping:
    return RoleMapping(title, standardized, family, seniority, GLOBAL_CONTEXT)


DEFAULT_ROLE_MAPPINGS: tuple[RoleMapping, ...] = (
    _m("Full Stack Developer", "Software Engineer", Seniority.MID, "Engineering"),
    _m("Fullstack Developer", "Software Engineer", Seniority.MID, "Engineering"),
    _m("Senior Full Stack Developer", "Software Engineer", Seniority.SENIOR, "Engineering"),
    _m("Senior Fullstack Developer", "Software Engineer", Seniority.SENIOR, "Engineering"),
    _m("Tech Lead", "Engineering Lead", Seniority.LEAD, "Engineering"),
    _m("Head of Engineering", "Engineering Manager", Seniority.DIRECTOR, "Engineering"),
    _m("Senior Data Scientist", "Data Scientist", Seniority.SENIOR, "Engineering"),
    _m("Sales Development Representative", "Sales Development Representative", Seniority.JUNIOR, "Sales"),
    _m("Senior Sales Development Representative", "Sales Development Representative", Seniority.SENIOR, "Sales"),
    _m("Account Executive", "Account Executive", Seniority.MID, "Sales"),
    _m("Sales Manager", "Sales Manager", Seniority.LEAD, "Sales"),
    _m("Head of Sales", "Sales Manager", Seniority.DIRECTOR, "Sales"),
    _m("Partnership Manager", "Partnerships Manager", Seniority.MID, "Sales"),
    _m("AI Revenue Architect", "Revenue Operations", Seniority.MID, "Sales"),
    _m("Product Designer", "Product Designer", Seniority.MID, "Product"),
    _m("UX/UI Designerin", "Product Designer", Seniority.MID, "Product"),
    _m("Product Manager", "Product Manager", Seniority.MID, "Product"),
    _m("Product Managerin", "Product Manager", Seniority.MID, "Product"),
    _m("Chief Product Officer", "Product Manager", Seniority.C_LEVEL, "Product"),
    _m("Brand & Marketing Designerin", "Brand Designer", Seniority.MID, "Marketing"),
    _m("Chief Marketing Officer", "Marketing Manager", Seniority.C_LEVEL, "Marketing"),
    _m("Marketing Lead", "Marketing Manager", Seniority.LEAD, "Marketing"),
    _m("Head of Marketing", "Marketing Manager", Seniority.DIRECTOR, "Marketing"),
    _m("Senior Product Marketing Managerin", "Product Marketing Manager", Seniority.SENIOR, "Marketing"),
    _m("Werkstudent Customer Success & Sustainability", "Customer Success Associate", Seniority.JUNIOR,
       "Customer Success"),
    _m("Junior Customer Success Managerin & Sustainability Experte", "Customer Success Manager",
       Seniority.JUNIOR, "Customer Success"),
    _m("Head of Customer Success", "Customer Success Manager", Seniority.DIRECTOR, "Customer Success"),
    _m("Praktikum im Customer Success Management (m/w/d)", "Customer Success Associate", Seniority.JUNIOR,
       "Customer Success"),
    _m("Chief Operations Officer", "Operations Manager", Seniority.C_LEVEL, "Operations"),
    _m("Operations & Organizational Development Manager Sustainability", "Operations Manager",
       Seniority.MID, "Operations"),
    _m("Chief Financial Officer", "Finance Manager", Seniority.C_LEVEL, "Finance"),
    _m("People & Talent Acquisition Lead", "Talent Acquisition Manager", Seniority.LEAD, "People & Culture"),
    _m("Senior Sustainability Managerin", "Sustainability Manager", Seniority.SENIOR, "Sustainability"),
    _m("Mid Level Sustainability Managerin", "Sustainability Manager", Seniority.MID, "Sustainability"),
    _m("Sustainability Manager", "Sustainability Manager", Seniority.MID, "Sustainability"),
    _m("Chief Sustainability Officer / Klimaförster", "Sustainability Manager", Seniority.C_LEVEL,
       "Sustainability"),
    _m("(Pflicht-) Praktikum Sustainability (m/w/d)", "Sustainability Associate", Seniority.JUNIOR,
       "Sustainability"),
    _m("Wald & Product Marketing Specialist", "Product Marketing Manager", Seniority.MID, "Marketing"),
    _m("Legal Counsel", "Legal Counsel", Seniority.MID, "Legal"),
    _m("Geschäftsführer", "Chief Executive Officer", Seniority.C_LEVEL, "Leadership"),
)


def seed_library(store: MappingStore, mappings: Iterable[RoleMapping] = DEFAULT_ROLE_MAPPINGS) -> int:
    """Load confirmed mappings into a store. Returns the number of mappings written."""
    count = 0
    for mapping in mappings:
        store.upsert(new_entry(mapping, store.now()))
        count += 1
    logger.info("Seeded mapping library with %d mappings", count)
    return count
