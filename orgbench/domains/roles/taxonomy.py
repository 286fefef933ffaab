"""Canonical role taxonomy.

The taxonomy is static reference data: one entry per (standardized title,
seniority) with the aliases customers commonly use for it. Bump
TAXONOMY_VERSION whenever an entry or alias changes.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from orgbench.domains.roles.models import NormalizedKey, Seniority, TaxonomyEntry
from orgbench.domains.roles.normalize import normalize_key

logger = logging.getLogger(__name__)

TAXONOMY_VERSION = "2024.1"

S = Seniority

TAXONOMY: tuple[TaxonomyEntry, ...] = (
    # Engineering
    TaxonomyEntry("Engineering", "Software Engineer", S.JUNIOR,
                  ("Junior Developer", "Junior Software Developer", "Associate Engineer"),
                  "Entry-level software engineering role"),
    TaxonomyEntry("Engineering", "Software Engineer", S.MID,
                  ("Developer", "Software Developer", "Fullstack Developer", "Full Stack Developer"),
                  "Mid-level software engineering role"),
    TaxonomyEntry("Engineering", "Software Engineer", S.SENIOR,
                  ("Senior Developer", "Senior Software Developer", "Senior Fullstack Engineer"),
                  "Senior-level software engineering role"),
    TaxonomyEntry("Engineering", "Software Engineer", S.STAFF,
                  ("Staff Engineer", "Staff Software Engineer", "Principal Engineer"),
                  "Staff/Principal-level engineering role"),
    TaxonomyEntry("Engineering", "Engineering Manager", S.MANAGER,
                  ("Engineering Lead", "Tech Lead", "Team Lead"),
                  "Engineering people manager"),
    TaxonomyEntry("Engineering", "Engineering Manager", S.DIRECTOR,
                  ("Director of Engineering", "Head of Engineering", "Engineering Director"),
                  "Director-level engineering leadership"),
    TaxonomyEntry("Engineering", "Engineering Manager", S.VP,
                  ("VP of Engineering", "VP Engineering", "Vice President of Engineering"),
                  "VP-level engineering leadership"),
    TaxonomyEntry("Engineering", "Engineering Manager", S.C_LEVEL,
                  ("CTO", "Chief Technology Officer", "Chief Technical Officer"),
                  "C-level engineering leadership"),
    TaxonomyEntry("Engineering", "Data Scientist", S.MID,
                  ("Data Analyst", "ML Engineer", "Machine Learning Engineer"),
                  "Data science and machine learning role"),
    TaxonomyEntry("Engineering", "Data Scientist", S.SENIOR,
                  ("Senior Data Scientist", "Senior ML Engineer", "Senior Machine Learning Engineer"),
                  "Senior data science role"),
    # Sales
    TaxonomyEntry("Sales", "Sales Development Representative", S.JUNIOR,
                  ("SDR", "BDR", "Business Development Representative", "Inside Sales Rep"),
                  "Entry-level outbound sales role"),
    TaxonomyEntry("Sales", "Account Executive", S.MID,
                  ("AE", "Sales Executive", "Account Manager"),
                  "Mid-level closing sales role"),
    TaxonomyEntry("Sales", "Account Executive", S.SENIOR,
                  ("Senior AE", "Senior Account Executive", "Enterprise AE"),
                  "Senior closing sales role"),
    TaxonomyEntry("Sales", "Sales Manager", S.MANAGER,
                  ("Sales Team Lead", "Sales Lead", "Regional Sales Manager"),
                  "Sales team manager"),
    TaxonomyEntry("Sales", "Sales Manager", S.DIRECTOR,
                  ("Director of Sales", "Head of Sales", "Sales Director"),
                  "Director-level sales leadership"),
    TaxonomyEntry("Sales", "Sales Manager", S.VP,
                  ("VP of Sales", "VP Sales", "Vice President of Sales"),
                  "VP-level sales leadership"),
    TaxonomyEntry("Sales", "Sales Manager", S.C_LEVEL,
                  ("CRO", "Chief Revenue Officer", "Chief Sales Officer"),
                  "C-level sales/revenue leadership"),
    TaxonomyEntry("Sales", "Partnerships Manager", S.MID,
                  ("Partnership Manager", "Business Development Manager", "Channel Manager"),
                  "Strategic partnerships role"),
    # Product
    TaxonomyEntry("Product", "Product Manager", S.MID,
                  ("PM", "Product Owner", "Associate Product Manager"),
                  "Product management role"),
    TaxonomyEntry("Product", "Product Manager", S.SENIOR,
                  ("Senior PM", "Senior Product Manager", "Lead Product Manager"),
                  "Senior product management role"),
    TaxonomyEntry("Product", "Product Manager", S.DIRECTOR,
                  ("Director of Product", "Head of Product", "Product Director"),
                  "Director-level product leadership"),
    TaxonomyEntry("Product", "Product Manager", S.VP,
                  ("VP of Product", "VP Product"),
                  "VP-level product leadership"),
    TaxonomyEntry("Product", "Product Manager", S.C_LEVEL,
                  ("CPO", "Chief Product Officer"),
                  "C-level product leadership"),
    TaxonomyEntry("Product", "Product Designer", S.MID,
                  ("UX Designer", "UI Designer", "UX/UI Designer", "Designer"),
                  "Product design role"),
    TaxonomyEntry("Product", "Product Designer", S.SENIOR,
                  ("Senior Designer", "Senior UX Designer", "Senior Product Designer"),
                  "Senior product design role"),
    # Marketing
    TaxonomyEntry("Marketing", "Marketing Manager", S.MID,
                  ("Marketing Specialist", "Digital Marketing Manager", "Growth Marketer"),
                  "Marketing management role"),
    TaxonomyEntry("Marketing", "Marketing Manager", S.SENIOR,
                  ("Senior Marketing Manager", "Marketing Lead"),
                  "Senior marketing role"),
    TaxonomyEntry("Marketing", "Marketing Manager", S.DIRECTOR,
                  ("Director of Marketing", "Head of Marketing", "Marketing Director"),
                  "Director-level marketing leadership"),
    TaxonomyEntry("Marketing", "Marketing Manager", S.VP,
                  ("VP of Marketing", "VP Marketing"),
                  "VP-level marketing leadership"),
    TaxonomyEntry("Marketing", "Marketing Manager", S.C_LEVEL,
                  ("CMO", "Chief Marketing Officer"),
                  "C-level marketing leadership"),
    TaxonomyEntry("Marketing", "Product Marketing Manager", S.MID,
                  ("PMM", "Product Marketer"),
                  "Product marketing role"),
    TaxonomyEntry("Marketing", "Brand Designer", S.MID,
                  ("Brand & Marketing Designer", "Graphic Designer", "Creative Designer"),
                  "Brand and creative design role"),
    # Customer Success
    TaxonomyEntry("Customer Success", "Customer Success Manager", S.JUNIOR,
                  ("Junior CSM", "Customer Success Associate", "CS Associate"),
                  "Entry-level customer success role"),
    TaxonomyEntry("Customer Success", "Customer Success Manager", S.MID,
                  ("CSM", "Customer Success Account Manager", "Customer Success Specialist"),
                  "Customer success management role"),
    TaxonomyEntry("Customer Success", "Customer Success Manager", S.SENIOR,
                  ("Senior CSM", "Senior Customer Success Manager", "Enterprise CSM"),
                  "Senior customer success role"),
    TaxonomyEntry("Customer Success", "Customer Success Manager", S.DIRECTOR,
                  ("Director of Customer Success", "Head of Customer Success", "CS Director"),
                  "Director-level CS leadership"),
    # Operations
    TaxonomyEntry("Operations", "Operations Manager", S.MID,
                  ("Operations Specialist", "Ops Manager", "Business Operations Manager"),
                  "Operations management role"),
    TaxonomyEntry("Operations", "Operations Manager", S.DIRECTOR,
                  ("Director of Operations", "Head of Operations", "Operations Director"),
                  "Director-level operations leadership"),
    TaxonomyEntry("Operations", "Operations Manager", S.C_LEVEL,
                  ("COO", "Chief Operating Officer"),
                  "C-level operations leadership"),
    # Finance
    TaxonomyEntry("Finance", "Finance Manager", S.MID,
                  ("Financial Analyst", "Accountant", "Controller"),
                  "Finance management role"),
    TaxonomyEntry("Finance", "Finance Manager", S.C_LEVEL,
                  ("CFO", "Chief Financial Officer"),
                  "C-level finance leadership"),
    # People & Culture
    TaxonomyEntry("People & Culture", "Talent Acquisition Manager", S.MID,
                  ("Recruiter", "People & Talent Acquisition Lead", "Talent Partner"),
                  "Talent acquisition role"),
    TaxonomyEntry("People & Culture", "People Operations Manager", S.MID,
                  ("HR Manager", "People Manager", "People Ops"),
                  "People operations role"),
    TaxonomyEntry("People & Culture", "People Operations Manager", S.DIRECTOR,
                  ("Head of People", "Director of People", "CHRO"),
                  "Director-level people leadership"),
    # Sustainability
    TaxonomyEntry("Sustainability", "Sustainability Manager", S.JUNIOR,
                  ("Sustainability Associate", "Junior Sustainability Manager", "Sustainability Analyst"),
                  "Entry-level sustainability role"),
    TaxonomyEntry("Sustainability", "Sustainability Manager", S.MID,
                  ("Mid Level Sustainability Manager", "Sustainability Specialist"),
                  "Mid-level sustainability role"),
    TaxonomyEntry("Sustainability", "Sustainability Manager", S.SENIOR,
                  ("Senior Sustainability Manager", "Lead Sustainability Manager"),
                  "Senior sustainability role"),
    TaxonomyEntry("Sustainability", "Sustainability Manager", S.C_LEVEL,
                  ("Chief Sustainability Officer", "CSO", "Klimaförster"),
                  "C-level sustainability leadership"),
    # Legal
    TaxonomyEntry("Legal", "Legal Counsel", S.MID,
                  ("Lawyer", "Attorney", "In-House Counsel"),
                  "Legal counsel role"),
    # Leadership
    TaxonomyEntry("Leadership", "Chief Executive Officer", S.C_LEVEL,
                  ("CEO", "Geschäftsführer", "Managing Director", "President"),
                  "Chief Executive Officer"),
)


def alias_keys(entry: TaxonomyEntry) -> set[NormalizedKey]:
    return {normalize_key(alias) for alias in entry.aliases}


def build_alias_index(entries: Iterable[TaxonomyEntry]) -> dict[NormalizedKey, TaxonomyEntry]:
    """Map each normalized alias to its entry. The first entry claiming an alias wins."""
    index: dict[NormalizedKey, TaxonomyEntry] = {}
    for entry in entries:
        for key in alias_keys(entry):
            index.setdefault(key, entry)
    return index


def build_title_index(entries: Iterable[TaxonomyEntry]) -> dict[str, list[TaxonomyEntry]]:
    """Group entries by the normalized form of their standardized title."""
    index: dict[str, list[TaxonomyEntry]] = defaultdict(list)
    for entry in entries:
        index[normalize_key(entry.standardized_title)].append(entry)
    return dict(index)


def canonical_entry(entries: Sequence[TaxonomyEntry]) -> TaxonomyEntry:
    """The level an undecorated standardized title stands for: Mid when the
    title has a Mid entry, else the first level listed for it."""
    for entry in entries:
        if entry.seniority == Seniority.MID:
            return entry
    return entries[0]


def validate_taxonomy(entries: Iterable[TaxonomyEntry] = TAXONOMY) -> list[str]:
    """Return a message for every alias that resolves to more than one entry."""
    owners: dict[NormalizedKey, list[TaxonomyEntry]] = defaultdict(list)
    for entry in entries:
        for key in alias_keys(entry):
            owners[key].append(entry)

    errors = []
    for key, claimed_by in sorted(owners.items()):
        if len(claimed_by) > 1:
            names = ", ".join(f"{e.standardized_title} ({e.seniority})" for e in claimed_by)
            errors.append(f"Alias '{key}' maps to multiple entries: {names}")
    if errors:
        logger.warning("Taxonomy %s has %d conflicting aliases", TAXONOMY_VERSION, len(errors))
    return errors
