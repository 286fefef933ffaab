"""Job title normalization.

Titles arrive in every convention customers can think of ("Sr. Engineer",
"SENIOR  engineer", "Ingénieur II"). Normalization folds them into a lookup
key, a base form without seniority decorations, and a seniority hint.
"""

import re
import unicodedata
from dataclasses import dataclass

from orgbench.domains.roles.models import NormalizedKey, Seniority

ABBREVIATIONS = {
    "sr": "senior",
    "snr": "senior",
    "jr": "junior",
    "jnr": "junior",
}

DECORATIONS = {
    "senior": Seniority.SENIOR,
    "junior": Seniority.JUNIOR,
    "lead": Seniority.LEAD,
    "principal": Seniority.STAFF,
    "staff": Seniority.STAFF,
}

ROMAN_NUMERALS = {
    "i": Seniority.JUNIOR,
    "ii": Seniority.MID,
    "iii": Seniority.SENIOR,
    "iv": Seniority.STAFF,
    "v": Seniority.STAFF,
}


@dataclass(frozen=True)
class NormalizedTitle:
    key: NormalizedKey
    base: str
    seniority_hint: Seniority | None


def clean_text(text: str) -> str:
    """Strip diacritics and punctuation, lowercase, collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    lowered = stripped.lower().replace("_", " ")
    return " ".join(re.sub(r"[^\w\s]", " ", lowered).split())


def _split_seniority(tokens: list[str]) -> tuple[Seniority | None, list[str]]:
    hint = None
    match tokens:
        case ["head", "of", *rest] if rest:
            hint, tokens = Seniority.DIRECTOR, rest
    match tokens:
        case [*rest, numeral] if rest and numeral in ROMAN_NUMERALS:
            hint, tokens = hint or ROMAN_NUMERALS[numeral], rest

    base = []
    for token in tokens:
        if token in DECORATIONS:
            hint = hint or DECORATIONS[token]
        else:
            base.append(token)
    return hint, base


def normalize_title(title: str) -> NormalizedTitle:
    tokens = [ABBREVIATIONS.get(t, t) for t in clean_text(title).split()]
    hint, base = _split_seniority(tokens)
    return NormalizedTitle(key=" ".join(tokens), base=" ".join(base), seniority_hint=hint)


def normalize_key(title: str) -> NormalizedKey:
    return normalize_title(title).key
