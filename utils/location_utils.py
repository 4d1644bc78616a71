"""
utils/location_utils.py

Purpose: Declared-vs-observed location matching

- normalize(): lowercase, strip diacritics, keep only [a-z0-9]
- matches(): fuzzy containment in either direction
- country_matches(): ISO code first, then normalized name equality

The containment rule is deliberately permissive: a very short declared
value (e.g. one letter) matches almost any observed name.
"""

import re
import unicodedata
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(value: Optional[str]) -> str:
    """
    Lowercases, folds diacritics and drops every non-alphanumeric character.

    Examples:
        "Farg'ona Region" -> "fargonaregion"
        "Côte d'Ivoire"   -> "cotedivoire"
    """
    if not value:
        return ""
    folded = unicodedata.normalize("NFKD", value)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", folded.lower())


def matches(declared: Optional[str], observed: Optional[str]) -> bool:
    """
    Fuzzy containment match.

    Both values are normalized; they match when either one is a substring
    of the other. An absent observed value never matches.

    Args:
        declared: What the user typed
        observed: What reverse geocoding returned

    Returns:
        True if the values are considered the same place
    """
    if not observed:
        return False
    norm_declared = normalize(declared)
    norm_observed = normalize(observed)
    return norm_declared in norm_observed or norm_observed in norm_declared


def country_matches(
    declared_name: str,
    declared_code: Optional[str],
    observed_name: Optional[str],
    observed_code: Optional[str]
) -> bool:
    """
    Country check: ISO code comparison when both codes are known,
    otherwise (or on code mismatch) normalized name equality.
    """
    if declared_code and observed_code and declared_code.upper() == observed_code.upper():
        return True
    if observed_name:
        return normalize(observed_name) == normalize(declared_name)
    return False


def mismatch_label(observed: Optional[str]) -> str:
    """Observed value as shown in mismatch messages."""
    return observed.upper() if observed else "UNKNOWN"
