"""Country matching rules for duel guesses.

A guess matches when its normalized text equals the ISO code of the true
country or one of the names in the country's alias set.
"""

import re
from typing import List, Optional

_NON_LETTERS = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")

# Each entry: (substrings of the name, exact names, aliases added on a hit).
COUNTRY_ALIAS_TABLE = [
    (("united states",), (), ("usa", "us", "united states of america", "america")),
    (("united kingdom",), (), ("uk", "great britain", "britain", "england")),
    (("russia",), (), ("russian federation",)),
    (("south korea",), (), ("korea", "republic of korea")),
    (("north korea",), (), ("dprk", "democratic peoples republic of korea")),
    (("united arab emirates",), ("uae",), ("united arab emirates", "uae")),
    (("czechia",), (), ("czech republic",)),
    (("eswatini",), (), ("swaziland",)),
    (("east timor",), (), ("timor leste",)),
    (
        ("ivory coast", "côte d'ivoire", "cote divoire"),
        (),
        ("cote divoire", "cote d'ivoire", "ivory coast"),
    ),
]


def normalize_country(text: Optional[str]) -> str:
    """Lowercase, keep only a-z and whitespace, collapse runs of whitespace."""
    normalized = (text or "").strip().lower()
    normalized = _NON_LETTERS.sub("", normalized)
    return _WHITESPACE.sub(" ", normalized).strip()


def country_aliases(country: Optional[str], code: Optional[str] = None) -> List[str]:
    """Return every name considered equal to ``country``.

    Args:
        country (Optional[str]): Country name, usually already normalized
        code (Optional[str]): ISO country code

    Returns:
        List[str]: Aliases in insertion order, without duplicates
    """
    name = (country or "").lower()
    country_code = (code or "").lower()
    aliases = []

    def add(alias: str) -> None:
        if alias not in aliases:
            aliases.append(alias)

    if name:
        add(name)
    if country_code:
        add(country_code)

    for contained, exact, extra_aliases in COUNTRY_ALIAS_TABLE:
        if name in exact or any(part in name for part in contained):
            for alias in extra_aliases:
                add(alias)
    return aliases


def match_guess(guess: Optional[str], country: Optional[str], code: Optional[str] = None) -> bool:
    """Check whether a free-text guess names the true country.

    Args:
        guess (Optional[str]): Text typed by the player or returned by the model
        country (Optional[str]): Ground-truth country name
        code (Optional[str]): Ground-truth ISO code

    Returns:
        bool: True when the guess equals the code or any alias of the country
    """
    normalized_guess = normalize_country(guess)
    if not normalized_guess:
        return False
    if code and normalized_guess == code.strip().lower():
        return True
    normalized_country = normalize_country(country)
    if not normalized_country:
        return False
    return normalized_guess in country_aliases(normalized_country, code)
