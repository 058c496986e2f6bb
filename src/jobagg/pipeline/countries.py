# src/jobagg/pipeline/countries.py
"""
Infer ISO country codes from free-text job locations.

The pattern table is hand-maintained and deliberately small; it only knows
the countries listed below. Iteration order matters:
- countries are tested in table order for every location,
- the first pattern that hits for a country wins (no double counting),
- `primary_country` is the first code discovered while walking the
  locations in order. It is NOT the most frequent one.
"""

import re
from typing import Iterable, List, NamedTuple

from jobagg.models import UNKNOWN_COUNTRY

_I = re.IGNORECASE

# Insertion order is the iteration order.
COUNTRY_PATTERNS = {
    "DK": [
        re.compile(r"denmark", _I),
        re.compile(r"danmark", _I),
        re.compile(r"danish", _I),
        re.compile(r"copenhagen|københavn", _I),
        re.compile(r"aarhus|århus", _I),
        re.compile(r"odense", _I),
        re.compile(r"aalborg", _I),
        re.compile(r"esbjerg", _I),
        re.compile(r"randers", _I),
        re.compile(r"billund", _I),
    ],
    "SE": [
        re.compile(r"sweden", _I),
        re.compile(r"sverige", _I),
        re.compile(r"swedish", _I),
        re.compile(r"stockholm", _I),
        re.compile(r"göteborg|gothenburg", _I),
        re.compile(r"malmö|malmo", _I),
    ],
    "NO": [
        re.compile(r"norway", _I),
        re.compile(r"norge", _I),
        re.compile(r"norwegian", _I),
        re.compile(r"oslo", _I),
        re.compile(r"bergen", _I),
        re.compile(r"trondheim", _I),
    ],
    "GB": [
        re.compile(r"united kingdom", _I),
        re.compile(r"uk\b", _I),
        re.compile(r"england", _I),
        re.compile(r"london", _I),
        re.compile(r"manchester", _I),
        re.compile(r"scotland", _I),
        re.compile(r"wales", _I),
    ],
    "DE": [
        re.compile(r"germany", _I),
        re.compile(r"deutschland", _I),
        re.compile(r"german\b", _I),
        re.compile(r"berlin", _I),
        re.compile(r"munich|münchen", _I),
        re.compile(r"hamburg", _I),
        re.compile(r"frankfurt", _I),
    ],
    "US": [
        re.compile(r"united states", _I),
        re.compile(r"usa\b", _I),
        re.compile(r"\bu\.s\.", _I),
        re.compile(r"new york", _I),
        re.compile(r"california", _I),
        re.compile(r"texas", _I),
    ],
    "PL": [
        re.compile(r"poland", _I),
        re.compile(r"polska", _I),
        re.compile(r"polish", _I),
        re.compile(r"warsaw|warszawa", _I),
        re.compile(r"krakow|kraków", _I),
    ],
}


class CountryClassification(NamedTuple):
    countries: List[str]
    primary_country: str


def detect_countries(location: str) -> List[str]:
    """All country codes one location string points at, in table order."""
    if not location:
        return []
    found: List[str] = []
    for code, patterns in COUNTRY_PATTERNS.items():
        for pattern in patterns:
            if pattern.search(location):
                found.append(code)
                break
    return found


def classify(locations: Iterable[str]) -> CountryClassification:
    """
    Classify a sequence of locations.

    classify(["Copenhagen, Denmark"]) -> (["DK"], "DK")
    classify(["Remote"])              -> ([], "UNKNOWN")
    """
    countries: List[str] = []
    for location in locations:
        for code in detect_countries(location):
            if code not in countries:
                countries.append(code)
    primary = countries[0] if countries else UNKNOWN_COUNTRY
    return CountryClassification(countries, primary)
