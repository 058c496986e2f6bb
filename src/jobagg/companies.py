# src/jobagg/companies.py
"""
Shared company configuration.

Add employers to `COMPANY_CONFIG` (just a name and a careers URL; a bare
domain like "matas.dk" is fine). Ids are derived from the name, so the same
company always gets the same id.
"""

from __future__ import annotations
import re
import unicodedata
from typing import Iterable, List, Optional

from jobagg.models import Company

# Letters NFKD can't decompose into ASCII
_TRANSLIT = str.maketrans({"ø": "o", "æ": "ae", "å": "aa", "ß": "ss", "ł": "l", "đ": "d"})


def company_id(name: str) -> str:
    """'Danske Bank' -> 'danske-bank', 'Ørsted' -> 'orsted'."""
    s = (name or "").strip().lower().translate(_TRANSLIT)
    s = unicodedata.normalize("NFKD", s).encode("ascii", "ignore").decode("ascii")
    s = re.sub(r"\s+", "-", s)
    return re.sub(r"[^a-z0-9-]", "", s)


def make_company(name: str, careers_url: str, country: Optional[str] = None) -> Company:
    company: Company = {"id": company_id(name), "name": name, "careers_url": careers_url}
    if country:
        company["country"] = country.upper()
    return company


# (name, careers URL, default country)
COMPANY_CONFIG = [
    ("Ørsted", "https://orsted.com/en/careers/vacancies-list", None),
    ("Novo Nordisk", "https://careers.novonordisk.com/search/?q=&locationsearch=denmark", "DK"),
    ("Matas", "matas.dk", "DK"),  # bare domain, Emply subdomain is derived
    ("Carlsberg", "https://careers.carlsberg.com/CarlsbergDK/search/?q=&locale=en_GB", "DK"),
    ("Arla", "https://jobs.arla.com/", "DK"),
    ("LEGO", "https://lego.wd103.myworkdayjobs.com/da-DK/LEGO_External", "DK"),
    ("Vestas", "https://vestas.wd3.myworkdayjobs.com/Vestas", "DK"),
    ("Coloplast", "https://coloplast.wd3.myworkdayjobs.com/Coloplast", "DK"),
    ("Danske Bank", "https://danskebank.wd3.myworkdayjobs.com/Danske_Bank_Careers", "DK"),
    ("Grundfos", "https://grundfos.wd3.myworkdayjobs.com/Grundfos_Careers", "DK"),
]

COMPANIES: List[Company] = [make_company(*row) for row in COMPANY_CONFIG]


def get_company(key: str, companies: Optional[Iterable[Company]] = None) -> Optional[Company]:
    """Look a company up by id or (case-insensitive) display name."""
    if not key:
        return None
    wanted_id = company_id(key)
    for c in companies if companies is not None else COMPANIES:
        if c["id"] == key or c["id"] == wanted_id or c["name"].lower() == key.lower():
            return c
    return None
