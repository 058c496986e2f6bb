# src/jobagg/pipeline/filter.py
from typing import Dict, Iterable, List, Optional, Sequence

from rapidfuzz import process, fuzz

from jobagg.models import NormalizedJob

COMPANY_SCORE_CUTOFF = 90


# simple normalizer to improve matching
def _clean_co(s: str) -> str:
    if not s:
        return ""
    s = s.lower().strip()
    # strip common company suffixes
    for suf in (" a/s", " as", " ab", " asa", " gmbh", " inc.", " inc", ", inc", " llc", ", llc",
                " ltd.", " ltd", " corp.", " corp", " corporation", " group", " company", " co.", " co"):
        if s.endswith(suf):
            s = s[: -len(suf)].strip()
    return s


def resolve_company(wanted: str, jobs: Sequence[NormalizedJob],
                    score_cutoff: int = COMPANY_SCORE_CUTOFF) -> Optional[str]:
    """
    Return the company_id `wanted` refers to, or None.
    Exact id/name match first, then RapidFuzz on cleaned company names.
    """
    if not wanted:
        return None
    key = wanted.strip().lower()

    names: Dict[str, str] = {}  # cleaned name -> company_id
    for j in jobs:
        cid = j.get("company_id", "")
        if key in (cid.lower(), j.get("company_name", "").lower()):
            return cid
        co = _clean_co(j.get("company_name", ""))
        if co:
            names.setdefault(co, cid)

    cand = _clean_co(wanted)
    if not cand or not names:
        return None
    choices = list(names)
    best = process.extractOne(cand, choices, scorer=fuzz.WRatio, score_cutoff=score_cutoff)
    if not best:
        return None
    matched_name, score, idx = best
    return names[choices[idx]]


def filter_jobs(
    jobs: Iterable[NormalizedJob],
    company: Optional[str] = None,
    country: Optional[str] = None,
    query: Optional[str] = None,
) -> List[NormalizedJob]:
    """
    Keep jobs matching every given filter, sorted by company then title.
    - company: id or name, fuzzy matched (unknown company -> no jobs)
    - country: ISO code, any of the job's countries
    - query: substring of the title or of any location
    """
    jobs = list(jobs)
    if company:
        cid = resolve_company(company, jobs)
        jobs = [j for j in jobs if cid is not None and j.get("company_id") == cid]
    if country:
        code = country.strip().upper()
        jobs = [j for j in jobs if code in (j.get("countries") or [])]
    if query:
        q = query.strip().lower()
        jobs = [
            j for j in jobs
            if q in (j.get("title") or "").lower()
            or any(q in loc.lower() for loc in j.get("locations") or [])
        ]
    return sorted(jobs, key=lambda j: ((j.get("company_name") or "").lower(), (j.get("title") or "").lower()))
