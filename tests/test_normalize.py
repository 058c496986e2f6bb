import hashlib

import pytest

import jobagg.pipeline.normalize as normalize_module
from jobagg.pipeline.normalize import (
    canonical_job_id,
    normalize,
    normalize_adzuna,
    normalize_records,
    record_hash,
    validate_job,
)

WD_URL = "https://lego.wd103.myworkdayjobs.com/LEGO_External/job/Billund/Designer_R-0123"


def test_canonical_id_is_sha256_of_source_and_external_id():
    expected = hashlib.sha256(b"greenhouse:123").hexdigest()
    assert canonical_job_id("greenhouse", "123") == expected


def test_same_record_gets_same_identity():
    raw = {"id": 42, "title": "Engineer", "location": {"name": "Copenhagen"}}
    a = normalize(raw, "acme", "Acme", "greenhouse")
    b = normalize(dict(raw), "acme", "Acme", "greenhouse")
    assert a["canonical_job_id"] == b["canonical_job_id"]
    assert a["external_id"] == "42"


def test_same_external_id_in_two_sources_is_two_jobs():
    raw = {"id": 42, "title": "Engineer"}
    assert (normalize(raw, "acme", "Acme", "greenhouse")["canonical_job_id"]
            != normalize(raw, "acme", "Acme", "emply")["canonical_job_id"])


class TestIdentityPriority:
    def test_posting_id_first(self):
        raw = {"post_id": "P1", "requisitionId": "REQ9", "job_url": WD_URL, "job_title": "Designer"}
        assert normalize(raw, "lego", "LEGO", "workday")["external_id"] == "P1"

    def test_requisition_id_second(self):
        raw = {"requisitionId": "REQ9", "job_url": WD_URL, "job_title": "Designer"}
        assert normalize(raw, "lego", "LEGO", "workday")["external_id"] == "REQ9"

    def test_job_url_suffix_third(self):
        raw = {"job_url": WD_URL, "job_title": "Designer"}
        assert normalize(raw, "lego", "LEGO", "workday")["external_id"] == "R-0123"

    def test_apply_url_segment_for_other_sources(self):
        raw = {"title": "Store Manager", "url": "https://matas.career.emply.com/ad/store-manager/xk29a"}
        assert normalize(raw, "matas", "Matas", "emply")["external_id"] == "xk29a"

    def test_record_hash_last(self):
        raw = {"job_title": "Designer", "location": "Billund"}
        job = normalize(raw, "lego", "LEGO", "workday")
        assert job["external_id"] == record_hash(raw)
        assert len(job["external_id"]) == 32


def test_greenhouse_apply_url_falls_back_to_embed_link():
    job = normalize({"id": 7, "title": "Engineer"}, "acme", "Acme", "greenhouse")
    assert job["apply_url"] == "https://boards.greenhouse.io/embed/job_app?token=7"


def test_greenhouse_fields():
    raw = {
        "id": 7, "title": " Engineer ", "location": {"name": "London, UK"},
        "absolute_url": "https://boards.greenhouse.io/acme/jobs/7",
        "departments": [{"name": "Platform"}],
        "updated_at": "2025-09-26T07:20:13Z",
    }
    job = normalize(raw, "acme", "Acme", "greenhouse")
    assert job["title"] == "Engineer"
    assert job["locations"] == ["London, UK"]
    assert job["countries"] == ["GB"]
    assert job["primary_country"] == "GB"
    assert job["department"] == "Platform"
    assert job["updated_at"] == "2025-09-26T07:20:13+00:00"


def test_unparsable_dates_are_dropped():
    job = normalize({"id": 1, "title": "X", "first_published": "last week"}, "acme", "Acme", "greenhouse")
    assert "posted_at" not in job


def test_workday_country_cues_are_appended():
    raw = {"post_id": "P1", "job_title": "Designer", "location": "Remote", "country": "Denmark"}
    job = normalize(raw, "lego", "LEGO", "workday")
    assert job["countries"] == ["DK"]
    assert job["primary_country"] == "DK"


def test_location_codes_come_before_cues():
    raw = {"post_id": "P1", "job_title": "Designer", "locations": ["London"], "countries": ["Denmark", "UK"]}
    job = normalize(raw, "lego", "LEGO", "workday")
    assert job["countries"] == ["GB", "DK"]
    assert job["primary_country"] == "GB"


def test_default_country_only_when_nothing_inferred():
    remote = normalize({"id": 1, "title": "X", "location": {"name": "Remote"}}, "acme", "Acme", "greenhouse", "dk")
    assert remote["countries"] == ["DK"]
    assert remote["primary_country"] == "DK"

    london = normalize({"id": 2, "title": "X", "location": {"name": "London"}}, "acme", "Acme", "greenhouse", "DK")
    assert london["countries"] == ["GB"]


def test_unknown_source_is_rejected():
    with pytest.raises(ValueError):
        normalize({"id": 1}, "acme", "Acme", "taleo")


def test_normalize_records_drops_and_counts_invalid():
    records = [
        {"id": 1, "title": "Engineer"},
        {"id": 2, "title": "   "},
        "not a record",
    ]
    jobs, failures = normalize_records(records, "acme", "Acme", "greenhouse")
    assert [j["external_id"] for j in jobs] == ["1"]
    assert failures == 2
    assert all(validate_job(j) for j in jobs)


def test_validate_job_requires_identity_fields():
    job = normalize({"id": 1, "title": "Engineer"}, "acme", "Acme", "greenhouse")
    assert validate_job(job)
    assert not validate_job({**job, "company_name": ""})
    assert not validate_job({**job, "title": None})


def test_normalize_adzuna_takes_company_from_each_result():
    data = {"results": [
        {"id": "a1", "title": "Data Engineer", "company": {"display_name": "Novo Nordisk"},
         "location": {"display_name": "Bagsværd"}, "redirect_url": "https://adzuna.example/a1",
         "salary_min": 500000, "salary_max": 650000},
        {"id": "a2", "title": "Analyst", "location": {"area": ["UK", "London"]}},
    ]}
    jobs, failures = normalize_adzuna(data, "DK")
    assert failures == 0
    assert jobs[0]["company_id"] == "novo-nordisk"
    assert jobs[0]["countries"] == ["DK"]
    assert jobs[0]["salary_max"] == 650000
    assert jobs[1]["company_name"] == "Unknown Company"
    assert jobs[1]["locations"] == ["UK"]
    assert jobs[1]["countries"] == ["GB"]


def test_plain_string_location_is_read_as_the_location():
    job = normalize({"id": 7, "title": "Designer", "location": "London, UK"}, "acme", "Acme", "greenhouse")
    assert job["locations"] == ["London, UK"]
    assert job["countries"] == ["GB"]


def test_one_unreadable_record_does_not_sink_the_batch(monkeypatch):
    mappers = dict(normalize_module.FIELD_MAPPERS)
    good = mappers["greenhouse"]

    def flaky(x):
        if x.get("id") == 2:
            raise TypeError("unexpected shape")
        return good(x)

    mappers["greenhouse"] = flaky
    monkeypatch.setattr(normalize_module, "FIELD_MAPPERS", mappers)

    records = [
        {"id": 1, "title": "Engineer", "location": {"name": "Copenhagen"}},
        {"id": 2, "title": "Analyst"},
        {"id": 3, "title": "Designer", "location": "Aarhus", "departments": "Design"},
    ]
    jobs, failures = normalize_records(records, "acme", "Acme", "greenhouse")
    assert [j["external_id"] for j in jobs] == ["1", "3"]
    assert failures == 1


def test_normalize_records_rejects_unknown_source():
    with pytest.raises(ValueError):
        normalize_records([{"id": 1}], "acme", "Acme", "taleo")


def test_normalize_adzuna_survives_odd_shapes():
    data = {"results": [
        {"id": "a1", "title": "Data Engineer", "company": "Maersk", "location": "Copenhagen",
         "category": ["IT Jobs"]},
        "junk",
        {"id": "a2", "title": "Analyst", "company": {"display_name": "Lego"}},
    ]}
    jobs, failures = normalize_adzuna(data, "DK")
    assert failures == 1
    assert [j["company_name"] for j in jobs] == ["Maersk", "Lego"]
    assert jobs[0]["locations"] == ["Copenhagen"]
    assert "department" not in jobs[0]
