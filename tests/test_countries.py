from jobagg.pipeline.countries import classify, detect_countries


def test_copenhagen_is_denmark():
    assert classify(["Copenhagen, Denmark"]) == (["DK"], "DK")


def test_remote_is_unknown():
    countries, primary = classify(["Remote"])
    assert countries == []
    assert primary == "UNKNOWN"


def test_primary_is_first_discovered_not_most_frequent():
    result = classify(["London, UK", "Copenhagen", "Aarhus", "Odense, Denmark"])
    assert result.countries == ["GB", "DK"]
    assert result.primary_country == "GB"


def test_countries_are_deduplicated_in_order():
    assert classify(["Copenhagen", "Aarhus, Denmark", "Stockholm"]).countries == ["DK", "SE"]


def test_one_location_can_name_several_countries_in_table_order():
    # table order is DK before SE, regardless of position in the string
    assert detect_countries("Malmö / Copenhagen") == ["DK", "SE"]


def test_local_spellings_and_case():
    assert detect_countries("KØBENHAVN") == ["DK"]
    assert detect_countries("München") == ["DE"]
    assert detect_countries("Warszawa, Polska") == ["PL"]
    assert detect_countries("New York, NY") == ["US"]


def test_empty_inputs():
    assert detect_countries("") == []
    assert classify([]) == ([], "UNKNOWN")


def test_classification_is_deterministic():
    locs = ["Oslo", "Billund", "Berlin"]
    assert classify(locs) == classify(list(locs)) == (["NO", "DK", "DE"], "NO")
