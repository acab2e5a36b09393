from tripmap.api.gazetteer import GAZETTEER, lookup, synthetic_candidate


def test_lookup_matches_city_case_insensitively():
    ids = [c.id for c in lookup("BUDAPEST")]
    assert ids == ["gazetteer-bud"]


def test_lookup_matches_code_and_name():
    assert [c.id for c in lookup("cdg")] == ["gazetteer-cdg"]
    assert [c.id for c in lookup("merlion")] == ["gazetteer-mlp"]


def test_lookup_returns_every_singapore_landmark():
    candidates = lookup("singapore")
    assert {c.id for c in candidates} == {"gazetteer-mbs", "gazetteer-mlp", "gazetteer-gbtb"}
    assert all(c.source == "gazetteer" for c in candidates)


def test_lookup_blank_and_unknown():
    assert lookup("  ") == []
    assert lookup("xyz123") == []


def test_gazetteer_ids_are_unique():
    ids = [entry.id for entry in GAZETTEER]
    assert len(ids) == len(set(ids))


def test_synthetic_candidate(search_config):
    candidate = synthetic_candidate(" xyz123 ", search_config)
    assert candidate.id == "fallback-xyz123"
    assert candidate.name == "xyz123 (Approximate Location)"
    assert candidate.source == "fallback"
    assert (candidate.latitude, candidate.longitude) == (1.3521, 103.8198)


def test_synthetic_candidate_slug(search_config):
    assert synthetic_candidate("Old Town / Café", search_config).id == "fallback-old-town-caf"
    assert synthetic_candidate("???", search_config).id == "fallback-location"
