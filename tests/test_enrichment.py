"""Tests for catalog_dedup — cuisine enrichment."""

from catalog_dedup.enrichment import enrich_from_reference, infer_cuisine_tags


# ---- infer_cuisine_tags -----------------------------------------------------


class TestInferCuisineTags:
    def test_brand(self, make_record):
        record = make_record(name="JFC Store 114", brand="Jollibee")
        assert infer_cuisine_tags(record).cuisine_tags == ["filipino"]

    def test_name(self, make_record):
        assert infer_cuisine_tags(make_record(name="Starbucks Greenbelt 5")).cuisine_tags == ["coffee_shop"]
        assert infer_cuisine_tags(make_record(name="Mang Inasal Ayala")).cuisine_tags == ["filipino"]

    def test_category_fallback(self, make_record):
        record = make_record(name="Corner Shop", category="bakery")
        assert infer_cuisine_tags(record).cuisine_tags == ["bakery"]

    def test_existing_tags_untouched(self, make_record):
        record = make_record(name="Jollibee", cuisine_tags=["fast_food"])
        assert infer_cuisine_tags(record) is record

    def test_unknown_returns_same_record(self, make_record):
        record = make_record(name="Corner Shop")
        assert infer_cuisine_tags(record) is record

    def test_input_not_mutated(self, make_record):
        record = make_record(name="Jollibee")
        infer_cuisine_tags(record)
        assert record.cuisine_tags == []


# ---- enrich_from_reference --------------------------------------------------


class TestEnrichFromReference:
    def test_copies_tags_from_nearby_namesake(self, make_record):
        record = make_record("a1", "Jollibee Makati", 14.5547, 121.0244)
        donor = make_record("old-7", "Jollibee Makati Ave", 14.5548, 121.0244,
                            source="legacy", cuisine_tags=["filipino", "fast_food"])
        out, enriched = enrich_from_reference([record], [donor])
        assert enriched == 1
        assert out[0].cuisine_tags == ["filipino", "fast_food"]
        assert out[0].provenance == {"osm", "legacy"}
        assert record.cuisine_tags == []

    def test_too_far(self, make_record):
        record = make_record("a1", "Jollibee Makati", 14.5547, 121.0244)
        donor = make_record("old-7", "Jollibee Makati", 14.5565, 121.0244,
                            source="legacy", cuisine_tags=["filipino"])
        out, enriched = enrich_from_reference([record], [donor])
        assert enriched == 0
        assert out[0].cuisine_tags == []

    def test_dissimilar_name(self, make_record):
        record = make_record("a1", "Jollibee Makati", 14.5547, 121.0244)
        donor = make_record("old-7", "Chowking", 14.5547, 121.0244,
                            source="legacy", cuisine_tags=["chinese"])
        _, enriched = enrich_from_reference([record], [donor])
        assert enriched == 0

    def test_best_match_wins(self, make_record):
        record = make_record("a1", "Jollibee Makati", 14.5547, 121.0244)
        weaker = make_record("old-1", "Jollibee Makati Avenue Branch", 14.5547, 121.0244,
                             source="legacy", cuisine_tags=["fast_food"])
        stronger = make_record("old-2", "Jollibee Makati", 14.5548, 121.0244,
                               source="legacy", cuisine_tags=["filipino"])
        out, _ = enrich_from_reference([record], [weaker, stronger])
        assert out[0].cuisine_tags == ["filipino"]

    def test_tagged_records_skipped(self, make_record):
        record = make_record("a1", "Jollibee Makati", cuisine_tags=["fast_food"])
        donor = make_record("old-7", "Jollibee Makati", source="legacy", cuisine_tags=["filipino"])
        out, enriched = enrich_from_reference([record], [donor])
        assert enriched == 0
        assert out[0] is record

    def test_untagged_donors_ignored(self, make_record):
        record = make_record("a1", "Jollibee Makati")
        donor = make_record("old-7", "Jollibee Makati", source="legacy")
        _, enriched = enrich_from_reference([record], [donor])
        assert enriched == 0
