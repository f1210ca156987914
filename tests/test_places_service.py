import pytest

from poi_sync.common.exceptions import ExternalSourceError, StoreError
from poi_sync.model.google import Circle, LatLng, LocationBias, PlaceDetails, SearchNearbyResponse
from poi_sync.service.places_service import PlacesService

from conftest import make_details, make_record, make_stub, make_text_place


class TestCacheKeys:
    def test_nearby_key_format(self):
        key = PlacesService.nearby_cache_key(41.00820049, 28.9784, 1000.0, "cafe")
        assert key == "search:nearby:41.008200:28.978400:1000.0:cafe"

    def test_sub_decimeter_jitter_shares_key(self):
        a = PlacesService.nearby_cache_key(41.0000001, 29.0000004, 500.0, "cafe")
        b = PlacesService.nearby_cache_key(41.0000004, 29.0000001, 500.0, "cafe")
        assert a == b

    def test_sixth_decimal_difference_changes_key(self):
        a = PlacesService.nearby_cache_key(41.000001, 29.0, 500.0, "cafe")
        b = PlacesService.nearby_cache_key(41.000002, 29.0, 500.0, "cafe")
        assert a != b

    def test_rounding_is_half_up(self):
        assert str(PlacesService.round_coordinate(0.0000005)) == "0.000001"
        assert str(PlacesService.round_coordinate(-12.3456785)) == "-12.345679"

    def test_radius_and_type_discriminate(self):
        base = PlacesService.nearby_cache_key(41.0, 29.0, 500.0, "cafe")
        assert base != PlacesService.nearby_cache_key(41.0, 29.0, 600.0, "cafe")
        assert base != PlacesService.nearby_cache_key(41.0, 29.0, 500.0, "bar")

    def test_text_key_is_normalized(self):
        assert PlacesService.text_cache_key("  Galata COFFEE ", "en") == "search:text:galata coffee:en"
        assert PlacesService.text_cache_key("coffee", "en") != PlacesService.text_cache_key("coffee", "tr")

    def test_details_key(self):
        assert PlacesService.details_cache_key("abc") == "details:abc"


class TestSearchNearby:
    def test_cache_hit_does_no_other_io(self, places_service, cache, poi_repo, provider):
        key = PlacesService.nearby_cache_key(41.0, 29.0, 1000.0, "cafe")
        cache.data[key] = SearchNearbyResponse(places=[make_stub("cached")]).to_json()

        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert [p.id for p in response.places] == ["cached"]
        assert poi_repo.calls == []
        assert provider.calls == []

    def test_store_hit_skips_provider(self, places_service, cache, poi_repo, provider):
        poi_repo.records["p1"] = make_record("p1", lat=41.0005, lng=29.0)

        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe", lang="tr")

        assert [p.id for p in response.places] == ["p1"]
        assert response.places[0].display_name.text == "Stored Cafe"
        assert response.places[0].display_name.language_code == "tr"
        assert provider.calls == []
        assert poi_repo.calls[0] == ("find_near", 41.0, 29.0, 1.0, "cafe")

        key = PlacesService.nearby_cache_key(41.0, 29.0, 1000.0, "cafe")
        assert cache.ttls[key] == 600

    def test_store_miss_goes_to_provider_and_persists_stubs(self, places_service, cache, poi_repo, provider, executor):
        provider.nearby_places = [make_stub("g1", name="Remote"), make_stub("g2", name=None)]

        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert [p.id for p in response.places] == ["g1", "g2"]
        assert provider.count("search_nearby") == 1
        assert executor.submitted == 1
        assert poi_repo.records["g1"].type == "cafe"
        assert poi_repo.records["g1"].address == "No Address"
        assert poi_repo.records["g2"].name == "Unnamed Place"
        assert PlacesService.nearby_cache_key(41.0, 29.0, 1000.0, "cafe") in cache.data

    def test_second_call_is_served_from_cache(self, places_service, provider):
        provider.nearby_places = [make_stub("g1")]

        places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")
        second = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert [p.id for p in second.places] == ["g1"]
        assert provider.count("search_nearby") == 1

    def test_background_persist_failure_is_not_surfaced(self, places_service, poi_repo, provider):
        provider.nearby_places = [make_stub("g1")]
        poi_repo.fail_all = True

        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert [p.id for p in response.places] == ["g1"]
        assert poi_repo.count() == 0

    def test_unstorable_stub_does_not_block_the_rest(self, places_service, poi_repo, provider):
        provider.nearby_places = [make_stub("g1"), make_stub("bad", lat=95.0), make_stub("g3")]

        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert [p.id for p in response.places] == ["g1", "bad", "g3"]
        assert set(poi_repo.records) == {"g1", "g3"}

    def test_empty_provider_result_skips_persist(self, places_service, executor):
        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert response.places == []
        assert executor.submitted == 0

    def test_provider_error_propagates(self, places_service, provider):
        provider.nearby_error = ExternalSourceError("down", service_name="Google Places API")

        with pytest.raises(ExternalSourceError) as exc_info:
            places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")
        assert exc_info.value.service_name == "Google Places API"

    def test_store_read_error_propagates(self, places_service, poi_repo):
        def broken(*args, **kwargs):
            raise StoreError("mongo down")
        poi_repo.find_near = broken

        with pytest.raises(StoreError):
            places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

    def test_cache_failures_fail_open(self, places_service, cache, provider):
        cache.fail_reads = True
        cache.fail_writes = True
        provider.nearby_places = [make_stub("g1")]

        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert [p.id for p in response.places] == ["g1"]

    def test_corrupt_cache_entry_is_a_miss(self, places_service, cache, provider):
        cache.data[PlacesService.nearby_cache_key(41.0, 29.0, 1000.0, "cafe")] = "{not json"
        provider.nearby_places = [make_stub("g1")]

        response = places_service.search_nearby(41.0, 29.0, 1000.0, "cafe")

        assert [p.id for p in response.places] == ["g1"]
        assert provider.count("search_nearby") == 1


class TestSearchText:
    def test_always_calls_provider_on_miss(self, places_service, poi_repo, provider):
        poi_repo.records["local"] = make_record("local", name="Coffee Lab")
        provider.text_places = [make_text_place("t1", name="Coffee Lab")]

        response = places_service.search_text("coffee", "en", 10)

        assert [p.id for p in response.places] == ["t1"]
        assert provider.count("search_text") == 1
        assert not any(call[0] == "find_by_text" for call in poi_repo.calls)

    def test_persists_before_returning(self, places_service, poi_repo, provider):
        provider.text_places = [make_text_place("t1", address=None)]

        places_service.search_text("coffee", "en", 10)

        assert poi_repo.records["t1"].address == "No Address"
        assert poi_repo.records["t1"].type is None

    def test_persist_failure_still_returns(self, places_service, poi_repo, provider, cache):
        provider.text_places = [make_text_place("t1")]
        poi_repo.fail_all = True

        response = places_service.search_text("coffee", "en", 10)

        assert [p.id for p in response.places] == ["t1"]
        assert PlacesService.text_cache_key("coffee", "en") in cache.data

    def test_unstorable_result_is_skipped(self, places_service, poi_repo, provider):
        bad = make_text_place("bad").model_copy(update={"location": LatLng(latitude=95.0, longitude=29.0)})
        provider.text_places = [bad, make_text_place("t2")]

        response = places_service.search_text("coffee", "en", 10)

        assert [p.id for p in response.places] == ["bad", "t2"]
        assert set(poi_repo.records) == {"t2"}

    def test_normalized_query_hits_cache(self, places_service, provider):
        provider.text_places = [make_text_place("t1")]

        places_service.search_text("  Coffee ", "en", 10)
        places_service.search_text("coffee", "en", 10)

        assert provider.count("search_text") == 1

    def test_location_bias_is_forwarded(self, places_service, provider):
        bias = LocationBias(circle=Circle(center=LatLng(latitude=41.0, longitude=29.0), radius=500))

        places_service.search_text("coffee", None, 5, bias)

        assert provider.calls[0] == ("search_text", "coffee", "en", 5, bias)


class TestGetDetails:
    def test_store_hit_skips_provider(self, places_service, poi_repo, provider, cache):
        poi_repo.records["p1"] = make_record("p1")

        details = places_service.get_details("p1")

        assert details.id == "p1"
        assert details.formatted_address == "Galata"
        assert provider.calls == []
        assert cache.ttls["details:p1"] == 86400

    def test_miss_fetches_persists_and_caches(self, places_service, poi_repo, provider, cache):
        provider.details["g1"] = make_details("g1", name="Pera Cafe")

        details = places_service.get_details("g1")

        assert details.display_name.text == "Pera Cafe"
        assert poi_repo.records["g1"].opening_hours.open_now is True
        assert PlaceDetails.model_validate_json(cache.data["details:g1"]).id == "g1"
        assert cache.ttls["details:g1"] == 86400

    def test_cache_hit(self, places_service, cache, poi_repo, provider):
        cache.data["details:g1"] = make_details("g1").to_json()

        details = places_service.get_details("g1")

        assert details.opening_hours.weekday_descriptions == ["Monday: 9:00 AM - 5:00 PM"]
        assert poi_repo.calls == []
        assert provider.calls == []

    def test_persist_failure_is_logged_only(self, places_service, poi_repo, provider):
        provider.details["g1"] = make_details("g1")
        poi_repo.fail_ids.add("g1")

        assert places_service.get_details("g1").id == "g1"

    def test_unstorable_details_are_still_returned(self, places_service, poi_repo, provider, cache):
        provider.details["g1"] = make_details("g1", lat=95.0)

        details = places_service.get_details("g1")

        assert details.location.latitude == 95.0
        assert poi_repo.count() == 0
        assert "details:g1" in cache.data


def test_search_local_text_queries_store_only(places_service, poi_repo, provider):
    poi_repo.records["p1"] = make_record("p1", name="Galata Tower Cafe")
    poi_repo.records["p2"] = make_record("p2", name="Kadikoy Fish", address="Moda")

    results = places_service.search_local_text("galata", limit=5)

    assert [r.place_id for r in results] == ["p1"]
    assert provider.calls == []
