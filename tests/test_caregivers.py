"""
Tests para la resolución y el enriquecimiento de cuidadores
"""
import asyncio
import logging

import pytest

from careconnect.caregivers import (
    enrich_bookings_with_caregiver_data, fetch_caregiver_data, find_featured_caregiver, resolve_caregiver,
)
from careconnect.client import UpstreamError
from careconnect.utils import resolve_id_candidates

def test_resolve_id_candidates():
    assert resolve_id_candidates("abc") == ["abc"]
    assert resolve_id_candidates(42) == ["42"]
    assert resolve_id_candidates(None) == []
    assert resolve_id_candidates({}) == []
    assert resolve_id_candidates({"_id": "a", "id": "a", "userId": {"_id": "u", "id": "u"}}) == ["a", "u"]
    assert resolve_id_candidates({"id": "b", "userId": "u"}) == ["b", "u"]

def test_embedded_caregiver_wins(featured_caregivers):
    booking = {"caregiver": {"_id": "c1", "name": "Ana Lim", "rating": 4.5}}
    ref = resolve_caregiver(booking, featured_caregivers)
    assert ref.name == "Ana Lim"
    assert ref.id == "c1"
    assert ref.rating == 4.5

def test_booking_shaped_object_is_not_a_caregiver(featured_caregivers):
    booking = {
        "caregiver": {"_id": "b-old", "name": "nested", "status": "pending", "date": "2024-01-01"},
        "caregiverId": "c1",
    }
    ref = resolve_caregiver(booking, featured_caregivers)
    assert ref.id == "c1"
    assert ref.name == "Maria Santos"

def test_featured_match_prefers_cache_and_keeps_embedded_fallbacks():
    featured = [{"_id": "p1", "name": "Carla Diaz", "userId": {"_id": "u9"}, "hourlyRate": 350, "profileImage": "c.png"}]
    booking = {"caregiverId": "u9", "caregiver": {"rating": 4.8, "reviewCount": 12}}
    ref = resolve_caregiver(booking, featured)
    assert ref.id == "p1"
    assert ref.name == "Carla Diaz"
    assert ref.hourly_rate == 350
    assert ref.avatar == "c.png"
    assert ref.rating == 4.8
    assert ref.review_count == 12

def test_alias_fields_and_string_ids_match():
    featured = [{"id": "c7", "name": "Dina Ramos", "rating": 5}, {"_id": 123, "name": "Eva Tan"}]
    assert resolve_caregiver({"assignedCaregiverId": "c7"}, featured).name == "Dina Ramos"
    assert resolve_caregiver({"caregiverId": 123}, featured).name == "Eva Tan"

def test_candidates_are_tried_in_order():
    featured = [{"_id": "second", "name": "Second"}, {"_id": "first", "name": "First"}]
    assert find_featured_caregiver(["first", "second"], featured)["name"] == "First"
    assert find_featured_caregiver(["missing"], featured) is None

def test_unresolved_caregiver_degrades_to_stub(caplog):
    with caplog.at_level(logging.DEBUG, logger="careconnect.caregivers"):
        ref = resolve_caregiver({"caregiverId": "zz"}, [{"_id": "c1", "name": "Maria"}])
    assert ref.id == "zz"
    assert ref.name == "Caregiver"
    assert "zz" in caplog.text

def test_stub_uses_fallback_name():
    assert resolve_caregiver({"caregiverId": "zz"}, fallback_name="Old Name").name == "Old Name"

def test_no_caregiver_at_all():
    ref = resolve_caregiver({})
    assert ref.id is None
    assert ref.name == "No caregiver assigned"

# ---------- Enriquecimiento ----------

class FakeCaregiverClient:
    """Cliente mínimo que cuenta cuántas peticiones hay en vuelo"""

    def __init__(self, profiles):
        self.profiles = profiles
        self.in_flight = 0
        self.peak = 0
        self.requested = []

    async def get_caregiver(self, caregiver_id):
        self.requested.append(caregiver_id)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if caregiver_id == "bad":
                raise UpstreamError("boom", 500)
            return {"success": True, "data": self.profiles[caregiver_id]}
        finally:
            self.in_flight -= 1

@pytest.mark.asyncio
async def test_fetch_caregiver_data_normalizes_ids():
    client = FakeCaregiverClient({"c1": {"_id": "c1", "name": "Maria"}})
    assert await fetch_caregiver_data(client, {"_id": "c1"}) == {"_id": "c1", "name": "Maria"}
    assert await fetch_caregiver_data(client, None) is None
    assert await fetch_caregiver_data(client, {"name": "no id"}) is None
    assert await fetch_caregiver_data(client, "bad") is None
    assert client.requested == ["c1", "bad"]

@pytest.mark.asyncio
async def test_enrichment_merges_fresh_data_and_keeps_order():
    client = FakeCaregiverClient({"c1": {"_id": "c1", "name": "Maria Santos", "hourlyRate": 400}})
    bookings = [
        {"_id": "b1", "caregiverId": "c1", "caregiver": {"name": "Old Maria", "rating": 4.2}},
        {"_id": "b2"},
        {"_id": "b3", "caregiverId": "bad"},
    ]
    enriched = await enrich_bookings_with_caregiver_data(bookings, client, max_concurrency=2)

    assert [b["_id"] for b in enriched] == ["b1", "b2", "b3"]
    assert enriched[0]["caregiver"] == {"name": "Maria Santos", "rating": 4.2, "hourlyRate": 400, "_id": "c1"}
    assert enriched[1] == bookings[1]
    assert enriched[2] == bookings[2]
    assert bookings[0]["caregiver"]["name"] == "Old Maria"  # la entrada no se toca

@pytest.mark.asyncio
async def test_enrichment_respects_concurrency_cap():
    profiles = {f"c{i}": {"_id": f"c{i}", "name": f"Caregiver {i}"} for i in range(8)}
    client = FakeCaregiverClient(profiles)
    bookings = [{"_id": f"b{i}", "caregiverId": f"c{i}"} for i in range(8)]

    enriched = await enrich_bookings_with_caregiver_data(bookings, client, max_concurrency=3)

    assert client.peak <= 3
    assert len(client.requested) == 8
    assert all(b["caregiver"]["name"].startswith("Caregiver ") for b in enriched)

@pytest.mark.asyncio
async def test_enrichment_passes_malformed_entries_through():
    client = FakeCaregiverClient({"c1": {"_id": "c1", "name": "Maria Santos"}})
    bookings = [None, "junk", {"_id": "b1", "caregiverId": "c1"}]

    enriched = await enrich_bookings_with_caregiver_data(bookings, client)

    assert enriched[:2] == [None, "junk"]
    assert enriched[2]["caregiver"]["name"] == "Maria Santos"
    assert client.requested == ["c1"]
