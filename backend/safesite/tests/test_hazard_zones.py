import threading
import uuid

import pytest

from safesite import models
from safesite.errors import ConflictError, ValidationError
from safesite.services import hazard_zones

from .conftest import (
    TestingSessionLocal,
    client,
    create_protocol,
    create_zone,
    ensure_auth_headers,
    unique_name,
)


def test_create_zone_defaults_to_green(client):
    headers, _ = ensure_auth_headers(client)
    zone = create_zone(client, headers)
    assert zone["color"] == "#16a34a"
    assert zone["createdAt"]


def test_create_zone_with_color(client):
    headers, _ = ensure_auth_headers(client)
    zone = create_zone(client, headers, color="#dc2626")
    assert zone["color"] == "#dc2626"


@pytest.mark.parametrize("color", ["red", "#12345", "#GGGGGG", "dc2626"])
def test_create_zone_rejects_bad_color(client, color):
    headers, _ = ensure_auth_headers(client)
    resp = client.post("/api/hazard-zones", json={"name": unique_name(), "color": color}, headers=headers)
    assert resp.status_code == 400


def test_create_zone_rejects_short_name(client):
    headers, _ = ensure_auth_headers(client)
    resp = client.post("/api/hazard-zones", json={"name": "ab"}, headers=headers)
    assert resp.status_code == 400


def test_duplicate_zone_name_conflicts(client):
    headers, _ = ensure_auth_headers(client)
    name = unique_name("High Voltage")
    create_zone(client, headers, name=name)
    resp = client.post("/api/hazard-zones", json={"name": name}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Hazard zone with this name already exists"


def test_list_zones_newest_first(client):
    headers, _ = ensure_auth_headers(client)
    first = create_zone(client, headers)
    second = create_zone(client, headers)
    resp = client.get("/api/hazard-zones", headers=headers)
    assert resp.status_code == 200
    ids = [z["id"] for z in resp.json()]
    assert ids.index(second["id"]) < ids.index(first["id"])


def test_get_zone_lists_only_callers_protocols(client):
    owner_headers, _ = ensure_auth_headers(client)
    other_headers, _ = ensure_auth_headers(client)
    zone = create_zone(client, owner_headers)
    mine = create_protocol(client, owner_headers, zoneIds=[zone["id"]])
    theirs = create_protocol(client, other_headers, name="Other Check", zoneIds=[zone["id"]])

    resp = client.get(f"/api/hazard-zones/{zone['id']}", headers=owner_headers)
    assert resp.status_code == 200
    protocol_ids = [p["id"] for p in resp.json()["protocols"]]
    assert protocol_ids == [mine["id"]]
    assert theirs["id"] not in protocol_ids


def test_get_missing_zone(client):
    headers, _ = ensure_auth_headers(client)
    resp = client.get(f"/api/hazard-zones/{uuid.uuid4()}", headers=headers)
    assert resp.status_code == 404


def test_get_zone_rejects_malformed_id(client):
    headers, _ = ensure_auth_headers(client)
    resp = client.get("/api/hazard-zones/not-a-uuid", headers=headers)
    assert resp.status_code == 400


def test_update_zone_is_partial(client):
    headers, _ = ensure_auth_headers(client)
    zone = create_zone(client, headers, color="#eab308")
    new_name = unique_name("Chemical")
    resp = client.patch(f"/api/hazard-zones/{zone['id']}", json={"name": new_name}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == new_name
    assert resp.json()["color"] == "#eab308"

    resp = client.patch(f"/api/hazard-zones/{zone['id']}", json={"color": "#dc2626"}, headers=headers)
    assert resp.json()["name"] == new_name
    assert resp.json()["color"] == "#dc2626"


def test_update_zone_name_conflict(client):
    headers, _ = ensure_auth_headers(client)
    taken = create_zone(client, headers)
    zone = create_zone(client, headers)
    resp = client.patch(f"/api/hazard-zones/{zone['id']}", json={"name": taken["name"]}, headers=headers)
    assert resp.status_code == 409


def test_update_missing_zone(client):
    headers, _ = ensure_auth_headers(client)
    resp = client.patch(f"/api/hazard-zones/{uuid.uuid4()}", json={"name": unique_name()}, headers=headers)
    assert resp.status_code == 404


def test_delete_zone_unlinks_but_keeps_protocols(client):
    headers, _ = ensure_auth_headers(client)
    doomed = create_zone(client, headers)
    kept = create_zone(client, headers)
    protocol = create_protocol(client, headers, zoneIds=[doomed["id"], kept["id"]])

    resp = client.delete(f"/api/hazard-zones/{doomed['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Hazard zone deleted successfully"

    after = client.get(f"/api/protocols/{protocol['id']}", headers=headers)
    assert after.status_code == 200
    assert [z["id"] for z in after.json()["zones"]] == [kept["id"]]

    again = client.delete(f"/api/hazard-zones/{doomed['id']}", headers=headers)
    assert again.status_code == 404


def test_store_validates_color_without_schema(db_session):
    with pytest.raises(ValidationError):
        hazard_zones.create_zone(db_session, name=unique_name(), color="#zzzzzz")


def test_concurrent_creation_yields_one_conflict():
    name = unique_name("Confined")
    barrier = threading.Barrier(2)
    outcomes = []

    def worker():
        with TestingSessionLocal() as db:
            barrier.wait()
            try:
                hazard_zones.create_zone(db, name=name)
                db.commit()
                outcomes.append("created")
            except ConflictError:
                outcomes.append("conflict")

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["conflict", "created"]
    with TestingSessionLocal() as db:
        assert db.query(models.HazardZone).filter_by(name=name).count() == 1
