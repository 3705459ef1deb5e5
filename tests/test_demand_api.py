"""
tests/test_demand_api.py

HTTP-level tests for the demand router and health endpoint.

The app is built without entering its lifespan, so no snapshot is loaded
from disk; each test publishes into its own SnapshotStore.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.schemas.demand import PROJECTION_NOTE
from app.services.snapshot_store import SnapshotStore, get_snapshot_store
from demand.models import HierarchySnapshot


@pytest.fixture()
def store() -> SnapshotStore:
    return SnapshotStore()


@pytest.fixture()
def client(store: SnapshotStore) -> TestClient:
    application = create_app()
    application.dependency_overrides[get_snapshot_store] = lambda: store
    return TestClient(application)


@pytest.fixture()
def loaded(store: SnapshotStore, snapshot: HierarchySnapshot) -> SnapshotStore:
    store.publish(snapshot, source="test")
    return store


def test_city_projection_payload(client: TestClient, loaded: SnapshotStore) -> None:
    response = client.get("/api/demand/city/Bangalore")

    assert response.status_code == 200
    body = response.json()
    assert body["city"] == "Bangalore"
    assert body["filters"] == {"state": "all", "category": "all"}
    assert body["note"] == PROJECTION_NOTE
    assert body["summary"] == {
        "totalStates": 1,
        "totalCategories": 2,
        "totalCrops": 2,
        "totalDemand": 180.0,
        "unit": "tons per week",
    }

    (karnataka,) = body["data"]
    assert karnataka["state"] == "Karnataka"
    assert "lastUpdated" not in karnataka["summary"]
    tomato = karnataka["categories"][0]["crops"][0]
    assert tomato["cropName"] == "Tomato"
    assert tomato["categoryId"] == {"_id": "vegetables", "name": "Vegetables"}
    assert tomato["demandQuantity"] == 150.0
    assert tomato["regionalSuitability"] == [
        {"geography": "India", "district": "Bangalore", "state": "Karnataka", "suitability": "High"}
    ]


def test_city_projection_filters(client: TestClient, loaded: SnapshotStore) -> None:
    response = client.get(
        "/api/demand/city/hyderabad",
        params={"state": "Telangana", "category": "spices"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["filters"] == {"state": "Telangana", "category": "spices"}
    assert [state["state"] for state in body["data"]] == ["Telangana"]
    assert body["summary"]["totalCrops"] == 1


def test_unknown_city_returns_404(client: TestClient, loaded: SnapshotStore) -> None:
    response = client.get("/api/demand/city/Atlantis")

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error"] == "No data found"
    assert detail["city"] == "Atlantis"
    assert "Atlantis" in detail["message"]


def test_blank_city_returns_400(client: TestClient, loaded: SnapshotStore) -> None:
    response = client.get("/api/demand/city/%20%20")

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "City name is required"


def test_blank_city_is_rejected_before_data_check(client: TestClient) -> None:
    assert client.get("/api/demand/city/%20").status_code == 400


@pytest.mark.parametrize(
    "path",
    [
        "/api/demand/city/Bangalore",
        "/api/demand/cities",
        "/api/demand/cities/index",
        "/api/demand/cities/index/Bangalore",
    ],
)
def test_unloaded_snapshot_returns_503(client: TestClient, path: str) -> None:
    response = client.get(path)

    assert response.status_code == 503
    assert response.json()["detail"]["error"] == "Data not available"


def test_list_cities(client: TestClient, loaded: SnapshotStore) -> None:
    response = client.get("/api/demand/cities")

    assert response.status_code == 200
    assert response.json() == {
        "totalCities": 3,
        "cities": ["Bangalore", "Hyderabad", "Mysore"],
    }


def test_city_index(client: TestClient, loaded: SnapshotStore) -> None:
    response = client.get("/api/demand/cities/index")

    assert response.status_code == 200
    body = response.json()
    assert body["totalCities"] == 3
    assert [entry["city"] for entry in body["cities"]] == ["Bangalore", "Hyderabad", "Mysore"]
    hyderabad = body["cities"][1]
    assert [state["state"] for state in hyderabad["data"]] == ["Karnataka", "Telangana"]
    assert hyderabad["summary"]["totalCategories"] == 2


def test_city_index_entry(client: TestClient, loaded: SnapshotStore) -> None:
    response = client.get("/api/demand/cities/index/mysore")

    assert response.status_code == 200
    body = response.json()
    assert body["city"] == "Mysore"
    assert body["summary"]["totalCrops"] == 1

    assert client.get("/api/demand/cities/index/Atlantis").status_code == 404


def test_health_reports_data_state(client: TestClient, store: SnapshotStore, snapshot: HierarchySnapshot) -> None:
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["dataLoaded"] is False

    store.publish(snapshot, source="test")
    assert client.get("/health").json()["dataLoaded"] is True
