import pytest
from fastapi.testclient import TestClient

from evovrp.api import app

QUIET = {"termination": {"maxGenerations": 3}, "telemetry": {"logging": {"enabled": False}},
         "environment": {"seed": 1}}


@pytest.fixture
def client():
    return TestClient(app)


def test_solve_solomon_instance(client, solomon_text):
    response = client.post("/api/solve", json={"instance": solomon_text, "config": QUIET})

    assert response.status_code == 200
    data = response.json()
    served = sorted(job for route in data["routes"] for job in route["jobs"])
    assert served == ["1", "2", "3", "4", "5"]
    assert data["unassigned"] == []
    assert data["statistics"]["generations"] == 3
    assert data["vehicles"] == len(data["routes"])
    assert data["fitness"][0] == 0


@pytest.mark.filterwarnings("ignore::evovrp.core.errors.InfeasibilityWarning")
def test_solve_explicit_problem(client):
    request = {
        "depot": {"x": 0, "y": 0},
        "vehicles": [{"id": "van", "capacity": 10, "count": 2}],
        "customers": [
            {"id": "a", "x": 1, "y": 0, "demand": 4},
            {"id": "b", "x": 2, "y": 0, "demand": 4},
            {"id": "c", "x": 0, "y": 3, "demand": 4},
            {"id": "d", "x": 0, "y": 1, "demand": 50},
        ],
        "locks": {"c": "van_2"},
        "config": QUIET,
    }
    response = client.post("/api/solve", json=request)

    assert response.status_code == 200
    data = response.json()
    assert data["unassigned"] == [{"job_id": "d", "reason": "capacity"}]
    by_vehicle = {route["vehicle_id"]: route["jobs"] for route in data["routes"]}
    assert "c" in by_vehicle["van_2"]


def test_solve_rejects_bad_config(client, solomon_text):
    response = client.post("/api/solve", json={"instance": solomon_text,
                                               "config": {"mutation": {"type": "unknown"}}})
    assert response.status_code == 400


def test_solve_requires_problem(client):
    response = client.post("/api/solve", json={"customers": []})
    assert response.status_code == 400


def test_solve_rejects_invalid_problem(client):
    response = client.post("/api/solve", json={"depot": {"x": 0, "y": 0}, "vehicles": [],
                                               "customers": [{"id": "a", "x": 1, "y": 1}]})
    assert response.status_code == 400
    assert "no vehicles" in response.json()["detail"]


def test_validate_config(client):
    response = client.post("/api/config/validate", json={"config": {"termination": {"maxTime": 10}}})
    assert response.json() == {"valid": True, "error": None}

    response = client.post("/api/config/validate", json={"config": {"population": {}}})
    data = response.json()
    assert data["valid"] is False
    assert "Invalid configuration" in data["error"]


def test_solve_rejects_cluster_ruin_without_vehicles(client):
    config = {"mutation": {"type": "ruin-recreate",
                           "ruins": [{"methods": [{"type": "cluster"}]}],
                           "recreates": [{"type": "cheapest"}]}}
    response = client.post("/api/solve", json={"depot": {"x": 0, "y": 0}, "vehicles": [],
                                               "customers": [{"id": "a", "x": 1, "y": 1},
                                                             {"id": "b", "x": 2, "y": 1}],
                                               "config": config})
    assert response.status_code == 400
    assert "no vehicles" in response.json()["detail"]
