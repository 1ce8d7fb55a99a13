import pytest
from fastapi.testclient import TestClient

from deploy.app import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def payload():
    return {
        "bidder": "rubicon",
        "type": "banner",
        "currency": "USD",
        "bid": {
            "id": "bid1", "impid": "imp1", "price": "1.25", "crid": "cr1",
            "adm": "<a href='https://x'></a>", "w": 300, "h": 250,
        },
        "request": {"id": "req1", "imp": [{"id": "imp1", "banner": {"format": [{"w": 300, "h": 250}]}, "secure": 1}]},
        "account": {"id": "acc1", "banner_max_size_enforcement": "enforce", "secure_markup_enforcement": "enforce"},
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_valid_bid(client, payload):
    response = client.post("/validate", json=payload)
    assert response.status_code == 200
    assert response.json() == {"valid": True, "warnings": [], "errors": []}


def test_oversized_bid_rejected(client, payload):
    payload["bid"]["h"] = 251
    body = client.post("/validate", json=payload).json()
    assert body["valid"] is False
    assert body["errors"] == ["Bid \"bid1\" has 'w' and 'h' that are not valid. Bid dimensions: '300x251'"]


def test_oversized_bid_warns(client, payload):
    payload["bid"]["h"] = 251
    payload["account"]["banner_max_size_enforcement"] = "warn"
    body = client.post("/validate", json=payload).json()
    assert body["valid"] is True
    assert len(body["warnings"]) == 1


def test_missing_bid_rejected(client, payload):
    payload["bid"] = None
    body = client.post("/validate", json=payload).json()
    assert body["errors"] == ["Empty bid object submitted"]


def test_unknown_enforcement_is_unprocessable(client, payload):
    payload["account"]["secure_markup_enforcement"] = "block"
    assert client.post("/validate", json=payload).status_code == 422


def test_metrics_endpoint(client, payload):
    payload["bid"]["adm"] = "<a href='http://x'></a>"
    client.post("/validate", json=payload)
    text = client.get("/metrics").text
    assert "bid_validation_requests_total" in text
    assert 'bid_validation_secure_total{bidder="rubicon",account="acc1",outcome="err"}' in text
