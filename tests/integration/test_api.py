"""Integration tests for API endpoints"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from conftest import AS_OF, make_contract, make_summary, service_event
from contract_health.domain.models import EventStatus
from contract_health.domain.exceptions import ContractNotFoundError, ContractSourceError, InvalidInputError

pytestmark = pytest.mark.integration

SOURCE = "contract_health.infrastructure.clients.contracts.ContractSourceClient.get_health_inputs"


@pytest.fixture
def health_request(contract_payload, events_payload, invoice_summary_payload) -> dict:
    return {
        "contract": contract_payload,
        "events": events_payload,
        "invoice_summary": invoice_summary_payload,
        "as_of": AS_OF.isoformat(),
    }


@pytest.fixture
def upstream_inputs():
    """What the contracts API client yields for a contract with one missed visit"""
    return (
        make_contract(),
        [
            service_event(40, EventStatus.COMPLETED),
            service_event(30, EventStatus.COMPLETED),
            service_event(20, EventStatus.COMPLETED),
            service_event(10, EventStatus.OVERDUE),
        ],
        make_summary("30000", "30000"),
    )


def test_health_endpoint(client: TestClient):
    """Test liveness endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "contract_health_computations_total" in response.text


def test_unmatched_paths_share_one_metrics_label(client: TestClient):
    assert client.get("/wp-admin/setup-config.php").status_code == 404

    metrics = client.get("/metrics").text
    assert 'endpoint="unmatched"' in metrics
    assert "setup-config" not in metrics


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    minted = client.get("/health")
    assert minted.headers["X-Request-ID"]


def test_compute_health(client: TestClient, health_request: dict):
    """Test POST /v1/health/compute with a healthy contract"""
    response = client.post("/v1/health/compute", json=health_request)

    assert response.status_code == 200
    data = response.json()
    assert data["health_score"] == 100
    assert data["grade"] == "excellent"
    assert data["grade_label"] == "Excellent"
    assert data["as_of"] == "2025-06-01"
    assert data["data_completeness"] == 1.0
    assert data["insufficient_data"] is False
    assert [p["id"] for p in data["pillars"]] == [
        "payment_timeliness",
        "service_delivery",
        "contract_vitality",
    ]


def test_compute_health_with_no_activity(client: TestClient, contract_payload: dict):
    """Only a contract: nothing due, nothing overdue"""
    response = client.post(
        "/v1/health/compute",
        json={"contract": contract_payload, "as_of": AS_OF.isoformat()},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["health_score"] == 100
    assert data["insufficient_data"] is True
    assert data["data_completeness"] == 0.25
    delivery = next(p for p in data["pillars"] if p["id"] == "service_delivery")
    assert delivery["applicable"] is False
    assert delivery["issues"][0]["message"] == "Active contract has no scheduled events"


def test_compute_health_rejects_bad_date(client: TestClient, health_request: dict):
    health_request["events"][0]["scheduled_date"] = "2025-13-01"

    response = client.post("/v1/health/compute", json=health_request)
    assert response.status_code == 422


def test_compute_health_rejects_negative_amount(client: TestClient, health_request: dict):
    health_request["invoice_summary"]["total_collected"] = "-10"

    response = client.post("/v1/health/compute", json=health_request)
    assert response.status_code == 422


def test_compute_health_rejects_out_of_range_amount(client: TestClient, health_request: dict):
    health_request["invoice_summary"]["total_invoiced"] = "1e-999999"
    health_request["invoice_summary"]["total_collected"] = "1e10"

    response = client.post("/v1/health/compute", json=health_request)
    assert response.status_code == 422
    assert "invoice_summary.total_invoiced" in response.json()["detail"]


def test_compute_health_rejects_inconsistent_dates(client: TestClient, health_request: dict):
    """Well-typed but nonsensical input is rejected by domain validation"""
    health_request["contract"]["end_date"] = "2024-01-01"

    response = client.post("/v1/health/compute", json=health_request)
    assert response.status_code == 422
    assert "contract.end_date" in response.json()["detail"]


@patch(SOURCE, new_callable=AsyncMock)
def test_contract_health_records_snapshot(mock_source: AsyncMock, client: TestClient, upstream_inputs):
    """Test GET /v1/contracts/{contract_id}/health"""
    mock_source.return_value = upstream_inputs

    response = client.get("/v1/contracts/c-42/health", params={"as_of": AS_OF.isoformat()})

    assert response.status_code == 200
    data = response.json()
    assert data["contract_id"] == "c-42"
    # delivery 75: 0.40 * 100 + 0.35 * 75 + 0.25 * 100 = 91.25
    assert data["health_score"] == 91
    mock_source.assert_awaited_once_with("c-42")

    history = client.get("/v1/contracts/c-42/health/history").json()
    assert len(history["snapshots"]) == 1
    assert history["snapshots"][0]["health_score"] == 91


@patch(SOURCE, new_callable=AsyncMock)
def test_contract_health_not_found(mock_source: AsyncMock, client: TestClient):
    mock_source.side_effect = ContractNotFoundError("Contract nope not found")

    response = client.get("/v1/contracts/nope/health")
    assert response.status_code == 404


@patch(SOURCE, new_callable=AsyncMock)
def test_contract_health_upstream_unavailable(mock_source: AsyncMock, client: TestClient):
    mock_source.side_effect = ContractSourceError("Contracts API timeout after 5.0s")

    response = client.get("/v1/contracts/c-1/health")
    assert response.status_code == 503
    assert response.json()["detail"] == "Contracts service unavailable"


@patch(SOURCE, new_callable=AsyncMock)
def test_contract_health_corrupt_upstream_data(mock_source: AsyncMock, client: TestClient):
    mock_source.side_effect = InvalidInputError("contract.currency", "'RUPEES' is not a three-letter currency code")

    response = client.get("/v1/contracts/c-1/health")
    assert response.status_code == 422
    assert client.get("/v1/contracts/c-1/health/history").json()["snapshots"] == []


@patch(SOURCE, new_callable=AsyncMock)
def test_health_history_newest_first(mock_source: AsyncMock, client: TestClient, upstream_inputs):
    """Test GET /v1/contracts/{contract_id}/health/history"""
    mock_source.return_value = upstream_inputs

    client.get("/v1/contracts/c-7/health", params={"as_of": "2025-05-01"})
    client.get("/v1/contracts/c-7/health", params={"as_of": "2025-06-01"})
    client.get("/v1/contracts/c-8/health", params={"as_of": "2025-06-01"})

    response = client.get("/v1/contracts/c-7/health/history")

    assert response.status_code == 200
    data = response.json()
    assert data["contract_id"] == "c-7"
    assert [s["as_of"] for s in data["snapshots"]] == ["2025-06-01", "2025-05-01"]

    limited = client.get("/v1/contracts/c-7/health/history", params={"limit": 1}).json()
    assert len(limited["snapshots"]) == 1


def test_portfolio_health(client: TestClient, contract_payload: dict, health_request: dict):
    """Test POST /v1/portfolio/health"""
    troubled = dict(contract_payload, status="cancelled")
    response = client.post(
        "/v1/portfolio/health",
        json={
            "as_of": AS_OF.isoformat(),
            "contracts": [
                {
                    "contract_id": "healthy",
                    "contract": health_request["contract"],
                    "events": health_request["events"],
                    "invoice_summary": health_request["invoice_summary"],
                },
                {
                    "contract_id": "troubled",
                    "contract": troubled,
                    "events": [
                        {"event_type": "service", "scheduled_date": "2025-05-20", "status": "overdue"},
                    ],
                    "invoice_summary": {
                        "total_invoiced": "1000",
                        "total_collected": "0",
                        "total_outstanding": "1000",
                        "overdue_count": 2,
                    },
                },
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    by_id = {c["contract_id"]: c for c in data["contracts"]}
    assert by_id["healthy"]["health_score"] == 100
    assert by_id["healthy"]["needs_attention"] is False
    assert by_id["troubled"]["health_score"] == 10
    assert by_id["troubled"]["overdue_events"] == 1
    assert by_id["troubled"]["needs_attention"] is True

    summary = data["summary"]
    assert summary["contract_count"] == 2
    assert summary["avg_health_score"] == 55
    assert summary["needs_attention_count"] == 1
    assert summary["total_overdue_events"] == 1
    assert summary["grade_distribution"]["critical"] == 1
    inr = summary["totals_by_currency"]["INR"]
    assert inr["contract_count"] == 2
    assert Decimal(inr["total_value"]) == Decimal("240000")
    assert Decimal(inr["total_collected"]) == Decimal("20000")
    assert Decimal(inr["total_outstanding"]) == Decimal("1000")


def test_portfolio_rejects_malformed_contract(client: TestClient, contract_payload: dict):
    broken = dict(contract_payload, start_date="2026-01-01")  # after end_date
    response = client.post(
        "/v1/portfolio/health",
        json={"contracts": [{"contract_id": "broken", "contract": broken}]},
    )

    assert response.status_code == 422
    assert "contract broken" in response.json()["detail"]
