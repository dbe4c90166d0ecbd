import pytest
from fastapi.testclient import TestClient

from src.main import app
from src.config import Priority
from src.shared.api.dependencies import (
    get_index,
    get_score_repository,
    get_ticket_repository,
    get_user_repository,
)
from tests.conftest import days_ago, make_ticket

MANAGER = {"X-User-Id": "manager1"}
AGENT1 = {"X-User-Id": "agent1"}
AGENT2 = {"X-User-Id": "agent2"}


@pytest.fixture
def client(ticket_repo, user_repo, score_repo, search_index):
    app.dependency_overrides[get_ticket_repository] = lambda: ticket_repo
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_score_repository] = lambda: score_repo
    app.dependency_overrides[get_index] = lambda: search_index
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client, **overrides):
    payload = {
        "title": "Cannot login to account",
        "description": "Password reset link never arrives",
        "customer_email": "casey@example.com",
        "customer_name": "Casey",
    }
    payload.update(overrides)
    response = client.post("/api/v1/tickets", json=payload)
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_ticket_lifecycle_over_http(client):
    ticket = _create(client, priority="HIGH")
    assert ticket["status"] == "NOT_STARTED"
    ticket_id = ticket["id"]

    response = client.patch(f"/api/v1/tickets/{ticket_id}/assign", json={"agent_id": "agent1"}, headers=MANAGER)
    assert response.status_code == 200
    assert response.json()["assigned_agent_id"] == "agent1"

    response = client.patch(f"/api/v1/tickets/{ticket_id}/status", json={"status": "IN_PROGRESS"}, headers=AGENT1)
    assert response.status_code == 200

    response = client.post(f"/api/v1/tickets/{ticket_id}/comments", json={"content": "Looking into it"}, headers=AGENT1)
    assert response.status_code == 200
    assert response.json()["comments"][0]["content"] == "Looking into it"

    response = client.patch(f"/api/v1/tickets/{ticket_id}/status", json={"status": "RESOLVED"}, headers=AGENT1)
    assert response.status_code == 200
    assert response.json()["closed_at"] is not None


def test_error_mapping(client):
    ticket_id = _create(client)["id"]
    client.patch(f"/api/v1/tickets/{ticket_id}/assign", json={"agent_id": "agent1"}, headers=MANAGER)

    response = client.patch(f"/api/v1/tickets/{ticket_id}/status", json={"status": "RESOLVED"}, headers=AGENT1)
    assert response.status_code == 409
    assert response.json()["error_type"] == "InvalidTransitionException"

    response = client.patch(f"/api/v1/tickets/{ticket_id}/status", json={"status": "IN_PROGRESS"}, headers=AGENT2)
    assert response.status_code == 403

    response = client.get("/api/v1/tickets/does-not-exist", headers=MANAGER)
    assert response.status_code == 404
    assert "correlation_id" in response.json()

    response = client.patch(f"/api/v1/tickets/{ticket_id}/assign", json={"agent_id": "manager1"}, headers=MANAGER)
    assert response.status_code == 400


def test_unknown_user_is_rejected(client):
    response = client.get("/api/v1/tickets", headers={"X-User-Id": "ghost"})
    assert response.status_code == 401


def test_manager_routes_require_manager(client):
    assert client.post("/api/manager/auto-assign/all", headers=AGENT1).status_code == 403
    assert client.get("/api/v1/agents", headers=AGENT1).status_code == 403
    assert client.post("/api/manager/sla/run", headers=AGENT1).status_code == 403


def test_listing_is_scoped_by_role(client, ticket_repo, agents):
    ticket_repo.seed(make_ticket(title="Refund request", agent=agents[0]))
    ticket_repo.seed(make_ticket(title="Refund again", agent=agents[1]))
    ticket_repo.seed(make_ticket(title="Unassigned refund"))

    assert len(client.get("/api/v1/tickets", headers=MANAGER).json()) == 3
    assert len(client.get("/api/v1/tickets", headers=AGENT1).json()) == 1
    assert len(client.get("/api/v1/tickets?assigned=false", headers=MANAGER).json()) == 1
    assert client.get("/api/v1/tickets?assigned=false", headers=AGENT1).status_code == 403

    grouped = client.get("/api/v1/tickets?grouped=true", headers=AGENT1).json()
    assert len(grouped["NOT_STARTED"]) == 1

    search = client.get("/api/v1/tickets?query=refund", headers=AGENT1).json()
    assert search["total_count"] == 1
    assert client.get("/api/v1/tickets?query=refund", headers=MANAGER).json()["total_count"] == 3


def test_autocomplete(client, ticket_repo):
    for i in range(3):
        ticket_repo.seed(make_ticket(title=f"Refund request {i}", created_at=days_ago(i)))

    body = client.get("/api/v1/tickets/autocomplete?query=refund&limit=2", headers=MANAGER).json()

    assert len(body["tickets"]) == 2
    assert body["total_count"] == 3


def test_batch_auto_assign_and_stats(client, ticket_repo):
    for priority in (Priority.HIGH, Priority.LOW, None):
        ticket_repo.seed(make_ticket(priority=priority))

    body = client.post("/api/manager/auto-assign/all", headers=MANAGER).json()
    assert body["tickets_assigned"] == 2
    assert body["tickets_skipped"] == 1

    stats = client.get("/api/manager/auto-assign/stats", headers=MANAGER).json()
    assert stats["unassigned_tickets_count"] == 1
    assert stats["total_active_tickets"] == 2


def test_sla_run_endpoint(client, ticket_repo):
    ticket = ticket_repo.seed(make_ticket(priority=Priority.MEDIUM, created_at=days_ago(400)))

    body = client.post("/api/manager/sla/run", headers=MANAGER).json()

    assert body["escalated"] == 1
    assert ticket_repo.tickets[ticket.id].priority == Priority.HIGH


def test_agent_score_endpoints(client):
    assert client.get("/api/v1/agents/agent1/score", headers=MANAGER).status_code == 404

    recalculated = client.post("/api/manager/auto-assign/scores/recalculate", headers=MANAGER).json()
    assert len(recalculated) == 3

    assert client.get("/api/v1/agents/agent1/score", headers=MANAGER).status_code == 200
    assert len(client.get("/api/v1/agents/scores", headers=MANAGER).json()) == 3


def test_agent_directory_and_heartbeat(client, user_repo):
    agents = client.get("/api/v1/agents", headers=MANAGER).json()
    assert [a["id"] for a in agents] == ["agent1", "agent2", "agent3"]

    details = client.get("/api/v1/agents/agent1", headers=MANAGER).json()
    assert details["closed_count"] == 0

    assert client.post("/api/v1/agents/heartbeat", headers=AGENT1).status_code == 204
    assert user_repo.users["agent1"].last_active_at is not None
