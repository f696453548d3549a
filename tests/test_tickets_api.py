import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_ticket_store
from app.main import app

from conftest import auth_header, make_token

TICKETS = "/api/v1/tickets"


@pytest.fixture
def client(store):
    app.dependency_overrides[get_ticket_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def file_ticket(client, customer, **body):
    body = {"title": "VPN drops", "description": "Every ten minutes", **body}
    response = client.post(TICKETS, json=body, headers=auth_header(customer))
    assert response.status_code == 201, response.text
    return response.json()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Hello from Helpdesk API!"}


# -----------------------------
# Authentication
# -----------------------------
def test_missing_token_is_unauthorized(client):
    response = client.get(TICKETS)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        make_token(uuid.uuid4(), aud="anon"),
        make_token(uuid.uuid4(), exp=datetime.now(timezone.utc) - timedelta(minutes=5)),
        make_token("not-a-uuid"),
    ],
)
def test_invalid_tokens_are_unauthorized(client, token):
    response = client.get(TICKETS, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert "error" in response.json()


def test_token_signed_with_another_secret_is_unauthorized(client, customer):
    token = jwt.encode(
        {"sub": str(customer.id), "aud": "authenticated"},
        "some-other-secret-with-enough-length",
        algorithm="HS256",
    )
    response = client.get(TICKETS, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_user_without_profile_gets_404(client):
    headers = {"Authorization": f"Bearer {make_token(uuid.uuid4())}"}
    response = client.get(TICKETS, headers=headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Profile not found"}


def test_my_profile(client, agent):
    response = client.get("/api/v1/profiles/me", headers=auth_header(agent))
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(agent.id)
    assert body["role"] == "support_agent"
    assert body["full_name"] == "Avery Agent"


# -----------------------------
# Create & read
# -----------------------------
def test_create_returns_201_without_agent(client, customer):
    ticket = file_ticket(client, customer)

    assert ticket["status"] == "open"
    assert ticket["priority"] == "medium"
    assert ticket["customer_id"] == str(customer.id)
    assert ticket["assigned_agent_id"] is None
    assert "assigned_agent" not in ticket


def test_create_then_fetch_round_trip(client, customer):
    created = file_ticket(client, customer, title="A", description="B", priority="high")

    response = client.get(f"{TICKETS}/{created['id']}", headers=auth_header(customer))

    assert response.status_code == 200
    fetched = response.json()
    assert fetched.pop("assigned_agent") is None
    assert fetched == created
    assert fetched["status"] == "open"
    assert fetched["priority"] == "high"


def test_agent_can_not_create(client, agent):
    response = client.post(
        TICKETS,
        json={"title": "t", "description": "d"},
        headers=auth_header(agent),
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Only customers can create tickets"}


@pytest.mark.parametrize(
    "body",
    [
        {"description": "no title"},
        {"title": "", "description": "empty title"},
        {"title": "no description"},
    ],
)
def test_create_requires_title_and_description(client, customer, body):
    response = client.post(TICKETS, json=body, headers=auth_header(customer))
    assert response.status_code == 400
    assert response.json() == {"error": "Title and description are required"}


def test_malformed_body_is_bad_request(client, customer):
    response = client.post(
        TICKETS,
        json={"title": ["a"], "description": "d"},
        headers=auth_header(customer),
    )
    assert response.status_code == 400
    assert "title" in response.json()["error"]


def test_customer_can_not_read_other_customers_ticket(client, customer, other_customer):
    ticket = file_ticket(client, other_customer)

    response = client.get(f"{TICKETS}/{ticket['id']}", headers=auth_header(customer))

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}


@pytest.mark.parametrize("ticket_id", [str(uuid.uuid4()), "42"])
def test_unknown_ticket_is_404(client, agent, ticket_id):
    response = client.get(f"{TICKETS}/{ticket_id}", headers=auth_header(agent))
    assert response.status_code == 404
    assert response.json() == {"error": "Ticket not found"}


def test_listing_is_scoped_by_role(client, customer, other_customer, agent):
    mine = file_ticket(client, customer)
    theirs = file_ticket(client, other_customer)

    as_customer = client.get(TICKETS, headers=auth_header(customer)).json()
    as_agent = client.get(TICKETS, headers=auth_header(agent)).json()

    assert [t["id"] for t in as_customer] == [mine["id"]]
    assert [t["id"] for t in as_agent] == [theirs["id"], mine["id"]]
    assert all(t["assigned_agent"] is None for t in as_agent)


def test_listing_with_unknown_status_is_bad_request(client, agent):
    response = client.get(TICKETS, params={"status": "closed"}, headers=auth_header(agent))
    assert response.status_code == 400


def test_store_failure_is_500_with_store_message(client, store, customer):
    headers = auth_header(customer)
    store.fail_with = "permission denied for table tickets"

    response = client.get(TICKETS, headers=headers)

    assert response.status_code == 500
    assert response.json() == {"error": "permission denied for table tickets"}


# -----------------------------
# Update & assignment
# -----------------------------
def test_agent_updates_status_and_gets_agent_back(client, customer, agent):
    ticket = file_ticket(client, customer)

    response = client.patch(
        f"{TICKETS}/{ticket['id']}",
        json={"status": "in_progress", "assigned_agent_id": str(agent.id)},
        headers=auth_header(agent),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in_progress"
    assert body["assigned_agent"] == {"id": str(agent.id), "full_name": "Avery Agent"}


def test_customer_can_not_update_own_ticket(client, customer):
    ticket = file_ticket(client, customer)

    response = client.patch(
        f"{TICKETS}/{ticket['id']}",
        json={"status": "resolved"},
        headers=auth_header(customer),
    )

    assert response.status_code == 403


@pytest.mark.parametrize(
    "body, error",
    [
        ({}, "Status or assigned_agent_id required"),
        ({"status": "closed"}, "Invalid status"),
    ],
)
def test_bad_updates_are_rejected(client, customer, agent, body, error):
    ticket = file_ticket(client, customer)

    response = client.patch(
        f"{TICKETS}/{ticket['id']}", json=body, headers=auth_header(agent)
    )

    assert response.status_code == 400
    assert response.json() == {"error": error}


def test_empty_assignee_alone_is_bad_request(client, store, customer, agent):
    ticket = file_ticket(client, customer)
    headers = auth_header(agent)
    store.calls.clear()

    response = client.patch(
        f"{TICKETS}/{ticket['id']}", json={"assigned_agent_id": ""}, headers=headers
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Status or assigned_agent_id required"}
    assert "update_ticket" not in store.calls


def test_empty_status_is_ignored_when_assigning(client, customer, agent):
    ticket = file_ticket(client, customer)

    response = client.patch(
        f"{TICKETS}/{ticket['id']}",
        json={"status": "", "assigned_agent_id": str(agent.id)},
        headers=auth_header(agent),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "open"
    assert body["assigned_agent"] == {"id": str(agent.id), "full_name": "Avery Agent"}


def test_null_assignee_unassigns(client, customer, agent):
    ticket = file_ticket(client, customer)
    client.post(f"{TICKETS}/{ticket['id']}/assign", headers=auth_header(agent))

    response = client.patch(
        f"{TICKETS}/{ticket['id']}",
        json={"assigned_agent_id": None},
        headers=auth_header(agent),
    )

    assert response.status_code == 200
    assert response.json()["assigned_agent_id"] is None
    assert response.json()["assigned_agent"] is None


def test_assignee_id_is_passed_to_the_store_unchecked(client, customer, agent):
    ticket = file_ticket(client, customer)

    response = client.patch(
        f"{TICKETS}/{ticket['id']}",
        json={"assigned_agent_id": "definitely-not-a-uuid"},
        headers=auth_header(agent),
    )

    # The store rejects it, not the request validation.
    assert response.status_code == 500
    assert "error" in response.json()


def test_assign_to_me_overrides_previous_agent(client, customer, agent, second_agent):
    ticket = file_ticket(client, customer)
    url = f"{TICKETS}/{ticket['id']}/assign"

    first = client.post(url, headers=auth_header(agent))
    second = client.post(url, headers=auth_header(second_agent))

    assert first.status_code == 200
    assert first.json()["assigned_agent"]["full_name"] == "Avery Agent"
    assert second.status_code == 200
    assert second.json()["assigned_agent_id"] == str(second_agent.id)
    assert second.json()["assigned_agent"]["full_name"] == "Blake Agent"


def test_customer_can_not_assign(client, customer):
    ticket = file_ticket(client, customer)

    response = client.post(
        f"{TICKETS}/{ticket['id']}/assign", headers=auth_header(customer)
    )

    assert response.status_code == 403


def test_stats(client, customer, agent):
    ticket = file_ticket(client, customer)
    file_ticket(client, customer)
    client.post(f"{TICKETS}/{ticket['id']}/assign", headers=auth_header(agent))

    response = client.get(f"{TICKETS}/stats", headers=auth_header(agent))

    assert response.status_code == 200
    assert response.json() == {
        "total": 2,
        "open": 2,
        "in_progress": 0,
        "resolved": 0,
        "assigned_to_me": 1,
    }
