"""Tests for the authenticated agent endpoints."""

import pytest

from app.core.security import create_access_token
from app.db.repositories import UserRepository


@pytest.fixture
def user(client):
    return client.portal.call(UserRepository().create, {"name": "Ada", "email": "ada@example.com"})


@pytest.fixture
def auth(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


AGENT = {
    "name": "Alex",
    "companyName": "Amazon",
    "personality": "patient",
    "companyInfo": "Refunds within 30 days.",
    "prompts": ["Confirm the order number"]
}


def test_requires_token(client):
    response = client.get("/api/agents")
    assert response.status_code == 401
    assert response.json()["message"] == "Please authenticate."


def test_rejects_bad_token(client):
    response = client.get("/api/agents", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_rejects_token_for_unknown_user(client):
    headers = {"Authorization": f"Bearer {create_access_token('ghost')}"}
    assert client.get("/api/agents", headers=headers).status_code == 401


def test_agent_crud(client, auth, user):
    created = client.post("/api/agents", json=AGENT, headers=auth)
    assert created.status_code == 201
    agent = created.json()
    assert agent["userId"] == user.id
    assert agent["companyName"] == "Amazon"

    assert [a["id"] for a in client.get("/api/agents", headers=auth).json()] == [agent["id"]]

    updated = client.put(f"/api/agents/{agent['id']}", json={"personality": "cheerful"}, headers=auth)
    assert updated.status_code == 200
    assert updated.json()["personality"] == "cheerful"
    assert updated.json()["name"] == "Alex"

    assert client.get(f"/api/agents/{agent['id']}", headers=auth).json()["personality"] == "cheerful"

    assert client.delete(f"/api/agents/{agent['id']}", headers=auth).status_code == 200
    assert client.get(f"/api/agents/{agent['id']}", headers=auth).status_code == 404


def test_agents_are_scoped_to_owner(client, auth):
    agent = client.post("/api/agents", json=AGENT, headers=auth).json()

    other = client.portal.call(UserRepository().create, {"name": "Bob", "email": "bob@example.com"})
    other_auth = {"Authorization": f"Bearer {create_access_token(other.id)}"}

    assert client.get("/api/agents", headers=other_auth).json() == []
    assert client.get(f"/api/agents/{agent['id']}", headers=other_auth).status_code == 404
    assert client.delete(f"/api/agents/{agent['id']}", headers=other_auth).status_code == 404


def test_agent_name_length_validated(client, auth):
    response = client.post("/api/agents", json={**AGENT, "name": "x" * 51}, headers=auth)
    assert response.status_code == 400


def test_update_rejects_blank_fields(client, auth):
    agent = client.post("/api/agents", json=AGENT, headers=auth).json()

    for field in ("personality", "companyInfo"):
        response = client.put(f"/api/agents/{agent['id']}", json={field: ""}, headers=auth)
        assert response.status_code == 400

    stored = client.get(f"/api/agents/{agent['id']}", headers=auth).json()
    assert stored["personality"] == AGENT["personality"]
    assert stored["companyInfo"] == AGENT["companyInfo"]
