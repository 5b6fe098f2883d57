"""API tests for the polls router."""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from freedomwall.config import Settings
from web.backend.app.main import create_app


def _create(client, question="Tabs or spaces?", options=("Tabs", "Spaces"), **extra) -> dict:
    body = {"question": question, "options": list(options), **extra}
    r = client.post("/api/v1/polls", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def test_create_poll(client):
    poll = _create(client, topics=["code"], name="dev")
    assert poll["question"] == "Tabs or spaces?"
    assert [o["text"] for o in poll["options"]] == ["Tabs", "Spaces"]
    assert poll["totalVotes"] == 0
    assert poll["isActive"] is True
    assert poll["createdBy"] == "dev"
    assert poll["topics"] == ["code"]
    assert "voters" not in poll["options"][0]


def test_poll_needs_two_to_six_options(client):
    r = client.post("/api/v1/polls", json={"question": "Q?", "options": ["only"]})
    assert r.status_code == 400
    assert "at least 2 options" in r.json()["message"]

    r = client.post("/api/v1/polls", json={"question": "Q?", "options": [str(i) for i in range(7)]})
    assert r.status_code == 400
    assert r.json()["message"] == "Maximum 6 options allowed"

    r = client.post("/api/v1/polls", json={"question": "Q?", "options": ["a", "  "]})
    assert r.status_code == 400

    assert client.get("/api/v1/polls").json() == []


def test_vote_and_double_vote(client):
    poll = _create(client)
    url = f"/api/v1/polls/{poll['id']}/vote"

    r = client.post(url, json={"optionIndex": 0, "userId": "A"})
    assert r.status_code == 200
    assert r.json()["totalVotes"] == 1
    assert r.json()["options"][0]["votes"] == 1
    assert r.json()["userVoted"] is True
    assert r.json()["engagementScore"] == 2

    for index in (0, 1):
        r = client.post(url, json={"optionIndex": index, "userId": "A"})
        assert r.status_code == 400
        assert r.json()["error"] == "ALREADY_VOTED"

    results = client.get(f"/api/v1/polls/{poll['id']}/results").json()
    assert results["totalVotes"] == 1


def test_invalid_option_index(client):
    poll = _create(client)
    url = f"/api/v1/polls/{poll['id']}/vote"
    assert client.post(url, json={"optionIndex": 2, "userId": "A"}).status_code == 400
    assert client.post(url, json={"optionIndex": -1, "userId": "A"}).status_code == 400
    assert client.post(url, json={"userId": "A"}).status_code == 400
    assert client.post("/api/v1/polls/nope/vote", json={"optionIndex": 0, "userId": "A"}).status_code == 404


def test_inactive_poll_rejects_votes(client, admin_headers):
    poll = _create(client)
    r = client.put(f"/api/v1/polls/{poll['id']}/status", json={"isActive": False}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["isActive"] is False

    r = client.post(f"/api/v1/polls/{poll['id']}/vote", json={"optionIndex": 0, "userId": "A"})
    assert r.status_code == 400
    assert r.json()["message"] == "Poll is no longer active"
    assert client.get(f"/api/v1/polls/{poll['id']}/results").json()["totalVotes"] == 0

    # Inactive polls drop out of the public listing but stay visible to admins.
    assert client.get("/api/v1/polls").json() == []
    assert len(client.get("/api/v1/polls/admin", headers=admin_headers).json()) == 1


def test_expired_poll_rejects_votes(client):
    past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
    poll = _create(client, expiresAt=past)

    r = client.post(f"/api/v1/polls/{poll['id']}/vote", json={"optionIndex": 0, "userId": "A"})
    assert r.status_code == 400
    assert r.json()["message"] == "Poll has expired"
    assert client.get(f"/api/v1/polls/{poll['id']}/results").json()["totalVotes"] == 0


def test_invalid_expiry_is_rejected(client):
    r = client.post(
        "/api/v1/polls",
        json={"question": "Q?", "options": ["a", "b"], "expiresAt": "next tuesday"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid expiry date"


def test_results_are_rounded_percentages(client):
    poll = _create(client)
    url = f"/api/v1/polls/{poll['id']}/vote"
    client.post(url, json={"optionIndex": 0, "userId": "A"})
    client.post(url, json={"optionIndex": 0, "userId": "B"})
    client.post(url, json={"optionIndex": 1, "userId": "C"})

    results = client.get(f"/api/v1/polls/{poll['id']}/results").json()
    assert results["totalVotes"] == 3
    assert [r["percentage"] for r in results["results"]] == [67, 33]
    assert [r["votes"] for r in results["results"]] == [2, 1]


def test_trending_returns_top_five_by_votes(client, admin_headers):
    ids = []
    for i in range(6):
        r = client.post(
            "/api/v1/polls",
            json={"question": f"Q{i}?", "options": ["a", "b"]},
            headers=admin_headers,
        )
        ids.append(r.json()["id"])

    for voter in ("A", "B", "C"):
        client.post(f"/api/v1/polls/{ids[2]}/vote", json={"optionIndex": 0, "userId": voter})
    client.post(f"/api/v1/polls/{ids[4]}/vote", json={"optionIndex": 1, "userId": "A"})

    trending = client.get("/api/v1/polls/trending").json()
    assert len(trending) == 5
    assert trending[0]["id"] == ids[2]
    assert trending[1]["id"] == ids[4]


def test_admin_sees_voters_and_deletes(client, admin_headers):
    poll = _create(client)
    client.post(f"/api/v1/polls/{poll['id']}/vote", json={"optionIndex": 1, "userId": "A"})

    admin_view = client.get("/api/v1/polls/admin", headers=admin_headers).json()
    assert admin_view[0]["options"][1]["voters"] == ["A"]

    assert client.delete(f"/api/v1/polls/{poll['id']}").status_code == 401
    assert client.delete(f"/api/v1/polls/{poll['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/polls/{poll['id']}/results").status_code == 404


def test_single_choice_rejects_several_options(client):
    poll = _create(client, options=("a", "b", "c"))
    r = client.post(f"/api/v1/polls/{poll['id']}/vote", json={"optionIndices": [0, 1], "userId": "A"})
    assert r.status_code == 400
    assert r.json()["message"] == "Only one option may be selected"


def test_multi_select_allows_one_vote_across_options(tmp_path):
    settings = Settings(data_dir=tmp_path, admin_key="k", multi_select_polls=True)
    with TestClient(create_app(settings)) as client:
        poll = _create(client, options=("a", "b", "c"))
        url = f"/api/v1/polls/{poll['id']}/vote"

        r = client.post(url, json={"optionIndices": [0, 2], "userId": "A"})
        assert r.status_code == 200
        assert [o["votes"] for o in r.json()["options"]] == [1, 0, 1]
        assert r.json()["totalVotes"] == 2

        r = client.post(url, json={"optionIndices": [1], "userId": "A"})
        assert r.json()["error"] == "ALREADY_VOTED"
