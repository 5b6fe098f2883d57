"""API tests for banned-word management and admin sessions."""

URL = "/api/v1/banned-words"


def test_public_list_shows_active_words_only(client, admin_headers):
    assert client.get(URL).json() == []

    client.post(URL, json={"word": "Heck"}, headers=admin_headers)
    r = client.post(URL, json={"word": "darn", "reason": "mild"}, headers=admin_headers)
    darn_id = r.json()["id"]
    client.put(f"{URL}/{darn_id}", json={"isActive": False}, headers=admin_headers)

    assert client.get(URL).json() == ["heck"]

    admin_view = client.get(f"{URL}/admin", headers=admin_headers).json()
    assert {w["word"] for w in admin_view} == {"heck", "darn"}
    assert next(w for w in admin_view if w["word"] == "darn")["reason"] == "mild"


def test_words_are_unique(client, admin_headers):
    r = client.post(URL, json={"word": "  Darn "}, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["word"] == "darn"
    assert r.json()["addedBy"] == "Admin"

    r = client.post(URL, json={"word": "DARN"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "ALREADY_BANNED"

    other = client.post(URL, json={"word": "heck"}, headers=admin_headers).json()
    r = client.put(f"{URL}/{other['id']}", json={"word": "darn"}, headers=admin_headers)
    assert r.status_code == 400

    r = client.put(f"{URL}/{other['id']}", json={"word": "Gosh", "reason": "too mild"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["word"] == "gosh"
    assert r.json()["reason"] == "too mild"


def test_word_validation(client, admin_headers):
    assert client.post(URL, json={"word": "   "}, headers=admin_headers).status_code == 400
    assert client.post(URL, json={"word": "x" * 101}, headers=admin_headers).status_code == 400


def test_word_management_requires_admin(client, admin_headers):
    assert client.get(f"{URL}/admin").status_code == 401
    assert client.post(URL, json={"word": "darn"}).status_code == 401

    word = client.post(URL, json={"word": "darn"}, headers=admin_headers).json()
    assert client.delete(f"{URL}/{word['id']}").status_code == 401
    assert client.delete(f"{URL}/{word['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"{URL}/{word['id']}", headers=admin_headers).status_code == 404
    assert client.put(f"{URL}/{word['id']}", json={"isActive": True}, headers=admin_headers).status_code == 404


def test_x_admin_key_header_is_accepted(client, admin_headers):
    assert client.get(f"{URL}/admin", headers={"x-admin-key": admin_headers["admin-key"]}).status_code == 200


# ── Admin session ────────────────────────────────────────────────────


def test_admin_session_cookie(client, admin_headers):
    r = client.post("/api/v1/admin/session", json={"adminKey": "wrong"})
    assert r.status_code == 401
    assert client.get(f"{URL}/admin").status_code == 401

    r = client.post("/api/v1/admin/session", json={"adminKey": admin_headers["admin-key"]})
    assert r.status_code == 200
    assert "freedomwall_admin" in r.cookies

    assert client.get(f"{URL}/admin").status_code == 200

    client.delete("/api/v1/admin/session")
    assert client.get(f"{URL}/admin").status_code == 401


def test_forged_admin_cookie_is_rejected(client):
    client.cookies.set("freedomwall_admin", "admin.deadbeef")
    assert client.get(f"{URL}/admin").status_code == 401


def test_audit_log_records_word_changes(client, admin_headers):
    word = client.post(URL, json={"word": "darn"}, headers=admin_headers).json()
    client.delete(f"{URL}/{word['id']}", headers=admin_headers)

    r = client.get("/api/v1/admin/audit", params={"resourceType": "banned_word"}, headers=admin_headers)
    assert r.status_code == 200
    entries = r.json()
    assert [e["action"] for e in entries] == ["banned_word.delete", "banned_word.add"]
    assert entries[1]["details"] == {"word": "darn"}
    assert entries[0]["resourceId"] == word["id"]

    assert client.get("/api/v1/admin/audit").status_code == 401


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
