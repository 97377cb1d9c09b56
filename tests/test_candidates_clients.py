import json


def _candidate(client, headers, **overrides):
    body = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "currentPosition": "Engineer",
        "skills": ["Python", "SQL", "Docker"],
        "languages": [{"language": "English", "proficiency": "Native"}],
    }
    body.update(overrides)
    return client.post("/candidates", json=body, headers=headers)


def _client_record(client, headers, **overrides):
    body = {"name": "Acme BV", "email": "hr@acme.example", "contactPerson": "Wile E."}
    body.update(overrides)
    return client.post("/clients", json=body, headers=headers)


def test_candidate_crud(client, staff_headers):
    r = _candidate(client, staff_headers)
    assert r.status_code == 201, r.text
    cand = r.json()["candidate"]
    assert cand["status"] == "active"
    assert cand["skills"] == ["Python", "SQL", "Docker"]
    assert json.loads(cand["languages"]) == [{"language": "English", "proficiency": "Native"}]
    assert cand["education"] == "[]"
    assert cand["createdAt"]

    cid = cand["id"]
    got = client.get(f"/candidates/{cid}", headers=staff_headers)
    assert got.status_code == 200, got.text
    assert got.json()["candidate"]["email"] == "ada@example.com"

    upd = client.put(
        f"/candidates/{cid}",
        json={"currentPosition": "Lead Engineer", "status": "interviewing"},
        headers=staff_headers,
    )
    assert upd.status_code == 200, upd.text
    updated = upd.json()["candidate"]
    assert updated["currentPosition"] == "Lead Engineer"
    assert updated["status"] == "interviewing"
    # Untouched fields survive a partial update.
    assert updated["skills"] == ["Python", "SQL", "Docker"]
    assert updated["firstName"] == "Ada"

    deleted = client.delete(f"/candidates/{cid}", headers=staff_headers)
    assert deleted.status_code == 200, deleted.text
    assert client.get(f"/candidates/{cid}", headers=staff_headers).status_code == 404
    assert client.delete(f"/candidates/{cid}", headers=staff_headers).status_code == 404


def test_candidate_skills_keep_order(client, staff_headers):
    skills = ["Zig", "Ada", "C", "Rust", "Bash"]
    cid = _candidate(client, staff_headers, skills=skills).json()["candidate"]["id"]
    got = client.get(f"/candidates/{cid}", headers=staff_headers).json()["candidate"]
    assert got["skills"] == skills


def test_candidate_list_newest_first(client, staff_headers):
    first = _candidate(client, staff_headers, email="one@example.com").json()["candidate"]["id"]
    second = _candidate(client, staff_headers, email="two@example.com").json()["candidate"]["id"]
    rows = client.get("/candidates", headers=staff_headers).json()["candidates"]
    assert [c["id"] for c in rows] == [second, first]


def test_candidate_duplicate_email_is_409(client, staff_headers):
    assert _candidate(client, staff_headers).status_code == 201
    r = _candidate(client, staff_headers, firstName="Other")
    assert r.status_code == 409, r.text
    assert r.json()["success"] is False


def test_candidate_validation(client, staff_headers):
    r = _candidate(client, staff_headers, email="nope")
    assert r.status_code == 400, r.text

    r = _candidate(client, staff_headers, status="hired")
    assert r.status_code == 400, r.text

    cid = _candidate(client, staff_headers).json()["candidate"]["id"]
    r = client.put(f"/candidates/{cid}", json={"firstName": None}, headers=staff_headers)
    assert r.status_code == 400, r.text
    assert "firstName" in r.json()["error"]


def test_candidate_availability_accepts_boolean_alias(client, staff_headers):
    r = _candidate(client, staff_headers, isAvailable="yes")
    assert r.json()["candidate"]["availability"] == "yes"
    r = _candidate(client, staff_headers, email="b@example.com", isAvailable=False)
    assert r.json()["candidate"]["availability"] == "no"


def test_candidate_missing_is_404(client, staff_headers):
    assert client.get("/candidates/12345", headers=staff_headers).status_code == 404
    r = client.put("/candidates/12345", json={"phone": "1"}, headers=staff_headers)
    assert r.status_code == 404, r.text


def test_client_crud(client, staff_headers):
    r = _client_record(client, staff_headers, vatNumber="NL123456789B01")
    assert r.status_code == 201, r.text
    rec = r.json()["client"]
    assert rec["status"] == "active"
    assert rec["contactPerson"] == "Wile E."
    assert rec["vatNumber"] == "NL123456789B01"

    cid = rec["id"]
    upd = client.put(f"/clients/{cid}", json={"status": "inactive", "industry": "Anvils"}, headers=staff_headers)
    assert upd.status_code == 200, upd.text
    assert upd.json()["client"]["status"] == "inactive"
    assert upd.json()["client"]["name"] == "Acme BV"

    assert len(client.get("/clients", headers=staff_headers).json()["clients"]) == 1
    assert client.delete(f"/clients/{cid}", headers=staff_headers).status_code == 200
    assert client.get(f"/clients/{cid}", headers=staff_headers).status_code == 404


def test_client_requires_name_and_email(client, staff_headers):
    r = client.post("/clients", json={"name": "No Mail"}, headers=staff_headers)
    assert r.status_code == 400, r.text
    r = _client_record(client, staff_headers, status="archived")
    assert r.status_code == 400, r.text


def test_registry_requires_staff(client):
    assert client.get("/clients").status_code == 401
    assert client.post("/candidates", json={"firstName": "A"}).status_code == 401


def test_public_lead_form(client, staff_headers):
    r = client.post(
        "/clients/lead",
        json={
            "name": "Globex",
            "email": "contact@globex.example",
            "contactPerson": "Hank",
            "address": "Main Street 1",
            "city": "Springfield",
            "postalCode": "12345",
            "country": "USA",
            "vatNumber": "US999",
            "projectDescription": "Need three engineers",
            "active": True,
        },
    )
    assert r.status_code == 201, r.text
    lead = r.json()["client"]
    assert lead["address"] == "Main Street 1, Springfield, 12345, USA"
    assert lead["notes"] == "Project description: Need three engineers"
    assert lead["status"] == "active"
    assert lead["vatNumber"] == "US999"

    r = client.post("/clients/lead", json={"name": "Initech", "email": "info@initech.example"})
    assert r.status_code == 201, r.text
    assert r.json()["client"]["status"] == "lead"
    assert r.json()["client"]["address"] == ""

    r = client.post("/clients/lead", json={"name": "Off", "email": "off@x.io", "active": False})
    assert r.json()["client"]["status"] == "inactive"
