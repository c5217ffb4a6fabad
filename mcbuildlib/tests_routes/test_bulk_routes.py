def _body(**lists):
    return {key: [{"name": n} for n in names] for key, names in lists.items()}


def test_bulk_requires_admin(client, user_headers):
    assert client.post("/api/bulk/create", json={}).status_code == 401
    resp = client.post("/api/bulk/create", json={}, headers=user_headers)
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "forbidden"}


def test_bulk_create_then_skip(client, admin_headers):
    body = _body(authors=["Steve", "Steve", "Alex"], themes=["Castle"], colors=["Blue"])

    first = client.post("/api/bulk/create", json=body, headers=admin_headers)
    assert first.status_code == 200
    assert first.get_json() == {
        "createdAuthors": ["Steve", "Alex"], "skippedAuthors": [],
        "createdThemes": ["Castle"], "skippedThemes": [],
        "createdColors": ["Blue"], "skippedColors": [],
    }

    second = client.post("/api/bulk/create", json=_body(authors=["Alex", "Notch"]), headers=admin_headers)
    data = second.get_json()
    assert data["createdAuthors"] == ["Notch"]
    assert data["skippedAuthors"] == ["Alex"]
    assert data["createdColors"] == [] and data["skippedColors"] == []

    names = [a["name"] for a in client.get("/api/authors").get_json()["authors"]]
    assert names == ["Steve", "Alex", "Notch"]


def test_bulk_validation_failure_writes_nothing(client, admin_headers):
    resp = client.post(
        "/api/bulk/create",
        json=_body(authors=["Steve"], colors=["Red", "123"]),
        headers=admin_headers,
    )

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "validation_failed"
    assert body["details"] == {"colors[1].name": "Name cannot consist only of numbers"}
    assert client.get("/api/authors").get_json()["authors"] == []
    assert client.get("/api/colors").get_json()["colors"] == []


def test_bulk_entry_limit_comes_from_config(app, client, admin_headers):
    app.config["BULK_MAX_ENTRIES"] = 2
    resp = client.post("/api/bulk/create", json=_body(themes=["Farm", "Tower", "Bridge"]), headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"themes": "Theme list cannot exceed 2 entries"}


def test_bulk_malformed_json_is_rejected(client, admin_headers):
    resp = client.post("/api/bulk/create", data="{not json", content_type="application/json",
                       headers=admin_headers)

    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"body": "Malformed JSON request body"}
