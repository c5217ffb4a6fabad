import io

import pytest


@pytest.mark.parametrize("kind", ["authors", "themes", "colors"])
def test_crud_cycle(client, admin_headers, kind):
    resp = client.post(f"/api/{kind}", json={"name": "Granite"}, headers=admin_headers)
    assert resp.status_code == 201
    entity_id = resp.get_json()["id"]

    assert client.get(f"/api/{kind}/{entity_id}").get_json()["name"] == "Granite"
    assert client.get(f"/api/{kind}/Granite").get_json()["builds"] == []

    resp = client.put(f"/api/{kind}/{entity_id}", json={"name": "Diorite"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json() == {"id": entity_id, "name": "Diorite"}

    resp = client.delete(f"/api/{kind}/Diorite", headers=admin_headers)
    assert resp.status_code == 200
    assert client.get(f"/api/{kind}/{entity_id}").status_code == 404


def test_writes_require_admin(client, user_headers):
    assert client.post("/api/themes", json={"name": "Castle"}).status_code == 401
    assert client.post("/api/themes", json={"name": "Castle"}, headers=user_headers).status_code == 403


def test_duplicate_and_invalid_names(client, admin_headers):
    client.post("/api/themes", json={"name": "Castle"}, headers=admin_headers)

    resp = client.post("/api/themes", json={"name": "Castle"}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "A Theme with name 'Castle' already exists. Please choose a unique name."

    resp = client.post("/api/themes", json={"name": " "}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"name": "Name cannot be blank"}


def test_not_found_message(client):
    resp = client.get("/api/authors/Steve")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "not_found", "message": "Author with name 'Steve' not found"}


def test_query_by_name(client, admin_headers):
    for name in ("Sky Blue", "Navy Blue", "Red"):
        client.post("/api/colors", json={"name": name}, headers=admin_headers)

    resp = client.get("/api/colors/query?name=BLUE")
    assert [c["name"] for c in resp.get_json()["colors"]] == ["Sky Blue", "Navy Blue"]


def test_query_rejects_unknown_params(client):
    resp = client.get("/api/colors/query?title=Blue")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == (
        "Invalid query parameter 'title' detected. Allowed parameters for this endpoint are: name."
    )


def test_delete_in_use(client, admin_headers, user_headers):
    client.post(
        "/api/builds",
        data={"name": "Blue Tower", "authors": "Steve", "themes": "Castle", "colors": "Blue", "schemFile": (io.BytesIO(b"nbt"), "t.schem")},
        headers=user_headers,
        content_type="multipart/form-data",
    )
    resp = client.delete("/api/colors/Blue", headers=admin_headers)
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "Cannot delete Color 'Blue' because it is associated with 1 build(s)."


def test_body_must_be_json_object(client, admin_headers):
    resp = client.post("/api/authors", json=["Steve"], headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"body": "Request body must be a JSON object"}

    resp = client.post("/api/authors", json="Steve", headers=admin_headers)
    assert resp.status_code == 400
    assert client.get("/api/authors").get_json()["authors"] == []


@pytest.mark.parametrize("identifier", ["%C2%B2", "99999999999999999999999"])
def test_odd_identifiers_are_not_found(client, identifier):
    assert client.get(f"/api/authors/{identifier}").status_code == 404
    assert client.get(f"/api/builds/{identifier}").status_code == 404
