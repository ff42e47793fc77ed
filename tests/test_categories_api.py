from artefact.models import Role
from conftest import auth


def categories(client, token):
    return client.get("/categories", headers=auth(token))


def create(client, token, **payload):
    return client.post("/categories", json=payload, headers=auth(token))


def test_list_includes_starter_categories_and_context(client, team):
    resp = categories(client, team.tokens[Role.VIEWER])

    assert resp.status_code == 200
    body = resp.json()
    assert body["currentWorkspace"]["id"] == team.workspace_id
    assert body["currentUserRole"] == "VIEWER"
    assert {c["name"] for c in body["categories"]} == {"Development", "Design", "Marketing", "Research", "Tools"}
    assert all(c["urlCount"] == 0 for c in body["categories"])


def test_editor_creates_category(client, team):
    resp = create(client, team.tokens[Role.EDITOR], name=" Reading ", color="#111111", icon="📚")

    assert resp.status_code == 200
    category = resp.json()
    assert category["name"] == "Reading"
    assert category["icon"] == "📚"
    names = [c["name"] for c in categories(client, team.tokens[Role.OWNER]).json()["categories"]]
    assert "Reading" in names


def test_viewer_cannot_create(client, team):
    resp = create(client, team.tokens[Role.VIEWER], name="Reading", color="#111111")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Insufficient permissions"


def test_non_member_has_no_access_to_workspace(client, team):
    resp = client.get(f"/categories?workspace_id={team.workspace_id}", headers=auth(team.tokens["outsider"]))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No workspace found"


def test_name_and_color_are_required(client, team):
    resp = create(client, team.tokens[Role.EDITOR], name="Reading")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Name and color are required"


def test_duplicate_names_conflict_case_insensitively(client, team):
    resp = create(client, team.tokens[Role.EDITOR], name="design", color="#000000")
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Category with this name already exists"


def test_same_name_allowed_in_another_workspace(client, team):
    resp = create(client, team.tokens["outsider"], name="Reading", color="#000000")
    assert resp.status_code == 200
    resp = create(client, team.tokens[Role.EDITOR], name="Reading", color="#000000")
    assert resp.status_code == 200


def test_update_category(client, team):
    token = team.tokens[Role.EDITOR]
    category_id = create(client, token, name="Reading", color="#111111").json()["id"]

    resp = client.put(f"/categories/{category_id}", json={"name": "Books", "color": "#222222"}, headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["name"] == "Books"
    assert resp.json()["color"] == "#222222"

    # Keeping its own name is not a conflict
    resp = client.put(f"/categories/{category_id}", json={"name": "books", "color": "#333333"}, headers=auth(token))
    assert resp.status_code == 200

    resp = client.put(f"/categories/{category_id}", json={"name": "Tools", "color": "#333333"}, headers=auth(token))
    assert resp.status_code == 409


def test_cannot_touch_category_of_another_workspace(client, team):
    foreign_id = create(client, team.tokens["outsider"], name="Private", color="#000000").json()["id"]

    resp = client.put(f"/categories/{foreign_id}", json={"name": "Mine", "color": "#000000"}, headers=auth(team.tokens[Role.OWNER]))
    assert resp.status_code == 404
    resp = client.delete(f"/categories/{foreign_id}", headers=auth(team.tokens[Role.OWNER]))
    assert resp.status_code == 404


def test_delete_uncategorizes_urls(client, team):
    token = team.tokens[Role.EDITOR]
    category_id = create(client, token, name="Reading", color="#111111").json()["id"]
    for link in ("https://a.example.com", "https://b.example.com"):
        resp = client.post("/urls", json={"url": link, "categoryId": category_id}, headers=auth(token))
        assert resp.status_code == 200

    listed = {c["id"]: c for c in categories(client, token).json()["categories"]}
    assert listed[category_id]["urlCount"] == 2

    resp = client.delete(f"/categories/{category_id}", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Category deleted successfully", "uncategorizedUrls": 2}

    urls = client.get("/urls", headers=auth(token)).json()
    assert len(urls) == 2
    assert all(u["categoryId"] is None for u in urls)
