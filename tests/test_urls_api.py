from artefact.models import Role
from conftest import auth


def add(client, token, **payload):
    return client.post("/urls", json=payload, headers=auth(token))


def first_category(client, token):
    return client.get("/categories", headers=auth(token)).json()["categories"][0]


def test_editor_saves_url_with_defaults(client, team):
    resp = add(client, team.tokens[Role.EDITOR], url="example.com/docs")

    assert resp.status_code == 200
    url = resp.json()
    assert url["url"] == "https://example.com/docs"
    assert url["title"] == "Untitled"
    assert url["categoryId"] is None
    assert url["workspaceId"] == team.workspace_id
    assert url["addedBy"]["id"] == team.user_ids[Role.EDITOR]


def test_url_with_category_and_title(client, team):
    token = team.tokens[Role.EDITOR]
    category = first_category(client, token)

    resp = add(client, token, url="http://example.com", title="Example", categoryId=category["id"])

    assert resp.status_code == 200
    assert resp.json()["url"] == "http://example.com"
    assert resp.json()["title"] == "Example"
    assert resp.json()["category"]["name"] == category["name"]


def test_url_is_required_and_must_be_valid(client, team):
    token = team.tokens[Role.EDITOR]

    resp = add(client, token, title="Nothing")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "URL is required"

    resp = add(client, token, url="not a url")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid URL format"


def test_category_must_belong_to_workspace(client, team):
    foreign = first_category(client, team.tokens["outsider"])

    resp = add(client, team.tokens[Role.EDITOR], url="example.com", categoryId=foreign["id"])
    assert resp.status_code == 400


def test_viewer_reads_but_cannot_write(client, team):
    add(client, team.tokens[Role.EDITOR], url="example.com")

    resp = client.get("/urls", headers=auth(team.tokens[Role.VIEWER]))
    assert resp.status_code == 200
    assert len(resp.json()) == 1

    resp = add(client, team.tokens[Role.VIEWER], url="example.org")
    assert resp.status_code == 403


def test_partial_update(client, team):
    token = team.tokens[Role.EDITOR]
    category = first_category(client, token)
    url = add(client, token, url="example.com", title="Old", description="keep",
              categoryId=category["id"]).json()

    resp = client.put(f"/urls/{url['id']}", json={"title": "New"}, headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["title"] == "New"
    assert resp.json()["description"] == "keep"
    assert resp.json()["categoryId"] == category["id"]

    resp = client.put(f"/urls/{url['id']}", json={"categoryId": None}, headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["categoryId"] is None
    assert resp.json()["title"] == "New"

    resp = client.put(f"/urls/{url['id']}", json={"url": "not a url"}, headers=auth(token))
    assert resp.status_code == 400


def test_delete_url(client, team):
    token = team.tokens[Role.EDITOR]
    url = add(client, token, url="example.com").json()

    resp = client.delete(f"/urls/{url['id']}", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["message"] == "URL deleted successfully"

    resp = client.delete(f"/urls/{url['id']}", headers=auth(token))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "URL not found or access denied"


def test_urls_are_isolated_between_workspaces(client, team):
    url = add(client, team.tokens["outsider"], url="example.com/private").json()

    assert client.get("/urls", headers=auth(team.tokens[Role.OWNER])).json() == []
    resp = client.delete(f"/urls/{url['id']}", headers=auth(team.tokens[Role.OWNER]))
    assert resp.status_code == 404
