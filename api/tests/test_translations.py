from http import HTTPStatus

from sqlmodel import select

from linedesk_models import Translation


def _group(client, project, name="Menu") -> dict:
    response = client.post(f"/projects/{project['id']}/groups", json={"name": name, "description": "UI"})
    assert response.status_code == HTTPStatus.CREATED
    return response.json()


def test_groups_crud(client, project) -> None:
    group = _group(client, project)
    url = f"/projects/{project['id']}/groups"
    assert [g["name"] for g in client.get(url).json()] == ["Menu"]

    renamed = client.patch(f"{url}/{group['id']}", json={"name": "Main menu"})
    assert renamed.status_code == HTTPStatus.OK
    assert renamed.json()["name"] == "Main menu"
    assert client.patch(f"{url}/{group['id']}", json={}).status_code == HTTPStatus.BAD_REQUEST
    assert client.post(url, json={}).status_code == HTTPStatus.BAD_REQUEST

    assert client.delete(f"{url}/{group['id']}").status_code == HTTPStatus.NO_CONTENT
    assert client.get(f"{url}/{group['id']}").status_code == HTTPStatus.NOT_FOUND


def test_dialog_group_cannot_be_deleted_directly(client, project, dialog) -> None:
    url = f"/projects/{project['id']}/groups"
    dialog_group = next(g for g in client.get(url).json() if g["name"] == "Dialog_d1")
    assert client.delete(f"{url}/{dialog_group['id']}").status_code == HTTPStatus.CONFLICT


def test_entries_carry_exported_keys(client, project) -> None:
    group = _group(client, project)
    url = f"/projects/{project['id']}/groups/{group['id']}/entries"
    created = client.post(url, json={"key": "start.button", "comment": "Title screen"})
    assert created.status_code == HTTPStatus.CREATED
    body = created.json()
    assert body["exportedKey"] == "GAME_MENU_START_BUTTON"
    assert body["copied"] is False

    assert client.post(url, json={"key": "start.button"}).status_code == HTTPStatus.CONFLICT
    assert client.post(url, json={}).status_code == HTTPStatus.BAD_REQUEST

    detail = client.get(f"/projects/{project['id']}/groups/{group['id']}").json()
    assert [e["key"] for e in detail["entries"]] == ["start.button"]


def test_key_change_resets_copied(client, project) -> None:
    group = _group(client, project)
    url = f"/projects/{project['id']}/groups/{group['id']}/entries"
    entry = client.post(url, json={"key": "a"}).json()

    copied = client.patch(f"{url}/{entry['id']}", json={"copied": True})
    assert copied.json()["copied"] is True

    renamed = client.patch(f"{url}/{entry['id']}", json={"key": "b"})
    assert renamed.json()["copied"] is False
    assert renamed.json()["exportedKey"] == "GAME_MENU_B"

    both = client.patch(f"{url}/{entry['id']}", json={"key": "c", "copied": True})
    assert both.json()["copied"] is True

    assert client.patch(f"{url}/{entry['id']}", json={}).status_code == HTTPStatus.BAD_REQUEST


def test_translation_upsert_and_blank_invariant(client, project, languages, session) -> None:
    group = _group(client, project)
    entry = client.post(f"/projects/{project['id']}/groups/{group['id']}/entries", json={"key": "hello"}).json()
    url = f"/projects/{project['id']}/groups/{group['id']}/entries/{entry['id']}/translations"
    en = languages["en"]["id"]

    # Blank text never creates a row
    assert client.post(url, json={"languageId": en, "text": "   "}).status_code == HTTPStatus.NO_CONTENT
    assert session.exec(select(Translation)).all() == []

    created = client.post(url, json={"languageId": en, "text": "Hi"})
    assert created.status_code == HTTPStatus.CREATED
    assert created.json()["text"] == "Hi"

    updated = client.post(url, json={"languageId": en, "text": "Hello"})
    assert updated.status_code == HTTPStatus.OK
    assert updated.json()["id"] == created.json()["id"]

    # Blank text removes the stored value
    assert client.post(url, json={"languageId": en, "text": ""}).status_code == HTTPStatus.NO_CONTENT
    assert session.exec(select(Translation)).all() == []


def test_translation_requires_known_language(client, project) -> None:
    group = _group(client, project)
    entry = client.post(f"/projects/{project['id']}/groups/{group['id']}/entries", json={"key": "k"}).json()
    url = f"/projects/{project['id']}/groups/{group['id']}/entries/{entry['id']}/translations"
    assert client.post(url, json={"text": "x"}).status_code == HTTPStatus.BAD_REQUEST
    assert client.post(url, json={"languageId": 9999, "text": "x"}).status_code == HTTPStatus.NOT_FOUND


def test_delete_entry_removes_translations(client, project, languages, session) -> None:
    group = _group(client, project)
    url = f"/projects/{project['id']}/groups/{group['id']}/entries"
    entry = client.post(url, json={"key": "k"}).json()
    client.post(f"{url}/{entry['id']}/translations", json={"languageId": languages["en"]["id"], "text": "x"})

    assert client.delete(f"{url}/{entry['id']}").status_code == HTTPStatus.NO_CONTENT
    assert client.get(url).json() == []
    assert session.exec(select(Translation)).all() == []
