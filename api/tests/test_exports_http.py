import io
import json
import zipfile
from http import HTTPStatus

from linedesk_api.utils.exported_keys import build_exported_key


def _build_d1(client, dialog) -> None:
    start = dialog["sections"][0]
    lines_url = f"/dialogs/d1/sections/{start['id']}/lines"
    client.post(lines_url, json={"type": "dialog", "speaker": "Amy", "textKey": "line_1", "order": 0})
    client.post(lines_url, json={"type": "nextSection", "data": '{"nextSection":"end"}', "order": 1})
    client.post("/dialogs/d1/sections", json={"sectionId": "end", "order": 1})


def test_dialog_json_download(client, project, dialog) -> None:
    _build_d1(client, dialog)
    response = client.get("/dialogs/d1/export")
    assert response.status_code == HTTPStatus.OK
    assert response.headers["content-type"].startswith("application/json")
    assert response.headers["content-disposition"] == 'attachment; filename="d1.json"'
    assert response.json() == {
        "startSection": "start",
        "sections": [
            {
                "id": "start",
                "lines": [
                    {"type": "dialog", "speaker": "Amy", "text": build_exported_key("Game", "Dialog_d1", "line_1")},
                    {"type": "nextSection", "nextSection": "end"},
                ],
            },
            {"id": "end", "lines": []},
        ],
    }


def test_switch_with_bad_data_exports_raw_and_has_no_edges(client, dialog) -> None:
    start = dialog["sections"][0]
    client.post(f"/dialogs/d1/sections/{start['id']}/lines", json={"type": "switch", "data": "not json"})
    exported = client.get("/dialogs/d1/export").json()
    assert exported["sections"][0]["lines"] == [{"type": "switch", "data": "not json"}]
    assert client.get("/dialogs/d1/graph").json()["links"] == []


def test_project_csv_download(client, project, languages) -> None:
    group = client.post(f"/projects/{project['id']}/groups", json={"name": "Menu"}).json()
    entry = client.post(f"/projects/{project['id']}/groups/{group['id']}/entries", json={"key": "hello"}).json()
    client.post(
        f"/projects/{project['id']}/groups/{group['id']}/entries/{entry['id']}/translations",
        json={"languageId": languages["en"]["id"], "text": "Hi"},
    )
    client.post(
        f"/projects/{project['id']}/groups/{group['id']}/entries/{entry['id']}/translations",
        json={"languageId": languages["fr"]["id"], "text": ""},
    )

    response = client.get(f"/projects/{project['id']}/export")
    assert response.status_code == HTTPStatus.OK
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="Game.csv"'
    assert response.text == f"keys,en,fr\n{build_exported_key('Game', 'Menu', 'hello')},Hi,"


def test_dialogs_zip_download(client, project, dialog) -> None:
    _build_d1(client, dialog)
    client.post("/dialogs", json={"id": "d2", "projectId": project["id"], "name": "Second"})

    response = client.get(f"/projects/{project['id']}/dialogs/export")
    assert response.status_code == HTTPStatus.OK
    assert response.headers["content-type"] == "application/zip"
    assert "Game_dialogs_" in response.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == ["d1.json", "d2.json"]
        d1 = json.loads(archive.read("d1.json"))
    assert d1 == client.get("/dialogs/d1/export").json()


def test_zip_without_dialogs_is_404(client, project) -> None:
    response = client.get(f"/projects/{project['id']}/dialogs/export")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["detail"] == "No dialogs found"


def test_dialog_sections_are_sorted_and_unique(client, project, dialog) -> None:
    client.post("/dialogs/d1/sections", json={"sectionId": "zeta"})
    client.post("/dialogs", json={"id": "d2", "projectId": project["id"], "name": "Second"})
    client.post("/dialogs/d2/sections", json={"sectionId": "alpha"})

    response = client.get(f"/projects/{project['id']}/dialog-sections")
    assert response.json() == ["alpha", "start", "zeta"]


def test_stored_graph(client, dialog) -> None:
    _build_d1(client, dialog)
    graph = client.get("/dialogs/d1/graph").json()
    assert [node["id"] for node in graph["nodes"]] == ["start", "end"]
    assert graph["nodes"][0]["isStart"] is True
    assert [(link["source"], link["target"]) for link in graph["links"]] == [("start", "end")]
    assert client.get("/dialogs/missing/graph").status_code == HTTPStatus.NOT_FOUND


def test_preview_graph_of_unsaved_state(client) -> None:
    body = {
        "startSection": "a",
        "sections": [
            {"sectionId": "a", "lines": [{"type": "options", "data": '{"options":[{"nextSection":"b"}]}'}]},
            {"sectionId": "b", "lines": []},
        ],
    }
    response = client.post("/dialogs/graph", json=body)
    assert response.status_code == HTTPStatus.OK
    assert response.json()["links"] == [{"source": "a", "target": "b", "label": "option 1"}]


def test_layout_unavailable_maps_to_503(client, dialog, monkeypatch) -> None:
    import graphviz

    def _missing(self, *args, **kwargs):
        raise graphviz.ExecutableNotFound(["fdp"])

    monkeypatch.setattr(graphviz.Digraph, "pipe", _missing)
    assert client.get("/dialogs/d1/graph/layout").status_code == HTTPStatus.SERVICE_UNAVAILABLE
    assert client.get("/dialogs/d1/graph.svg").status_code == HTTPStatus.SERVICE_UNAVAILABLE
