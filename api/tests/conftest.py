"""Common pytest fixtures for API tests.

Tests run against an in-memory SQLite database created from the model
metadata; no Postgres or migrations are needed.
"""

import os
from collections.abc import Iterator

# Point the app at a throwaway database BEFORE importing it
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")
# Enable admin endpoints for tests
os.environ.setdefault("ADMIN_ENABLED", "true")
os.environ.setdefault("ADMIN_TOKEN", "dev")

import pytest
from linedesk_api.db import engine
from linedesk_api.main import app
from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlmodel import Session, SQLModel

from linedesk_models import (
    Dialog,
    DialogLine,
    DialogSection,
    Language,
    Project,
    ProjectLanguage,
    Translation,
    TranslationEntry,
    TranslationGroup,
)

SQLModel.metadata.create_all(engine)


@pytest.fixture(scope="session")
def client() -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def session() -> Iterator[Session]:
    with Session(engine) as s:
        yield s


@pytest.fixture(autouse=True)
def _clean_db(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("ENTRY_CREATION_POLICY", raising=False)
    # Ensure a clean state before each test to avoid cross-test interference
    with Session(engine) as s:
        # Children first
        for model in (
            DialogLine,
            DialogSection,
            Dialog,
            Translation,
            TranslationEntry,
            TranslationGroup,
            ProjectLanguage,
            Project,
            Language,
        ):
            s.exec(delete(model))
        s.commit()
    yield


@pytest.fixture()
def project(client: TestClient) -> dict:
    response = client.post("/projects", json={"name": "Game", "description": "Test project"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def languages(client: TestClient, project: dict) -> dict:
    """English and French, both attached to ``project``; keyed by code."""
    created = {}
    for code, name in (("en", "English"), ("fr", "French")):
        response = client.post("/languages", json={"code": code, "name": name})
        assert response.status_code == 201
        created[code] = response.json()
        attached = client.post(f"/projects/{project['id']}/languages", json={"languageId": created[code]["id"]})
        assert attached.status_code == 204
    return created


@pytest.fixture()
def dialog(client: TestClient, project: dict) -> dict:
    response = client.post("/dialogs", json={"id": "d1", "projectId": project["id"], "name": "Intro"})
    assert response.status_code == 201
    return client.get("/dialogs/d1").json()
