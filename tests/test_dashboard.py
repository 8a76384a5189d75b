"""Tests for the web dashboard"""

import pytest
from fastapi.testclient import TestClient

from expose_cli.dashboard import create_app, render_dashboard


@pytest.fixture
def client(orchestrator):
    return TestClient(create_app(orchestrator))


def test_empty_dashboard(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "No servers running" in response.text
    assert "example.dev" in response.text


def test_status_endpoint(client, orchestrator, project_dir):
    orchestrator.start("demo", project_dir)

    data = client.get("/api/status").json()

    assert data["servers"]["demo"]["hostname"] == "demo.example.dev"
    assert "expose-tunnel" in data["tunnels"]


def test_stop_endpoint(client, orchestrator, project_dir):
    orchestrator.start("demo", project_dir)

    response = client.post("/api/stop/demo")

    assert response.status_code == 200
    assert response.json() == {"success": True, "hostname": "demo.example.dev", "status": "stopped"}
    assert orchestrator.list_servers() == []


def test_stop_unknown(client):
    response = client.post("/api/stop/ghost")
    assert response.status_code == 404


def test_rendered_rows_are_escaped(orchestrator, project_dir):
    orchestrator.start("demo", project_dir)

    page = render_dashboard(orchestrator)

    assert 'href="https://demo.example.dev"' in page
    assert "stopServer('demo')" in page
    assert "No servers running" not in page
