"""Tests for the built-in static file server"""

import sys

import pytest
from fastapi.testclient import TestClient

from expose_cli.static_server import create_app, get_mime_type


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<h1>home</h1>")
    (root / "css" / "app.css").write_text("body {}")
    (root / "data.bin").write_bytes(b"\x00\x01")
    (tmp_path / "secret.txt").write_text("nope")
    return root


@pytest.fixture
def client(site):
    return TestClient(create_app(site))


def test_root_serves_index(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "<h1>home</h1>"
    assert response.headers["content-type"].startswith("text/html")


def test_nested_file_content_type(client):
    response = client.get("/css/app.css")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/css")


def test_unknown_extension(client):
    response = client.get("/data.bin")
    assert response.headers["content-type"] == "application/octet-stream"


def test_missing_file(client):
    response = client.get("/missing.html")
    assert response.status_code == 404


def test_traversal_rejected(client):
    response = client.get("/..%2Fsecret.txt")
    assert response.status_code == 403


def test_absolute_path_stays_inside_root(client, site):
    secret = site.parent / "secret.txt"

    response = client.get("http://testserver/" + str(secret))

    assert response.status_code in (403, 404)
    assert "nope" not in response.text


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_symlink_out_of_root_forbidden(client, site):
    (site / "leak.txt").symlink_to(site.parent / "secret.txt")

    response = client.get("/leak.txt")

    assert response.status_code == 403


def test_mime_lookup():
    assert get_mime_type("logo.SVG") == "image/svg+xml"
    assert get_mime_type("archive.tar") == "application/octet-stream"
