"""Tests for configuration resolution"""

import json

import pytest

from expose_cli.config import ExposeConfig, environment_overrides, get_expose_dir, load_config, save_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("EXPOSE_DOMAIN", "EXPOSE_TUNNEL_NAME", "EXPOSE_BASE_PORT", "EXPOSE_HOME"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    config = load_config(tmp_path)

    assert config.domain == "example.com"
    assert config.tunnel_name == "expose-tunnel"
    assert config.base_port == 3000
    assert not config.is_configured


def test_config_file_values(tmp_path):
    (tmp_path / "config.json").write_text(
        json.dumps({"domain": "mycompany.com", "tunnelName": "shared", "basePort": 4000})
    )

    config = load_config(tmp_path)

    assert config.domain == "mycompany.com"
    assert config.tunnel_name == "shared"
    assert config.base_port == 4000
    assert config.is_configured


def test_environment_wins(tmp_path, monkeypatch):
    (tmp_path / "config.json").write_text(json.dumps({"domain": "file.com", "basePort": 4000}))
    monkeypatch.setenv("EXPOSE_DOMAIN", "env.dev")
    monkeypatch.setenv("EXPOSE_BASE_PORT", "5000")

    config = load_config(tmp_path)

    assert config.domain == "env.dev"
    assert config.base_port == 5000
    assert environment_overrides()["EXPOSE_DOMAIN"] == "env.dev"
    assert environment_overrides()["EXPOSE_TUNNEL_NAME"] is None


def test_non_numeric_base_port_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("EXPOSE_BASE_PORT", "lots")
    assert load_config(tmp_path).base_port == 3000


def test_malformed_file_ignored(tmp_path):
    (tmp_path / "config.json").write_text("[1, 2")
    assert load_config(tmp_path).domain == "example.com"


def test_expose_home(tmp_path, monkeypatch):
    monkeypatch.setenv("EXPOSE_HOME", str(tmp_path / "custom"))

    assert get_expose_dir() == tmp_path / "custom"
    assert load_config().state_file == tmp_path / "custom" / "state.json"


def test_save_then_load(tmp_path):
    config = ExposeConfig(expose_dir=tmp_path / ".expose").with_domain("mine.io")

    path = save_config(config)

    assert json.loads(path.read_text()) == {"domain": "mine.io", "tunnelName": "expose-tunnel", "basePort": 3000}
    assert load_config(tmp_path / ".expose") == ExposeConfig(
        domain="mine.io", expose_dir=tmp_path / ".expose", credentials_dir=config.credentials_dir
    )


def test_paths(tmp_path):
    config = ExposeConfig(expose_dir=tmp_path)

    assert config.managed_config_path == tmp_path / "tunnel-config.yml"
    assert config.dedicated_config_path("demo") == tmp_path / "tunnel-demo.yml"
    assert config.log_path("demo") == tmp_path / "logs" / "demo.log"
