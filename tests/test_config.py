"""Tests for configuration loading and editing."""

import tomllib
from pathlib import Path
from unittest.mock import patch

import pytest

import reelfind.config as config_module
from reelfind.config import (
    API_KEY_ENV_VAR,
    DEFAULTS,
    get_backend,
    get_defaults,
    get_user,
    init_config,
    load_config,
    set_config_value,
)


@pytest.fixture
def config_file(tmp_path: Path):
    """Point the config module at a temporary directory."""
    config_dir = tmp_path / "reelfind"
    config_file = config_dir / "config.toml"
    with (
        patch("reelfind.config.paths.CONFIG_DIR", config_dir),
        patch("reelfind.config.CONFIG_FILE", config_file),
        patch.object(config_module, "_cached_config", None),
    ):
        yield config_file


class TestLoadConfig:
    """Tests for load_config() and init_config()."""

    def test_missing_file_is_empty(self, config_file):
        assert load_config(force_reload=True) == {}

    def test_init_writes_template(self, config_file):
        assert init_config() is True
        assert config_file.exists()

        config = load_config(force_reload=True)
        assert config["defaults"]["debounce_ms"] == 300
        assert config["defaults"]["min_query_length"] == 2

    def test_init_keeps_existing(self, config_file):
        init_config()
        config_file.write_text('[user]\nid = "u1"\n')

        assert init_config() is False
        assert "u1" in config_file.read_text()

    def test_init_overwrite(self, config_file):
        init_config()
        config_file.write_text('[user]\nid = "u1"\n')

        assert init_config(overwrite=True) is True
        assert "[defaults]" in config_file.read_text()

    def test_cached_until_reload(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text('[user]\nid = "u1"\n')
        assert load_config(force_reload=True)["user"]["id"] == "u1"

        config_file.write_text('[user]\nid = "u2"\n')
        assert load_config()["user"]["id"] == "u1"
        assert load_config(force_reload=True)["user"]["id"] == "u2"


class TestAccessors:
    """Tests for get_defaults(), get_backend() and get_user()."""

    def test_defaults_merge(self):
        merged = get_defaults({"defaults": {"search_limit": 25}})
        assert merged["search_limit"] == 25
        assert merged["debounce_ms"] == DEFAULTS["debounce_ms"]

    def test_defaults_without_section(self):
        assert get_defaults({}) == DEFAULTS

    def test_backend_env_key_wins(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV_VAR, "from-env")
        backend = get_backend({"backend": {"endpoint": "https://x", "api_key": "file"}})
        assert backend["api_key"] == "from-env"
        assert backend["endpoint"] == "https://x"

    def test_backend_file_key(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
        assert get_backend({"backend": {"api_key": "file"}})["api_key"] == "file"

    def test_backend_does_not_mutate_config(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV_VAR, "from-env")
        config = {"backend": {"api_key": "file"}}
        get_backend(config)
        assert config["backend"]["api_key"] == "file"

    def test_user_requires_id(self):
        assert get_user({}) is None
        assert get_user({"user": {"email": "a@example.com"}}) is None
        assert get_user({"user": {"id": "u1"}}) == {"id": "u1"}


class TestSetConfigValue:
    """Tests for set_config_value()."""

    def test_creates_sections_and_converts(self, config_file):
        set_config_value("defaults.search_limit", "25")
        set_config_value("defaults.poll_interval", "2.5")
        set_config_value("backend.endpoint", "https://api.example.com/graphql")

        with open(config_file, "rb") as f:
            saved = tomllib.load(f)
        assert saved["defaults"]["search_limit"] == 25
        assert saved["defaults"]["poll_interval"] == 2.5
        assert saved["backend"]["endpoint"] == "https://api.example.com/graphql"

    def test_file_is_owner_only(self, config_file):
        set_config_value("backend.api_key", "secret")
        assert config_file.stat().st_mode & 0o777 == 0o600

    def test_bad_number_raises(self, config_file):
        with pytest.raises(ValueError):
            set_config_value("defaults.debounce_ms", "soon")

    @pytest.mark.parametrize("key", ["defaults.colour", "accounts.work.id", "backend"])
    def test_unknown_key_raises(self, config_file, key):
        with pytest.raises(ValueError, match="Unknown config key"):
            set_config_value(key, "x")
        assert not config_file.exists()
