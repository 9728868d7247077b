"""Tests for configuration paths, persistence and precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from spotapi.config import (
    _atomic_write,
    config_path,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    load_config,
    resolve_config,
    resolve_credential,
    save_config,
)
from spotapi.exceptions import ConfigError, CredentialNotFoundError
from spotapi.models import ClientConfig


# ------------------------------------------------------------------ #
# Directories
# ------------------------------------------------------------------ #


class TestDirectories:
    def test_xdg_dirs(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config / "config" / "spotapi"
        assert get_cache_dir() == isolated_config / "cache" / "spotapi"
        assert get_data_dir() == isolated_config / "data" / "spotapi"
        assert get_config_dir().is_dir()

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spotapi.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_config_dir() == tmp_path / ".spotapi"
        assert get_cache_dir() == tmp_path / ".spotapi" / "cache"
        assert get_data_dir() == tmp_path / ".spotapi" / "logs"


# ------------------------------------------------------------------ #
# Persistence
# ------------------------------------------------------------------ #


class TestPersistence:
    def test_missing_file_gives_defaults(self, isolated_config: Path) -> None:
        assert load_config() == ClientConfig()

    def test_save_then_load(self, isolated_config: Path) -> None:
        config = ClientConfig(token_source="file:~/token")
        config.request.timeout = 5.0
        config.cache.enabled = False
        save_config(config)

        assert json.loads(config_path().read_text())["token_source"] == "file:~/token"
        assert load_config() == config

    def test_invalid_json(self, isolated_config: Path) -> None:
        config_path().write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()

    def test_invalid_values(self, isolated_config: Path) -> None:
        config_path().write_text(json.dumps({"request": {"timeout": "soon"}}))
        with pytest.raises(ConfigError):
            load_config()

    def test_atomic_write_leaves_no_temp_files(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, "{}")
        assert target.read_text() == "{}"
        assert [p.name for p in target.parent.iterdir()] == ["file.json"]


# ------------------------------------------------------------------ #
# Precedence
# ------------------------------------------------------------------ #


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.token_source == "env:SPOTAPI_TOKEN"
        assert config.request.allow_insecure_tls is False
        assert config.cache.enabled is True

    def test_env_overrides_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_config(ClientConfig(token_source="file:/a"))
        monkeypatch.setenv("SPOTAPI_TOKEN_SOURCE", "file:/b")
        monkeypatch.setenv("SPOTAPI_TIMEOUT", "2.5")
        monkeypatch.setenv("SPOTAPI_CACHE_DIR", str(isolated_config / "elsewhere"))

        config = resolve_config()
        assert config.token_source == "file:/b"
        assert config.request.timeout == 2.5
        assert config.cache.directory == str(isolated_config / "elsewhere")

    def test_bad_timeout(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPOTAPI_TIMEOUT", "forever")
        with pytest.raises(ConfigError, match="SPOTAPI_TIMEOUT"):
            resolve_config()

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1", True), ("true", True), ("YES", True), ("on", True), ("0", False), ("no", False), ("", False)],
    )
    def test_insecure_tls_flag(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
    ) -> None:
        monkeypatch.setenv("SPOTAPI_ALLOW_INSECURE_TLS", value)
        assert resolve_config().request.allow_insecure_tls is expected

    def test_cli_format_wins(self, isolated_config: Path) -> None:
        assert resolve_config(cli_format="json").output.format == "json"


# ------------------------------------------------------------------ #
# Credential sources
# ------------------------------------------------------------------ #


class TestResolveCredential:
    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_TOKEN", "secret")
        assert resolve_credential("env:MY_TOKEN") == "secret"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MY_TOKEN", raising=False)
        with pytest.raises(CredentialNotFoundError, match="MY_TOKEN"):
            resolve_credential("env:MY_TOKEN")

    def test_file(self, tmp_path: Path) -> None:
        path = tmp_path / "token"
        path.write_text("  from-file \n")
        assert resolve_credential(f"file:{path}") == "from-file"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(CredentialNotFoundError):
            resolve_credential(f"file:{tmp_path / 'missing'}")

    def test_prompt_requires_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin.isatty", lambda: False)
        with pytest.raises(ConfigError, match="not a TTY"):
            resolve_credential("prompt")

    def test_prompt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin.isatty", lambda: True)
        monkeypatch.setattr("getpass.getpass", lambda prompt: "typed")
        assert resolve_credential("prompt") == "typed"

    def test_unknown(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("vault:x")

    def test_not_found_is_a_config_error(self) -> None:
        assert issubclass(CredentialNotFoundError, ConfigError)
