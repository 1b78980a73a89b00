"""Tests for loading client configuration from JSON files."""

import json

import pytest

from bitcoin_rpc.config.loader import load_config, load_json_file
from bitcoin_rpc.config.schema import Network
from bitcoin_rpc.core.errors import ConfigError


class TestLoadJsonFile:
    """Tests for load_json_file."""

    def test_valid_json_returns_dict(self, tmp_path):
        path = tmp_path / "rpc.json"
        path.write_text('{"host": "node", "port": 8332}')
        assert load_json_file(path) == {"host": "node", "port": 8332}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="File not found"):
            load_json_file(tmp_path / "missing.json")

    def test_empty_file_returns_empty_dict(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("   \n")
        assert load_json_file(path) == {}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_json_file(path)

    def test_array_is_rejected(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="Expected object"):
            load_json_file(path)

    def test_utf8_bom_is_tolerated(self, tmp_path):
        path = tmp_path / "bom.json"
        path.write_bytes(b"\xef\xbb\xbf" + b'{"network": "signet"}')
        assert load_json_file(path) == {"network": "signet"}


class TestLoadConfig:
    """Tests for load_config."""

    def test_loads_client_config(self, tmp_path):
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({
            "network": "regtest",
            "username": "rpcuser",
            "password": "s3cret",
            "timeout": 5000,
        }))
        config = load_config(path)
        assert config.network is Network.REGTEST
        assert config.username == "rpcuser"
        assert config.timeout == 5000

    def test_relative_cookie_is_resolved_against_config_dir(self, tmp_path):
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({"cookie": "regtest/.cookie"}))
        config = load_config(path)
        assert config.cookie == tmp_path.resolve() / "regtest" / ".cookie"

    def test_absolute_cookie_is_kept(self, tmp_path):
        cookie = tmp_path / "abs" / ".cookie"
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({"cookie": str(cookie)}))
        assert load_config(path).cookie == cookie

    def test_invalid_network(self, tmp_path):
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({"network": "dogecoin"}))
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert str(path) in str(exc_info.value)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({"rpcuser": "alice"}))
        with pytest.raises(ConfigError):
            load_config(path)
