"""Tests for the config module."""

from argparse import Namespace

import pytest

from logcat_adapter.config import (
    Config,
    _parse_bool,
    load_config,
    load_yaml_config,
    normalize_app_id,
)
from logcat_adapter.models import Severity

ENV_VARS = [
    "ADAPTER_APP_ID", "ADAPTER_APP_DESCRIPTION", "CHANNEL_OUTPUT_DIR",
    "MIN_SEVERITY", "ECHO_INPUT", "MANIFEST_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestParseBool:
    def test_true_values(self):
        for val in ("true", "True", "1", "yes", " YES ", True):
            assert _parse_bool(val) is True

    def test_false_values(self):
        for val in ("false", "0", "no", "", "random", False):
            assert _parse_bool(val) is False


class TestConfigDefaults:
    def test_defaults(self):
        cfg = Config()
        assert cfg.app_id == "LDA"
        assert cfg.app_description == "Logcat DLT Adapter"
        assert cfg.output_dir == "channels/"
        assert cfg.min_severity is Severity.VERBOSE
        assert cfg.echo_input is True
        assert cfg.manifest_file == "channels/manifest.json"

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(AttributeError):
            cfg.app_id = "XYZ"


class TestNormalizeAppId:
    def test_uppercased(self):
        assert normalize_app_id("lda") == "LDA"

    def test_symbols_removed(self):
        assert normalize_app_id("l-d-a") == "LDA"

    def test_too_long(self):
        with pytest.raises(ValueError):
            normalize_app_id("ADAPTER")

    def test_empty(self):
        with pytest.raises(ValueError):
            normalize_app_id("--")


class TestLoadYamlConfig:
    def test_no_path(self):
        assert load_yaml_config(None) == {}

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "nope.yml")) == {}

    def test_reads_mapping(self, tmp_path):
        path = tmp_path / "adapter.yml"
        path.write_text("app_id: CAR\nmin_severity: info\necho_input: false\n")
        assert load_yaml_config(str(path)) == {
            "app_id": "CAR", "min_severity": "info", "echo_input": False,
        }

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_yaml_config(str(path)) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("app_id: [unclosed\n")
        with pytest.raises(ValueError):
            load_yaml_config(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml_config(str(path))


class TestLoadConfig:
    def test_defaults(self):
        cfg = load_config()
        assert cfg == Config()

    def test_yaml_values(self):
        cfg = load_config(None, {
            "app_id": "car", "app_description": "Car logs", "output_dir": "/tmp/out",
            "min_severity": "warn", "echo_input": False, "manifest_file": None,
        })
        assert cfg.app_id == "CAR"
        assert cfg.app_description == "Car logs"
        assert cfg.output_dir == "/tmp/out"
        assert cfg.min_severity is Severity.WARN
        assert cfg.echo_input is False
        assert cfg.manifest_file == ""

    def test_env_overrides_yaml(self, monkeypatch):
        monkeypatch.setenv("ADAPTER_APP_ID", "ENV")
        monkeypatch.setenv("MIN_SEVERITY", "error")
        monkeypatch.setenv("ECHO_INPUT", "0")
        monkeypatch.setenv("CHANNEL_OUTPUT_DIR", "/var/env")
        cfg = load_config(None, {"app_id": "YML", "min_severity": "debug", "output_dir": "/yml"})
        assert cfg.app_id == "ENV"
        assert cfg.min_severity is Severity.ERROR
        assert cfg.echo_input is False
        assert cfg.output_dir == "/var/env"

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("CHANNEL_OUTPUT_DIR", "/var/env")
        args = Namespace(output_dir="/cli", min_severity="INFO", echo_input=None,
                         manifest_file=None)
        cfg = load_config(args, {})
        assert cfg.output_dir == "/cli"
        assert cfg.min_severity is Severity.INFO
        assert cfg.echo_input is True

    def test_unknown_severity(self):
        with pytest.raises(ValueError):
            load_config(None, {"min_severity": "loud"})
