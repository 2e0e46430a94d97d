"""Configuration loading from CLI args, env vars, and optional YAML file."""

import logging
import os
from dataclasses import dataclass

import yaml

from logcat_adapter.encoder import ID_LENGTH, sanitize_name
from logcat_adapter.models import Severity

logger = logging.getLogger(__name__)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    app_id: str = "LDA"
    app_description: str = "Logcat DLT Adapter"
    output_dir: str = "channels/"
    min_severity: Severity = Severity.VERBOSE
    echo_input: bool = True
    manifest_file: str = "channels/manifest.json"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def normalize_app_id(value: str) -> str:
    app_id = sanitize_name(value).upper()
    if not 1 <= len(app_id) <= ID_LENGTH:
        raise ValueError(f"Application id must be 1-{ID_LENGTH} letters or digits, got {value!r}")
    return app_id


def _setting(cli_value, env_name: str, yaml_data: dict, key: str, default):
    """CLI flag, then environment variable, then YAML key, then default."""
    if cli_value is not None:
        return cli_value
    if env_name in os.environ:
        return os.environ[env_name]
    return yaml_data.get(key, default)


def load_config(cli_args=None, yaml_data: dict | None = None) -> Config:
    """Build Config from CLI args, env vars, and parsed YAML data."""
    yaml_data = yaml_data or {}

    def cli(name):
        return getattr(cli_args, name, None)

    min_severity = _setting(cli("min_severity"), "MIN_SEVERITY", yaml_data,
                            "min_severity", Config.min_severity)
    if not isinstance(min_severity, Severity):
        min_severity = Severity.from_name(str(min_severity))

    echo_input = _setting(cli("echo_input"), "ECHO_INPUT", yaml_data,
                          "echo_input", Config.echo_input)

    return Config(
        app_id=normalize_app_id(str(_setting(None, "ADAPTER_APP_ID", yaml_data,
                                             "app_id", Config.app_id))),
        app_description=str(_setting(None, "ADAPTER_APP_DESCRIPTION", yaml_data,
                                     "app_description", Config.app_description)),
        output_dir=str(_setting(cli("output_dir"), "CHANNEL_OUTPUT_DIR", yaml_data,
                                "output_dir", Config.output_dir)),
        min_severity=min_severity,
        echo_input=_parse_bool(echo_input),
        manifest_file=str(_setting(cli("manifest_file"), "MANIFEST_FILE", yaml_data,
                                   "manifest_file", Config.manifest_file) or ""),
    )
