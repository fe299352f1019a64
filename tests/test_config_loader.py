"""Tests for scan configuration loading."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from common.config import error_mode_from_policy, load_runtime_config
from common.errors import BackendError, ErrorCode
from common.models import ScanConfig


def test_load_default_profile() -> None:
    config = load_runtime_config()
    assert config.profile.separator == ","
    assert config.profile.terminator == ""
    assert config.profile.chunk_size == 200
    assert config.global_settings.encoding == "utf-8"


def test_semicolon_profile_builds_scan_config() -> None:
    runtime = load_runtime_config("semicolon_terminated")
    scan = runtime.scan_config()
    assert scan == ScanConfig(terminator=";")


def test_tsv_profile_disables_escape() -> None:
    scan = load_runtime_config("tsv").scan_config()
    assert scan.separator == "\t"
    assert scan.escape == ""


def test_profile_overrides_are_applied() -> None:
    runtime = load_runtime_config(
        "default",
        overrides={"profile": {"separator": "|", "terminator": "#", "max_line_length": 80}},
    )
    assert runtime.profile.separator == "|"
    assert runtime.profile.terminator == "#"
    assert runtime.profile.max_line_length == 80


def test_error_mode_resolution() -> None:
    assert error_mode_from_policy("fail-fast") == "strict"
    assert error_mode_from_policy("replace") == "replace"


def test_missing_profile_raises_backend_error(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, {"version": 1, "global": _global_payload(), "profiles": {"only": _profile_payload()}})
    with pytest.raises(BackendError) as exc:
        load_runtime_config("missing", config_path=config_path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


def test_invalid_error_policy_rejected(tmp_path: Path) -> None:
    global_payload = {**_global_payload(), "error_policy": "panic"}
    config_path = _write_config(tmp_path, {"version": 1, "global": global_payload, "profiles": {"default": _profile_payload()}})
    with pytest.raises(BackendError) as exc:
        load_runtime_config("default", config_path=config_path)
    assert "error_policy" in str(exc.value)


def test_multi_character_separator_rejected(tmp_path: Path) -> None:
    profile = {**_profile_payload(), "separator": "::"}
    config_path = _write_config(tmp_path, {"version": 1, "global": _global_payload(), "profiles": {"default": profile}})
    with pytest.raises(BackendError) as exc:
        load_runtime_config("default", config_path=config_path)
    assert "separator" in str(exc.value)


def test_non_positive_chunk_size_rejected(tmp_path: Path) -> None:
    profile = {**_profile_payload(), "chunk_size": 0}
    config_path = _write_config(tmp_path, {"version": 1, "global": _global_payload(), "profiles": {"default": profile}})
    with pytest.raises(BackendError) as exc:
        load_runtime_config("default", config_path=config_path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


def test_invalid_json_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(BackendError) as exc:
        load_runtime_config(config_path=path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


@pytest.mark.parametrize(
    "kwargs",
    [
        {"separator": ""},
        {"separator": ",", "enclosure": ","},
        {"escape": "\\\\"},
        {"max_line_length": 0},
        {"separator": "\n"},
    ],
)
def test_scan_config_validation(kwargs: dict) -> None:
    with pytest.raises(BackendError) as exc:
        ScanConfig(**kwargs)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


def _write_config(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def _global_payload() -> dict:
    return {"encoding": "utf-8", "error_policy": "fail-fast"}


def _profile_payload() -> dict:
    return {
        "description": "tmp",
        "separator": ",",
        "enclosure": "\"",
        "escape": "\\",
        "terminator": "",
        "chunk_size": 50,
        "max_line_length": None,
    }
