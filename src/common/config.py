"""Helpers for loading scan configuration profiles."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import BackendError, ErrorCode
from .models import GlobalSettings, ProfileSettings, RuntimeConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "defaults.json"
DEFAULT_PROFILE = "default"
ALLOWED_ERROR_POLICIES = {"fail-fast", "strict", "replace"}


@dataclass(slots=True)
class ConfigDocument:
    source: Path
    version: int
    global_settings: GlobalSettings
    profiles: Dict[str, ProfileSettings]


def load_runtime_config(
    profile: str = DEFAULT_PROFILE,
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> RuntimeConfig:
    """Load configuration JSON, validate it, and resolve a specific profile.

    ``overrides`` may carry a ``global`` and/or ``profile`` mapping whose keys
    replace the document values before validation (the CLI uses this for
    ``--separator``/``--terminator`` style flags).
    """

    document = load_config_document(
        profile_name=profile,
        config_path=config_path,
        overrides=overrides,
    )
    return RuntimeConfig(global_settings=document.global_settings, profile=document.profiles[profile])


def load_config_document(
    *,
    profile_name: Optional[str] = None,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> ConfigDocument:
    cfg_path = config_path or DEFAULT_CONFIG_PATH
    raw = _read_config_json(cfg_path)

    version = _require_positive_int(raw.get("version"), "version", cfg_path)
    global_section = raw.get("global")
    if not isinstance(global_section, Mapping):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'global' section missing in {cfg_path}")

    overrides = overrides or {}
    global_data = {**global_section, **(overrides.get("global") or {})}
    global_settings = _build_global_settings(global_data, cfg_path)

    profiles_section = raw.get("profiles")
    if not isinstance(profiles_section, Mapping) or not profiles_section:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'profiles' section missing in {cfg_path}")

    profile_overrides = overrides.get("profile") or {}
    profiles: Dict[str, ProfileSettings] = {}
    for name, profile_data in profiles_section.items():
        if not isinstance(profile_data, Mapping):
            raise BackendError(
                ErrorCode.CONFIG_ERROR,
                f"Profile '{name}' must be an object in {cfg_path}",
            )
        merged = dict(profile_data)
        if profile_name and name == profile_name and profile_overrides:
            merged = {**merged, **profile_overrides}
        profiles[name] = _build_profile_settings(name, merged, cfg_path)

    if profile_name and profile_name not in profiles:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{profile_name}' not found in {cfg_path}",
        )

    return ConfigDocument(
        source=cfg_path,
        version=version,
        global_settings=global_settings,
        profiles=profiles,
    )


def error_mode_from_policy(policy: str) -> str:
    """Translate human-friendly error policy into Python's decoding error handler."""

    return "strict" if policy.lower() in {"fail-fast", "strict"} else "replace"


# ---------------------------------------------------------------------------
# Internal helpers


def _read_config_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:  # pragma: no cover - depends on filesystem
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' is not valid JSON: {exc}") from exc


def _build_global_settings(data: Mapping[str, Any], source: Path) -> GlobalSettings:
    encoding = _require_string(data.get("encoding", GlobalSettings().encoding), "global.encoding", source)
    error_policy = _normalize_error_policy(
        data.get("error_policy", GlobalSettings().error_policy),
        source,
    )
    return GlobalSettings(encoding=encoding, error_policy=error_policy)


def _build_profile_settings(name: str, data: Mapping[str, Any], source: Path) -> ProfileSettings:
    prefix = f"profiles.{name}"
    required_fields = ("description", "separator", "chunk_size")
    missing = [field for field in required_fields if field not in data]
    if missing:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{name}' missing fields {missing} in {source}",
        )

    defaults = ProfileSettings(description="")
    return ProfileSettings(
        description=_require_string(data.get("description"), f"{prefix}.description", source),
        separator=_require_char(data.get("separator"), f"{prefix}.separator", source),
        enclosure=_require_char(data.get("enclosure", defaults.enclosure), f"{prefix}.enclosure", source),
        escape=_require_optional_char(data.get("escape", defaults.escape), f"{prefix}.escape", source),
        terminator=_require_text(data.get("terminator", defaults.terminator), f"{prefix}.terminator", source),
        chunk_size=_require_positive_int(data.get("chunk_size"), f"{prefix}.chunk_size", source),
        max_line_length=_optional_positive_int(
            data.get("max_line_length"), f"{prefix}.max_line_length", source
        ),
    )


def _normalize_error_policy(value: Any, source: Path) -> str:
    policy = _require_string(value, "global.error_policy", source).lower()
    if policy not in {p.lower() for p in ALLOWED_ERROR_POLICIES}:
        allowed = ", ".join(sorted(ALLOWED_ERROR_POLICIES))
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Unsupported error_policy '{value}' in {source}. Allowed: {allowed}",
        )
    return "fail-fast" if policy in {"fail-fast", "strict"} else "replace"


def _require_string(value: Any, field: str, source: Path) -> str:
    if not isinstance(value, str):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a string in {source}")
    text = value.strip()
    if not text:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be non-empty in {source}")
    return text


def _require_text(value: Any, field: str, source: Path) -> str:
    # terminators may legitimately be empty or whitespace, so no stripping here
    if not isinstance(value, str):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a string in {source}")
    return value


def _require_char(value: Any, field: str, source: Path) -> str:
    text = _require_text(value, field, source)
    if len(text) != 1:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a single character in {source}")
    return text


def _require_optional_char(value: Any, field: str, source: Path) -> str:
    text = _require_text(value, field, source)
    if len(text) > 1:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be empty or a single character in {source}")
    return text


def _require_positive_int(value: Any, field: str, source: Path) -> int:
    try:
        num = int(value)
    except (TypeError, ValueError) as exc:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be an integer in {source}",
        ) from exc
    if num <= 0:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be greater than zero in {source}",
        )
    return num


def _optional_positive_int(value: Any, field: str, source: Path) -> Optional[int]:
    if value is None:
        return None
    return _require_positive_int(value, field, source)
