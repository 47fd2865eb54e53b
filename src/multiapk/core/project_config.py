from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from multiapk.core.errors import InvalidConfig, MissingProjectConfig
from multiapk.core.schema_registry import validate_payload

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE_NAME = "multiapk.yaml"
PROJECT_CONFIG_SCHEMA_VERSION = "0.1.0"


@dataclass(frozen=True)
class ProjectConfig:
    split_by_abi: bool = False
    split_by_density: bool = False
    locale_filters: frozenset[str] = field(default_factory=frozenset)


def load_yaml_object(path: Path, *, label: str) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise InvalidConfig(f"Failed to read {label} YAML from {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise InvalidConfig(f"{label} YAML is not valid: {path}") from exc
    if not isinstance(payload, dict):
        raise InvalidConfig(f"{label} YAML root must be a mapping: {path}")
    return payload


def normalize_project_config(payload: dict[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key in sorted(payload.keys()):
        value = payload[key]
        if value is None:
            continue
        if key == "schema_version" and isinstance(value, str):
            normalized[key] = value.strip()
        elif key == "locale_filters" and isinstance(value, list):
            if all(isinstance(item, str) for item in value):
                normalized[key] = sorted({item.strip() for item in value if item.strip()})
            else:
                normalized[key] = value
        else:
            normalized[key] = value
    return normalized


def project_config_from_payload(payload: dict[str, Any]) -> ProjectConfig:
    normalized = normalize_project_config(payload)
    validate_payload(
        normalized,
        schema_name="project_config.schema.json",
        payload_name="Project config",
    )
    return ProjectConfig(
        split_by_abi=normalized.get("split_by_abi", False),
        split_by_density=normalized.get("split_by_density", False),
        locale_filters=frozenset(normalized.get("locale_filters", [])),
    )


def load_project_config(project_root: Path) -> ProjectConfig:
    path = project_root / PROJECT_CONFIG_FILE_NAME
    if not path.is_file():
        raise MissingProjectConfig(f"{path.as_posix()} is missing.")
    config = project_config_from_payload(load_yaml_object(path, label="Project config"))
    logger.debug("Loaded %s: %s", path.as_posix(), config)
    return config
