from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from multiapk.core.project_config import load_yaml_object
from multiapk.core.schema_registry import validate_payload

EXPORT_CONFIG_SCHEMA_VERSION = "0.1.0"
DEFAULT_LOG_FILE_NAME = "multiapk-build.log"


class BuildTarget(Enum):
    """What the build driver asked for.

    ``RELEASE`` expands soft variants and keeps continuity with the
    previous build log. ``CLEAN`` only needs the base variants.
    """

    RELEASE = "release"
    CLEAN = "clean"

    @classmethod
    def from_name(cls, value: str) -> BuildTarget:
        for target in cls:
            if target.value == value:
                return target
        raise ValueError(f"Unknown build target: {value!r}")


@dataclass(frozen=True)
class ExportConfig:
    app_package: str
    version_code: int
    projects: tuple[str, ...]
    target: BuildTarget
    log_path: Path
    base_dir: Path


def export_config_from_payload(payload: dict[str, Any], *, base_dir: Path) -> ExportConfig:
    normalized = {key: value for key, value in sorted(payload.items()) if value is not None}
    if isinstance(normalized.get("package"), str):
        normalized["package"] = normalized["package"].strip()
    if isinstance(normalized.get("projects"), list):
        normalized["projects"] = [
            item.strip() if isinstance(item, str) else item for item in normalized["projects"]
        ]
    validate_payload(
        normalized,
        schema_name="export_config.schema.json",
        payload_name="Export config",
    )

    log_path = Path(normalized.get("log", DEFAULT_LOG_FILE_NAME))
    if not log_path.is_absolute():
        log_path = base_dir / log_path
    return ExportConfig(
        app_package=normalized["package"],
        version_code=normalized["version_code"],
        projects=tuple(normalized["projects"]),
        target=BuildTarget.from_name(normalized.get("target", BuildTarget.RELEASE.value)),
        log_path=log_path,
        base_dir=base_dir,
    )


def load_export_config(path: Path) -> ExportConfig:
    payload = load_yaml_object(path, label="Export config")
    return export_config_from_payload(payload, base_dir=path.resolve().parent)
