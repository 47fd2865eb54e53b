from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from multiapk.core.errors import InvalidConfig
from multiapk.resources import schemas_dir


def load_json_schema(schema_path: Path) -> dict[str, Any]:
    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Failed to load schema from {schema_path}: {exc}") from exc
    if not isinstance(schema, dict):
        raise ValueError(f"Schema JSON must be an object: {schema_path}")
    return schema


def build_schema_registry(directory: Path) -> Registry:
    registry = Registry()
    for schema_file in sorted(directory.glob("*.schema.json")):
        schema = load_json_schema(schema_file)
        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        registry = registry.with_resource(schema_file.resolve().as_uri(), resource)
        schema_id = schema.get("$id")
        if isinstance(schema_id, str) and schema_id:
            registry = registry.with_resource(schema_id, resource)
    return registry


def validate_payload(payload: Any, *, schema_name: str, payload_name: str) -> None:
    directory = schemas_dir()
    schema = load_json_schema(directory / schema_name)
    validator = jsonschema.Draft202012Validator(schema, registry=build_schema_registry(directory))
    errors = sorted(
        validator.iter_errors(payload),
        key=lambda err: (list(str(item) for item in err.path), err.message),
    )
    if not errors:
        return

    lines: list[str] = []
    for err in errors:
        path = ".".join(str(item) for item in err.path) or "$"
        lines.append(f"- {path}: {err.message}")
    details = "\n".join(lines)
    raise InvalidConfig(f"{payload_name} schema validation failed:\n{details}")
