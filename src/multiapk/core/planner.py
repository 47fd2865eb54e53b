from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Sequence

from multiapk.core.abi_probe import list_abi_folders
from multiapk.core.differentiation import DifferentiationValidator
from multiapk.core.errors import InvalidProjectPath, PackageMismatch
from multiapk.core.expansion import base_variant, expand_variants
from multiapk.core.export_config import BuildTarget, ExportConfig
from multiapk.core.manifest import MANIFEST_FILE_NAME, parse_manifest
from multiapk.core.ordering import plan_order
from multiapk.core.plan_log import read_plan, read_plan_file, write_plan
from multiapk.core.project_config import load_project_config
from multiapk.core.reconcile import reconcile
from multiapk.core.variant import Plan, Variant

logger = logging.getLogger(__name__)

PreviousLog = Path | BinaryIO | Plan | None


def _resolve_project_dir(relative_path: str, base_dir: Path) -> Path:
    candidate = Path(relative_path)
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    project_dir = candidate.resolve()
    if not project_dir.is_dir():
        raise InvalidProjectPath(
            f"Project folder '{project_dir.as_posix()}' is not a valid directory."
        )
    manifest_path = project_dir / MANIFEST_FILE_NAME
    if not manifest_path.is_file():
        raise InvalidProjectPath(
            f"{project_dir.as_posix()} is not a valid project ({MANIFEST_FILE_NAME} not found)."
        )
    return project_dir


def _project_variants(
    relative_path: str,
    *,
    base_dir: Path,
    app_package: str,
    target: BuildTarget,
    validator: DifferentiationValidator,
) -> tuple[Variant, ...]:
    project_dir = _resolve_project_dir(relative_path, base_dir)
    descriptor = parse_manifest(project_dir / MANIFEST_FILE_NAME)
    if descriptor.app_package != app_package:
        raise PackageMismatch(
            f"{descriptor.location} package value is not valid. "
            f"Found '{descriptor.app_package}', expected '{app_package}'."
        )
    validator.add(descriptor)

    if target is BuildTarget.CLEAN:
        return (base_variant(descriptor, relative_path=relative_path, project_root=project_dir),)

    config = load_project_config(project_dir)
    abis = list_abi_folders(project_dir) if config.split_by_abi else []
    return expand_variants(
        descriptor,
        config,
        abis=abis,
        relative_path=relative_path,
        project_root=project_dir,
    )


def _load_previous(previous_log: PreviousLog) -> Plan | None:
    if previous_log is None or isinstance(previous_log, Plan):
        return previous_log
    if isinstance(previous_log, Path):
        if not previous_log.exists():
            return None
        return read_plan_file(previous_log)
    return read_plan(previous_log)


def compute_plan(
    project_paths: Sequence[str],
    *,
    app_package: str,
    version_code: int,
    target: BuildTarget = BuildTarget.RELEASE,
    previous_log: PreviousLog = None,
    base_dir: Path | None = None,
) -> Plan:
    """Validate, expand, order and reconcile the APKs of a multi-APK export.

    ``previous_log`` is only consulted for release builds; a missing log
    file means this is the first export at ``version_code``.
    """
    resolved_base = (base_dir or Path.cwd()).resolve()
    validator = DifferentiationValidator()
    variants: list[Variant] = []
    for relative_path in project_paths:
        variants.extend(
            _project_variants(
                relative_path,
                base_dir=resolved_base,
                app_package=app_package,
                target=target,
                validator=validator,
            )
        )

    ordered = plan_order(variants)
    if target is BuildTarget.RELEASE:
        previous = _load_previous(previous_log)
        if previous is not None and previous.app_package != app_package:
            raise PackageMismatch(
                "Build log package value is not valid. "
                f"Found '{previous.app_package}', expected '{app_package}'."
            )
        if previous is not None and previous.version_code != version_code:
            logger.info(
                "Build log is for versionCode %d; starting fresh at versionCode %d.",
                previous.version_code,
                version_code,
            )
            previous = None
        if previous is not None:
            logger.info("Reconciling with previous build log (%d APK(s)).", len(previous.variants))
            ordered = reconcile(ordered, previous.variants, version_code=version_code)

    plan = Plan(app_package=app_package, version_code=version_code, variants=ordered)
    logger.info(
        "Planned %d APK(s) for %s at versionCode %d.",
        len(plan.variants),
        app_package,
        version_code,
    )
    return plan


def compute_plan_from_config(config: ExportConfig, *, target: BuildTarget | None = None) -> Plan:
    return compute_plan(
        config.projects,
        app_package=config.app_package,
        version_code=config.version_code,
        target=target or config.target,
        previous_log=config.log_path,
        base_dir=config.base_dir,
    )


__all__ = ["compute_plan", "compute_plan_from_config", "write_plan"]
