from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from multiapk.core.build_ids import compose_version_code
from multiapk.core.export_config import BuildTarget, load_export_config
from multiapk.core.manifest import format_gl_es_version
from multiapk.core.plan_log import read_plan_file, write_plan_file
from multiapk.core.planner import compute_plan_from_config
from multiapk.core.variant import Plan, Variant

_FORMAT_CHOICES = ("text", "json")


def _variant_payload(variant: Variant, version_code: int) -> dict[str, Any]:
    return {
        "abi": variant.abi,
        "build_slot": variant.build_slot,
        "gl_es_version": variant.gl_es_version,
        "locale_filters": sorted(variant.locale_filters),
        "min_sdk_version": variant.min_sdk_version,
        "project": variant.relative_path,
        "revision": variant.revision,
        "screens": variant.screen_support.encode(),
        "soft_variants": variant.soft_variant_map(),
        "split_by_density": variant.split_by_density,
        "version_code": compose_version_code(version_code, variant.build_slot, variant.revision),
    }


def _plan_payload(plan: Plan) -> dict[str, Any]:
    return {
        "package": plan.app_package,
        "version_code": plan.version_code,
        "variants": [_variant_payload(variant, plan.version_code) for variant in plan.variants],
    }


def render_plan(plan: Plan, *, output_format: str) -> str:
    if output_format == "json":
        return json.dumps(_plan_payload(plan), indent=2, sort_keys=True) + "\n"

    lines = [
        f"package: {plan.app_package}",
        f"versionCode: {plan.version_code}",
        f"apks: {len(plan.variants)}",
    ]
    for variant in plan.variants:
        composed = compose_version_code(plan.version_code, variant.build_slot, variant.revision)
        details = [
            f"minSdk={variant.min_sdk_version}",
            f"screens={variant.screen_support.encode()}",
            f"gl={format_gl_es_version(variant.gl_es_version)}",
        ]
        if variant.abi:
            details.append(f"abi={variant.abi}")
        soft_variants = variant.soft_variant_map()
        if soft_variants:
            details.append(f"soft={','.join(soft_variants)}")
        lines.append(
            f"- [{variant.build_slot:02d}] {composed} r{variant.revision} "
            f"{variant.relative_path} " + " ".join(details)
        )
    return "\n".join(lines) + "\n"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _run_plan(args: argparse.Namespace) -> int:
    try:
        config = load_export_config(Path(args.config))
        if args.log:
            config = replace(config, log_path=Path(args.log).resolve())
        target = BuildTarget.from_name(args.target) if args.target else None
        plan = compute_plan_from_config(config, target=target)
        if args.write_log:
            write_plan_file(config.log_path, plan)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(render_plan(plan, output_format=args.format), end="")
    return 0


def _run_log_show(args: argparse.Namespace) -> int:
    try:
        plan = read_plan_file(Path(args.path))
        output = render_plan(plan, output_format=args.format)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(output, end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Multi-APK export planner.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log planning decisions to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser(
        "plan",
        help="Validate projects and compute the multi-APK plan.",
    )
    plan_parser.add_argument("config", help="Path to the export YAML.")
    plan_parser.add_argument(
        "--target",
        choices=[target.value for target in BuildTarget],
        default=None,
        help="Override the build target from the export YAML.",
    )
    plan_parser.add_argument(
        "--log",
        default=None,
        help="Build log to reconcile with and write (defaults to the export YAML log).",
    )
    plan_parser.add_argument(
        "--write-log",
        action="store_true",
        help="Write the computed plan to the build log.",
    )
    plan_parser.add_argument("--format", choices=_FORMAT_CHOICES, default="text")

    log_parser = subparsers.add_parser("log", help="Inspect build logs.")
    log_subparsers = log_parser.add_subparsers(dest="log_command", required=True)
    log_show_parser = log_subparsers.add_parser("show", help="Print a persisted build log.")
    log_show_parser.add_argument("path", help="Path to the build log.")
    log_show_parser.add_argument("--format", choices=_FORMAT_CHOICES, default="text")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "plan":
        return _run_plan(args)
    if args.command == "log":
        if args.log_command == "show":
            return _run_log_show(args)
        print("Unknown log command.", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
