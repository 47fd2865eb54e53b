"""Line-oriented build log for multi-APK plans.

The log records what went into each APK so a bug report against a
published version code can be traced back, and it is the one place an
operator edits to bump the revision of a single APK.

Soft variants are written as comment lines under their primary variant.
They are an audit trail only: reading never parses them, since they are
always derived again from the project configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from multiapk.core.build_ids import check_build_slot, check_revision
from multiapk.core.errors import LogFormatError, LogIoError
from multiapk.core.screens import ScreenSupport
from multiapk.core.variant import Plan, Variant

KEY_SLOT = "slot"
KEY_REVISION = "revision"
KEY_PROJECT = "project"
KEY_MIN_SDK = "minSdkVersion"
KEY_SCREENS = "screens"
KEY_GL_ES = "glEsVersion"
KEY_ABI = "abi"
KEY_SPLIT_DENSITY = "splitDensity"
KEY_LOCALES = "locales"
KEY_RESOURCES = "resources"

_REQUIRED_KEYS = (KEY_SLOT, KEY_REVISION, KEY_PROJECT, KEY_MIN_SDK, KEY_SCREENS)
_KNOWN_KEYS = frozenset(
    {*_REQUIRED_KEYS, KEY_GL_ES, KEY_ABI, KEY_SPLIT_DENSITY, KEY_LOCALES}
)
_LINE_BREAKS = "\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029"
_FORBIDDEN_VALUE_CHARS = ";" + _LINE_BREAKS

_LOG_HEADER = (
    "# Multi-APK BUILD LOG.\n"
    "# This file serves two purposes:\n"
    "# - A log of what was built, showing what went in each APK and their properties.\n"
    "#   You can refer to this if you get a bug report for a specific versionCode.\n"
    "# - A way to update builds through revisions for specific APKs.\n"
    "# Only edit manually to change the revision of builds you wish to respin.\n"
    "# Note that all APKs will be regenerated all the time.\n"
)
_LINE_FORMAT_HELP = (
    "# The format of the following lines is:\n"
    "# <filename>:<property1>;<property2>;<property3>;...\n"
    "# Properties are written as <name>=<value>\n"
)
_SOFT_VARIANTS_BANNER = " # Soft Variants -- DO NOT UNCOMMENT:\n"


def _check_value(key: str, value: str) -> str:
    if any(char in value for char in _FORBIDDEN_VALUE_CHARS) or value != value.strip():
        raise LogFormatError(f"Build log value for {key} cannot be written: {value!r}")
    return value


def _encode_locales(locale_filters: frozenset[str]) -> str:
    for item in locale_filters:
        if not item or "|" in item:
            raise LogFormatError(f"Build log value for {KEY_LOCALES} cannot be written: {item!r}")
    return "|".join(sorted(locale_filters))


def _variant_properties(variant: Variant) -> list[tuple[str, str]]:
    props = [
        (KEY_SLOT, str(check_build_slot(variant.build_slot))),
        (KEY_REVISION, str(check_revision(variant.revision))),
        (KEY_PROJECT, variant.relative_path),
        (KEY_MIN_SDK, str(variant.min_sdk_version)),
        (KEY_SCREENS, variant.screen_support.encode()),
    ]
    if variant.gl_es_version is not None:
        if variant.gl_es_version < 0:
            raise LogFormatError(
                f"Build log value for {KEY_GL_ES} cannot be negative: {variant.gl_es_version}"
            )
        props.append((KEY_GL_ES, f"0x{variant.gl_es_version:08x}"))
    if variant.abi is not None:
        if not variant.abi:
            raise LogFormatError(f"Build log value for {KEY_ABI} cannot be empty.")
        props.append((KEY_ABI, variant.abi))
    props.append((KEY_SPLIT_DENSITY, "true" if variant.split_by_density else "false"))
    if variant.locale_filters:
        props.append((KEY_LOCALES, _encode_locales(variant.locale_filters)))
    return props


def encode_variant_line(variant: Variant, soft_variant: str | None = None) -> str:
    name = variant.output_name(soft_variant)
    if ":" in name or name.lstrip().startswith("#") or any(char in name for char in _LINE_BREAKS):
        raise LogFormatError(f"Build log name cannot be written: {name!r}")
    props = _variant_properties(variant)
    if soft_variant is not None:
        props.append((KEY_RESOURCES, variant.soft_variant_map()[soft_variant]))
    body = ";".join(f"{key}={_check_value(key, value)}" for key, value in props)
    return f"{name}:{body}"


def encode_plan(plan: Plan) -> str:
    parts = [
        _LOG_HEADER,
        f"package={_check_value('package', plan.app_package)}\n",
        f"versionCode={plan.version_code}\n",
        _LINE_FORMAT_HELP,
    ]
    for variant in plan.variants:
        parts.append(encode_variant_line(variant) + "\n")
        soft_variants = variant.soft_variant_map()
        if soft_variants:
            parts.append(_SOFT_VARIANTS_BANNER)
        for soft_variant in soft_variants:
            parts.append(" # " + encode_variant_line(variant, soft_variant) + "\n")
    return "".join(parts)


def _parse_int(key: str, raw: str, line_number: int) -> int:
    try:
        return int(raw, 0) if key == KEY_GL_ES else int(raw)
    except ValueError as exc:
        raise LogFormatError(
            f"Build log line {line_number}: {key} must be an integer, got {raw!r}."
        ) from exc


def _parse_bool(key: str, raw: str, line_number: int) -> bool:
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise LogFormatError(f"Build log line {line_number}: {key} must be true or false, got {raw!r}.")


def _parse_header(line: str, key: str, line_number: int) -> str:
    name, sep, value = line.partition("=")
    if not sep or name.strip() != key:
        raise LogFormatError(f"Build log line {line_number}: expected {key}=<value>, got {line!r}.")
    return value.strip()


def decode_variant_line(line: str, line_number: int = 0) -> Variant:
    _name, sep, body = line.partition(":")
    if not sep:
        raise LogFormatError(f"Build log line {line_number}: missing ':' separator.")

    props: dict[str, str] = {}
    for item in body.split(";"):
        if not item.strip():
            continue
        key, eq, value = item.partition("=")
        key = key.strip()
        if not eq:
            raise LogFormatError(f"Build log line {line_number}: property {item!r} has no value.")
        if key not in _KNOWN_KEYS:
            raise LogFormatError(f"Build log line {line_number}: unknown property {key!r}.")
        if key in props:
            raise LogFormatError(f"Build log line {line_number}: duplicate property {key!r}.")
        props[key] = value.strip()

    missing = [key for key in _REQUIRED_KEYS if key not in props]
    if missing:
        raise LogFormatError(
            f"Build log line {line_number}: missing propert{'y' if len(missing) == 1 else 'ies'} "
            f"{', '.join(missing)}."
        )

    try:
        screen_support = ScreenSupport.decode(props[KEY_SCREENS])
    except ValueError as exc:
        raise LogFormatError(f"Build log line {line_number}: {exc}") from exc

    locales = props.get(KEY_LOCALES, "")
    return Variant(
        min_sdk_version=_parse_int(KEY_MIN_SDK, props[KEY_MIN_SDK], line_number),
        screen_support=screen_support,
        gl_es_version=(
            _parse_int(KEY_GL_ES, props[KEY_GL_ES], line_number) if KEY_GL_ES in props else None
        ),
        abi=props.get(KEY_ABI) or None,
        split_by_density=_parse_bool(
            KEY_SPLIT_DENSITY, props.get(KEY_SPLIT_DENSITY, "false"), line_number
        ),
        locale_filters=frozenset(item for item in locales.split("|") if item),
        relative_path=props[KEY_PROJECT],
        build_slot=check_build_slot(_parse_int(KEY_SLOT, props[KEY_SLOT], line_number)),
        revision=check_revision(_parse_int(KEY_REVISION, props[KEY_REVISION], line_number)),
    )


def decode_plan(text: str) -> Plan:
    app_package: str | None = None
    version_code: int | None = None
    variants: list[Variant] = []

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if app_package is None:
            app_package = _parse_header(line, "package", line_number)
        elif version_code is None:
            version_code = _parse_int(
                "versionCode", _parse_header(line, "versionCode", line_number), line_number
            )
        else:
            variants.append(decode_variant_line(line, line_number))

    if app_package is None or version_code is None:
        raise LogFormatError("Build log must start with package= and versionCode= lines.")
    return Plan(app_package=app_package, version_code=version_code, variants=tuple(variants))


def write_plan(sink: BinaryIO, plan: Plan) -> None:
    payload = encode_plan(plan).encode("utf-8")
    try:
        sink.write(payload)
        sink.flush()
    except OSError as exc:
        raise LogIoError(f"Failed to write build log: {exc}") from exc


def read_plan(source: BinaryIO) -> Plan:
    try:
        raw = source.read()
    except OSError as exc:
        raise LogIoError(f"Failed to read existing build log: {exc}") from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise LogFormatError(f"Build log is not valid UTF-8: {exc}") from exc
    return decode_plan(text)


def write_plan_file(path: Path, plan: Plan) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            write_plan(handle, plan)
    except OSError as exc:
        raise LogIoError(f"Failed to write build log {path.as_posix()}: {exc}") from exc


def read_plan_file(path: Path) -> Plan:
    try:
        with path.open("rb") as handle:
            return read_plan(handle)
    except OSError as exc:
        raise LogIoError(f"Failed to read existing build log {path.as_posix()}: {exc}") from exc
