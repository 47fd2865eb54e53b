from __future__ import annotations

from pathlib import Path

NATIVE_LIBS_DIR_NAME = "libs"
NATIVE_LIB_SUFFIX = ".so"


def _has_native_library(folder: Path) -> bool:
    return any(
        child.is_file() and child.name.lower().endswith(NATIVE_LIB_SUFFIX)
        for child in folder.iterdir()
    )


def list_abi_folders(project_root: Path) -> list[str]:
    """Names of ``libs/<abi>/`` folders holding at least one native library."""
    libs_dir = project_root / NATIVE_LIBS_DIR_NAME
    if not libs_dir.is_dir():
        return []
    return sorted(
        child.name
        for child in libs_dir.iterdir()
        if child.is_dir() and _has_native_library(child)
    )
