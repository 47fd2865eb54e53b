"""Locate data files shipped with multiapk.

The JSON schemas live inside the package (``multiapk/data/schemas``) and
are installed with it. ``MULTIAPK_DATA_ROOT`` points at another data root,
which must hold a ``schemas/`` directory.
"""

from __future__ import annotations

import os
from pathlib import Path

from multiapk.core.errors import MissingDataFiles

DATA_ROOT_ENV = "MULTIAPK_DATA_ROOT"


def _packaged_data_root() -> Path:
    return Path(__file__).resolve().parent / "data"


def data_root() -> Path:
    env = os.environ.get(DATA_ROOT_ENV)
    if env:
        root = Path(env).expanduser().resolve()
        if not (root / "schemas").is_dir():
            raise MissingDataFiles(f"{DATA_ROOT_ENV}={env!r} has no schemas/ directory.")
        return root

    root = _packaged_data_root()
    if not (root / "schemas").is_dir():
        raise MissingDataFiles(
            f"multiapk schemas not found under {root.as_posix()}; reinstall the package."
        )
    return root


def schemas_dir() -> Path:
    """Return the directory holding the JSON schema files."""
    return data_root() / "schemas"
