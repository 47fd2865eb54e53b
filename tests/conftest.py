import sys
from pathlib import Path


def _prefer_repo_src() -> None:
    src_dir = (Path(__file__).resolve().parents[1] / "src").resolve()
    if not src_dir.is_dir():
        return

    entries = [entry for entry in sys.path if entry and Path(entry).resolve() == src_dir]
    for entry in entries:
        sys.path.remove(entry)
    sys.path.insert(0, str(src_dir))


_prefer_repo_src()
