import shutil
from pathlib import Path


def resolve_cmd(cmd: str) -> str:
    """
    Resolve a program name to an executable path.

    Raises:
        FileNotFoundError: if `cmd` is neither a path nor found in PATH
    """
    p = Path(cmd)
    if p.is_file() or ("/" in cmd or "\\" in cmd):
        return str(p.resolve())
    found = shutil.which(cmd)
    if found:
        return found
    raise FileNotFoundError(
        f"Executable '{cmd}' not found. "
        f"Either provide a path (e.g. './myprog') or ensure it's in PATH."
    )


def ensure_parent(path: Path) -> Path:
    """Create the parent directory of `path` if needed and return `path`."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
