"""Reading ``etc/os-release`` from a build work directory."""

import shlex
from pathlib import Path

from apko_build.logging_config import logger

from .protocol import OSInfo

OS_RELEASE_PATH = Path("etc") / "os-release"


def parse_os_release(text: str) -> OSInfo:
    """Extract ID, NAME and VERSION_ID from os-release(5) content."""
    values = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("\"'")]
        values[key.strip()] = parts[0] if parts else ""

    return OSInfo(
        id=values.get("ID", ""),
        name=values.get("NAME", ""),
        version=values.get("VERSION_ID", ""),
    )


def read_os_info(work_dir: str) -> OSInfo:
    """Read OS information from the work directory. Missing files yield an empty OSInfo."""
    path = Path(work_dir) / OS_RELEASE_PATH
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"No os-release data in {work_dir}: {e}")
        return OSInfo()
    return parse_os_release(text)
