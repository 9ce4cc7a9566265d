"""Reader for the apk installed-package database.

The database at ``lib/apk/db/installed`` is a list of blank-line separated
records, one ``K:value`` line per field:

    P:busybox
    V:1.36.1-r5
    A:x86_64
    L:GPL-2.0-only
    ...

File entries (``F:``, ``R:``, ``Z:``...) are skipped; only package metadata
is kept for the SBOM.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from apko_build.exceptions import PackageIndexError
from apko_build.logging_config import logger

INSTALLED_DB_PATH = Path("lib") / "apk" / "db" / "installed"


@dataclass
class ApkPackage:
    """A package recorded as installed in the image."""

    name: str
    version: str
    arch: str = ""
    license: str = ""
    description: str = ""
    url: str = ""
    origin: str = ""
    maintainer: str = ""
    checksum: str = ""
    commit: str = ""
    size: int = 0
    installed_size: int = 0


_TEXT_FIELDS = {
    "P": "name",
    "V": "version",
    "A": "arch",
    "L": "license",
    "T": "description",
    "U": "url",
    "o": "origin",
    "m": "maintainer",
    "C": "checksum",
    "c": "commit",
}

_INT_FIELDS = {
    "S": "size",
    "I": "installed_size",
}


def _build_package(fields: dict, line_no: int) -> ApkPackage:
    if not fields.get("name"):
        raise PackageIndexError(f"package record ending at line {line_no} has no name (P:)")
    fields.setdefault("version", "")
    return ApkPackage(**fields)


def parse_package_index(lines: Iterable[str]) -> List[ApkPackage]:
    """
    Parse installed-database records.

    Raises:
        PackageIndexError: On malformed lines or records without a package name
    """
    packages: List[ApkPackage] = []
    fields: dict = {}
    line_no = 0

    for line_no, raw in enumerate(lines, 1):
        line = raw.rstrip("\r\n")
        if not line:
            if fields:
                packages.append(_build_package(fields, line_no))
                fields = {}
            continue

        if len(line) < 2 or line[1] != ":":
            raise PackageIndexError(f"malformed package index line {line_no}: {line!r}")

        key, value = line[0], line[2:]
        if key in _TEXT_FIELDS:
            fields[_TEXT_FIELDS[key]] = value
        elif key in _INT_FIELDS:
            try:
                fields[_INT_FIELDS[key]] = int(value)
            except ValueError as e:
                raise PackageIndexError(f"invalid number on package index line {line_no}: {value!r}") from e

    if fields:
        packages.append(_build_package(fields, line_no))

    return packages


class ApkInstalledDatabaseReader:
    """Reads the packages installed into a work directory."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self._db_path = db_path or INSTALLED_DB_PATH

    def read(self, work_dir: str) -> List[ApkPackage]:
        """
        Read the installed packages below ``work_dir``.

        Raises:
            PackageIndexError: If the database is missing, unreadable or malformed
        """
        path = Path(work_dir) / self._db_path
        try:
            with open(path, "r", encoding="utf-8") as f:
                packages = parse_package_index(f)
        except (OSError, UnicodeDecodeError) as e:
            raise PackageIndexError(f"failed to read package index {path}: {e}") from e

        logger.info(f"Read {len(packages)} installed packages from {path}")
        return packages
