"""Shared helpers for the SBOM writers."""

import os
from datetime import datetime, timezone
from typing import Optional

from license_expression import ExpressionError, get_spdx_licensing
from packageurl import PackageURL

from apko_build.logging_config import logger

from .apk_index import ApkPackage
from .protocol import OSInfo

# SPDX licensing instance for validation
_spdx_licensing = get_spdx_licensing()

DEFAULT_APK_NAMESPACE = "alpine"
SOURCE_DATE_EPOCH_ENV = "SOURCE_DATE_EPOCH"


def package_purl(pkg: ApkPackage, os_info: OSInfo) -> PackageURL:
    """Build ``pkg:apk/<distro>/<name>@<version>?arch=<arch>`` for an installed package."""
    qualifiers = {}
    if pkg.arch:
        qualifiers["arch"] = pkg.arch
    if os_info.version:
        qualifiers["distro"] = f"{os_info.id or DEFAULT_APK_NAMESPACE}-{os_info.version}"
    return PackageURL(
        type="apk",
        namespace=os_info.id or DEFAULT_APK_NAMESPACE,
        name=pkg.name,
        version=pkg.version or None,
        qualifiers=qualifiers or None,
    )


def normalize_license(raw: str) -> Optional[str]:
    """
    Return ``raw`` as a valid SPDX license expression, or None.

    Only expressions whose every symbol is a known SPDX identifier are
    accepted.
    """
    if not raw or not raw.strip():
        return None
    try:
        parsed = _spdx_licensing.parse(raw.strip(), validate=False)
    except ExpressionError:
        return None
    if parsed is None or _spdx_licensing.unknown_license_keys(parsed):
        return None
    return str(parsed)


def creation_time() -> datetime:
    """Document creation time, pinned by SOURCE_DATE_EPOCH when set."""
    epoch = os.getenv(SOURCE_DATE_EPOCH_ENV)
    if epoch:
        try:
            return datetime.fromtimestamp(int(epoch), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            logger.warning(f"Ignoring invalid {SOURCE_DATE_EPOCH_ENV}: {epoch!r}")
    return datetime.now(timezone.utc).replace(microsecond=0)
