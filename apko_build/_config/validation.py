"""Preflight checks and normalization for image configurations.

Validation is fail-fast: the first invalid user or group is reported, not an
aggregate list. Declared identities may never be root (UID/GID 0).
"""

import copy

from apko_build.exceptions import ConfigurationError
from apko_build.logging_config import logger

from .models import ImageConfiguration, OSRelease

SERVICE_BUNDLE_COMMAND = "/bin/s6-svscan /sv"
SERVICE_BUNDLE_PACKAGE = "s6"

DEFAULT_OS_ID = "alpine"
DEFAULT_OS_NAME = "apko-generated image"
DEFAULT_OS_VERSION_ID = "3.16"
DEFAULT_OS_HOME_URL = "https://github.com/chainguard-dev/apko"


def apply_service_bundle(config: ImageConfiguration) -> None:
    """Point the entrypoint at the s6 supervisor and make sure s6 gets installed.

    Mutates ``config`` in place.
    """
    config.entrypoint.command = SERVICE_BUNDLE_COMMAND

    # Only add s6 once so re-validating a configuration does not pile up entries.
    if SERVICE_BUNDLE_PACKAGE not in config.contents.packages:
        config.contents.packages.append(SERVICE_BUNDLE_PACKAGE)


def apply_os_release_defaults(os_release: OSRelease) -> None:
    """Fill empty os-release fields with fallback values. Set fields are kept."""
    if not os_release.id:
        os_release.id = DEFAULT_OS_ID

    if not os_release.name:
        os_release.name = DEFAULT_OS_NAME

    if not os_release.pretty_name:
        os_release.pretty_name = DEFAULT_OS_NAME

    if not os_release.version_id:
        os_release.version_id = DEFAULT_OS_VERSION_ID

    if not os_release.home_url:
        os_release.home_url = DEFAULT_OS_HOME_URL


def check_accounts(config: ImageConfiguration) -> None:
    """
    Check declared users, then groups, in declaration order.

    Raises:
        ConfigurationError: For the first user or group that is unnamed or has ID 0
    """
    for user in config.accounts.users:
        if not user.username:
            raise ConfigurationError(f"configured user {user} has no configured user name", kind="user", entity=user)
        if user.uid == 0:
            raise ConfigurationError(f"configured user {user} has UID 0", kind="user", entity=user)

    for group in config.accounts.groups:
        if not group.groupname:
            raise ConfigurationError(
                f"configured group {group} has no configured group name", kind="group", entity=group
            )
        if group.gid == 0:
            raise ConfigurationError(f"configured group {group} has GID 0", kind="group", entity=group)


def validate_image_configuration(config: ImageConfiguration) -> ImageConfiguration:
    """
    Run preflight checks and return the normalized configuration.

    The input is left untouched; a validated copy is returned.

    Order of operations:
    1. Service-bundle specialization (entrypoint command and s6 package)
    2. User checks
    3. Group checks
    4. os-release defaults

    Args:
        config: Configuration as loaded (and optionally probed)

    Returns:
        Validated ImageConfiguration

    Raises:
        ConfigurationError: On the first invalid user or group
    """
    validated = copy.deepcopy(config)

    if validated.entrypoint.is_service_bundle:
        logger.debug("Applying service-bundle entrypoint")
        apply_service_bundle(validated)

    check_accounts(validated)
    apply_os_release_defaults(validated.os_release)

    return validated
