"""
Image Configuration Module

Public API for turning an image configuration document into validated build
input. The configuration is threaded through explicit stages, each returning
a new value:

    load → probe (optional, never fails) → validate

Usage:
    from apko_build.configuration import load_image_configuration, validate_image_configuration

    config = load_image_configuration("apko.yaml")
    config = validate_image_configuration(config)
    summarize_image_configuration(config)
"""

from pathlib import Path
from typing import Union

from ._config import (
    SERVICE_BUNDLE_COMMAND,
    SERVICE_BUNDLE_PACKAGE,
    SERVICE_BUNDLE_TYPE,
    Group,
    ImageAccounts,
    ImageConfiguration,
    ImageContents,
    ImageEntrypoint,
    OSRelease,
    User,
    apply_os_release_defaults,
    apply_service_bundle,
    normalize_vcs_url,
    parse_image_configuration,
    probe_vcs_url,
    read_image_configuration,
    summarize_image_configuration,
    validate_image_configuration,
)

__all__ = [
    # Core API
    "load_image_configuration",
    "prepare_image_configuration",
    "probe_vcs_url",
    "validate_image_configuration",
    "summarize_image_configuration",
    # Types
    "ImageConfiguration",
    "ImageContents",
    "ImageEntrypoint",
    "ImageAccounts",
    "User",
    "Group",
    "OSRelease",
    # Lower level steps
    "parse_image_configuration",
    "apply_service_bundle",
    "apply_os_release_defaults",
    "normalize_vcs_url",
    # Constants
    "SERVICE_BUNDLE_TYPE",
    "SERVICE_BUNDLE_COMMAND",
    "SERVICE_BUNDLE_PACKAGE",
]


def load_image_configuration(path: Union[str, Path], probe: bool = True) -> ImageConfiguration:
    """
    Load an image configuration from ``path``.

    When ``probe`` is set and the document has no ``vcs-url``, the URL is
    probed from the git repository holding the file. Probing never fails
    the load.

    Args:
        path: Path to the YAML configuration document
        probe: Whether to probe the VCS URL when it is not configured

    Returns:
        Loaded (not yet validated) ImageConfiguration

    Raises:
        ReadError: If the file cannot be read
        ParseError: If the document is structurally invalid
    """
    config = read_image_configuration(path)

    if probe and not config.vcs_url:
        config = probe_vcs_url(config, path)

    return config


def prepare_image_configuration(path: Union[str, Path], probe: bool = True) -> ImageConfiguration:
    """
    Run the whole load → probe → validate sequence.

    Returns:
        Validated ImageConfiguration, ready to be treated as read-only build input

    Raises:
        ReadError, ParseError: If loading fails
        ConfigurationError: If validation fails
    """
    return validate_image_configuration(load_image_configuration(path, probe=probe))
