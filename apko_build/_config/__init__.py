"""Image configuration model, loading, probing and validation."""

from .loader import parse_image_configuration, read_image_configuration
from .models import (
    SERVICE_BUNDLE_TYPE,
    Group,
    ImageAccounts,
    ImageConfiguration,
    ImageContents,
    ImageEntrypoint,
    OSRelease,
    User,
)
from .summary import summarize_image_configuration
from .validation import (
    SERVICE_BUNDLE_COMMAND,
    SERVICE_BUNDLE_PACKAGE,
    apply_os_release_defaults,
    apply_service_bundle,
    validate_image_configuration,
)
from .vcs import normalize_vcs_url, probe_vcs_url

__all__ = [
    # Models
    "ImageConfiguration",
    "ImageContents",
    "ImageEntrypoint",
    "ImageAccounts",
    "User",
    "Group",
    "OSRelease",
    "SERVICE_BUNDLE_TYPE",
    # Loading
    "read_image_configuration",
    "parse_image_configuration",
    # Probing
    "probe_vcs_url",
    "normalize_vcs_url",
    # Validation
    "validate_image_configuration",
    "apply_service_bundle",
    "apply_os_release_defaults",
    "SERVICE_BUNDLE_COMMAND",
    "SERVICE_BUNDLE_PACKAGE",
    # Summary
    "summarize_image_configuration",
]
