"""Custom exceptions for apko-build."""

from typing import Any, Optional


class ApkoBuildError(Exception):
    """Base exception for all apko-build operations."""


class ConfigurationLoadError(ApkoBuildError):
    """Raised when an image configuration document cannot be loaded."""


class ReadError(ConfigurationLoadError):
    """Raised when the configuration document cannot be read."""


class ParseError(ConfigurationLoadError):
    """Raised when the configuration document is structurally invalid."""


class ConfigurationError(ApkoBuildError):
    """Raised when configuration validation fails.

    For account checks, ``kind`` is ``"user"`` or ``"group"`` and ``entity``
    is the first offending record.
    """

    def __init__(self, message: str, kind: Optional[str] = None, entity: Any = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.entity = entity


class SBOMError(ApkoBuildError):
    """Base exception for the SBOM pipeline. ``stage`` names the failing step."""

    stage = "sbom"


class LayerReadError(SBOMError):
    """Raised when the layer tarball cannot be opened or interpreted."""

    stage = "layer"


class DigestError(SBOMError):
    """Raised when the layer digest cannot be computed."""

    stage = "digest"


class TagParseError(SBOMError):
    """Raised when a registry tag is not a valid image reference."""

    stage = "tag"


class PackageIndexError(SBOMError):
    """Raised when the installed-package index cannot be read."""

    stage = "package-index"


class SBOMGenerationError(SBOMError):
    """Raised when SBOM generation fails."""

    stage = "generate"
