"""Built-in SBOM writers."""

from .cyclonedx import CycloneDXWriter
from .spdx import SPDXWriter

__all__ = ["CycloneDXWriter", "SPDXWriter"]
