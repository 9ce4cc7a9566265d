"""Types and protocols for the SBOM pipeline.

Format names are defined here. Format versions live in apko_build.serialization.
"""

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Literal, Protocol

if TYPE_CHECKING:
    from .apk_index import ApkPackage

# =============================================================================
# SBOM Format Constants
# =============================================================================

SBOMFormat = Literal["cyclonedx", "spdx"]

SUPPORTED_FORMATS = ("cyclonedx", "spdx")

TOOL_NAME = "apko-build"


@dataclass
class ImageInfo:
    """Identity of the image the SBOM describes."""

    tag: str = ""
    name: str = ""
    arch: str = ""
    digest: str = ""


@dataclass
class OSInfo:
    """Distribution identity read from the image's os-release."""

    id: str = ""
    name: str = ""
    version: str = ""


@dataclass
class GenerationOptions:
    """
    Input parameters for SBOM generation.

    Attributes:
        image_info: Tag, name, architecture and layer digest of the image
        output_dir: Directory the SBOM documents are written to
        packages: Installed packages to list
        formats: Requested SBOM formats
        os_info: Distribution identity, used for package URLs
    """

    image_info: ImageInfo = field(default_factory=ImageInfo)
    output_dir: str = "."
    packages: List["ApkPackage"] = field(default_factory=list)
    formats: List[str] = field(default_factory=list)
    os_info: OSInfo = field(default_factory=OSInfo)

    @property
    def file_stem(self) -> str:
        """Base file name shared by all documents of this run."""
        if self.image_info.arch:
            return f"sbom-{self.image_info.arch}"
        return "sbom"

    def output_path(self, extension: str) -> str:
        return os.path.join(self.output_dir, f"{self.file_stem}.{extension}")


class SBOMWriter(Protocol):
    """
    Protocol for SBOM document writers.

    A writer maps package metadata onto one SBOM format and writes the
    document to disk.
    """

    @property
    def format(self) -> str:
        """Format name this writer handles ("cyclonedx", "spdx")."""
        ...

    @property
    def extension(self) -> str:
        """File extension for documents of this format, without leading dot."""
        ...

    def write(self, options: GenerationOptions, output_file: str) -> None:
        """
        Write the SBOM document.

        Raises:
            Exception: Any failure; the generator treats it as a failed run
        """
        ...


class PackageIndexReader(Protocol):
    """Protocol for readers of the installed-package index."""

    def read(self, work_dir: str) -> List["ApkPackage"]:
        """Return the packages installed below ``work_dir``."""
        ...


class SBOMGeneratorProtocol(Protocol):
    """Protocol for SBOM generators driven by the orchestrator."""

    def generate(self, options: GenerationOptions) -> List[str]:
        """Write all requested documents and return their paths."""
        ...
