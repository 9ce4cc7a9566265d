"""Build context handed to the SBOM pipeline.

The context can be built directly or from environment variables:

    APKO_WORK_DIR      build work directory holding the image filesystem
    APKO_TARBALL       path of the finished layer tarball
    APKO_SBOM_PATH     directory for SBOM documents (default: current directory)
    APKO_ARCH          target architecture (e.g. x86_64)
    APKO_SBOM_FORMATS  comma or newline separated formats (e.g. "spdx,cyclonedx")
    APKO_TAGS          comma or newline separated registry tags
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import ConfigurationError
from .logging_config import logger

ENV_WORK_DIR = "APKO_WORK_DIR"
ENV_TARBALL = "APKO_TARBALL"
ENV_SBOM_PATH = "APKO_SBOM_PATH"
ENV_ARCH = "APKO_ARCH"
ENV_SBOM_FORMATS = "APKO_SBOM_FORMATS"
ENV_TAGS = "APKO_TAGS"


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma or newline separated value, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in re.split(r"[,\n]", value) if item.strip()]


@dataclass
class BuildSBOMContext:
    """
    The parts of a build session the SBOM pipeline reads.

    Attributes:
        work_dir: Build work directory (image filesystem root)
        sbom_formats: Requested SBOM formats; empty disables SBOM generation
        tarball_path: Path of the finished layer tarball
        tags: Registry tags; only the first one names the image
        arch: Target architecture
        sbom_path: Output directory for SBOM documents
    """

    work_dir: str
    tarball_path: str
    arch: str = ""
    sbom_formats: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    sbom_path: str = "."

    def validate(self) -> None:
        """
        Validate the context.

        Raises:
            ConfigurationError: If required values are missing
        """
        if not self.work_dir:
            raise ConfigurationError("Work directory is not defined")
        if self.sbom_formats and not self.tarball_path:
            raise ConfigurationError("SBOM generation requested but no layer tarball is defined")
        if self.sbom_formats and not self.sbom_path:
            raise ConfigurationError("SBOM generation requested but no SBOM output directory is defined")


def load_context_from_env() -> BuildSBOMContext:
    """
    Build and validate a BuildSBOMContext from environment variables.

    Raises:
        ConfigurationError: If the resulting context is invalid
    """
    context = BuildSBOMContext(
        work_dir=os.getenv(ENV_WORK_DIR, ""),
        tarball_path=os.getenv(ENV_TARBALL, ""),
        arch=os.getenv(ENV_ARCH, ""),
        sbom_formats=[f.lower() for f in split_list(os.getenv(ENV_SBOM_FORMATS))],
        tags=split_list(os.getenv(ENV_TAGS)),
        sbom_path=os.getenv(ENV_SBOM_PATH, "."),
    )
    context.validate()
    logger.debug(f"Loaded build context: work_dir={context.work_dir}, formats={context.sbom_formats}")
    return context
