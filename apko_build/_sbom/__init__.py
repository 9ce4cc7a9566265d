"""SBOM pipeline for finished build layers.

Usage:
    from apko_build._sbom import generate_sbom

    files = generate_sbom(BuildSBOMContext(
        work_dir="/tmp/work",
        tarball_path="/tmp/layer.tar.gz",
        arch="x86_64",
        sbom_formats=["spdx", "cyclonedx"],
        tags=["ghcr.io/org/app:1.0"],
        sbom_path="/tmp/sboms",
    ))
"""

from apko_build.serialization import CYCLONEDX_SPEC_VERSION, SPDX_SPEC_VERSION

from .apk_index import ApkInstalledDatabaseReader, ApkPackage, parse_package_index
from .generator import SBOMGenerator, create_default_registry
from .layer import Layer
from .os_release import parse_os_release, read_os_info
from .pipeline import generate_sbom
from .protocol import (
    SUPPORTED_FORMATS,
    GenerationOptions,
    ImageInfo,
    OSInfo,
    PackageIndexReader,
    SBOMFormat,
    SBOMGeneratorProtocol,
    SBOMWriter,
)
from .reference import ImageTag, parse_tag
from .registry import WriterRegistry

__all__ = [
    # Core types
    "SBOMFormat",
    "ImageInfo",
    "OSInfo",
    "GenerationOptions",
    "SBOMWriter",
    "PackageIndexReader",
    "SBOMGeneratorProtocol",
    # Constants
    "SUPPORTED_FORMATS",
    "CYCLONEDX_SPEC_VERSION",
    "SPDX_SPEC_VERSION",
    # Pipeline pieces
    "Layer",
    "ImageTag",
    "parse_tag",
    "ApkPackage",
    "ApkInstalledDatabaseReader",
    "parse_package_index",
    "parse_os_release",
    "read_os_info",
    # Generation
    "WriterRegistry",
    "SBOMGenerator",
    "create_default_registry",
    "generate_sbom",
]
