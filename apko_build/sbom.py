"""
SBOM Module

Public API for the SBOM step of a build.

Usage:
    from apko_build.context import load_context_from_env
    from apko_build.sbom import generate_sbom

    generate_sbom(load_context_from_env())
"""

from ._sbom import (
    ApkInstalledDatabaseReader,
    ApkPackage,
    GenerationOptions,
    ImageInfo,
    ImageTag,
    Layer,
    OSInfo,
    SBOMFormat,
    SBOMGenerator,
    WriterRegistry,
    create_default_registry,
    generate_sbom,
    parse_tag,
)
from .context import BuildSBOMContext, load_context_from_env

__all__ = [
    # Core API
    "generate_sbom",
    "BuildSBOMContext",
    "load_context_from_env",
    # Types
    "SBOMFormat",
    "ImageInfo",
    "OSInfo",
    "GenerationOptions",
    "ApkPackage",
    "ImageTag",
    "Layer",
    # Advanced usage
    "SBOMGenerator",
    "WriterRegistry",
    "ApkInstalledDatabaseReader",
    "create_default_registry",
    "parse_tag",
]
