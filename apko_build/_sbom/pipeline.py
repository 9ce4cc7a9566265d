"""SBOM step of a build: layer digest, image identity, packages, documents.

Every stage is fail-fast and non-retrying. Failures surface as the
stage-specific SBOMError subclass so the caller knows which step broke.
"""

from typing import List, Optional

from rich.table import Table

from apko_build.console import console
from apko_build.context import BuildSBOMContext
from apko_build.exceptions import SBOMError, SBOMGenerationError
from apko_build.logging_config import logger

from .apk_index import ApkInstalledDatabaseReader
from .generator import SBOMGenerator
from .layer import Layer
from .os_release import read_os_info
from .protocol import GenerationOptions, ImageInfo, PackageIndexReader, SBOMGeneratorProtocol
from .reference import parse_tag


def _print_summary(options: GenerationOptions, files: List[str]) -> None:
    """Print a Rich summary table of the generated documents."""
    table = Table(title="SBOM Summary", show_header=False)
    table.add_column("Item", style="bold")
    table.add_column("Value")

    if options.image_info.name:
        table.add_row("Image", options.image_info.name)
    table.add_row("Digest", options.image_info.digest, style="highlight")
    table.add_row("Architecture", options.image_info.arch or "-")
    table.add_row("Packages", str(len(options.packages)))
    for path in files:
        table.add_row("Written", path, style="success")

    console.print(table)


def generate_sbom(
    context: BuildSBOMContext,
    package_reader: Optional[PackageIndexReader] = None,
    generator: Optional[SBOMGeneratorProtocol] = None,
) -> List[str]:
    """
    Generate SBOM documents for a finished build.

    Args:
        context: Build context (work dir, tarball, tags, arch, formats, output dir)
        package_reader: Installed-package index reader (default: apk installed database)
        generator: SBOM generator (default: SBOMGenerator with the built-in writers)

    Returns:
        Paths of the written SBOM documents; empty when no formats are requested

    Raises:
        LayerReadError: If the tarball cannot be opened as a layer
        DigestError: If the layer digest cannot be computed
        TagParseError: If the first tag is not a valid reference
        PackageIndexError: If the installed-package index cannot be read
        SBOMGenerationError: If writing the documents fails
    """
    if not context.sbom_formats:
        logger.info("skipping SBOM generation")
        return []

    logger.info("generating SBOM")

    try:
        options = _collect_options(context, package_reader)
        files = _write_documents(options, generator)
    except SBOMError as e:
        logger.error(f"SBOM generation failed at stage {e.stage}: {e}", extra={"stage": e.stage})
        raise

    _print_summary(options, files)
    logger.info(f"Generated {len(files)} SBOM document(s) for {options.image_info.digest}")
    return files


def _collect_options(context: BuildSBOMContext, package_reader: Optional[PackageIndexReader]) -> GenerationOptions:
    layer = Layer.from_file(context.tarball_path)
    logger.debug(f"Opened {layer.compression} layer {layer.path}", extra={"stage": "layer"})

    digest = layer.digest()
    logger.debug(f"Layer digest is {digest}", extra={"stage": "digest"})

    image_info = ImageInfo(arch=context.arch, digest=digest)
    if context.tags:
        tag = parse_tag(context.tags[0])
        image_info.tag = tag.tag
        image_info.name = tag.name
        logger.debug(f"Image name is {tag.name}", extra={"stage": "tag"})

    # Packages are read externally so the reader can live elsewhere
    reader = package_reader or ApkInstalledDatabaseReader()
    packages = reader.read(context.work_dir)
    logger.debug(f"Read {len(packages)} installed packages", extra={"stage": "package-index"})

    return GenerationOptions(
        image_info=image_info,
        output_dir=context.sbom_path,
        packages=packages,
        formats=list(context.sbom_formats),
        os_info=read_os_info(context.work_dir),
    )


def _write_documents(options: GenerationOptions, generator: Optional[SBOMGeneratorProtocol]) -> List[str]:
    sbom_generator = generator or SBOMGenerator()
    try:
        return sbom_generator.generate(options)
    except SBOMGenerationError:
        raise
    except Exception as e:
        raise SBOMGenerationError(f"generating SBOMs: {e}") from e
