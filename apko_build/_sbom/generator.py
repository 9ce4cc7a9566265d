"""SBOM generator driving the registered format writers."""

import os
from typing import List, Optional

from apko_build.exceptions import SBOMGenerationError
from apko_build.logging_config import logger

from .protocol import GenerationOptions
from .registry import WriterRegistry
from .writers import CycloneDXWriter, SPDXWriter


def create_default_registry() -> WriterRegistry:
    """
    Create a WriterRegistry with the default writers.

    - cyclonedx: CycloneDX 1.6 JSON (cyclonedx-python-lib)
    - spdx: SPDX 2.3 JSON (spdx-tools)
    """
    registry = WriterRegistry()
    registry.register(CycloneDXWriter())
    registry.register(SPDXWriter())
    return registry


def _remove_files(paths: List[str]) -> None:
    for path in paths:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial SBOM {path}: {e}")


class SBOMGenerator:
    """
    Writes one SBOM document per requested format.

    Generation is all-or-nothing: if any writer fails, the documents written
    by this call are removed and SBOMGenerationError is raised.
    """

    def __init__(self, registry: Optional[WriterRegistry] = None) -> None:
        self._registry = registry or create_default_registry()

    @property
    def registry(self) -> WriterRegistry:
        return self._registry

    def generate(self, options: GenerationOptions) -> List[str]:
        """
        Generate SBOMs for every format in ``options.formats``.

        Returns:
            Paths of the written documents, in format order

        Raises:
            SBOMGenerationError: If a format is unknown or a writer fails
        """
        # Resolve every writer first so an unknown format writes nothing
        writers = [self._registry.get(sbom_format) for sbom_format in options.formats]

        try:
            os.makedirs(options.output_dir, exist_ok=True)
        except OSError as e:
            raise SBOMGenerationError(f"Cannot create SBOM output directory {options.output_dir}: {e}") from e

        written: List[str] = []
        for writer in writers:
            output_file = options.output_path(writer.extension)
            logger.info(
                f"Writing {writer.format} SBOM to {output_file}",
                extra={"stage": "generate", "sbom_format": writer.format},
            )
            try:
                writer.write(options, output_file)
            except Exception as e:
                _remove_files(written + [output_file])
                raise SBOMGenerationError(f"Failed to write {writer.format} SBOM: {e}") from e
            written.append(output_file)

        return written
