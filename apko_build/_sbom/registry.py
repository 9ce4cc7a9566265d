"""Writer registry for SBOM output formats."""

from typing import Dict, List

from apko_build.exceptions import SBOMGenerationError
from apko_build.logging_config import logger

from .protocol import SBOMWriter


class WriterRegistry:
    """
    Registry mapping SBOM formats to writers.

    Example:
        registry = WriterRegistry()
        registry.register(CycloneDXWriter())
        writer = registry.get("cyclonedx")
    """

    def __init__(self) -> None:
        self._writers: Dict[str, SBOMWriter] = {}

    def register(self, writer: SBOMWriter) -> None:
        """Register a writer, replacing any writer for the same format."""
        self._writers[writer.format] = writer
        logger.debug(f"Registered SBOM writer for format: {writer.format}")

    def get(self, sbom_format: str) -> SBOMWriter:
        """
        Get the writer for a format.

        Raises:
            SBOMGenerationError: If no writer handles the format
        """
        writer = self._writers.get(sbom_format)
        if writer is None:
            raise SBOMGenerationError(
                f"Unsupported SBOM format: {sbom_format}. Available formats: {', '.join(self.formats())}"
            )
        return writer

    def formats(self) -> List[str]:
        return sorted(self._writers)
