"""
SBOM serialization utilities.

Centralizes how CycloneDX BOMs and SPDX documents are turned into JSON so
writers do not pick outputters themselves. The emitted format versions are
defined here.
"""

import json

from cyclonedx.model.bom import Bom
from cyclonedx.output.json import JsonV1Dot6
from spdx_tools.spdx.model import Document
from spdx_tools.spdx.writer.write_anything import write_file as spdx_write_file

from .logging_config import logger

CYCLONEDX_SPEC_VERSION = "1.6"
SPDX_SPEC_VERSION = "2.3"


def serialize_cyclonedx_bom(bom: Bom) -> str:
    """
    Serialize a CycloneDX BOM to a CycloneDX 1.6 JSON string.

    Args:
        bom: The CycloneDX BOM object to serialize

    Returns:
        JSON string representation of the BOM
    """
    logger.debug(f"Serializing CycloneDX BOM using version {CYCLONEDX_SPEC_VERSION}")
    return JsonV1Dot6(bom).output_as_string(indent=2)


def write_spdx_document(document: Document, output_file: str) -> None:
    """
    Write an SPDX 2.3 document as JSON.

    The file is re-read to make sure the writer produced parseable JSON.

    Raises:
        ValueError: If the document is not SPDX 2.3 or the output is not JSON
    """
    spdx_version = document.creation_info.spdx_version
    if spdx_version != f"SPDX-{SPDX_SPEC_VERSION}":
        raise ValueError(f"Unsupported SPDX version: {spdx_version}. Expected SPDX-{SPDX_SPEC_VERSION}")

    spdx_write_file(document, output_file, validate=False)

    with open(output_file, "r", encoding="utf-8") as f:
        try:
            json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"SPDX writer produced invalid JSON: {e}") from e
