"""SPDX 2.3 JSON writer."""

import re
from typing import List, Set

from license_expression import get_spdx_licensing
from spdx_tools.spdx.model import (
    Actor,
    ActorType,
    Checksum,
    ChecksumAlgorithm,
    CreationInfo,
    Document,
    ExternalPackageRef,
    ExternalPackageRefCategory,
    Package,
    PackagePurpose,
    Relationship,
    RelationshipType,
    SpdxNoAssertion,
)

from apko_build.logging_config import logger
from apko_build.serialization import SPDX_SPEC_VERSION, write_spdx_document

from ..apk_index import ApkPackage
from ..protocol import TOOL_NAME, GenerationOptions
from ..utils import creation_time, normalize_license, package_purl

_spdx_licensing = get_spdx_licensing()

DOCUMENT_ID = "SPDXRef-DOCUMENT"
IMAGE_ID = "SPDXRef-Image"
NAMESPACE_BASE = "https://spdx.org/spdxdocs/apko-build"

# SPDX external reference type for PURLs
PURL_REFERENCE_TYPE = "purl"


def _spdx_id(name: str, version: str, existing: Set[str]) -> str:
    """Unique SPDX ID for a package (letters, numbers, ``.`` and ``-`` only)."""
    sanitized = re.sub(r"[^a-zA-Z0-9.\-]", "-", f"{name}-{version}" if version else name)
    base_id = f"SPDXRef-Package-{sanitized}"
    spdx_id = base_id
    counter = 1
    while spdx_id in existing:
        spdx_id = f"{base_id}-{counter}"
        counter += 1
    existing.add(spdx_id)
    return spdx_id


def _license(raw: str):
    expression = normalize_license(raw)
    if expression:
        return _spdx_licensing.parse(expression)
    return SpdxNoAssertion()


class SPDXWriter:
    """Writes SPDX 2.3 JSON describing the image and its installed packages."""

    @property
    def format(self) -> str:
        return "spdx"

    @property
    def extension(self) -> str:
        return "spdx.json"

    def _image_package(self, options: GenerationOptions) -> Package:
        info = options.image_info
        checksums: List[Checksum] = []
        if info.digest.startswith("sha256:"):
            checksums.append(Checksum(ChecksumAlgorithm.SHA256, info.digest.split(":", 1)[1]))
        return Package(
            spdx_id=IMAGE_ID,
            name=info.name or "image",
            download_location=SpdxNoAssertion(),
            version=info.digest or None,
            files_analyzed=False,
            checksums=checksums,
            license_concluded=SpdxNoAssertion(),
            license_declared=SpdxNoAssertion(),
            copyright_text=SpdxNoAssertion(),
            primary_package_purpose=PackagePurpose.CONTAINER,
            comment=f"Architecture: {info.arch}" if info.arch else None,
        )

    def _apk_package(self, pkg: ApkPackage, options: GenerationOptions, existing_ids: Set[str]) -> Package:
        purl = package_purl(pkg, options.os_info)
        license_value = _license(pkg.license)
        return Package(
            spdx_id=_spdx_id(pkg.name, pkg.version, existing_ids),
            name=pkg.name,
            download_location=SpdxNoAssertion(),
            version=pkg.version or None,
            files_analyzed=False,
            homepage=pkg.url or None,
            license_concluded=license_value,
            license_declared=license_value,
            copyright_text=SpdxNoAssertion(),
            description=pkg.description or None,
            primary_package_purpose=PackagePurpose.LIBRARY,
            external_references=[
                ExternalPackageRef(
                    category=ExternalPackageRefCategory.PACKAGE_MANAGER,
                    reference_type=PURL_REFERENCE_TYPE,
                    locator=purl.to_string(),
                )
            ],
        )

    def build_document(self, options: GenerationOptions) -> Document:
        """Build the SPDX document: the image package CONTAINS every installed package."""
        digest = options.image_info.digest
        namespace_suffix = digest.replace(":", "-") if digest else options.file_stem
        creation_info = CreationInfo(
            spdx_version=f"SPDX-{SPDX_SPEC_VERSION}",
            spdx_id=DOCUMENT_ID,
            name=options.image_info.name or "apko-image",
            document_namespace=f"{NAMESPACE_BASE}/{namespace_suffix}",
            creators=[Actor(ActorType.TOOL, TOOL_NAME)],
            created=creation_time().replace(tzinfo=None),
        )

        image = self._image_package(options)
        packages = [image]
        relationships = [Relationship(DOCUMENT_ID, RelationshipType.DESCRIBES, IMAGE_ID)]

        existing_ids = {IMAGE_ID}
        for pkg in options.packages:
            package = self._apk_package(pkg, options, existing_ids)
            packages.append(package)
            relationships.append(Relationship(IMAGE_ID, RelationshipType.CONTAINS, package.spdx_id))

        logger.debug(f"Built SPDX document with {len(packages)} packages")
        return Document(creation_info=creation_info, packages=packages, relationships=relationships)

    def write(self, options: GenerationOptions, output_file: str) -> None:
        write_spdx_document(self.build_document(options), output_file)
