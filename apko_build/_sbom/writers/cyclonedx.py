"""CycloneDX JSON writer."""

from cyclonedx.model import Property
from cyclonedx.model.bom import Bom
from cyclonedx.model.component import Component, ComponentType
from cyclonedx.model.license import DisjunctiveLicense, LicenseExpression

from apko_build.logging_config import logger
from apko_build.serialization import serialize_cyclonedx_bom

from ..apk_index import ApkPackage
from ..protocol import GenerationOptions, OSInfo
from ..utils import creation_time, normalize_license, package_purl

PROPERTY_ARCH = "apko:arch"
PROPERTY_ORIGIN = "apko:origin"
PROPERTY_TAG = "apko:tag"


def _package_component(pkg: ApkPackage, os_info: OSInfo) -> Component:
    purl = package_purl(pkg, os_info)

    licenses = []
    expression = normalize_license(pkg.license)
    if expression:
        licenses.append(LicenseExpression(expression))
    elif pkg.license:
        licenses.append(DisjunctiveLicense(name=pkg.license))

    component = Component(
        name=pkg.name,
        version=pkg.version,
        type=ComponentType.LIBRARY,
        purl=purl,
        bom_ref=purl.to_string(),
        description=pkg.description or None,
        licenses=licenses,
    )
    if pkg.origin and pkg.origin != pkg.name:
        component.properties.add(Property(name=PROPERTY_ORIGIN, value=pkg.origin))
    return component


def _image_component(options: GenerationOptions) -> Component:
    info = options.image_info
    component = Component(
        name=info.name or "image",
        version=info.digest or None,
        type=ComponentType.CONTAINER,
        bom_ref=f"image:{info.digest or info.name or 'image'}",
    )
    if info.arch:
        component.properties.add(Property(name=PROPERTY_ARCH, value=info.arch))
    if info.tag:
        component.properties.add(Property(name=PROPERTY_TAG, value=info.tag))
    return component


class CycloneDXWriter:
    """Writes CycloneDX 1.6 JSON with the image as metadata component."""

    @property
    def format(self) -> str:
        return "cyclonedx"

    @property
    def extension(self) -> str:
        return "cdx.json"

    def build_bom(self, options: GenerationOptions) -> Bom:
        """Build the BOM: image component, optional OS component, one component per package."""
        bom = Bom()
        bom.metadata.timestamp = creation_time()

        image = _image_component(options)
        bom.metadata.component = image

        children = []
        os_info = options.os_info
        if os_info.id:
            os_component = Component(
                name=os_info.id,
                version=os_info.version or None,
                type=ComponentType.OPERATING_SYSTEM,
                bom_ref=f"os:{os_info.id}@{os_info.version}",
                description=os_info.name or None,
            )
            bom.components.add(os_component)
            children.append(os_component)

        for pkg in options.packages:
            component = _package_component(pkg, os_info)
            bom.components.add(component)
            children.append(component)

        bom.register_dependency(image, children)
        logger.debug(f"Built CycloneDX BOM with {len(children)} components")
        return bom

    def write(self, options: GenerationOptions, output_file: str) -> None:
        serialized = serialize_cyclonedx_bom(self.build_bom(options))
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(serialized)
