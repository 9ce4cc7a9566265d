"""Tests for the SBOM writers and generator."""

import json
import os
import unittest
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from apko_build._sbom.apk_index import ApkPackage
from apko_build._sbom.generator import SBOMGenerator, create_default_registry
from apko_build._sbom.protocol import GenerationOptions, ImageInfo, OSInfo
from apko_build._sbom.registry import WriterRegistry
from apko_build._sbom.utils import normalize_license, package_purl
from apko_build._sbom.writers import CycloneDXWriter, SPDXWriter
from apko_build.exceptions import SBOMGenerationError

DIGEST = "sha256:" + "ab" * 32

PACKAGES = [
    ApkPackage(name="busybox", version="1.36.1-r5", arch="x86_64", license="GPL-2.0-only", url="https://busybox.net/"),
    ApkPackage(name="ca-certificates-bundle", version="20230506-r0", arch="x86_64", license="MPL-2.0 AND MIT"),
    ApkPackage(name="weird", version="1.0-r0", arch="x86_64", license="Some-Custom-License"),
]


def _options(output_dir: str, formats=("cyclonedx", "spdx")) -> GenerationOptions:
    return GenerationOptions(
        image_info=ImageInfo(
            tag="1.0", name="ghcr.io/example/app:1.0", arch="x86_64", digest=DIGEST
        ),
        output_dir=output_dir,
        packages=list(PACKAGES),
        formats=list(formats),
        os_info=OSInfo(id="alpine", name="Alpine Linux", version="3.18.4"),
    )


class TestHelpers(unittest.TestCase):
    def test_package_purl(self):
        purl = package_purl(PACKAGES[0], OSInfo(id="wolfi"))
        self.assertEqual(purl.to_string(), "pkg:apk/wolfi/busybox@1.36.1-r5?arch=x86_64")

    def test_package_purl_default_namespace_and_distro(self):
        purl = package_purl(PACKAGES[0], OSInfo(version="3.18.4"))
        self.assertEqual(purl.namespace, "alpine")
        self.assertEqual(purl.qualifiers["distro"], "alpine-3.18.4")

    def test_normalize_license(self):
        self.assertEqual(normalize_license("MIT"), "MIT")
        self.assertIsNone(normalize_license(""))
        self.assertIsNone(normalize_license("Some-Custom-License"))


class TestCycloneDXWriter:
    def test_document(self, tmp_path):
        output = tmp_path / "sbom.cdx.json"
        CycloneDXWriter().write(_options(str(tmp_path)), str(output))

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["bomFormat"] == "CycloneDX"
        assert data["specVersion"] == "1.6"
        assert data["metadata"]["component"]["name"] == "ghcr.io/example/app:1.0"
        assert data["metadata"]["component"]["type"] == "container"

        names = {c["name"] for c in data["components"]}
        assert {"busybox", "ca-certificates-bundle", "weird", "alpine"} <= names

        busybox = next(c for c in data["components"] if c["name"] == "busybox")
        assert busybox["purl"].startswith("pkg:apk/alpine/busybox@1.36.1-r5")
        assert busybox["licenses"][0]["expression"] == "GPL-2.0-only"

        weird = next(c for c in data["components"] if c["name"] == "weird")
        assert weird["licenses"][0]["license"]["name"] == "Some-Custom-License"


class TestSPDXWriter:
    def test_document(self, tmp_path):
        output = tmp_path / "sbom.spdx.json"
        SPDXWriter().write(_options(str(tmp_path)), str(output))

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["spdxVersion"] == "SPDX-2.3"
        assert data["documentNamespace"].endswith("sha256-" + "ab" * 32)

        by_name = {p["name"]: p for p in data["packages"]}
        assert set(by_name) == {"ghcr.io/example/app:1.0", "busybox", "ca-certificates-bundle", "weird"}
        assert by_name["busybox"]["licenseDeclared"] == "GPL-2.0-only"
        assert by_name["weird"]["licenseDeclared"] == "NOASSERTION"
        refs = by_name["busybox"]["externalRefs"]
        assert refs[0]["referenceType"] == "purl"

        contains = [r for r in data["relationships"] if r["relationshipType"] == "CONTAINS"]
        assert len(contains) == len(PACKAGES)

    def test_duplicate_packages_get_unique_ids(self, tmp_path):
        options = _options(str(tmp_path))
        options.packages = [PACKAGES[0], PACKAGES[0]]
        document = SPDXWriter().build_document(options)
        ids = [p.spdx_id for p in document.packages]
        assert len(ids) == len(set(ids))


class TestSBOMGenerator:
    def test_writes_each_format(self, tmp_path):
        out_dir = tmp_path / "sboms"
        files = SBOMGenerator().generate(_options(str(out_dir)))

        assert files == [str(out_dir / "sbom-x86_64.cdx.json"), str(out_dir / "sbom-x86_64.spdx.json")]
        for path in files:
            assert Path(path).exists()

    def test_unknown_format_writes_nothing(self, tmp_path):
        with pytest.raises(SBOMGenerationError, match="Unsupported SBOM format"):
            SBOMGenerator().generate(_options(str(tmp_path), formats=("cyclonedx", "idb")))
        assert os.listdir(tmp_path) == []

    def test_failure_removes_partial_output(self, tmp_path):
        broken = MagicMock()
        broken.format = "spdx"
        broken.extension = "spdx.json"
        broken.write.side_effect = RuntimeError("disk full")

        registry = create_default_registry()
        registry.register(broken)

        with pytest.raises(SBOMGenerationError, match="disk full"):
            SBOMGenerator(registry).generate(_options(str(tmp_path)))

        assert not (tmp_path / "sbom-x86_64.cdx.json").exists()
        assert not (tmp_path / "sbom-x86_64.spdx.json").exists()

    def test_registry_formats(self):
        assert create_default_registry().formats() == ["cyclonedx", "spdx"]

    def test_empty_registry(self):
        registry = WriterRegistry()
        with pytest.raises(SBOMGenerationError):
            registry.get("spdx")
