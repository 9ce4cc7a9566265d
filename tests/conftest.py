"""Pytest configuration and shared fixtures for all tests."""

import io
import tarfile
from pathlib import Path

import pytest

INSTALLED_DB = """\
P:busybox
V:1.36.1-r5
A:x86_64
S:509041
I:950272
T:Size optimized toolbox of many common UNIX utilities
U:https://busybox.net/
L:GPL-2.0-only
o:busybox
m:Sören Tempel <soeren+alpine@soeren-tempel.net>
C:Q1mRhuEaKkb9VsfcWnW2tGrN5iqTo=
F:bin
R:busybox
Z:Q1+Q3ZI4gsdHIzV9ZsSPhIEYKHYu0=

P:ca-certificates-bundle
V:20230506-r0
A:x86_64
S:125108
I:241664
T:Pre generated bundle of Mozilla certificates
U:https://www.mozilla.org/en-US/about/governance/policies/security-group/certs/
L:MPL-2.0 AND MIT
o:ca-certificates
C:Q1U7yGyrWzvLqvCDg7pEzbGmOzrUM=

P:musl
V:1.2.4-r2
A:x86_64
L:MIT
T:the musl c library (libc) implementation
U:https://musl.libc.org/
o:musl
"""

OS_RELEASE = """\
NAME="Alpine Linux"
ID=alpine
VERSION_ID=3.18.4
PRETTY_NAME="Alpine Linux v3.18"
HOME_URL="https://alpinelinux.org/"
"""


@pytest.fixture(autouse=True)
def pin_source_date_epoch(monkeypatch):
    """Pin document timestamps so generated SBOMs are reproducible in tests."""
    monkeypatch.setenv("SOURCE_DATE_EPOCH", "1700000000")


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """A build work directory with an installed-package database and os-release."""
    root = tmp_path / "work"
    db = root / "lib" / "apk" / "db"
    db.mkdir(parents=True)
    (db / "installed").write_text(INSTALLED_DB, encoding="utf-8")
    etc = root / "etc"
    etc.mkdir()
    (etc / "os-release").write_text(OS_RELEASE, encoding="utf-8")
    return root


def write_layer(path: Path, mode: str = "w:gz") -> Path:
    """Write a small tarball with a single file to ``path``."""
    data = b"hello from the layer\n"
    with tarfile.open(path, mode) as tar:
        info = tarfile.TarInfo("etc/motd")
        info.size = len(data)
        info.mtime = 0
        tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def layer_tarball(tmp_path: Path) -> Path:
    """A gzip-compressed layer tarball."""
    return write_layer(tmp_path / "layer.tar.gz")


@pytest.fixture
def make_layer(tmp_path: Path):
    """Factory for layer tarballs: ``make_layer("layer.tar", "w")``."""

    def _make(name: str, mode: str = "w:gz") -> Path:
        return write_layer(tmp_path / name, mode)

    return _make
