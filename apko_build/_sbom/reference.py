"""Parsing of registry tag references (``registry/repository:tag``).

Follows the usual Docker defaults: images without a registry live on
``index.docker.io``, single-component Docker Hub repositories get the
``library/`` prefix, and a missing tag means ``latest``.
"""

import re
from dataclasses import dataclass

from apko_build.exceptions import TagParseError

DEFAULT_REGISTRY = "index.docker.io"
DEFAULT_TAG = "latest"

_TAG_RE = re.compile(r"^\w[\w.-]{0,127}$")
_REPO_COMPONENT = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_REPO_RE = re.compile(rf"^{_REPO_COMPONENT}(?:/{_REPO_COMPONENT})*$")
_HOST_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_REGISTRY_RE = re.compile(rf"^(?:{_HOST_COMPONENT}(?:\.{_HOST_COMPONENT})*|\[[0-9a-fA-F:]+\])(?::[0-9]+)?$")


@dataclass(frozen=True)
class ImageTag:
    """A parsed tag reference."""

    registry: str
    repository: str
    tag: str
    original: str

    @property
    def name(self) -> str:
        """Fully qualified reference, e.g. ``index.docker.io/library/alpine:3.18``."""
        return f"{self.registry}/{self.repository}:{self.tag}"

    def __str__(self) -> str:
        return self.name


def _looks_like_registry(component: str) -> bool:
    return "." in component or ":" in component or component == "localhost"


def parse_tag(reference: str) -> ImageTag:
    """
    Parse a tag reference.

    Args:
        reference: Reference such as ``alpine``, ``ghcr.io/org/app:1.0`` or ``localhost:5000/app``

    Returns:
        ImageTag with defaults applied

    Raises:
        TagParseError: If the reference is not a valid tag
    """
    if not reference or reference != reference.strip():
        raise TagParseError(f"parsing tag {reference!r}: invalid reference")
    if "@" in reference:
        raise TagParseError(f"parsing tag {reference!r}: digest references are not tags")

    name, tag = reference, DEFAULT_TAG
    colon = reference.rfind(":")
    if colon > reference.rfind("/"):
        name, tag = reference[:colon], reference[colon + 1 :]

    if not _TAG_RE.match(tag):
        raise TagParseError(f"parsing tag {reference!r}: invalid tag {tag!r}")

    first, sep, rest = name.partition("/")
    if sep and _looks_like_registry(first):
        registry, repository = first, rest
    else:
        registry, repository = DEFAULT_REGISTRY, name

    if registry == "docker.io":
        registry = DEFAULT_REGISTRY

    if not _REGISTRY_RE.match(registry):
        raise TagParseError(f"parsing tag {reference!r}: invalid registry {registry!r}")

    if registry == DEFAULT_REGISTRY and "/" not in repository:
        repository = f"library/{repository}"

    if len(repository) > 255 or not _REPO_RE.match(repository):
        raise TagParseError(f"parsing tag {reference!r}: invalid repository {repository!r}")

    return ImageTag(registry=registry, repository=repository, tag=tag, original=reference)
