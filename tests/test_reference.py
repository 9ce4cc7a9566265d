"""Tests for registry tag parsing."""

import pytest

from apko_build._sbom.reference import parse_tag
from apko_build.exceptions import TagParseError


class TestParseTag:
    def test_docker_hub_short_name(self):
        tag = parse_tag("alpine")
        assert tag.registry == "index.docker.io"
        assert tag.repository == "library/alpine"
        assert tag.tag == "latest"
        assert tag.name == "index.docker.io/library/alpine:latest"
        assert tag.original == "alpine"

    def test_docker_io_alias(self):
        assert parse_tag("docker.io/library/alpine:3.18").name == "index.docker.io/library/alpine:3.18"

    def test_docker_hub_user_repository(self):
        assert parse_tag("chainguard/static:latest").repository == "chainguard/static"

    def test_registry_with_path(self):
        tag = parse_tag("ghcr.io/org/team/app:v1.2.3")
        assert tag.registry == "ghcr.io"
        assert tag.repository == "org/team/app"
        assert tag.tag == "v1.2.3"
        assert str(tag) == "ghcr.io/org/team/app:v1.2.3"

    def test_registry_with_port_and_no_tag(self):
        tag = parse_tag("localhost:5000/app")
        assert tag.registry == "localhost:5000"
        assert tag.tag == "latest"

    def test_localhost_registry(self):
        assert parse_tag("localhost/app:dev").registry == "localhost"

    @pytest.mark.parametrize(
        "reference",
        [
            "",
            "Invalid Tag!!",
            "UPPER/case:1",
            "app:",
            "app:-leading-dash",
            "ghcr.io/org/app@sha256:" + "a" * 64,
            " alpine",
            "ghcr.io/:tag",
        ],
    )
    def test_invalid_references(self, reference):
        with pytest.raises(TagParseError):
            parse_tag(reference)

    def test_error_names_the_stage(self):
        with pytest.raises(TagParseError) as exc_info:
            parse_tag("not a tag")
        assert exc_info.value.stage == "tag"
