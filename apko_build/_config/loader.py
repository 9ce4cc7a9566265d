"""Reading image configuration documents from disk."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from apko_build.exceptions import ParseError, ReadError
from apko_build.logging_config import logger

from .models import ImageConfiguration

_KEPT_IMPLICIT_TAGS = ("tag:yaml.org,2002:null", "tag:yaml.org,2002:merge")


class ConfigurationLoader(yaml.SafeLoader):
    """SafeLoader that keeps plain scalars as their source text.

    Only null and merge keys are resolved implicitly, so ``version-id: 3.20``
    stays ``"3.20"`` and ``packages: [on]`` stays ``["on"]``. Integer fields
    are converted by the models.
    """


ConfigurationLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag in _KEPT_IMPLICIT_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse_image_configuration(data: Optional[Dict[str, Any]]) -> ImageConfiguration:
    """Build an ImageConfiguration from an already decoded document."""
    return ImageConfiguration.from_dict(data)


def read_image_configuration(path: Union[str, Path]) -> ImageConfiguration:
    """
    Read and parse the configuration document at ``path``.

    Args:
        path: Path to a YAML image configuration

    Returns:
        Parsed ImageConfiguration (not yet probed or validated)

    Raises:
        ReadError: If the file cannot be read
        ParseError: If the document is not valid UTF-8 YAML or does not match the schema
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise ReadError(f"failed to read image configuration file {path}: {e}") from e

    try:
        data = yaml.load(raw.decode("utf-8"), Loader=ConfigurationLoader)
    except (UnicodeDecodeError, yaml.YAMLError) as e:
        raise ParseError(f"failed to parse image configuration {path}: {e}") from e

    try:
        config = parse_image_configuration(data)
    except ParseError as e:
        raise ParseError(f"failed to parse image configuration {path}: {e}") from e

    logger.debug(f"Loaded image configuration from {path}")
    return config
