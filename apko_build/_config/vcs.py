"""Best-effort detection of the source repository URL for a configuration.

Probing is an optional enrichment: every failure is logged and the
configuration is returned unchanged.
"""

import dataclasses
import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlsplit, urlunsplit

from apko_build.logging_config import logger

from .models import ImageConfiguration

GIT_TIMEOUT = 30


def _parse_url(url: str) -> str:
    """
    Parse ``url`` and return its normalized string form.

    scp-like git remotes (``user@host:path``) have no scheme and a colon in
    the first path segment, which is not a valid URL.

    Raises:
        ValueError: If the URL cannot be parsed
    """
    parsed = urlsplit(url)
    if not parsed.scheme:
        first_segment = parsed.path.split("/", 1)[0]
        if ":" in first_segment:
            raise ValueError(f"first path segment in URL cannot contain colon: {url!r}")
    return urlunsplit(parsed)


def normalize_vcs_url(remote_url: str) -> Optional[str]:
    """
    Normalize a git remote URL.

    ``git@github.com:org/repo.git`` becomes ``git+ssh://git@github.com/org/repo.git``;
    URLs that already parse are returned as-is.

    Returns:
        Normalized URL, or None if it cannot be parsed even after rewriting
    """
    try:
        return _parse_url(remote_url)
    except ValueError:
        pass

    # Take the user@host:repo and turn it into user@host/repo.
    rewritten = "git+ssh://" + remote_url.replace(":", "/", 1)
    try:
        return _parse_url(rewritten)
    except ValueError as e:
        logger.info(f"unable to parse {rewritten} as a git vcs url: {e}")
        return None


def _git(repo_dir: str, *args: str) -> subprocess.CompletedProcess:
    git = shutil.which("git")
    if git is None:
        raise FileNotFoundError("git executable not found")
    return subprocess.run(
        [git, "-C", repo_dir, *args],
        capture_output=True,
        text=True,
        timeout=GIT_TIMEOUT,
        check=False,
    )


def read_origin_url(repo_dir: str) -> Optional[str]:
    """
    Return the first URL of the ``origin`` remote of the repository rooted at ``repo_dir``.

    The directory itself must hold the repository; parent directories are not searched.
    """
    if not (Path(repo_dir) / ".git").exists():
        logger.info(f"unable to determine git vcs url: no repository at {repo_dir}")
        return None

    try:
        result = _git(repo_dir, "config", "--local", "--get-all", "remote.origin.url")
    except (OSError, subprocess.SubprocessError) as e:
        logger.info(f"unable to determine git vcs url: {e}")
        return None

    urls = result.stdout.splitlines() if result.returncode == 0 else []
    if not urls:
        logger.info(f"unable to determine git vcs url: remote 'origin' not found in {repo_dir}")
        return None
    return urls[0].strip()


def probe_vcs_url(config: ImageConfiguration, config_path: Union[str, Path]) -> ImageConfiguration:
    """
    Return ``config`` with ``vcs_url`` derived from the repository holding ``config_path``.

    Never raises; when no URL can be determined the configuration is returned unchanged.
    """
    parent_dir = os.path.dirname(str(config_path)) or "."
    if not os.path.isdir(parent_dir):
        logger.info(f"unable to determine git vcs url: {parent_dir} is not a directory")
        return config

    remote_url = read_origin_url(parent_dir)
    if not remote_url:
        return config

    vcs_url = normalize_vcs_url(remote_url)
    if not vcs_url:
        return config

    logger.info(f"detected {vcs_url} as VCS URL")
    return dataclasses.replace(config, vcs_url=vcs_url)
